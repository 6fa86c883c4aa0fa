# engine/wealth.py
#
# Closed-form terminal wealth per R$1 contributed, for the taxable comparison
# (path A) and the wrapper (path B). Each function treats `year` as the
# redemption date, so the simulator evaluates them independently per year.
#

import math
from typing import Tuple


def wealth_a(year: int, return_rate: float, gains_tax: float) -> float:
    """
    Taxable (non-wrapper) terminal wealth per R$1 invested.

        A(N, Y, Z) = (1+Y)^N - Z * ((1+Y)^N - 1)

    R$1 grows at Y per year for N years; at the end capital gains tax Z is
    paid on the gains only.
    """
    growth = (1 + return_rate) ** year
    return growth - gains_tax * (growth - 1)


def wealth_b_components(
    year: int,
    fund_return: float,
    refund_return: float,
    exit_rate: float,
    entry_rate: float,
    gains_tax: float,
    refund_delay: int,
    is_vgbl: bool,
) -> Tuple[float, float]:
    """
    Wrapper terminal wealth per R$1 contributed, split into its two legs.

    Returns:
        tuple[float, float]: (fund_component, refund_component)

    Fund leg: (1+fund_return)^N grown balance taxed at exit. PGBL pays
    exit_rate on the whole balance, VGBL only on the gains.

    Refund leg: the tax refund (entry_rate per R$1) arrives at integer year D
    and is reinvested outside the fund at refund_return, the fee-free base
    return. Before D it is 0, at D it is exactly entry_rate, after D it grows
    for N - D years and pays gains_tax on its gains.
    """
    balance = (1 + fund_return) ** year
    if is_vgbl:
        fund = balance - exit_rate * (balance - 1)
    else:
        fund = balance * (1 - exit_rate)

    if year < refund_delay:
        refund = 0.0
    elif year == refund_delay:
        refund = entry_rate
    else:
        refund_growth = (1 + refund_return) ** (year - refund_delay)
        refund = entry_rate * (refund_growth - gains_tax * (refund_growth - 1))

    return fund, refund


def wealth_b(
    year: int,
    fund_return: float,
    refund_return: float,
    exit_rate: float,
    entry_rate: float,
    gains_tax: float,
    refund_delay: int,
    is_vgbl: bool,
) -> float:
    """Wrapper terminal wealth per R$1 contributed (fund leg + refund leg)."""
    fund, refund = wealth_b_components(
        year, fund_return, refund_return, exit_rate,
        entry_rate, gains_tax, refund_delay, is_vgbl,
    )
    return fund + refund


def fee_adjusted_return(
    expected_return: float,
    admin_fee_pct: float,
    performance_fee_pct: float,
    fees_enabled: bool,
) -> float:
    """
    Effective fund return after the flat admin fee (floored at 0) and the
    proportional performance fee. Applies to the wrapper fund only.
    """
    if not fees_enabled:
        return expected_return
    effective = max(0.0, expected_return - admin_fee_pct)
    if performance_fee_pct > 0:
        effective = effective * (1 - performance_fee_pct)
    return effective


def annualized_delta(a: float, b: float, year: int) -> float:
    """
    Annualized advantage of B over A in basis points.

        delta(N) = (B(N)^(1/N) - A(N)^(1/N)) * 10000

    Returns 0 for year <= 0 or non-positive multipliers (fractional powers of
    non-positive bases are not real).
    """
    if year <= 0 or a <= 0 or b <= 0:
        return 0.0
    return (b ** (1 / year) - a ** (1 / year)) * 10000


# =============================================================================
# Discretization of continuous inputs into annual steps
# =============================================================================

def discretize_refund_delay(refund_delay_years: float) -> int:
    """Refund arrival year D: the delay rounded UP to whole years (0.75 -> 1)."""
    return max(0, math.ceil(refund_delay_years))


def discretize_horizon(horizon_years: float) -> int:
    """Simulated horizon N: rounded half-up to whole years, never below 1."""
    return max(1, int(math.floor(horizon_years + 0.5)))
