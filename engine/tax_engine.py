"""
Brazilian income-tax rules for PGBL / VGBL planning.
It contains the rate lookups used by the simulator, relying entirely on the
versioned tables provided by utils.tax_utils. Every function here is total:
callers clamp out-of-domain inputs before calling.
"""
from typing import List, Tuple

# Import all necessary external components (Constants and Rule Set Tags)
from utils.tax_utils import (
    IRPF_ANNUAL_BRACKETS,
    REGRESSIVE_SCHEDULE,
    REGRESSIVE_FLOOR_RATE,
    OPTIMISTIC_EXIT_RATE,
    IOF_VGBL_THRESHOLD,
    IOF_VGBL_RATE,
    RedemptionRegime,  # For type hints
)

# --- 1. Internal Helper Functions ---

def _find_bracket(income: float, brackets: List[Tuple[float, float, float]]) -> Tuple[float, float, float]:
    """Returns the first (up_to, rate, deduction) bracket whose upper bound covers income."""
    for bracket in brackets:
        if income <= bracket[0]:
            return bracket
    # The last bound is +inf, so this only guards against a malformed table
    return brackets[-1]


# --- 2. Progressive Regime ---

def marginal_rate(income: float) -> float:
    """
    Marginal IRPF rate for an annual taxable income.

    This is the rate applied to the last R$ of income, i.e. the tax saved by
    deducting R$1 of PGBL contribution. Income <= 0 returns 0.
    """
    if not income or income <= 0:
        return 0.0
    _, rate, _ = _find_bracket(income, IRPF_ANNUAL_BRACKETS)
    return rate


def compute_irpf(income: float) -> float:
    """Total annual IRPF owed on a taxable income (rate * income - bracket deduction)."""
    if not income or income <= 0:
        return 0.0
    _, rate, deduction = _find_bracket(income, IRPF_ANNUAL_BRACKETS)
    return max(0.0, income * rate - deduction)


# --- 3. Regressive Regime ---

def regressive_rate(holding_years: float) -> float:
    """
    Regressive schedule rate for a holding period in years.

    Boundaries are closed at the upper bound: exactly 2 years is still taxed
    at 35%, anything above 2 up to 4 at 30%, and so on down to 10%.
    """
    for _, max_years, rate in REGRESSIVE_SCHEDULE:
        if holding_years <= max_years:
            return rate
    return REGRESSIVE_FLOOR_RATE


# --- 4. Best-of Exit Rate ---

def best_exit_rate(year: float, income: float) -> float:
    """
    Exit tax rate under regime optionality.

    Returns min(regressive_rate(year), marginal_rate(income)): at redemption the
    investor may pick whichever regime is cheaper (Lei 14.803/2024), and may do
    so independently for whatever year the redemption happens.
    """
    return min(regressive_rate(year), marginal_rate(income))


def estimate_xout(regime: RedemptionRegime, horizon_years: float, income: float) -> float:
    """
    Legacy single-regime exit rate. DISPLAY ONLY.

    The simulator never calls this; it always uses best_exit_rate().
    """
    if regime == "regressive":
        return regressive_rate(horizon_years)
    if regime == "progressive":
        # Full amount taxed as income at the marginal rate
        return marginal_rate(income)
    # "optimistic": the regressive floor after 10 years
    return OPTIMISTIC_EXIT_RATE


# --- 5. IOF Excise ---

def iof_on_excess(contribution: float, threshold: float, rate: float) -> float:
    """Flat excise on the part of a contribution above threshold."""
    return max(0.0, contribution - threshold) * rate


def compute_vgbl_iof(annual_contribution: float) -> float:
    """IOF due on annual VGBL contributions above R$600k. PGBL is exempt."""
    return iof_on_excess(annual_contribution, IOF_VGBL_THRESHOLD, IOF_VGBL_RATE)


__all__ = [
    "marginal_rate",
    "compute_irpf",
    "regressive_rate",
    "best_exit_rate",
    "estimate_xout",
    "iof_on_excess",
    "compute_vgbl_iof",
]
