# models.py
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

from utils.tax_utils import FilingMode, Wrapper, RedemptionRegime


@dataclass(frozen=True)
class SimulationInputs:
    # Income
    annual_income: float
    filing_mode: FilingMode
    contributes_to_inss: bool

    # Contribution
    wrapper: Wrapper
    contribution_pct: float     # 0-1 (e.g. 0.12 for 12%)
    regime: RedemptionRegime    # legacy selector, kept for display only

    # Investment
    expected_return: float      # annual, 0-1 (e.g. 0.15 for 15%)
    horizon_years: int          # integer 1-30
    capital_gains_tax: float    # 0-1, comparison investment only
    refund_delay_years: float   # 0-1.5

    # Fees (fund leg only)
    admin_fee_pct: float = 0.0
    performance_fee_pct: float = 0.0
    fees_enabled: bool = False


@dataclass(frozen=True)
class DerivedValues:
    xin: float                  # marginal IR rate saved on entry (deduction benefit)
    xout: float                 # best-of exit rate at the horizon
    deductible_amount: float    # R$ deductible (capped at 12% of income)
    contribution_amount: float  # R$ actually contributed
    refund_amount: float        # R$ estimated refund
    iof_amount: float = 0.0     # R$ IOF on VGBL contributions above threshold


@dataclass(frozen=True)
class YearlyDataPoint:
    year: int
    wealth_a: float             # taxable comparison
    wealth_b: float             # wrapper total
    wealth_b_pgbl: float        # in-fund component, net of exit tax
    wealth_b_refund: float      # refund reinvested outside the fund
    annualized_delta: float     # bps


@dataclass(frozen=True)
class SimulationResult:
    inputs: SimulationInputs
    derived: DerivedValues
    timeseries: Tuple[YearlyDataPoint, ...]
    terminal_a: float
    terminal_b: float
    annualized_delta: float     # final year delta in bps
    break_even_year: Optional[int]
    engine_version: str
    rules_version: str

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready snapshot (tuples become lists) for persisting a scenario."""
        data = asdict(self)
        data["timeseries"] = [dict(point) for point in data["timeseries"]]
        return data
