# engine.simulator.py

import logging
from typing import List, Optional

# --- Models ---
from models import SimulationInputs, DerivedValues, YearlyDataPoint, SimulationResult

from utils.tax_utils import PGBL_DEDUCTIBLE_CAP, RULES_VERSION
from engine.tax_engine import marginal_rate, best_exit_rate, compute_vgbl_iof
from engine.wealth import (
    wealth_a,
    wealth_b_components,
    annualized_delta,
    fee_adjusted_return,
    discretize_refund_delay,
    discretize_horizon,
)

logger = logging.getLogger(__name__)

ENGINE_VERSION = f"1.0.0+rules-{RULES_VERSION}"


def _is_pgbl_deductible(inputs: SimulationInputs) -> bool:
    """PGBL deduction requires the complete filing model and INSS contributions."""
    return (
        inputs.wrapper == "PGBL"
        and inputs.filing_mode == "complete"
        and inputs.contributes_to_inss
    )


def derive_values(inputs: SimulationInputs) -> DerivedValues:
    """
    Derive the entry/exit rates and R$ amounts shown before a full run.
    """
    income = max(0.0, inputs.annual_income)
    contribution_pct = min(1.0, max(0.0, inputs.contribution_pct))

    xin = marginal_rate(income) if _is_pgbl_deductible(inputs) else 0.0
    xout = best_exit_rate(discretize_horizon(inputs.horizon_years), income)

    max_deductible = income * PGBL_DEDUCTIBLE_CAP
    contribution_amount = income * contribution_pct
    deductible_amount = min(contribution_amount, max_deductible)
    refund_amount = deductible_amount * xin

    iof_amount = compute_vgbl_iof(contribution_amount) if inputs.wrapper == "VGBL" else 0.0

    return DerivedValues(
        xin=xin,
        xout=xout,
        deductible_amount=deductible_amount,
        contribution_amount=contribution_amount,
        refund_amount=refund_amount,
        iof_amount=iof_amount,
    )


class WrapperSimulator:
    """
    Builds the year-by-year wealth paths of a wrapper contribution (B) against
    the same money in a taxable investment (A). One instance per run.
    """
    def __init__(self, inputs: SimulationInputs):

        # -----------------------
        # STEP 1: Inputs and Derived Values
        # -----------------------
        self.inputs = inputs
        self.derived = derive_values(inputs)
        self.income = max(0.0, inputs.annual_income)
        self.xin = self.derived.xin

        # -----------------------
        # STEP 2: Returns
        # -----------------------
        # Fees drag the wrapper fund only; path A and the refund leg use the base return
        self.base_return = inputs.expected_return
        self.fund_return = fee_adjusted_return(
            inputs.expected_return,
            inputs.admin_fee_pct,
            inputs.performance_fee_pct,
            inputs.fees_enabled,
        )
        self.gains_tax = inputs.capital_gains_tax
        self.is_vgbl = inputs.wrapper == "VGBL"

        # -----------------------
        # STEP 3: Discretize Timeframe
        # -----------------------
        self.refund_delay = discretize_refund_delay(inputs.refund_delay_years)
        self.num_years = discretize_horizon(inputs.horizon_years)

    def _year_point(self, year: int) -> YearlyDataPoint:
        """Evaluates both paths as if redemption happened at `year`."""
        # Regime optionality is exercised at whatever year redemption occurs
        xout = best_exit_rate(year, self.income)

        a = wealth_a(year, self.base_return, self.gains_tax)
        fund, refund = wealth_b_components(
            year,
            self.fund_return,
            self.base_return,
            xout,
            self.xin,
            self.gains_tax,
            self.refund_delay,
            self.is_vgbl,
        )
        b = fund + refund

        return YearlyDataPoint(
            year=year,
            wealth_a=a,
            wealth_b=b,
            wealth_b_pgbl=fund,
            wealth_b_refund=refund,
            annualized_delta=annualized_delta(a, b, year),
        )

    def run_simulation(self) -> SimulationResult:
        """Runs years 0..N in order and assembles the result."""
        timeseries: List[YearlyDataPoint] = []
        break_even_year: Optional[int] = None

        for year in range(0, self.num_years + 1):
            point = self._year_point(year)
            timeseries.append(point)

            # First year after year 0 where B catches up with A (ties count)
            if year > 0 and break_even_year is None and point.wealth_b >= point.wealth_a:
                break_even_year = year

        # Terminal values come from the series so summary and chart always agree
        final_point = timeseries[self.num_years]

        logger.debug(
            f"Simulated {self.inputs.wrapper} over {self.num_years} years "
            f"(refund year {self.refund_delay}, fund return {self.fund_return:.4f}): "
            f"A={final_point.wealth_a:.4f} B={final_point.wealth_b:.4f} "
            f"break-even={break_even_year}"
        )

        return SimulationResult(
            inputs=self.inputs,
            derived=self.derived,
            timeseries=tuple(timeseries),
            terminal_a=final_point.wealth_a,
            terminal_b=final_point.wealth_b,
            annualized_delta=final_point.annualized_delta,
            break_even_year=break_even_year,
            engine_version=ENGINE_VERSION,
            rules_version=RULES_VERSION,
        )


def run_simulation(inputs: SimulationInputs) -> SimulationResult:
    """Runs a full simulation on a fresh WrapperSimulator."""
    return WrapperSimulator(inputs).run_simulation()
