# utils/summary.py

import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional, Sequence

from models import SimulationResult


# ------------------------------------------------------------------
# HELPER: Key numbers (absolute R$ values behind the result cards)
# ------------------------------------------------------------------
def key_numbers(result: SimulationResult) -> Dict[str, Any]:
    """
    Converts the per-R$1 multipliers of a result into R$ amounts for the
    contribution actually made, plus the headline deltas.
    """
    investment = result.derived.contribution_amount
    terminal_value_a = result.terminal_a * investment
    terminal_value_b = result.terminal_b * investment

    return {
        "refund_amount": result.derived.refund_amount,
        "deductible_amount": result.derived.deductible_amount,
        "xin": result.derived.xin,
        "terminal_value_a": terminal_value_a,
        "terminal_value_b": terminal_value_b,
        "advantage": terminal_value_b - terminal_value_a,
        "accumulated_return_a": result.terminal_a - 1,
        "accumulated_return_b": result.terminal_b - 1,
        "annualized_delta_bps": result.annualized_delta,
        # bps -> percentage points per year (e.g. 85 bps -> 0.85)
        "extra_return_pct_per_year": result.annualized_delta / 100,
        "break_even_year": result.break_even_year,
    }


# ------------------------------------------------------------------
# HELPER: Yearly series as a DataFrame
# ------------------------------------------------------------------
def timeseries_frame(result: SimulationResult) -> pd.DataFrame:
    """
    One row per simulated year (indexed by year). Multiplier columns are
    per R$1; the *_value columns are scaled by the contribution amount.
    """
    df = pd.DataFrame([
        {
            "year": point.year,
            "wealth_a": point.wealth_a,
            "wealth_b": point.wealth_b,
            "wealth_b_pgbl": point.wealth_b_pgbl,
            "wealth_b_refund": point.wealth_b_refund,
            "annualized_delta": point.annualized_delta,
        }
        for point in result.timeseries
    ]).set_index("year")

    investment = result.derived.contribution_amount
    for col in ["wealth_a", "wealth_b", "wealth_b_pgbl", "wealth_b_refund"]:
        df[col.replace("wealth", "value")] = df[col] * investment
    df["advantage"] = df["value_b"] - df["value_a"]
    df["b_ahead"] = np.greater_equal(df["wealth_b"].to_numpy(), df["wealth_a"].to_numpy())

    return df


# ------------------------------------------------------------------
# HELPER: Side-by-side scenario comparison
# ------------------------------------------------------------------
COMPARISON_ROWS = [
    "annual_income",
    "wrapper",
    "contribution_pct",
    "contribution_amount",
    "expected_return",
    "horizon_years",
    "xin",
    "xout",
    "refund_amount",
    "terminal_value_a",
    "terminal_value_b",
    "advantage",
    "annualized_delta_bps",
    "break_even_year",
]


def compare_results(
    results: Sequence[SimulationResult],
    names: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Builds the comparison table data: one column per scenario, one row per
    metric in COMPARISON_ROWS. Columns are named "Scenario 1", "Scenario 2", ...
    unless names are given.
    """
    if names is None:
        names = [f"Scenario {i + 1}" for i in range(len(results))]
    if len(names) != len(results):
        raise ValueError(f"Got {len(names)} names for {len(results)} results")

    columns = {}
    for name, result in zip(names, results):
        numbers = key_numbers(result)
        columns[name] = {
            "annual_income": result.inputs.annual_income,
            "wrapper": result.inputs.wrapper,
            "contribution_pct": result.inputs.contribution_pct,
            "contribution_amount": result.derived.contribution_amount,
            "expected_return": result.inputs.expected_return,
            "horizon_years": result.inputs.horizon_years,
            "xin": result.derived.xin,
            "xout": result.derived.xout,
            "refund_amount": result.derived.refund_amount,
            "terminal_value_a": numbers["terminal_value_a"],
            "terminal_value_b": numbers["terminal_value_b"],
            "advantage": numbers["advantage"],
            "annualized_delta_bps": numbers["annualized_delta_bps"],
            "break_even_year": numbers["break_even_year"],
        }

    return pd.DataFrame(columns, index=COMPARISON_ROWS, dtype=object)
