"""
Behaviour tests for engine.simulator.

We cover:
- derive_values: eligibility gate, deduction cap, clamping, IOF
- run_simulation on the reference scenario (120k income, PGBL, 10 years)
- Series invariants: breakdown reconciliation, year 0, per-year best-of exit
  rate, minimal break-even year, terminal values read from the series
- Edge cases: zero income, refund after the horizon, fees, idempotence
"""

import json
import math
from dataclasses import replace

import pytest

from models import SimulationInputs
from engine import run_simulation, derive_values, ENGINE_VERSION
from engine.simulator import WrapperSimulator
from engine.tax_engine import best_exit_rate
from utils.tax_utils import RULES_VERSION


@pytest.fixture
def reference_inputs():
    return SimulationInputs(
        annual_income=120_000.0,
        filing_mode="complete",
        contributes_to_inss=True,
        wrapper="PGBL",
        contribution_pct=0.12,
        regime="regressive",
        expected_return=0.15,
        horizon_years=10,
        capital_gains_tax=0.15,
        refund_delay_years=0.75,
        admin_fee_pct=0.01,
        performance_fee_pct=0.0,
        fees_enabled=False,
    )


# ------------------------------------------------------------------
# derive_values
# ------------------------------------------------------------------

def test_derive_values_reference(reference_inputs):
    derived = derive_values(reference_inputs)

    assert derived.xin == 0.275
    assert derived.xout == 0.15
    assert derived.contribution_amount == pytest.approx(14_400)
    assert derived.deductible_amount == pytest.approx(14_400)
    assert derived.refund_amount == pytest.approx(14_400 * 0.275)
    assert derived.iof_amount == 0.0


@pytest.mark.parametrize(
    "changes",
    [
        {"filing_mode": "simplified"},
        {"contributes_to_inss": False},
        {"wrapper": "VGBL"},
    ],
)
def test_pgbl_ineligibility_zeroes_refund(reference_inputs, changes):
    derived = derive_values(replace(reference_inputs, **changes))
    assert derived.xin == 0.0
    assert derived.refund_amount == 0.0


def test_deduction_capped_at_twelve_percent(reference_inputs):
    derived = derive_values(replace(reference_inputs, contribution_pct=0.20))
    assert derived.contribution_amount == pytest.approx(24_000)
    assert derived.deductible_amount == pytest.approx(14_400)
    assert derived.refund_amount == pytest.approx(14_400 * 0.275)


def test_contribution_pct_is_clamped(reference_inputs):
    assert derive_values(replace(reference_inputs, contribution_pct=1.7)).contribution_amount == pytest.approx(120_000)
    assert derive_values(replace(reference_inputs, contribution_pct=-0.2)).contribution_amount == 0.0


def test_vgbl_iof_above_threshold(reference_inputs):
    rich = replace(reference_inputs, wrapper="VGBL", annual_income=8_000_000.0, contribution_pct=0.1)
    derived = derive_values(rich)
    assert derived.iof_amount == pytest.approx((800_000 - 600_000) * 0.05)
    # PGBL is exempt
    assert derive_values(replace(rich, wrapper="PGBL")).iof_amount == 0.0


def test_legacy_regime_does_not_change_xout(reference_inputs):
    for regime in ("progressive", "regressive", "optimistic"):
        assert derive_values(replace(reference_inputs, regime=regime)).xout == 0.15


# ------------------------------------------------------------------
# run_simulation: reference scenario
# ------------------------------------------------------------------

def test_reference_scenario(reference_inputs):
    result = run_simulation(reference_inputs)

    assert len(result.timeseries) == 11
    assert [p.year for p in result.timeseries] == list(range(11))
    assert result.terminal_a > 1
    assert result.terminal_b > 1
    assert result.break_even_year is not None
    assert 1 <= result.break_even_year <= 10
    assert result.engine_version == ENGINE_VERSION
    assert result.rules_version == RULES_VERSION

    # Hand-computed: year 10 with xout 15%, refund growing 9 years
    growth = 1.15 ** 10
    assert result.terminal_a == pytest.approx(growth - 0.15 * (growth - 1))
    refund_growth = 1.15 ** 9
    expected_b = growth * 0.85 + 0.275 * (refund_growth - 0.15 * (refund_growth - 1))
    assert result.terminal_b == pytest.approx(expected_b)


def test_reference_break_even_is_year_three(reference_inputs):
    result = run_simulation(reference_inputs)
    assert result.break_even_year == 3
    assert result.timeseries[2].wealth_b < result.timeseries[2].wealth_a
    assert result.timeseries[3].wealth_b >= result.timeseries[3].wealth_a


def test_breakdown_reconciles_every_year(reference_inputs):
    for wrapper in ("PGBL", "VGBL"):
        result = run_simulation(replace(reference_inputs, wrapper=wrapper, fees_enabled=True))
        for point in result.timeseries:
            assert point.wealth_b_pgbl + point.wealth_b_refund == pytest.approx(point.wealth_b, rel=1e-9)


def test_year_zero_values(reference_inputs):
    point = run_simulation(reference_inputs).timeseries[0]
    assert point.wealth_a == 1.0
    # Refund arrives in year 1, so year 0 is the fund leg only, taxed at 27.5%
    assert point.wealth_b_refund == 0.0
    assert point.wealth_b == pytest.approx(1 - 0.275)
    assert point.annualized_delta == 0.0


def test_year_zero_with_immediate_refund(reference_inputs):
    point = run_simulation(replace(reference_inputs, refund_delay_years=0.0)).timeseries[0]
    assert point.wealth_b_refund == 0.275
    assert point.wealth_b == pytest.approx(1 - 0.275 + 0.275)


def test_exit_rate_recomputed_each_year(reference_inputs):
    result = run_simulation(reference_inputs)
    for point in result.timeseries:
        xout = best_exit_rate(point.year, reference_inputs.annual_income)
        growth = 1.15 ** point.year
        assert point.wealth_b_pgbl == pytest.approx(growth * (1 - xout))


def test_break_even_is_minimal_year(reference_inputs):
    for income in [30_000.0, 50_000.0, 120_000.0, 500_000.0]:
        for wrapper in ("PGBL", "VGBL"):
            result = run_simulation(replace(reference_inputs, annual_income=income, wrapper=wrapper))
            qualifying = [p.year for p in result.timeseries if p.year > 0 and p.wealth_b >= p.wealth_a]
            expected = qualifying[0] if qualifying else None
            assert result.break_even_year == expected


def test_no_break_even_within_horizon_is_none(reference_inputs):
    # Heavy fees: fund earns (15% - 5%) * 0.8 = 8% while path A keeps 15%
    costly = replace(
        reference_inputs,
        fees_enabled=True,
        admin_fee_pct=0.05,
        performance_fee_pct=0.2,
        horizon_years=5,
    )
    result = run_simulation(costly)

    assert result.break_even_year is None
    assert len(result.timeseries) == 6
    for point in result.timeseries[1:]:
        assert point.wealth_b < point.wealth_a
    assert result.terminal_a == pytest.approx(1.8597, abs=1e-4)
    assert result.terminal_b == pytest.approx(1.5521, abs=1e-4)


def test_terminal_values_come_from_last_point(reference_inputs):
    result = run_simulation(replace(reference_inputs, horizon_years=7))
    last = result.timeseries[-1]
    assert last.year == 7
    assert result.terminal_a == last.wealth_a
    assert result.terminal_b == last.wealth_b
    assert result.annualized_delta == last.annualized_delta


# ------------------------------------------------------------------
# Edge cases
# ------------------------------------------------------------------

def test_zero_income_gives_degenerate_result(reference_inputs):
    result = run_simulation(replace(reference_inputs, annual_income=0.0))
    assert result.derived.xin == 0.0
    assert result.derived.xout == 0.0
    assert result.derived.contribution_amount == 0.0
    assert result.derived.refund_amount == 0.0
    for point in result.timeseries:
        assert point.wealth_b_refund == 0.0
        assert all(math.isfinite(v) for v in (point.wealth_a, point.wealth_b, point.annualized_delta))


def test_refund_arriving_after_horizon_contributes_nothing(reference_inputs):
    result = run_simulation(replace(reference_inputs, horizon_years=1, refund_delay_years=1.5))
    assert len(result.timeseries) == 2
    assert all(p.wealth_b_refund == 0.0 for p in result.timeseries)


def test_vgbl_never_gets_refund(reference_inputs):
    result = run_simulation(replace(reference_inputs, wrapper="VGBL"))
    assert all(p.wealth_b_refund == 0.0 for p in result.timeseries)
    # Gains-only taxation: year 0 balance has no gains, so nothing is lost
    assert result.timeseries[0].wealth_b == pytest.approx(1.0)


def test_fees_drag_fund_leg_only(reference_inputs):
    plain = run_simulation(reference_inputs)
    with_fees = run_simulation(replace(reference_inputs, fees_enabled=True, performance_fee_pct=0.2))

    for p, f in zip(plain.timeseries, with_fees.timeseries):
        assert f.wealth_a == p.wealth_a
        assert f.wealth_b_refund == p.wealth_b_refund
        if p.year > 0:
            assert f.wealth_b_pgbl < p.wealth_b_pgbl


def test_zero_horizon_floors_at_one_year(reference_inputs):
    simulator = WrapperSimulator(replace(reference_inputs, horizon_years=0))
    assert simulator.num_years == 1
    assert simulator.refund_delay == 1


def test_run_simulation_is_idempotent(reference_inputs):
    first = run_simulation(reference_inputs)
    second = run_simulation(reference_inputs)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_result_serializes_to_json(reference_inputs):
    result = run_simulation(reference_inputs)
    data = json.loads(json.dumps(result.to_dict()))

    assert data["inputs"]["wrapper"] == "PGBL"
    assert data["derived"]["xin"] == 0.275
    assert len(data["timeseries"]) == 11
    assert data["timeseries"][-1]["wealth_b"] == result.terminal_b
    assert data["break_even_year"] == 3
