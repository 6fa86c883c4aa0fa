import logging
import math
import re
from dataclasses import fields
from typing import Any, Dict

from models import SimulationInputs
from utils.xml_loader import DEFAULT_SETUP
from utils.currency import clean_currency, clean_percent
from config.market_assumptions import (
    default_expected_return,
    default_capital_gains_tax,
    default_refund_delay_years,
    min_horizon_years,
    max_horizon_years,
    max_refund_delay_years,
)

logger = logging.getLogger(__name__)

FILING_MODES = ("complete", "simplified")
WRAPPERS = ("PGBL", "VGBL")
REGIMES = ("progressive", "regressive", "optimistic")

# "120000", "R$ 120.000,00", "-R$ 1.500"
_CURRENCY_TEXT = re.compile(r"^-?\s*(R\$)?\s*-?[\d.,]*\d[\d.,]*$")

FRACTION_FIELDS = (
    "contribution_pct",
    "expected_return",
    "capital_gains_tax",
    "admin_fee_pct",
    "performance_fee_pct",
)

# Key names used by the web form / persisted scenarios
CAMEL_CASE_KEYS = {
    "annualIncome": "annual_income",
    "filingMode": "filing_mode",
    "contributesToINSS": "contributes_to_inss",
    "contributionPct": "contribution_pct",
    "expectedReturn": "expected_return",
    "horizonYears": "horizon_years",
    "capitalGainsTax": "capital_gains_tax",
    "refundDelayYears": "refund_delay_years",
    "adminFeePct": "admin_fee_pct",
    "performanceFeePct": "performance_fee_pct",
    "feesEnabled": "fees_enabled",
}

# Market fallbacks for fields a scenario file leaves out
MARKET_DEFAULTS: Dict[str, Any] = {
    "expected_return": default_expected_return,
    "capital_gains_tax": default_capital_gains_tax,
    "refund_delay_years": default_refund_delay_years,
}


class InvalidInputError(ValueError):
    """Raised when caller-supplied scenario values cannot be simulated."""


def _clamp(name: str, value: float, low: float, high: float) -> float:
    if value < low or value > high:
        clamped = min(high, max(low, value))
        logger.warning(f"'{name}'={value} outside [{low}, {high}]; clamped to {clamped}")
        return clamped
    return value


def _choice(name: str, value: Any, allowed: tuple) -> str:
    if not isinstance(value, str):
        raise InvalidInputError(f"'{name}' must be one of {allowed}, got {value!r}")
    normalized = value.strip().upper() if name == "wrapper" else value.strip().lower()
    if normalized not in allowed:
        raise InvalidInputError(f"'{name}' must be one of {allowed}, got {value!r}")
    return normalized


def _fraction(name: str, value: Any) -> float:
    cleaned = clean_percent(value)
    if cleaned is None or not math.isfinite(cleaned):
        raise InvalidInputError(f"'{name}' is not a number: {value!r}")
    if cleaned == 1.0 and not (isinstance(value, str) and '%' in value):
        # A bare 1 sits on the fraction side of the cut, so it means 100%
        logger.warning(f"'{name}'={value!r} read as 100%; pass '1%' or 0.01 for one percent")
    return _clamp(name, cleaned, 0.0, 1.0)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "sim")
    return bool(value)


def get_simulation_inputs(**kwargs: Any) -> SimulationInputs:
    """
    Builds a validated SimulationInputs by merging the XML default scenario
    with caller values. Raises InvalidInputError for values that cannot be
    simulated; clamps (with a warning) values that are merely out of range.
    """

    # 1. Start with market fallbacks, then the defaults loaded from the XML setup file
    inputs_dict: Dict[str, Any] = dict(MARKET_DEFAULTS)
    inputs_dict.update(DEFAULT_SETUP)

    # 2. Merge caller values, accepting the form's camelCase names
    for key, value in kwargs.items():
        inputs_dict[CAMEL_CASE_KEYS.get(key, key)] = value

    # 3. Income: numeric or "R$ 120.000,00"; negative income is rejected
    raw_income = inputs_dict.get("annual_income")
    if isinstance(raw_income, str):
        if not _CURRENCY_TEXT.match(raw_income.strip()):
            raise InvalidInputError(f"'annual_income' is not a currency value: {raw_income!r}")
        income = clean_currency(raw_income)
    elif isinstance(raw_income, (int, float)) and not isinstance(raw_income, bool):
        income = float(raw_income)
    else:
        raise InvalidInputError(f"'annual_income' is not a number: {raw_income!r}")
    if not math.isfinite(income):
        raise InvalidInputError(f"'annual_income' must be finite, got {raw_income!r}")
    if income < 0:
        raise InvalidInputError(f"'annual_income' must be non-negative, got {income}")
    inputs_dict["annual_income"] = income

    # 4. Enums
    inputs_dict["filing_mode"] = _choice("filing_mode", inputs_dict.get("filing_mode"), FILING_MODES)
    inputs_dict["wrapper"] = _choice("wrapper", inputs_dict.get("wrapper"), WRAPPERS)
    inputs_dict["regime"] = _choice("regime", inputs_dict.get("regime"), REGIMES)

    # 5. Fractions (accept 0.12, 12 or "12%")
    for name in FRACTION_FIELDS:
        inputs_dict[name] = _fraction(name, inputs_dict.get(name))

    # 6. Timeframe
    try:
        horizon = float(inputs_dict.get("horizon_years"))
        delay = float(inputs_dict.get("refund_delay_years"))
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Horizon and refund delay must be numbers: {e}") from e
    if not (math.isfinite(horizon) and math.isfinite(delay)):
        raise InvalidInputError(f"Horizon and refund delay must be finite, got {horizon} and {delay}")
    horizon = _clamp("horizon_years", horizon, min_horizon_years, max_horizon_years)
    inputs_dict["horizon_years"] = int(math.floor(horizon + 0.5))
    inputs_dict["refund_delay_years"] = _clamp("refund_delay_years", delay, 0.0, max_refund_delay_years)

    # 7. Flags
    inputs_dict["contributes_to_inss"] = _flag(inputs_dict.get("contributes_to_inss"))
    inputs_dict["fees_enabled"] = _flag(inputs_dict.get("fees_enabled"))

    # 8. DYNAMIC FIELD MAPPING AND FILTERING (Reflection)
    # Only keys that match SimulationInputs fields are kept.
    input_field_names = {f.name for f in fields(SimulationInputs)}
    unknown = sorted(set(inputs_dict) - input_field_names)
    if unknown:
        logger.warning(f"Ignoring unknown scenario fields: {', '.join(unknown)}")

    final_inputs = {
        key: value
        for key, value in inputs_dict.items()
        if key in input_field_names
    }

    # 9. Create the SimulationInputs object
    return SimulationInputs(**final_inputs)
