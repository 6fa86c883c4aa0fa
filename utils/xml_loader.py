# utils/xml_loader.py
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict
from pathlib import Path

logger = logging.getLogger(__name__)

# Grouping tags used in scenario files; their children are the input fields
SCENARIO_GROUPS = ["income", "contribution", "investment", "fees"]


def parse_scenario_xml(file_path: Any) -> Dict[str, Any]:
    """
    Load a scenario file (path or file-like object) into a flat dict keyed by
    SimulationInputs field names.
    """
    tree = ET.parse(file_path)
    root = tree.getroot()

    setup_dict: Dict[str, Any] = {}

    for child in root:
        if child.tag in SCENARIO_GROUPS:
            for sub in child:
                setup_dict[sub.tag] = _normalize(sub.tag, try_cast(sub.text))
        else:
            # Ungrouped fields are accepted as-is
            logger.warning(f"Scenario field '{child.tag}' found outside a group in {file_path}")
            setup_dict[child.tag] = _normalize(child.tag, try_cast(child.text))

    return setup_dict


def _normalize(tag: str, val: Any) -> Any:
    """Normalize enum spellings and numeric types."""
    if tag in ["filing_mode", "regime"] and isinstance(val, str):
        val = val.strip().lower()
    if tag == "wrapper" and isinstance(val, str):
        val = val.strip().upper()
    if tag == "horizon_years" and isinstance(val, (int, float)) and not isinstance(val, bool):
        val = int(val)
    if tag in ["annual_income", "contribution_pct", "expected_return", "capital_gains_tax",
               "refund_delay_years", "admin_fee_pct", "performance_fee_pct"]:
        val = float(val) if isinstance(val, (int, float)) and not isinstance(val, bool) else val
    return val


def try_cast(value: str) -> Any:
    """Try to convert string to bool, int or float if possible, else leave as str."""
    if value is None:
        return None
    value = value.strip()
    # Booleans
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    # Integers (try first)
    try:
        if '.' not in value: # Optimization: check for decimal to avoid unnecessary exception
            return int(value)
    except ValueError:
        pass

    # Floats (try second)
    try:
        return float(value)
    except ValueError:
        pass

    return value # Return as string if all else fails


CONFIG_DIR = Path(__file__).parent.parent / "config"

DEFAULT_SETUP = parse_scenario_xml(CONFIG_DIR / "default_scenario.xml")
