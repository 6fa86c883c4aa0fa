# utils/currency.py
import math
import re
from typing import Union

# "120.000" / "1.234.567": dots used as pt-BR thousands separators
_BR_THOUSANDS = re.compile(r'^-?\d{1,3}(\.\d{3})+$')


# ----------------------------------------------------------------------
# Helper: Parsing
# ----------------------------------------------------------------------

def clean_currency(val):
    """
    Cleans a BRL currency string (e.g., "R$ 140.000,00") into a float (140000.0).
    Plain numbers pass through; unparseable input returns 0.0.
    """
    if not val:
        return 0.0

    if isinstance(val, (int, float)):
        return float(val)

    try:
        cleaned_val = str(val).replace('R$', '').replace(' ', '').replace('\xa0', '').strip()
        if not cleaned_val:
            return 0.0
        if ',' in cleaned_val:
            # pt-BR: "." groups thousands, "," marks decimals
            cleaned_val = cleaned_val.replace('.', '').replace(',', '.')
        elif _BR_THOUSANDS.match(cleaned_val):
            cleaned_val = cleaned_val.replace('.', '')
        return float(cleaned_val)
    except ValueError:
        return 0.0


def clean_percent(raw_input: Union[str, float, int]) -> Union[float, None]:
    """
    Cleans raw input (e.g., '0.12', '12%', '12', '12,5%') and converts it to a
    float where 1.0 represents 100%.

    Strings with '%' are always percentages. Otherwise numbers above 1 are read
    as percentages (12 -> 0.12) and numbers up to 1 as fractions (0.12 -> 0.12).
    """
    if raw_input is None:
        return None

    if isinstance(raw_input, bool):
        return None

    if isinstance(raw_input, (float, int)):
        if float(raw_input) > 1.0:
            return float(raw_input) / 100.0
        return float(raw_input)

    s = str(raw_input).strip()
    if not s:
        return None

    is_percent = '%' in s
    s = s.replace('%', '').replace(' ', '').replace(',', '.').strip()

    try:
        numeric_val = float(s)
    except ValueError:
        return None # Caller decides whether this is an error

    if is_percent or numeric_val > 1.0:
        return numeric_val / 100.0
    return numeric_val


# ----------------------------------------------------------------------
# Helper: Display
# ----------------------------------------------------------------------

def format_brl(value: Union[float, None]) -> str:
    """Formats a float into pt-BR currency without cents ("R$ 120.000")."""
    if value is None:
        value = 0.0
    value = float(value)
    # Halves round away from zero (1500.5 -> 1.501), not to even
    magnitude = math.floor(abs(value) + 0.5)
    sign = "-" if value < 0 and magnitude > 0 else ""
    # Build with US grouping, then swap to the pt-BR thousands separator
    digits = f"{magnitude:,d}".replace(',', '.')
    return f"{sign}R$ {digits}"


def format_percent_output(value: Union[float, None], decimal_places: int = 1) -> str:
    """Formats a float (0.23) to a display string ('23.0%')."""
    if value is None:
        return ""
    value = float(value)
    # Format the number as a percentage string
    return f"{value * 100:.{decimal_places}f}%"


def format_bps(bps: float) -> str:
    """Formats basis points with an explicit sign ('+123 bps')."""
    sign = "+" if bps >= 0 else ""
    return f"{sign}{bps:.0f} bps"
