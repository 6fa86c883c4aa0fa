# utils/tax_utils.py
import numpy as np
from typing import List, Tuple, Literal

# Define the acceptable set of filing modes / wrappers / regimes for type hinting
FilingMode = Literal["complete", "simplified"]
Wrapper = Literal["PGBL", "VGBL"]
RedemptionRegime = Literal["progressive", "regressive", "optimistic"]

# Rule set reference. Update annually when Receita Federal publishes new brackets.
TAX_YEAR = 2025
RULES_VERSION = "2025.1"

# =============================================================================
# 1. IRPF Annual Progressive Brackets (base year 2024, declaration 2025)
# =============================================================================
# (up_to, rate, deduction) - values in BRL per year, ordered ascending
IRPF_ANNUAL_BRACKETS: List[Tuple[float, float, float]] = [
    (26_963.20, 0.000, 0.00),
    (33_919.80, 0.075, 2_022.24),
    (45_012.60, 0.150, 4_566.23),
    (55_976.16, 0.225, 7_942.17),
    (np.inf,    0.275, 10_740.98),
]

# =============================================================================
# 2. Regressive Schedule (tabela regressiva de previdencia, Lei 11.053/2004)
# =============================================================================
# (min_years, max_years, rate). Upper bounds are inclusive ("igual ou inferior").
REGRESSIVE_SCHEDULE: List[Tuple[float, float, float]] = [
    (0,  2,      0.35),
    (2,  4,      0.30),
    (4,  6,      0.25),
    (6,  8,      0.20),
    (8,  10,     0.15),
    (10, np.inf, 0.10),
]
REGRESSIVE_FLOOR_RATE = 0.10

# Legacy "optimistic" regime assumes the schedule floor is always reached
OPTIMISTIC_EXIT_RATE = REGRESSIVE_FLOOR_RATE

# =============================================================================
# 3. Deduction Cap and Excise Thresholds
# =============================================================================
# PGBL deductibility cap: 12% of taxable income
PGBL_DEDUCTIBLE_CAP = 0.12

# IOF on VGBL contributions exceeding R$600k/year (Decreto 12.499/2025)
IOF_VGBL_THRESHOLD = 600_000.0
IOF_VGBL_RATE = 0.05
