# =============================================================================
# Market Info used in simulations
# =============================================================================

# Current SELIC target (% p.a.). Update when Copom changes the target rate.
# Last updated: Feb 2026 (Copom decision Jan 2026, 5th consecutive hold at 15%)
SELIC_RATE = 0.15

# Default expected nominal return for both paths (tracks SELIC)
default_expected_return = SELIC_RATE

# Capital gains tax on the taxable comparison investment (long-term fixed income)
default_capital_gains_tax = 0.15

# Refund arrives with the annual declaration, roughly 9 months after year end
default_refund_delay_years = 0.75

# Ranges accepted by the input adapter
max_horizon_years = 30
min_horizon_years = 1
max_refund_delay_years = 1.5
