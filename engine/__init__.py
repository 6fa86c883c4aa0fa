# engine/__init__.py

# Expose the simulation entry points (used by the input adapter's callers)
from .simulator import run_simulation, derive_values, WrapperSimulator, ENGINE_VERSION

# Rate lookups are also useful on their own for form previews
from .tax_engine import marginal_rate, regressive_rate, best_exit_rate, estimate_xout
