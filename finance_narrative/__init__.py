"""Top-level package for the household finance narrative.

The primary modules are:

* ``ledger`` – loading the transaction ledger into an immutable store
* ``series`` – balance, savings, projection and counterfactual series
* ``scenario`` – the what-if state machine the UI drives
* ``visualization`` – functions that generate Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run finance_narrative/dashboard.py
```
"""

from . import breakdown  # noqa: F401  # re-exported for convenience
from . import ledger  # noqa: F401  # re-exported for convenience
from . import scenario  # noqa: F401  # re-exported for convenience
from . import series  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
# Streamlit may not be installed in every environment (e.g. a headless
# batch job).  If the import fails, ``dashboard`` is ``None``.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["breakdown", "ledger", "scenario", "series", "visualization", "dashboard"]
