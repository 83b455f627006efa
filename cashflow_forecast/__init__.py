"""Top-level package for the cash-flow forecaster.

The forecast engine projects an account balance six weeks forward from a
set of recurring income and expense items.  The primary modules are:

* ``recurrence`` – decides whether an item falls due inside a week window
* ``forecast`` – builds the week-by-week ledger and tracks the forecast cycle
* ``parsers`` / ``csv_import`` – coerce untyped stored or imported values
* ``summary`` – monthly-equivalent totals and the action plan
* ``profile_storage`` – the JSON profile store the dashboard saves into
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run cashflow_forecast/dashboard.py
```
"""

from .forecast import build_forecast, forecast_for_state  # noqa: F401  # re-exported for convenience
from .models import ForecastState, Occurrence, RecurringItem, WeekSummary  # noqa: F401
from .recurrence import occurrence_in_week  # noqa: F401
from .summary import monthly_equivalent  # noqa: F401


__all__ = [
    "build_forecast",
    "forecast_for_state",
    "occurrence_in_week",
    "monthly_equivalent",
    "ForecastState",
    "Occurrence",
    "RecurringItem",
    "WeekSummary",
]
