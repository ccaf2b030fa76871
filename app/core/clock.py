"""Reference date for dashboards and reports.

Routes take ``today`` through the ``Today`` dependency instead of calling
``date.today()`` directly, so tests can pin the calendar with
``app.dependency_overrides[get_today]``.
"""

from datetime import date
from typing import Annotated

from fastapi import Depends


def get_today() -> date:
    """Return the current local date."""
    return date.today()


Today = Annotated[date, Depends(get_today)]
