import os
import sys
from datetime import date, timedelta

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.services.chat_store import chat_store
from servicehub.services.marketplace_store import marketplace_store
from servicehub.services.notification_store import notification_store


@pytest.fixture(autouse=True)
def reset_stores():
    marketplace_store.reset()
    notification_store.reset()
    chat_store.reset()
    yield


@pytest.fixture
def open_day() -> date:
    """A bookable day a few days out that is not a Sunday."""
    day = date.today() + timedelta(days=3)
    while day.weekday() == 6:
        day += timedelta(days=1)
    return day
