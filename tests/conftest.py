from __future__ import annotations

import pytest

from fakes import FakeDriver
from naukri_agent.events import RunState
from naukri_agent.sites import get_site


@pytest.fixture
def site():
    return get_site("naukri")


@pytest.fixture
def state():
    return RunState()


@pytest.fixture
def driver():
    return FakeDriver()
