from itertools import count

import pytest

from gassi.config.rule_config import load_rule_config
from gassi.models.event import Event
from gassi.models.settings import Settings
from gassi.tests.helpers import NOW


@pytest.fixture
def cfg():
    return load_rule_config()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_event():
    ids = count(1)

    def _make(type_, time, **kw):
        return Event(id=kw.pop("id", f"ev{next(ids)}"), type=type_, time=time, **kw)

    return _make
