import pytest

from cwkey.timers import ManualScheduler


@pytest.fixture
def sched():
    return ManualScheduler()


@pytest.fixture
def out():
    return []
