"""
Shared fixtures for the scheduling tests.
"""

import pendulum
import pytest

from groomslot.domain.models import BusinessCalendar, ServiceSpec

TZ = "America/Sao_Paulo"


@pytest.fixture
def calendar() -> BusinessCalendar:
    return BusinessCalendar(
        open_hour=9,
        close_hour=18,
        working_weekdays=frozenset({1, 2, 3, 4, 5, 6}),
        slot_interval_minutes=30,
        minimum_lead_minutes=30,
        timezone=TZ,
    )


@pytest.fixture
def bath() -> ServiceSpec:
    return ServiceSpec(id=1, duration_minutes=60, name="Banho", price=50.0)


@pytest.fixture
def monday():
    return pendulum.date(2024, 11, 25)


@pytest.fixture
def sunday():
    return pendulum.date(2024, 11, 24)
