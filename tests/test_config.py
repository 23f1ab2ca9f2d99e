"""
Tests for configuration loading.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from groomslot.config import AppConfig, CalendarConfig

VALID_CONFIG = """
timezone: America/Sao_Paulo
calendar:
  open_hour: 8
  close_hour: 17
  working_weekdays: [6, 1, 2, 2]
  slot_interval_minutes: 15
  minimum_lead_minutes: 60
reschedule_notice_hours: 12
bookings_file: data/bookings.json
services:
  - id: 1
    name: Banho
    duration_minutes: 60
    price: 50
"""


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAppConfig:
    """Tests for AppConfig."""

    def test_load_valid_config(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, VALID_CONFIG))

        assert config.calendar.working_weekdays == [1, 2, 6]
        assert config.reschedule_notice() == timedelta(hours=12)
        assert config.bookings_file == tmp_path / "data" / "bookings.json"

    def test_to_business_calendar(self, tmp_path):
        calendar = AppConfig.load_from_yaml(_write(tmp_path, VALID_CONFIG)).to_business_calendar()

        assert calendar.open_hour == 8
        assert calendar.close_hour == 17
        assert calendar.working_weekdays == frozenset({1, 2, 6})
        assert calendar.slot_interval_minutes == 15
        assert calendar.minimum_lead_minutes == 60
        assert calendar.timezone == "America/Sao_Paulo"

    def test_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, ""))

        assert config.calendar.open_hour == 9
        assert config.calendar.close_hour == 18
        assert config.calendar.working_weekdays == [1, 2, 3, 4, 5, 6]
        assert config.max_offered_slots == 12
        assert config.bookings_file is None

    def test_service_specs(self, tmp_path):
        specs = AppConfig.load_from_yaml(_write(tmp_path, VALID_CONFIG)).service_specs()

        assert specs[0].id == 1
        assert specs[0].duration_minutes == 60
        assert specs[0].price == 50.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="config.example.yaml"):
            AppConfig.load_from_yaml(tmp_path / "config.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "calendar: [unclosed"))

    def test_root_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(_write(tmp_path, "- 1\n- 2\n"))

    def test_duplicate_service_ids(self):
        with pytest.raises(ValidationError, match="Duplicate service id"):
            AppConfig(
                services=[
                    {"id": 1, "name": "Banho", "duration_minutes": 60},
                    {"id": 1, "name": "Tosa", "duration_minutes": 30},
                ]
            )

    def test_non_positive_service_duration(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            AppConfig(services=[{"id": 1, "name": "Banho", "duration_minutes": 0}])


class TestCalendarConfig:
    """Tests for CalendarConfig validation."""

    def test_close_must_follow_open(self):
        with pytest.raises(ValidationError, match="close_hour must be later than open_hour"):
            CalendarConfig(open_hour=18, close_hour=9)

    @pytest.mark.parametrize("field,value", [("open_hour", 24), ("close_hour", 0), ("close_hour", 25)])
    def test_hour_ranges(self, field, value):
        with pytest.raises(ValidationError):
            CalendarConfig(**{field: value})

    def test_invalid_weekday(self):
        with pytest.raises(ValidationError, match="between 0 and 6"):
            CalendarConfig(working_weekdays=[1, 7])

    def test_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            CalendarConfig(slot_interval_minutes=0)

    def test_closing_at_midnight_is_allowed(self):
        assert CalendarConfig(open_hour=14, close_hour=24).close_hour == 24
