"""
Tests for the command line interface.
"""

import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

import groomslot.cli.app as cli_app
from groomslot.cli.app import app

runner = CliRunner()

CONFIG = """
timezone: America/Sao_Paulo
calendar:
  open_hour: 9
  close_hour: 18
  working_weekdays: [1, 2, 3, 4, 5, 6]
  slot_interval_minutes: 30
  minimum_lead_minutes: 30
max_offered_slots: 12
bookings_file: bookings.json
services:
  - id: 1
    name: Banho
    duration_minutes: 60
    price: 50.0
"""

FRIDAY_NOON = "2024-11-22 12:00"


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Render rich output wide enough that titles and rows are not wrapped."""
    monkeypatch.setattr(cli_app, "console", Console(width=120))


@pytest.fixture
def config_path(tmp_path):
    (tmp_path / "bookings.json").write_text(
        json.dumps(
            [{"id": "1", "start": "2024-11-25 10:00", "end": "2024-11-25 11:00", "status": "confirmed"}]
        ),
        encoding="utf-8",
    )
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


def _saved_bookings(config_path):
    return json.loads((config_path.parent / "bookings.json").read_text(encoding="utf-8"))


class TestSlotsCommand:
    def test_lists_free_slots(self, config_path):
        result = runner.invoke(
            app, ["slots", "2024-11-25", "--service", "1", "-c", str(config_path), "--now", FRIDAY_NOON]
        )

        assert result.exit_code == 0
        assert "09:00" in result.output
        assert "11:00" in result.output
        assert "10:30" not in result.output

    def test_explains_closed_day(self, config_path):
        result = runner.invoke(
            app, ["slots", "2024-11-24", "--service", "1", "-c", str(config_path), "--now", FRIDAY_NOON]
        )

        assert result.exit_code == 0
        assert "closed" in result.output
        assert "2024-11-25" in result.output

    def test_unknown_service(self, config_path):
        result = runner.invoke(
            app, ["slots", "2024-11-25", "--service", "9", "-c", str(config_path), "--now", FRIDAY_NOON]
        )

        assert result.exit_code == 1
        assert "Unknown service id" in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(
            app, ["slots", "2024-11-25", "--service", "1", "-c", str(tmp_path / "missing.yaml")]
        )

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestBookCommand:
    def test_books_and_saves(self, config_path):
        result = runner.invoke(
            app,
            ["book", "2024-11-25", "09:00", "--service", "1", "--pet", "rex", "-c", str(config_path), "--now", FRIDAY_NOON],
        )

        assert result.exit_code == 0
        assert "Booking confirmed" in result.output
        saved = _saved_bookings(config_path)
        assert len(saved) == 2
        assert saved[0]["pet_id"] == "rex"

    def test_taken_slot_asks_for_another_time(self, config_path):
        result = runner.invoke(
            app,
            ["book", "2024-11-25", "10:00", "--service", "1", "-c", str(config_path), "--now", FRIDAY_NOON],
        )

        assert result.exit_code == 1
        assert "pick another time" in result.output
        assert len(_saved_bookings(config_path)) == 1

    def test_invalid_time(self, config_path):
        result = runner.invoke(
            app,
            ["book", "2024-11-25", "9h", "--service", "1", "-c", str(config_path), "--now", FRIDAY_NOON],
        )

        assert result.exit_code != 0


class TestCheckCommand:
    def test_touching_interval_is_available(self, config_path):
        result = runner.invoke(
            app, ["check", "2024-11-25 09:30", "2024-11-25 10:00", "-c", str(config_path)]
        )

        assert result.exit_code == 0
        assert "Available" in result.output

    def test_overlapping_interval(self, config_path):
        result = runner.invoke(
            app, ["check", "2024-11-25 09:30", "2024-11-25 10:01", "-c", str(config_path)]
        )

        assert result.exit_code == 0
        assert "Not available" in result.output

    def test_inverted_interval(self, config_path):
        result = runner.invoke(
            app, ["check", "2024-11-25 11:00", "2024-11-25 10:00", "-c", str(config_path)]
        )

        assert result.exit_code == 1


class TestRescheduleCommands:
    def test_can_reschedule(self, config_path):
        allowed = runner.invoke(app, ["can-reschedule", "1", "-c", str(config_path), "--now", FRIDAY_NOON])
        refused = runner.invoke(
            app, ["can-reschedule", "1", "-c", str(config_path), "--now", "2024-11-25 09:00"]
        )

        assert "can be rescheduled" in allowed.output
        assert "can no longer be rescheduled" in refused.output

    def test_reschedule_moves_booking(self, config_path):
        result = runner.invoke(
            app, ["reschedule", "1", "2024-11-26", "14:00", "-c", str(config_path), "--now", FRIDAY_NOON]
        )

        assert result.exit_code == 0
        assert _saved_bookings(config_path)[0]["start"].startswith("2024-11-26T14:00")

    def test_reschedule_lists_options(self, config_path):
        result = runner.invoke(
            app, ["reschedule", "1", "2024-11-26", "-c", str(config_path), "--now", FRIDAY_NOON]
        )

        assert result.exit_code == 0
        assert "Reschedule options on 26.11.2024" in result.output
        assert "09:00" in result.output
        assert "17:00" in result.output

    def test_cancel(self, config_path):
        result = runner.invoke(app, ["cancel", "1", "-c", str(config_path)])

        assert result.exit_code == 0
        assert _saved_bookings(config_path)[0]["status"] == "cancelled"


class TestInfoCommands:
    def test_services(self, config_path):
        result = runner.invoke(app, ["services", "-c", str(config_path)])

        assert result.exit_code == 0
        assert "Banho" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
