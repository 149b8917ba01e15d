"""
Tests for the Typer command-line interface (mock calendar only).
"""

import json
from pathlib import Path

import pendulum
import pytest
from typer.testing import CliRunner

from slotbooker import __version__
from slotbooker.cli.app import app

runner = CliRunner()

TZ = "Asia/Seoul"


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "schedule:\n"
        f"  timezone: {TZ}\n"
        "  working_days: [0, 1, 2, 3, 4]\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def next_monday() -> pendulum.DateTime:
    return pendulum.now(TZ).next(pendulum.MONDAY)


def _run(*args: str):
    return runner.invoke(app, list(args))


class TestDatesCommand:
    def test_lists_bookable_dates_without_credentials(self, config_path, monkeypatch):
        monkeypatch.delenv("GOOGLE_CALENDAR_CLIENT_EMAIL", raising=False)
        monkeypatch.delenv("GOOGLE_CALENDAR_PRIVATE_KEY", raising=False)
        first_date = pendulum.today(TZ).add(days=1)
        while first_date.day_of_week not in range(5):
            first_date = first_date.add(days=1)

        result = _run("dates", "--config", str(config_path))

        assert result.exit_code == 0, result.output
        assert "Bookable dates" in result.output
        assert first_date.to_date_string() in result.output

    def test_missing_config_fails(self, tmp_path):
        result = _run("dates", "--config", str(tmp_path / "missing.yaml"))

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestSlotsCommand:
    def test_weekend_has_no_slots(self, config_path, next_monday):
        saturday = next_monday.subtract(days=2).to_date_string()

        result = _run("slots", saturday, "--mock", "--config", str(config_path))

        assert result.exit_code == 0, result.output
        assert "No slots" in result.output

    def test_shows_busy_and_free_slots(self, config_path, next_monday, tmp_path):
        mock_data = tmp_path / "events.json"
        mock_data.write_text(json.dumps([
            {
                "id": "lunch",
                "start": next_monday.set(hour=12).to_iso8601_string(),
                "end": next_monday.set(hour=13).to_iso8601_string(),
            }
        ]), encoding="utf-8")

        result = _run(
            "slots", next_monday.to_date_string(),
            "--mock", "--mock-data", str(mock_data),
            "--config", str(config_path),
        )

        assert result.exit_code == 0, result.output
        assert "free" in result.output
        assert "unavailable" in result.output

    def test_invalid_date(self, config_path):
        result = _run("slots", "25.11.2024", "--mock", "--config", str(config_path))

        assert result.exit_code == 1
        assert "Could not parse date" in result.output


class TestBookCommand:
    def test_books_slot(self, config_path, next_monday):
        start = next_monday.set(hour=10, minute=0)

        result = _run(
            "book",
            "--name", "Jane Doe",
            "--email", "jane@example.com",
            "--start", start.format("YYYY-MM-DD[T]HH:mm"),
            "--end", start.add(minutes=30).format("YYYY-MM-DD[T]HH:mm"),
            "--company", "Acme",
            "--mock",
            "--config", str(config_path),
        )

        assert result.exit_code == 0, result.output
        assert "Booking confirmed" in result.output
        assert "mock-1" in result.output
        assert start.format("DD.MM.YYYY HH:mm") in result.output

    def test_end_before_start_is_rejected(self, config_path):
        result = _run(
            "book",
            "--name", "Jane Doe",
            "--email", "jane@example.com",
            "--start", "2030-01-07T11:00",
            "--end", "2030-01-07T10:30",
            "--mock",
            "--config", str(config_path),
        )

        assert result.exit_code == 1
        assert "must be before" in result.output

    def test_unparsable_time_is_rejected(self, config_path):
        result = _run(
            "book",
            "--name", "Jane Doe",
            "--email", "jane@example.com",
            "--start", "tomorrow morning",
            "--end", "2030-01-07T10:30",
            "--mock",
            "--config", str(config_path),
        )

        assert result.exit_code == 1
        assert "Could not parse" in result.output


class TestCancelCommand:
    def test_cancel_seeded_event(self, config_path, next_monday, tmp_path):
        mock_data = tmp_path / "events.json"
        mock_data.write_text(json.dumps([
            {
                "id": "evt-42",
                "start": next_monday.set(hour=10).to_iso8601_string(),
                "end": next_monday.set(hour=10, minute=30).to_iso8601_string(),
            }
        ]), encoding="utf-8")

        result = _run("cancel", "evt-42", "--mock", "--mock-data", str(mock_data), "--config", str(config_path))

        assert result.exit_code == 0, result.output
        assert "cancelled" in result.output

    def test_cancel_unknown_event_fails(self, config_path):
        result = _run("cancel", "evt-404", "--mock", "--config", str(config_path))

        assert result.exit_code == 1
        assert "Could not cancel" in result.output


class TestOtherCommands:
    def test_version(self):
        result = _run("version")

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_test_auth_without_credentials(self, config_path, monkeypatch):
        monkeypatch.delenv("GOOGLE_CALENDAR_CLIENT_EMAIL", raising=False)
        monkeypatch.delenv("GOOGLE_CALENDAR_PRIVATE_KEY", raising=False)

        result = _run("test-auth", "--config", str(config_path))

        assert result.exit_code == 1
        assert "No service-account credentials" in result.output
