"""
Tests for the tripdesk CLI

Tests cover:
- JSON output of every command
- Human-readable rendering
- Snapshot resolution from options and config
- Error reporting
"""

import json
import logging

import pytest
from click.testing import CliRunner

from tripdesk import __version__
from tripdesk.cli import cli


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every command away from any real config and restore root logging."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TRIPDESK_CONFIG", raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


def invoke_json(runner, *args):
    result = runner.invoke(cli, ["--json", "--log-level", "ERROR", *args], obj={})
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestVersion:
    """Tests for the version command."""

    def test_version_json(self, runner):
        data = invoke_json(runner, "version")
        assert data["name"] == "tripdesk"
        assert data["version"] == __version__

    def test_version_text(self, runner):
        result = runner.invoke(cli, ["version"], obj={})
        assert result.exit_code == 0
        assert __version__ in result.output


class TestCalendarCommand:
    """Tests for the calendar command."""

    def test_month_json(self, runner, snapshot_file):
        data = invoke_json(runner, "calendar", "--date", "2024-06-10", "--snapshot", str(snapshot_file))
        assert data["state"]["granularity"] == "month"
        assert len(data["days"]) == 42
        day = next(d for d in data["days"] if d["date"] == "2024-06-10")
        assert [e["title"] for e in day["events"]][0] == "Submit expense report"
        assert len(data["segments"]) == 1

    def test_filters(self, runner, snapshot_file):
        data = invoke_json(
            runner, "calendar", "--date", "2024-06-10", "--view", "day",
            "--kind", "itinerary", "--assignee", "alex", "--snapshot", str(snapshot_file)
        )
        assert data["state"]["kind"] == "itinerary"
        assert [e["title"] for e in data["days"][0]["events"]] == ["Flight to Frankfurt", "Hotel Frankfurter Hof"]

    @pytest.mark.parametrize("view", ["day", "week", "month", "year"])
    def test_text_views(self, runner, snapshot_file, view):
        result = runner.invoke(
            cli, ["calendar", "--date", "2024-06-10", "--view", view, "--snapshot", str(snapshot_file)], obj={}
        )
        assert result.exit_code == 0, result.output
        assert "June" in result.output or "Jun" in result.output

    def test_day_view_hour_rows(self, runner, snapshot_file):
        """Test that the day view groups by hour and puts untimed tasks at 09:00."""
        result = runner.invoke(
            cli, ["calendar", "--date", "2024-06-10", "--view", "day", "--snapshot", str(snapshot_file)], obj={}
        )
        assert result.exit_code == 0, result.output
        output = result.output
        assert output.index("09:00") < output.index("Submit expense report") < output.index("11:40 Flight")
        assert "(Jun 10-Jun 13, 3 nights)" in output

    def test_summary_counts(self, runner, snapshot_file):
        result = runner.invoke(
            cli, ["calendar", "--date", "2024-06-10", "--kind", "itinerary", "--snapshot", str(snapshot_file)], obj={}
        )
        assert result.exit_code == 0, result.output
        assert "Travel Items: 2" in result.output
        assert "Appointments: 0" in result.output
        assert "Unconfirmed: 1" in result.output

    def test_summary_counts_json(self, runner, snapshot_file):
        data = invoke_json(
            runner, "calendar", "--date", "2024-06-10", "--assignee", "alex", "--snapshot", str(snapshot_file)
        )
        assert data["stats"] == {"itinerary": 2, "appointments": 0, "tasks": 1, "pending": 1}

    def test_snapshot_from_config(self, runner, snapshot_file, write_config):
        config = write_config(f"sources:\n  snapshot: {snapshot_file.name}\n", name="custom.yaml")
        data = invoke_json(runner, "--config", str(config), "calendar", "--date", "2024-06-10", "--view", "week")
        assert len(data["days"]) == 7

    def test_missing_snapshot_is_usage_error(self, runner):
        result = runner.invoke(cli, ["calendar"], obj={})
        assert result.exit_code == 2
        assert "--snapshot" in result.output

    def test_unreadable_snapshot(self, runner, tmp_path):
        result = runner.invoke(cli, ["calendar", "--snapshot", str(tmp_path / "none.json")], obj={})
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_bad_config_file(self, runner, write_config):
        config = write_config("alerts:\n  domestic_band: [5]\n", name="bad.yaml")
        result = runner.invoke(cli, ["--config", str(config), "version"], obj={})
        assert result.exit_code == 1
        assert "domestic_band" in result.output


class TestAlertsCommand:
    """Tests for the alerts command."""

    def test_alerts_json(self, runner, snapshot_file):
        data = invoke_json(runner, "alerts", "--now", "2024-06-10T10:00", "--snapshot", str(snapshot_file))
        assert data["now"] == "2024-06-10T10:00:00"
        assert [a["kind"] for a in data["alerts"]] == ["pre_departure_reminder"]
        assert data["alerts"][0]["minutes"] == 100

    def test_no_alerts(self, runner, snapshot_file):
        result = runner.invoke(
            cli, ["alerts", "--now", "2024-06-10 06:00", "--snapshot", str(snapshot_file)], obj={}
        )
        assert result.exit_code == 0
        assert "No alerts" in result.output

    def test_alerts_text(self, runner, snapshot_file):
        result = runner.invoke(
            cli, ["alerts", "--now", "2024-06-10T10:00", "--snapshot", str(snapshot_file)], obj={}
        )
        assert result.exit_code == 0
        assert "HIGH" in result.output


class TestDashboardCommand:
    """Tests for the dashboard command."""

    def test_dashboard_json(self, runner, snapshot_file):
        data = invoke_json(runner, "dashboard", "--now", "2024-06-10T10:00", "--snapshot", str(snapshot_file))
        assert data["counts"] == {"tasks_today": 1, "appointments_today": 1, "itinerary_today": 2}
        assert [c["status"] for c in data["countdowns"]] == ["imminent"]
        assert len(data["upcoming_itinerary"]) == 2

    def test_dashboard_uses_config(self, runner, snapshot_file, write_config):
        config = write_config("dashboard:\n  upcoming_limit: 1\n", name="dash.yaml")
        data = invoke_json(
            runner, "--config", str(config), "dashboard", "--now", "2024-06-10T10:00",
            "--snapshot", str(snapshot_file)
        )
        assert len(data["upcoming_itinerary"]) == 1

    def test_dashboard_text(self, runner, snapshot_file):
        result = runner.invoke(
            cli, ["dashboard", "--now", "2024-06-10T10:00", "--snapshot", str(snapshot_file)], obj={}
        )
        assert result.exit_code == 0, result.output
        assert "Travel Dashboard" in result.output


class TestWatchCommand:
    """Tests for the watch command."""

    def test_watch_bounded(self, runner, snapshot_file):
        result = runner.invoke(
            cli,
            ["--json", "--log-level", "ERROR", "watch", "--interval", "0", "--cycles", "2",
             "--snapshot", str(snapshot_file)],
            obj={},
        )
        assert result.exit_code == 0, result.output
        lines = [json.loads(line) for line in result.stdout.splitlines() if line.strip()]
        assert len(lines) == 2
        assert all("alerts" in line for line in lines)
