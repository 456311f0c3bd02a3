"""Tests for the dayplan CLI against an in-memory database."""

import sys

import httpx
import pytest
from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typer.testing import CliRunner

import dayplan.cli.main as cli_main
import dayplan.db.session as db_session_module
from dayplan.cli.main import app
from dayplan.integrations.insights.client import InsightsClient

DAY = "2025-02-17"

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_database(use_test_database):
    yield use_test_database
    # The CLI callback binds loguru to the runner's captured stderr
    logger.remove()
    logger.add(sys.stderr)


def _invoke(*args: str):
    return runner.invoke(app, list(args))


class TestPlanCommands:
    def test_add_and_list(self):
        result = _invoke("plan", "add", DAY, "09:00", "10:00", "Deep work", "--category", "focus")
        assert result.exit_code == 0, result.output
        assert "Saved" in result.output

        result = _invoke("plan", "list", DAY)
        assert result.exit_code == 0
        assert "Deep work" in result.output
        assert "09:00 - 10:00" in result.output

    def test_overlap_exits_with_error(self):
        _invoke("plan", "add", DAY, "09:00", "10:00", "First")
        result = _invoke("plan", "add", DAY, "09:30", "10:30", "Second")
        assert result.exit_code == 1
        assert "overlaps with existing block: First" in result.output

    def test_end_before_start_rejected(self):
        result = _invoke("plan", "add", DAY, "10:00", "09:00", "Backwards")
        assert result.exit_code == 1
        assert "End time must be after start time" in result.output

    def test_bad_date_is_usage_error(self):
        result = _invoke("plan", "add", "17/02/2025", "09:00", "10:00", "x")
        assert result.exit_code == 2

    def test_delete_unknown_block(self):
        result = _invoke("plan", "delete", "42")
        assert result.exit_code == 1
        assert "not found" in result.output


class TestTrackCommands:
    def test_sessions_listed_separately_from_plan(self):
        _invoke("plan", "add", DAY, "09:00", "11:00", "Planned")
        result = _invoke("track", "add", DAY, "09:30", "10:30", "Tracked")
        assert result.exit_code == 0, result.output

        result = _invoke("track", "list", DAY)
        assert "Tracked" in result.output
        assert "Planned" not in result.output


class TestStatsAndInsights:
    def test_stats(self):
        _invoke("plan", "add", DAY, "09:00", "11:00", "Planned", "--task-id", "5")
        _invoke("track", "add", DAY, "09:30", "10:30", "Tracked", "--task-id", "5")

        result = _invoke("stats", DAY)
        assert result.exit_code == 0, result.output
        assert "120" in result.output
        assert "50%" in result.output
        assert "Per task" in result.output

    def test_stats_empty_day(self):
        result = _invoke("stats", DAY)
        assert result.exit_code == 0
        assert "0%" in result.output
        assert "Per task" not in result.output

    def test_insights_uses_api(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"insights": "Protect the morning block."})

        monkeypatch.setattr(
            cli_main,
            "InsightsClient",
            lambda: InsightsClient(api_url="http://insights.test", transport=httpx.MockTransport(handler)),
        )
        result = _invoke("insights", DAY)
        assert result.exit_code == 0, result.output
        assert "Protect the morning block." in result.output

    def test_insights_fallback_when_unreachable(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        monkeypatch.setattr(
            cli_main,
            "InsightsClient",
            lambda: InsightsClient(api_url="http://insights.test", transport=httpx.MockTransport(handler)),
        )
        result = _invoke("insights", DAY)
        assert result.exit_code == 0
        assert "AI API is currently unavailable." in result.output

    def test_insights_reports_database_errors(self, monkeypatch):
        """A broken record store is reported as such, not as an unavailable API."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"insights": "unused"})

        empty_engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        monkeypatch.setattr(db_session_module, "_engine", empty_engine)
        monkeypatch.setattr(db_session_module, "_SessionLocal", sessionmaker(bind=empty_engine))
        monkeypatch.setattr(
            cli_main,
            "InsightsClient",
            lambda: InsightsClient(api_url="http://insights.test", transport=httpx.MockTransport(handler)),
        )

        result = _invoke("insights", DAY)
        assert result.exit_code == 1
        assert "Could not read records for 2025-02-17" in result.output
        assert "AI API is currently unavailable." not in result.output
        assert requests == []


class TestUpdateCommands:
    def test_plan_block_can_move_over_its_own_position(self):
        _invoke("plan", "add", DAY, "09:00", "10:00", "Deep work")
        result = _invoke("plan", "update", "1", DAY, "09:30", "10:30", "Deep work")
        assert result.exit_code == 0, result.output
        assert "Updated" in result.output

        result = _invoke("plan", "list", DAY)
        assert "09:30 - 10:30" in result.output
        assert "09:00 - 10:00" not in result.output

    def test_plan_update_into_other_block_rejected(self):
        _invoke("plan", "add", DAY, "09:00", "10:00", "Keep")
        _invoke("plan", "add", DAY, "10:00", "11:00", "Move")
        result = _invoke("plan", "update", "2", DAY, "09:30", "10:30", "Move")
        assert result.exit_code == 1
        assert "overlaps with existing block: Keep" in result.output

    def test_update_unknown_session(self):
        result = _invoke("track", "update", "9", DAY, "09:00", "10:00", "Ghost")
        assert result.exit_code == 1
        assert "Session not found: id=9" in result.output

    def test_session_update(self):
        _invoke("track", "add", DAY, "13:00", "14:00", "Lunch")
        result = _invoke("track", "update", "1", DAY, "13:00", "13:45", "Short lunch")
        assert result.exit_code == 0, result.output

        result = _invoke("track", "list", DAY)
        assert "Short lunch" in result.output


class TestFolderCommands:
    def test_add_and_list_folders(self):
        assert _invoke("folder", "add", "Work").exit_code == 0
        result = _invoke("folder", "add", "Reports", "--parent", "1")
        assert result.exit_code == 0, result.output
        assert "Created folder" in result.output

        roots = _invoke("folder", "list")
        assert "Work" in roots.output
        assert "Reports" not in roots.output

        children = _invoke("folder", "list", "--parent", "1")
        assert "Reports" in children.output

    def test_unknown_parent_rejected(self):
        result = _invoke("folder", "add", "Orphan", "--parent", "5")
        assert result.exit_code == 1
        assert "Parent folder not found" in result.output

    def test_delete_non_empty_folder_refused(self):
        _invoke("folder", "add", "Work")
        _invoke("task", "add", "Write report", "--folder", "1")
        result = _invoke("folder", "delete", "1")
        assert result.exit_code == 1
        assert "Cannot delete folder" in result.output

    def test_delete_empty_folder(self):
        _invoke("folder", "add", "Empty")
        result = _invoke("folder", "delete", "1")
        assert result.exit_code == 0
        assert "Empty" not in _invoke("folder", "list").output


class TestTaskCommands:
    @pytest.fixture(autouse=True)
    def work_folder(self, cli_database):
        _invoke("folder", "add", "Work")

    def test_add_and_list(self):
        result = _invoke("task", "add", "Write report", "--folder", "1", "--priority", "high", "--deadline", "2025-02-20")
        assert result.exit_code == 0, result.output
        assert "Created task" in result.output

        result = _invoke("task", "list", "1")
        assert "Write report" in result.output
        assert "HIGH" in result.output
        assert "2025-02-20" in result.output

    def test_blank_title_rejected(self):
        result = _invoke("task", "add", "  ", "--folder", "1")
        assert result.exit_code == 1
        assert "Task title is required" in result.output

    def test_unknown_folder_rejected(self):
        result = _invoke("task", "add", "Lost", "--folder", "7")
        assert result.exit_code == 1
        assert "Task folder not found" in result.output

    def test_status_change(self):
        _invoke("task", "add", "Write report", "--folder", "1")
        result = _invoke("task", "status", "1", "done")
        assert result.exit_code == 0, result.output
        assert "DONE" in _invoke("task", "list", "1").output

    def test_unknown_status_is_usage_error(self):
        _invoke("task", "add", "Write report", "--folder", "1")
        assert _invoke("task", "status", "1", "ARCHIVED").exit_code == 2

    def test_status_of_unknown_task(self):
        result = _invoke("task", "status", "3", "DOING")
        assert result.exit_code == 1
        assert "Task not found" in result.output

    def test_delete(self):
        _invoke("task", "add", "Temp", "--folder", "1")
        assert _invoke("task", "delete", "1").exit_code == 0
        assert "Temp" not in _invoke("task", "list", "1").output
        assert _invoke("task", "delete", "1").exit_code == 1

    def test_linked_blocks_feed_per_task_stats(self):
        _invoke("task", "add", "Write report", "--folder", "1")
        _invoke("plan", "add", DAY, "10:00", "12:00", "Report", "--task-id", "1")
        _invoke("track", "add", DAY, "10:30", "11:30", "Report", "--task-id", "1")

        result = _invoke("stats", DAY)
        assert result.exit_code == 0, result.output
        assert "Per task" in result.output


class TestTodayCommands:
    @pytest.fixture(autouse=True)
    def three_tasks(self, cli_database):
        _invoke("folder", "add", "Work")
        for title in ("Alpha", "Bravo", "Charlie"):
            _invoke("task", "add", title, "--folder", "1")

    def _listed_titles(self) -> list[str]:
        output = _invoke("today", "list", DAY).output
        return sorted(("Alpha", "Bravo", "Charlie"), key=lambda t: output.find(t) if t in output else len(output) + 1)

    def test_add_and_reorder(self):
        for task_id in ("1", "2", "3"):
            result = _invoke("today", "add", task_id, DAY)
            assert result.exit_code == 0, result.output
        assert "position 3" in result.output
        assert self._listed_titles() == ["Alpha", "Bravo", "Charlie"]

        result = _invoke("today", "reorder", DAY, "3", "1", "2")
        assert result.exit_code == 0, result.output
        assert self._listed_titles() == ["Charlie", "Alpha", "Bravo"]

    def test_duplicate_rejected(self):
        _invoke("today", "add", "1", DAY)
        result = _invoke("today", "add", "1", DAY)
        assert result.exit_code == 1
        assert "already in Today list" in result.output

    def test_unknown_task_rejected(self):
        result = _invoke("today", "add", "99", DAY)
        assert result.exit_code == 1
        assert "Task not found: id=99" in result.output

    def test_remove(self):
        _invoke("today", "add", "2", DAY)
        assert _invoke("today", "remove", "2", DAY).exit_code == 0
        assert "Bravo" not in _invoke("today", "list", DAY).output
