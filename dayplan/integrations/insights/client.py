"""Client for the external insight-generation API.

Sends a day's reconciliation statistics, per-task statistics and the raw plan
and actual calendars, and returns the service's free-text insights. Any
failure (network error, timeout, non-2xx, malformed JSON) yields a fixed
fallback message instead. Calls are never retried.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

import httpx
from loguru import logger

from dayplan.calendar.intervals import TimeInterval
from dayplan.config.settings import settings
from dayplan.metrics.daily_statistics import DailyStatistics, TaskStats
from dayplan.services.stats_service import StatsService


def fallback_insights(day: date | None = None) -> str:
    """Message returned whenever the insight API cannot be used."""
    message = (
        "AI API is currently unavailable. "
        "Please check your connection or configure the API endpoint. "
    )
    if day is not None:
        message += f"Date: {day.isoformat()}"
    return message


def build_request_body(
    day: date,
    stats: DailyStatistics,
    task_stats: Mapping[int, TaskStats],
    plan_blocks: Sequence[TimeInterval] | None,
    actual_sessions: Sequence[TimeInterval] | None,
) -> dict[str, Any]:
    """Build the JSON payload sent to the insight API.

    Calendar entries are rendered as "HH:MM-HH:MM: label" lines; task stats
    are keyed by the task id as a string.
    """
    return {
        "date": day.isoformat(),
        "plannedMinutes": stats.planned_minutes,
        "actualMinutes": stats.actual_minutes,
        "overlapMinutes": stats.overlap_minutes,
        "quantitativeAccuracy": stats.quantitative_accuracy,
        "temporalAccuracy": stats.temporal_accuracy,
        "planCalendar": [block.calendar_line() for block in plan_blocks or ()],
        "actualCalendar": [session.calendar_line() for session in actual_sessions or ()],
        "tasks": {
            str(task_id): {
                "plannedMinutes": task.planned_minutes,
                "actualMinutes": task.actual_minutes,
                "overlapMinutes": task.overlap_minutes,
            }
            for task_id, task in task_stats.items()
        },
    }


def _extract_insights(payload: Any, raw_text: str) -> str:
    if isinstance(payload, dict):
        if "insights" in payload:
            return str(payload["insights"])
        if "recommendations" in payload:
            return str(payload["recommendations"])
        return json.dumps(payload)
    return raw_text


class InsightsClient:
    """Client for fetching insights and recommendations for a day."""

    def __init__(
        self,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize insights client.

        Args:
            api_url: Insight endpoint. If not provided, reads from settings.
            timeout: Request timeout in seconds. If not provided, reads from settings.
            transport: Optional httpx transport (used by tests to mock the API)
        """
        self.api_url = api_url or settings.insights_api_url
        self.timeout = timeout if timeout is not None else settings.insights_timeout_seconds
        self._transport = transport

    def send(self, body: Mapping[str, Any]) -> str | None:
        """POST the payload and return the insight text, or None on failure."""
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.api_url, json=body)
                response.raise_for_status()
                raw_text = response.text
                payload = response.json()
        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.warning(f"[INSIGHTS] request to {self.api_url} failed: {e}")
            return None
        return _extract_insights(payload, raw_text)

    def generate_insights(self, day: date, stats_service: StatsService) -> str:
        """Compute the day's statistics and ask the API for insights.

        Only the HTTP exchange falls back; record-store errors propagate.

        Returns:
            Insight text from the API, or the fallback message when the API
            cannot be used
        """
        body = build_request_body(
            day,
            stats_service.compute_daily_stats(day),
            stats_service.compute_task_stats(day),
            stats_service.get_plan_blocks(day),
            stats_service.get_actual_sessions(day),
        )

        insights = self.send(body)
        if insights is None:
            return fallback_insights(day)
        logger.info(f"[INSIGHTS] received insights for date={day} chars={len(insights)}")
        return insights
