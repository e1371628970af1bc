"""
AI collaborator: goal breakdown and daily inspiration.

Both calls go to a Gemini-style ``generateContent`` REST endpoint over
httpx and are best-effort. Any failure (no API key, HTTP error, timeout,
malformed response, open circuit) is logged and replaced by a safe
default: an empty list for a breakdown, a fallback sentence for the
inspiration. Nothing here raises to the caller.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from metaplan.config.settings import Settings
from metaplan.core.goals import BreakdownItem
from metaplan.lib.circuit_breaker import CircuitBreaker
from metaplan.lib.exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)

BREAKDOWN_TASK_COUNT = 4
DEFAULT_VALUES_CONTEXT = "I value growth and deep focus."
EMPTY_INSPIRATION = "Today's focus builds tomorrow's success."
FAILED_INSPIRATION = "May today shine a little brighter than yesterday."

BREAKDOWN_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "task": {"type": "STRING", "description": "An actionable task"},
            "priority": {"type": "STRING", "description": "Priority (A, B or C)"},
        },
        "required": ["task", "priority"],
    },
}


def build_breakdown_prompt(goal_text: str) -> str:
    return (
        f'Goal: "{goal_text}". Split this goal into {BREAKDOWN_TASK_COUNT} concrete, '
        "actionable tasks and return them as JSON."
    )


def build_inspiration_prompt(values: list[str]) -> str:
    context = (
        f"My core values: {', '.join(values)}." if values else DEFAULT_VALUES_CONTEXT
    )
    return (
        f"{context} Write one short, powerful, inspiring sentence that helps "
        "me stay focused today."
    )


def _response_text(body: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = body["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        raise ExternalServiceError("Response has no candidate content") from e
    return "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))


def parse_breakdown(text: str) -> list[BreakdownItem]:
    """
    Parse the JSON array returned for a breakdown.

    Entries that are not objects or have no task text are dropped; the
    priority is passed through as-is (coerced later, defaulting to A).
    """
    try:
        raw = json.loads(text or "[]")
    except json.JSONDecodeError as e:
        raise ExternalServiceError("Breakdown response is not valid JSON") from e
    if not isinstance(raw, list):
        raise ExternalServiceError("Breakdown response is not a JSON array")

    items: list[BreakdownItem] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        task = str(entry.get("task") or "").strip()
        if not task:
            continue
        priority = entry.get("priority")
        items.append(BreakdownItem(task=task, priority=str(priority) if priority else None))
    return items


class PlanningAssistant:
    """
    Client for the two AI endpoints.

    Args:
        api_key: API key; None disables all calls (defaults returned).
        base_url: API root up to ``/v1beta``.
        breakdown_model / inspiration_model: Model names per endpoint.
        timeout: Request timeout in seconds.
        client: Optional httpx.AsyncClient (tests inject a MockTransport).
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        breakdown_model: str,
        inspiration_model: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._breakdown_model = breakdown_model
        self._inspiration_model = inspiration_model
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._breakdown_breaker = CircuitBreaker(name="ai.breakdown")
        self._inspiration_breaker = CircuitBreaker(name="ai.inspiration")

    @classmethod
    def from_settings(cls, settings: Settings) -> PlanningAssistant:
        return cls(
            api_key=settings.ai_api_key,
            base_url=settings.ai_base_url,
            breakdown_model=settings.ai_breakdown_model,
            inspiration_model=settings.ai_inspiration_model,
            timeout=settings.ai_timeout_seconds,
        )

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def _generate(
        self,
        model: str,
        prompt: str,
        breaker: CircuitBreaker,
        generation_config: dict[str, Any] | None = None,
    ) -> str:
        if not self._api_key:
            raise ExternalServiceError("AI collaborator has no API key configured")

        body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if generation_config:
            body["generationConfig"] = generation_config

        async with breaker:
            try:
                response = await self._client.post(
                    f"{self._base_url}/models/{model}:generateContent",
                    headers={"x-goog-api-key": self._api_key},
                    json=body,
                )
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, json.JSONDecodeError) as e:
                raise ExternalServiceError(f"{model} request failed: {e}") from e
        return _response_text(payload)

    async def breakdown_goal(self, goal_text: str) -> list[BreakdownItem]:
        """Suggest actionable tasks for a goal; [] on any failure."""
        try:
            text = await self._generate(
                self._breakdown_model,
                build_breakdown_prompt(goal_text),
                self._breakdown_breaker,
                {"responseMimeType": "application/json", "responseSchema": BREAKDOWN_SCHEMA},
            )
            items = parse_breakdown(text)
        except ExternalServiceError as e:
            logger.warning("ai_breakdown_failed", error=str(e))
            return []
        logger.info("ai_breakdown_succeeded", count=len(items))
        return items

    async def daily_inspiration(self, values: list[str]) -> str:
        """One short quote shaped by the user's core values."""
        try:
            text = await self._generate(
                self._inspiration_model,
                build_inspiration_prompt(values),
                self._inspiration_breaker,
            )
        except ExternalServiceError as e:
            logger.warning("ai_inspiration_failed", error=str(e))
            return FAILED_INSPIRATION
        cleaned = text.replace('"', "").strip()
        return cleaned or EMPTY_INSPIRATION

    async def aclose(self) -> None:
        await self._client.aclose()
