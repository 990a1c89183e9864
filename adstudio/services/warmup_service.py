"""
WarmupService - Backend warmup status and manual runs.

The warmup endpoints are often reached through a proxy that answers with
the dashboard's index.html, so both go through
ApiClient.request_with_fallback. Their bodies also come in several shapes
(bare stats, an envelope, a JSON string, a bare {message}); all of them are
normalized into ApiResponse[WarmupStats].
"""

import json
import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from ..core.exceptions import ApiError
from ..core.models import ApiResponse, WarmupStats
from .api_client import ApiClient

logger = logging.getLogger(__name__)

INVALID_RESPONSE_MESSAGE = "Invalid warmup response"
STATS_KEYS = ("runs", "recent")


def _extract_stats(value: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(value, Mapping) and any(key in value for key in STATS_KEYS):
        return value
    return None


def _code(raw: Any) -> int:
    if raw is None:
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        return -1


class WarmupService:
    """Service for /warmup/status and /warmup/run."""

    def __init__(self, client: ApiClient):
        self.client = client

    @staticmethod
    def normalize_response(payload: Any) -> ApiResponse[WarmupStats]:
        """
        Coerce any warmup body into an envelope.

        Rules, first match wins:
            1. A string is parsed as JSON and normalized again; a string that
               is not JSON becomes {code: -1, message: <the string>}
            2. Bare stats (a "runs" or "recent" key) -> {code: 0, data}
            3. An object whose "data" holds stats -> its code (default 0),
               data and message
            4. An object with a "message" -> {code: -1, message}
            5. Anything else -> {code: -1, message: "Invalid warmup response"}

        Example:
            >>> WarmupService.normalize_response({"runs": 3, "successes": 3}).data.runs
            3
        """
        if isinstance(payload, str):
            try:
                parsed = json.loads(payload)
            except ValueError:
                return ApiResponse[WarmupStats](code=-1, message=payload)
            return WarmupService.normalize_response(parsed)

        try:
            direct = _extract_stats(payload)
            if direct is not None:
                return ApiResponse[WarmupStats](code=0, data=WarmupStats.model_validate(direct))

            if isinstance(payload, Mapping) and "data" in payload:
                stats = _extract_stats(payload["data"])
                if stats is not None:
                    return ApiResponse[WarmupStats](
                        code=_code(payload.get("code")),
                        message=payload.get("message"),
                        data=WarmupStats.model_validate(stats),
                    )
        except ValidationError as e:
            logger.warning(f"Warmup stats did not validate: {e.error_count()} errors")
            return ApiResponse[WarmupStats](code=-1, message=INVALID_RESPONSE_MESSAGE)

        if isinstance(payload, Mapping) and "message" in payload:
            message = payload.get("message")
            return ApiResponse[WarmupStats](code=-1, message=str(message) if message is not None else None)

        return ApiResponse[WarmupStats](code=-1, message=INVALID_RESPONSE_MESSAGE)

    @staticmethod
    def _stats_or_raise(response: ApiResponse[WarmupStats], endpoint: str) -> WarmupStats:
        if not response.ok or response.data is None:
            raise ApiError(response.code, response.message, endpoint=endpoint)
        return response.data

    async def status(self) -> WarmupStats:
        """Current warmup statistics (not cached)."""
        payload = await self.client.request_with_fallback("GET", "/warmup/status")
        return self._stats_or_raise(self.normalize_response(payload), "/warmup/status")

    async def run(self) -> WarmupStats:
        """Trigger a warmup run and return the updated statistics."""
        logger.info("Triggering warmup run")
        try:
            payload = await self.client.request_with_fallback("POST", "/warmup/run")
        finally:
            self.client.cache.invalidate_all()
        stats = self._stats_or_raise(self.normalize_response(payload), "/warmup/run")
        logger.info(f"Warmup run done: {stats.successes}/{stats.runs} successful runs")
        return stats
