"""
TraceService - Read-only access to model call traces.
"""

import logging
from typing import Optional

from ..core.models import TraceItem, TraceList
from .api_client import ApiClient, path_segment

logger = logging.getLogger(__name__)


class TraceService:
    """Service for /model_traces (cached reads only)."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def list(
        self,
        page: int = 1,
        page_size: int = 20,
        status: Optional[str] = None,
        model_name: Optional[str] = None,
        trace_id: Optional[str] = None,
        product_name: Optional[str] = None,
    ) -> TraceList:
        """
        List traces, newest first as ordered by the server.

        Unset filters are not sent.
        """
        params = {
            "page": page,
            "page_size": page_size,
            "status": status,
            "model_name": model_name,
            "trace_id": trace_id,
            "product_name": product_name,
        }
        return await self.client.get("/model_traces", TraceList, params=params)

    async def detail(self, trace_id: str) -> TraceItem:
        return await self.client.get(f"/model_traces/{path_segment(trace_id)}", TraceItem)
