"""
CreativeService - Copywriting, creative generation and task endpoints.

Part of the Service Layer - wraps /copywriting/* and /creative/* endpoints,
returns typed models and raises ApiError/TransportError on failure.
Reads are cached by the ApiClient; every write invalidates the cache.
"""

import asyncio
import logging
from typing import List, Optional, Tuple, Union

from tenacity import AsyncRetrying, retry_if_result, stop_after_delay, wait_fixed

from ..core.config import Config
from ..core.models import (
    AssetList,
    ConfirmCopywritingRequest,
    CopywritingCandidates,
    DeleteTaskResult,
    GenerateCopywritingRequest,
    GenerateRequest,
    LanguageOption,
    StartCreativeRequest,
    TaskData,
    TaskDetail,
    TaskList,
    dump_request,
)
from .api_client import ApiClient, path_segment
from .creative_options import CreativeOption, build_creative_options, product_names

logger = logging.getLogger(__name__)


class CreativeService:
    """Service for the creative generation backend."""

    def __init__(self, client: ApiClient):
        self.client = client

    # =========================================================================
    # Copywriting
    # =========================================================================

    async def generate_copywriting(
        self,
        product_name: str,
        language: Optional[Union[LanguageOption, str]] = None,
    ) -> CopywritingCandidates:
        """
        Generate CTA and selling point candidates for a product.

        Args:
            product_name: Product name (sent trimmed)
            language: "auto", "zh" or "en"

        Returns:
            CopywritingCandidates with the new task_id
        """
        request = GenerateCopywritingRequest(
            product_name=product_name.strip(),
            language=LanguageOption(language) if language else None,
        )
        logger.info(f"Generating copywriting for product '{request.product_name}'")
        return await self.client.write(
            "POST", "/copywriting/generate", dump_request(request), CopywritingCandidates
        )

    async def confirm_copywriting(self, request: ConfirmCopywritingRequest) -> Optional[TaskData]:
        """Confirm the chosen CTA/selling points for a task."""
        logger.info(
            f"Confirming copywriting for task {request.task_id}: "
            f"cta_index={request.selected_cta_index}, sp_indexes={request.selected_sp_indexes}"
        )
        data = await self.client.write("POST", "/copywriting/confirm", dump_request(request))
        return TaskData.model_validate(data) if data else None

    # =========================================================================
    # Creative generation
    # =========================================================================

    async def start_creative(self, request: StartCreativeRequest) -> TaskData:
        """Start image generation for a confirmed task."""
        logger.info(
            f"Starting creative generation for task {request.task_id} "
            f"({request.num_variants} variants, formats={request.formats})"
        )
        return await self.client.write("POST", "/creative/start", dump_request(request), TaskData)

    async def generate(self, request: GenerateRequest) -> TaskData:
        """Legacy single-shot generation without the copywriting step."""
        logger.info(f"Legacy generation for '{request.title}'")
        return await self.client.write("POST", "/creative/generate", dump_request(request), TaskData)

    # =========================================================================
    # Tasks
    # =========================================================================

    async def get_task(self, task_id: str, fresh: bool = False) -> TaskDetail:
        """
        Task detail.

        Args:
            task_id: Task id
            fresh: Skip the cached copy (used while polling progress)
        """
        path = f"/creative/task/{path_segment(task_id)}"
        if fresh:
            return await self.client.get_fresh(path, TaskDetail)
        return await self.client.get(path, TaskDetail)

    async def list_tasks(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        status: Optional[str] = None,
    ) -> TaskList:
        params = {"page": page, "page_size": page_size or Config.DEFAULT_PAGE_SIZE, "status": status}
        return await self.client.get("/creative/tasks", TaskList, params=params)

    async def delete_task(self, task_id: str) -> DeleteTaskResult:
        logger.info(f"Deleting task {task_id}")
        return await self.client.write(
            "DELETE", f"/creative/task/{path_segment(task_id)}", model=DeleteTaskResult
        )

    async def wait_for_task(
        self,
        task_id: str,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
    ) -> TaskDetail:
        """
        Poll a task until it completes, fails or is cancelled.

        Errors are not retried: the first TransportError/ApiError ends the
        poll. When the timeout elapses the last seen (non-terminal) detail
        is returned.
        """
        timeout = Config.TASK_POLL_TIMEOUT_SECONDS if timeout is None else timeout
        interval = Config.TASK_POLL_INTERVAL_SECONDS if interval is None else interval

        def _give_up(retry_state) -> TaskDetail:
            detail = retry_state.outcome.result()
            logger.warning(
                f"Task {task_id} still {detail.status.value} after {timeout}s "
                f"({detail.progress}% done)"
            )
            return detail

        retrying = AsyncRetrying(
            retry=retry_if_result(lambda detail: not detail.status.is_terminal),
            stop=stop_after_delay(timeout),
            wait=wait_fixed(interval),
            retry_error_callback=_give_up,
        )
        detail = await retrying(self.get_task, task_id, fresh=True)
        logger.info(f"Task {task_id} finished polling with status {detail.status.value}")
        return detail

    # =========================================================================
    # Assets
    # =========================================================================

    async def list_assets(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        format: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> AssetList:
        params = {
            "page": page,
            "page_size": page_size or Config.DEFAULT_PAGE_SIZE,
            "format": format,
            "task_id": task_id,
        }
        return await self.client.get("/creative/assets", AssetList, params=params)

    async def load_creative_options(
        self,
        page_size: Optional[int] = None,
    ) -> Tuple[List[str], List[CreativeOption]]:
        """
        Product names and creative options for experiment pickers.

        Tasks and assets are fetched concurrently (both cached reads).

        Returns:
            (product_names, options)
        """
        tasks, assets = await asyncio.gather(
            self.list_tasks(page=1, page_size=page_size),
            self.list_assets(page=1, page_size=page_size),
        )
        return product_names(tasks.tasks), build_creative_options(tasks.tasks, assets.assets)
