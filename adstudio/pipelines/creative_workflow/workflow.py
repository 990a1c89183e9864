"""
Creative Workflow - three-step state machine for creative generation.

    PRODUCT_INPUT --generate_candidates--> COPYWRITING_SELECTION
    COPYWRITING_SELECTION --confirm_copywriting--> CREATIVE_CONFIG
    CREATIVE_CONFIG --start_creative--> (task started, step unchanged)
    go_back() moves one step backward, start_over() resets.

Guards run before any request. A failed request leaves the collected data
and the current step untouched, records the error on the state and
re-raises.

Every backend call runs as its own asyncio.Task. Starting a new transition
cancels one that is still pending, and cancel() aborts it explicitly. The
results of cancelled or superseded calls are never applied; the transition
returns None instead.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Iterable, List, Optional, Tuple, Union

from ...core.exceptions import AdStudioError, WorkflowValidationError
from ...core.models import (
    ConfirmCopywritingRequest,
    CopywritingCandidates,
    LanguageOption,
    StartCreativeRequest,
    TaskData,
)
from ...services.creative_options import CreativeOption
from ...services.creative_service import CreativeService
from ...services.override_resolver import (
    ContentSource,
    cta_source,
    resolve_cta,
    resolve_selling_points,
    selling_points_source,
)
from .state import GenerationTask, WorkflowStep

logger = logging.getLogger(__name__)

_SUPERSEDED = object()


@dataclass
class WorkflowSummary:
    """What the workflow would currently submit."""
    step: WorkflowStep
    product_name: str
    language: str
    cta: str
    selling_points: List[str] = field(default_factory=list)
    cta_source: ContentSource = ContentSource.EMPTY
    selling_points_source: ContentSource = ContentSource.EMPTY
    product_image_url: Optional[str] = None
    style: Optional[str] = None
    num_variants: int = 0
    formats: List[str] = field(default_factory=list)

    @property
    def cta_pending(self) -> bool:
        return not self.cta

    @property
    def selling_points_pending(self) -> bool:
        return not self.selling_points


class CreativeWorkflow:
    """
    Drives one GenerationTask through the creative generation steps.

    Example:
        workflow = CreativeWorkflow(CreativeService(client))
        await workflow.generate_candidates("Smart Watch Pro")
        workflow.set_selected_selling_points([0, 1])
        await workflow.confirm_copywriting()
        workflow.set_num_variants(2)
        task = await workflow.start_creative()
    """

    def __init__(self, creative_service: CreativeService, task: Optional[GenerationTask] = None):
        self.creative_service = creative_service
        self.task = task or GenerationTask()
        self._pending: Optional[asyncio.Task] = None

    @property
    def step(self) -> WorkflowStep:
        return self.task.step

    @property
    def is_busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    # =========================================================================
    # Request lifecycle
    # =========================================================================

    def cancel(self) -> bool:
        """
        Abort the pending request, if any. Its result will not be applied.

        Returns:
            True if a pending request was cancelled
        """
        pending, self._pending = self._pending, None
        if pending is None or pending.done():
            return False
        pending.cancel()
        logger.info("Cancelled pending workflow request")
        return True

    async def _call(self, name: str, awaitable: Awaitable[Any]) -> Any:
        """
        Run one backend call as the single pending request.

        Returns the call's result, or _SUPERSEDED when it was cancelled or
        replaced by a newer call before its result could be applied.
        Cancelling the caller cancels the request and propagates.
        """
        if self.cancel():
            logger.warning(f"{name} superseded a pending request")

        call = asyncio.ensure_future(awaitable)
        self._pending = call
        try:
            await asyncio.wait({call})
        except asyncio.CancelledError:
            call.cancel()
            if self._pending is call:
                self._pending = None
            raise

        if call.cancelled() or self._pending is not call:
            if not call.cancelled():
                call.exception()  # retrieved so asyncio does not report it
            logger.warning(f"Ignoring result of {name}: request was cancelled or superseded")
            return _SUPERSEDED

        self._pending = None
        return call.result()

    async def _transition(self, name: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await self._call(name, awaitable)
        except AdStudioError as e:
            self.task.record_error(str(e))
            logger.error(f"{name} failed at step {self.task.step.name}: {e}")
            raise

    # =========================================================================
    # Transitions
    # =========================================================================

    async def generate_candidates(
        self,
        product_name: Optional[str] = None,
        language: Optional[Union[LanguageOption, str]] = None,
    ) -> Optional[CopywritingCandidates]:
        """
        Step 1 -> 2: generate CTA and selling point candidates.

        Args:
            product_name: Product name (defaults to the one already entered)
            language: "auto", "zh" or "en" (defaults to the current choice)

        Returns:
            The candidates, or None when the request was superseded

        Raises:
            WorkflowValidationError: past COPYWRITING_SELECTION, empty product
                name or unsupported language (no request is made)
        """
        if self.task.step > WorkflowStep.COPYWRITING_SELECTION:
            raise WorkflowValidationError(
                f"Cannot generate candidates at step {self.task.step.name}; go back first"
            )
        name = (self.task.product_name if product_name is None else product_name).strip()
        if not name:
            raise WorkflowValidationError("Product name is required")
        try:
            lang = LanguageOption(language or self.task.language).value
        except ValueError:
            raise WorkflowValidationError(f"Unsupported language: {language!r}") from None

        candidates = await self._transition(
            "generate_candidates",
            self.creative_service.generate_copywriting(name, lang),
        )
        if candidates is _SUPERSEDED:
            return None

        task = self.task
        task.product_name = name
        task.language = lang
        task.candidates = candidates
        task.task_id = candidates.task_id
        task.selected_cta_index = 0
        task.selected_sp_indexes = [0] if candidates.selling_point_candidates else []
        task.edited_cta = None
        task.edited_sps = []
        task.clear_error()
        task.step = WorkflowStep.COPYWRITING_SELECTION

        logger.info(
            f"Task {task.task_id}: {len(candidates.cta_candidates)} CTA and "
            f"{len(candidates.selling_point_candidates)} selling point candidates for '{name}'"
        )
        return candidates

    async def confirm_copywriting(self) -> Optional[TaskData]:
        """
        Step 2 -> 3: confirm the chosen/edited copy.

        Raises:
            WorkflowValidationError: not at COPYWRITING_SELECTION, or neither
                a selling point is selected nor one is typed in
        """
        task = self.task
        self._require_step(WorkflowStep.COPYWRITING_SELECTION, "confirm copywriting")
        if not task.has_selling_points:
            raise WorkflowValidationError("Select or enter at least one selling point")

        request = ConfirmCopywritingRequest(
            task_id=task.task_id,
            selected_cta_index=task.selected_cta_index,
            selected_sp_indexes=list(task.selected_sp_indexes),
            edited_cta=task.edited_cta or None,
            edited_sps=list(task.edited_sps) or None,
            product_image_url=task.config.product_image_url or None,
            style=task.config.style or None,
            num_variants=task.config.num_variants,
            formats=list(task.config.formats),
        )
        result = await self._transition(
            "confirm_copywriting", self.creative_service.confirm_copywriting(request)
        )
        if result is _SUPERSEDED:
            return None

        task.clear_error()
        task.step = WorkflowStep.CREATIVE_CONFIG
        logger.info(f"Task {task.task_id}: copywriting confirmed")
        return result

    async def start_creative(self) -> Optional[TaskData]:
        """
        Start image generation with the step-3 configuration.

        The step does not change; the started task is kept on the state
        until start_over().
        """
        task = self.task
        self._require_step(WorkflowStep.CREATIVE_CONFIG, "start creative generation")
        config = task.config

        request = StartCreativeRequest(
            task_id=task.task_id,
            product_image_url=config.product_image_url or None,
            style=config.style or None,
            num_variants=config.num_variants,
            formats=list(config.formats),
            variant_configs=config.effective_variant_configs(),
        )
        started = await self._transition(
            "start_creative", self.creative_service.start_creative(request)
        )
        if started is _SUPERSEDED:
            return None

        task.started = started
        task.clear_error()
        logger.info(f"Task {started.task_id}: creative generation started")
        return started

    def go_back(self) -> WorkflowStep:
        """Move exactly one step backward, keeping everything entered so far."""
        previous = self.task.step.previous
        if previous is None:
            raise WorkflowValidationError("Already at the first step")
        self.cancel()
        self.task.step = previous
        logger.info(f"Workflow moved back to {previous.name}")
        return previous

    def start_over(self) -> None:
        self.cancel()
        self.task = GenerationTask()
        logger.info("Workflow reset")

    def _require_step(self, step: WorkflowStep, action: str) -> None:
        if self.task.step is not step or self.task.candidates is None:
            raise WorkflowValidationError(
                f"Cannot {action} at step {self.task.step.name}"
            )

    # =========================================================================
    # Step 2 selections and edits
    # =========================================================================

    def _check_index(self, index: int, values: List[str], what: str) -> int:
        if self.task.candidates is None:
            raise WorkflowValidationError("No copywriting candidates yet")
        if not 0 <= index < len(values):
            raise WorkflowValidationError(f"{what} index {index} out of range (0-{len(values) - 1})")
        return index

    def select_cta(self, index: int) -> None:
        self.task.selected_cta_index = self._check_index(index, self.task.cta_candidates, "CTA")

    def toggle_selling_point(self, index: int) -> List[int]:
        """Select or deselect a candidate selling point."""
        self._check_index(index, self.task.selling_point_candidates, "Selling point")
        selected = self.task.selected_sp_indexes
        if index in selected:
            self.task.selected_sp_indexes = [i for i in selected if i != index]
        else:
            self.task.selected_sp_indexes = selected + [index]
        return list(self.task.selected_sp_indexes)

    def set_selected_selling_points(self, indexes: Iterable[int]) -> None:
        chosen: List[int] = []
        for index in indexes:
            self._check_index(index, self.task.selling_point_candidates, "Selling point")
            if index not in chosen:
                chosen.append(index)
        self.task.selected_sp_indexes = chosen

    def edit_cta(self, text: Optional[str]) -> None:
        """Free-text CTA; empty text clears the edit."""
        self.task.edited_cta = (text or "").strip() or None

    def edit_selling_points(self, lines: Union[str, Iterable[str], None]) -> List[str]:
        """Free-text selling points, one per line. Blank lines are dropped."""
        if lines is None:
            lines = []
        elif isinstance(lines, str):
            lines = lines.splitlines()
        self.task.edited_sps = [line.strip() for line in lines if line and line.strip()]
        return list(self.task.edited_sps)

    # =========================================================================
    # Step 3 configuration
    # =========================================================================

    def configure(
        self,
        product_image_url: Optional[str] = None,
        style: Optional[str] = None,
        formats: Optional[List[str]] = None,
        num_variants: Optional[int] = None,
    ) -> None:
        """Update image settings. None leaves a field unchanged, "" clears it."""
        config = self.task.config
        if product_image_url is not None:
            config.product_image_url = product_image_url.strip() or None
        if style is not None:
            config.style = style.strip() or None
        if formats is not None:
            config.formats = [f for f in formats if f]
        if num_variants is not None:
            self.set_num_variants(num_variants)

    def set_num_variants(self, count: int) -> None:
        if count < 1:
            raise WorkflowValidationError(f"Variant count must be at least 1, got {count}")
        self.task.config.resize_variants(count)

    def update_variant_config(
        self,
        index: int,
        style: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> None:
        configs = self.task.config.variant_configs
        if not 0 <= index < len(configs):
            raise WorkflowValidationError(f"Variant index {index} out of range (0-{len(configs) - 1})")
        update = {}
        if style is not None:
            update["style"] = style.strip() or None
        if prompt is not None:
            update["prompt"] = prompt.strip() or None
        configs[index] = configs[index].model_copy(update=update)

    # =========================================================================
    # Views
    # =========================================================================

    def summary(self) -> WorkflowSummary:
        """Effective CTA/selling points; edited values take precedence over selections."""
        task = self.task
        selected_cta = task.selected_cta
        selected_points = task.selected_selling_points
        return WorkflowSummary(
            step=task.step,
            product_name=task.product_name,
            language=task.language,
            cta=resolve_cta(task.edited_cta, selected_cta),
            selling_points=resolve_selling_points(task.edited_sps, selected_points),
            cta_source=cta_source(task.edited_cta, selected_cta),
            selling_points_source=selling_points_source(task.edited_sps, selected_points),
            product_image_url=task.config.product_image_url,
            style=task.config.style,
            num_variants=task.config.num_variants,
            formats=list(task.config.formats),
        )

    async def load_creative_options(self) -> Tuple[List[str], List[CreativeOption]]:
        """Product names and creative options (cached reads, not a transition)."""
        return await self.creative_service.load_creative_options()
