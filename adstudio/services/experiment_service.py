"""
ExperimentService - A/B experiment endpoints.

- Draft validation and payload building (effective CTA/selling points per
  variant come from the override resolver)
- Status changes, impression/click recording
- Metrics with comparative statistics from MetricsAggregator

Traffic splitting happens server-side; assign() only reads its result.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..core.exceptions import WorkflowValidationError
from ..core.models import (
    CreativeId,
    ExperimentAssignment,
    ExperimentCreated,
    ExperimentList,
    ExperimentMetrics,
    ExperimentStatus,
    ExperimentVariant,
)
from .api_client import ApiClient, path_segment
from .creative_options import CreativeOption, defaults_for
from .metrics_service import MetricsAggregator, MetricsSummary, VariantRow
from .override_resolver import ResolvedContent, resolve_variant

logger = logging.getLogger(__name__)

DEFAULT_LIST_PAGE_SIZE = 50


@dataclass
class ExperimentReport:
    """Metrics of one experiment with comparative statistics."""
    metrics: ExperimentMetrics
    summary: Optional[MetricsSummary]
    rows: List[VariantRow] = field(default_factory=list)


def validate_draft(name: str, variants: Sequence[ExperimentVariant]) -> List[str]:
    """
    Check an experiment draft before submission.

    Raises:
        WorkflowValidationError: empty name, no variants, or a variant
            without a creative

    Returns:
        Warnings that do not block submission (non-positive weights).
        The weight sum is left to the server.
    """
    if not name or not name.strip():
        raise WorkflowValidationError("Experiment name is required")
    if not variants:
        raise WorkflowValidationError("An experiment needs at least one variant")

    warnings = []
    for index, variant in enumerate(variants, start=1):
        if variant.creative_id is None or str(variant.creative_id).strip() == "":
            raise WorkflowValidationError(f"Variant {index} has no creative selected")
        if variant.weight <= 0:
            warnings.append(f"Variant {index} ({variant.creative_id}) has weight {variant.weight}")
    return warnings


def build_variant_payload(
    variant: ExperimentVariant,
    options: Iterable[CreativeOption] = (),
) -> Dict[str, Any]:
    """Wire form of a variant carrying its effective content."""
    resolved = resolve_variant(variant, defaults_for(options, variant.creative_id))
    submitted = variant.model_copy(update={
        "cta_override": resolved.cta or None,
        "selling_points_override": resolved.selling_points or None,
    })
    return submitted.model_dump(mode="json", exclude_none=True, by_alias=True)


class ExperimentService:
    """Service for experiments and their metrics."""

    def __init__(self, client: ApiClient):
        self.client = client

    # =========================================================================
    # CRUD
    # =========================================================================

    @staticmethod
    def build_payload(
        name: str,
        variants: Sequence[ExperimentVariant],
        product_name: Optional[str] = None,
        options: Iterable[CreativeOption] = (),
    ) -> Dict[str, Any]:
        """Validated POST /experiments body. Weight warnings are logged."""
        for warning in validate_draft(name, variants):
            logger.warning(f"Experiment '{name.strip()}': {warning}")

        options = list(options)
        payload = {
            "name": name.strip(),
            "product_name": (product_name or "").strip() or None,
            "variants": [build_variant_payload(v, options) for v in variants],
        }
        return {k: v for k, v in payload.items() if v is not None}

    async def create(
        self,
        name: str,
        variants: Sequence[ExperimentVariant],
        product_name: Optional[str] = None,
        options: Iterable[CreativeOption] = (),
    ) -> ExperimentCreated:
        """
        Create an experiment.

        Args:
            name: Experiment name (trimmed)
            variants: Variants with optional CTA/selling point overrides
            product_name: Product the experiment belongs to
            options: Creative options used to resolve each variant's defaults

        Returns:
            ExperimentCreated with the new experiment_id
        """
        payload = self.build_payload(name, variants, product_name, options)
        created = await self.client.write("POST", "/experiments", payload, ExperimentCreated)
        logger.info(f"Created experiment {created.experiment_id} with {len(variants)} variants")
        return created

    async def list(
        self,
        page: int = 1,
        page_size: int = DEFAULT_LIST_PAGE_SIZE,
        status: Optional[str] = None,
    ) -> ExperimentList:
        params = {"page": page, "page_size": page_size, "status": status}
        return await self.client.get("/experiments", ExperimentList, params=params)

    async def update_status(self, experiment_id: str, status: Union[ExperimentStatus, str]) -> Any:
        status_value = status.value if isinstance(status, ExperimentStatus) else status
        logger.info(f"Setting experiment {experiment_id} status to {status_value}")
        return await self.client.write(
            "POST", f"/experiments/{path_segment(experiment_id)}/status", {"status": status_value}
        )

    async def activate(self, experiment_id: str) -> Any:
        return await self.update_status(experiment_id, ExperimentStatus.ACTIVE)

    async def archive(self, experiment_id: str) -> Any:
        return await self.update_status(experiment_id, ExperimentStatus.ARCHIVED)

    # =========================================================================
    # Serving and tracking
    # =========================================================================

    async def assign(self, experiment_id: str, user_key: Optional[str] = None) -> ExperimentAssignment:
        """Variant the server assigns to user_key (cached per user key)."""
        return await self.client.get(
            f"/experiments/{path_segment(experiment_id)}/assign",
            ExperimentAssignment,
            params={"user_key": user_key},
        )

    async def hit(self, experiment_id: str, creative_id: CreativeId) -> Any:
        """Record an impression."""
        return await self.client.write(
            "POST", f"/experiments/{path_segment(experiment_id)}/hit", {"creative_id": creative_id}
        )

    async def click(self, experiment_id: str, creative_id: CreativeId) -> Any:
        """Record a click."""
        return await self.client.write(
            "POST", f"/experiments/{path_segment(experiment_id)}/click", {"creative_id": creative_id}
        )

    # =========================================================================
    # Metrics
    # =========================================================================

    async def metrics(self, experiment_id: str) -> ExperimentMetrics:
        return await self.client.get(
            f"/experiments/{path_segment(experiment_id)}/metrics", ExperimentMetrics
        )

    async def report(self, experiment_id: str) -> ExperimentReport:
        """Metrics plus totals, average CTR, best variant and per-row deviation."""
        metrics = await self.metrics(experiment_id)
        return ExperimentReport(
            metrics=metrics,
            summary=MetricsAggregator.summarize(metrics.variants),
            rows=MetricsAggregator.annotate(metrics.variants),
        )

    # =========================================================================
    # Display
    # =========================================================================

    @staticmethod
    def variant_content(
        variant: ExperimentVariant,
        options: Iterable[CreativeOption] = (),
    ) -> ResolvedContent:
        """Effective CTA/selling points shown for a variant."""
        return resolve_variant(variant, defaults_for(options, variant.creative_id))
