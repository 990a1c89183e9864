"""
MetricsAggregator - Comparative statistics for experiment variants.

Turns raw per-variant impression/click counters into:
- totals and the pooled average CTR
- the best performing variant (highest CTR, first one wins ties)
- each variant's deviation from the average

Provides pure functions with no side effects. Zero impressions always
yield a CTR of 0.0, never NaN or a ZeroDivisionError.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

import numpy as np
from pydantic import TypeAdapter, ValidationError

from ..core.models import CreativeId, VariantMetrics

VariantInput = Union[VariantMetrics, Mapping[str, Any]]

_DATETIME = TypeAdapter(datetime)


class DeviationSign(str, Enum):
    ABOVE = "above"
    BELOW = "below"


@dataclass(frozen=True)
class Deviation:
    """Distance of a variant's CTR from the average CTR."""
    sign: DeviationSign
    magnitude: float

    @property
    def percent(self) -> float:
        """Magnitude in percentage points."""
        return self.magnitude * 100

    def describe(self) -> str:
        return f"{self.sign.value} average by {self.percent:.2f}%"


@dataclass
class MetricsSummary:
    impressions: int
    clicks: int
    avg_ctr: float
    best: VariantMetrics


@dataclass
class VariantRow:
    """One row of the experiment-detail table."""
    creative_id: CreativeId
    impressions: int
    clicks: int
    ctr: float
    deviation: Deviation
    is_best: bool


def _coerce(variant: VariantInput) -> VariantMetrics:
    if isinstance(variant, VariantMetrics):
        return variant
    return VariantMetrics.model_validate(variant)


def _best_index(ctrs: np.ndarray) -> int:
    # np.argmax returns the first maximal index
    return int(np.argmax(ctrs))


class MetricsAggregator:
    """
    Experiment metrics calculations.

    Example:
        >>> summary = MetricsAggregator.summarize([
        ...     VariantMetrics(creative_id=1, impressions=100, clicks=10),
        ...     VariantMetrics(creative_id=2, impressions=50, clicks=10),
        ... ])
        >>> summary.best.creative_id
        2
    """

    @staticmethod
    def variant_ctr(impressions: int, clicks: int) -> float:
        """clicks / impressions, or 0.0 without impressions."""
        if impressions <= 0:
            return 0.0
        return clicks / impressions

    @staticmethod
    def effective_ctr(variant: VariantInput) -> float:
        """Server-reported CTR when present, otherwise computed from counters."""
        metrics = _coerce(variant)
        if metrics.ctr is not None:
            return float(metrics.ctr)
        return MetricsAggregator.variant_ctr(metrics.impressions, metrics.clicks)

    @staticmethod
    def summarize(variants: Sequence[VariantInput]) -> Optional[MetricsSummary]:
        """
        Reduce variants to totals, average CTR and the best variant.

        Args:
            variants: Per-variant counters

        Returns:
            MetricsSummary, or None for an empty list

        Example:
            >>> s = MetricsAggregator.summarize([
            ...     {"creative_id": 1, "impressions": 100, "clicks": 10},
            ...     {"creative_id": 2, "impressions": 50, "clicks": 10},
            ... ])
            >>> round(s.avg_ctr, 4)
            0.1333
        """
        if not variants:
            return None

        metrics = [_coerce(v) for v in variants]
        impressions = np.array([m.impressions for m in metrics], dtype=np.int64)
        clicks = np.array([m.clicks for m in metrics], dtype=np.int64)
        ctrs = np.array([MetricsAggregator.effective_ctr(m) for m in metrics], dtype=float)

        total_impressions = int(impressions.sum())
        total_clicks = int(clicks.sum())

        best_index = _best_index(ctrs)

        return MetricsSummary(
            impressions=total_impressions,
            clicks=total_clicks,
            avg_ctr=MetricsAggregator.variant_ctr(total_impressions, total_clicks),
            best=metrics[best_index],
        )

    @staticmethod
    def deviation(variant: VariantInput, avg_ctr: float) -> Deviation:
        """
        Signed distance from the average CTR.

        A variant exactly at the average counts as above.
        """
        ctr = MetricsAggregator.effective_ctr(variant)
        sign = DeviationSign.ABOVE if ctr >= avg_ctr else DeviationSign.BELOW
        return Deviation(sign=sign, magnitude=abs(ctr - avg_ctr))

    @staticmethod
    def annotate(variants: Sequence[VariantInput]) -> List[VariantRow]:
        """Rows with CTR, deviation and best-variant flag, in input order."""
        summary = MetricsAggregator.summarize(variants)
        if summary is None:
            return []

        metrics_list = [_coerce(v) for v in variants]
        ctrs = [MetricsAggregator.effective_ctr(m) for m in metrics_list]
        best_index = _best_index(np.array(ctrs, dtype=float))

        rows = []
        for index, (metrics, ctr) in enumerate(zip(metrics_list, ctrs)):
            rows.append(VariantRow(
                creative_id=metrics.creative_id,
                impressions=metrics.impressions,
                clicks=metrics.clicks,
                ctr=ctr,
                deviation=MetricsAggregator.deviation(metrics, summary.avg_ctr),
                is_best=index == best_index,
            ))
        return rows


def _parse_time(value: Union[str, datetime, None]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        parsed = _DATETIME.validate_python(value)
    except ValidationError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_duration(
    start: Union[str, datetime, None],
    end: Union[str, datetime, None] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Running time of an experiment.

    A missing end means "still running" and is measured up to now.

    Examples:
        "3d 4h", "5h 12m", "42m"; "-" when start is missing or unparseable.
    """
    start_at = _parse_time(start)
    if start_at is None:
        return "-"
    if end is None or end == "":
        end_at = now or datetime.now(timezone.utc)
        if end_at.tzinfo is None:
            end_at = end_at.replace(tzinfo=timezone.utc)
    else:
        end_at = _parse_time(end)
        if end_at is None:
            return "-"

    total_minutes = max(0, int((end_at - start_at).total_seconds() // 60))
    hours, minutes = divmod(total_minutes, 60)
    if hours >= 24:
        days, hours = divmod(hours, 24)
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
