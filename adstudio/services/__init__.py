"""
Services layer for AdStudio.

Provides clean separation between transport (ApiClient + RequestCache),
resource endpoints (CreativeService, ExperimentService, TraceService,
WarmupService) and pure calculations (override resolver, MetricsAggregator).
"""

from .request_cache import RequestCache, CacheStats
from .api_client import ApiClient
from .override_resolver import (
    ContentSource,
    ResolvedContent,
    cta_choices,
    resolve_cta,
    resolve_selling_points,
    resolve_variant,
    selling_point_choices,
)
from .metrics_service import Deviation, DeviationSign, MetricsAggregator, MetricsSummary, format_duration
from .creative_options import CreativeOption, build_creative_options, defaults_for, filter_by_product
from .creative_service import CreativeService
from .experiment_service import ExperimentReport, ExperimentService, validate_draft
from .trace_service import TraceService
from .warmup_service import WarmupService

__all__ = [
    'RequestCache',
    'CacheStats',
    'ApiClient',
    'ContentSource',
    'ResolvedContent',
    'cta_choices',
    'resolve_cta',
    'resolve_selling_points',
    'resolve_variant',
    'selling_point_choices',
    'Deviation',
    'DeviationSign',
    'MetricsAggregator',
    'MetricsSummary',
    'format_duration',
    'CreativeOption',
    'build_creative_options',
    'defaults_for',
    'filter_by_product',
    'CreativeService',
    'ExperimentReport',
    'ExperimentService',
    'validate_draft',
    'TraceService',
    'WarmupService',
]
