"""
Tests for MetricsAggregator and duration formatting.
"""

from datetime import datetime, timezone

import pytest

from adstudio.core.models import VariantMetrics
from adstudio.services.metrics_service import (
    Deviation,
    DeviationSign,
    MetricsAggregator,
    format_duration,
)


TWO_VARIANTS = [
    {"creative_id": 1, "impressions": 100, "clicks": 10},
    {"creative_id": 2, "impressions": 50, "clicks": 10},
]


# =============================================================================
# CTR
# =============================================================================

class TestVariantCtr:

    def test_ratio(self):
        assert MetricsAggregator.variant_ctr(200, 5) == pytest.approx(0.025)

    def test_zero_impressions(self):
        assert MetricsAggregator.variant_ctr(0, 0) == 0.0

    def test_server_ctr_preferred(self):
        metrics = VariantMetrics(creative_id="a", impressions=100, clicks=10, ctr=0.5)
        assert MetricsAggregator.effective_ctr(metrics) == 0.5

    def test_computed_when_server_omits_ctr(self):
        assert MetricsAggregator.effective_ctr({"creative_id": "a", "impressions": 40, "clicks": 2}) == pytest.approx(0.05)


# =============================================================================
# Summary
# =============================================================================

class TestSummarize:

    def test_two_variant_example(self):
        summary = MetricsAggregator.summarize(TWO_VARIANTS)

        assert summary.impressions == 150
        assert summary.clicks == 20
        assert summary.avg_ctr == pytest.approx(0.13333, abs=1e-4)
        assert summary.best.creative_id == 2

    def test_empty_list(self):
        assert MetricsAggregator.summarize([]) is None

    def test_all_zero_impressions(self):
        summary = MetricsAggregator.summarize([
            {"creative_id": "a", "impressions": 0, "clicks": 0},
            {"creative_id": "b", "impressions": 0, "clicks": 0},
        ])

        assert summary.avg_ctr == 0.0
        assert summary.best.creative_id == "a"

    def test_tie_goes_to_first(self):
        summary = MetricsAggregator.summarize([
            {"creative_id": "x", "impressions": 10, "clicks": 1},
            {"creative_id": "y", "impressions": 20, "clicks": 2},
        ])
        assert summary.best.creative_id == "x"

    def test_accepts_models(self):
        summary = MetricsAggregator.summarize([VariantMetrics(creative_id=9, impressions=10, clicks=3)])
        assert summary.best.creative_id == 9


# =============================================================================
# Deviation
# =============================================================================

class TestDeviation:

    def test_above_average(self):
        dev = MetricsAggregator.deviation(TWO_VARIANTS[1], 0.13333)
        assert dev.sign is DeviationSign.ABOVE
        assert dev.magnitude == pytest.approx(0.06667, abs=1e-4)

    def test_below_average(self):
        dev = MetricsAggregator.deviation(TWO_VARIANTS[0], 0.13333)
        assert dev.sign is DeviationSign.BELOW
        assert dev.magnitude == pytest.approx(0.03333, abs=1e-4)

    def test_at_average_counts_as_above(self):
        dev = MetricsAggregator.deviation({"creative_id": 1, "impressions": 10, "clicks": 1}, 0.1)
        assert dev.sign is DeviationSign.ABOVE
        assert dev.magnitude == pytest.approx(0.0)

    def test_describe(self):
        assert Deviation(DeviationSign.BELOW, 0.0333).describe() == "below average by 3.33%"


class TestAnnotate:

    def test_rows_in_input_order(self):
        rows = MetricsAggregator.annotate(TWO_VARIANTS)

        assert [r.creative_id for r in rows] == [1, 2]
        assert [r.is_best for r in rows] == [False, True]
        assert rows[0].ctr == pytest.approx(0.1)
        assert rows[1].deviation.sign is DeviationSign.ABOVE

    def test_only_first_of_duplicate_ids_is_best(self):
        rows = MetricsAggregator.annotate([
            {"creative_id": 5, "impressions": 10, "clicks": 5},
            {"creative_id": 5, "impressions": 10, "clicks": 1},
        ])
        assert [r.is_best for r in rows] == [True, False]

    def test_empty(self):
        assert MetricsAggregator.annotate([]) == []


# =============================================================================
# format_duration
# =============================================================================

class TestFormatDuration:

    NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)

    def test_days_and_hours(self):
        assert format_duration("2024-05-07T08:00:00Z", "2024-05-10T12:30:00Z") == "3d 4h"

    def test_hours_and_minutes(self):
        assert format_duration("2024-05-10T06:48:00Z", "2024-05-10T12:00:00Z") == "5h 12m"

    def test_minutes_only(self):
        assert format_duration("2024-05-10T11:18:00Z", now=self.NOW) == "42m"

    def test_missing_start(self):
        assert format_duration(None) == "-"
        assert format_duration("") == "-"

    def test_unparseable(self):
        assert format_duration("not a date") == "-"

    def test_nanosecond_timestamps(self):
        assert format_duration(
            "2024-05-10T09:59:59.123456789Z", "2024-05-10T12:30:00.000000001Z"
        ) == "2h 30m"

    def test_end_before_start_clamps_to_zero(self):
        assert format_duration("2024-05-10T12:00:00Z", "2024-05-10T11:00:00Z") == "0m"

    def test_datetime_inputs(self):
        start = datetime(2024, 5, 10, 10, 0, tzinfo=timezone.utc)
        assert format_duration(start, now=self.NOW) == "2h 0m"
