"""
Tests for experiment variant content resolution.
"""

from adstudio.core.models import CreativeDefaults, ExperimentVariant
from adstudio.services.override_resolver import (
    ChoiceKind,
    ContentSource,
    cta_choices,
    resolve_cta,
    resolve_selling_points,
    resolve_variant,
    selling_point_choices,
)


class TestResolveCta:
    """Override, then creative default, then empty."""

    def test_override_wins(self):
        assert resolve_cta("Buy Now", "Learn More") == "Buy Now"

    def test_default_when_no_override(self):
        assert resolve_cta("", "Learn More") == "Learn More"
        assert resolve_cta(None, "Learn More") == "Learn More"

    def test_empty_when_neither(self):
        assert resolve_cta("", "") == ""
        assert resolve_cta(None, None) == ""

    def test_whitespace_override_counts_as_empty(self):
        assert resolve_cta("   ", "Learn More") == "Learn More"


class TestResolveSellingPoints:

    def test_override_wins(self):
        assert resolve_selling_points(["Fast"], ["Cheap", "Durable"]) == ["Fast"]

    def test_default_when_override_empty(self):
        assert resolve_selling_points([], ["Cheap"]) == ["Cheap"]
        assert resolve_selling_points(None, ["Cheap"]) == ["Cheap"]

    def test_empty_when_neither(self):
        assert resolve_selling_points(None, None) == []

    def test_blank_entries_are_ignored(self):
        assert resolve_selling_points(["", "  "], ["Cheap"]) == ["Cheap"]

    def test_returns_new_list(self):
        default = ["Cheap"]
        resolved = resolve_selling_points(None, default)
        resolved.append("mutated")
        assert default == ["Cheap"]


class TestResolveVariant:

    def test_sources_are_reported(self):
        variant = ExperimentVariant(creative_id=1, cta_override="Buy Now")
        resolved = resolve_variant(variant, CreativeDefaults(cta_text="Learn More", selling_points=["Light"]))

        assert resolved.cta == "Buy Now"
        assert resolved.cta_source is ContentSource.OVERRIDE
        assert resolved.selling_points == ["Light"]
        assert resolved.selling_points_source is ContentSource.DEFAULT
        assert not resolved.is_pending

    def test_pending_without_defaults(self):
        resolved = resolve_variant(ExperimentVariant(creative_id=1))

        assert resolved.cta == ""
        assert resolved.selling_points == []
        assert resolved.cta_source is ContentSource.EMPTY
        assert resolved.is_pending

    def test_deterministic(self):
        variant = ExperimentVariant(creative_id=1, selling_points_override=["A"])
        defaults = CreativeDefaults(cta_text="Go")
        assert resolve_variant(variant, defaults) == resolve_variant(variant, defaults)


class TestCtaChoices:

    def test_use_default_always_first(self):
        choices = cta_choices(None, None)
        assert len(choices) == 1
        assert choices[0].kind is ChoiceKind.USE_DEFAULT
        assert choices[0].value == ""

    def test_default_and_distinct_override(self):
        choices = cta_choices("Learn More", "Buy Now")
        assert [c.value for c in choices] == ["", "Learn More", "Buy Now"]
        assert [c.kind for c in choices] == [ChoiceKind.USE_DEFAULT, ChoiceKind.CREATIVE, ChoiceKind.OVERRIDE]

    def test_override_equal_to_default_not_repeated(self):
        assert [c.value for c in cta_choices("Learn More", "Learn More")] == ["", "Learn More"]


class TestSellingPointChoices:

    def test_override_entries_appended_once(self):
        choices = selling_point_choices(["Light", "Waterproof"], ["Waterproof", "7-day battery"])
        assert [c.value for c in choices] == ["Light", "Waterproof", "7-day battery"]
        assert choices[-1].kind is ChoiceKind.OVERRIDE
