"""
Override resolution for experiment variant content.

A variant may carry its own CTA text and selling points. When it does not,
the creative's stored values are used; when neither exists the result is
empty, which views show as "pending generation".

Precedence for both fields:
    1. variant override (non-empty)
    2. creative default (non-empty)
    3. empty

Everything here is a pure function of its arguments so it can run while
building summaries and request payloads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from ..core.models import CreativeDefaults, ExperimentVariant


class ContentSource(str, Enum):
    """Where an effective value came from"""
    OVERRIDE = "override"
    DEFAULT = "default"
    EMPTY = "empty"


class ChoiceKind(str, Enum):
    USE_DEFAULT = "use_default"
    CREATIVE = "creative"
    OVERRIDE = "override"


@dataclass(frozen=True)
class ContentChoice:
    """One entry of a choice-plus-free-text selector."""
    value: str
    kind: ChoiceKind


@dataclass
class ResolvedContent:
    """Effective CTA and selling points for a variant."""
    cta: str
    selling_points: List[str] = field(default_factory=list)
    cta_source: ContentSource = ContentSource.EMPTY
    selling_points_source: ContentSource = ContentSource.EMPTY

    @property
    def is_pending(self) -> bool:
        return not self.cta and not self.selling_points


def _text(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def _points(values: Optional[Sequence[str]]) -> List[str]:
    if not values:
        return []
    return [point for point in (_text(v) for v in values) if point]


def cta_source(variant_override: Optional[str], creative_default: Optional[str]) -> ContentSource:
    if _text(variant_override):
        return ContentSource.OVERRIDE
    if _text(creative_default):
        return ContentSource.DEFAULT
    return ContentSource.EMPTY


def selling_points_source(
    variant_override: Optional[Sequence[str]],
    creative_default: Optional[Sequence[str]],
) -> ContentSource:
    if _points(variant_override):
        return ContentSource.OVERRIDE
    if _points(creative_default):
        return ContentSource.DEFAULT
    return ContentSource.EMPTY


def resolve_cta(variant_override: Optional[str], creative_default: Optional[str]) -> str:
    """
    Effective CTA text.

    Examples:
        >>> resolve_cta("Buy Now", "Learn More")
        'Buy Now'
        >>> resolve_cta("", "Learn More")
        'Learn More'
        >>> resolve_cta("", "")
        ''
    """
    source = cta_source(variant_override, creative_default)
    if source is ContentSource.OVERRIDE:
        return _text(variant_override)
    if source is ContentSource.DEFAULT:
        return _text(creative_default)
    return ""


def resolve_selling_points(
    variant_override: Optional[Sequence[str]],
    creative_default: Optional[Sequence[str]],
) -> List[str]:
    """Effective selling points; always a new list."""
    source = selling_points_source(variant_override, creative_default)
    if source is ContentSource.OVERRIDE:
        return _points(variant_override)
    if source is ContentSource.DEFAULT:
        return _points(creative_default)
    return []


def resolve_variant(
    variant: ExperimentVariant,
    defaults: Optional[CreativeDefaults] = None,
) -> ResolvedContent:
    """Resolve both fields of a variant against its creative's defaults."""
    defaults = defaults or CreativeDefaults()
    return ResolvedContent(
        cta=resolve_cta(variant.cta_override, defaults.cta_text),
        selling_points=resolve_selling_points(variant.selling_points_override, defaults.selling_points),
        cta_source=cta_source(variant.cta_override, defaults.cta_text),
        selling_points_source=selling_points_source(
            variant.selling_points_override, defaults.selling_points
        ),
    )


def cta_choices(creative_default: Optional[str], current_override: Optional[str]) -> List[ContentChoice]:
    """
    Options for the CTA selector of a variant.

    Always starts with "use default" (empty value). The creative's CTA is
    listed when present, and an override that differs from it is listed
    as well so a previously typed value stays selectable.
    """
    choices = [ContentChoice(value="", kind=ChoiceKind.USE_DEFAULT)]
    default = _text(creative_default)
    override = _text(current_override)
    if default:
        choices.append(ContentChoice(value=default, kind=ChoiceKind.CREATIVE))
    if override and override != default:
        choices.append(ContentChoice(value=override, kind=ChoiceKind.OVERRIDE))
    return choices


def selling_point_choices(
    creative_default: Optional[Sequence[str]],
    current_override: Optional[Sequence[str]],
) -> List[ContentChoice]:
    """Creative selling points first, then override entries not already listed."""
    choices: List[ContentChoice] = []
    seen = set()
    for point in _points(creative_default):
        if point not in seen:
            seen.add(point)
            choices.append(ContentChoice(value=point, kind=ChoiceKind.CREATIVE))
    for point in _points(current_override):
        if point not in seen:
            seen.add(point)
            choices.append(ContentChoice(value=point, kind=ChoiceKind.OVERRIDE))
    return choices
