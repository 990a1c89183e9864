"""
Creative Workflow State - dataclass carried across the three workflow steps.

Step 1 (PRODUCT_INPUT): product name + output language
Step 2 (COPYWRITING_SELECTION): candidate CTAs/selling points, selections, edits
Step 3 (CREATIVE_CONFIG): image URL, style, formats, variant count and
    per-variant settings

Entered data survives go_back(); only start_over() discards it. Nothing is
persisted across sessions, to_dict/from_dict exist for inspection and tests.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional

from ...core.config import Config
from ...core.models import CopywritingCandidates, TaskData, VariantConfig


class WorkflowStep(IntEnum):
    PRODUCT_INPUT = 1
    COPYWRITING_SELECTION = 2
    CREATIVE_CONFIG = 3

    @property
    def previous(self) -> Optional["WorkflowStep"]:
        if self is WorkflowStep.PRODUCT_INPUT:
            return None
        return WorkflowStep(self.value - 1)


def _default_variant_configs(count: int) -> List[VariantConfig]:
    return [VariantConfig() for _ in range(count)]


@dataclass
class CreativeConfig:
    """Step-3 image settings."""
    product_image_url: Optional[str] = None
    style: Optional[str] = None
    num_variants: int = Config.DEFAULT_NUM_VARIANTS
    formats: List[str] = field(default_factory=lambda: list(Config.DEFAULT_FORMATS))
    variant_configs: List[VariantConfig] = field(
        default_factory=lambda: _default_variant_configs(Config.DEFAULT_NUM_VARIANTS)
    )

    def resize_variants(self, count: int) -> None:
        """Truncate or pad variant_configs to count entries, keeping existing ones."""
        self.num_variants = count
        if count <= len(self.variant_configs):
            self.variant_configs = self.variant_configs[:count]
        else:
            self.variant_configs = self.variant_configs + _default_variant_configs(
                count - len(self.variant_configs)
            )

    def effective_variant_configs(self) -> List[VariantConfig]:
        """Per-variant settings as sent to the backend (style falls back to the global style)."""
        global_style = (self.style or "").strip() or None
        return [
            VariantConfig(
                style=(cfg.style or "").strip() or global_style,
                prompt=(cfg.prompt or "").strip() or None,
            )
            for cfg in self.variant_configs
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_image_url": self.product_image_url,
            "style": self.style,
            "num_variants": self.num_variants,
            "formats": list(self.formats),
            "variant_configs": [cfg.model_dump() for cfg in self.variant_configs],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreativeConfig":
        field_names = {f.name for f in dataclasses.fields(cls)}
        filtered = {k: v for k, v in data.items() if k in field_names}
        if "variant_configs" in filtered:
            filtered["variant_configs"] = [
                VariantConfig.model_validate(cfg) for cfg in filtered["variant_configs"]
            ]
        return cls(**filtered)


@dataclass
class GenerationTask:
    """
    State of one pass through the creative workflow.

    Lifecycle:
        1. Created empty at PRODUCT_INPUT
        2. Each successful transition writes its results and advances step
        3. start_over() replaces it with a fresh instance
    """

    # === STEP 1 ===
    product_name: str = ""
    language: str = Config.DEFAULT_LANGUAGE

    # === STEP 2 (populated by generate_candidates) ===
    task_id: Optional[str] = None
    candidates: Optional[CopywritingCandidates] = None
    selected_cta_index: int = 0
    selected_sp_indexes: List[int] = field(default_factory=list)
    edited_cta: Optional[str] = None
    edited_sps: List[str] = field(default_factory=list)

    # === STEP 3 ===
    config: CreativeConfig = field(default_factory=CreativeConfig)
    started: Optional[TaskData] = None

    # === TRACKING ===
    step: WorkflowStep = WorkflowStep.PRODUCT_INPUT
    error: Optional[str] = None
    error_step: Optional[WorkflowStep] = None

    @property
    def cta_candidates(self) -> List[str]:
        return self.candidates.cta_candidates if self.candidates else []

    @property
    def selling_point_candidates(self) -> List[str]:
        return self.candidates.selling_point_candidates if self.candidates else []

    @property
    def selected_cta(self) -> Optional[str]:
        """Candidate CTA at selected_cta_index, if any."""
        if 0 <= self.selected_cta_index < len(self.cta_candidates):
            return self.cta_candidates[self.selected_cta_index]
        return None

    @property
    def selected_selling_points(self) -> List[str]:
        """Candidate selling points at selected_sp_indexes, in selection order."""
        points = self.selling_point_candidates
        return [points[i] for i in self.selected_sp_indexes if 0 <= i < len(points)]

    @property
    def has_selling_points(self) -> bool:
        return bool(self.selected_sp_indexes) or bool(self.edited_sps)

    def record_error(self, message: str) -> None:
        self.error = message
        self.error_step = self.step

    def clear_error(self) -> None:
        self.error = None
        self.error_step = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize state for inspection."""
        return {
            "product_name": self.product_name,
            "language": self.language,
            "task_id": self.task_id,
            "candidates": self.candidates.model_dump() if self.candidates else None,
            "selected_cta_index": self.selected_cta_index,
            "selected_sp_indexes": list(self.selected_sp_indexes),
            "edited_cta": self.edited_cta,
            "edited_sps": list(self.edited_sps),
            "config": self.config.to_dict(),
            "started": self.started.model_dump(mode="json") if self.started else None,
            "step": int(self.step),
            "error": self.error,
            "error_step": int(self.error_step) if self.error_step is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationTask":
        """Rebuild state from to_dict() output. Unknown keys are ignored."""
        field_names = {f.name for f in dataclasses.fields(cls)}
        filtered = {k: v for k, v in data.items() if k in field_names}

        if filtered.get("candidates") is not None:
            filtered["candidates"] = CopywritingCandidates.model_validate(filtered["candidates"])
        if filtered.get("started") is not None:
            filtered["started"] = TaskData.model_validate(filtered["started"])
        if "config" in filtered:
            filtered["config"] = CreativeConfig.from_dict(filtered["config"] or {})
        if "step" in filtered:
            filtered["step"] = WorkflowStep(filtered["step"])
        if filtered.get("error_step") is not None:
            filtered["error_step"] = WorkflowStep(filtered["error_step"])
        return cls(**filtered)
