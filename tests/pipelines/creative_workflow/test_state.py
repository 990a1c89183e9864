"""
Tests for creative workflow state dataclasses.
"""

from adstudio.core.models import CopywritingCandidates, TaskData, VariantConfig
from adstudio.pipelines.creative_workflow.state import CreativeConfig, GenerationTask, WorkflowStep


class TestWorkflowStep:

    def test_previous(self):
        assert WorkflowStep.CREATIVE_CONFIG.previous is WorkflowStep.COPYWRITING_SELECTION
        assert WorkflowStep.COPYWRITING_SELECTION.previous is WorkflowStep.PRODUCT_INPUT
        assert WorkflowStep.PRODUCT_INPUT.previous is None


class TestCreativeConfig:

    def test_defaults(self):
        config = CreativeConfig()
        assert config.num_variants == 2
        assert config.formats == ["1:1"]
        assert len(config.variant_configs) == 2

    def test_formats_default_not_shared(self):
        a, b = CreativeConfig(), CreativeConfig()
        a.formats.append("9:16")
        assert b.formats == ["1:1"]

    def test_resize_keeps_existing_entries(self):
        config = CreativeConfig()
        config.variant_configs[0] = VariantConfig(style="bold")

        config.resize_variants(4)
        assert config.num_variants == 4
        assert len(config.variant_configs) == 4
        assert config.variant_configs[0].style == "bold"

        config.resize_variants(1)
        assert [c.style for c in config.variant_configs] == ["bold"]

    def test_variant_style_falls_back_to_global(self):
        config = CreativeConfig(style="minimal")
        config.variant_configs = [VariantConfig(style="bold", prompt=" close-up "), VariantConfig()]

        effective = config.effective_variant_configs()

        assert effective[0] == VariantConfig(style="bold", prompt="close-up")
        assert effective[1] == VariantConfig(style="minimal")

    def test_no_global_style(self):
        assert CreativeConfig().effective_variant_configs() == [VariantConfig(), VariantConfig()]


class TestGenerationTask:

    def _task(self):
        return GenerationTask(
            product_name="Smart Watch Pro",
            task_id="t1",
            candidates=CopywritingCandidates(
                task_id="t1",
                cta_candidates=["Buy Now", "Learn More"],
                selling_point_candidates=["Light", "Waterproof", "7-day battery"],
            ),
            selected_cta_index=1,
            selected_sp_indexes=[2, 0],
            step=WorkflowStep.COPYWRITING_SELECTION,
        )

    def test_selected_values(self):
        task = self._task()
        assert task.selected_cta == "Learn More"
        assert task.selected_selling_points == ["7-day battery", "Light"]

    def test_selected_values_without_candidates(self):
        task = GenerationTask()
        assert task.selected_cta is None
        assert task.selected_selling_points == []
        assert not task.has_selling_points

    def test_has_selling_points_from_edits(self):
        assert GenerationTask(edited_sps=["Custom"]).has_selling_points

    def test_record_error_uses_current_step(self):
        task = self._task()
        task.record_error("boom")
        assert task.error_step is WorkflowStep.COPYWRITING_SELECTION
        task.clear_error()
        assert task.error is None and task.error_step is None

    def test_dict_round_trip(self):
        task = self._task()
        task.started = TaskData(task_id="t1", status="processing")
        task.config.variant_configs[1] = VariantConfig(prompt="outdoor")
        task.record_error("boom")

        restored = GenerationTask.from_dict(task.to_dict())

        assert restored == task

    def test_from_dict_ignores_unknown_keys(self):
        restored = GenerationTask.from_dict({"product_name": "Lamp", "legacy_field": 1})
        assert restored.product_name == "Lamp"
        assert restored.step is WorkflowStep.PRODUCT_INPUT
