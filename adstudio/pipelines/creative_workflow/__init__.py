"""
Creative Workflow

Three-step creative generation flow:
1. PRODUCT_INPUT - product name and language, generates copywriting candidates
2. COPYWRITING_SELECTION - pick/edit CTA and selling points, confirm
3. CREATIVE_CONFIG - image settings and variants, start generation

Usage:
    from adstudio.pipelines.creative_workflow import CreativeWorkflow

    workflow = CreativeWorkflow(creative_service)
    await workflow.generate_candidates("Smart Watch Pro")
"""

from .state import CreativeConfig, GenerationTask, WorkflowStep
from .workflow import CreativeWorkflow, WorkflowSummary

__all__ = [
    "CreativeConfig",
    "CreativeWorkflow",
    "GenerationTask",
    "WorkflowStep",
    "WorkflowSummary",
]
