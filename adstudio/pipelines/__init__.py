"""
Workflow pipelines for AdStudio.

- creative_workflow: product -> copywriting -> creative generation
"""

from .creative_workflow import CreativeWorkflow, GenerationTask, WorkflowStep

__all__ = [
    "CreativeWorkflow",
    "GenerationTask",
    "WorkflowStep",
]
