"""
AdStudio - client core for the AI ad-creative generation platform

Data access (cached REST client), the three-step creative generation
workflow, experiment variant content resolution and A/B metrics.
"""

__version__ = "0.3.0"
__author__ = "AdStudio Team"
