"""Render module for retirement projection and health score output."""

from render.renderers import (
    BaseRenderer,
    ProjectionRenderer,
    HealthScoreRenderer,
    SuggestionsRenderer,
    DiagnosticsRenderer,
    PlanSummaryRenderer,
    RENDERER_REGISTRY,
)

__all__ = [
    'BaseRenderer',
    'ProjectionRenderer',
    'HealthScoreRenderer',
    'SuggestionsRenderer',
    'DiagnosticsRenderer',
    'PlanSummaryRenderer',
    'RENDERER_REGISTRY',
]
