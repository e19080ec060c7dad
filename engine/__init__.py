"""Rechenkern: Aggregation (S, W, R) und Prognosen."""

from .aggregation import MAX_GROUP_MEMBERS, GroupSummary, ModuleSums, aggregate, group_summaries
from .projection import (
    ComponentRequirement,
    ModuleProjection,
    OverallProjection,
    Projection,
    ProjectionStatus,
    RequirementStatus,
    component_requirements,
    current_average,
    needed_average,
    overall_current_average,
    overall_projection,
    project_module,
    required_for_component,
)

__all__ = [
    "MAX_GROUP_MEMBERS",
    "GroupSummary",
    "ModuleSums",
    "aggregate",
    "group_summaries",
    "ComponentRequirement",
    "ModuleProjection",
    "OverallProjection",
    "Projection",
    "ProjectionStatus",
    "RequirementStatus",
    "component_requirements",
    "current_average",
    "needed_average",
    "overall_current_average",
    "overall_projection",
    "project_module",
    "required_for_component",
]
