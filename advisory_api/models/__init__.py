"""Projection engine models: snapshots, status rules, projection and timeline."""

from .errors import (
    ComputationError,
    EngineError,
    ProjectionValidationError,
    SimulationNotFoundError,
)
from .initial_values import StartingTotals, compute_starting_totals, resolve_initial_value
from .projection import ProjectionEngine, ProjectionParameters, ProjectionResult
from .snapshot import (
    AssetSnapshot,
    InsurancePolicy,
    RecurringMovement,
    SimulationSnapshot,
    ValuationRecord,
)
from .status_rules import AliveRule, DeceasedRule, DisabledRule, StatusRule, get_status_rule
from .timeline import TimelineEntry, YearSummary, expand_timeline, summarize_timeline

__all__ = [
    "EngineError",
    "ProjectionValidationError",
    "SimulationNotFoundError",
    "ComputationError",
    "ValuationRecord",
    "AssetSnapshot",
    "InsurancePolicy",
    "RecurringMovement",
    "SimulationSnapshot",
    "StartingTotals",
    "resolve_initial_value",
    "compute_starting_totals",
    "StatusRule",
    "AliveRule",
    "DeceasedRule",
    "DisabledRule",
    "get_status_rule",
    "ProjectionParameters",
    "ProjectionResult",
    "ProjectionEngine",
    "TimelineEntry",
    "YearSummary",
    "expand_timeline",
    "summarize_timeline",
]
