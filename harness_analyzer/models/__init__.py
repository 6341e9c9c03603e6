"""Data models for extracted harness facts."""

from .records import (
    DataShape,
    Position,
    Parameter,
    EnumSelector,
    CandidateArgument,
    FunctionRecord,
    VariableRecord,
    DiscoveredLiteral,
    HarnessReadiness,
    VariableAnalysis,
    FunctionAnalysis,
)

__all__ = [
    "DataShape",
    "Position",
    "Parameter",
    "EnumSelector",
    "CandidateArgument",
    "FunctionRecord",
    "VariableRecord",
    "DiscoveredLiteral",
    "HarnessReadiness",
    "VariableAnalysis",
    "FunctionAnalysis",
]
