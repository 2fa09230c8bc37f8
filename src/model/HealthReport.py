"""Data model for the financial health score.

A HealthReport is built fresh for each scoring call. Every structure here
is plain data; to_dict() produces the JSON shape used by the CLI --json
output and the MCP tools.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass
class ScoreFactor:
    """Score for one weighted factor.

    The score is clamped to [0, weight] on construction so downstream
    totals can rely on the bound.
    """
    name: str
    weight: float
    score: float = 0.0
    status: str = "unknown"
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.score != self.score:  # NaN
            self.score = 0.0
        self.score = max(0.0, min(float(self.weight), float(self.score)))

    @property
    def relative_score(self) -> float:
        """Score as a fraction of the factor's weight."""
        return self.score / self.weight if self.weight else 0.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "weight": self.weight,
            "score": round(self.score, 2),
            "status": self.status,
            "details": dict(self.details),
        }


@dataclass
class Suggestion:
    """An improvement suggestion derived from a low-scoring factor."""
    category: str
    priority: str
    issue: str
    action: str
    impact: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MissingDataWarning:
    """A canonical field a factor needed but could not resolve.

    This is a record collected on the report, not an exception.
    """
    field: str
    factor: str
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PeerComparison:
    """Where a total score falls among savers of the same age group."""
    age_group: str
    average_score: float
    top_quartile_score: float
    user_percentile: float
    comparison: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class InputValidation:
    """Structural checks on the raw profile, reported but never raised."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    critical_missing: List[str] = field(default_factory=list)
    data_completeness: int = 0
    validation_level: str = "complete"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class HealthReport:
    """Complete financial health assessment for a profile."""
    total_score: int
    status: str
    factors: Dict[str, ScoreFactor] = field(default_factory=dict)
    suggestions: List[Suggestion] = field(default_factory=list)
    zero_score_factors: List[str] = field(default_factory=list)
    missing_data: List[MissingDataWarning] = field(default_factory=list)
    peer_comparison: Optional[PeerComparison] = None
    validation: Optional[InputValidation] = None
    planning_type: str = "individual"

    def get_factor(self, name: str) -> Optional[ScoreFactor]:
        return self.factors.get(name)

    def to_dict(self) -> dict:
        return {
            "total_score": self.total_score,
            "status": self.status,
            "planning_type": self.planning_type,
            "factors": {name: f.to_dict() for name, f in self.factors.items()},
            "suggestions": [s.to_dict() for s in self.suggestions],
            "zero_score_factors": list(self.zero_score_factors),
            "missing_data": [m.to_dict() for m in self.missing_data],
            "peer_comparison": self.peer_comparison.to_dict() if self.peer_comparison else None,
            "validation": self.validation.to_dict() if self.validation else None,
        }
