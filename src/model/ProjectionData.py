"""Data model for year-by-year savings projections.

A Projection holds three parallel series of ProjectionPoint rows: the
primary saver, the partner (empty for individual planning) and the
combined household. Renderers and the MCP tools read these structures
directly, and to_dict() turns them into plain JSON data.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class AssetBucket(str, Enum):
    """A savings vehicle compounded independently of the others."""
    PENSION = "pension"
    TRAINING_FUND = "training_fund"
    PERSONAL_PORTFOLIO = "personal_portfolio"
    REAL_ESTATE = "real_estate"
    CRYPTO = "crypto"


@dataclass
class ProjectionPoint:
    """Balances for one age in a projection series.

    nominal_total is always the sum of per_bucket_nominal, and real_total
    is nominal_total deflated by cumulative inflation since year_offset 0.
    """
    age: int
    year_offset: int
    nominal_total: int = 0
    real_total: int = 0
    per_bucket_nominal: Dict[str, int] = field(default_factory=dict)
    yearly_contributions: int = 0

    def to_dict(self) -> dict:
        return {
            "age": self.age,
            "year_offset": self.year_offset,
            "nominal_total": self.nominal_total,
            "real_total": self.real_total,
            "per_bucket_nominal": dict(self.per_bucket_nominal),
            "yearly_contributions": self.yearly_contributions,
        }


@dataclass
class Projection:
    """Complete projection result for a profile."""
    primary: List[ProjectionPoint] = field(default_factory=list)
    partner: List[ProjectionPoint] = field(default_factory=list)
    combined: List[ProjectionPoint] = field(default_factory=list)
    planning_type: str = "individual"
    assumptions: Optional[dict] = None

    @property
    def is_couple(self) -> bool:
        return self.planning_type == "couple"

    def ages(self) -> List[int]:
        """Ages covered by the primary series."""
        return [p.age for p in self.primary]

    def get_series(self, series: str = "combined") -> List[ProjectionPoint]:
        """Get a series by name ('primary', 'partner' or 'combined')."""
        if series not in ("primary", "partner", "combined"):
            raise ValueError(f"Unknown projection series '{series}'")
        return getattr(self, series)

    def final_point(self, series: str = "combined") -> Optional[ProjectionPoint]:
        """Get the last (retirement age) point of a series, if any."""
        points = self.get_series(series)
        return points[-1] if points else None

    def to_dict(self) -> dict:
        return {
            "planning_type": self.planning_type,
            "assumptions": dict(self.assumptions) if self.assumptions else None,
            "primary": [p.to_dict() for p in self.primary],
            "partner": [p.to_dict() for p in self.partner],
            "combined": [p.to_dict() for p in self.combined],
        }
