import json
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

TIERS = ("excellent", "good", "fair", "poor")

FACTOR_NAMES = (
    "savingsRate",
    "retirementReadiness",
    "timeHorizon",
    "riskAlignment",
    "diversification",
    "taxEfficiency",
    "emergencyFund",
    "debtManagement",
)

DEFAULT_PATH = os.path.join(os.path.dirname(__file__), '../../reference/score-factors.json')


@dataclass(frozen=True)
class FactorBenchmark:
    """Weight and tier thresholds for one scoring factor."""
    key: str
    name: str
    weight: float
    description: str
    higher_is_better: bool
    tiers: Dict[str, float]


@dataclass(frozen=True)
class CountryRates:
    key: str
    optimal_rate: float  # percent of salary
    marginal_rate: float  # fraction
    used_default: bool = False


@dataclass(frozen=True)
class RiskProfile:
    key: str
    min_equity: float
    max_equity: float
    used_default: bool = False


@dataclass(frozen=True)
class PeerGroup:
    age_group: str
    max_age: Optional[float]
    average_score: float
    top_quartile: float


class ScoringBenchmarks:
    def __init__(self, data: dict):
        """
        data: parsed contents of reference/score-factors.json
        Raises ValueError when the tables are incomplete or inconsistent.
        """
        self.factors: Dict[str, FactorBenchmark] = {}
        self.tier_fractions: Dict[str, float] = {}
        self.status_thresholds: Dict[str, float] = {}
        self.age_targets: List[Tuple[float, float]] = []
        self.below_first_age_multiple = 0.0
        self.risk_profiles: Dict[str, dict] = {}
        self.default_risk_profile = ""
        self.countries: Dict[str, dict] = {}
        self.default_country = ""
        self.peer_groups: List[PeerGroup] = []
        self.emergency_fund: dict = {}
        self.high_interest_penalty: dict = {}
        self._build(data)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "ScoringBenchmarks":
        """Load and validate the benchmark tables from a JSON file."""
        with open(path or DEFAULT_PATH, 'r') as f:
            return cls(json.load(f))

    def _build(self, data: dict):
        factors = data.get("factors", {})
        missing = [name for name in FACTOR_NAMES if name not in factors]
        if missing:
            raise ValueError(f"score-factors.json is missing factors: {missing}")

        for key in FACTOR_NAMES:
            f = factors[key]
            tiers = f.get("benchmarks", {})
            if any(t not in tiers for t in TIERS):
                raise ValueError(f"Factor '{key}' must define benchmarks for {TIERS}")
            higher_is_better = f.get("higherIsBetter", True)
            values = [tiers[t] for t in TIERS]
            ordered = values if not higher_is_better else list(reversed(values))
            if any(ordered[i] >= ordered[i + 1] for i in range(len(ordered) - 1)):
                direction = "decreasing" if higher_is_better else "increasing"
                raise ValueError(
                    f"Benchmarks for '{key}' must be strictly {direction} from excellent to poor: {tiers}"
                )
            self.factors[key] = FactorBenchmark(
                key=key,
                name=f.get("name", key),
                weight=f["weight"],
                description=f.get("description", ""),
                higher_is_better=higher_is_better,
                tiers={t: float(tiers[t]) for t in TIERS},
            )

        total_weight = sum(f.weight for f in self.factors.values())
        if abs(total_weight - 100) > 1e-9:
            raise ValueError(f"Factor weights must sum to 100, got {total_weight}")

        fractions = data.get("tierFractions", {})
        if any(t not in fractions for t in TIERS):
            raise ValueError(f"tierFractions must define {TIERS}")
        values = [fractions[t] for t in TIERS]
        if any(values[i] <= values[i + 1] for i in range(len(values) - 1)) or values[0] > 1 or values[-1] <= 0:
            raise ValueError(f"tierFractions must be strictly decreasing within (0, 1]: {fractions}")
        self.tier_fractions = {t: float(fractions[t]) for t in TIERS}

        self.status_thresholds = data.get("statusThresholds", {"excellent": 85, "good": 70, "needsWork": 50})

        age_targets = data.get("ageTargets", {})
        table = sorted(age_targets.get("table", []), key=lambda x: x["age"])
        if not table:
            raise ValueError("ageTargets must contain a 'table' with at least one entry")
        self.age_targets = [(float(row["age"]), float(row["multiple"])) for row in table]
        self.below_first_age_multiple = float(age_targets.get("belowFirstAge", self.age_targets[0][1]))

        self.risk_profiles = data.get("riskProfiles", {})
        self.default_risk_profile = data.get("defaultRiskProfile", "moderate")
        if self.default_risk_profile not in self.risk_profiles:
            raise ValueError(f"defaultRiskProfile '{self.default_risk_profile}' is not a defined risk profile")

        self.countries = data.get("countries", {})
        self.default_country = data.get("defaultCountry", "israel")
        if self.default_country not in self.countries:
            raise ValueError(f"defaultCountry '{self.default_country}' is not a defined country")

        for row in data.get("peerBenchmarks", []):
            if row["topQuartile"] <= row["averageScore"]:
                raise ValueError(f"Peer group '{row['ageGroup']}' top quartile must exceed its average")
            self.peer_groups.append(PeerGroup(row["ageGroup"], row.get("maxAge"),
                                              row["averageScore"], row["topQuartile"]))

        self.emergency_fund = data.get("emergencyFund", {})
        self.high_interest_penalty = data.get("highInterestPenalty", {"incomeMultiplier": 0.1, "maxFraction": 0.3})

    def weight(self, factor: str) -> float:
        return self.factors[factor].weight

    def age_target(self, age: float) -> float:
        """Target savings as a multiple of annual income for an age.

        Linearly interpolated between table rows; younger than the first row
        uses the below-first-age multiple, older than the last row uses the
        last multiple.
        """
        first_age, _ = self.age_targets[0]
        if age < first_age:
            return self.below_first_age_multiple
        for (a0, m0), (a1, m1) in zip(self.age_targets, self.age_targets[1:]):
            if a0 <= age <= a1:
                return m0 + (m1 - m0) * (age - a0) / (a1 - a0)
        return self.age_targets[-1][1]

    def risk_profile(self, tolerance: Optional[str]) -> RiskProfile:
        """Look up the equity range for a stated risk tolerance."""
        if tolerance:
            normalized = tolerance.strip().lower()
            for key, profile in self.risk_profiles.items():
                aliases = [a.lower() for a in profile.get("aliases", [])] + [key.lower()]
                if normalized in aliases:
                    return RiskProfile(key, profile["minEquity"], profile["maxEquity"])
        default = self.risk_profiles[self.default_risk_profile]
        return RiskProfile(self.default_risk_profile, default["minEquity"], default["maxEquity"], used_default=True)

    def country(self, name: Optional[str]) -> CountryRates:
        """Look up the optimal tax-advantaged rate and marginal rate for a country."""
        key, used_default = self.default_country, True
        if name:
            normalized = name.strip().lower()
            for candidate, entry in self.countries.items():
                if normalized in [a.lower() for a in entry.get("aliases", [])] or normalized == candidate:
                    key, used_default = candidate, False
                    break
        entry = self.countries[key]
        marginal = entry.get("marginalRate", 0)
        if marginal > 1:
            marginal = marginal / 100.0
        return CountryRates(key, float(entry["optimalRate"]), marginal, used_default)

    def peer_group(self, age: float) -> Optional[PeerGroup]:
        """Peer benchmark row for an age; the last row is open-ended."""
        for group in self.peer_groups:
            if group.max_age is None or age < group.max_age:
                return group
        return None
