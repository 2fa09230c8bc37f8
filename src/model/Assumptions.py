"""Rate assumptions used by the compound projector."""

from dataclasses import dataclass, asdict

from model.field_aliases import CanonicalField

MONTHLY = "monthly"
LEGACY = "legacy"
COMPOUNDING_MODES = (MONTHLY, LEGACY)


@dataclass
class ProjectionAssumptions:
    """Annual rates (as fractions) and guard ceilings for a projection.

    compounding selects how a year of growth is applied:
    'monthly' runs 12 monthly steps per year, 'legacy' applies a single
    monthly step per year (the older, much coarser approximation).
    """
    pension_return: float = 0.06
    training_fund_return: float = 0.06
    portfolio_return: float = 0.07
    real_estate_return: float = 0.04
    crypto_return: float = 0.05
    inflation_rate: float = 0.03
    portfolio_tax_rate: float = 0.25
    compounding: str = MONTHLY

    # Sanity ceilings; balances above these are clamped, never rejected
    pension_ceiling: float = 50_000_000
    training_fund_ceiling: float = 20_000_000
    portfolio_ceiling: float = 100_000_000
    real_estate_ceiling: float = 100_000_000
    crypto_ceiling: float = 20_000_000

    def __post_init__(self):
        if self.compounding not in COMPOUNDING_MODES:
            raise ValueError(
                f"Unknown compounding mode '{self.compounding}'. Expected one of {COMPOUNDING_MODES}"
            )
        self.portfolio_tax_rate = max(0.0, min(1.0, self.portfolio_tax_rate))

    @classmethod
    def from_profile(cls, profile: dict, resolver, compounding: str = MONTHLY) -> "ProjectionAssumptions":
        """Build assumptions from the optional rate fields of a profile.

        Profile rates are percentages (7 means 7%). Fields that are absent
        keep their defaults; an explicit 0 is honoured.

        Args:
            profile: Raw profile mapping
            resolver: FieldResolver used to read the rate fields
            compounding: Compounding mode for the projection
        """
        defaults = cls()
        fields = {
            "pension_return": CanonicalField.PENSION_RETURN,
            "training_fund_return": CanonicalField.TRAINING_FUND_RETURN,
            "portfolio_return": CanonicalField.PORTFOLIO_RETURN,
            "real_estate_return": CanonicalField.REAL_ESTATE_RETURN,
            "crypto_return": CanonicalField.CRYPTO_RETURN,
            "inflation_rate": CanonicalField.INFLATION_RATE,
            "portfolio_tax_rate": CanonicalField.PORTFOLIO_TAX_RATE,
        }
        values = {}
        for attr, canonical in fields.items():
            # Partner-specific tax rates are applied per saver by the projector
            pct = resolver.resolve_base(profile, canonical, allow_zero=True)
            values[attr] = pct / 100.0 if pct is not None else getattr(defaults, attr)
        return cls(compounding=compounding, **values)

    def to_dict(self) -> dict:
        return asdict(self)
