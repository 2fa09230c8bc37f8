"""Resolve canonical field values from raw, inconsistently named profiles.

The resolver walks the alias table in model.field_aliases. Within one alias
group the first key whose value is present, non-empty and (unless
allow_zero) non-zero wins. Numeric strings are parsed the way a browser
parseFloat would read them: the leading numeric prefix is used and
anything unparseable counts as not found.

In couple planning mode:
- combine_partners=True sums the partner1 and partner2 values, falling
  back to the base keys if neither partner has a value.
- a single-field lookup tries the partner keys first and then the base
  keys, since some profiles never moved to partner-prefixed names.
"""

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from model.errors import InvalidProfileError
from model.field_aliases import CanonicalField, get_aliases, is_string_field

logger = logging.getLogger(__name__)

_NUMBER_PREFIX = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


@dataclass(frozen=True)
class FieldMatch:
    """The raw key that satisfied a lookup and its coerced value."""
    alias: str
    role: str
    value: Any


def parse_number(raw) -> Optional[float]:
    """Coerce a raw profile value to a finite float, or None.

    Booleans are rejected even though they are ints in Python.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        match = _NUMBER_PREFIX.match(raw.strip())
        if not match:
            return None
        value = float(match.group(0))
    else:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_string(raw) -> Optional[str]:
    """Coerce a raw profile value to a lower-cased, trimmed string, or None."""
    if not isinstance(raw, str):
        return None
    value = raw.strip().lower()
    return value or None


def is_couple(profile: Mapping) -> bool:
    """True when the profile is in couple planning mode."""
    planning_type = profile.get("planningType")
    return isinstance(planning_type, str) and planning_type.strip().lower() == "couple"


class FieldResolver:
    """Looks up canonical fields in a raw profile.

    The resolver holds no per-profile state; the same call on the same
    profile always returns the same value.
    """

    def resolve(self,
                profile: Mapping,
                field: CanonicalField,
                allow_zero: bool = False,
                combine_partners: bool = False,
                expect_string: Optional[bool] = None):
        """Resolve a canonical field to a value.

        Args:
            profile: Raw key/value profile
            field: Canonical field to look up
            allow_zero: Accept an exact 0 as a resolved value
            combine_partners: In couple mode, sum the partner1 and partner2 values
            expect_string: Return a lower-cased string instead of a float. Defaults
                to the field's declared kind.

        Returns:
            The float (or string) value, or None when no alias resolves.

        Raises:
            InvalidProfileError: if profile is not a mapping
        """
        self.check_profile(profile)
        if expect_string is None:
            expect_string = is_string_field(field)

        if not is_couple(profile):
            match = self._first_match(profile, field, "base", allow_zero, expect_string)
            return match.value if match else None

        if combine_partners and not expect_string:
            total = None
            for role in ("partner1", "partner2"):
                match = self._first_match(profile, field, role, allow_zero, expect_string)
                if match is not None:
                    total = (total or 0.0) + match.value
            if total is not None:
                logger.debug("Combined partner values for %s: %s", field.value, total)
                return total
            match = self._first_match(profile, field, "base", allow_zero, expect_string)
            return match.value if match else None

        for role in ("partner1", "partner2", "base"):
            match = self._first_match(profile, field, role, allow_zero, expect_string)
            if match is not None:
                return match.value
        return None

    def resolve_base(self, profile: Mapping, field: CanonicalField, allow_zero: bool = False):
        """Resolve a field from the non-partner keys only, in any planning mode.

        Household-wide settings use this so a partner-prefixed value never
        leaks onto the other partner.
        """
        self.check_profile(profile)
        match = self._first_match(profile, field, "base", allow_zero, is_string_field(field))
        return match.value if match else None

    def resolve_partner(self,
                        profile: Mapping,
                        field: CanonicalField,
                        partner: str,
                        allow_zero: bool = False,
                        fallback_to_base: bool = True):
        """Resolve a field for one partner only.

        Args:
            profile: Raw key/value profile
            field: Canonical field to look up
            partner: 'partner1' or 'partner2'
            allow_zero: Accept an exact 0 as a resolved value
            fallback_to_base: Try the non-partner keys when the partner has no value

        Returns:
            The value, or None when nothing resolves.
        """
        self.check_profile(profile)
        if partner not in ("partner1", "partner2"):
            raise ValueError(f"Unknown partner '{partner}'. Expected 'partner1' or 'partner2'")
        expect_string = is_string_field(field)
        match = self._first_match(profile, field, partner, allow_zero, expect_string)
        if match is None and fallback_to_base:
            match = self._first_match(profile, field, "base", allow_zero, expect_string)
        return match.value if match else None

    def locate(self, profile: Mapping, field: CanonicalField, allow_zero: bool = True) -> Optional[FieldMatch]:
        """Find which raw key supplies a field, honouring couple-mode ordering."""
        self.check_profile(profile)
        roles = ("partner1", "partner2", "base") if is_couple(profile) else ("base",)
        expect_string = is_string_field(field)
        for role in roles:
            match = self._first_match(profile, field, role, allow_zero, expect_string)
            if match is not None:
                return match
        return None

    def diagnose(self, profile) -> Dict[str, dict]:
        """Report, for every canonical field, whether and where a value was found.

        Never raises: a non-mapping profile reports every field as not found.
        """
        report = {}
        usable = isinstance(profile, Mapping)
        for field in CanonicalField:
            match = None
            if usable:
                try:
                    match = self.locate(profile, field)
                except (TypeError, ValueError) as e:
                    logger.warning("Could not diagnose field %s: %s", field.value, e)
            report[field.value] = {
                "found": match is not None,
                "alias": match.alias if match else None,
                "role": match.role if match else None,
                "value": match.value if match else None,
            }
        return report

    def missing_fields(self, profile, fields: Iterable[CanonicalField]) -> list:
        """Canonical fields from the given list that have no value in the profile."""
        diagnosis = self.diagnose(profile)
        return [f for f in fields if not diagnosis[f.value]["found"]]

    @staticmethod
    def check_profile(profile):
        if not isinstance(profile, Mapping):
            raise InvalidProfileError(
                f"Profile must be a mapping of field names to values, got {type(profile).__name__}"
            )

    @staticmethod
    def _first_match(profile: Mapping,
                     field: CanonicalField,
                     role: str,
                     allow_zero: bool,
                     expect_string: bool) -> Optional[FieldMatch]:
        for key in get_aliases(field, role):
            raw = profile.get(key)
            if raw is None or raw == "":
                continue
            value = parse_string(raw) if expect_string else parse_number(raw)
            if value is None:
                continue
            if not expect_string and not allow_zero and value == 0:
                continue
            logger.debug("Resolved %s from '%s' (%s)", field.value, key, role)
            return FieldMatch(key, role, value)
        return None


