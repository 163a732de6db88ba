"""Government rebate formulas. Pure functions, no I/O.

Solar: federal STC (Small-scale Technology Certificate) estimate,
    size_kw x deeming period x zone rating x certificate price
where the deeming period shrinks by one year every calendar year until the
scheme ends, so it is recomputed on every call.

Battery: WA state rebate (per kWh, capped capacity, one brand excluded)
plus the national battery rebate (one certificate per whole kWh).

Inputs are not validated. Callers reject negative or non-numeric values
before calling; a formula evaluator returns whatever the formula gives.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

from src.catalog.identifiers import brand_slug
from src.models.catalog import Number, RebateRules

STC_SCHEME_END_YEAR = 2031

# Perth, STC zone 3.
ZONE_RATING = 1.536

# Brands excluded from the WA battery rebate regardless of capacity.
STATE_REBATE_EXCLUDED_BRANDS: frozenset[str] = frozenset({"tesla"})


@dataclass(frozen=True)
class BatteryRebate:
    """State and national components, kept apart for the breakdown view."""

    state_rebate: float
    national_rebate: float

    @property
    def total_rebate(self) -> float:
        return self.state_rebate + self.national_rebate


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def deeming_period(year: int | None = None) -> int:
    """Years of STC deeming left, never below one."""
    current = year if year is not None else date.today().year
    return max(1, STC_SCHEME_END_YEAR - current)


def calculate_solar_rebate(
    size_kw: Number,
    price_per_certificate: Number,
    *,
    zone_rating: float = ZONE_RATING,
    year: int | None = None,
) -> int:
    """STC rebate for a solar system, rounded to whole dollars."""
    return _round_half_up(
        size_kw * deeming_period(year) * zone_rating * price_per_certificate
    )


def calculate_battery_rebate(
    capacity_kwh: Number,
    is_excluded_brand: bool,
    *,
    value_per_kwh: Number,
    max_capacity_kwh: Number,
    value_per_certificate: Number,
) -> BatteryRebate:
    """WA + national battery rebates.

    The state component uses capacity capped at ``max_capacity_kwh`` and is
    zero for an excluded brand. The national component always applies.
    """
    state = 0.0
    if not is_excluded_brand:
        state = min(capacity_kwh, max_capacity_kwh) * value_per_kwh
    national = math.floor(capacity_kwh) * value_per_certificate
    return BatteryRebate(state_rebate=state, national_rebate=national)


def is_state_rebate_excluded(brand: str) -> bool:
    """Whether a brand (display name or slug) is carved out of the WA rebate."""
    slug = brand_slug(brand)
    return any(
        slug == excluded or slug.startswith(f"{excluded}_")
        for excluded in STATE_REBATE_EXCLUDED_BRANDS
    )


# ---------------------------------------------------------------------------
# Rule-set wrappers (take the catalog ``rebates`` block)
# ---------------------------------------------------------------------------


def solar_rebate_for(rules: RebateRules, size_kw: Number, *, year: int | None = None) -> int:
    return calculate_solar_rebate(
        size_kw, rules.stc_rebate.value_per_certificate, year=year,
    )


def battery_rebate_for(rules: RebateRules, capacity_kwh: Number, brand: str) -> BatteryRebate:
    return calculate_battery_rebate(
        capacity_kwh,
        is_state_rebate_excluded(brand),
        value_per_kwh=rules.wa_battery_rebate.value_per_kwh,
        max_capacity_kwh=rules.wa_battery_rebate.max_capacity_kwh,
        value_per_certificate=rules.national_battery_rebate.value_per_certificate,
    )
