"""Quote pricing aggregator.

Turns an in-progress customer selection into price totals, a per-system
breakdown, illustrative estimates and financing options. Called on every
change in the quote form, so the default mode never raises for
selection-level problems: unknown tags are ignored and identifiers that
do not resolve simply contribute nothing.

Submission uses ``strict=True`` instead, which refuses to price a quote
whose ticked systems do not all resolve.
"""

from __future__ import annotations

import logging

from src.catalog.service import CatalogService
from src.models.catalog import BatteryProductRecord, SolarProductRecord
from src.models.common import SYSTEM_FAMILY, SystemType, parse_phase
from src.models.pricing import PricingBreakdown, PricingResult, PricingSelection
from src.pricing.estimates import estimate_outcomes, financing_options

logger = logging.getLogger(__name__)


class UnresolvedSelection(ValueError):
    """Strict pricing found ticked systems with no resolvable variant."""

    def __init__(self, systems: list[SystemType]) -> None:
        self.systems = systems
        names = ", ".join(s.value for s in systems)
        super().__init__(f"Selected systems have no matching catalog product: {names}")


_SELECTION_FIELD: dict[SystemType, str] = {
    SystemType.SOLAR: "solar_package",
    SystemType.BATTERY: "battery_system",
    SystemType.EV: "ev_charger",
}


def _selected_systems(selection: PricingSelection) -> list[SystemType]:
    # Fixed solar -> battery -> ev order; unknown tags drop out here.
    return [system for system in SystemType if system.value in selection.selected_systems]


def calculate_pricing(
    selection: PricingSelection,
    catalog: CatalogService,
    *,
    strict: bool = False,
) -> PricingResult:
    """Price a selection against the current catalog.

    Args:
        selection: Ticked system tags plus the chosen identifier per system.
        catalog: Catalog access service to resolve identifiers against.
        strict: Raise UnresolvedSelection instead of pricing a ticked
            system at zero.

    Returns:
        PricingResult with totals rounded to cents.
    """
    phase = parse_phase(selection.power_supply)
    breakdown: dict[str, object] = {}
    unresolved: list[SystemType] = []
    total = 0.0
    rebate = 0.0

    for system in _selected_systems(selection):
        chosen = getattr(selection, _SELECTION_FIELD[system])
        record = None
        if chosen:
            record = catalog.find_variant_by_id(
                chosen, phase=phase, family=SYSTEM_FAMILY[system],
            )
        if record is None:
            logger.debug(
                "Unresolved %s selection %r (power supply %r)",
                system.value, chosen, selection.power_supply,
            )
            unresolved.append(system)
            continue
        breakdown[system.value] = record
        total += record.price
        rebate += record.rebate_amount

    if strict and unresolved:
        raise UnresolvedSelection(unresolved)

    total_price = round(total, 2)
    rebate_amount = round(rebate, 2)
    final_price = round(total_price - rebate_amount, 2)

    solar = breakdown.get(SystemType.SOLAR.value)
    battery = breakdown.get(SystemType.BATTERY.value)
    estimates = estimate_outcomes(
        solar.size_kw if isinstance(solar, SolarProductRecord) else None,
        battery.capacity_kwh if isinstance(battery, BatteryProductRecord) else None,
        final_price,
    )

    return PricingResult(
        total_price=total_price,
        rebate_amount=rebate_amount,
        final_price=final_price,
        breakdown=PricingBreakdown(**breakdown),
        estimates=estimates,
        financing_options=financing_options(final_price),
    )
