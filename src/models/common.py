"""Shared types, enums, and base models used across SolarQuote domain models."""

from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel
from uuid_extensions import uuid7


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


def new_variant_id() -> str:
    """Fresh catalog variant ID in the string form stored on disk."""
    return str(new_uuid7())


# --- Shared enums ---


class Phase(StrEnum):
    """Electrical supply configuration; doubles as the catalog section key."""

    SINGLE = "single_phase"
    THREE = "three_phase"

    @property
    def short_code(self) -> str:
        """Code used in legacy slug IDs (``1ph`` / ``3ph``)."""
        return "1ph" if self is Phase.SINGLE else "3ph"

    @property
    def variant_label(self) -> str:
        """Label stored on inverter and EV charger variants."""
        return "1-phase" if self is Phase.SINGLE else "3-phase"


class ProductFamily(StrEnum):
    """The four product families held in every phase section."""

    SOLAR = "solar"
    INVERTER = "inverter"
    BATTERY = "battery"
    EV_CHARGER = "ev_charger"


class SystemType(StrEnum):
    """System tags a customer can tick on the quote form."""

    SOLAR = "solar"
    BATTERY = "battery"
    EV = "ev"


SYSTEM_FAMILY: dict[SystemType, ProductFamily] = {
    SystemType.SOLAR: ProductFamily.SOLAR,
    SystemType.BATTERY: ProductFamily.BATTERY,
    SystemType.EV: ProductFamily.EV_CHARGER,
}

_PHASE_ALIASES: dict[str, Phase] = {
    "single_phase": Phase.SINGLE,
    "single": Phase.SINGLE,
    "single-phase": Phase.SINGLE,
    "1-phase": Phase.SINGLE,
    "1ph": Phase.SINGLE,
    "three_phase": Phase.THREE,
    "three": Phase.THREE,
    "three-phase": Phase.THREE,
    "3-phase": Phase.THREE,
    "3ph": Phase.THREE,
}


def parse_phase(value: str | None) -> Phase | None:
    """Map a power-supply tag from the quote form onto a Phase.

    Returns None for unknown or empty tags ("not sure" is a valid answer).
    """
    if not value:
        return None
    return _PHASE_ALIASES.get(value.strip().lower())


# --- Base model ---


class SolarQuoteBase(BaseModel):
    """Base model with common configuration for all SolarQuote Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
        "allow_inf_nan": False,
    }
