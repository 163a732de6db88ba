"""Variant identifiers.

Current catalogs key every variant by a UUID string. Older deployments
stored slug IDs composed from family, phase, brand and size (or no ID at
all). ``parse_variant_id`` is the one place that tells the two apart; the
slug builders reproduce the legacy scheme so un-migrated variants can
still be matched by the ID an old client holds.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.models.catalog import (
    BatteryOption,
    CatalogVariant,
    EVChargerOption,
    InverterModel,
    Number,
    SolarPackage,
)
from src.models.common import Phase

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class UuidId:
    value: str


@dataclass(frozen=True)
class LegacySlugId:
    value: str


VariantId = UuidId | LegacySlugId


def parse_variant_id(raw: str | None) -> VariantId | None:
    """Classify a stored ID. None means the variant has no ID at all."""
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None
    if _UUID_RE.match(value):
        return UuidId(value.lower())
    return LegacySlugId(value)


def is_uuid(raw: str | None) -> bool:
    return isinstance(parse_variant_id(raw), UuidId)


def brand_slug(brand: str) -> str:
    """Brand map key for a display name: lower-case, whitespace -> ``_``."""
    return re.sub(r"\s+", "_", brand.strip().lower())


def _num(value: Number) -> str:
    # Whole numbers render without a trailing ".0" (6.6 -> "6.6", 10.0 -> "10").
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def legacy_slug(
    phase: Phase,
    brand_key: str,
    variant: CatalogVariant,
    index: int,
) -> str:
    """Slug ID the legacy ID backfill would have assigned to ``variant``."""
    ph = phase.short_code
    if isinstance(variant, SolarPackage):
        return f"solar-{ph}-{brand_key}-{_num(variant.size_kw)}kw".lower()
    if isinstance(variant, InverterModel):
        slug = f"inverter-{ph}-{brand_key}-{variant.model}".lower()
        return re.sub(r"[^a-z0-9-]", "-", slug)
    if isinstance(variant, BatteryOption):
        slug = f"battery-{ph}-{brand_key}-{_num(variant.capacity_kwh)}kwh-{index}".lower()
        return slug.replace(".", "-")
    if isinstance(variant, EVChargerOption):
        return f"ev-{ph}-{brand_key}-{_num(variant.power_kw)}kw".lower().replace(".", "-")
    msg = f"Unsupported variant type: {type(variant).__name__}"
    raise TypeError(msg)


def matches_variant(
    candidate_id: str,
    phase: Phase,
    brand_key: str,
    variant: CatalogVariant,
    index: int,
) -> bool:
    """True when ``candidate_id`` names ``variant``.

    Exact match on the stored ID first; variants that were never given a
    UUID also answer to their legacy slug.
    """
    if variant.id is not None and variant.id == candidate_id:
        return True
    if isinstance(parse_variant_id(variant.id), UuidId):
        return False
    return legacy_slug(phase, brand_key, variant, index) == candidate_id.lower()
