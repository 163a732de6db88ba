"""Catalog access layer: the sole gateway to the pricing catalog document.

One ``CatalogService`` instance owns one store and one cached parsed
document. Every mutation is a full cycle:

    load -> deep copy -> mutate copy -> write whole document -> reload cache

so a failed write never leaves a half-edited document in the cache. A
re-entrant lock serialises the cycle within the process; across processes
the last writer wins.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from src.catalog.errors import (
    BrandNotFound,
    CatalogUnavailable,
    ProductNotFound,
    VariantNotFound,
)
from src.catalog.identifiers import (
    UuidId,
    brand_slug,
    legacy_slug,
    matches_variant,
    parse_variant_id,
)
from src.catalog.store import CatalogStore, JsonFileCatalogStore
from src.models.catalog import (
    FAMILY_SPECS,
    BatteryBrand,
    BatteryOption,
    BatteryProductRecord,
    CatalogBrand,
    CatalogDocument,
    CatalogVariant,
    EVChargerBrand,
    EVChargerOption,
    EVChargerProductRecord,
    InverterBrand,
    InverterModel,
    InverterProductRecord,
    MinimumPrices,
    Number,
    ProductInput,
    ProductRecord,
    RebateRules,
    SolarBrand,
    SolarPackage,
    SolarProductRecord,
)
from src.models.common import Phase, ProductFamily, new_variant_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantLocation:
    """Where a variant sits in the document."""

    phase: Phase
    family: ProductFamily
    brand_key: str
    index: int

    def describe(self) -> str:
        return f"{self.phase.value}/{self.family.value}/{self.brand_key}[{self.index}]"


def iter_variants(
    document: CatalogDocument,
) -> Iterator[tuple[VariantLocation, CatalogBrand, CatalogVariant]]:
    """Walk every variant: phase -> family -> brand (document order) -> index."""
    for phase in Phase:
        section = document.section(phase)
        for family in ProductFamily:
            for brand_key, brand in section.brands(family).items():
                for index, variant in enumerate(brand.variants):
                    yield VariantLocation(phase, family, brand_key, index), brand, variant


# ---------------------------------------------------------------------------
# Flat record projection
# ---------------------------------------------------------------------------


def to_record(
    location: VariantLocation,
    brand: CatalogBrand,
    variant: CatalogVariant,
) -> ProductRecord:
    """Project one variant into the uniform flat record shape."""
    common: dict[str, Any] = {
        "id": variant.id or legacy_slug(location.phase, location.brand_key, variant, location.index),
        "phase": location.phase,
        "brand": brand.brand,
        "model": brand.display_model,
        "brand_key": location.brand_key,
        "index": location.index,
        "warranty_years": brand.warranty_term,
        "price": variant.unit_price,
        "rrp": variant.list_price,
        "rebate_amount": variant.rebate_amount,
    }
    return _RECORD_BUILDERS[location.family](common, brand, variant)


def _solar_record(common: dict[str, Any], brand: Any, variant: Any) -> SolarProductRecord:
    return SolarProductRecord(
        **common,
        size_kw=variant.size_kw,
        panels=variant.panels,
        wattage=variant.wattage,
        price_after_rebate=variant.price_after_rebate,
        warranty_performance=brand.warranty_performance,
    )


def _inverter_record(common: dict[str, Any], brand: Any, variant: Any) -> InverterProductRecord:
    return InverterProductRecord(
        **{**common, "model": variant.model},
        model_series=brand.model_series,
        power_kw=variant.power_kw,
        price_single=variant.price_single,
        price_package=variant.price_package,
        includes_power_sensor=variant.includes_power_sensor,
    )


def _battery_record(common: dict[str, Any], brand: Any, variant: Any) -> BatteryProductRecord:
    return BatteryProductRecord(
        **{**common, "model": variant.model or brand.model},
        capacity_kwh=variant.capacity_kwh,
        power_kw=variant.power_kw,
        price_after_rebate=variant.price_after_rebate,
        cell_type=brand.cell_type,
    )


def _ev_record(common: dict[str, Any], brand: Any, variant: Any) -> EVChargerProductRecord:
    return EVChargerProductRecord(
        **common,
        power_kw=variant.power_kw,
        installed_price=variant.installed_price,
        cable_type=brand.cable_type,
        cable_length_m=brand.cable_length_m,
    )


_RECORD_BUILDERS: dict[ProductFamily, Callable[..., Any]] = {
    ProductFamily.SOLAR: _solar_record,
    ProductFamily.INVERTER: _inverter_record,
    ProductFamily.BATTERY: _battery_record,
    ProductFamily.EV_CHARGER: _ev_record,
}


# ---------------------------------------------------------------------------
# Brand / variant factories for admin input
# ---------------------------------------------------------------------------


def _present(**fields: Any) -> dict[str, Any]:
    """Drop None values so absent inputs stay absent on disk."""
    return {k: v for k, v in fields.items() if v is not None}


def _new_solar_brand(data: ProductInput) -> SolarBrand:
    return SolarBrand(
        brand=data.brand,
        model=data.model,
        technology="Monocrystalline",
        warranty_product=data.warranty_years or 12,
        warranty_performance=25,
        packages=[],
    )


def _new_inverter_brand(data: ProductInput) -> InverterBrand:
    return InverterBrand(
        brand=data.brand,
        model_series=data.model,
        warranty_years=data.warranty_years or 10,
        models=[],
    )


def _new_battery_brand(data: ProductInput) -> BatteryBrand:
    return BatteryBrand(
        brand=data.brand,
        model=data.model,
        warranty_years=data.warranty_years or 10,
        options=[],
    )


def _new_ev_brand(data: ProductInput) -> EVChargerBrand:
    return EVChargerBrand(
        brand=data.brand,
        model=data.model,
        cable_type=data.cable_type or "Tethered",
        **_present(cable_length_m=data.cable_length_m),
        options=[],
    )


def _new_solar_variant(data: ProductInput, phase: Phase, variant_id: str) -> SolarPackage:
    return SolarPackage(
        **_present(
            id=variant_id,
            size_kw=data.size_kw,
            panels=data.panels,
            wattage=data.wattage,
            price_after_rebate=data.price_after_rebate,
            rrp=data.rrp,
        ),
    )


def _new_inverter_variant(data: ProductInput, phase: Phase, variant_id: str) -> InverterModel:
    return InverterModel(
        **_present(
            id=variant_id,
            model=data.model,
            power_kw=data.power_kw,
            phase=phase.variant_label,
            price_package=data.price_package,
            price_single=data.price_single,
            rrp=data.rrp,
            includes_power_sensor=data.includes_power_sensor,
        ),
    )


def _new_battery_variant(data: ProductInput, phase: Phase, variant_id: str) -> BatteryOption:
    return BatteryOption(
        **_present(
            id=variant_id,
            capacity_kwh=data.capacity_kwh,
            price_after_rebate=data.price_after_rebate,
            rrp=data.rrp,
            power_kw=data.power_kw,
        ),
    )


def _new_ev_variant(data: ProductInput, phase: Phase, variant_id: str) -> EVChargerOption:
    return EVChargerOption(
        **_present(
            id=variant_id,
            power_kw=data.power_kw,
            phase=phase.variant_label,
            installed_price=data.installed_price,
            rrp=data.rrp,
        ),
    )


_BRAND_FACTORIES: dict[ProductFamily, Callable[[ProductInput], CatalogBrand]] = {
    ProductFamily.SOLAR: _new_solar_brand,
    ProductFamily.INVERTER: _new_inverter_brand,
    ProductFamily.BATTERY: _new_battery_brand,
    ProductFamily.EV_CHARGER: _new_ev_brand,
}

_VARIANT_FACTORIES: dict[ProductFamily, Callable[[ProductInput, Phase, str], CatalogVariant]] = {
    ProductFamily.SOLAR: _new_solar_variant,
    ProductFamily.INVERTER: _new_inverter_variant,
    ProductFamily.BATTERY: _new_battery_variant,
    ProductFamily.EV_CHARGER: _new_ev_variant,
}

# Stored values for a variant with no previous version to carry fields over
# from (an add, or a move across families).
_FRESH_DEFAULTS: dict[ProductFamily, Callable[[ProductInput], dict[str, Any]]] = {
    ProductFamily.SOLAR: lambda data: {"requires_inverter": True},
    ProductFamily.INVERTER: lambda data: {
        "price_package": data.price_single,
        "includes_power_sensor": False,
    },
    ProductFamily.BATTERY: lambda data: {},
    ProductFamily.EV_CHARGER: lambda data: {},
}


def _mark_set(model: BaseModel, field: str) -> None:
    # In-place list/dict edits do not mark a field as set; re-assign so an
    # exclude_unset dump still writes it.
    setattr(model, field, getattr(model, field))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CatalogService:
    """Load/cache, lookup, flatten, normalise and mutate the pricing catalog."""

    def __init__(self, store: CatalogStore) -> None:
        self._store = store
        self._cache: CatalogDocument | None = None
        self._lock = threading.RLock()

    @classmethod
    def from_path(cls, path: str | Path) -> CatalogService:
        return cls(JsonFileCatalogStore(path))

    # --- load / cache -----------------------------------------------------

    def load_catalog(self) -> CatalogDocument:
        """Cached document, reading the store on first use.

        The returned document is shared; treat it as read-only.
        """
        with self._lock:
            if self._cache is None:
                self._cache = self._read()
            return self._cache

    def reload_catalog(self) -> CatalogDocument:
        """Drop the cache and read the store again."""
        with self._lock:
            self._cache = None
            return self.load_catalog()

    def _read(self) -> CatalogDocument:
        raw = self._store.read()
        try:
            document = CatalogDocument.model_validate(raw)
        except ValidationError as exc:
            msg = (
                f"Pricing catalog at {self._store.describe()} has an invalid shape "
                f"({exc.error_count()} validation errors)."
            )
            raise CatalogUnavailable(msg) from exc
        logger.info(
            "Loaded pricing catalog version %s from %s",
            document.version,
            self._store.describe(),
        )
        return document

    def _working_copy(self) -> CatalogDocument:
        return self.load_catalog().model_copy(deep=True)

    def _commit(self, document: CatalogDocument) -> CatalogDocument:
        self._store.write(document.to_json_dict())
        return self.reload_catalog()

    # --- lookups ----------------------------------------------------------

    def find_variant(
        self,
        phase: Phase,
        family: ProductFamily,
        brand_key: str,
        size: Number,
    ) -> CatalogVariant | None:
        """The variant whose sizing field equals ``size`` exactly, else None."""
        brand = self.load_catalog().section(phase).brands(family).get(brand_key)
        if brand is None:
            return None
        for variant in brand.variants:
            if variant.size == size:
                return variant
        return None

    def find_variant_by_id(
        self,
        variant_id: str,
        *,
        phase: Phase | None = None,
        family: ProductFamily | None = None,
    ) -> ProductRecord | None:
        """Flat record for ``variant_id``, optionally scoped; None on miss."""
        for location, brand, variant in iter_variants(self.load_catalog()):
            if phase is not None and location.phase is not phase:
                continue
            if family is not None and location.family is not family:
                continue
            if matches_variant(variant_id, location.phase, location.brand_key, variant, location.index):
                return to_record(location, brand, variant)
        return None

    def list_brands(self, phase: Phase, family: ProductFamily) -> dict[str, CatalogBrand]:
        return dict(self.load_catalog().section(phase).brands(family))

    def get_rebate_info(self) -> RebateRules:
        return self.load_catalog().rebates

    def get_trade_in_value(self, model: str) -> Number:
        """Trade-in credit for a legacy inverter model; 0 when unknown."""
        table = self.load_catalog().sungrow_trade_in
        if table is None:
            return 0
        return table.models.get(model, 0)

    def get_minimum_prices(self) -> MinimumPrices:
        """Cheapest canonical price per family across both phases."""
        minimums: dict[ProductFamily, Number] = {}
        for location, _brand, variant in iter_variants(self.load_catalog()):
            current = minimums.get(location.family)
            if current is None or variant.unit_price < current:
                minimums[location.family] = variant.unit_price
        return MinimumPrices(
            solar=minimums.get(ProductFamily.SOLAR, 0),
            battery=minimums.get(ProductFamily.BATTERY, 0),
            ev=minimums.get(ProductFamily.EV_CHARGER, 0),
            inverter=minimums.get(ProductFamily.INVERTER, 0),
        )

    # --- flatten + ID normalisation ---------------------------------------

    def list_all_variants(self) -> list[ProductRecord]:
        """Every variant as a flat record, normalising IDs on the way.

        Variants with a missing, slug-style or duplicated ID get a fresh
        UUID. If anything changed the document is written once and the
        cache reloaded; a second call finds only UUIDs and writes nothing.
        """
        with self._lock:
            document = self.load_catalog()
            pending = pending_id_fixes(document)
            if pending:
                document = self._working_copy()
                remapped: list[tuple[str | None, str]] = []
                for location in pending:
                    variant = _variant_at(document, location)
                    new_id = new_variant_id()
                    remapped.append((variant.id, new_id))
                    variant.id = new_id
                document = self._commit(document)
                logger.info(
                    "Normalised %d catalog variant IDs to UUIDs (%d had legacy IDs)",
                    len(remapped),
                    sum(1 for old, _new in remapped if old),
                )
            return [
                to_record(location, brand, variant)
                for location, brand, variant in iter_variants(document)
            ]

    # --- mutations --------------------------------------------------------

    def add_variant(self, data: ProductInput) -> ProductRecord:
        """Append a new variant (fresh UUID), creating its brand if needed."""
        with self._lock:
            document = self._working_copy()
            location = _insert(document, data, new_variant_id())
            document = self._commit(document)
            logger.info("Added catalog variant at %s", location.describe())
            return _record_at(document, location)

    def update_variant(self, variant_id: str, data: ProductInput) -> ProductRecord:
        """Rewrite a variant in place, or move it to another phase/family/brand.

        The variant keeps its ID. Raises ProductNotFound when no variant in
        any family answers to ``variant_id``.
        """
        with self._lock:
            document = self._working_copy()
            found = _locate(document, variant_id)
            if found is None:
                raise ProductNotFound(variant_id)
            origin, variant = found
            kept_id = variant.id or variant_id

            brands = document.section(origin.phase).brands(origin.family)
            variants = brands[origin.brand_key].variants
            del variants[origin.index]

            base = (
                variant.model_dump(exclude_unset=True)
                if data.product_type is origin.family
                else None
            )
            stays = (
                data.phase is origin.phase
                and data.product_type is origin.family
                and brand_slug(data.brand) == origin.brand_key
            )
            if stays:
                destination = _insert(document, data, kept_id, base=base, at_index=origin.index)
            else:
                if not variants:
                    del brands[origin.brand_key]
                destination = _insert(document, data, kept_id, base=base)

            document = self._commit(document)
            if stays:
                logger.info("Updated catalog variant %s at %s", kept_id, destination.describe())
            else:
                logger.info(
                    "Moved catalog variant %s from %s to %s",
                    kept_id,
                    origin.describe(),
                    destination.describe(),
                )
            return _record_at(document, destination)

    def delete_variant(
        self,
        variant_id: str | None,
        phase: Phase,
        family: ProductFamily,
        brand_key: str,
        index: int,
    ) -> ProductRecord:
        """Remove the variant at a position taken from ``list_all_variants``.

        Raises BrandNotFound / VariantNotFound when the reference is stale,
        including when the slot now holds a different variant.
        """
        with self._lock:
            document = self._working_copy()
            brands = document.section(phase).brands(family)
            brand = brands.get(brand_key)
            if brand is None:
                raise BrandNotFound(brand_key, f"{phase.value}/{family.value}")
            variants = brand.variants
            if not 0 <= index < len(variants):
                raise VariantNotFound(brand_key, index)
            variant = variants[index]
            if variant_id is not None and not matches_variant(variant_id, phase, brand_key, variant, index):
                raise VariantNotFound(brand_key, index)

            location = VariantLocation(phase, family, brand_key, index)
            removed = to_record(location, brand, variant)
            del variants[index]
            if not variants:
                del brands[brand_key]
            self._commit(document)
            logger.info("Deleted catalog variant %s at %s", removed.id, location.describe())
            return removed


# ---------------------------------------------------------------------------
# Document helpers
# ---------------------------------------------------------------------------


def _variant_at(document: CatalogDocument, location: VariantLocation) -> CatalogVariant:
    brand = document.section(location.phase).brands(location.family)[location.brand_key]
    return brand.variants[location.index]


def _record_at(document: CatalogDocument, location: VariantLocation) -> ProductRecord:
    brand = document.section(location.phase).brands(location.family)[location.brand_key]
    return to_record(location, brand, brand.variants[location.index])


def pending_id_fixes(document: CatalogDocument) -> list[VariantLocation]:
    """Locations whose variant needs a fresh UUID (missing, legacy, duplicate)."""
    seen: set[str] = set()
    pending: list[VariantLocation] = []
    for location, _brand, variant in iter_variants(document):
        parsed = parse_variant_id(variant.id)
        if isinstance(parsed, UuidId) and parsed.value not in seen:
            seen.add(parsed.value)
            continue
        pending.append(location)
    return pending


def _locate(
    document: CatalogDocument,
    variant_id: str,
) -> tuple[VariantLocation, CatalogVariant] | None:
    for location, _brand, variant in iter_variants(document):
        if matches_variant(variant_id, location.phase, location.brand_key, variant, location.index):
            return location, variant
    return None


def _insert(
    document: CatalogDocument,
    data: ProductInput,
    variant_id: str,
    *,
    base: dict[str, Any] | None = None,
    at_index: int | None = None,
) -> VariantLocation:
    """Place a variant built from ``data`` under its destination brand."""
    family = data.product_type
    spec = FAMILY_SPECS[family]
    section = document.section(data.phase)
    brands = section.brands(family)
    brand_key = brand_slug(data.brand)

    brand = brands.get(brand_key)
    if brand is None:
        brand = _BRAND_FACTORIES[family](data)
        brands[brand_key] = brand
        _mark_set(section, spec.section_key)

    variant = _VARIANT_FACTORIES[family](data, data.phase, variant_id)
    if base is None:
        base = _FRESH_DEFAULTS[family](data)
    merged = {**base, **variant.model_dump(exclude_unset=True)}
    variant = spec.variant_model.model_validate(merged)

    variants = brand.variants
    if at_index is None:
        variants.append(variant)
        index = len(variants) - 1
    else:
        variants.insert(at_index, variant)
        index = at_index
    _mark_set(brand, spec.variants_key)
    return VariantLocation(data.phase, family, brand_key, index)
