"""Pricing catalog Pydantic models.

Mirrors the on-disk ``pricing-data.json`` document field-for-field. Every
catalog model allows extra keys so that a load -> rewrite cycle never drops
fields this code does not know about, and documents are dumped with
``exclude_unset`` so optional keys absent on disk stay absent.

Product families are a closed set (``ProductFamily``). Each family has its
own brand and variant model; ``FAMILY_SPECS`` is the single dispatch table
from a family to its section key, models and sizing field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import Field, StringConstraints, model_validator

from src.models.common import Phase, ProductFamily, SolarQuoteBase

Number = int | float


class CatalogModel(SolarQuoteBase):
    """Base for every model persisted inside the catalog document."""

    model_config = {"extra": "allow"}


# ---------------------------------------------------------------------------
# Variants (leaf priced units)
# ---------------------------------------------------------------------------


class CatalogVariant(CatalogModel):
    """Shared shape of a priced variant.

    Each family names its sizing and canonical price fields; ``size`` and
    ``unit_price`` read them.
    """

    size_field: ClassVar[str]
    price_field: ClassVar[str]

    id: str | None = None
    rrp: Number | None = None

    @property
    def size(self) -> Number:
        return getattr(self, self.size_field)

    @property
    def unit_price(self) -> Number:
        return getattr(self, self.price_field)

    @property
    def list_price(self) -> Number:
        """Price before rebate; no rrp recorded means no discount."""
        return self.rrp if self.rrp is not None else self.unit_price

    @property
    def rebate_amount(self) -> Number:
        """Recorded rebate contribution, never negative."""
        return max(0, self.list_price - self.unit_price)


class SolarPackage(CatalogVariant):
    size_field = "size_kw"
    price_field = "price_after_rebate"

    size_kw: Number
    panels: int | None = None
    wattage: Number | None = None
    price_after_rebate: Number
    requires_inverter: bool = True


class InverterModel(CatalogVariant):
    size_field = "power_kw"
    price_field = "price_single"

    model: str
    power_kw: Number
    phase: str | None = None
    price_package: Number | None = None
    price_single: Number
    includes_power_sensor: bool = False
    battery_activated: bool | None = None


class BatteryOption(CatalogVariant):
    size_field = "capacity_kwh"
    price_field = "price_after_rebate"

    model: str | None = None
    capacity_kwh: Number
    price_after_rebate: Number
    power_kw: Number | None = None
    includes_gateway: bool | None = None
    type: str | None = None
    stacks: int | None = None
    towers: int | None = None
    includes_sensor: bool | None = None


class EVChargerOption(CatalogVariant):
    size_field = "power_kw"
    price_field = "installed_price"

    power_kw: Number
    phase: str | None = None
    installed_price: Number


# ---------------------------------------------------------------------------
# Brand entries
# ---------------------------------------------------------------------------


class CatalogBrand(CatalogModel):
    """A manufacturer/series owning an ordered list of variants."""

    variants_field: ClassVar[str]

    brand: str

    @property
    def variants(self) -> list[Any]:
        return getattr(self, self.variants_field)

    @property
    def display_model(self) -> str | None:
        return getattr(self, "model", None)

    @property
    def warranty_term(self) -> Number | None:
        return getattr(self, "warranty_years", None)


class SolarBrand(CatalogBrand):
    variants_field = "packages"

    model: str | None = None
    technology: str | None = None
    warranty_product: Number | None = None
    warranty_performance: Number | None = None
    packages: list[SolarPackage] = Field(default_factory=list)

    @property
    def warranty_term(self) -> Number | None:
        return self.warranty_product


class InverterBrand(CatalogBrand):
    variants_field = "models"

    model_series: str | None = None
    warranty_years: Number | None = None
    activation_fee: Number | None = None
    models: list[InverterModel] = Field(default_factory=list)

    @property
    def display_model(self) -> str | None:
        return self.model_series


class BatteryGateway(CatalogModel):
    model: str
    phase: str | None = None
    price_package: Number | None = None
    price_single: Number | None = None


class BatteryBrand(CatalogBrand):
    variants_field = "options"

    model: str | None = None
    warranty_years: Number | None = None
    requires_hybrid: str | None = None
    requires_controller: bool | None = None
    cell_type: str | None = None
    note: str | None = None
    options: list[BatteryOption] = Field(default_factory=list)
    gateway: BatteryGateway | None = None


class EVChargerBrand(CatalogBrand):
    variants_field = "options"

    model: str | None = None
    cable_type: str | None = None
    cable_length_m: Number | None = None
    connector_type: str | None = None
    options: list[EVChargerOption] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class PhaseSection(CatalogModel):
    solar_panels: dict[str, SolarBrand] = Field(default_factory=dict)
    hybrid_inverters: dict[str, InverterBrand] = Field(default_factory=dict)
    batteries: dict[str, BatteryBrand] = Field(default_factory=dict)
    ev_chargers: dict[str, EVChargerBrand] = Field(default_factory=dict)

    def brands(self, family: ProductFamily) -> dict[str, Any]:
        """Brand map for a product family (the live dict, not a copy)."""
        return getattr(self, FAMILY_SPECS[family].section_key)


class WABatteryRebate(CatalogModel):
    description: str = ""
    value_per_kwh: Number
    max_capacity_kwh: Number
    vpp_requirement: bool = False


class NationalBatteryRebate(CatalogModel):
    description: str = ""
    value_per_certificate: Number


class STCRebate(CatalogModel):
    description: str = ""
    value_per_certificate: Number
    zone: Number | None = None


class RebateRules(CatalogModel):
    wa_battery_rebate: WABatteryRebate
    national_battery_rebate: NationalBatteryRebate
    stc_rebate: STCRebate


class TradeInTable(CatalogModel):
    description: str = ""
    models: dict[str, Number] = Field(default_factory=dict)
    note: str | None = None


class CatalogDocument(CatalogModel):
    """Root aggregate: the single source of truth for pricing."""

    version: str
    last_updated: str = Field(alias="lastUpdated")
    rebates: RebateRules
    single_phase: PhaseSection
    three_phase: PhaseSection
    sungrow_trade_in: TradeInTable | None = None

    def section(self, phase: Phase) -> PhaseSection:
        return self.single_phase if phase is Phase.SINGLE else self.three_phase

    def to_json_dict(self) -> dict[str, Any]:
        """Dump in the on-disk shape (file key names, no invented keys)."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# ---------------------------------------------------------------------------
# Family dispatch table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FamilySpec:
    family: ProductFamily
    section_key: str
    brand_model: type[CatalogBrand]
    variant_model: type[CatalogVariant]

    @property
    def variants_key(self) -> str:
        return self.brand_model.variants_field

    @property
    def size_field(self) -> str:
        return self.variant_model.size_field


FAMILY_SPECS: dict[ProductFamily, FamilySpec] = {
    ProductFamily.SOLAR: FamilySpec(
        ProductFamily.SOLAR, "solar_panels", SolarBrand, SolarPackage,
    ),
    ProductFamily.INVERTER: FamilySpec(
        ProductFamily.INVERTER, "hybrid_inverters", InverterBrand, InverterModel,
    ),
    ProductFamily.BATTERY: FamilySpec(
        ProductFamily.BATTERY, "batteries", BatteryBrand, BatteryOption,
    ),
    ProductFamily.EV_CHARGER: FamilySpec(
        ProductFamily.EV_CHARGER, "ev_chargers", EVChargerBrand, EVChargerOption,
    ),
}


# ---------------------------------------------------------------------------
# Flat product records (admin list view, pricing breakdown)
# ---------------------------------------------------------------------------


class ProductRecordBase(SolarQuoteBase):
    """Uniform projection of one variant plus its position in the document."""

    id: str
    phase: Phase
    brand: str
    model: str | None = None
    brand_key: str
    index: int = Field(..., ge=0)
    warranty_years: Number | None = None
    price: Number
    rrp: Number
    rebate_amount: Number


class SolarProductRecord(ProductRecordBase):
    product_type: Literal[ProductFamily.SOLAR] = ProductFamily.SOLAR
    size_kw: Number
    panels: int | None = None
    wattage: Number | None = None
    price_after_rebate: Number
    warranty_performance: Number | None = None


class InverterProductRecord(ProductRecordBase):
    product_type: Literal[ProductFamily.INVERTER] = ProductFamily.INVERTER
    model_series: str | None = None
    power_kw: Number
    price_single: Number
    price_package: Number | None = None
    includes_power_sensor: bool = False


class BatteryProductRecord(ProductRecordBase):
    product_type: Literal[ProductFamily.BATTERY] = ProductFamily.BATTERY
    capacity_kwh: Number
    power_kw: Number | None = None
    price_after_rebate: Number
    cell_type: str | None = None


class EVChargerProductRecord(ProductRecordBase):
    product_type: Literal[ProductFamily.EV_CHARGER] = ProductFamily.EV_CHARGER
    power_kw: Number
    installed_price: Number
    cable_type: str | None = None
    cable_length_m: Number | None = None


ProductRecord = Annotated[
    Union[
        SolarProductRecord,
        InverterProductRecord,
        BatteryProductRecord,
        EVChargerProductRecord,
    ],
    Field(discriminator="product_type"),
]


# ---------------------------------------------------------------------------
# Admin input
# ---------------------------------------------------------------------------

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

_REQUIRED_FIELDS: dict[ProductFamily, tuple[str, ...]] = {
    ProductFamily.SOLAR: ("size_kw", "price_after_rebate"),
    ProductFamily.INVERTER: ("power_kw", "price_single"),
    ProductFamily.BATTERY: ("capacity_kwh", "price_after_rebate"),
    ProductFamily.EV_CHARGER: ("power_kw", "installed_price"),
}


class ProductInput(SolarQuoteBase):
    """Admin add/update payload for a single variant.

    ``phase`` + ``product_type`` + ``brand`` pick the destination; the
    remaining fields are family-specific.
    """

    phase: Phase
    product_type: ProductFamily = Field(..., alias="productType")
    brand: NonBlankStr
    model: NonBlankStr
    # Solar
    size_kw: Number | None = Field(default=None, gt=0)
    panels: int | None = Field(default=None, ge=0)
    wattage: Number | None = Field(default=None, gt=0)
    price_after_rebate: Number | None = Field(default=None, ge=0)
    rrp: Number | None = Field(default=None, ge=0)
    # Battery
    capacity_kwh: Number | None = Field(default=None, gt=0)
    power_kw: Number | None = Field(default=None, gt=0)
    # EV charger
    cable_type: str | None = None
    cable_length_m: Number | None = Field(default=None, gt=0)
    installed_price: Number | None = Field(default=None, ge=0)
    # Inverter
    price_single: Number | None = Field(default=None, ge=0)
    price_package: Number | None = Field(default=None, ge=0)
    includes_power_sensor: bool | None = None
    # Common
    warranty_years: Number | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_family_fields(self) -> ProductInput:
        missing = [
            name for name in _REQUIRED_FIELDS[self.product_type]
            if getattr(self, name) is None
        ]
        if missing:
            msg = f"{self.product_type.value} products require: {', '.join(missing)}"
            raise ValueError(msg)
        return self


class MinimumPrices(SolarQuoteBase):
    """Cheapest canonical price per family across both phases (0 if none)."""

    solar: Number = 0
    battery: Number = 0
    ev: Number = 0
    inverter: Number = 0
