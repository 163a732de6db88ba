"""Quote pricing Pydantic models.

``PricingSelection`` is what the quote form sends on every change;
``PricingResult`` is what it gets back. ``QuotePricing`` is the triple
handed to whoever persists the Quote record.

These models speak the quote form's camelCase keys (``selectedSystems``,
``totalPrice``); snake_case field names are accepted on input too.
"""

from pydantic import Field
from pydantic.alias_generators import to_camel

from src.models.catalog import Number, ProductRecord
from src.models.common import SolarQuoteBase


class PricingModel(SolarQuoteBase):
    model_config = {"alias_generator": to_camel}


class PricingSelection(PricingModel):
    """In-progress customer selection.

    Tags and identifiers are kept as plain strings: unknown tags and stale
    identifiers are tolerated rather than rejected.
    """

    selected_systems: list[str] = Field(default_factory=list)
    solar_package: str | None = None
    battery_system: str | None = None
    ev_charger: str | None = None
    power_supply: str | None = None


class PricingBreakdown(PricingModel):
    solar: ProductRecord | None = None
    battery: ProductRecord | None = None
    ev: ProductRecord | None = None


class SavingsProjection(PricingModel):
    """Illustrative 25-year projection, not a performance guarantee."""

    year_one: float = 0.0
    year_5: float = 0.0
    year_10: float = 0.0
    year_25: float = 0.0
    lifetime_savings: float = 0.0
    return_on_investment_pct: float = 0.0


class PricingEstimates(PricingModel):
    """Coarse, table-driven estimates. Illustrative, not precise."""

    annual_savings: float = 0.0
    payback_years: float | None = None
    co2_reduction_tonnes: float = 0.0
    trees_equivalent: int = 0
    projection: SavingsProjection = Field(default_factory=SavingsProjection)


class FinancingOption(PricingModel):
    term_years: int
    interest_rate: float
    loan_amount: float
    monthly_payment: float
    total_payments: float
    total_interest: float


class QuotePricing(PricingModel):
    """Totals stored on a submitted Quote."""

    total_price: Number = 0
    rebate_amount: Number = 0
    final_price: Number = 0


class PricingResult(QuotePricing):
    breakdown: PricingBreakdown = Field(default_factory=PricingBreakdown)
    estimates: PricingEstimates = Field(default_factory=PricingEstimates)
    financing_options: list[FinancingOption] = Field(default_factory=list)

    def totals(self) -> QuotePricing:
        return QuotePricing(
            total_price=self.total_price,
            rebate_amount=self.rebate_amount,
            final_price=self.final_price,
        )
