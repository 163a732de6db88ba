"""FastAPI quote pricing endpoints.

POST /v1/pricing/calculate         live pricing for the quote form (lenient)
POST /v1/pricing/submit            totals for a submitted quote (strict)
GET  /v1/pricing/minimums          "from $X" prices per system
GET  /v1/pricing/rebates           rebate rule block from the catalog
GET  /v1/pricing/rebates/solar     STC estimate for a system size
GET  /v1/pricing/rebates/battery   WA + national battery rebate breakdown
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from src.api.dependencies import get_catalog_service
from src.catalog.rebates import (
    battery_rebate_for,
    deeming_period,
    is_state_rebate_excluded,
    solar_rebate_for,
)
from src.catalog.service import CatalogService
from src.models.catalog import MinimumPrices, RebateRules
from src.models.pricing import PricingResult, PricingSelection, QuotePricing
from src.pricing.aggregator import UnresolvedSelection, calculate_pricing

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/pricing", tags=["pricing"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SolarRebateResponse(BaseModel):
    size_kw: float
    deeming_period_years: int
    value_per_certificate: float
    rebate: int


class BatteryRebateResponse(BaseModel):
    capacity_kwh: float
    brand: str | None = None
    state_rebate_excluded: bool
    state_rebate: float
    national_rebate: float
    total_rebate: float


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/calculate", response_model=PricingResult)
async def calculate(
    body: PricingSelection,
    catalog: CatalogService = Depends(get_catalog_service),
) -> PricingResult:
    return calculate_pricing(body, catalog)


@router.post("/submit", response_model=QuotePricing)
async def submit(
    body: PricingSelection,
    catalog: CatalogService = Depends(get_catalog_service),
) -> QuotePricing:
    """Price a quote for persistence; every ticked system must resolve."""
    try:
        result = calculate_pricing(body, catalog, strict=True)
    except UnresolvedSelection as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    logger.info(
        "Priced submitted quote: total=%s rebate=%s final=%s",
        result.total_price, result.rebate_amount, result.final_price,
    )
    return result.totals()


@router.get("/minimums", response_model=MinimumPrices)
async def minimums(
    catalog: CatalogService = Depends(get_catalog_service),
) -> MinimumPrices:
    return catalog.get_minimum_prices()


@router.get("/rebates", response_model=RebateRules)
async def rebate_rules(
    catalog: CatalogService = Depends(get_catalog_service),
) -> RebateRules:
    return catalog.get_rebate_info()


@router.get("/rebates/solar", response_model=SolarRebateResponse)
async def solar_rebate(
    size_kw: float = Query(..., ge=0, allow_inf_nan=False),
    catalog: CatalogService = Depends(get_catalog_service),
) -> SolarRebateResponse:
    rules = catalog.get_rebate_info()
    return SolarRebateResponse(
        size_kw=size_kw,
        deeming_period_years=deeming_period(),
        value_per_certificate=rules.stc_rebate.value_per_certificate,
        rebate=solar_rebate_for(rules, size_kw),
    )


@router.get("/rebates/battery", response_model=BatteryRebateResponse)
async def battery_rebate(
    capacity_kwh: float = Query(..., ge=0, allow_inf_nan=False),
    brand: str | None = Query(None),
    catalog: CatalogService = Depends(get_catalog_service),
) -> BatteryRebateResponse:
    rebate = battery_rebate_for(catalog.get_rebate_info(), capacity_kwh, brand or "")
    return BatteryRebateResponse(
        capacity_kwh=capacity_kwh,
        brand=brand,
        state_rebate_excluded=bool(brand) and is_state_rebate_excluded(brand),
        state_rebate=rebate.state_rebate,
        national_rebate=rebate.national_rebate,
        total_rebate=rebate.total_rebate,
    )
