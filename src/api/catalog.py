"""FastAPI public catalog endpoints.

GET /v1/catalog/trade-in/{model}                               trade-in credit
GET /v1/catalog/{phase}/{product_type}                         brand map
GET /v1/catalog/{phase}/{product_type}/{brand_key}/lookup      exact size lookup

Brand and variant bodies are returned in their on-disk shape.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from src.api.dependencies import get_catalog_service
from src.catalog.service import CatalogService
from src.models.catalog import Number
from src.models.common import Phase, ProductFamily

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/catalog", tags=["catalog"])


class TradeInResponse(BaseModel):
    model: str
    value: Number

    model_config = {"protected_namespaces": ()}


# Declared before the {phase} routes so "trade-in" is never parsed as a phase.
@router.get("/trade-in/{model}", response_model=TradeInResponse)
async def get_trade_in(
    model: str,
    catalog: CatalogService = Depends(get_catalog_service),
) -> TradeInResponse:
    return TradeInResponse(model=model, value=catalog.get_trade_in_value(model))


@router.get("/{phase}/{product_type}")
async def list_brands(
    phase: Phase,
    product_type: ProductFamily,
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    brands = catalog.list_brands(phase, product_type)
    return {
        key: brand.model_dump(mode="json", exclude_unset=True)
        for key, brand in brands.items()
    }


@router.get("/{phase}/{product_type}/{brand_key}/lookup")
async def lookup_variant(
    phase: Phase,
    product_type: ProductFamily,
    brand_key: str,
    size: float = Query(..., gt=0, allow_inf_nan=False),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, Any]:
    variant = catalog.find_variant(phase, product_type, brand_key, size)
    if variant is None:
        logger.debug("Catalog lookup miss: %s/%s/%s size=%s", phase.value, product_type.value, brand_key, size)
        raise HTTPException(
            status_code=404,
            detail=f"No {product_type.value} variant of size {size:g} for brand '{brand_key}' ({phase.value}).",
        )
    return variant.model_dump(mode="json", exclude_unset=True)
