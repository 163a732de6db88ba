"""FastAPI admin product management endpoints.

GET    /v1/admin/products             flat list of every variant (normalises IDs)
POST   /v1/admin/products             add a variant
PUT    /v1/admin/products/{id}        update a variant, moving it if needed
DELETE /v1/admin/products/{id}        delete by position (phase/type/brand/index)
POST   /v1/admin/products/reload      drop the cached catalog and re-read it

Positions returned by the list endpoint are only valid until the next
mutation; stale positions are rejected with 404.

Handlers are plain functions: they read and rewrite the catalog file, so
FastAPI runs them in its threadpool.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from src.api.dependencies import get_catalog_service
from src.catalog.errors import BrandNotFound, ProductNotFound, VariantNotFound
from src.catalog.service import CatalogService
from src.models.catalog import ProductInput, ProductRecord
from src.models.common import Phase, ProductFamily

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/products", tags=["admin"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ProductListResponse(BaseModel):
    items: list[ProductRecord]
    total: int


class ReloadResponse(BaseModel):
    version: str
    last_updated: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=ProductListResponse)
def list_products(
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductListResponse:
    items = catalog.list_all_variants()
    return ProductListResponse(items=items, total=len(items))


@router.post("", status_code=201, response_model=ProductRecord)
def add_product(
    body: ProductInput,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductRecord:
    return catalog.add_variant(body)


@router.post("/reload", response_model=ReloadResponse)
def reload_catalog(
    catalog: CatalogService = Depends(get_catalog_service),
) -> ReloadResponse:
    document = catalog.reload_catalog()
    logger.info("Pricing catalog reloaded on request")
    return ReloadResponse(version=document.version, last_updated=document.last_updated)


@router.put("/{product_id}", response_model=ProductRecord)
def update_product(
    product_id: str,
    body: ProductInput,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductRecord:
    try:
        return catalog.update_variant(product_id, body)
    except ProductNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{product_id}", response_model=ProductRecord)
def delete_product(
    product_id: str,
    phase: Phase = Query(...),
    product_type: ProductFamily = Query(...),
    brand_key: str = Query(..., min_length=1),
    index: int = Query(..., ge=0),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductRecord:
    try:
        return catalog.delete_variant(product_id, phase, product_type, brand_key, index)
    except (BrandNotFound, VariantNotFound) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
