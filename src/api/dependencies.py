"""FastAPI dependency injection factories.

The catalog service owns the parsed-document cache and the mutation lock,
so one instance is shared per catalog path for the life of the process.
Tests override ``get_catalog_service`` with a service bound to a fixture
catalog.
"""

from functools import lru_cache

from fastapi import Depends

from src.catalog.service import CatalogService
from src.config.settings import Settings, get_settings


@lru_cache(maxsize=8)
def _catalog_service_for(path: str) -> CatalogService:
    return CatalogService.from_path(path)


def get_catalog_service(
    settings: Settings = Depends(get_settings),
) -> CatalogService:
    return _catalog_service_for(settings.CATALOG_PATH)
