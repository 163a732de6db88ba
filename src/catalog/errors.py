"""Catalog error taxonomy.

CatalogUnavailable is fatal for any catalog operation. The not-found
errors are client-correctable and subclass LookupError so callers that
already handle KeyError/LookupError keep working.
"""


class CatalogError(Exception):
    """Base class for catalog failures."""


class CatalogUnavailable(CatalogError):
    """Backing document missing, unreadable, or not a valid catalog."""


class ProductNotFound(CatalogError, LookupError):
    """No variant with the requested ID exists under any family."""

    def __init__(self, variant_id: str) -> None:
        self.variant_id = variant_id
        super().__init__(f"Product {variant_id} not found in pricing catalog.")


class BrandNotFound(CatalogError, LookupError):
    """Positional reference names a brand absent from the phase + family."""

    def __init__(self, brand_key: str, location: str) -> None:
        self.brand_key = brand_key
        super().__init__(f"Brand '{brand_key}' not found in {location}.")


class VariantNotFound(CatalogError, LookupError):
    """Positional reference is out of range or points at another variant."""

    def __init__(self, brand_key: str, index: int) -> None:
        self.brand_key = brand_key
        self.index = index
        super().__init__(
            f"No matching variant at index {index} of brand '{brand_key}'. "
            "Re-fetch the product list and retry."
        )
