"""Shared pytest fixtures for SolarQuote test suite.

Provides:
- catalog_data: a fresh copy of the fixture pricing catalog (plain dict)
- catalog_path: catalog_data written to a tmp_path JSON file
- catalog_service: CatalogService bound to catalog_path
- client: AsyncClient with get_catalog_service overridden to catalog_service
- legacy_catalog_path: catalog with missing, slug and duplicate variant IDs
"""

import copy
import json

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import get_catalog_service
from src.catalog.service import CatalogService

JINKO_6_6 = "0190a1f2-0000-7000-8000-000000000101"
JINKO_10 = "0190a1f2-0000-7000-8000-000000000102"
JINKO_3PH_13 = "0190a1f2-0000-7000-8000-000000000111"
SUNGROW_SH5 = "0190a1f2-0000-7000-8000-000000000201"
ALPHA_10 = "0190a1f2-0000-7000-8000-000000000301"
TESLA_PW3 = "0190a1f2-0000-7000-8000-000000000302"
ZAPPI_7 = "0190a1f2-0000-7000-8000-000000000401"
ZAPPI_3PH_22 = "0190a1f2-0000-7000-8000-000000000411"

_CATALOG = {
    "version": "test-1",
    "lastUpdated": "2026-09-01",
    "rebates": {
        "wa_battery_rebate": {
            "description": "WA Residential Battery Scheme",
            "value_per_kwh": 130,
            "max_capacity_kwh": 10,
            "vpp_requirement": True,
        },
        "national_battery_rebate": {
            "description": "Cheaper Home Batteries Program",
            "value_per_certificate": 372,
        },
        "stc_rebate": {
            "description": "Small-scale Technology Certificates",
            "value_per_certificate": 38,
            "zone": 3,
        },
    },
    "single_phase": {
        "solar_panels": {
            "jinko": {
                "brand": "Jinko",
                "model": "Tiger Neo 440W",
                "technology": "N-Type TOPCon",
                "warranty_product": 25,
                "warranty_performance": 30,
                "packages": [
                    {
                        "id": JINKO_6_6,
                        "size_kw": 6.6,
                        "panels": 15,
                        "wattage": 440,
                        "price_after_rebate": 7078,
                        "rrp": 9166,
                        "requires_inverter": True,
                    },
                    {
                        "id": JINKO_10,
                        "size_kw": 10,
                        "panels": 23,
                        "wattage": 440,
                        "price_after_rebate": 8990,
                        "rrp": 11990,
                        "requires_inverter": True,
                    },
                ],
            },
        },
        "hybrid_inverters": {
            "sungrow": {
                "brand": "Sungrow",
                "model_series": "SH-RS Hybrid",
                "warranty_years": 10,
                "activation_fee": 0,
                "models": [
                    {
                        "id": SUNGROW_SH5,
                        "model": "SH5.0RS",
                        "power_kw": 5,
                        "phase": "1-phase",
                        "price_package": 1890,
                        "price_single": 2490,
                        "includes_power_sensor": True,
                    },
                ],
            },
        },
        "batteries": {
            "alpha_ess": {
                "brand": "Alpha ESS",
                "model": "SMILE-G3",
                "warranty_years": 10,
                "cell_type": "LFP",
                "options": [
                    {
                        "id": ALPHA_10,
                        "model": "SMILE-G3-B10",
                        "capacity_kwh": 10.1,
                        "price_after_rebate": 9490,
                        "rrp": 12490,
                        "power_kw": 5,
                    },
                ],
            },
            "tesla": {
                "brand": "Tesla",
                "model": "Powerwall 3",
                "warranty_years": 10,
                "cell_type": "LFP",
                "options": [
                    {
                        "id": TESLA_PW3,
                        "capacity_kwh": 13.5,
                        "price_after_rebate": 12490,
                        "rrp": 15990,
                        "includes_gateway": True,
                    },
                ],
            },
        },
        "ev_chargers": {
            "zappi": {
                "brand": "Zappi",
                "model": "zappi v2.1",
                "cable_type": "Tethered",
                "cable_length_m": 6.5,
                "options": [
                    {
                        "id": ZAPPI_7,
                        "power_kw": 7,
                        "phase": "1-phase",
                        "installed_price": 2190,
                    },
                ],
            },
        },
    },
    "three_phase": {
        "solar_panels": {
            "jinko": {
                "brand": "Jinko",
                "model": "Tiger Neo 440W",
                "technology": "N-Type TOPCon",
                "warranty_product": 25,
                "warranty_performance": 30,
                "packages": [
                    {
                        "id": JINKO_3PH_13,
                        "size_kw": 13.2,
                        "panels": 30,
                        "wattage": 440,
                        "price_after_rebate": 9990,
                        "rrp": 13990,
                        "requires_inverter": True,
                    },
                ],
            },
        },
        "hybrid_inverters": {},
        "batteries": {},
        "ev_chargers": {
            "zappi": {
                "brand": "Zappi",
                "model": "zappi v2.1",
                "cable_type": "Tethered",
                "options": [
                    {
                        "id": ZAPPI_3PH_22,
                        "power_kw": 22,
                        "phase": "3-phase",
                        "installed_price": 2890,
                    },
                ],
            },
        },
    },
    "sungrow_trade_in": {
        "description": "Credit for replacing an existing Sungrow inverter",
        "models": {"SH5K-20": 300, "SG5K-D": 150},
    },
}


def make_catalog() -> dict:
    """Fresh deep copy of the fixture catalog."""
    return copy.deepcopy(_CATALOG)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def ids() -> dict[str, str]:
    """Variant IDs in the fixture catalog, by short name."""
    return {
        "jinko_6_6": JINKO_6_6,
        "jinko_10": JINKO_10,
        "jinko_3ph_13": JINKO_3PH_13,
        "sungrow_sh5": SUNGROW_SH5,
        "alpha_10": ALPHA_10,
        "tesla_pw3": TESLA_PW3,
        "zappi_7": ZAPPI_7,
        "zappi_3ph_22": ZAPPI_3PH_22,
    }


@pytest.fixture
def catalog_data() -> dict:
    return make_catalog()


@pytest.fixture
def catalog_path(tmp_path, catalog_data):
    """Fixture catalog written the way the store writes it (2-space JSON)."""
    path = tmp_path / "pricing-data.json"
    path.write_text(json.dumps(catalog_data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def catalog_service(catalog_path) -> CatalogService:
    return CatalogService.from_path(catalog_path)


@pytest.fixture
async def client(catalog_service):
    """AsyncClient with get_catalog_service overridden to the fixture catalog."""
    from src.api.main import app

    app.dependency_overrides[get_catalog_service] = lambda: catalog_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def legacy_catalog_path(tmp_path, catalog_data):
    """Fixture catalog with one missing, one slug-style and one duplicated ID.

    - single_phase jinko 10kW: no ``id`` key at all
    - single_phase alpha_ess 10.1kWh: legacy slug ID
    - three_phase zappi 22kW: reuses the single_phase zappi 7kW UUID
    """
    single = catalog_data["single_phase"]
    del single["solar_panels"]["jinko"]["packages"][1]["id"]
    single["batteries"]["alpha_ess"]["options"][0]["id"] = "battery-1ph-alpha_ess-10-1kwh-0"
    catalog_data["three_phase"]["ev_chargers"]["zappi"]["options"][0]["id"] = ZAPPI_7

    path = tmp_path / "legacy-pricing-data.json"
    path.write_text(json.dumps(catalog_data, indent=2), encoding="utf-8")
    return path
