"""Tests for quote pricing aggregation."""

import pytest

from src.models.common import SystemType
from src.models.pricing import PricingSelection
from src.pricing.aggregator import UnresolvedSelection, calculate_pricing


def _selection(**fields) -> PricingSelection:
    return PricingSelection(**fields)


class TestCalculatePricing:
    """Totals, breakdown and tolerance of bad selections."""

    def test_solar_plus_battery_totals(self, catalog_service, ids) -> None:
        result = calculate_pricing(
            _selection(
                selected_systems=["solar", "battery"],
                solar_package=ids["jinko_6_6"],
                battery_system=ids["alpha_10"],
            ),
            catalog_service,
        )
        assert result.total_price == 16568
        assert result.rebate_amount == 5088
        assert result.final_price == 11480

    def test_breakdown_records(self, catalog_service, ids) -> None:
        result = calculate_pricing(
            _selection(
                selected_systems=["solar", "battery"],
                solar_package=ids["jinko_6_6"],
                battery_system=ids["alpha_10"],
            ),
            catalog_service,
        )
        assert result.breakdown.solar.id == ids["jinko_6_6"]
        assert result.breakdown.battery.id == ids["alpha_10"]
        assert result.breakdown.ev is None

    def test_unresolvable_ev_prices_at_zero(self, catalog_service) -> None:
        result = calculate_pricing(
            _selection(selected_systems=["ev"], ev_charger="nonexistent-id"),
            catalog_service,
        )
        assert (result.total_price, result.rebate_amount, result.final_price) == (0, 0, 0)
        assert result.breakdown.ev is None
        assert result.financing_options == []

    def test_unticked_system_ignored(self, catalog_service, ids) -> None:
        result = calculate_pricing(
            _selection(
                selected_systems=["battery"],
                solar_package=ids["jinko_6_6"],
                battery_system=ids["alpha_10"],
            ),
            catalog_service,
        )
        assert result.total_price == 9490
        assert result.breakdown.solar is None

    def test_unknown_tags_ignored(self, catalog_service, ids) -> None:
        result = calculate_pricing(
            _selection(selected_systems=["ev", "heat_pump"], ev_charger=ids["zappi_7"]),
            catalog_service,
        )
        assert result.total_price == 2190
        assert result.rebate_amount == 0

    def test_ticked_without_choice(self, catalog_service) -> None:
        result = calculate_pricing(_selection(selected_systems=["solar"]), catalog_service)
        assert result.total_price == 0

    def test_wrong_family_id_does_not_resolve(self, catalog_service, ids) -> None:
        result = calculate_pricing(
            _selection(selected_systems=["battery"], battery_system=ids["jinko_6_6"]),
            catalog_service,
        )
        assert result.total_price == 0

    def test_power_supply_scopes_phase(self, catalog_service, ids) -> None:
        selection = _selection(
            selected_systems=["solar"],
            solar_package=ids["jinko_6_6"],
            power_supply="three_phase",
        )
        assert calculate_pricing(selection, catalog_service).total_price == 0

    def test_unknown_power_supply_searches_both(self, catalog_service, ids) -> None:
        selection = _selection(
            selected_systems=["solar"],
            solar_package=ids["jinko_3ph_13"],
            power_supply="not_sure",
        )
        assert calculate_pricing(selection, catalog_service).total_price == 9990

    def test_deterministic(self, catalog_service, ids) -> None:
        selection = _selection(
            selected_systems=["solar", "battery", "ev"],
            solar_package=ids["jinko_10"],
            battery_system=ids["tesla_pw3"],
            ev_charger=ids["zappi_7"],
            power_supply="single_phase",
        )
        first = calculate_pricing(selection, catalog_service)
        second = calculate_pricing(selection, catalog_service)
        assert first == second
        assert first.total_price == 8990 + 12490 + 2190

    def test_estimates_follow_selection(self, catalog_service, ids) -> None:
        result = calculate_pricing(
            _selection(
                selected_systems=["solar", "battery"],
                solar_package=ids["jinko_6_6"],
                battery_system=ids["alpha_10"],
            ),
            catalog_service,
        )
        # 6.6kW table row plus the >10kWh battery uplift
        assert result.estimates.annual_savings == 1700 + 800
        assert result.estimates.co2_reduction_tonnes == 7.6
        assert len(result.financing_options) == 3

    def test_totals_triple(self, catalog_service, ids) -> None:
        result = calculate_pricing(
            _selection(selected_systems=["solar"], solar_package=ids["jinko_6_6"]),
            catalog_service,
        )
        totals = result.totals()
        assert totals.model_dump() == {
            "total_price": 7078,
            "rebate_amount": 2088,
            "final_price": 4990,
        }


class TestStrictPricing:
    """Submission-time pricing refuses unresolved ticked systems."""

    def test_raises_with_systems(self, catalog_service, ids) -> None:
        with pytest.raises(UnresolvedSelection) as excinfo:
            calculate_pricing(
                _selection(
                    selected_systems=["solar", "ev"],
                    solar_package=ids["jinko_6_6"],
                    ev_charger="nonexistent-id",
                ),
                catalog_service,
                strict=True,
            )
        assert excinfo.value.systems == [SystemType.EV]

    def test_is_value_error(self) -> None:
        assert issubclass(UnresolvedSelection, ValueError)

    def test_resolved_selection_passes(self, catalog_service, ids) -> None:
        result = calculate_pricing(
            _selection(selected_systems=["solar"], solar_package=ids["jinko_6_6"]),
            catalog_service,
            strict=True,
        )
        assert result.final_price == 4990
