"""Savings, payback, CO2 and financing estimates for a priced quote.

Everything here is ILLUSTRATIVE, NOT PRECISE. Annual savings and CO2 come
from coarse lookup tables keyed by the nearest standard package size; they
are not derived from the catalog's generation or consumption figures. The
25-year projection compounds the table value with a flat electricity price
inflation and panel degradation rate.
"""

from __future__ import annotations

import numpy as np

from src.models.pricing import FinancingOption, PricingEstimates, SavingsProjection

# Standard package size (kW) -> (annual savings $, annual CO2 reduction t).
# Perth, ~4.5 peak sun hours, 30% self-consumption at $0.29/kWh, the rest
# exported at $0.10/kWh, grid factor 0.7 kg CO2/kWh.
SOLAR_ESTIMATE_TABLE: dict[float, tuple[float, float]] = {
    6.6: (1700.0, 7.6),
    10.0: (2580.0, 11.5),
    13.0: (3350.0, 14.9),
}

# (capacity ceiling kWh, extra annual savings $); first matching row wins.
BATTERY_SAVINGS_TABLE: tuple[tuple[float, float], ...] = (
    (10.0, 550.0),
    (float("inf"), 800.0),
)

PROJECTION_YEARS = 25
ELECTRICITY_INFLATION = 0.025
PANEL_DEGRADATION = 0.005
CO2_KG_PER_TREE_YEAR = 22.0

# (term years, annual interest rate)
FINANCING_TERMS: tuple[tuple[int, float], ...] = (
    (5, 0.065),
    (7, 0.075),
    (10, 0.085),
)


def nearest_package_size(size_kw: float) -> float:
    return min(SOLAR_ESTIMATE_TABLE, key=lambda size: abs(size - size_kw))


def _battery_uplift(capacity_kwh: float) -> float:
    for ceiling, uplift in BATTERY_SAVINGS_TABLE:
        if capacity_kwh <= ceiling:
            return uplift
    return 0.0


def project_savings(year_one: float, system_cost: float) -> tuple[SavingsProjection, float | None]:
    """25-year projection plus payback in years (None if not reached)."""
    if year_one <= 0:
        return SavingsProjection(), None

    years = np.arange(PROJECTION_YEARS)
    factors = (1 + ELECTRICITY_INFLATION) ** years * (1 - PANEL_DEGRADATION) ** years
    yearly = year_one * factors
    cumulative = np.cumsum(yearly)
    lifetime = float(cumulative[-1])

    payback: float | None
    if system_cost <= 0:
        payback = 0.0
    else:
        idx = int(np.searchsorted(cumulative, system_cost))
        if idx >= PROJECTION_YEARS:
            payback = None
        else:
            before = float(cumulative[idx - 1]) if idx > 0 else 0.0
            payback = round(idx + (system_cost - before) / float(yearly[idx]), 1)

    roi = lifetime / system_cost * 100 if system_cost > 0 else 0.0
    projection = SavingsProjection(
        year_one=round(float(yearly[0])),
        year_5=round(float(yearly[4])),
        year_10=round(float(yearly[9])),
        year_25=round(float(yearly[24])),
        lifetime_savings=round(lifetime),
        return_on_investment_pct=round(roi),
    )
    return projection, payback


def estimate_outcomes(
    solar_size_kw: float | None,
    battery_capacity_kwh: float | None,
    final_price: float,
) -> PricingEstimates:
    """Illustrative savings/payback/CO2 for the resolved selection."""
    annual_savings = 0.0
    co2_tonnes = 0.0
    if solar_size_kw:
        savings, co2_tonnes = SOLAR_ESTIMATE_TABLE[nearest_package_size(solar_size_kw)]
        annual_savings += savings
    if battery_capacity_kwh:
        annual_savings += _battery_uplift(battery_capacity_kwh)

    projection, payback = project_savings(annual_savings, final_price)
    return PricingEstimates(
        annual_savings=annual_savings,
        payback_years=payback,
        co2_reduction_tonnes=co2_tonnes,
        trees_equivalent=round(co2_tonnes * 1000 / CO2_KG_PER_TREE_YEAR),
        projection=projection,
    )


def financing_options(loan_amount: float) -> list[FinancingOption]:
    """Amortised green-loan repayments for each standard term."""
    if loan_amount <= 0:
        return []
    options: list[FinancingOption] = []
    for term_years, rate in FINANCING_TERMS:
        monthly_rate = rate / 12
        n_payments = term_years * 12
        growth = (1 + monthly_rate) ** n_payments
        monthly = loan_amount * monthly_rate * growth / (growth - 1)
        total = monthly * n_payments
        options.append(
            FinancingOption(
                term_years=term_years,
                interest_rate=rate,
                loan_amount=round(loan_amount),
                monthly_payment=round(monthly),
                total_payments=round(total),
                total_interest=round(total - loan_amount),
            )
        )
    return options
