"""Default assumptions for projections and cash-flow forecasts."""

from __future__ import annotations


DEFAULT_FORECAST_YEAR = 2025
FORECAST_HORIZON_MONTHS = 12
WEEKS_PER_MONTH = 4

DEFAULT_SETTINGS = {
    "months": 12,
    "growth_rate_percent": 5.0,
    "client_retention_rate_percent": 90.0,
    "initial_hours_per_week": 10.0,
    "max_hours_per_week": 40.0,
    "initial_monthly_clients": {"hourly": 2.0, "packages": 1.0, "subscriptions": 0.0},
    "acquisition_rate": {"hourly": 1.0, "packages": 0.5, "subscriptions": 0.2},
}

DEFAULT_RATE_CARD = {
    "hourly_rates": [45.0, 60.0],
    "packages": [1500.0, 3000.0],
    "subscriptions": [150.0],
}

DEFAULT_FORECAST = {
    "start_month_index": 5,
    "start_year": DEFAULT_FORECAST_YEAR,
    "initial_investment": 5000.0,
    "quarterly_revenue_goals": [9000.0, 12000.0, 15000.0, 18000.0],
    "expense_lines": [
        "Logiciels: 60€/mois",
        "Assurance RC Pro: 400€/an",
        "Comptable: 300€/trimestre",
        "Coworking: 250€/mois",
    ],
    "project_incomes": [
        {"name": "Site vitrine Restaurant", "amount": 1500.0, "period_key": "2025-06"},
        {"name": "Application React pour PME", "amount": 3000.0, "period_key": "2025-07"},
        {"name": "Maintenance E-commerce", "amount": 400.0, "period_key": "2025-06"},
        {"name": "Refonte UX Startup", "amount": 2200.0, "period_key": "2025-08"},
    ],
}
