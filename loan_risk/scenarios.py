"""What-if price scenarios re-evaluated through the risk engine."""
from __future__ import annotations

from typing import Iterable

from .engine import assess_risk, is_liquidation_eligible
from .loans import validate_market_prices
from .models import Loan, MarketPrices, PriceScenario, ScenarioOutcome

DEFAULT_SCENARIOS: tuple[PriceScenario, ...] = (
    PriceScenario("Stable market", 0.0, 0.0),
    PriceScenario("Collateral crash", -30.0, 0.0),
    PriceScenario("Market correction", -25.0, -25.0),
    PriceScenario("Debt asset rally", 0.0, 30.0),
    PriceScenario("Bull market", 40.0, 40.0),
)


def apply_scenario(prices: MarketPrices, scenario: PriceScenario) -> MarketPrices:
    """Scale each price by ``1 + change/100``.

    Raises:
        ValueError: a shock of -100% or worse leaves no usable price.
    """
    return validate_market_prices(
        MarketPrices(
            collateral_price_usd=prices.collateral_price_usd
            * (1 + scenario.collateral_change_pct / 100),
            debt_asset_price_usd=prices.debt_asset_price_usd
            * (1 + scenario.debt_asset_change_pct / 100),
        )
    )


def assess_scenarios(
    loan: Loan,
    prices: MarketPrices,
    scenarios: Iterable[PriceScenario] = DEFAULT_SCENARIOS,
) -> list[ScenarioOutcome]:
    """Re-assess ``loan`` under each scenario, in the order given.

    ``ltv_change`` is measured against the assessment at ``prices``.
    """
    baseline = assess_risk(loan, validate_market_prices(prices))

    outcomes: list[ScenarioOutcome] = []
    for scenario in scenarios:
        shocked = apply_scenario(prices, scenario)
        assessment = assess_risk(loan, shocked)
        outcomes.append(
            ScenarioOutcome(
                scenario=scenario,
                prices=shocked,
                assessment=assessment,
                ltv_change=assessment.current_ltv - baseline.current_ltv,
                liquidation_eligible=is_liquidation_eligible(loan, shocked),
            )
        )
    return outcomes
