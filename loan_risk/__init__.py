"""Dual-asset collateralized loan risk engine."""
from .engine import (
    assess_risk,
    classify_risk,
    compute_liquidation_price_collateral,
    compute_liquidation_price_debt_asset,
    compute_ltv,
    is_liquidation_eligible,
)
from .models import (
    Loan,
    LoanStatus,
    MarketPrices,
    PriceScenario,
    RiskAssessment,
    RiskTier,
)
from .scenarios import apply_scenario, assess_scenarios

__all__ = [
    "Loan",
    "LoanStatus",
    "MarketPrices",
    "PriceScenario",
    "RiskAssessment",
    "RiskTier",
    "apply_scenario",
    "assess_risk",
    "assess_scenarios",
    "classify_risk",
    "compute_liquidation_price_collateral",
    "compute_liquidation_price_debt_asset",
    "compute_ltv",
    "is_liquidation_eligible",
]
