"""Unit tests for what-if price scenarios."""
from __future__ import annotations

import pytest

from loan_risk.engine import assess_risk, is_liquidation_eligible
from loan_risk.models import Loan, MarketPrices, PriceScenario, RiskTier
from loan_risk.scenarios import DEFAULT_SCENARIOS, apply_scenario, assess_scenarios


class TestApplyScenario:
    def test_scales_each_price(self, sample_prices: MarketPrices) -> None:
        shocked = apply_scenario(sample_prices, PriceScenario("mixed", -30.0, 50.0))
        assert shocked.collateral_price_usd == pytest.approx(0.014)
        assert shocked.debt_asset_price_usd == pytest.approx(4.5)

    def test_stable_is_identity(self, sample_prices: MarketPrices) -> None:
        assert apply_scenario(sample_prices, PriceScenario("flat")) == sample_prices

    def test_total_loss_raises(self, sample_prices: MarketPrices) -> None:
        with pytest.raises(ValueError, match="collateral_price_usd"):
            apply_scenario(sample_prices, PriceScenario("wipeout", -100.0, 0.0))


class TestAssessScenarios:
    def test_collateral_crash_reaches_liquidation(
        self, sample_loan: Loan, sample_prices: MarketPrices
    ) -> None:
        (outcome,) = assess_scenarios(
            sample_loan, sample_prices, [PriceScenario("crash", -30.0, 0.0)]
        )
        assert outcome.assessment.current_ltv == pytest.approx(71.4286, rel=1e-5)
        assert outcome.assessment.risk_tier is RiskTier.CRITICAL
        assert outcome.ltv_change == pytest.approx(21.4286, rel=1e-5)
        assert outcome.liquidation_eligible

    @pytest.mark.parametrize("change", [-50.0, -25.0, 10.0, 40.0])
    def test_joint_move_leaves_ltv_unchanged(
        self, change: float, sample_loan: Loan, sample_prices: MarketPrices
    ) -> None:
        (outcome,) = assess_scenarios(
            sample_loan, sample_prices, [PriceScenario("joint", change, change)]
        )
        assert outcome.assessment.current_ltv == pytest.approx(50.0)
        assert outcome.ltv_change == pytest.approx(0.0, abs=1e-9)
        assert outcome.assessment.risk_tier is RiskTier.MEDIUM

    def test_crossing_threshold_flips_eligibility(
        self, sample_loan: Loan, sample_prices: MarketPrices
    ) -> None:
        assert not is_liquidation_eligible(sample_loan, sample_prices)
        calm, rally = assess_scenarios(
            sample_loan,
            sample_prices,
            [PriceScenario("calm", 0.0, 20.0), PriceScenario("rally", 0.0, 35.0)],
        )
        assert not calm.liquidation_eligible
        assert rally.liquidation_eligible
        assert rally.assessment.current_ltv == pytest.approx(67.5)

    def test_outcome_matches_engine(
        self, sample_loan: Loan, sample_prices: MarketPrices
    ) -> None:
        scenario = PriceScenario("correction", -25.0, 10.0)
        (outcome,) = assess_scenarios(sample_loan, sample_prices, [scenario])
        assert outcome.prices == apply_scenario(sample_prices, scenario)
        assert outcome.assessment == assess_risk(sample_loan, outcome.prices)

    def test_defaults_in_order(
        self, sample_loan: Loan, sample_prices: MarketPrices
    ) -> None:
        outcomes = assess_scenarios(sample_loan, sample_prices)
        assert [o.scenario for o in outcomes] == list(DEFAULT_SCENARIOS)
        assert outcomes[0].ltv_change == 0.0

    def test_empty_scenarios(self, sample_loan: Loan, sample_prices: MarketPrices) -> None:
        assert assess_scenarios(sample_loan, sample_prices, []) == []

    def test_invalid_base_prices_raise(self, sample_loan: Loan) -> None:
        with pytest.raises(ValueError):
            assess_scenarios(sample_loan, MarketPrices(0.0, 3.0), [PriceScenario("x")])
