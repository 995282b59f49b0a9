"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from loan_risk.config import (
    AppConfig,
    AssetsConfig,
    LendingConfig,
    PriceOracleConfig,
    PythConfig,
    StaticPricesConfig,
)
from loan_risk.models import Loan, LoanStatus, MarketPrices


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_loan() -> Loan:
    """150,000 XPM securing 500 XRP, liquidated at 65% LTV."""
    return Loan(
        collateral_amount=150_000.0,
        debt_amount=500.0,
        liquidation_threshold_pct=65.0,
        loan_id="loan-1",
        borrower="alice",
    )


@pytest.fixture()
def sample_prices() -> MarketPrices:
    return MarketPrices(collateral_price_usd=0.02, debt_asset_price_usd=3.0)


@pytest.fixture()
def sample_loans(sample_loan: Loan) -> tuple[Loan, ...]:
    return (
        sample_loan,
        Loan(
            collateral_amount=200_000.0,
            debt_amount=300.0,
            liquidation_threshold_pct=65.0,
            loan_id="loan-2",
        ),
        Loan(
            collateral_amount=100_000.0,
            debt_amount=450.0,
            liquidation_threshold_pct=65.0,
            loan_id="loan-3",
        ),
        Loan(
            collateral_amount=100_000.0,
            debt_amount=250.0,
            liquidation_threshold_pct=65.0,
            loan_id="loan-4",
            status=LoanStatus.REPAID,
        ),
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_assets() -> AssetsConfig:
    return AssetsConfig(collateral="XPM", debt="XRP")


@pytest.fixture()
def sample_lending() -> LendingConfig:
    return LendingConfig(
        liquidation_threshold=65.0,
        min_ltv=20.0,
        max_ltv=50.0,
        liquidation_fee=10.0,
        interest_rates={30: 19.0, 60: 16.0, 90: 15.0},
    )


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.example.com/v2/updates/price/latest",
        feeds={"XPM": "0xaaa111", "XRP": "bbb222"},
        timeout=5,
    )


@pytest.fixture()
def sample_app_config(
    sample_assets: AssetsConfig,
    sample_lending: LendingConfig,
    sample_pyth_config: PythConfig,
    sample_loans: tuple[Loan, ...],
) -> AppConfig:
    return AppConfig(
        assets=sample_assets,
        lending=sample_lending,
        price_oracle=PriceOracleConfig(
            provider="static",
            static=StaticPricesConfig(
                collateral_price_usd=0.02, debt_asset_price_usd=3.0
            ),
            pyth=sample_pyth_config,
        ),
        loans=sample_loans,
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    assets:
      collateral: xpm
      debt: XRP
    lending:
      liquidation_threshold: 65.0
      min_ltv: 20.0
      max_ltv: 50.0
      liquidation_fee: 10.0
      interest_rates: {30: 19.0, 60: 16.0, 90: 15.0}
    price_oracle:
      provider: static
      static:
        collateral_price_usd: 0.02
        debt_asset_price_usd: 3.0
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {XPM: "aaa", XRP: "bbb"}
    loans:
      - id: loan-1
        borrower: alice
        collateral_amount: 150000
        borrowed_amount: 480
        accrued_interest: 20
        liquidation_threshold: 65
        opening_prices:
          collateral_price_usd: 0.02
          debt_asset_price_usd: 2.5
      - id: loan-2
        collateral_amount: 200000
        debt_amount: 300
      - id: loan-4
        collateral_amount: 100000
        debt_amount: 250
        status: repaid
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Sample Hermes payload
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_hermes_payload() -> dict:
    return {
        "parsed": [
            {"id": "aaa111", "price": {"price": "2000000", "expo": "-8"}},
            {"id": "bbb222", "price": {"price": "300000000", "expo": "-8"}},
        ]
    }
