"""Protocol interfaces for the loan risk engine's collaborators."""
from .price_oracle import PriceFeedError, PriceOracle

__all__ = ["PriceFeedError", "PriceOracle"]
