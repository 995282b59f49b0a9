"""Service modules"""
from .risk_service import RiskService

__all__ = ["RiskService"]
