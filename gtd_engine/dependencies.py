from gtd_engine.config import settings
from gtd_engine.duty_calculator.engine import CalculationEngine
from gtd_engine.regime_resolver.resolver import RegimeResolver


def get_calculation_engine() -> CalculationEngine:
    return CalculationEngine(settings)


def get_regime_resolver() -> RegimeResolver:
    return RegimeResolver()
