"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from stocklens.services.base import BaseService
from stocklens.schemas.market import PriceHistoryPoint
from stocklens.schemas.indicators import MACDData, TechnicalIndicators


@dataclass
class IndicatorResult:
    """Everything the engine derives from one price history."""

    macd: list[MACDData]
    technical_indicators: Optional[TechnicalIndicators]


class IndicatorServiceInterface(BaseService[Sequence[PriceHistoryPoint], IndicatorResult]):
    """
    Indicator Engine Service Contract.

    INPUT: ordered price history (ascending by date, no duplicate dates)

    OUTPUT: IndicatorResult
        - macd: MACD series (empty when history is too short)
        - technical_indicators: snapshot as of the last bar, or None
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: Sequence[PriceHistoryPoint]) -> IndicatorResult:
        """Calculate MACD series and indicator snapshot."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
