from .difficulty import (
    ManiaCalculator,
    ManiaDifficultyAttributes,
    ManiaStrains,
)
from .performance import ManiaPerformanceAttributes, ManiaPerformanceCalculator


__all__ = [
    'ManiaCalculator',
    'ManiaDifficultyAttributes',
    'ManiaPerformanceAttributes',
    'ManiaPerformanceCalculator',
    'ManiaStrains',
]
