from .difficulty import (
    CatchCalculator,
    CatchDifficultyAttributes,
    CatchStrains,
)
from .performance import CatchPerformanceAttributes, CatchPerformanceCalculator


__all__ = [
    'CatchCalculator',
    'CatchDifficultyAttributes',
    'CatchPerformanceAttributes',
    'CatchPerformanceCalculator',
    'CatchStrains',
]
