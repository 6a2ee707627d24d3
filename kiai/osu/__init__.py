from .difficulty import OsuCalculator, OsuDifficultyAttributes, OsuStrains
from .performance import OsuPerformanceAttributes, OsuPerformanceCalculator


__all__ = [
    'OsuCalculator',
    'OsuDifficultyAttributes',
    'OsuPerformanceAttributes',
    'OsuPerformanceCalculator',
    'OsuStrains',
]
