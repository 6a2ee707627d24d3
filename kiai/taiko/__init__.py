from .difficulty import (
    TaikoCalculator,
    TaikoDifficultyAttributes,
    TaikoStrains,
)
from .performance import TaikoPerformanceAttributes, TaikoPerformanceCalculator


__all__ = [
    'TaikoCalculator',
    'TaikoDifficultyAttributes',
    'TaikoPerformanceAttributes',
    'TaikoPerformanceCalculator',
    'TaikoStrains',
]
