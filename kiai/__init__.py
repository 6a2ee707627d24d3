from .attributes import BeatmapAttributes, BeatmapAttributesBuilder, HitWindows
from .beatmap import (
    Beatmap,
    Circle,
    HitObject,
    HoldNote,
    Slider,
    Spinner,
    TimingPoint,
)
from .client import Client
from .difficulty import Difficulty
from .errors import (
    InconsistentState,
    InvalidModifier,
    InvalidRange,
    KiaiError,
    ParseFailure,
    UnsupportedConversion,
)
from .game_mode import GameMode
from .gradual import GradualDifficulty, GradualPerformance
from .mod import Mod, ModifierSet
from .performance import Performance
from .position import Position
from .score_state import HitResultPriority, ScoreState

__version__ = '0.1.0'


__all__ = [
    'Beatmap',
    'BeatmapAttributes',
    'BeatmapAttributesBuilder',
    'Circle',
    'Client',
    'Difficulty',
    'GameMode',
    'GradualDifficulty',
    'GradualPerformance',
    'HitObject',
    'HitResultPriority',
    'HitWindows',
    'HoldNote',
    'InconsistentState',
    'InvalidModifier',
    'InvalidRange',
    'KiaiError',
    'Mod',
    'ModifierSet',
    'ParseFailure',
    'Performance',
    'Position',
    'ScoreState',
    'Slider',
    'Spinner',
    'TimingPoint',
    'UnsupportedConversion',
]
