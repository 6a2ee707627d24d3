"""Difficulty and performance computed one object at a time.
"""
from .performance import performance_attributes


def _check_n(n):
    if n < 0:
        raise ValueError(f'n must not be negative, got {n!r}')


class GradualDifficulty:
    """The difficulty after each object of a beatmap.

    The ``i``\\th result equals the difficulty computed with
    ``passed_objects=i + 1``.

    Parameters
    ----------
    difficulty : Difficulty
        The options of the calculation. ``passed_objects`` is ignored.
    beatmap : Beatmap
        The beatmap.

    Examples
    --------
    >>> gradual = Difficulty().gradual_difficulty(beatmap)  # doctest: +SKIP
    >>> [attrs.stars for attrs in gradual]  # doctest: +SKIP
    """
    def __init__(self, difficulty, beatmap):
        self.difficulty = difficulty
        self.beatmap = beatmap
        self._calculator = difficulty.calculator(beatmap)

    @property
    def mods(self):
        return self.difficulty.mods

    @property
    def n_remaining(self):
        """The number of results left.
        """
        return self._calculator.n_remaining

    def __len__(self):
        return self.n_remaining

    def __iter__(self):
        return self

    def __next__(self):
        attributes = self.next()
        if attributes is None:
            raise StopIteration()
        return attributes

    def next(self):
        """Advance past one object.

        Returns
        -------
        attributes : DifficultyAttributes or None
            The difficulty up to the object, or None when every object has
            been consumed.
        """
        return self.nth(0)

    def nth(self, n):
        """Advance past ``n + 1`` objects.

        Parameters
        ----------
        n : int
            The number of results to skip.

        Returns
        -------
        attributes : DifficultyAttributes or None
            The difficulty up to the last object consumed. When fewer than
            ``n + 1`` objects remained they are all consumed and the final
            difficulty is returned; None only when nothing remained.

        Raises
        ------
        ValueError
            Raised when ``n`` is negative.
        """
        _check_n(n)
        if not self._calculator.feed(n + 1):
            return None
        return self._calculator.difficulty_attributes()

    def collect(self):
        """The results for every remaining object.
        """
        return list(self)


class GradualPerformance:
    """The performance after each object of a beatmap.

    Parameters
    ----------
    difficulty : Difficulty
        The options of the calculation. ``passed_objects`` is ignored.
    beatmap : Beatmap
        The beatmap.

    Notes
    -----
    The score state passed to :meth:`next` and :meth:`nth` must describe the
    play up to the object being rated; it is used as is.
    """
    def __init__(self, difficulty, beatmap):
        self._gradual = GradualDifficulty(difficulty, beatmap)

    @property
    def mods(self):
        return self._gradual.mods

    @property
    def n_remaining(self):
        return self._gradual.n_remaining

    def __len__(self):
        return self.n_remaining

    def next(self, state):
        """Advance past one object.

        Parameters
        ----------
        state : ScoreState
            The hit statistics up to the object.

        Returns
        -------
        performance : PerformanceAttributes or None
            The performance, or None when every object has been consumed.
        """
        return self.nth(state, 0)

    def nth(self, state, n):
        """Advance past ``n + 1`` objects.

        Parameters
        ----------
        state : ScoreState
            The hit statistics up to the last object consumed.
        n : int
            The number of results to skip.

        Returns
        -------
        performance : PerformanceAttributes or None
            The performance up to the last object consumed, or None when
            no objects remained.

        Raises
        ------
        ValueError
            Raised when ``n`` is negative.
        """
        difficulty = self._gradual.nth(n)
        if difficulty is None:
            return None
        return performance_attributes(
            difficulty,
            self.mods,
            state,
            self._gradual.difficulty.lazer,
        )
