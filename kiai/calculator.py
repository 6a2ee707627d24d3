class Calculator:
    """The running state of a difficulty calculation for one game mode.

    A calculator walks the hit objects of a beatmap one unit at a time. After
    each step :meth:`difficulty_attributes` describes the map as if it ended
    at the last consumed unit. Batch and gradual calculations share this
    machinery, so both produce identical results for the same prefix.

    Parameters
    ----------
    beatmap : Beatmap
        The beatmap, already converted to the calculator's mode.
    mods : ModifierSet
        The mods of the play.
    attributes : BeatmapAttributes
        The effective attributes of the beatmap.

    Notes
    -----
    A unit is usually one hit object. In osu!catch it is one fruit or
    droplet, the objects which give combo.
    """
    mode = None
    section_length = 400

    def __init__(self, beatmap, mods, attributes):
        self.beatmap = beatmap
        self.mods = mods
        self.attributes = attributes
        self.position = 0

    @property
    def n_units(self):
        """The total number of units in the map.
        """
        raise NotImplementedError('n_units')

    @property
    def n_remaining(self):
        return self.n_units - self.position

    def _feed(self, ix):
        raise NotImplementedError('_feed')

    def feed(self, count=1):
        """Consume the next ``count`` units.

        Parameters
        ----------
        count : int, optional
            The number of units to consume. Fewer are consumed when the map
            runs out.

        Returns
        -------
        consumed : int
            The number of units consumed.
        """
        stop = min(self.position + count, self.n_units)
        start = self.position
        for ix in range(start, stop):
            self._feed(ix)
            self.position = ix + 1
        return stop - start

    def difficulty_attributes(self):
        """The difficulty attributes of the consumed prefix of the map.
        """
        raise NotImplementedError('difficulty_attributes')

    def strains(self):
        """The strain peaks of the consumed prefix of the map.
        """
        raise NotImplementedError('strains')
