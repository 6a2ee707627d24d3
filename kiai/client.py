import logging

import requests

from .beatmap import Beatmap

log = logging.getLogger(__name__)


class UnknownBeatmap(LookupError):
    """Raised when a beatmap id is not known.

    Parameters
    ----------
    beatmap_id : int or str
        The unknown beatmap id.
    """
    def __init__(self, beatmap_id):
        self.beatmap_id = beatmap_id

    def __str__(self):
        return f'no beatmap found that matched id: {self.beatmap_id}'


class Client:
    """A client for downloading ``.osu`` files from the osu! website.

    Parameters
    ----------
    download_url : str, optional
        The location to download beatmaps from.
    timeout : float, optional
        The request timeout in seconds.
    """
    DEFAULT_DOWNLOAD_URL = 'https://osu.ppy.sh/osu'
    DEFAULT_TIMEOUT = 30

    def __init__(self,
                 download_url=DEFAULT_DOWNLOAD_URL,
                 timeout=DEFAULT_TIMEOUT):
        self.download_url = download_url
        self.timeout = timeout

    def download_raw(self, beatmap_id):
        """Download the bytes of a ``.osu`` file.

        Parameters
        ----------
        beatmap_id : int or str
            The id of the beatmap to download.

        Returns
        -------
        data : bytes
            The contents of the file.

        Raises
        ------
        UnknownBeatmap
            Raised when the website has no file for ``beatmap_id``.
        requests.HTTPError
            Raised when the request fails.
        """
        url = f'{self.download_url}/{beatmap_id}'
        log.debug('downloading %s', url)
        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()

        # unknown ids are served as an empty body
        data = response.content
        if not data:
            raise UnknownBeatmap(beatmap_id)
        return data

    def download(self, beatmap_id):
        """Download and parse a beatmap.

        Parameters
        ----------
        beatmap_id : int or str
            The id of the beatmap to download.

        Returns
        -------
        beatmap : Beatmap
            The downloaded beatmap.
        """
        return Beatmap.from_bytes(self.download_raw(beatmap_id))
