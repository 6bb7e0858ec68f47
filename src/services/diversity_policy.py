"""
Diversity / mix policy

Reshapes a deduplicated candidate pool according to a similarity preference.
The output is never longer than the pool.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence, Union

from models.recommendation import SimilarityPreference
from models.track import Track

logger = logging.getLogger(__name__)


def _artist_key(track: Track) -> Union[int, str]:
    # Catalog payloads occasionally omit the artist id; fall back to the name
    return track.artist.id or track.artist.name.casefold()


def spread_artists(tracks: Sequence[Track]) -> List[Track]:
    """Greedy pass that avoids back-to-back tracks by the same artist where possible."""
    if len(tracks) <= 1:
        return list(tracks)

    pool = list(tracks)
    result: List[Track] = []
    last_artist = None

    while pool:
        index = next(
            (i for i, t in enumerate(pool) if last_artist is None or _artist_key(t) != last_artist),
            0,
        )
        track = pool.pop(index)
        result.append(track)
        last_artist = _artist_key(track)

    return result


class DiversityPolicy:
    """
    strict:   keep only candidates sharing an artist id with a seed
    balanced: keep everything, spread artists apart
    diverse:  uniform random shuffle
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def apply(
        self,
        pool: Iterable[Track],
        preference: SimilarityPreference,
        seeds: Sequence[Track] = (),
    ) -> List[Track]:
        tracks = list(pool)

        if preference == SimilarityPreference.STRICT:
            seed_artists = {s.artist.id for s in seeds if s.artist.id}
            kept = [t for t in tracks if t.artist.id in seed_artists]
            logger.debug("Strict filter kept %d/%d candidates", len(kept), len(tracks))
            return kept

        if preference == SimilarityPreference.DIVERSE:
            self._rng.shuffle(tracks)
            return tracks

        return spread_artists(tracks)
