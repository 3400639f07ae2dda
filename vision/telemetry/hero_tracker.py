"""Hero identity tracker: turns per-frame level readings into persistent heroes.

Level badges are read independently every frame, with no notion of which
hero they belong to. The tracker keeps a set of live heroes and resolves
each reading to one of them, or to a new hero, using only position, time
and level:

  1. nearest live hero within MATCH_RADIUS pixels is the candidate
  2. no candidate                          -> new hero
  3. candidate unseen for > STALE_AFTER_MS  -> new hero
  4. level lower than candidate's          -> new hero (levels never drop)
  5. same level                            -> same hero
  6. level exactly one higher              -> same hero, level up
  7. level jumped by more than one         -> new hero

Heroes that were seen only a few times and have not been seen for a while
are pruned; heroes seen often enough are kept even while off screen.
"""

import logging
import math
from dataclasses import dataclass, replace

from .level_reader import LevelReading

logger = logging.getLogger(__name__)

MATCH_RADIUS = 20.0
STALE_AFTER_MS = 3000

# Pruning defaults used by the analyzer
PRUNE_INACTIVE_MS = 1000
PRUNE_MIN_APPEARANCES = 5


@dataclass
class HeroEntity:
    """A persistent hero identity."""
    id: int
    position: tuple[int, int]
    level: int
    last_updated: int           # ms
    appearance_count: int = 1


@dataclass(frozen=True)
class HeroSighting:
    """What one level reading resolved to in a given frame."""
    hero_id: int
    position: tuple[int, int]
    level: int


class HeroTracker:
    """Owns the live hero set for one capture sequence.

    Not thread-safe: feed frames from a single thread, in timestamp order.
    Each call to update() is one frame's worth of mutation.
    """

    def __init__(self, match_radius: float = MATCH_RADIUS,
                 stale_after_ms: int = STALE_AFTER_MS):
        self.match_radius = match_radius
        self.stale_after_ms = stale_after_ms
        self._heroes: dict[int, HeroEntity] = {}
        self._next_id = 0

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def entities(self) -> list[HeroEntity]:
        """Copies of the live heroes, in creation order."""
        return [replace(h) for h in self._heroes.values()]

    def get(self, hero_id: int) -> HeroEntity | None:
        hero = self._heroes.get(hero_id)
        return replace(hero) if hero is not None else None

    def __len__(self) -> int:
        return len(self._heroes)

    @property
    def is_bootstrapping(self) -> bool:
        """True until the first hero has ever been created."""
        return self._next_id == 0

    def update(self, readings: list[LevelReading], ts: int) -> list[HeroSighting]:
        """Resolve one frame's level readings and return this frame's sightings."""
        sightings = [self.assign(r.level, r.position, ts) for r in readings]
        logger.debug('Frame %d ms: %d sighting(s), %d live hero(es)',
                     ts, len(sightings), len(self._heroes))
        return sightings

    def assign(self, level: int, position: tuple[int, int], ts: int) -> HeroSighting:
        """Resolve a single reading to an existing or new hero."""
        if self.is_bootstrapping:
            return self._create(level, position, ts, 'bootstrap')

        candidate = self._nearest(position)
        if candidate is None:
            return self._create(level, position, ts, 'no hero nearby')
        if ts - candidate.last_updated > self.stale_after_ms:
            return self._create(level, position, ts, f'hero {candidate.id} stale')
        if level < candidate.level:
            return self._create(level, position, ts, f'level below hero {candidate.id}')
        if level == candidate.level:
            return self._merge(candidate, level, position, ts)
        if level == candidate.level + 1:
            return self._merge(candidate, level, position, ts)
        return self._create(level, position, ts, f'level jump from hero {candidate.id}')

    def prune(self, now: int, inactive_timeout: int = PRUNE_INACTIVE_MS,
              min_appearances: int = PRUNE_MIN_APPEARANCES) -> list[HeroEntity]:
        """Drop heroes that are both stale and rarely seen.

        A hero is removed when ``now - last_updated > inactive_timeout`` and
        ``appearance_count < min_appearances``.

        Returns:
            The removed heroes, in creation order.
        """
        removed = []
        survivors: dict[int, HeroEntity] = {}
        for hero_id, hero in self._heroes.items():
            if (now - hero.last_updated > inactive_timeout
                    and hero.appearance_count < min_appearances):
                removed.append(hero)
                logger.debug('Deleted hero id %d, last update at %d ms with %d appearance(s)',
                             hero.id, hero.last_updated, hero.appearance_count)
            else:
                survivors[hero_id] = hero
        self._heroes = survivors
        return removed

    def reset(self) -> None:
        """Forget all heroes. Ids are never reused, so the counter is kept."""
        self._heroes.clear()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _nearest(self, position: tuple[int, int]) -> HeroEntity | None:
        best = None
        best_dist = self.match_radius
        for hero in self._heroes.values():
            dist = math.hypot(position[0] - hero.position[0],
                              position[1] - hero.position[1])
            if dist < best_dist:
                best_dist = dist
                best = hero
        return best

    def _create(self, level: int, position: tuple[int, int], ts: int,
                reason: str) -> HeroSighting:
        hero = HeroEntity(self._next_id, tuple(position), level, ts)
        self._next_id += 1
        self._heroes[hero.id] = hero
        logger.debug('Level %d hero at %s: new hero id %d (%s)',
                     level, hero.position, hero.id, reason)
        return HeroSighting(hero.id, hero.position, level)

    def _merge(self, hero: HeroEntity, level: int, position: tuple[int, int],
               ts: int) -> HeroSighting:
        leveled_up = level > hero.level
        hero.position = tuple(position)
        hero.level = level
        hero.last_updated = ts
        hero.appearance_count += 1
        logger.debug('Level %d hero at %s: merged into hero id %d%s',
                     level, hero.position, hero.id, ' (level up)' if leveled_up else '')
        return HeroSighting(hero.id, hero.position, level)
