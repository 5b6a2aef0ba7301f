"""Random distribution of memory points over a sphere shell."""

import logging
import math
import random

from chronoglobe.config import GlobeConfig
from chronoglobe.models import SpherePoint

logger = logging.getLogger(__name__)


class SphereDistributor:
    """Places up to `max_points` points on a flattened spherical shell.

    Every call draws fresh randomness, so the same memory set gets a new
    layout each time. Use DistributionCache when positions must stay put.
    """

    def __init__(self, config: GlobeConfig | None = None) -> None:
        self.config = config or GlobeConfig()

    def point_count(self, memory_count: int) -> int:
        return max(0, min(memory_count, self.config.max_points))

    def distribute(self, n: int, rng: random.Random | None = None) -> list[SpherePoint]:
        rng = rng or random.Random()
        cfg = self.config
        count = self.point_count(n)
        if count < n:
            logger.debug("Capping globe at %d of %d points", count, n)

        points: list[SpherePoint] = []
        for _ in range(count):
            # acos(1 - 2U) gives a uniform density over the surface
            phi = math.acos(1 - 2 * rng.random())
            theta = 2 * math.pi * rng.random()
            radius = cfg.min_radius + rng.random() * (cfg.max_radius - cfg.min_radius)

            x = radius * math.sin(phi) * math.cos(theta)
            y = radius * math.sin(phi) * math.sin(theta) * cfg.y_flatten
            z = radius * math.cos(phi)
            scale = cfg.min_scale + rng.random() * (cfg.max_scale - cfg.min_scale)
            points.append(SpherePoint(x=x, y=y, z=z, scale=scale))
        return points


class DistributionCache:
    """Memoizes distributions per chapter and memory-id set."""

    def __init__(self, distributor: SphereDistributor) -> None:
        self.distributor = distributor
        self._cache: dict[tuple[str, frozenset[str]], list[SpherePoint]] = {}

    def get(
        self,
        chapter_id: str,
        memory_ids: list[str],
        rng: random.Random | None = None,
    ) -> list[SpherePoint]:
        key = (chapter_id, frozenset(memory_ids))
        if key not in self._cache:
            # Drop stale entries for this chapter once its memory set changes
            for stale in [k for k in self._cache if k[0] == chapter_id]:
                del self._cache[stale]
            self._cache[key] = self.distributor.distribute(len(memory_ids), rng)
        return self._cache[key]

    def invalidate(self, chapter_id: str | None = None) -> None:
        if chapter_id is None:
            self._cache.clear()
            return
        for key in [k for k in self._cache if k[0] == chapter_id]:
            del self._cache[key]

    def __len__(self) -> int:
        return len(self._cache)
