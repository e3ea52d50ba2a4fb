"""
Section Service — maps question identifiers to DEP sections.

Lookups are memoised in a bounded FIFO cache (negative results included) and
instrumented with hit/miss/eviction/invalid counters plus a sliding window of
eviction timestamps used by the health check. Instrumentation is only active
while debug mode is on and can be toggled at runtime.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from collections import OrderedDict, deque
from functools import lru_cache
from typing import Callable, Optional

from dep_autofill.config import get_settings
from dep_autofill.models import CacheHealth, CacheMetrics, Section

logger = logging.getLogger(__name__)

_SECTION_PREFIX = re.compile(r"^(\d+)\.")
_SECTION_VALUES = {s.value: s for s in Section}


class SectionClassifier:
    """Question identifier → Section, with a bounded FIFO cache and health monitoring."""

    def __init__(
        self,
        max_size: Optional[int] = None,
        debug: Optional[bool] = None,
        eviction_threshold: Optional[int] = None,
        window_size_ms: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.max_size = max_size if max_size is not None else settings.section_cache_max_size
        self.eviction_threshold = (
            eviction_threshold if eviction_threshold is not None else settings.eviction_threshold
        )
        self.window_size_ms = window_size_ms if window_size_ms is not None else settings.eviction_window_ms
        self._debug = settings.debug if debug is None else debug
        self._clock = clock

        self._lock = threading.Lock()
        self._cache: OrderedDict[str, Optional[Section]] = OrderedDict()
        self._eviction_times: deque[float] = deque()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._invalid = 0

        self._health_thread: Optional[threading.Thread] = None
        self._health_stop: Optional[threading.Event] = None

    # ── Lookup ───────────────────────────────────────────

    def classify(self, question_id: str) -> Optional[Section]:
        """Return the section of ``question_id``, or None if it has none."""
        with self._lock:
            if question_id in self._cache:
                if self._debug:
                    self._hits += 1
                    logger.debug(f"Cache hit for {question_id}")
                return self._cache[question_id]

            if self._debug:
                self._misses += 1
                logger.debug(f"Cache miss for {question_id}")

            result = self._parse(question_id)

            if len(self._cache) >= self.max_size and self._cache:
                oldest, _ = self._cache.popitem(last=False)
                self._record_eviction(oldest)

            self._cache[question_id] = result
            return result

    def _parse(self, question_id: str) -> Optional[Section]:
        match = _SECTION_PREFIX.match(question_id)
        if match is None:
            if self._debug:
                self._invalid += 1
                logger.debug(f"Invalid section ID format: {question_id}")
            return None

        section = _SECTION_VALUES.get(match.group(1))
        if section is None and self._debug:
            self._invalid += 1
            logger.debug(f"Unknown section ID: {match.group(1)} from {question_id}")
        return section

    def _record_eviction(self, key: str) -> None:
        if not self._debug:
            return
        now = self._clock()
        self._evictions += 1
        self._eviction_times.append(now)
        logger.debug(f"Cache eviction for {key}")

        recent = self._prune_evictions(now)
        if recent > self.eviction_threshold:
            logger.warning(
                f"High cache eviction rate detected: {recent} evictions in the last "
                f"{self.window_size_ms / 1000:g}s. Possible malformed data or excessive unique IDs."
            )

    def _prune_evictions(self, now: float) -> int:
        cutoff = now - self.window_size_ms / 1000
        while self._eviction_times and self._eviction_times[0] < cutoff:
            self._eviction_times.popleft()
        return len(self._eviction_times)

    # ── Instrumentation ──────────────────────────────────

    @property
    def debug(self) -> bool:
        return self._debug

    def set_debug_mode(self, enabled: bool) -> None:
        self._debug = enabled
        logger.info(f"Section classifier debug mode {'enabled' if enabled else 'disabled'}")

    def cache_metrics(self) -> CacheMetrics:
        with self._lock:
            return self._metrics()

    def _metrics(self) -> CacheMetrics:
        total = self._hits + self._misses
        return CacheMetrics(
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
            invalid=self._invalid,
            hit_ratio=self._hits / total if total > 0 else 0.0,
            size=len(self._cache),
        )

    def check_health(self) -> CacheHealth:
        settings = get_settings()
        with self._lock:
            recent = self._prune_evictions(self._clock())
            metrics = self._metrics()

        eviction_rate = recent / (self.window_size_ms / 1000)
        anomalies: list[str] = []

        lookups = metrics.hits + metrics.misses
        if lookups > settings.hit_ratio_min_lookups and metrics.hit_ratio < settings.hit_ratio_floor:
            anomalies.append(f"Low cache hit ratio ({metrics.hit_ratio * 100:.1f}%)")

        invalid_ratio = metrics.invalid / lookups if lookups > 0 else 0.0
        if lookups > settings.invalid_ratio_min_lookups and invalid_ratio > settings.invalid_ratio_ceiling:
            anomalies.append(f"High invalid section ID rate ({invalid_ratio * 100:.1f}%)")

        if recent >= self.eviction_threshold:
            anomalies.append(f"High cache eviction rate ({eviction_rate:.2f}/sec)")

        healthy = not anomalies
        return CacheHealth(
            healthy=healthy,
            eviction_rate=eviction_rate,
            recent_evictions=recent,
            message=None if healthy else "; ".join(anomalies),
            anomalies=anomalies,
        )

    def configure_monitoring(
        self,
        eviction_threshold: Optional[int] = None,
        window_size_ms: Optional[int] = None,
    ) -> None:
        """Update monitoring thresholds. Non-positive values are ignored."""
        if eviction_threshold is not None and eviction_threshold > 0:
            self.eviction_threshold = eviction_threshold
        if window_size_ms is not None and window_size_ms > 0:
            self.window_size_ms = window_size_ms

    def reset_metrics(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._invalid = 0
            self._eviction_times.clear()

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    # ── Periodic health check ────────────────────────────

    def log_health(self) -> CacheHealth:
        health = self.check_health()
        metrics = self.cache_metrics()
        if not health.healthy:
            logger.warning(f"Cache health check failed: {health.message} (metrics: {metrics.model_dump()})")
        elif self._debug:
            logger.info(f"Cache health check passed (metrics: {metrics.model_dump()})")
        return health

    def start_periodic_health_check(self, interval_seconds: Optional[float] = None) -> None:
        """Run log_health() every ``interval_seconds`` on a daemon thread."""
        interval = interval_seconds or get_settings().health_check_interval_seconds
        self.stop_periodic_health_check()

        stop = threading.Event()

        def _loop() -> None:
            while not stop.wait(interval):
                try:
                    self.log_health()
                except Exception as e:
                    logger.error(f"Cache health check raised: {e}")

        self._health_stop = stop
        self._health_thread = threading.Thread(target=_loop, name="section-cache-health", daemon=True)
        self._health_thread.start()
        logger.info(f"Started periodic cache health check every {interval:g}s")

    def stop_periodic_health_check(self) -> None:
        if self._health_stop is None:
            return
        self._health_stop.set()
        if self._health_thread is not None:
            self._health_thread.join(timeout=1.0)
        self._health_stop = None
        self._health_thread = None
        logger.info("Stopped periodic cache health check")


@lru_cache()
def get_section_classifier() -> SectionClassifier:
    """Process-wide classifier used by the API and the question service."""
    return SectionClassifier()
