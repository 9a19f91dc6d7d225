"""
In-process metrics for Haven.

Counters and durations recorded by the orchestration services: generation
calls, auto-link outcomes, batch steps and lifecycle transitions. Nothing is
exported; callers read values back through ``summary()`` or the getters.
"""

import threading
import time
from collections import Counter, defaultdict, deque
from dataclasses import dataclass, field
from functools import wraps
from typing import Deque, Dict, List, Optional


@dataclass(frozen=True)
class Sample:
    """One recorded value with the tags it was recorded under."""

    value: float
    recorded_at: float
    tags: Dict[str, str] = field(default_factory=dict)


class MetricsCollector:
    """
    Process-wide metrics registry.

    A single instance is shared (see ``get_metrics``). Counters keep a running
    total per name and per tag set; durations keep the most recent samples.
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "MetricsCollector":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._ready = False
                    cls._instance = instance
        return cls._instance

    def __init__(self, window: int = 500):
        if self._ready:
            return

        self.window = window
        self._totals: Counter = Counter()
        self._tagged: Dict[str, Counter] = defaultdict(Counter)
        self._durations: Dict[str, Deque[Sample]] = defaultdict(lambda: deque(maxlen=self.window))
        self._ready = True

    @staticmethod
    def _tag_key(tags: Optional[Dict[str, str]]) -> str:
        if not tags:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(tags.items()))

    def counter(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None) -> None:
        """Add ``value`` to a counter."""
        with self._lock:
            self._totals[name] += value
            self._tagged[name][self._tag_key(tags)] += value

    def timer(self, name: str, duration_seconds: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Record a duration sample."""
        with self._lock:
            self._durations[name].append(Sample(duration_seconds, time.time(), dict(tags or {})))

    def get_counter(self, name: str, tags: Optional[Dict[str, str]] = None) -> int:
        """Counter total, or the total for one tag set when ``tags`` is given."""
        with self._lock:
            if tags is None:
                return self._totals.get(name, 0)
            return self._tagged.get(name, Counter()).get(self._tag_key(tags), 0)

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        with self._lock:
            values: List[float] = [s.value for s in self._durations.get(name, ())]

        if not values:
            return {'count': 0, 'mean': 0.0, 'min': 0.0, 'max': 0.0}
        return {
            'count': len(values),
            'mean': sum(values) / len(values),
            'min': min(values),
            'max': max(values),
        }

    def summary(self) -> Dict[str, Dict]:
        """Plain-data view of every counter and duration."""
        with self._lock:
            counters = dict(self._totals)
            names = list(self._durations)
        return {
            'counters': counters,
            'timers': {name: self.get_timer_stats(name) for name in names},
        }

    def reset(self) -> None:
        """Drop all recorded values."""
        with self._lock:
            self._totals.clear()
            self._tagged.clear()
            self._durations.clear()

    # Domain recorders

    def record_generation_call(self, operation: str, duration_seconds: float, success: bool = True) -> None:
        """A call made through the generation gateway."""
        tags = {'operation': operation, 'success': str(success).lower()}
        self.counter('generation_calls_total', tags=tags)
        self.timer('generation_call_duration', duration_seconds, tags=tags)

    def record_auto_link(self, created: int, rejected: int, malformed: bool = False) -> None:
        """Outcome of applying one auto-link response."""
        if malformed:
            self.counter('autolink_malformed_responses')
            return
        self.counter('autolink_edges_created', value=created)
        self.counter('autolink_edges_rejected', value=rejected)

    def record_batch_step(self, action: str, success: bool) -> None:
        """One node processed by a batch run."""
        name = 'batch_steps_succeeded' if success else 'batch_steps_failed'
        self.counter(name, tags={'action': action})

    def record_lifecycle(self, transition: str, count: int = 1) -> None:
        """Staging items moved through a lifecycle transition."""
        self.counter(f'lifecycle_{transition}', value=count)


def timed_operation(metric_name: str):
    """Decorator recording how long a synchronous call takes, tagged by outcome."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            metrics = get_metrics()
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                metrics.timer(metric_name, time.perf_counter() - started, {'error': type(e).__name__})
                raise
            metrics.timer(metric_name, time.perf_counter() - started)
            return result

        return wrapper
    return decorator


def get_metrics() -> MetricsCollector:
    """Shared MetricsCollector instance."""
    return MetricsCollector()
