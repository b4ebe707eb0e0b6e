"""Prometheus-style metrics for HTTP traffic, database access and orders."""

from __future__ import annotations

import math
import threading
from bisect import bisect_left
from dataclasses import dataclass, field
from itertools import accumulate
from typing import Iterable, Sequence

DEFAULT_BUCKETS: tuple[float, ...] = (
    0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0,
)


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if float(value).is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _label_text(pairs: Iterable[tuple[str, str]]) -> str:
    pairs = list(pairs)
    if not pairs:
        return ""
    return "{" + ",".join(f'{name}="{_escape(value)}"' for name, value in pairs) + "}"


class _Metric:
    kind = "untyped"

    def __init__(self, name: str, help_text: str, label_names: Sequence[str] = ()):
        self.name = name
        self.help_text = help_text
        self.label_names = tuple(label_names)
        self._lock = threading.Lock()

    def _key(self, values: Sequence[object]) -> tuple[str, ...]:
        if len(values) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values, "
                f"got {len(values)}"
            )
        return tuple(str(value) for value in values)

    def _header(self) -> list[str]:
        help_text = self.help_text.replace("\\", "\\\\").replace("\n", "\\n")
        return [f"# HELP {self.name} {help_text}", f"# TYPE {self.name} {self.kind}"]


class CounterVec(_Metric):
    """A monotonically increasing counter partitioned by label values."""

    kind = "counter"

    def __init__(self, name: str, help_text: str, label_names: Sequence[str]):
        super().__init__(name, help_text, label_names)
        self._values: dict[tuple[str, ...], float] = {}

    def inc(self, *args: object) -> None:
        """Add one to the counter for the given label values."""
        key = self._key(args)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + 1.0

    def value(self, *args: object) -> float:
        """Return the current count for the given label values."""
        key = self._key(args)
        with self._lock:
            return self._values.get(key, 0.0)

    def render(self) -> str:
        """Render the counter in the text exposition format."""
        lines = self._header()
        with self._lock:
            items = sorted(self._values.items())
        for key, count in items:
            labels = _label_text(zip(self.label_names, key))
            lines.append(f"{self.name}{labels} {_format_value(count)}")
        return "\n".join(lines) + "\n"


@dataclass
class _HistogramState:
    bucket_counts: list[int]
    total: float = 0.0
    count: int = 0


class HistogramVec(_Metric):
    """A histogram of observed values partitioned by label values."""

    kind = "histogram"

    def __init__(
        self,
        name: str,
        help_text: str,
        label_names: Sequence[str],
        buckets: Sequence[float] = DEFAULT_BUCKETS,
    ):
        super().__init__(name, help_text, label_names)
        bounds = tuple(float(bound) for bound in buckets if not math.isinf(bound))
        if any(lower >= upper for lower, upper in zip(bounds, bounds[1:])):
            raise ValueError(f"{name}: buckets must be in increasing order")
        self.buckets = bounds
        self._states: dict[tuple[str, ...], _HistogramState] = {}

    def observe(self, value: float, *args: object) -> None:
        """Record one observation for the given label values."""
        key = self._key(args)
        index = bisect_left(self.buckets, value)
        with self._lock:
            state = self._states.get(key)
            if state is None:
                state = _HistogramState(bucket_counts=[0] * (len(self.buckets) + 1))
                self._states[key] = state
            state.bucket_counts[index] += 1
            state.total += value
            state.count += 1

    def count(self, *args: object) -> int:
        """Return how many observations were made for the given label values."""
        key = self._key(args)
        with self._lock:
            state = self._states.get(key)
            return state.count if state else 0

    def render(self) -> str:
        """Render the histogram in the text exposition format."""
        lines = self._header()
        with self._lock:
            items = sorted(
                (key, list(state.bucket_counts), state.total, state.count)
                for key, state in self._states.items()
            )
        for key, bucket_counts, total, count in items:
            base = list(zip(self.label_names, key))
            bounds = [_format_value(bound) for bound in self.buckets] + ["+Inf"]
            for bound, cumulative in zip(bounds, accumulate(bucket_counts)):
                labels = _label_text(base + [("le", bound)])
                lines.append(f"{self.name}_bucket{labels} {cumulative}")
            labels = _label_text(base)
            lines.append(f"{self.name}_sum{labels} {_format_value(total)}")
            lines.append(f"{self.name}_count{labels} {count}")
        return "\n".join(lines) + "\n"


class Gauge(_Metric):
    """A single value that can go up and down."""

    kind = "gauge"

    def __init__(self, name: str, help_text: str):
        super().__init__(name, help_text)
        self._value = 0.0

    def set(self, value: float) -> None:
        """Set the gauge to the given value."""
        with self._lock:
            self._value = float(value)

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def render(self) -> str:
        """Render the gauge in the text exposition format."""
        lines = self._header()
        lines.append(f"{self.name} {_format_value(self.value)}")
        return "\n".join(lines) + "\n"


HTTP_REQUEST_TOTAL = CounterVec(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = HistogramVec(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["method", "endpoint"],
    DEFAULT_BUCKETS,
)

DATABASE_QUERY_DURATION = HistogramVec(
    "database_query_duration_seconds",
    "Duration of database queries in seconds",
    ["operation", "collection"],
    DEFAULT_BUCKETS,
)

DATABASE_QUERY_TOTAL = CounterVec(
    "database_queries_total",
    "Total number of database queries",
    ["operation", "collection", "status"],
)

ACTIVE_CONNECTIONS = Gauge(
    "database_active_connections",
    "Number of active database connections",
)

ORDER_PROCESSING_DURATION = HistogramVec(
    "order_processing_duration_seconds",
    "Duration of order processing in seconds",
    ["status"],
    DEFAULT_BUCKETS,
)

ORDERS_TOTAL = CounterVec(
    "orders_total",
    "Total number of orders",
    ["status"],
)

_REGISTRY: tuple[_Metric, ...] = (
    HTTP_REQUEST_TOTAL,
    HTTP_REQUEST_DURATION,
    DATABASE_QUERY_DURATION,
    DATABASE_QUERY_TOTAL,
    ACTIVE_CONNECTIONS,
    ORDER_PROCESSING_DURATION,
    ORDERS_TOTAL,
)


def render_all() -> str:
    """Render every service metric in the text exposition format."""
    return "".join(metric.render() for metric in _REGISTRY)


def record_http_request(method: str, endpoint: str, status_code: str, duration: float) -> None:
    """Count an HTTP request and record how long it took."""
    HTTP_REQUEST_TOTAL.inc(method, endpoint, status_code)
    HTTP_REQUEST_DURATION.observe(duration, method, endpoint)


def record_database_query(operation: str, collection: str, status: str, duration: float) -> None:
    """Count a database query and record how long it took."""
    DATABASE_QUERY_TOTAL.inc(operation, collection, status)
    DATABASE_QUERY_DURATION.observe(duration, operation, collection)


def set_active_connections(count: float) -> None:
    """Set the number of active database connections."""
    ACTIVE_CONNECTIONS.set(count)


def record_order_processing(status: str, duration: float) -> None:
    """Record how long processing an order took, by outcome."""
    ORDER_PROCESSING_DURATION.observe(duration, status)


def record_order(status: str) -> None:
    """Count an order by outcome."""
    ORDERS_TOTAL.inc(status)