"""HTTP middleware: authentication, CORS, preflight handling, metrics and rate limiting."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from flask import Flask, Response, g, jsonify, request

from orderfoodonline import metrics

_CLIENT_HEADER_NAME = "api_key"
_VALID_API_KEY = "placeholder"

_CORS_ALLOW_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
_CORS_ALLOW_HEADERS = (
    "Origin",
    "Content-Type",
    "Accept",
    "Authorization",
    "X-Geo-Location",
    "X-Language",
    "X-Timezone",
)
_CORS_EXPOSE_HEADERS = ("Content-Length",)
_CORS_MAX_AGE_SECONDS = 12 * 60 * 60

_CORS_RESPONSE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Expose-Headers": ",".join(_CORS_EXPOSE_HEADERS),
}

_CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Methods": ",".join(_CORS_ALLOW_METHODS),
    "Access-Control-Allow-Headers": ",".join(_CORS_ALLOW_HEADERS),
    "Access-Control-Max-Age": str(_CORS_MAX_AGE_SECONDS),
}

_OPTIONS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Origin, Content-Type, Accept, Authorization",
}

_RATE_WINDOW_SECONDS = 5 * 60
_RATE_LIMIT = 300


class AuthMiddleware:
    """Builds request hooks that authenticate and authorize API calls."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def authenticate(self):
        """Return a hook that rejects requests without a valid API key with 401."""

        def check_api_key():
            supplied = request.headers.get(_CLIENT_HEADER_NAME, "").strip()
            if not supplied:
                return jsonify({"error": "API key required"}), 401
            if supplied != _VALID_API_KEY:
                return jsonify({"error": "Invalid API key"}), 401
            return None

        return check_api_key

    def authorize(self):
        """Return a hook that marks the request as authorized and lets it through."""

        def check_access():
            g.authorized = True
            return None

        return check_access


class MetricsMiddleware:
    """Records the count, duration and status of every HTTP request."""

    def init_app(self, app: Flask) -> None:
        """Install the timing hooks on the application."""
        app.before_request(self._start_timer)
        app.after_request(self._record)

    @staticmethod
    def _start_timer() -> None:
        g._metrics_started = time.perf_counter()

    @staticmethod
    def _record(response: Response) -> Response:
        started = g.get("_metrics_started")
        duration = time.perf_counter() - started if started is not None else 0.0
        rule = request.url_rule
        endpoint = rule.rule if rule is not None else request.path
        metrics.record_http_request(
            request.method, endpoint, str(response.status_code), duration
        )
        return response


def cors_handler(response: Response) -> Response:
    """Add CORS headers for cross-origin requests; answer preflights with 204."""
    origin = request.headers.get("Origin")
    if not origin:
        return response
    host = request.host
    if origin in (f"http://{host}", f"https://{host}"):
        return response
    if request.method == "OPTIONS":
        preflight = Response(status=204)
        preflight.headers.update(_CORS_PREFLIGHT_HEADERS)
        return preflight
    response.headers.update(_CORS_RESPONSE_HEADERS)
    return response


def options_handler():
    """Answer any OPTIONS request with 204 and permissive CORS headers."""
    if request.method != "OPTIONS":
        return None
    response = Response(status=204)
    response.headers.update(_OPTIONS_HEADERS)
    return response


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip
    return request.remote_addr or ""


def _trim_number(value: float) -> str:
    return f"{value:.9f}".rstrip("0").rstrip(".") or "0"


def _format_duration(seconds: float) -> str:
    if seconds <= 0:
        return "0s"
    if seconds < 1:
        return f"{_trim_number(seconds * 1000)}ms"
    whole_minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(whole_minutes), 60)
    text = f"{_trim_number(secs)}s"
    if hours:
        return f"{hours}h{minutes}m{text}"
    if minutes:
        return f"{minutes}m{text}"
    return text


@dataclass
class _Bucket:
    stamp: float
    tokens: int


class RateLimiter:
    """Allows each client IP ``limit`` requests per ``rate`` seconds of quiet."""

    def __init__(self, rate: float, limit: int):
        if rate <= 0 or limit <= 0:
            raise ValueError("rate and limit must be positive")
        self.rate = rate
        self.limit = limit
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()

    def __call__(self):
        """Return a 429 response when the client is over its limit, else None."""
        key = _client_ip()
        now = time.monotonic()
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = _Bucket(stamp=now, tokens=self.limit)
                self._buckets[key] = bucket
            if bucket.stamp + self.rate <= now:
                bucket.tokens = self.limit
            if bucket.tokens <= 0:
                remaining = bucket.stamp + self.rate - now
                return Response(
                    "Too many requests. Try again in " + _format_duration(remaining),
                    status=429,
                    mimetype="text/plain",
                )
            bucket.tokens -= 1
            bucket.stamp = now
        return None


def rate_limiter_handler() -> RateLimiter:
    """Return the service's limiter: 300 requests per five minutes per client."""
    return RateLimiter(rate=_RATE_WINDOW_SECONDS, limit=_RATE_LIMIT)