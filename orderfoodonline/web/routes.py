"""Application wiring: dependencies, routes and the HTTP server."""

from __future__ import annotations

import logging
import signal
import threading
from dataclasses import dataclass
from socketserver import ThreadingMixIn
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from flask import Blueprint, Flask, Response, jsonify, redirect

from orderfoodonline import metrics
from orderfoodonline.web.middlewares import (
    cors_handler,
    options_handler,
    rate_limiter_handler,
)

VERSION = "0.1.0"
COMMIT_HASH = "5b92121"

_SWAGGER_JSON_URL = "/api/swagger.json"
_SWAGGER_PAGE = (
    "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
    "<title>API documentation</title></head>"
    f"<body><h1>API documentation</h1><p><a href=\"{_SWAGGER_JSON_URL}\">"
    "OpenAPI specification</a></p></body></html>\n"
)

_log = logging.getLogger(__name__)


@dataclass
class Dependencies:
    """The handlers and middleware the router needs."""

    swagger_handler: Any = None
    auth_middleware: Any = None
    metrics_middleware: Any = None
    product_handler: Any = None
    order_handler: Any = None


@dataclass
class ServerSettings:
    """Where the server listens, its timeouts and the deployment environment."""

    host: str = "0.0.0.0"
    port: int = 8080
    read_timeout: float = 10.0
    write_timeout: float = 10.0
    env: str = "production"


def validate_dependencies(deps: Dependencies) -> None:
    """Raise ValueError naming the first required dependency that is missing."""
    if deps.auth_middleware is None:
        raise ValueError("authMiddleware cannot be nil")
    if deps.metrics_middleware is None:
        raise ValueError("metricsMiddleware cannot be nil")
    if deps.product_handler is None:
        raise ValueError("productHandler cannot be nil")
    if deps.swagger_handler is None:
        raise ValueError("swaggerHandler cannot be nil")


class _RequestHandler(WSGIRequestHandler):
    timeout: float | None = None

    def log_message(self, format, *args):  # noqa: A002
        _log.debug("%s - %s", self.address_string(), format % args)


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class Router:
    """Owns the Flask application, its middleware and routes, and serves it."""

    def __init__(self, settings: ServerSettings, logger: logging.Logger | None = None):
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)
        self.app = Flask(__name__)

    def init(self, deps: Dependencies) -> None:
        """Install middleware and routes; raise ValueError if a dependency is missing."""
        self._setup_middleware(deps)
        try:
            self._setup_api_routes(deps)
        except ValueError as exc:
            raise ValueError(f"failed to setup api routes: {exc}") from exc

    def _setup_middleware(self, deps: Dependencies) -> None:
        app = self.app
        deps.metrics_middleware.init_app(app)
        app.before_request(rate_limiter_handler())
        app.after_request(cors_handler)
        app.before_request(options_handler)

        app.add_url_rule("/api/health", "health", self._health, methods=["GET"])
        app.add_url_rule("/api/version", "version", self._version, methods=["GET"])
        app.add_url_rule("/metrics", "metrics", self._metrics, methods=["GET"])

        if self.settings.env == "local":
            app.add_url_rule(
                _SWAGGER_JSON_URL,
                "swagger_json",
                deps.swagger_handler.get_swagger_json,
                methods=["GET"],
            )
            app.add_url_rule(
                "/swagger/",
                "swagger_ui",
                self._swagger_ui,
                defaults={"path": ""},
                methods=["GET"],
            )
            app.add_url_rule(
                "/swagger/<path:path>", "swagger_ui_path", self._swagger_ui, methods=["GET"]
            )
        else:
            self.logger.info("Swagger is disabled in dev/production")

    def _setup_api_routes(self, deps: Dependencies) -> None:
        validate_dependencies(deps)
        api = Blueprint("api", __name__, url_prefix="/api")
        api.before_request(deps.auth_middleware.authenticate())
        api.add_url_rule(
            "/product", "list_products", deps.product_handler.list_products, methods=["GET"]
        )
        api.add_url_rule(
            "/product/<product_id>",
            "get_product_by_id",
            deps.product_handler.get_product_by_id,
            methods=["GET"],
        )
        api.add_url_rule(
            "/order", "place_order", deps.order_handler.place_order, methods=["POST"]
        )
        self.app.register_blueprint(api)

    @staticmethod
    def _health():
        return jsonify("Healthy"), 200

    @staticmethod
    def _version():
        return jsonify({"version": VERSION, "commit_hash": COMMIT_HASH}), 200

    @staticmethod
    def _metrics():
        return Response(
            metrics.render_all(),
            status=200,
            content_type="text/plain; version=0.0.4; charset=utf-8",
        )

    @staticmethod
    def _swagger_ui(path: str):
        if path == "doc.json":
            return redirect(_SWAGGER_JSON_URL)
        return Response(_SWAGGER_PAGE, status=200, mimetype="text/html")

    def run(self) -> None:
        """Serve until SIGINT or SIGTERM arrives, then shut down."""
        settings = self.settings
        self.logger.info("Server is running on port: %s", settings.port)

        # The connection socket timeout covers both reading and writing.
        timeout = max(settings.read_timeout, settings.write_timeout) or None
        handler_class = type("_TimedRequestHandler", (_RequestHandler,), {"timeout": timeout})

        stop = threading.Event()
        previous = {
            sig: signal.signal(sig, lambda *_: stop.set())
            for sig in (signal.SIGINT, signal.SIGTERM)
        }
        try:
            try:
                server = make_server(
                    settings.host,
                    settings.port,
                    self.app,
                    server_class=_ThreadingWSGIServer,
                    handler_class=handler_class,
                )
            except OSError as exc:
                self.logger.critical("Failed to start server: %s", exc)
                raise

            worker = threading.Thread(target=server.serve_forever, daemon=True)
            worker.start()
            stop.wait()

            self.logger.info("Shutting down server...")
            server.shutdown()
            server.server_close()
            worker.join(timeout=30)
            self.logger.info("Server exited")
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)