"""
HTTP exposition of the metrics registry.

Serves the Prometheus text format on a single path with a threaded WSGI
server. Other paths answer 404.
"""

from __future__ import annotations

import errno
import socket
from collections.abc import Callable, Iterable
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

import structlog
from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from systemd_exporter.core.errors import ConfigurationError, ListenerError, UnitManagerError

logger = structlog.get_logger()

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]

IPV4_ANY = "0.0.0.0"
IPV6_ANY = "::"
_TEXT_HEADERS = [("Content-Type", "text/plain; charset=utf-8")]


def parse_listen_address(address: str) -> tuple[str, int]:
    """
    Split a Go-style listen address into host and port.

    An empty host (":8080") means every interface and is returned as "".
    IPv6 hosts must be bracketed ("[::1]:8080").
    """
    host, sep, port_text = address.rpartition(":")
    if not sep:
        raise ConfigurationError("Listen address must be host:port", {"address": address})
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigurationError("IPv6 hosts must be bracketed", {"address": address})
    try:
        port = int(port_text)
    except ValueError:
        raise ConfigurationError("Invalid port", {"address": address}) from None
    if not 0 <= port <= 65535:
        raise ConfigurationError("Port out of range", {"address": address})
    return host, port


def create_app(registry: CollectorRegistry, metrics_path: str = "/metrics") -> WSGIApp:
    """WSGI app serving the registry on metrics_path only."""
    metrics_app = make_wsgi_app(registry)

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "") != metrics_path:
            start_response("404 Not Found", _TEXT_HEADERS)
            return [b"404 page not found\n"]
        try:
            return metrics_app(environ, start_response)
        except UnitManagerError as exc:
            logger.error(
                "scrape_failed",
                error_type=type(exc).__name__,
                message=exc.message,
                **exc.details,
            )
            start_response("500 Internal Server Error", _TEXT_HEADERS)
            return [b"An error has occurred while serving metrics\n"]

    return app


class _LoggingHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("http_request", client=self.client_address[0], message=format % args)


def _best_family(host: str, port: int) -> tuple[socket.AddressFamily, str]:
    infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr[0]


def _bind(
    app: WSGIApp, host: str, port: int, family: socket.AddressFamily, *, dual_stack: bool = False
) -> WSGIServer:
    class _Server(ThreadingWSGIServer):
        address_family = family

        def server_bind(self) -> None:
            if dual_stack:
                self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
            super().server_bind()

    return make_server(host, port, app, server_class=_Server, handler_class=_LoggingHandler)


def _bind_any(app: WSGIApp, port: int) -> WSGIServer:
    """Listen on every IPv4 and IPv6 address, IPv4 only where IPv6 is missing."""
    if socket.has_ipv6:
        try:
            return _bind(app, IPV6_ANY, port, socket.AF_INET6, dual_stack=True)
        except OSError as exc:
            if exc.errno not in (errno.EAFNOSUPPORT, errno.EADDRNOTAVAIL):
                raise
            logger.debug("ipv6_unavailable", error=str(exc))
    return _bind(app, IPV4_ANY, port, socket.AF_INET)


def serve(app: WSGIApp, host: str, port: int) -> WSGIServer:
    """
    Bind the HTTP listener.

    An empty host binds every interface, IPv4 and IPv6. The returned server
    is bound but not yet serving; call serve_forever().

    Raises:
        ListenerError: If the address cannot be resolved or bound
    """
    try:
        if not host:
            return _bind_any(app, port)
        family, address = _best_family(host, port)
        return _bind(app, address, port, family)
    except OSError as exc:
        raise ListenerError(
            "Failed to bind HTTP listener", {"host": host, "port": port, "error": str(exc)}
        ) from exc
