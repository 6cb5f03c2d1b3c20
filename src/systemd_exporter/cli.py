"""
Command line entry point.

Opens the systemd bus connection, registers the collector and serves
/metrics until interrupted.
"""

from __future__ import annotations

import argparse
import signal
import sys
from collections.abc import Sequence
from typing import Any

import structlog
from prometheus_client import CollectorRegistry
from pydantic import ValidationError

from systemd_exporter.clients.systemd import SystemdClient
from systemd_exporter.collector import SystemdCollector
from systemd_exporter.config import Settings, get_settings
from systemd_exporter.core.errors import ConfigurationError, ExitCode, main_with_error_handling
from systemd_exporter.logging import configure_logging
from systemd_exporter.server import create_app, parse_listen_address, serve

logger = structlog.get_logger()


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="systemd-exporter",
        description="Prometheus exporter for systemd unit resource usage",
    )
    parser.add_argument(
        "--listen-address",
        default=settings.listen_address,
        help="The address to listen on for HTTP requests.",
    )
    return parser


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        raise ConfigurationError("Invalid settings", {"error": str(exc)}) from exc


def _interrupt(signum: int, frame: Any) -> None:
    raise KeyboardInterrupt


@main_with_error_handling
def run(argv: Sequence[str] | None = None) -> int:
    settings = _load_settings()
    configure_logging(settings.log_level, settings.log_format)
    args = build_parser(settings).parse_args(argv)
    host, port = parse_listen_address(args.listen_address)

    with SystemdClient.connect(settings.bus, timeout=settings.bus_timeout) as client:
        registry = CollectorRegistry()
        registry.register(SystemdCollector(client))
        httpd = serve(create_app(registry, settings.metrics_path), host, port)
        logger.info("listening", host=host or "*", port=port, path=settings.metrics_path)

        previous = signal.signal(signal.SIGTERM, _interrupt)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            signal.signal(signal.SIGTERM, previous)
            httpd.server_close()
            logger.info("shutdown")

    return ExitCode.SUCCESS


def main(argv: Sequence[str] | None = None) -> None:
    sys.exit(run(argv))
