#!/usr/bin/env python3
"""Runtime configuration read from LANDER_* environment variables."""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from lander.exceptions import ConfigError
from lander.extractor import ExtractorSettings, RoutingMode

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")

# "panic" and "fatal" both map to CRITICAL.
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}


@dataclass(frozen=True)
class Config:
    """Settings fixed at process start and shared read-only by all requests."""

    docker: str
    exposed: bool = False
    listen: str = ":8080"
    title: str = "LANDER"
    hostname: str = ""
    log_level: int = logging.INFO
    template: Optional[str] = None
    extractor: ExtractorSettings = field(default_factory=ExtractorSettings)

    @property
    def mode(self) -> RoutingMode:
        return RoutingMode.TRAEFIK

    def listen_address(self) -> Tuple[str, int]:
        """Split ``listen`` into a host and port for the web server."""
        return parse_listen(self.listen)


def parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be true or false, got {value!r}")


def parse_listen(value: str) -> Tuple[str, int]:
    """
    Parse a listen address in the form ``[host]:port``.

    A bare port (``8080``) is accepted too. An empty host means all interfaces.
    IPv6 hosts are written in brackets (``[::]:8080``) and returned without.

    Args:
        value: Listen address

    Returns:
        Tuple of (host, port)
    """
    host, sep, port = value.strip().rpartition(":")
    if not sep:
        host, port = "", value.strip()
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"LANDER_LISTEN has an invalid port: {value!r}") from None
    if not 0 < port_number < 65536:
        raise ConfigError(f"LANDER_LISTEN port out of range: {value!r}")
    if host.startswith("[") != host.endswith("]"):
        raise ConfigError(f"LANDER_LISTEN has an unbalanced IPv6 bracket: {value!r}")
    host = host.strip("[]")
    return host or "0.0.0.0", port_number


def _get(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(name, "")
    if value == "":
        logger.info('environment variable %s not set, assuming: "%s"', name, default)
        return default
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Build the configuration from environment variables.

    Missing optional variables fall back to their defaults. A missing
    LANDER_DOCKER is reported as a ConfigError so the caller decides how to
    stop the process.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        Validated Config
    """
    if environ is None:
        environ = os.environ

    docker_endpoint = environ.get("LANDER_DOCKER", "")
    if not docker_endpoint:
        raise ConfigError(
            "environment variable LANDER_DOCKER not set! "
            "Can't start the server without a docker endpoint."
        )

    traefik = parse_bool("LANDER_TRAEFIK", _get(environ, "LANDER_TRAEFIK", "true"))
    exposed = parse_bool("LANDER_EXPOSED", _get(environ, "LANDER_EXPOSED", "false"))
    keep_delimiter = parse_bool(
        "LANDER_KEEP_DELIMITER", _get(environ, "LANDER_KEEP_DELIMITER", "true")
    )

    listen = _get(environ, "LANDER_LISTEN", ":8080")
    parse_listen(listen)

    level_name = _get(environ, "LANDER_LOGLEVEL", "info").strip().lower()
    if level_name not in LOG_LEVELS:
        raise ConfigError(f"LANDER_LOGLEVEL has an unknown level: {level_name!r}")

    hostname = environ.get("LANDER_HOSTNAME", "")
    if not hostname:
        logger.warning(
            "environment variable LANDER_HOSTNAME not set! "
            "Links will use the host of each request."
        )

    if exposed:
        logger.warning("LANDER_EXPOSED is set but exposed port discovery is not supported yet")

    return Config(
        docker=docker_endpoint,
        exposed=exposed,
        listen=listen,
        title=_get(environ, "LANDER_TITLE", "LANDER"),
        hostname=hostname,
        log_level=LOG_LEVELS[level_name],
        template=environ.get("LANDER_TEMPLATE") or None,
        extractor=ExtractorSettings(traefik_enabled=traefik, keep_delimiter=keep_delimiter),
    )
