#!/usr/bin/env python3
"""Serve the lander home page."""

import argparse
import dataclasses
import logging
import os
import sys
from typing import List, Optional

import docker
from flask import Flask, request

from lander import __version__
from lander.config import Config, load_config
from lander.containers import fetch_containers
from lander.exceptions import ConfigError, RuntimeConnectionError
from lander.extractor import GroupedLinks, extract_and_group
from lander.render import atomic_write, load_error_template, load_template, render_error, render_page

logger = logging.getLogger(__name__)


def collect_links(config: Config, client: Optional[docker.DockerClient] = None) -> GroupedLinks:
    """
    Query Docker and group the links of all opted-in containers.

    Raises:
        RuntimeConnectionError: If Docker cannot be reached
    """
    records = fetch_containers(config.docker, client=client)
    groups = extract_and_group(records, config.mode, config.extractor)
    logger.debug(
        "found %d links in %d groups",
        sum(len(links) for links in groups.values()),
        len(groups),
    )
    return groups


def _request_hostname() -> str:
    host = request.host
    if host.endswith("]") or ":" not in host:
        return host
    return host.rsplit(":", 1)[0]


def create_app(config: Config, client: Optional[docker.DockerClient] = None) -> Flask:
    """
    Create the Flask application.

    Args:
        config: Runtime configuration
        client: Docker client shared by all requests (default: one per request)

    Returns:
        Flask application
    """
    app = Flask(__name__)
    app.config["LANDER"] = config
    template = load_template(config.template)
    error_template = load_error_template(config.template)

    @app.route("/")
    def index():
        logger.debug("%s %s %s", request.remote_addr, request.method, request.path)
        groups = collect_links(config, client=client)
        hostname = config.hostname or _request_hostname()
        return render_page(groups, config.title, hostname, template=template)

    @app.errorhandler(RuntimeConnectionError)
    def docker_unavailable(error):
        logger.error("%s %s failed: %s", request.remote_addr, request.path, error)
        html = render_error(
            config.title, 502, "Bad Gateway", "Could not list containers from Docker.",
            template=error_template,
        )
        return html, 502

    return app


def render_to_file(config: Config, output: str, client: Optional[docker.DockerClient] = None) -> None:
    """Render the page once and write it atomically to ``output``."""
    groups = collect_links(config, client=client)
    hostname = config.hostname or "localhost"
    html = render_page(groups, config.title, hostname, template=load_template(config.template))
    os.makedirs(os.path.dirname(output) or ".", exist_ok=True)
    atomic_write(output, html)
    logger.info("wrote %s", output)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Serve a home page of Docker containers routed by Traefik")
    parser.add_argument(
        "--listen",
        default=None,
        help="Address to listen on as [host]:port (default: LANDER_LISTEN or :8080)"
    )
    parser.add_argument(
        "--render-to",
        metavar="FILE",
        default=None,
        help="Render the page once to FILE and exit instead of serving"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        config = load_config()
        if args.listen:
            config = dataclasses.replace(config, listen=args.listen)
        host, port = config.listen_address()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logging.getLogger().setLevel(logging.DEBUG if args.verbose else config.log_level)

    if args.render_to:
        try:
            render_to_file(config, args.render_to)
        except (RuntimeConnectionError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return 0

    app = create_app(config)
    logger.info("Starting server on %s", config.listen)
    app.run(host=host, port=port, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
