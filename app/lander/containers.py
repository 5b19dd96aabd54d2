#!/usr/bin/env python3
"""Read containers and their labels from the Docker daemon."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import docker
import requests

from lander.exceptions import RuntimeConnectionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerRecord:
    """A container as listed by the Docker API."""

    id: str
    name: str = ""
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContainerRecord":
        """
        Build a record from one entry of the Docker ``/containers/json`` list.

        Args:
            data: Container summary as returned by the API

        Returns:
            ContainerRecord
        """
        names = data.get("Names") or []
        name = names[0].lstrip("/") if names else ""
        return cls(id=data.get("Id", ""), name=name, labels=dict(data.get("Labels") or {}))


def create_client(endpoint: str) -> docker.DockerClient:
    """
    Connect to the Docker daemon at ``endpoint``.

    Raises:
        RuntimeConnectionError: If the client cannot be created
    """
    try:
        return docker.DockerClient(base_url=endpoint)
    except docker.errors.DockerException as e:
        logger.error("could not connect to docker at %s: %s", endpoint, e)
        raise RuntimeConnectionError(f"could not connect to docker at {endpoint}: {e}") from e


def fetch_containers(endpoint: str, client: Optional[docker.DockerClient] = None) -> List[ContainerRecord]:
    """
    List all containers, running or stopped, with their labels.

    Nothing is retried; any failure is fatal to the caller's request.

    Args:
        endpoint: Docker API address (e.g. unix:///var/run/docker.sock)
        client: Already connected client to use instead of a new one

    Returns:
        List of ContainerRecord in the order the daemon reported them

    Raises:
        RuntimeConnectionError: If the daemon is unreachable or the call fails
    """
    own_client = client is None
    if own_client:
        client = create_client(endpoint)

    try:
        summaries = client.api.containers(all=True)
    except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
        logger.error("could not list containers from %s: %s", endpoint, e)
        raise RuntimeConnectionError(f"could not list containers from {endpoint}: {e}") from e
    finally:
        if own_client:
            client.close()

    records = [ContainerRecord.from_api(summary) for summary in summaries]
    logger.debug("docker reported %d containers", len(records))
    return records
