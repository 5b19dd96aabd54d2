#!/usr/bin/env python3
"""Tests for the Docker container source"""

import sys
from pathlib import Path
from unittest.mock import Mock, patch

import docker
import pytest
import requests

# Add app directory to path to import lander
sys.path.insert(0, str(Path(__file__).parent.parent / "app"))
from lander.containers import ContainerRecord, fetch_containers
from lander.exceptions import RuntimeConnectionError

ENDPOINT = "unix:///var/run/docker.sock"


def api_container(container_id, name, labels):
    return {"Id": container_id, "Names": [f"/{name}"], "Labels": labels, "State": "running"}


class TestContainerRecord:
    """Tests for ContainerRecord.from_api"""

    def test_from_api(self):
        """Test building a record from an API summary"""
        rec = ContainerRecord.from_api(api_container("abc123", "grafana", {"lander.enable": "true"}))
        assert rec.id == "abc123"
        assert rec.name == "grafana"
        assert rec.labels == {"lander.enable": "true"}

    def test_from_api_without_labels(self):
        """Test that null labels become an empty mapping"""
        rec = ContainerRecord.from_api({"Id": "abc", "Names": None, "Labels": None})
        assert rec.labels == {}
        assert rec.name == ""


class TestFetchContainers:
    """Tests for fetch_containers function"""

    def test_lists_all_containers(self):
        """Test that running and stopped containers are listed in order"""
        mock_client = Mock()
        mock_client.api.containers.return_value = [
            api_container("1", "one", {"lander.enable": ""}),
            api_container("2", "two", {}),
        ]

        records = fetch_containers(ENDPOINT, client=mock_client)

        mock_client.api.containers.assert_called_once_with(all=True)
        assert [r.id for r in records] == ["1", "2"]
        assert records[0].labels == {"lander.enable": ""}
        # A client passed in belongs to the caller
        mock_client.close.assert_not_called()

    def test_creates_and_closes_client(self):
        """Test that a client is created for the endpoint and closed afterwards"""
        mock_client = Mock()
        mock_client.api.containers.return_value = []

        with patch("lander.containers.docker.DockerClient", return_value=mock_client) as client_cls:
            assert fetch_containers(ENDPOINT) == []

        client_cls.assert_called_once_with(base_url=ENDPOINT)
        mock_client.close.assert_called_once()

    def test_client_creation_failure(self):
        """Test that an unusable endpoint raises RuntimeConnectionError"""
        error = docker.errors.DockerException("bad endpoint")
        with patch("lander.containers.docker.DockerClient", side_effect=error):
            with pytest.raises(RuntimeConnectionError):
                fetch_containers("bogus://nowhere")

    def test_transport_failure(self):
        """Test that a connection error while listing is translated"""
        mock_client = Mock()
        mock_client.api.containers.side_effect = requests.exceptions.ConnectionError("refused")

        with patch("lander.containers.docker.DockerClient", return_value=mock_client):
            with pytest.raises(RuntimeConnectionError) as exc_info:
                fetch_containers(ENDPOINT)

        assert isinstance(exc_info.value, ConnectionError)
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)
        mock_client.close.assert_called_once()

    def test_api_error(self):
        """Test that a Docker API error while listing is translated"""
        mock_client = Mock()
        mock_client.api.containers.side_effect = docker.errors.APIError("500 Server Error")

        with pytest.raises(RuntimeConnectionError):
            fetch_containers(ENDPOINT, client=mock_client)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
