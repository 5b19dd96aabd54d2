#!/usr/bin/env python3
"""Turn lander.* and Traefik labels into grouped links."""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

from lander.exceptions import ExtractionError, MalformedLabelError, ModeDisabledError

logger = logging.getLogger(__name__)

ENABLE_LABEL = "lander.enable"
NAME_LABEL = "lander.name"
GROUP_LABEL = "lander.group"
TRAEFIK_RULE_LABEL = "traefik.frontend.rule"

RULE_DELIMITER = ":"


class RoutingMode(enum.Enum):
    """Where a container's URL comes from."""

    TRAEFIK = "traefik"


@dataclass(frozen=True)
class ExtractorSettings:
    """Label keys and switches used while extracting links."""

    enable_label: str = ENABLE_LABEL
    name_label: str = NAME_LABEL
    group_label: str = GROUP_LABEL
    rule_label: str = TRAEFIK_RULE_LABEL
    traefik_enabled: bool = True
    # Keep the colon as the first character of the URL (":8080", ":/app").
    keep_delimiter: bool = True


DEFAULT_SETTINGS = ExtractorSettings()


@dataclass(frozen=True)
class LinkEntry:
    """One application shown on the page."""

    name: str
    url: str


GroupedLinks = Dict[str, List[LinkEntry]]


def url_from_rule(rule: str, keep_delimiter: bool = True) -> str:
    """
    Extract the URL fragment from a Traefik 1.x frontend rule.

    The fragment starts at the last colon of the rule, so
    ``"Host:example.com:8080"`` gives ``":8080"`` and
    ``"PathPrefixStrip:/grafana"`` gives ``":/grafana"``.

    Args:
        rule: Value of the traefik.frontend.rule label
        keep_delimiter: Include the colon in the result

    Returns:
        URL fragment

    Raises:
        ValueError: If the rule contains no colon
    """
    position = rule.rfind(RULE_DELIMITER)
    if position < 0:
        raise ValueError(f"no {RULE_DELIMITER!r} in rule {rule!r}")
    if not keep_delimiter:
        position += len(RULE_DELIMITER)
    return rule[position:]


def _traefik_link(container_id: str, labels: Mapping[str, str], settings: ExtractorSettings) -> LinkEntry:
    if not settings.traefik_enabled:
        raise ModeDisabledError(container_id, "LANDER_TRAEFIK is set to false")

    name = labels.get(settings.name_label)
    # An empty name counts as missing: the link would have no text to click.
    if not name:
        raise MalformedLabelError(container_id, f"missing label {settings.name_label}")

    rule = labels.get(settings.rule_label)
    if rule is None:
        raise MalformedLabelError(container_id, f"missing label {settings.rule_label}")

    try:
        url = url_from_rule(rule, keep_delimiter=settings.keep_delimiter)
    except ValueError as e:
        raise MalformedLabelError(container_id, str(e)) from e

    return LinkEntry(name=name, url=url)


_EXTRACTORS = {
    RoutingMode.TRAEFIK: _traefik_link,
}


def extract_link(
    labels: Mapping[str, str],
    mode: RoutingMode = RoutingMode.TRAEFIK,
    settings: ExtractorSettings = DEFAULT_SETTINGS,
    container_id: str = "",
) -> LinkEntry:
    """
    Build the link for a single opted-in container.

    Raises:
        ModeDisabledError: If the routing mode is switched off
        MalformedLabelError: If the labels cannot produce a link
    """
    return _EXTRACTORS[mode](container_id, labels, settings)


def extract_and_group(
    records: Iterable,
    mode: RoutingMode = RoutingMode.TRAEFIK,
    settings: ExtractorSettings = DEFAULT_SETTINGS,
) -> GroupedLinks:
    """
    Group the links of all opted-in containers.

    Containers without the enable label are ignored. Containers whose labels
    cannot produce a link are skipped and logged; they never stop the rest of
    the batch. Groups and the links inside them keep the order in which
    containers were seen. Containers without a group label end up under "".

    Args:
        records: ContainerRecord-like objects with ``id`` and ``labels``
        mode: Routing mode used to extract URLs
        settings: Label keys and switches

    Returns:
        Mapping of group name to list of LinkEntry
    """
    groups: GroupedLinks = {}

    for record in records:
        labels = record.labels or {}
        if settings.enable_label not in labels:
            continue

        logger.debug("found lander labels on container %s", record.id)

        try:
            link = extract_link(labels, mode, settings, container_id=record.id)
        except ModeDisabledError as e:
            logger.debug("skipping container %s", e)
            continue
        except ExtractionError as e:
            logger.warning("skipping container %s", e)
            continue

        group = labels.get(settings.group_label, "")
        groups.setdefault(group, []).append(link)

    return groups
