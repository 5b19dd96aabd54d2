#!/usr/bin/env python3
"""Render grouped links to HTML and write pages to disk."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import jinja2

from lander.extractor import GroupedLinks

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE = "index.html"
ERROR_TEMPLATE = "error.html"


def atomic_write(filepath: str, content: str, mode: int = 0o644) -> None:
    """
    Write content to file atomically using a temp file and rename.

    Args:
        filepath: Target file path
        content: Content to write
        mode: File permissions (default: 0o644)
    """
    filepath_obj = Path(filepath)
    # Same directory keeps the rename on one filesystem
    fd, temp_path = tempfile.mkstemp(
        dir=filepath_obj.parent,
        prefix=f".{filepath_obj.name}.",
        suffix=".tmp"
    )
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
        os.chmod(temp_path, mode)
        os.replace(temp_path, filepath)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def link_href(hostname: str, url: str, scheme: str = "http") -> str:
    """
    Build the hyperlink for a link URL fragment.

    Fragments keep their leading colon by default, so ``":8080"`` becomes
    ``http://host:8080`` and ``":/app"`` becomes ``http://host:/app``.
    Fragments without the colon are joined as a port when numeric and as a
    path otherwise.

    Args:
        hostname: Host the links point at
        url: Fragment extracted from the routing rule
        scheme: URL scheme

    Returns:
        Absolute URL
    """
    if url.startswith((":", "/")):
        return f"{scheme}://{hostname}{url}"
    if url.isdigit():
        return f"{scheme}://{hostname}:{url}"
    return f"{scheme}://{hostname}/{url}"


def _environment(search_path: Path) -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(search_path)),
        autoescape=jinja2.select_autoescape(default=True),
    )
    env.globals["link_href"] = link_href
    return env


def load_template(template_path: Optional[str] = None) -> jinja2.Template:
    """
    Load a custom page template, or the bundled one.

    A custom template that does not exist is reported and the bundled
    template is used instead.

    Args:
        template_path: Path to a Jinja2 template file

    Returns:
        Compiled template
    """
    if template_path:
        path = Path(template_path)
        if path.is_file():
            logger.info("loaded template from %s", path)
            return _environment(path.parent).get_template(path.name)
        logger.warning("template not found at %s, using default template", path)
    return _environment(TEMPLATE_DIR).get_template(DEFAULT_TEMPLATE)


def load_error_template(template_path: Optional[str] = None) -> jinja2.Template:
    """
    Load the error page template.

    An ``error.html`` next to a custom page template takes precedence over
    the bundled one.

    Args:
        template_path: Path to the custom page template, if any

    Returns:
        Compiled template
    """
    if template_path:
        custom_dir = Path(template_path).parent
        if (custom_dir / ERROR_TEMPLATE).is_file():
            logger.info("loaded error template from %s", custom_dir / ERROR_TEMPLATE)
            return _environment(custom_dir).get_template(ERROR_TEMPLATE)
    return _environment(TEMPLATE_DIR).get_template(ERROR_TEMPLATE)


def render_error(
    title: str,
    status: int,
    reason: str,
    message: str,
    template: Optional[jinja2.Template] = None,
) -> str:
    """Render the page shown when the home page cannot be built."""
    if template is None:
        template = load_error_template()
    return template.render(title=title, status=status, reason=reason, message=message)


def render_page(
    groups: GroupedLinks,
    title: str,
    hostname: str,
    template: Optional[jinja2.Template] = None,
) -> str:
    """
    Render the home page.

    Groups are listed by name, so the ungrouped links ("") come first.

    Args:
        groups: Links grouped by lander.group
        title: Page title
        hostname: Host used to build hyperlinks
        template: Template to render with (default: bundled template)

    Returns:
        HTML document
    """
    if template is None:
        template = load_template()
    ordered = sorted(groups.items(), key=lambda item: item[0])
    return template.render(title=title, groups=ordered, hostname=hostname)
