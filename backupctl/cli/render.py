"""
Output Rendering.

Renders named Jinja2 templates from backupctl/cli/templates. A template is
rendered completely before anything is written, so a failing render never
leaves partial output behind.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, TextIO

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from backupctl.core.exceptions import RenderError
from backupctl.core.logging import get_logger

logger = get_logger(__name__)


class TemplateName(str, Enum):
    CONNECTED_NODES = "connected_nodes.txt.j2"
    CONNECTED_NODES_VERBOSE = "connected_nodes_verbose.txt.j2"
    AVAILABLE_BACKUPS = "available_backups.txt.j2"
    AVAILABLE_STORAGES = "available_storages.txt.j2"
    VERSION = "version.txt.j2"


def format_timestamp(value: int) -> str:
    """Unix seconds -> 'YYYY-MM-DD HH:MM:SS' (UTC); 0 renders as '-'."""
    if not value:
        return "-"
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def create_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("backupctl.cli", "templates"),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["timestamp"] = format_timestamp
    return env


class OutputRenderer:
    """
    Writes rendered templates to a sink.

    Usage:
        renderer = OutputRenderer(sys.stdout)
        renderer.render(TemplateName.CONNECTED_NODES, agents)
    """

    def __init__(self, sink: TextIO, environment: Environment | None = None) -> None:
        self.sink = sink
        self._env = environment or create_environment()

    def render_to_string(self, template: TemplateName, data: Any) -> str:
        """
        Raises:
            RenderError: If the template is missing or fails to render
        """
        try:
            return self._env.get_template(template.value).render(data=data)
        except TemplateError as e:
            raise RenderError(f"Cannot render {template.value}: {e}") from e

    def render(self, template: TemplateName, data: Any) -> None:
        text = self.render_to_string(template, data)
        self.sink.write(text)
        self.sink.flush()
        logger.debug("Rendered output", template=template.value, size=len(text))

    def write_line(self, message: str) -> None:
        """Write a plain message instead of a template."""
        self.sink.write(f"{message}\n")
        self.sink.flush()
