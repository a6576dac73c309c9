from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from importlib.resources.abc import Traversable
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import Any, Protocol

from jinja2 import BaseLoader, Environment, StrictUndefined, Template, TemplateNotFound
from jinja2 import TemplateError as Jinja2TemplateError

from .exceptions import TemplateError

_logger = getLogger(__name__)


@dataclass(frozen=True)
class TemplateSource:
    """Everything a renderer needs to produce a document source.

    Attributes:
        folder: Folder containing the template definition. Relative to the root of \
            `file_system` when it is set, to the current directory otherwise.
        name: Name of the template definition file inside `folder`.
        data: Payload the template is rendered against.
        functions: Helpers made available inside the template.
        file_system: Optional traversable (bundled resources, zip archive...) to load \
            the template from instead of the disk.
        template: Optional pre-built template. When set, `folder`, `name` and \
            `file_system` are not used to find the template.
    """

    folder: Path
    name: str
    data: Any = None
    functions: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
    file_system: Traversable | None = None
    template: Template | None = None


class RendererProtocol(Protocol):
    def render(self, source: TemplateSource) -> str: ...


class _AbsoluteLoader(BaseLoader):
    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str, Callable[[], bool]]:
        template_path = Path(template)
        if not template_path.is_file():
            raise TemplateNotFound(template)
        mtime = template_path.stat().st_mtime
        source = template_path.read_text(encoding="utf8")
        return (
            source,
            str(template_path),
            lambda: mtime == template_path.stat().st_mtime,
        )


class _TraversableLoader(BaseLoader):
    def __init__(self, root: Traversable) -> None:
        self._root = root

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str, Callable[[], bool]]:
        entry = self._root
        for part in PurePosixPath(template).parts:
            entry = entry.joinpath(part)
        if not entry.is_file():
            raise TemplateNotFound(template)
        return entry.read_text(encoding="utf8"), template, lambda: True


class Jinja2Renderer(RendererProtocol):
    """Render LaTeX templates with Jinja2.

    The delimiters are changed so that they don't clash with LaTeX syntax:

    - `\\BLOCK{...}` for statements,
    - `\\V{...}` for expressions,
    - `\\#{...}` for comments,
    - lines starting with `%%` are statements and lines starting with `%#` comments.

    Undefined variables are errors rather than empty strings.
    """

    def render(self, source: TemplateSource) -> str:
        template = source.template or self._load(source)
        try:
            return template.render(self._context(source))
        except Exception as e:
            msg = f"could not execute template {template.name}: {e}"
            raise TemplateError(msg) from e

    def _load(self, source: TemplateSource) -> Template:
        if source.file_system is not None:
            loader: BaseLoader = _TraversableLoader(source.file_system)
            template_name = (PurePosixPath(source.folder) / source.name).as_posix()
        else:
            loader = _AbsoluteLoader()
            template_name = str((source.folder / source.name).resolve())
        _logger.debug("Loading template %s", template_name)
        env = self._env(loader, source.functions)
        try:
            return env.get_template(template_name)
        except (Jinja2TemplateError, OSError, UnicodeDecodeError) as e:
            msg = f"could not create template {template_name}: {e}"
            raise TemplateError(msg) from e

    def _env(
        self, loader: BaseLoader, functions: Mapping[str, Callable[..., Any]]
    ) -> Environment:
        env = Environment(
            loader=loader,
            block_start_string=r"\BLOCK{",
            block_end_string="}",
            variable_start_string=r"\V{",
            variable_end_string="}",
            comment_start_string=r"\#{",
            comment_end_string="}",
            line_statement_prefix="%%",
            line_comment_prefix="%#",
            trim_blocks=True,
            autoescape=False,
            undefined=StrictUndefined,
        )
        env.filters.update(functions)
        env.globals.update(functions)
        return env

    def _context(self, source: TemplateSource) -> dict[str, Any]:
        context: dict[str, Any] = dict(source.functions)
        if isinstance(source.data, Mapping):
            context.update(source.data)
        # The whole payload stays reachable even if it has a "data" key
        context["data"] = source.data
        return context
