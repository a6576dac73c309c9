"""Fluent configuration and execution of a single compilation.

A [`CompilationRequest`][texpipe.compilation.CompilationRequest] accumulates options \
through chainable `with_*` calls and runs the whole pipeline when `compile` is \
called:

1. the document source is either the raw input or the rendered template,
2. a fresh workspace is allocated,
3. auxiliary files are copied into it if requested, then the source is written,
4. the compiler runs inside the workspace,
5. the produced PDF is read back,
6. the workspace is removed, whatever happened before.

Errors are deferred: the first one raised by a step is kept in `error` and turns \
every later call into a no-op, so that a whole chain can be checked once at the end:

    request = new().with_data(["a", "b"]).compile()
    if request.error is not None:
        ...

`save` raises the recorded error, which makes the one-liner form usable as well:

    new().with_raw_input(latex).compile().save("out.pdf")
"""

from collections.abc import Callable, Mapping
from functools import wraps
from importlib.resources.abc import Traversable
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import Any, Concatenate, ParamSpec, Self

from jinja2 import Template

from .compiling import Compiler
from .configuring.settings import Settings
from .exceptions import (
    CleanupError,
    ConfigurationError,
    NotYetCompiledError,
    SaveError,
    TexpipeError,
)
from .models import CompilerSelector
from .rendering import Jinja2Renderer, RendererProtocol, TemplateSource
from .retrieving import retrieve_output
from .staging import copy_auxiliary_files, stage_source
from .workspace import Workspace, allocated_workspace

_logger = getLogger(__name__)

P = ParamSpec("P")


def _passthrough_on_error(
    method: Callable[Concatenate["CompilationRequest", P], None],
) -> Callable[Concatenate["CompilationRequest", P], "CompilationRequest"]:
    @wraps(method)
    def wrapper(
        self: "CompilationRequest", /, *args: P.args, **kwargs: P.kwargs
    ) -> "CompilationRequest":
        if self._error is None:
            method(self, *args, **kwargs)
        return self

    return wrapper


class CompilationRequest:
    def __init__(
        self,
        settings: Settings | None = None,
        renderer: RendererProtocol | None = None,
    ) -> None:
        self._settings = settings if settings is not None else Settings()
        self._renderer = renderer if renderer is not None else Jinja2Renderer()
        self._compiler: CompilerSelector | str = self._settings.compiler
        self._templates_folder: Path | str = self._settings.templates_folder
        self._template_name = self._settings.template_name
        self._file_system: Traversable | None = None
        self._functions: Mapping[str, Callable[..., Any]] = {}
        self._data: Any = None
        self._template: Template | None = None
        self._copy_files = False
        self._input = ""
        self._timeout = self._settings.timeout
        # Templating options given explicitly, used to detect conflicts with raw input
        self._templating_options: set[str] = set()
        self._error: TexpipeError | None = None
        self._output = b""
        self._compiled = False
        self._last_workspace: Workspace | None = None

    @_passthrough_on_error
    def with_compiler(self, compiler: CompilerSelector | str) -> None:
        self._compiler = compiler

    @_passthrough_on_error
    def with_template_folder(self, folder: Path | str) -> None:
        self._templates_folder = folder

    @_passthrough_on_error
    def with_template_name(self, name: str) -> None:
        self._template_name = name
        self._templating_options.add("template name")

    @_passthrough_on_error
    def with_file_system(self, file_system: Traversable) -> None:
        """Read the template folder from `file_system` instead of the disk.

        Args:
            file_system: Root of the bundled templates, typically obtained with \
                `importlib.resources.files` or `zipfile.Path`. The template folder is \
                interpreted relatively to it.
        """
        self._file_system = file_system

    @_passthrough_on_error
    def with_render_functions(self, functions: Mapping[str, Callable[..., Any]]) -> None:
        self._functions = dict(functions)
        self._templating_options.add("render functions")

    @_passthrough_on_error
    def with_data(self, data: Any) -> None:
        self._data = data
        self._templating_options.add("data")

    @_passthrough_on_error
    def with_template(self, template: Template) -> None:
        self._template = template
        self._templating_options.add("template object")

    @_passthrough_on_error
    def with_auxiliary_file_copy(self) -> None:
        self._copy_files = True

    @_passthrough_on_error
    def with_raw_input(self, latex: str) -> None:
        self._input = latex

    @_passthrough_on_error
    def with_timeout(self, seconds: float | None) -> None:
        self._timeout = seconds

    @property
    def error(self) -> TexpipeError | None:
        return self._error

    @property
    def output(self) -> bytes:
        return self._output

    @property
    def last_workspace(self) -> Workspace | None:
        return self._last_workspace

    @property
    def cleanup_error(self) -> CleanupError | None:
        if self._last_workspace is None:
            return None
        return self._last_workspace.cleanup_error

    def raise_for_error(self) -> Self:
        if self._error is not None:
            raise self._error
        return self

    def compile(self) -> Self:
        """Run the whole pipeline with the current configuration.

        Does nothing if an error was recorded before. Calling it again after a \
        success runs everything again and replaces the output.

        Returns:
            The request itself, with either `output` or `error` set.
        """
        if self._error is not None:
            return self
        self._output = b""
        self._compiled = False
        self._last_workspace = None
        try:
            compiler, folder = self._validate()
            source = self._input if self._input else self._render(folder)
            self._output = self._execute(compiler, folder, source)
        except TexpipeError as e:
            _logger.debug("Compilation failed: %s", e)
            self._error = e
            return self
        self._compiled = True
        return self

    def save(self, filename: Path | str) -> None:
        """Write the compiled PDF to `filename`.

        Args:
            filename: Destination path. Overwritten if it exists.

        Raises:
            TexpipeError: The error recorded by a previous step, if any.
            NotYetCompiledError: Raised if no compilation succeeded yet.
            SaveError: Raised if the file cannot be written.
        """
        if self._error is not None:
            raise self._error
        if not self._compiled:
            msg = "compilation has not been executed yet"
            raise NotYetCompiledError(msg)
        try:
            Path(filename).write_bytes(self._output)
        except OSError as e:
            msg = f"could not write output to {filename}"
            raise SaveError(msg) from e

    def _validate(self) -> tuple[Compiler, Path]:
        try:
            folder = Path(self._templates_folder)
        except TypeError as e:
            msg = f"invalid template folder {self._templates_folder!r}"
            raise ConfigurationError(msg) from e
        try:
            selector = CompilerSelector(self._compiler)
        except ValueError as e:
            supported = ", ".join(s.value for s in CompilerSelector)
            msg = f"unsupported compiler {self._compiler!r}, expected one of {supported}"
            raise ConfigurationError(msg) from e
        if self._input and self._templating_options:
            conflicting = ", ".join(sorted(self._templating_options))
            msg = f"raw input cannot be combined with {conflicting}"
            raise ConfigurationError(msg)
        if not self._input and self._template is None and not self._template_name:
            msg = "a template name is required when no raw input is given"
            raise ConfigurationError(msg)
        if self._timeout is not None:
            if isinstance(self._timeout, bool) or not isinstance(
                self._timeout, int | float
            ):
                msg = f"timeout should be a number of seconds, got {self._timeout!r}"
                raise ConfigurationError(msg)
            if self._timeout <= 0:
                msg = f"timeout should be positive, got {self._timeout}"
                raise ConfigurationError(msg)
        compiler = Compiler(
            selector,
            options=self._settings.compiler_options,
            passes=self._settings.passes,
            timeout=self._timeout,
        )
        return compiler, folder

    def _render(self, folder: Path) -> str:
        return self._renderer.render(
            TemplateSource(
                folder=folder,
                name=self._template_name,
                data=self._data,
                functions=self._functions,
                file_system=self._file_system,
                template=self._template,
            )
        )

    def _execute(self, compiler: Compiler, folder: Path, source: str) -> bytes:
        with allocated_workspace(self._settings.workspace_dir) as workspace:
            self._last_workspace = workspace
            if self._copy_files:
                copy_auxiliary_files(self._auxiliary_folder(folder), workspace)
            stage_source(workspace, source)
            compiler.compile(workspace)
            output = retrieve_output(workspace)
        if workspace.cleanup_error is not None:
            _logger.warning(
                "Compilation succeeded but its workspace could not be removed: %s",
                workspace.cleanup_error,
            )
        return output

    def _auxiliary_folder(self, folder: Path) -> Traversable:
        if self._file_system is None:
            return folder
        return self._file_system.joinpath(*PurePosixPath(folder).parts)


def new(settings: Settings | None = None) -> CompilationRequest:
    return CompilationRequest(settings)
