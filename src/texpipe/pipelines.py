from collections.abc import Callable, Sequence, Set
from io import BytesIO
from logging import getLogger
from multiprocessing import cpu_count
from multiprocessing.pool import ThreadPool
from pathlib import Path
from typing import Any, BinaryIO, ParamSpec

from jinja2 import Template
from watchfiles import Change
from watchfiles import watch as watchfiles_watch
from yaml import YAMLError

from .compilation import CompilationRequest
from .configuring.settings import Settings
from .exceptions import ConfigurationError
from .models import CompilerSelector
from .utils import load_yaml

data_filename = "data.yml"
_logger = getLogger(__name__)

P = ParamSpec("P")


def compile_folder(
    folder: Path,
    template: Template,
    data: Any,
    *,
    compiler: CompilerSelector | None = None,
    settings: Settings | None = None,
) -> BinaryIO:
    """Compile a template folder and return the resulting PDF as a stream.

    All the files of `folder` are copied next to the rendered source so that images, \
    classes or styles it contains can be used by the document.

    Args:
        folder: Folder containing the template definition and its companion files.
        template: Already constructed template to render.
        data: Payload to render the template with.
        compiler: Compiler to use. Defaults to the one of the settings.
        settings: Settings to use. Defaults to the default settings.

    Raises:
        TexpipeError: Raised if any step of the compilation fails.

    Returns:
        Stream positioned at the start of the compiled PDF.
    """
    request = (
        CompilationRequest(settings)
        .with_template_folder(folder)
        .with_template(template)
        .with_data(data)
        .with_auxiliary_file_copy()
    )
    if compiler is not None:
        request.with_compiler(compiler)
    return BytesIO(request.compile().raise_for_error().output)


def folder_request(
    folder: Path, settings: Settings, copy_files: bool = False
) -> CompilationRequest:
    """Prepare the compilation of a template folder.

    The data is read from the `data.yml` file of the folder when there is one.

    Args:
        folder: Folder containing the template definition.
        settings: Settings to use.
        copy_files: Whether to copy the folder content next to the rendered source.

    Returns:
        The prepared request, not compiled yet.
    """
    request = CompilationRequest(settings).with_template_folder(folder)
    data_path = folder / data_filename
    if data_path.is_file():
        try:
            request.with_data(load_yaml(data_path))
        except (OSError, YAMLError) as e:
            msg = f"could not load the data of {folder} from {data_path}"
            raise ConfigurationError(msg) from e
    if copy_files:
        request.with_auxiliary_file_copy()
    return request


def run_folder(
    folder: Path, settings: Settings, copy_files: bool, output: Path
) -> None:
    folder_request(folder, settings, copy_files).compile().save(output)
    _logger.info(f"Compiled {folder} into {output}")


def _compile(request: CompilationRequest) -> CompilationRequest:
    return request.compile()


def compile_all(
    requests: Sequence[CompilationRequest], processes: int | None = None
) -> list[CompilationRequest]:
    """Compile several requests concurrently.

    Requests are run by a pool of threads: they all share the current process, which \
    is safe since each of them works in its own workspace.

    Args:
        requests: Requests to compile. None of them should appear twice.
        processes: Maximum number of simultaneous compilations. Defaults to the \
            number of CPUs.

    Returns:
        The compiled requests, in the same order. Check their `error` attribute to \
            know whether they succeeded.
    """
    if not requests:
        return []
    n_workers = processes or min(cpu_count(), len(requests))
    _logger.info(f"Compiling {len(requests)} documents with {n_workers} workers")
    with ThreadPool(n_workers) as pool:
        results = pool.map(_compile, requests)
    for i, request in enumerate(results):
        if request.error is not None:
            _logger.warning("Compilation %d errored: %s", i, request.error)
    return results


def watch(
    watch: Set[Path],
    avoid: Set[Path],
    function: Callable[P, Any],
    *function_args: P.args,
    **function_kwargs: P.kwargs,
) -> None:
    _logger.info("Initial build")
    try:
        function(*function_args, **function_kwargs)
        _logger.info("Initial build finished")
    except Exception as e:
        _logger.exception(str(e))

    resolved_avoid = {p.resolve() for p in avoid}

    def _filter(_change: Change, path: str) -> bool:
        return Path(path).resolve() not in resolved_avoid

    for _ in watchfiles_watch(*watch, watch_filter=_filter, raise_interrupt=False):
        _logger.info("Detected changes, starting a new build")
        try:
            function(*function_args, **function_kwargs)
            _logger.info("Build finished")
        except Exception as e:
            _logger.exception(str(e))
