from importlib.resources.abc import Traversable
from logging import getLogger
from pathlib import Path
from shutil import copy2, copytree

from .exceptions import StagingError
from .models import SOURCE_FILENAME
from .workspace import Workspace

_logger = getLogger(__name__)


def stage_source(workspace: Workspace, source: str) -> Path:
    """Write the document source into the workspace.

    Args:
        workspace: Workspace of the current compilation.
        source: LaTeX source, written verbatim.

    Raises:
        StagingError: Raised if the file cannot be written.

    Returns:
        Path of the written source file.
    """
    source_path = workspace / SOURCE_FILENAME
    try:
        source_path.write_text(source, encoding="utf8")
    except OSError as e:
        msg = f"could not write {source_path}"
        raise StagingError(msg) from e
    return source_path


def copy_auxiliary_files(folder: Traversable, workspace: Workspace) -> list[str]:
    """Copy every entry of `folder` into the workspace.

    Directories are copied recursively. Nothing is rolled back on failure, the \
    workspace is removed by its owner anyway.

    Args:
        folder: Folder to copy from. Either a path on disk or any traversable, such \
            as the result of `importlib.resources.files` or a `zipfile.Path`.
        workspace: Workspace of the current compilation.

    Raises:
        StagingError: Raised if the folder cannot be listed or an entry cannot be \
            copied.

    Returns:
        Names of the copied entries.
    """
    try:
        entries = sorted(folder.iterdir(), key=lambda entry: entry.name)
    except (OSError, ValueError) as e:
        msg = f"could not list the contents of {folder}"
        raise StagingError(msg) from e
    copied = []
    for entry in entries:
        try:
            _copy_entry(entry, workspace.path / entry.name)
        except OSError as e:
            msg = f"could not copy {entry} into {workspace.path}"
            raise StagingError(msg) from e
        copied.append(entry.name)
    _logger.debug("Copied %d entries from %s to %s", len(copied), folder, workspace)
    return copied


def _copy_entry(entry: Traversable, destination: Path) -> None:
    if isinstance(entry, Path):
        if entry.is_dir():
            copytree(entry, destination, dirs_exist_ok=True)
        else:
            copy2(entry, destination)
    elif entry.is_dir():
        destination.mkdir(exist_ok=True)
        for child in entry.iterdir():
            _copy_entry(child, destination / child.name)
    else:
        destination.write_bytes(entry.read_bytes())
