"""Allocate and release the isolated directories compilations run in.

Each compilation attempt gets its own directory. Names combine the process id, a \
process-wide counter and the random suffix of `tempfile.mkdtemp`, which creates the \
directory atomically and retries on collision. Two allocations running at the same \
time, in the same process or not, can therefore never share a directory.

Nothing in here changes the current working directory of the process: every path \
handed out is absolute.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from itertools import count
from logging import getLogger
from os import getpid
from pathlib import Path
from shutil import rmtree
from tempfile import mkdtemp

from . import app_name
from .exceptions import CleanupError, StagingError

_logger = getLogger(__name__)
_counter = count()


class Workspace:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.cleanup_error: CleanupError | None = None

    @classmethod
    def allocate(cls, root: Path | None = None) -> "Workspace":
        """Create a new, exclusively owned workspace directory.

        Args:
            root: Directory in which to create the workspace. Defaults to the system \
                temporary directory.

        Raises:
            StagingError: Raised if the directory cannot be created.

        Returns:
            The allocated workspace.
        """
        prefix = f"{app_name}-{getpid()}-{next(_counter)}-"
        try:
            path = Path(
                mkdtemp(prefix=prefix, dir=None if root is None else root.resolve())
            )
        except OSError as e:
            msg = f"could not create a workspace in {root or 'the temporary directory'}"
            raise StagingError(msg) from e
        _logger.debug("Allocated workspace %s", path)
        return cls(path.resolve())

    def release(self) -> CleanupError | None:
        """Remove the workspace directory and everything in it.

        Returns:
            None if the removal went fine, the error describing what went wrong \
                otherwise. The error is also kept in `cleanup_error`.
        """
        try:
            rmtree(self.path)
        except OSError as e:
            self.cleanup_error = CleanupError(f"could not remove workspace {self.path}")
            self.cleanup_error.__cause__ = e
            _logger.warning("Could not remove workspace %s: %s", self.path, e)
            return self.cleanup_error
        _logger.debug("Released workspace %s", self.path)
        return None

    def __truediv__(self, other: str) -> Path:
        return self.path / other

    def __repr__(self) -> str:
        return f"Workspace({str(self.path)!r})"


@contextmanager
def allocated_workspace(root: Path | None = None) -> Iterator[Workspace]:
    """Allocate a workspace and release it on every exit path.

    A failed release never replaces the exception raised in the `with` block: it is \
    stored in `cleanup_error` on the yielded workspace and added as a note to the \
    exception instead.

    Args:
        root: Directory in which to create the workspace.

    Yields:
        The allocated workspace.
    """
    workspace = Workspace.allocate(root)
    try:
        yield workspace
    except BaseException as e:
        cleanup_error = workspace.release()
        if cleanup_error is not None:
            e.add_note(f"additionally, {cleanup_error}")
        raise
    else:
        workspace.release()
