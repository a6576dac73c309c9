from collections.abc import Iterable
from logging import getLogger
from subprocess import DEVNULL, TimeoutExpired, run

from .exceptions import CompilerExecutionError, CompilerTimeoutError
from .models import SOURCE_FILENAME, CompileResult, CompilerSelector
from .workspace import Workspace

_logger = getLogger(__name__)


class Compiler:
    """Run a LaTeX compiler on the source staged in a workspace.

    The compiler process gets the workspace as its working directory through the \
    `cwd` argument of `subprocess.run`. The working directory of the current process \
    is never changed, so compilers can run concurrently from several threads.
    """

    def __init__(
        self,
        selector: CompilerSelector,
        options: Iterable[str] = (),
        passes: int = 1,
        timeout: float | None = None,
    ) -> None:
        self._selector = selector
        self._options = tuple(options)
        self._passes = passes
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self._selector.executable

    def compile(self, workspace: Workspace) -> CompileResult:
        """Compile `file.tex` in the workspace, `passes` times in a row.

        Args:
            workspace: Workspace holding the staged source.

        Raises:
            CompilerExecutionError: Raised if the compiler cannot be launched or \
                exits with a non-zero status.
            CompilerTimeoutError: Raised if a run takes longer than the timeout. The \
                compiler process is killed before raising.

        Returns:
            Captured outputs of the last run.
        """
        result = CompileResult(False)
        for i in range(self._passes):
            _logger.debug(
                "Running %s in %s (pass %d/%d)",
                self.name,
                workspace.path,
                i + 1,
                self._passes,
            )
            result = self._run(workspace)
            if not result.ok:
                _logger.warning("Compilation with %s errored", self.name)
                _logger.warning("Captured stderr\n%s", result.stderr)
                _logger.warning("Captured stdout\n%s", result.stdout)
                msg = f"could not {self.name} {SOURCE_FILENAME}"
                raise CompilerExecutionError(msg, self.name, result)
        return result

    def _run(self, workspace: Workspace) -> CompileResult:
        try:
            completed_process = run(
                [self.name, *self._options, SOURCE_FILENAME],
                cwd=workspace.path,
                stdin=DEVNULL,
                capture_output=True,
                encoding="utf8",
                errors="replace",
                timeout=self._timeout,
                check=False,
            )
        except TimeoutExpired as e:
            msg = f"{self.name} did not finish within {self._timeout} seconds"
            raise CompilerTimeoutError(
                msg,
                self.name,
                CompileResult(False, _decode(e.stdout), _decode(e.stderr)),
            ) from e
        except OSError as e:
            msg = f"could not run {self.name}: {e}"
            raise CompilerExecutionError(msg, self.name) from e
        return CompileResult(
            completed_process.returncode == 0,
            completed_process.stdout,
            completed_process.stderr,
        )


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf8", errors="replace")
    return output
