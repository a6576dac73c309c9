from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CompileResult


class TexpipeError(Exception):
    pass


class ConfigurationError(TexpipeError):
    pass


class TemplateError(TexpipeError):
    pass


class StagingError(TexpipeError):
    pass


class SaveError(StagingError):
    pass


class CompilerExecutionError(TexpipeError):
    """Raised when the compiler cannot be launched or exits with a non-zero status.

    Attributes:
        compiler: Name of the executable that was run.
        result: Captured outputs of the failing run, None if the process could not \
            be started at all.
    """

    def __init__(
        self, message: str, compiler: str, result: "CompileResult | None" = None
    ) -> None:
        super().__init__(message)
        self.compiler = compiler
        self.result = result


class CompilerTimeoutError(CompilerExecutionError):
    pass


class OutputMissingError(TexpipeError):
    pass


class OutputReadError(TexpipeError):
    pass


class CleanupError(TexpipeError):
    pass


class NotYetCompiledError(TexpipeError):
    pass
