"""Model classes shared by the pipeline components.

- [`CompilerSelector`][texpipe.models.CompilerSelector] enumerates the supported \
    LaTeX compilers. Its values are the names of the executables looked up in `PATH`.
- [`CompileResult`][texpipe.models.CompileResult] holds what a compiler run \
    printed, whether it succeeded or not.
"""

from dataclasses import dataclass
from enum import Enum

SOURCE_FILENAME = "file.tex"
OUTPUT_FILENAME = "file.pdf"


class CompilerSelector(Enum):
    pdflatex = "pdflatex"
    xelatex = "xelatex"

    @property
    def executable(self) -> str:
        return self.value


@dataclass(frozen=True)
class CompileResult:
    ok: bool
    stdout: str | None = ""
    stderr: str | None = ""
