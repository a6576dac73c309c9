import sys
from os import environ, pathsep
from pathlib import Path
from typing import Any

from pytest import fixture, skip

from texpipe.configuring.settings import Settings
from texpipe.models import CompilerSelector

# Stands in for pdflatex and xelatex: the "PDF" it produces is a header naming the
# compiler followed by the source it was given. Some words in the source change its
# behavior so that failures can be triggered from the tests.
_FAKE_COMPILER = """#!{python}
import sys
import time
from pathlib import Path

source = Path(sys.argv[-1])
content = source.read_text(encoding="utf8")
with Path("runs.log").open("a", encoding="utf8") as fh:
    fh.write(" ".join(sys.argv[1:]) + "\\n")
if "FAIL" in content:
    print("! Emergency stop.")
    sys.exit(1)
if "SLEEP" in content:
    time.sleep(30)
if "LISTFILES" in content:
    content += "\\n" + " ".join(sorted(p.name for p in Path().iterdir()))
if "NOPDF" not in content:
    header = "%PDF-fake " + Path(sys.argv[0]).name + "\\n"
    source.with_suffix(".pdf").write_bytes((header + content).encode("utf8"))
"""

TEMPLATE = r"""\documentclass{article}
\begin{document}
\begin{itemize}
\BLOCK{for item in data}
  \item \V{item}
\BLOCK{endfor}
\end{itemize}
\end{document}
"""


def fake_output(content: str, compiler: str = "pdflatex") -> bytes:
    return f"%PDF-fake {compiler}\n{content}".encode()


@fixture
def fake_compilers(tmp_path: Path, monkeypatch: Any) -> Path:
    if sys.platform == "win32":
        skip("the fake compilers are shebang scripts")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    for selector in CompilerSelector:
        script = bin_dir / selector.executable
        script.write_text(
            _FAKE_COMPILER.replace("{python}", sys.executable), encoding="utf8"
        )
        script.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{pathsep}{environ.get('PATH', '')}")
    return bin_dir


@fixture
def workspaces_dir(tmp_path: Path) -> Path:
    workspaces_dir = tmp_path / "workspaces"
    workspaces_dir.mkdir()
    return workspaces_dir


@fixture
def settings(workspaces_dir: Path) -> Settings:
    return Settings(workspace_dir=workspaces_dir)


@fixture
def templates_dir(tmp_path: Path) -> Path:
    templates_dir = tmp_path / "templates"
    templates_dir.mkdir()
    (templates_dir / "template.tmpl").write_text(TEMPLATE, encoding="utf8")
    (templates_dir / "logo.png").write_bytes(b"not really a png")
    return templates_dir
