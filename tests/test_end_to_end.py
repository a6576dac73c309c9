from base64 import b64decode
from pathlib import Path
from shutil import which

from pdfminer.high_level import extract_pages, extract_text
from pytest import mark

from texpipe import new
from texpipe.configuring.settings import Settings

pytestmark = mark.skipif(which("pdflatex") is None, reason="pdflatex is not installed")

_PNG = b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAA"
    "BJRU5ErkJggg=="
)


def extract_info(pdf_path: Path) -> tuple[int, str]:
    with pdf_path.open("rb") as fh:
        pages = list(extract_pages(fh))
        fh.seek(0)
        text = extract_text(fh)
    return len(pages), text


def test_bare_document(tmp_path: Path) -> None:
    settings = Settings(workspace_dir=tmp_path)
    output = tmp_path / "out.pdf"

    new(settings).with_raw_input(
        r"\documentclass{article}\begin{document}Hi\end{document}"
    ).compile().save(output)

    assert output.stat().st_size > 0
    n_pages, text = extract_info(output)
    assert n_pages == 1
    assert "Hi" in text
    assert [p for p in tmp_path.iterdir() if p.is_dir()] == []


def test_template_folder_with_image(tmp_path: Path) -> None:
    folder = tmp_path / "templates"
    folder.mkdir()
    (folder / "logo.png").write_bytes(_PNG)
    (folder / "template.tmpl").write_text(
        r"""\documentclass{article}
\usepackage{graphicx}
\begin{document}
\includegraphics{logo.png}
\begin{itemize}
\BLOCK{for item in data}
  \item Element \V{item}
\BLOCK{endfor}
\end{itemize}
\end{document}
""",
        encoding="utf8",
    )
    workspaces_dir = tmp_path / "workspaces"
    workspaces_dir.mkdir()
    output = tmp_path / "list.pdf"

    request = (
        new(Settings(workspace_dir=workspaces_dir))
        .with_template_folder(folder)
        .with_data(["a", "b", "c"])
        .with_auxiliary_file_copy()
        .compile()
    )
    request.save(output)

    assert request.output
    _, text = extract_info(output)
    for item in ("a", "b", "c"):
        assert f"Element {item}" in text
    assert list(workspaces_dir.iterdir()) == []


def test_deterministic_output(tmp_path: Path) -> None:
    source = r"""\documentclass{article}
\pdfinfoomitdate=1
\pdftrailerid{}
\pdfsuppressptexinfo=-1
\begin{document}Same\end{document}
"""
    settings = Settings(workspace_dir=tmp_path)

    outputs = [new(settings).with_raw_input(source).compile() for _ in range(2)]

    assert outputs[0].error is None
    assert outputs[0].output == outputs[1].output
