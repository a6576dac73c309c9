from pathlib import Path
from zipfile import Path as ZipPath
from zipfile import ZipFile

from pytest import fixture, raises

from texpipe.exceptions import StagingError
from texpipe.staging import copy_auxiliary_files, stage_source
from texpipe.workspace import Workspace


@fixture
def workspace(tmp_path: Path) -> Workspace:
    root = tmp_path / "workspaces"
    root.mkdir()
    return Workspace.allocate(root)


def test_stage_source(workspace: Workspace) -> None:
    source = "\\documentclass{article}\n% é\n"

    path = stage_source(workspace, source)

    assert path == workspace.path / "file.tex"
    assert path.read_text(encoding="utf8") == source


def test_stage_source_in_removed_workspace(workspace: Workspace) -> None:
    workspace.release()

    with raises(StagingError):
        stage_source(workspace, "content")


def test_copy_auxiliary_files(tmp_path: Path, workspace: Workspace) -> None:
    folder = tmp_path / "templates"
    (folder / "img").mkdir(parents=True)
    (folder / "template.tmpl").write_text("template", encoding="utf8")
    (folder / "style.sty").write_text("style", encoding="utf8")
    (folder / "img" / "logo.png").write_bytes(b"png")

    copied = copy_auxiliary_files(folder, workspace)

    assert copied == ["img", "style.sty", "template.tmpl"]
    assert (workspace / "style.sty").read_text(encoding="utf8") == "style"
    assert (workspace / "img" / "logo.png").read_bytes() == b"png"


def test_copy_auxiliary_files_from_archive(
    tmp_path: Path, workspace: Workspace
) -> None:
    archive = tmp_path / "templates.zip"
    with ZipFile(archive, "w") as zf:
        zf.writestr("bundle/template.tmpl", "template")
        zf.writestr("bundle/img/logo.png", b"png")

    copied = copy_auxiliary_files(ZipPath(archive) / "bundle", workspace)

    assert copied == ["img", "template.tmpl"]
    assert (workspace / "template.tmpl").read_text(encoding="utf8") == "template"
    assert (workspace / "img" / "logo.png").read_bytes() == b"png"


def test_copy_auxiliary_files_from_missing_folder(
    tmp_path: Path, workspace: Workspace
) -> None:
    with raises(StagingError, match="could not list"):
        copy_auxiliary_files(tmp_path / "missing", workspace)
