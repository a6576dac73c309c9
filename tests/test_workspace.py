from multiprocessing.pool import ThreadPool
from os import getpid
from pathlib import Path
from shutil import rmtree

from pytest import raises

from texpipe.exceptions import CleanupError, StagingError
from texpipe.workspace import Workspace, allocated_workspace


def test_allocate(tmp_path: Path) -> None:
    workspace = Workspace.allocate(tmp_path)

    assert workspace.path.is_dir()
    assert workspace.path.is_absolute()
    assert workspace.path.parent == tmp_path.resolve()
    assert workspace.path.name.startswith(f"texpipe-{getpid()}-")


def test_allocate_concurrently(tmp_path: Path) -> None:
    with ThreadPool(16) as pool:
        workspaces = pool.map(lambda _: Workspace.allocate(tmp_path), range(200))

    assert len({workspace.path for workspace in workspaces}) == 200
    assert len(list(tmp_path.iterdir())) == 200


def test_allocate_in_missing_root(tmp_path: Path) -> None:
    with raises(StagingError):
        Workspace.allocate(tmp_path / "missing")


def test_release(tmp_path: Path) -> None:
    workspace = Workspace.allocate(tmp_path)
    (workspace / "file.tex").write_text("content", encoding="utf8")
    (workspace / "img").mkdir()
    (workspace / "img" / "logo.png").write_bytes(b"png")

    assert workspace.release() is None
    assert not workspace.path.exists()
    assert workspace.cleanup_error is None


def test_release_failure_is_returned(tmp_path: Path) -> None:
    workspace = Workspace.allocate(tmp_path)
    rmtree(workspace.path)

    error = workspace.release()

    assert isinstance(error, CleanupError)
    assert workspace.cleanup_error is error


def test_allocated_workspace_released_on_success(tmp_path: Path) -> None:
    with allocated_workspace(tmp_path) as workspace:
        (workspace / "file.tex").write_text("content", encoding="utf8")

    assert not workspace.path.exists()


def test_allocated_workspace_released_on_error(tmp_path: Path) -> None:
    with raises(RuntimeError), allocated_workspace(tmp_path) as workspace:
        raise RuntimeError

    assert not workspace.path.exists()
    assert list(tmp_path.iterdir()) == []


def test_cleanup_error_does_not_mask_original_error(tmp_path: Path) -> None:
    with raises(RuntimeError, match="boom") as exc_info:
        with allocated_workspace(tmp_path) as workspace:
            rmtree(workspace.path)
            raise RuntimeError("boom")

    assert isinstance(workspace.cleanup_error, CleanupError)
    assert any(
        "could not remove workspace" in note for note in exc_info.value.__notes__
    )
