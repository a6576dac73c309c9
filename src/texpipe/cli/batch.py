from pathlib import Path

from . import app


@app.command()
def batch(
    folders: list[Path],
    /,
    *,
    output_dir: Path = Path("pdf"),
    jobs: int | None = None,
    copy_files: bool = False,
    workdir: Path = Path(),
) -> None:
    """Compile several template FOLDERS concurrently.

    Each PDF is named after its folder and written in OUTPUT_DIR.

    Args:
        folders: Template folders to compile
        output_dir: Directory where the PDFs are written
        jobs: Maximum number of simultaneous compilations
        copy_files: Copy the content of each folder next to its document
        workdir: Directory whose settings should be used
    """
    from logging import getLogger

    from ..configuring.settings import Settings
    from ..exceptions import TexpipeError
    from ..pipelines import compile_all, folder_request

    logger = getLogger(__name__)
    settings = Settings.from_yaml(workdir)
    requests = [folder_request(folder, settings, copy_files) for folder in folders]
    output_dir.mkdir(parents=True, exist_ok=True)
    failed = []
    for folder, request in zip(folders, compile_all(requests, jobs), strict=True):
        if request.error is not None:
            failed.append(folder)
            continue
        output = output_dir / f"{folder.resolve().name}.pdf"
        request.save(output)
        logger.info(f"Wrote {output}")
    if failed:
        msg = f"{len(failed)} compilations failed: {', '.join(map(str, failed))}"
        raise TexpipeError(msg)
