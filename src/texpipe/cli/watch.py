from pathlib import Path

from . import app


@app.command()
def watch(
    folder: Path,
    /,
    *,
    output: Path | None = None,
    copy_files: bool = False,
    workdir: Path = Path(),
) -> None:
    """Compile a template FOLDER on change.

    Args:
        folder: Template folder to watch and compile
        output: Path of the PDF to write. Defaults to the folder name with a .pdf \
            extension, in the current directory
        copy_files: Copy the content of FOLDER next to the document before compiling
        workdir: Directory whose settings should be used
    """
    from logging import getLogger

    from .. import pipelines
    from ..configuring.settings import Settings

    logger = getLogger(__name__)
    settings = Settings.from_yaml(workdir)
    if output is None:
        output = Path(f"{folder.resolve().name}.pdf")
    logger.info(f"Watching {folder}")
    pipelines.watch(
        frozenset([folder]),
        frozenset([output]),
        pipelines.run_folder,
        folder=folder,
        settings=settings,
        copy_files=copy_files,
        output=output,
    )
