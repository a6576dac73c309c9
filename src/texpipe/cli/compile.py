from pathlib import Path

from ..models import CompilerSelector
from . import app


@app.command()
def compile(  # noqa: A001
    folder: Path | None = None,
    /,
    *,
    input: Path | None = None,  # noqa: A002
    data: Path | None = None,
    template_name: str | None = None,
    copy_files: bool = False,
    compiler: CompilerSelector | None = None,
    timeout: float | None = None,
    output: Path = Path("out.pdf"),
    workdir: Path = Path(),
) -> None:
    """Compile a template FOLDER, or a LaTeX file given with --input, into a PDF.

    Args:
        folder: Folder containing the template and its companion files. Defaults to \
            the templates folder of the settings
        input: LaTeX file compiled as is, without templating
        data: YAML file holding the data to render the template with. Defaults to \
            the data.yml file of FOLDER if there is one
        template_name: Name of the template file inside FOLDER
        copy_files: Copy the content of FOLDER next to the document before compiling
        compiler: Compiler to use instead of the one of the settings
        timeout: Maximum duration of a compiler run, in seconds
        output: Path of the PDF to write
        workdir: Directory whose settings should be used
    """
    from logging import getLogger

    from yaml import YAMLError

    from ..compilation import CompilationRequest
    from ..configuring.settings import Settings
    from ..exceptions import ConfigurationError
    from ..pipelines import folder_request
    from ..utils import load_yaml

    logger = getLogger(__name__)
    settings = Settings.from_yaml(workdir)
    folder = folder if folder is not None else settings.templates_folder
    if input is None:
        request = folder_request(folder, settings, copy_files)
    else:
        try:
            latex = input.read_text(encoding="utf8")
        except OSError as e:
            msg = f"could not read {input}"
            raise ConfigurationError(msg) from e
        request = (
            CompilationRequest(settings)
            .with_template_folder(folder)
            .with_raw_input(latex)
        )
        if copy_files:
            request.with_auxiliary_file_copy()
    if data is not None:
        try:
            request.with_data(load_yaml(data))
        except (OSError, YAMLError) as e:
            msg = f"could not load data from {data}"
            raise ConfigurationError(msg) from e
    if template_name is not None:
        request.with_template_name(template_name)
    if compiler is not None:
        request.with_compiler(compiler)
    if timeout is not None:
        request.with_timeout(timeout)
    request.compile().save(output)
    logger.info(f"Wrote {output}")
