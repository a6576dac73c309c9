from functools import reduce
from pathlib import Path
from typing import Any, Self

from appdirs import user_config_dir as appdirs_user_config_dir
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, ValidationError

from .. import app_name
from ..exceptions import ConfigurationError
from ..models import CompilerSelector
from ..utils import load_all_yamls

settings_filename = f"{app_name}.yml"
_user_config_dir = Path(appdirs_user_config_dir(app_name)).resolve()


class Settings(BaseModel):
    """Default options of every compilation.

    Values given to a [`CompilationRequest`][texpipe.compilation.CompilationRequest] \
    take precedence over the ones defined here.
    """

    compiler: CompilerSelector = CompilerSelector.pdflatex
    compiler_options: tuple[str, ...] = ("-interaction=nonstopmode", "-halt-on-error")
    passes: PositiveInt = 1
    timeout: PositiveFloat | None = None
    templates_folder: Path = Path("templates")
    template_name: str = Field(default="template.tmpl", min_length=1)
    workspace_dir: Path | None = None

    @classmethod
    def from_yaml(cls, path: Path) -> Self:
        """Load the settings defined for the directory `path`.

        The `texpipe.yml` file of the user configuration directory is read first, \
        then the one in `path`. Keys of the latter override keys of the former. \
        Relative paths are resolved against `path`.

        Args:
            path: Directory whose settings should be loaded.

        Raises:
            ConfigurationError: Raised if the merged content is not valid.

        Returns:
            The loaded settings.
        """
        resolved_path = path.resolve()
        content: dict[str, Any] = reduce(
            lambda a, b: {**a, **(b or {})},
            load_all_yamls(
                d
                for p in (_user_config_dir, resolved_path)
                if (d := p / settings_filename).is_file()
            ),
            {},
        )
        try:
            settings = cls.model_validate(content)
        except ValidationError as e:
            msg = f"invalid settings for {resolved_path}:\n{e}"
            raise ConfigurationError(msg) from e
        return settings.model_copy(
            update={
                "templates_folder": resolved_path / settings.templates_folder,
                "workspace_dir": None
                if settings.workspace_dir is None
                else resolved_path / settings.workspace_dir,
            }
        )
