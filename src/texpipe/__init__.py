from typing import Any

__version__ = "0.1.0"
app_name = "texpipe"


def __getattr__(name: str) -> Any:
    """Lazy-load attributes of the texpipe package.

    This way of loading is required to avoid loading any code before some important \
    setup is done (such as logging setup). The entry point (the main function of the \
    texpipe.cli.__init__ file) needs to setup logging before the modules defining \
    those attributes are imported, but loading texpipe.cli.__init__ entails loading \
    texpipe.__init__ first.

    Args:
        name: Name of the attribute to load.

    Raises:
        AttributeError: Raised if the name doesn't match a lazy-loadable attribute.

    Returns:
        Lazy-loaded attribute.
    """
    match name:
        case "CompilationRequest":
            from .compilation import CompilationRequest

            return CompilationRequest
        case "new":
            from .compilation import new

            return new
        case "CompilerSelector":
            from .models import CompilerSelector

            return CompilerSelector
        case "Settings":
            from .configuring.settings import Settings

            return Settings
        case "compile_folder":
            from .pipelines import compile_folder

            return compile_folder
        case "compile_all":
            from .pipelines import compile_all

            return compile_all
        case _:
            msg = f"cannot find the attribute {name} in module {__name__}"
            raise AttributeError(msg)
