from .exceptions import OutputMissingError, OutputReadError
from .models import OUTPUT_FILENAME
from .workspace import Workspace


def retrieve_output(workspace: Workspace) -> bytes:
    output_path = workspace / OUTPUT_FILENAME
    if not output_path.is_file():
        msg = (
            f"the compiler reported a success but {OUTPUT_FILENAME} could not be "
            f"found in {workspace.path}"
        )
        raise OutputMissingError(msg)
    try:
        return output_path.read_bytes()
    except OSError as e:
        msg = f"could not read {output_path}"
        raise OutputReadError(msg) from e
