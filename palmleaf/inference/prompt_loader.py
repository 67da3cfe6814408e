from pathlib import Path

from palmleaf.inference.exceptions import InferenceError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(name: str, path: Path | None = None) -> str:
    """Load a prompt template from a file.

    Args:
        name: File name of the bundled template, used when path is not given.
        path: Explicit path to the prompt template file.

    Returns:
        The raw template string with placeholders.

    Raises:
        InferenceError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InferenceError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(path: Path | None = None) -> str:
    """Load the analysis JSON schema from a file.

    Defaults to the bundled analysis_schema.json.

    Raises:
        InferenceError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "analysis_schema.json"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InferenceError(f"Failed to load JSON schema: {exc}") from exc
