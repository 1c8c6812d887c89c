from pathlib import Path

from docsheet.analysis.exceptions import SubmissionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(path: Path | None = None) -> str:
    """Load the instruction posted alongside every uploaded document.

    Args:
        path: Path to a prompt file. Defaults to the bundled analysis_prompt.txt.

    Returns:
        The prompt text with surrounding whitespace removed.

    Raises:
        SubmissionError: if the file cannot be read or is empty.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "analysis_prompt.txt"
    try:
        prompt = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise SubmissionError(f"Failed to load analysis prompt: {exc}") from exc
    if not prompt:
        raise SubmissionError(f"Analysis prompt {path} is empty")
    return prompt
