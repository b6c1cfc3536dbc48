"""System prompts shipped as text files next to this module."""
from functools import lru_cache
from pathlib import Path
import typing as t

PROMPTS_DIR = Path(__file__).resolve().parent


@lru_cache(maxsize=None)
def load_prompt(prompt_name: str, prompts_dir: t.Optional[str] = None) -> str:
    """
    Load a prompt by name.

    Args:
        prompt_name: File name without the .txt extension
        prompts_dir: Directory to read from instead of this package

    Returns:
        The prompt text.

    Raises:
        FileNotFoundError: If no such prompt exists.
    """
    prompt_file = Path(prompts_dir or PROMPTS_DIR) / f"{prompt_name}.txt"
    if not prompt_file.is_file():
        raise FileNotFoundError(f"Prompt file not found: {prompt_file}")
    return prompt_file.read_text(encoding="utf-8")


def available_prompts() -> list[str]:
    """Names of the bundled prompts."""
    return sorted(p.stem for p in PROMPTS_DIR.glob("*.txt"))
