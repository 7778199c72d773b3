"""Markdown prompt templates.

A template may open with a YAML header between ``---`` lines. The only key
read from it is ``requires``, the variables a caller must pass.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml
from jinja2 import Environment, StrictUndefined

PROMPTS_DIR = Path(__file__).parent
HEADER_FENCE = "---"

_jinja = Environment(undefined=StrictUndefined)


@dataclass(frozen=True)
class Prompt:
    body: str
    requires: tuple[str, ...] = ()


def prompt_path(prompt_id: str) -> Path:
    return PROMPTS_DIR / f"{prompt_id}.md"


@lru_cache(maxsize=None)
def read_prompt(prompt_id: str) -> Prompt:
    path = prompt_path(prompt_id)
    if not path.is_file():
        raise FileNotFoundError(f"No prompt named '{prompt_id}' at {path}")

    text = path.read_text(encoding="utf-8")
    if not text.startswith(HEADER_FENCE):
        return Prompt(body=text)

    _, header, body = text.split(HEADER_FENCE, 2)
    meta = yaml.safe_load(header) or {}
    return Prompt(body=body.strip(), requires=tuple(meta.get("requires", ())))


def load_prompt(prompt_id: str, **variables) -> str:
    prompt = read_prompt(prompt_id)
    missing = [name for name in prompt.requires if variables.get(name) is None]
    if missing:
        raise KeyError(f"Prompt '{prompt_id}' requires variables: {missing}")
    return _jinja.from_string(prompt.body).render(**variables)
