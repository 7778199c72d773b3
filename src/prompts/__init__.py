"""Prompt templates used by the extraction adapter."""

from src.prompts.loader import load_prompt, prompt_path

__all__ = ["load_prompt", "prompt_path"]
