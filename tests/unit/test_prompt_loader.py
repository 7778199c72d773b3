"""Unit tests for prompt templates."""

import pytest

from src.prompts import prompt_path, load_prompt


@pytest.mark.parametrize(
    "prompt_id",
    [
        "extraction/url_system",
        "extraction/url_user",
        "extraction/file_system",
        "extraction/file_user",
        "detection/url",
        "detection/file",
        "chat/system",
    ],
)
def test_prompt_files_exist(prompt_id):
    assert prompt_path(prompt_id).exists()


def test_frontmatter_is_not_rendered():
    text = load_prompt("extraction/url_user", url="https://acme.example")
    assert not text.startswith("---")
    assert "https://acme.example" in text


def test_missing_required_variable_raises():
    with pytest.raises(KeyError, match="url"):
        load_prompt("extraction/url_user")


def test_unknown_prompt_raises():
    with pytest.raises(FileNotFoundError):
        load_prompt("extraction/does_not_exist")


def test_chat_prompt_embeds_catalog():
    text = load_prompt("chat/system", catalog_json='{"supplierName": "Acme"}')
    assert '{"supplierName": "Acme"}' in text


def test_header_without_requirements_renders_body_only():
    text = load_prompt("extraction/url_system")
    assert text.startswith("You extract supplier product catalogs")
