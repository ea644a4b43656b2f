"""
Neutral-content normalization.

Requests arrive in the google-genai shape, where "content" is a loose
union: a plain string, a single Part, a list of parts, a Content with a
role, or the equivalent dicts. Providers with flat role/content messages
cannot express multi-part structure, so everything is reduced to plain
text here before it crosses the provider boundary.

Parts without text (inline data, function calls, ...) contribute "".
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from google.genai import types


def _part_text(part: Any) -> str:
    if isinstance(part, str):
        return part
    if isinstance(part, types.Part):
        return part.text or ""
    if isinstance(part, dict):
        text = part.get("text")
        return text if isinstance(text, str) else ""
    return ""


def iter_part_texts(content: Any) -> Iterator[str]:
    """Yield the text of every part of one content, in order."""
    if isinstance(content, (str, types.Part)):
        yield _part_text(content)
    elif isinstance(content, types.Content):
        for part in content.parts or []:
            yield _part_text(part)
    elif isinstance(content, dict):
        if "parts" in content:
            for part in content.get("parts") or []:
                yield _part_text(part)
        else:
            yield _part_text(content)
    elif isinstance(content, (list, tuple)):
        for part in content:
            yield _part_text(part)


def extract_text(content: Any) -> str:
    """Order-preserving concatenation of a content's part texts."""
    return "".join(iter_part_texts(content))


def extract_role(content: Any) -> str:
    """Role of a content; anything without an explicit role is "user"."""
    if isinstance(content, types.Content) and isinstance(content.role, str):
        return content.role
    if isinstance(content, dict) and isinstance(content.get("role"), str):
        return content["role"]
    return "user"


def normalize_contents(contents: Any) -> list[Any]:
    """A single content and a one-element sequence are the same request."""
    if contents is None:
        return []
    if isinstance(contents, (list, tuple)):
        return list(contents)
    return [contents]


def iter_request_texts(contents: Any) -> Iterator[str]:
    """Part texts across every content of a request, in scan order."""
    for content in normalize_contents(contents):
        yield from iter_part_texts(content)


def system_instruction_of(config: Any) -> Optional[Any]:
    """Pull the system instruction out of a GenerateContentConfig (or dict)."""
    if config is None:
        return None
    if isinstance(config, dict):
        if "system_instruction" in config:
            return config["system_instruction"]
        return config.get("systemInstruction")
    return getattr(config, "system_instruction", None)
