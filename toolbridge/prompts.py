"""
Namespace description resolution.

A collection resolves its namespace description once, when tools are
imported, through an injected ``PromptResolver``. ``PromptLibrary`` looks up
descriptions written as a bracketed key, e.g. ``"[github]"``, in a mapping
or in a directory of ``.md``/``.txt`` files named after the key.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from pathlib import Path

from toolbridge.core.logging import get_standard_logger

logger = get_standard_logger("toolbridge.prompts")

PromptResolver = Callable[[str], str]

_KEY_PATTERN = re.compile(r"^\s*\[([A-Za-z0-9_.\-]+)\]\s*$")
PROMPT_SUFFIXES = (".md", ".txt")


def identity_resolver(text: str) -> str:
    return text


class PromptLibrary:
    """Resolves ``[key]`` references to stored prompt text."""

    def __init__(self, prompts: Mapping[str, str] | None = None, prompts_dir: Path | None = None):
        self._prompts = dict(prompts or {})
        self.prompts_dir = prompts_dir

    def __call__(self, text: str) -> str:
        return self.resolve(text)

    def resolve(self, text: str) -> str:
        """Stored prompt for a ``[key]`` reference; any other text unchanged"""
        if not text:
            return ""
        match = _KEY_PATTERN.match(text)
        if match is None:
            return text

        key = match.group(1)
        prompt = self.get(key)
        if prompt is None:
            logger.warning(f"Prompt '{key}' not found, keeping description as written")
            return text
        return prompt

    def get(self, key: str) -> str | None:
        if key in self._prompts:
            return self._prompts[key]
        if self.prompts_dir is None:
            return None
        for suffix in PROMPT_SUFFIXES:
            path = self.prompts_dir / f"{key}{suffix}"
            if path.is_file():
                return path.read_text(encoding="utf-8").strip()
        return None
