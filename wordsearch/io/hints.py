"""Hint generation interfaces."""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence

from ..core.models import WordEntry
from ..utils.logger import get_logger
from .gemini_client import GeminiAPIError, GeminiClient


LOGGER = get_logger(__name__)


class HintWriter(Protocol):
    def generate(self, words: Sequence[str]) -> Dict[str, str]:
        """Return mapping from uppercase word to hint text."""


class GeminiHintWriter:
    """LLM hint writer using Gemini."""

    HINT_PROMPT = (
        "For each of the following words, provide a helpful hint that gives clues "
        "about the word without being too obvious. The hints should be appropriate "
        "for all ages and suitable for a word search puzzle.\n\n"
        "Words: {words}\n\n"
        'Format your response as a JSON array with objects containing "word" and "hint" fields:\n'
        "[\n"
        '  {{"word": "EXAMPLE", "hint": "A sample or illustration"}},\n'
        '  {{"word": "ANOTHER", "hint": "One more or different"}}\n'
        "]"
    )

    def __init__(self, gemini_client: Optional[GeminiClient] = None) -> None:
        self._client = gemini_client

    def generate(self, words: Sequence[str]) -> Dict[str, str]:
        if not words:
            return {}
        client = self._client or GeminiClient()
        self._client = client
        data = client.generate_json(self.HINT_PROMPT.format(words=", ".join(words)))
        return self._parse_response(data)

    @staticmethod
    def _parse_response(data: object) -> Dict[str, str]:
        if not isinstance(data, list):
            LOGGER.warning("Gemini hint payload is not a JSON array; falling back to empty")
            return {}
        result: Dict[str, str] = {}
        for entry in data:
            if not isinstance(entry, dict):
                continue
            word = entry.get("word")
            hint = entry.get("hint")
            if isinstance(word, str) and isinstance(hint, str) and hint:
                result[word.upper()] = hint
        return result


class TemplateHintWriter:
    """Simple fallback hint writer."""

    def generate(self, words: Sequence[str]) -> Dict[str, str]:
        return {word.upper(): f"{len(word)}-letter word" for word in words}


def attach_hints(words: Sequence[WordEntry], writer: HintWriter, fallback: Optional[HintWriter] = None) -> int:
    """Fill missing hints of placed words; return how many were written."""

    missing: List[WordEntry] = [entry for entry in words if entry.placed and not entry.hint]
    if not missing:
        return 0

    surfaces = sorted({entry.word for entry in missing})
    try:
        hints = writer.generate(surfaces)
    except GeminiAPIError as exc:
        LOGGER.warning("Hint writer failed: %s", exc)
        hints = {}

    unresolved = [word for word in surfaces if word not in hints]
    if unresolved and fallback is not None:
        hints.update(fallback.generate(unresolved))

    written = 0
    for entry in missing:
        hint = hints.get(entry.word)
        if hint:
            entry.hint = hint
            written += 1
    LOGGER.info("Attached %d hints to %d placed words lacking one", written, len(missing))
    return written
