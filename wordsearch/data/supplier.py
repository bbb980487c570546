"""Word supplier interfaces.

The coverage loop asks a supplier for small batches of candidate words. A
supplier is any object with ``generate(count) -> list[SuppliedWord]``; raising
is allowed and is treated by the loop as an empty batch.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Protocol, Sequence, Set

from wonderwords import RandomWord

from ..core.exceptions import SupplierFailure
from ..utils.logger import get_logger
from .normalization import clean_word

if TYPE_CHECKING:
    from ..io.gemini_client import GeminiClient


LOGGER = get_logger(__name__)


@dataclass
class SuppliedWord:
    """A candidate word and its hint."""

    word: str
    hint: str = ""
    source: str = "unknown"


class WordSupplier(Protocol):
    """Protocol implemented by all word providers."""

    def generate(self, count: int) -> List[SuppliedWord]:
        ...


def parse_word_list(raw_words: Iterable[str]) -> List[SuppliedWord]:
    """Parse ``WORD`` or ``WORD:hint`` entries, skipping blanks."""

    entries: List[SuppliedWord] = []
    for item in raw_words:
        item = item.strip()
        if not item:
            continue
        if ":" in item:
            word, _, hint = item.partition(":")
            entries.append(SuppliedWord(word.strip().upper(), hint.strip(), "user"))
        else:
            entries.append(SuppliedWord(item.upper(), "", "user"))
    return entries


class UserWordListSupplier:
    """Hands out a user-supplied list of words, each at most once."""

    def __init__(self, raw_words: Iterable[str]) -> None:
        self._words = parse_word_list(raw_words)
        self._cursor = 0

    @property
    def words(self) -> List[SuppliedWord]:
        return list(self._words)

    def generate(self, count: int) -> List[SuppliedWord]:
        batch = self._words[self._cursor:self._cursor + count]
        self._cursor += len(batch)
        return batch


def default_word_bank() -> List[str]:
    """Return the wonderwords dictionary of English nouns, verbs and adjectives."""

    return RandomWord().filter()


class RandomWordSupplier:
    """Offline supplier drawing random words from a dictionary.

    Words are drawn without replacement: a word is never handed out twice,
    and ``generate`` returns fewer words (eventually none) once the bank
    within the length bounds runs dry.
    """

    def __init__(
        self,
        word_bank: Optional[Sequence[str]] = None,
        min_length: int = 3,
        max_length: int = 12,
        seed: Optional[int] = None,
    ) -> None:
        if word_bank is None:
            word_bank = default_word_bank()
        cleaned = {clean_word(word) for word in word_bank}
        self.word_bank = sorted(word for word in cleaned if word)
        self.min_length = min_length
        self.max_length = max_length
        self.rng = random.Random(seed)
        self._issued: Set[str] = set()

    @property
    def remaining(self) -> int:
        return len(self._pool())

    def _pool(self) -> List[str]:
        return [
            w for w in self.word_bank
            if self.min_length <= len(w) <= self.max_length and w not in self._issued
        ]

    def generate(self, count: int) -> List[SuppliedWord]:
        pool = self._pool()
        if not pool:
            LOGGER.info("Random word bank exhausted (%d words issued)", len(self._issued))
            return []
        picks = self.rng.sample(pool, min(count, len(pool)))
        self._issued.update(picks)
        return [SuppliedWord(word, "", "random") for word in picks]


class GeminiWordSupplier:
    """LLM-powered supplier producing themed words with hints."""

    THEME_PROMPT = (
        "Generate exactly {count} words for a word search puzzle{theme_line}. "
        "Each word should be between {min_length}-{max_length} letters long.\n\n"
        "For each word, provide a helpful hint that gives clues about the word "
        "without being too obvious.\n\n"
        'Format your response as a JSON array with objects containing "word" and "hint" fields:\n'
        '[\n  {{"word": "EXAMPLE", "hint": "A sample or illustration"}}\n]\n\n'
        "Make sure the words are appropriate for all ages and vary in length."
    )

    BASE_WORDS_PROMPT = (
        "Based on these seed words: {base_words}\n\n"
        "Generate exactly {count} words that are thematically related to or inspired "
        "by the seed words. Each word should be between {min_length}-{max_length} "
        "letters long and suitable for a word search puzzle.\n\n"
        "For each word, provide a helpful hint that gives clues about the word "
        "without being too obvious.\n\n"
        'Format your response as a JSON array with objects containing "word" and "hint" fields:\n'
        '[\n  {{"word": "EXAMPLE", "hint": "A sample or illustration"}}\n]'
    )

    def __init__(
        self,
        client: "GeminiClient",
        theme: str = "",
        base_words: Sequence[str] = (),
        min_length: int = 4,
        max_length: int = 12,
    ) -> None:
        self.client = client
        self.theme = theme
        self.base_words = [word.upper() for word in base_words]
        self.min_length = min_length
        self.max_length = max_length

    def generate(self, count: int) -> List[SuppliedWord]:
        data = self.client.generate_json(self._render_prompt(count))
        words = self._parse_response(data)
        if len(words) != count:
            LOGGER.debug("Gemini returned %d words, requested %d", len(words), count)
        return words

    def _render_prompt(self, count: int) -> str:
        if self.base_words:
            return self.BASE_WORDS_PROMPT.format(
                base_words=", ".join(self.base_words),
                count=count,
                min_length=self.min_length,
                max_length=self.max_length,
            )
        theme_line = f" about '{self.theme}'" if self.theme else ""
        return self.THEME_PROMPT.format(
            count=count,
            theme_line=theme_line,
            min_length=self.min_length,
            max_length=self.max_length,
        )

    @staticmethod
    def _parse_response(data: object) -> List[SuppliedWord]:
        if not isinstance(data, list):
            LOGGER.warning("Gemini word response is not a JSON array")
            return []
        entries: List[SuppliedWord] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            word = item.get("word")
            hint = item.get("hint", "")
            if isinstance(word, str) and word.strip():
                entries.append(SuppliedWord(word.strip().upper(), hint if isinstance(hint, str) else "", "gemini"))
        return entries


class FallbackWordSupplier:
    """Tries a primary supplier, then fallbacks, deduplicating the results."""

    def __init__(self, primary: Optional[WordSupplier], fallbacks: Sequence[WordSupplier] = ()) -> None:
        self.suppliers: List[WordSupplier] = ([primary] if primary else []) + list(fallbacks)

    def generate(self, count: int) -> List[SuppliedWord]:
        collected: List[SuppliedWord] = []
        seen: set[str] = set()
        failures: List[Exception] = []

        for supplier in self.suppliers:
            if len(collected) >= count:
                break
            try:
                batch = supplier.generate(count - len(collected))
            except Exception as exc:
                LOGGER.warning("Word supplier %s failed: %s", type(supplier).__name__, exc)
                failures.append(exc)
                continue
            for entry in batch:
                key = entry.word.upper()
                if not key or key in seen:
                    continue
                collected.append(entry)
                seen.add(key)
                if len(collected) >= count:
                    break

        if failures and len(failures) == len(self.suppliers):
            raise SupplierFailure("All word suppliers failed") from failures[-1]
        return collected


__all__ = [
    "FallbackWordSupplier",
    "GeminiWordSupplier",
    "RandomWordSupplier",
    "default_word_bank",
    "SuppliedWord",
    "UserWordListSupplier",
    "WordSupplier",
    "parse_word_list",
]
