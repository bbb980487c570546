import os
import unittest
from typing import List
from unittest.mock import MagicMock, patch

import requests

from wordsearch.core.exceptions import SupplierFailure
from wordsearch.core.models import WordEntry
from wordsearch.data.normalization import clean_word
from wordsearch.data.supplier import (FallbackWordSupplier, GeminiWordSupplier, RandomWordSupplier,
                                      SuppliedWord, UserWordListSupplier, parse_word_list)
from wordsearch.io.gemini_client import GeminiAPIError, GeminiClient
from wordsearch.io.hints import GeminiHintWriter, TemplateHintWriter, attach_hints


def _gemini_payload(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client_returning(text: str) -> GeminiClient:
    session = MagicMock()
    session.post.return_value.json.return_value = _gemini_payload(text)
    with patch.dict(os.environ, {"GEMINI_API_KEY": "test-key"}):
        return GeminiClient(session=session)


class NormalizationTests(unittest.TestCase):
    def test_clean_word_folds_accents_and_drops_symbols(self) -> None:
        self.assertEqual(clean_word("Crème brûlée"), "CREMEBRULEE")
        self.assertEqual(clean_word("t-rex 2"), "TREX")
        self.assertEqual(clean_word(""), "")


class UserWordListTests(unittest.TestCase):
    def test_plain_words_are_uppercased(self) -> None:
        words = parse_word_list(["owl", " fox "])
        self.assertEqual([w.word for w in words], ["OWL", "FOX"])
        self.assertTrue(all(w.source == "user" for w in words))

    def test_hint_format_splits_word_and_hint(self) -> None:
        words = parse_word_list([" river : Flows to the sea ", "", "   "])
        self.assertEqual(len(words), 1)
        self.assertEqual(words[0].word, "RIVER")
        self.assertEqual(words[0].hint, "Flows to the sea")

    def test_supplier_hands_out_each_word_once(self) -> None:
        supplier = UserWordListSupplier(["OWL", "FOX", "BEE"])
        self.assertEqual([w.word for w in supplier.generate(2)], ["OWL", "FOX"])
        self.assertEqual([w.word for w in supplier.generate(2)], ["BEE"])
        self.assertEqual(supplier.generate(2), [])
        self.assertEqual(len(supplier.words), 3)


class RandomWordSupplierTests(unittest.TestCase):
    def test_generate_respects_length_bounds(self) -> None:
        supplier = RandomWordSupplier(min_length=4, max_length=5, seed=1)
        words = supplier.generate(20)
        self.assertEqual(len(words), 20)
        self.assertTrue(all(4 <= len(w.word) <= 5 for w in words))
        self.assertTrue(all(w.source == "random" for w in words))

    def test_same_seed_same_words(self) -> None:
        first = [w.word for w in RandomWordSupplier(seed=9).generate(10)]
        second = [w.word for w in RandomWordSupplier(seed=9).generate(10)]
        self.assertEqual(first, second)

    def test_words_are_not_repeated_until_bank_is_exhausted(self) -> None:
        bank = ["CAT", "DOG", "OWL", "FOX", "BEE", "YAK", "EMU"]
        supplier = RandomWordSupplier(word_bank=bank, seed=4)
        drawn = []
        for _ in range(3):
            drawn.extend(w.word for w in supplier.generate(3))

        self.assertEqual(len(drawn), len(bank))
        self.assertEqual(sorted(drawn), sorted(bank))
        self.assertEqual(supplier.remaining, 0)
        self.assertEqual(supplier.generate(3), [])

    def test_default_bank_comes_from_wonderwords(self) -> None:
        with patch("wordsearch.data.supplier.RandomWord") as random_word:
            random_word.return_value.filter.return_value = ["apple", "ice cream", "ox"]
            supplier = RandomWordSupplier(seed=0)
        self.assertEqual(supplier.word_bank, ["APPLE", "ICECREAM", "OX"])
        self.assertEqual(supplier.remaining, 2)

    def test_bank_is_normalized(self) -> None:
        supplier = RandomWordSupplier(word_bank=["café", "ice-cream", "42"])
        self.assertEqual(supplier.word_bank, ["CAFE", "ICECREAM"])

    def test_empty_pool_returns_nothing(self) -> None:
        supplier = RandomWordSupplier(word_bank=["OX"], min_length=3)
        self.assertEqual(supplier.generate(5), [])


class GeminiTests(unittest.TestCase):
    def test_supplier_parses_fenced_json(self) -> None:
        client = _client_returning('```json\n[{"word": "apple", "hint": "A fruit"}, {"word": 3}]\n```')
        words = GeminiWordSupplier(client, theme="food").generate(2)
        self.assertEqual(words, [SuppliedWord("APPLE", "A fruit", "gemini")])

    def test_supplier_prompt_mentions_base_words(self) -> None:
        client = MagicMock()
        client.generate_json.return_value = []
        GeminiWordSupplier(client, base_words=["ocean", "ship"]).generate(4)
        prompt = client.generate_json.call_args[0][0]
        self.assertIn("OCEAN, SHIP", prompt)
        self.assertIn("exactly 4 words", prompt)

    def test_non_list_payload_yields_no_words(self) -> None:
        client = MagicMock()
        client.generate_json.return_value = {"words": []}
        self.assertEqual(GeminiWordSupplier(client).generate(3), [])

    def test_request_failure_raises_api_error(self) -> None:
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("offline")
        with patch.dict(os.environ, {"GEMINI_API_KEY": "test-key"}):
            client = GeminiClient(session=session)
        with self.assertRaises(GeminiAPIError):
            client.generate_text("hello")

    def test_invalid_json_raises_api_error(self) -> None:
        client = _client_returning("not json at all")
        with self.assertRaises(GeminiAPIError):
            client.generate_json("hello")

    def test_non_json_body_raises_api_error(self) -> None:
        session = MagicMock()
        session.post.return_value.json.side_effect = requests.exceptions.JSONDecodeError(
            "Expecting value", "<html>", 0
        )
        with patch.dict(os.environ, {"GEMINI_API_KEY": "test-key"}):
            client = GeminiClient(session=session)
        with self.assertRaises(GeminiAPIError):
            client.generate_text("hello")

    def test_missing_candidates_raise_api_error(self) -> None:
        session = MagicMock()
        session.post.return_value.json.return_value = {"candidates": []}
        with patch.dict(os.environ, {"GEMINI_API_KEY": "test-key"}):
            client = GeminiClient(session=session)
        with self.assertRaises(GeminiAPIError):
            client.generate_text("hello")

    def test_missing_api_key_raises(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                GeminiClient()


class FallbackWordSupplierTests(unittest.TestCase):
    def test_fallback_extends_and_deduplicates(self) -> None:
        primary = UserWordListSupplier(["OWL", "FOX"])
        fallback = UserWordListSupplier(["FOX", "BEE", "YAK"])
        words = FallbackWordSupplier(primary, [fallback]).generate(3)
        self.assertEqual([w.word for w in words], ["OWL", "FOX", "BEE"])

    def test_failing_primary_uses_fallback(self) -> None:
        failing = MagicMock()
        failing.generate.side_effect = GeminiAPIError("quota")
        words = FallbackWordSupplier(failing, [UserWordListSupplier(["OWL"])]).generate(2)
        self.assertEqual([w.word for w in words], ["OWL"])

    def test_all_failing_raise_supplier_failure(self) -> None:
        failing = MagicMock()
        failing.generate.side_effect = GeminiAPIError("quota")
        with self.assertRaises(SupplierFailure):
            FallbackWordSupplier(failing, [failing]).generate(2)


class HintTests(unittest.TestCase):
    def _entries(self) -> List[WordEntry]:
        placed = WordEntry(word="OWL", id=0, placed=True)
        hinted = WordEntry(word="FOX", hint="Sly", id=1, placed=True)
        unplaced = WordEntry(word="ELEPHANT", id=2)
        other = WordEntry(word="BEE", id=3, placed=True)
        return [placed, hinted, unplaced, other]

    def test_gemini_hints_with_template_fallback(self) -> None:
        client = MagicMock()
        client.generate_json.return_value = [{"word": "owl", "hint": "Hoots at night"}]
        entries = self._entries()

        written = attach_hints(entries, GeminiHintWriter(client), fallback=TemplateHintWriter())

        self.assertEqual(written, 2)
        self.assertEqual([e.hint for e in entries], ["Hoots at night", "Sly", "", "3-letter word"])
        prompt = client.generate_json.call_args[0][0]
        self.assertIn("BEE, OWL", prompt)

    def test_gemini_failure_falls_back_to_template(self) -> None:
        client = MagicMock()
        client.generate_json.side_effect = GeminiAPIError("down")
        entries = self._entries()
        attach_hints(entries, GeminiHintWriter(client), fallback=TemplateHintWriter())
        self.assertEqual(entries[0].hint, "3-letter word")

    def test_nothing_missing_skips_writer(self) -> None:
        writer = MagicMock()
        self.assertEqual(attach_hints([WordEntry(word="FOX", hint="Sly", placed=True)], writer), 0)
        writer.generate.assert_not_called()


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
