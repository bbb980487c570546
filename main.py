"""CLI entrypoint for the image-masked word-search generator."""

from __future__ import annotations

import argparse
import json
import logging
import os
import random
from pathlib import Path
from typing import Any, Dict, List

from wordsearch.core.exceptions import WordSearchError
from wordsearch.data.supplier import (FallbackWordSupplier, GeminiWordSupplier, RandomWordSupplier,
                                      UserWordListSupplier, WordSupplier, parse_word_list)
from wordsearch.engine.generator import GeneratorConfig, PaperConfig, PuzzleGenerator
from wordsearch.io.gemini_client import GeminiClient
from wordsearch.io.hints import GeminiHintWriter, TemplateHintWriter
from wordsearch.io.mask import grid_from_mask, mask_from_ascii
from wordsearch.utils.logger import configure_logging
from wordsearch.utils.pretty import print_puzzle_stats


def parse_words_file(path: Path) -> List[str]:
    """Read words from a file, one entry per line. Blank lines and # comments are skipped."""
    entries: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        entries.append(line)
    return entries


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a word-search puzzle shaped by a thresholded image",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", type=Path, help="Thresholded image; dark pixels hold letters")
    source.add_argument(
        "--mask-file",
        type=Path,
        help="Text picture where '#' marks usable cells (overrides paper sizing)",
    )
    parser.add_argument("--paper-width", type=float, default=210.0, help="Paper width in mm")
    parser.add_argument("--paper-height", type=float, default=297.0, help="Paper height in mm")
    parser.add_argument("--cell-size", type=float, default=7.0, help="Millimetres per character")
    parser.add_argument(
        "--words",
        nargs="+",
        metavar="WORD",
        help="Explicit words to place first (format: WORD or WORD:Hint)",
    )
    parser.add_argument(
        "--words-file",
        type=Path,
        metavar="FILE",
        help="File with one WORD or WORD:Hint entry per line (# comments and blank lines ignored)",
    )
    parser.add_argument(
        "--pool-file",
        type=Path,
        metavar="FILE",
        help="Extra words (WORD or WORD:Hint per line) used to top up coverage before random words",
    )
    parser.add_argument("--theme", type=str, default="", help="Theme for LLM generated words")
    parser.add_argument(
        "--llm",
        action="store_true",
        help="Use Gemini for extra words and hints (needs GEMINI_API_KEY)",
    )
    parser.add_argument(
        "--coverage",
        type=float,
        default=0.85,
        help="Target fraction of available cells covered by word letters",
    )
    parser.add_argument("--max-iterations", type=int, default=50, help="Cap on supplier batches")
    parser.add_argument("--batch-size", type=int, default=5, help="Words requested per batch")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument("--show-grid", action="store_true", help="Print the revealed grid and stats")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def build_supplier(args: argparse.Namespace, user_words: List[str]) -> WordSupplier:
    offline = RandomWordSupplier(seed=args.seed)
    chain: List[WordSupplier] = []
    if args.llm:
        base_words = [entry.word for entry in parse_word_list(user_words)]
        chain.append(GeminiWordSupplier(GeminiClient(), theme=args.theme, base_words=base_words))
    if args.pool_file:
        chain.append(UserWordListSupplier(parse_words_file(args.pool_file)))
    if not chain:
        return offline
    return FallbackWordSupplier(chain[0], chain[1:] + [offline])


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    if args.llm and not os.environ.get("GEMINI_API_KEY"):
        parser.error("--llm requires the GEMINI_API_KEY environment variable")

    user_words: List[str] = []
    if args.words:
        user_words.extend(args.words)
    if args.words_file:
        user_words.extend(parse_words_file(args.words_file))

    config = GeneratorConfig(
        coverage_fraction=args.coverage,
        max_iterations=args.max_iterations,
        batch_size=args.batch_size,
        seed=args.seed,
    )
    try:
        generator = PuzzleGenerator(
            config,
            supplier=build_supplier(args, user_words),
            progress=lambda label: logging.getLogger("wordsearch.progress").debug(label),
            hint_writer=GeminiHintWriter() if args.llm else TemplateHintWriter(),
        )
        words = parse_word_list(user_words)
        if args.mask_file:
            rows = mask_from_ascii(args.mask_file.read_text(encoding="utf-8").splitlines())
            _, grid = grid_from_mask(rows, random.Random(args.seed))
            result = generator.generate(grid, words)
        else:
            paper = PaperConfig(args.paper_width, args.paper_height, args.cell_size)
            result = generator.generate_from_image(args.image, paper, words)
    except WordSearchError as exc:
        parser.exit(1, f"error: {exc}\n")

    if args.show_grid:
        print_puzzle_stats(result)

    payload: Dict[str, Any] = result.to_jsonable()
    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    elif not args.show_grid:
        print(output_text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
