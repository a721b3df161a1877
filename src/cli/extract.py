"""Standalone CLI for inspecting document extraction and chunking.

Usage::

    python -m src.cli.extract text notes.pdf --max-pages 10
    python -m src.cli.extract text scan.pdf --image-text
    python -m src.cli.extract chunks notes.pdf --max-words 300

``text`` prints the text the extraction cascade recovers (fast path, then
slow path, then vision recovery of image-only pages when ``--image-text``
is given and an LLM with vision is configured).  ``chunks`` prints the
chunk count and the word count of each chunk.  Nothing is persisted.
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

from src.config.settings import Settings


def _build_vision_provider(app_settings: Settings):  # noqa: ANN202
    """Select the first configured LLM provider, mirroring ``main.py``.

    Priority: Anthropic -> OpenAI -> Ollama.
    """
    if app_settings.anthropic_api_key:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider

        return AnthropicLLMProvider(settings=app_settings)
    if app_settings.openai_api_key:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        return OpenAILLMProvider(settings=app_settings)

    from src.providers.llm.ollama_provider import OllamaLLMProvider

    return OllamaLLMProvider(settings=app_settings)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.extract",
        description="Inspect Lectern text extraction and chunking for a local file.",
    )
    sub = parser.add_subparsers(dest="command")

    text_parser = sub.add_parser("text", help="Print the extracted text of a file")
    text_parser.add_argument("file", type=Path, help="PDF, .txt, or .md file")
    text_parser.add_argument("--max-pages", type=int, default=50, help="Slow-path page cap (default: 50)")
    text_parser.add_argument(
        "--image-text",
        action="store_true",
        help="Recover text from image-only pages with the configured vision LLM",
    )

    chunks_parser = sub.add_parser("chunks", help="Print chunk statistics for a file")
    chunks_parser.add_argument("file", type=Path, help="PDF, .txt, or .md file")
    chunks_parser.add_argument("--max-pages", type=int, default=50, help="Slow-path page cap (default: 50)")
    chunks_parser.add_argument("--max-words", type=int, default=500, help="Words per chunk (default: 500)")

    return parser


async def _extract(args: argparse.Namespace, image_text: bool):  # noqa: ANN202
    from src.models.generation import ExtractionOptions
    from src.services.ingestion.extraction_cascade import ExtractionCascade

    vision = None
    if image_text:
        provider = _build_vision_provider(Settings())
        if provider.supports_vision():
            vision = provider
        else:
            print(f"Warning: {provider.get_provider_name()} has no vision support", file=sys.stderr)

    media_type, _ = mimetypes.guess_type(args.file.name)
    if args.file.suffix.lower() == ".md":
        media_type = "text/markdown"

    cascade = ExtractionCascade(vision_provider=vision)
    options = ExtractionOptions(
        max_pages=args.max_pages,
        extract_image_text=vision is not None,
        media_type=media_type,
    )
    return await cascade.extract(args.file.read_bytes(), options)


async def _handle_text(args: argparse.Namespace) -> int:
    from src.models.generation import ExtractionFailure

    outcome = await _extract(args, image_text=args.image_text)
    if isinstance(outcome, ExtractionFailure):
        print(f"Error: {outcome.reason}", file=sys.stderr)
        for error in outcome.errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    print(outcome.text)
    print(
        f"\n[{outcome.strategy.value}: {outcome.pages_extracted}/{outcome.page_count} pages]",
        file=sys.stderr,
    )
    return 0


async def _handle_chunks(args: argparse.Namespace) -> int:
    from src.models.generation import ExtractionFailure
    from src.services.ingestion.chunker import WordChunker

    try:
        chunker = WordChunker(args.max_words)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    outcome = await _extract(args, image_text=False)
    if isinstance(outcome, ExtractionFailure):
        print(f"Error: {outcome.reason}", file=sys.stderr)
        return 1

    windows = chunker.chunk(outcome.text)
    print(f"Chunks: {len(windows)}")
    for ordinal, window in enumerate(windows):
        print(f"  [{ordinal}] {len(window.split())} words")
    return 0


def main() -> None:
    """CLI entry point: parse the subcommand and dispatch."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if not args.file.is_file():
        print(f"Error: file not found: {args.file}", file=sys.stderr)
        sys.exit(1)

    if args.command == "text":
        exit_code = asyncio.run(_handle_text(args))
    elif args.command == "chunks":
        exit_code = asyncio.run(_handle_chunks(args))
    else:
        parser.print_help()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
