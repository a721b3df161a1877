"""Two-tier PDF text extraction with a deadline-bounded fast path.

PDF parsing is the least reliable step of ingestion: some files hang the
parser, some raise partway through, and scanned files carry no text layer
at all.  :class:`ExtractionCascade` tries two passes over the same bytes:

1. **Fast path** -- structural parse of at most ``fast_max_pages`` pages
   under a wall-clock deadline.  The parse runs in a child process; on
   deadline the process is terminated and joined before the cascade moves
   on, so a parser stuck inside a single call cannot hold up the fallback.
2. **Slow path** -- the same parse without a deadline, capped at
   ``options.max_pages``.  When ``options.extract_image_text`` is set and a
   vision-capable LLM is injected, pages with too little embedded text are
   rendered and sent to the vision call.

Pages that fail to parse are skipped in both passes.  If neither pass
yields non-whitespace text an :class:`ExtractionFailure` is returned; the
cascade never substitutes placeholder content.
"""

from __future__ import annotations

import asyncio
import multiprocessing
from multiprocessing.connection import Connection
from typing import Callable, NamedTuple

import fitz  # PyMuPDF
import structlog

from src.interfaces.llm_provider import ILLMProvider
from src.models.generation import (
    ExtractionFailure,
    ExtractionOptions,
    ExtractionResult,
    ExtractionStrategy,
)

logger = structlog.get_logger(logger_name=__name__)

_PDF_MAGIC = b"%PDF"
_NO_TEXT_FOUND = "NO_TEXT_FOUND"
_RENDER_DPI = 150

_VISION_PROMPT = (
    "Extract all readable text from this document page. Preserve reading "
    f"order and paragraph breaks. If the page has no readable text, reply {_NO_TEXT_FOUND}."
)

# Spawned children share no locks or parser state with the serving process.
_WORKER_CONTEXT = multiprocessing.get_context("spawn")


class PageText(NamedTuple):
    number: int
    text: str
    image: bytes | None = None


# (data, max_pages, render_below_chars) -> (pages, page_count)
# The fast path sends the reader to a child process, so it must be a
# module-level function.
PageReader = Callable[..., tuple[list[PageText], int]]


def read_pdf_pages(
    data: bytes,
    max_pages: int,
    render_below_chars: int | None = None,
) -> tuple[list[PageText], int]:
    """Read up to *max_pages* pages of text from PDF *data*.

    Blocking.  Returns the readable pages and the document's total page
    count.  When *render_below_chars* is set, pages whose text is shorter
    than that are also rendered to PNG.

    Raises
    ------
    Exception
        Whatever PyMuPDF raises when the document itself cannot be opened.
    """
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        page_count = doc.page_count
        pages: list[PageText] = []
        for index in range(min(page_count, max_pages)):
            try:
                page = doc.load_page(index)
                text = page.get_text("text")
                image = None
                if render_below_chars is not None and len(text.strip()) < render_below_chars:
                    image = page.get_pixmap(dpi=_RENDER_DPI).tobytes("png")
            except Exception as exc:
                logger.warning("extraction_page_failed", page=index + 1, error=str(exc))
                continue
            pages.append(PageText(index + 1, text, image))
        return pages, page_count
    finally:
        doc.close()


def _read_in_child(sender: Connection, reader: PageReader, data: bytes, max_pages: int) -> None:
    """Child-process entry point: run *reader* and send back its outcome."""
    try:
        sender.send(("ok", reader(data, max_pages)))
    except Exception as exc:
        sender.send(("error", str(exc) or type(exc).__name__))
    finally:
        sender.close()


def compose_pages(pages: list[PageText]) -> tuple[str, int]:
    """Join non-blank pages under ``=== Page N ===`` markers.

    Returns the composed text and the number of pages that contributed.
    """
    parts = [
        f"=== Page {page.number} ===\n{page.text.strip()}"
        for page in pages
        if page.text.strip()
    ]
    return "\n\n".join(parts), len(parts)


class ExtractionCascade:
    """Turns raw document bytes into text, or a typed failure.

    Parameters
    ----------
    fast_timeout_seconds:
        Deadline for the fast path, child process start-up included.
    fast_max_pages:
        Page cap for the fast path; the effective cap never exceeds
        ``options.max_pages``.
    vision_provider:
        Optional LLM used to read sparse pages when
        ``options.extract_image_text`` is set.
    sparse_text_threshold:
        Pages with fewer embedded characters than this are candidates for
        vision recovery.
    page_reader:
        Blocking module-level page reader; defaults to :func:`read_pdf_pages`.
    """

    def __init__(
        self,
        fast_timeout_seconds: float = 30.0,
        fast_max_pages: int = 20,
        vision_provider: ILLMProvider | None = None,
        sparse_text_threshold: int = 100,
        page_reader: PageReader = read_pdf_pages,
    ) -> None:
        self._fast_timeout = fast_timeout_seconds
        self._fast_max_pages = fast_max_pages
        self._vision = vision_provider
        self._sparse_threshold = sparse_text_threshold
        self._read_pages = page_reader

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract(
        self,
        data: bytes,
        options: ExtractionOptions | None = None,
    ) -> ExtractionResult | ExtractionFailure:
        """Extract text from *data*.

        Returns
        -------
        ExtractionResult | ExtractionFailure
            The text and the pass that produced it, or a failure carrying
            the reason ``"no text extracted"`` and the errors collected.
        """
        options = options or ExtractionOptions()

        if options.media_type and options.media_type.startswith("text/"):
            return self._extract_plain_text(data)

        if _PDF_MAGIC not in data[:1024]:
            logger.warning("extraction_not_pdf", size=len(data))
            return ExtractionFailure(reason="no text extracted", errors=["missing %PDF header"])

        errors: list[str] = []

        fast_cap = min(self._fast_max_pages, options.max_pages)
        fast = await self._fast_path(data, fast_cap, errors)
        if fast is not None:
            pages, page_count = fast
            text, used = compose_pages(pages)
            if text.strip():
                logger.info("extraction_fast_path_succeeded", pages=used, page_count=page_count)
                return ExtractionResult(
                    text=text,
                    strategy=ExtractionStrategy.FAST,
                    page_count=page_count,
                    pages_extracted=used,
                )
            errors.append("fast path: no text")
            logger.info("extraction_fast_path_empty", page_count=page_count)

        slow = await self._slow_path(data, options, errors)
        if slow is not None:
            pages, page_count = slow
            text, used = compose_pages(pages)
            if text.strip():
                logger.info("extraction_slow_path_succeeded", pages=used, page_count=page_count)
                return ExtractionResult(
                    text=text,
                    strategy=ExtractionStrategy.SLOW,
                    page_count=page_count,
                    pages_extracted=used,
                )
            errors.append("slow path: no text")

        logger.warning("extraction_failed", errors=errors)
        return ExtractionFailure(reason="no text extracted", errors=errors)

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    async def _fast_path(
        self,
        data: bytes,
        max_pages: int,
        errors: list[str],
    ) -> tuple[list[PageText], int] | None:
        receiver, sender = _WORKER_CONTEXT.Pipe(duplex=False)
        worker = _WORKER_CONTEXT.Process(
            target=_read_in_child,
            args=(sender, self._read_pages, data, max_pages),
            daemon=True,
        )
        try:
            worker.start()
        except Exception as exc:
            receiver.close()
            sender.close()
            errors.append(f"fast path: {exc}")
            logger.warning("extraction_fast_path_failed", error=str(exc))
            return None
        sender.close()

        try:
            ready = await asyncio.to_thread(receiver.poll, self._fast_timeout)
            if not ready:
                errors.append(f"fast path: timed out after {self._fast_timeout:g}s")
                logger.warning("extraction_fast_path_timeout", timeout=self._fast_timeout)
                return None
            try:
                status, payload = receiver.recv()
            except EOFError:
                errors.append(f"fast path: worker exited with code {worker.exitcode}")
                logger.warning("extraction_fast_path_crashed", exitcode=worker.exitcode)
                return None
        finally:
            # The slow path must not start while the child still holds the document.
            if worker.is_alive():
                worker.terminate()
            await asyncio.to_thread(worker.join)
            receiver.close()

        if status == "error":
            errors.append(f"fast path: {payload}")
            logger.warning("extraction_fast_path_failed", error=payload)
            return None
        return payload

    async def _slow_path(
        self,
        data: bytes,
        options: ExtractionOptions,
        errors: list[str],
    ) -> tuple[list[PageText], int] | None:
        use_vision = (
            options.extract_image_text
            and self._vision is not None
            and self._vision.supports_vision()
        )
        render_below = self._sparse_threshold if use_vision else None

        try:
            pages, page_count = await asyncio.to_thread(
                self._read_pages, data, options.max_pages, render_below
            )
        except Exception as exc:
            errors.append(f"slow path: {exc}")
            logger.warning("extraction_slow_path_failed", error=str(exc))
            return None

        if use_vision:
            pages = await self._recover_sparse_pages(pages)
        return pages, page_count

    async def _recover_sparse_pages(self, pages: list[PageText]) -> list[PageText]:
        recovered: list[PageText] = []
        for page in pages:
            if page.image is None:
                recovered.append(page)
                continue
            try:
                text = await self._vision.vision_extract(page.image, _VISION_PROMPT)
            except Exception as exc:
                logger.warning("extraction_vision_failed", page=page.number, error=str(exc))
                recovered.append(page)
                continue

            if text.strip() and _NO_TEXT_FOUND not in text:
                logger.debug("extraction_vision_recovered", page=page.number, chars=len(text))
                recovered.append(PageText(page.number, text, None))
            else:
                recovered.append(page)
        return recovered

    @staticmethod
    def _extract_plain_text(data: bytes) -> ExtractionResult | ExtractionFailure:
        text = data.decode("utf-8", errors="replace")
        if not text.strip():
            return ExtractionFailure(reason="no text extracted", errors=["empty text document"])
        return ExtractionResult(
            text=text,
            strategy=ExtractionStrategy.PLAIN_TEXT,
            page_count=1,
            pages_extracted=1,
        )
