"""Document ingestion: **extract -> chunk -> persist**.

1. **Extract** (extraction_cascade.py / ExtractionCascade) -- Bounded fast
   pass over the leading pages, an uncapped slow pass when that fails, and
   optional vision recovery of image-only pages.

2. **Chunk** (chunker.py / WordChunker) -- Splits the text into fixed-size,
   non-overlapping whitespace-word windows.

3. **Persist** (chunk_store.py / ChunkStore) -- Creates a document's chunk
   set exactly once and serves it to every later caller.
"""

from src.services.ingestion.chunk_store import ChunkStore
from src.services.ingestion.chunker import WordChunker, chunk_text
from src.services.ingestion.extraction_cascade import ExtractionCascade, read_pdf_pages

__all__ = [
    "ChunkStore",
    "ExtractionCascade",
    "WordChunker",
    "chunk_text",
    "read_pdf_pages",
]
