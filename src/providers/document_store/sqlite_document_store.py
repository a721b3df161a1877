"""SQLite-backed document, chunk and artifact persistence.

Layer: Providers (concrete adapter implementing IDocumentStore).

Uses ``aiosqlite`` for async I/O, ``PRAGMA journal_mode=WAL`` so readers
never block on the single writer, and ``PRAGMA foreign_keys=ON`` so that
deleting a document or an artifact set cascades to its children.

Two invariants are enforced by the schema rather than by callers:

* ``chunk_sets.document_id`` is the primary key, so a document can own one
  chunk set.  :meth:`SQLiteDocumentStore.create_chunk_set` inserts the set
  row and its chunks in one transaction; a racing second writer hits the
  constraint, rolls back, and reads the winner's chunks.
* Each artifact table is ``UNIQUE(document_id)``.  Replacement deletes the
  old set (children cascade) and inserts the new one inside a single
  transaction, so readers see either the old set or the new one.
"""

from __future__ import annotations

import contextlib
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite
import structlog

from src.interfaces.document_store import IDocumentStore
from src.models.artifacts import (
    Flashcard,
    FlashcardDeck,
    Podcast,
    PodcastSection,
    Quiz,
    QuizQuestion,
    SectionPlan,
)
from src.models.document import Chunk, Document
from src.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/lectern.db")
_PROVIDER_NAME = "sqlite"

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_TABLES = [
    """\
CREATE TABLE IF NOT EXISTS documents (
    id           TEXT PRIMARY KEY,
    owner_id     TEXT NOT NULL,
    storage_key  TEXT NOT NULL,
    name         TEXT NOT NULL,
    media_type   TEXT NOT NULL,
    created_at   TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS chunk_sets (
    document_id  TEXT PRIMARY KEY REFERENCES documents(id) ON DELETE CASCADE,
    created_at   TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS chunks (
    id           TEXT PRIMARY KEY,
    document_id  TEXT NOT NULL REFERENCES chunk_sets(document_id) ON DELETE CASCADE,
    ordinal      INTEGER NOT NULL,
    text         TEXT NOT NULL,
    created_at   TEXT NOT NULL,
    UNIQUE(document_id, ordinal)
);
""",
    """\
CREATE TABLE IF NOT EXISTS flashcard_decks (
    id           TEXT PRIMARY KEY,
    document_id  TEXT NOT NULL UNIQUE REFERENCES documents(id) ON DELETE CASCADE,
    title        TEXT NOT NULL,
    created_at   TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS flashcards (
    id        TEXT PRIMARY KEY,
    deck_id   TEXT NOT NULL REFERENCES flashcard_decks(id) ON DELETE CASCADE,
    ordinal   INTEGER NOT NULL,
    question  TEXT NOT NULL,
    answer    TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS quizzes (
    id           TEXT PRIMARY KEY,
    document_id  TEXT NOT NULL UNIQUE REFERENCES documents(id) ON DELETE CASCADE,
    title        TEXT NOT NULL,
    created_at   TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS quiz_questions (
    id        TEXT PRIMARY KEY,
    quiz_id   TEXT NOT NULL REFERENCES quizzes(id) ON DELETE CASCADE,
    ordinal   INTEGER NOT NULL,
    question  TEXT NOT NULL,
    options   TEXT NOT NULL,
    answer    TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS podcasts (
    id              TEXT PRIMARY KEY,
    document_id     TEXT NOT NULL UNIQUE REFERENCES documents(id) ON DELETE CASCADE,
    user_id         TEXT NOT NULL,
    title           TEXT NOT NULL,
    description     TEXT NOT NULL,
    total_duration  TEXT NOT NULL DEFAULT '0:00',
    created_at      TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS podcast_sections (
    id           TEXT PRIMARY KEY,
    podcast_id   TEXT NOT NULL REFERENCES podcasts(id) ON DELETE CASCADE,
    ordinal      INTEGER NOT NULL,
    title        TEXT NOT NULL,
    description  TEXT NOT NULL,
    content      TEXT NOT NULL,
    duration     TEXT NOT NULL,
    audio_url    TEXT
);
""",
]

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_documents_owner ON documents(owner_id);",
    "CREATE INDEX IF NOT EXISTS idx_chunks_order ON chunks(document_id, created_at, ordinal);",
    "CREATE INDEX IF NOT EXISTS idx_flashcards_deck ON flashcards(deck_id, ordinal);",
    "CREATE INDEX IF NOT EXISTS idx_quiz_questions_quiz ON quiz_questions(quiz_id, ordinal);",
    "CREATE INDEX IF NOT EXISTS idx_sections_podcast ON podcast_sections(podcast_id, ordinal);",
]

# ── DML ───────────────────────────────────────────────────────────────

_INSERT_DOCUMENT = """\
INSERT INTO documents (id, owner_id, storage_key, name, media_type, created_at)
VALUES (?, ?, ?, ?, ?, ?);
"""

_SELECT_DOCUMENT = """\
SELECT id, owner_id, storage_key, name, media_type, created_at
FROM documents WHERE id = ? AND owner_id = ?;
"""

_DELETE_DOCUMENT = "DELETE FROM documents WHERE id = ?;"

_INSERT_CHUNK_SET = "INSERT INTO chunk_sets (document_id, created_at) VALUES (?, ?);"

_INSERT_CHUNK = """\
INSERT INTO chunks (id, document_id, ordinal, text, created_at)
VALUES (?, ?, ?, ?, ?);
"""

_SELECT_CHUNKS = """\
SELECT id, document_id, ordinal, text, created_at
FROM chunks WHERE document_id = ?
ORDER BY created_at ASC, ordinal ASC
"""

_DELETE_DECK = "DELETE FROM flashcard_decks WHERE document_id = ?;"
_INSERT_DECK = "INSERT INTO flashcard_decks (id, document_id, title, created_at) VALUES (?, ?, ?, ?);"
_INSERT_CARD = "INSERT INTO flashcards (id, deck_id, ordinal, question, answer) VALUES (?, ?, ?, ?, ?);"
_SELECT_DECK = "SELECT id, document_id, title, created_at FROM flashcard_decks WHERE document_id = ?;"
_SELECT_CARDS = "SELECT id, ordinal, question, answer FROM flashcards WHERE deck_id = ? ORDER BY ordinal;"

_DELETE_QUIZ = "DELETE FROM quizzes WHERE document_id = ?;"
_INSERT_QUIZ = "INSERT INTO quizzes (id, document_id, title, created_at) VALUES (?, ?, ?, ?);"
_INSERT_QUESTION = """\
INSERT INTO quiz_questions (id, quiz_id, ordinal, question, options, answer)
VALUES (?, ?, ?, ?, ?, ?);
"""
_SELECT_QUIZ = "SELECT id, document_id, title, created_at FROM quizzes WHERE document_id = ?;"
_SELECT_QUESTIONS = """\
SELECT id, ordinal, question, options, answer
FROM quiz_questions WHERE quiz_id = ? ORDER BY ordinal;
"""

_DELETE_PODCAST = "DELETE FROM podcasts WHERE document_id = ?;"
_INSERT_PODCAST = """\
INSERT INTO podcasts (id, document_id, user_id, title, description, total_duration, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?);
"""
_INSERT_SECTION = """\
INSERT INTO podcast_sections (id, podcast_id, ordinal, title, description, content, duration, audio_url)
VALUES (?, ?, ?, ?, ?, ?, ?, NULL);
"""
_SELECT_PODCAST = """\
SELECT id, document_id, user_id, title, description, total_duration, created_at
FROM podcasts WHERE document_id = ?;
"""
_SELECT_SECTIONS = """\
SELECT id, ordinal, title, description, content, duration, audio_url
FROM podcast_sections WHERE podcast_id = ? ORDER BY ordinal;
"""
_UPDATE_SECTION_AUDIO = "UPDATE podcast_sections SET audio_url = ? WHERE id = ?;"
_UPDATE_PODCAST_DURATION = "UPDATE podcasts SET total_duration = ? WHERE id = ?;"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


class SQLiteDocumentStore(IDocumentStore):
    """SQLite-backed store for documents, chunks and study artifacts."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @contextlib.asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON;")
            yield db

    async def initialize(self) -> None:
        """Create all tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            for ddl in _CREATE_TABLES:
                await db.execute(ddl)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("document_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    # ── Documents ──────────────────────────────────────────────────────

    async def create_document(self, document: Document) -> Document:
        async with self._connect() as db:
            await db.execute(_INSERT_DOCUMENT, (
                document.id,
                document.owner_id,
                document.storage_key,
                document.name,
                document.media_type,
                document.created_at.isoformat(),
            ))
            await db.commit()
        logger.info("document_created", document_id=document.id)
        return document

    async def get_document(self, document_id: str, owner_id: str) -> Document | None:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_DOCUMENT, (document_id, owner_id))
            row = await cursor.fetchone()
        if row is None:
            return None
        return Document(**dict(row))

    async def delete_document(self, document_id: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute(_DELETE_DOCUMENT, (document_id,))
            await db.commit()
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("document_deleted", document_id=document_id)
        return deleted

    # ── Chunks ─────────────────────────────────────────────────────────

    async def list_chunks(self, document_id: str, limit: int | None = None) -> list[Chunk]:
        async with self._connect() as db:
            return await self._fetch_chunks(db, document_id, limit)

    async def create_chunk_set(self, document_id: str, texts: list[str]) -> list[Chunk]:
        created_at = _now()
        rows = [
            (_new_id(), document_id, ordinal, text, created_at)
            for ordinal, text in enumerate(texts)
        ]
        try:
            async with self._connect() as db:
                try:
                    await db.execute(_INSERT_CHUNK_SET, (document_id, created_at))
                except aiosqlite.IntegrityError:
                    await db.rollback()
                    existing = await self._fetch_chunks(db, document_id, None)
                    if not existing:
                        raise PersistenceError(
                            f"Cannot create chunks for unknown document {document_id}",
                            provider_name=_PROVIDER_NAME,
                        )
                    logger.info("chunk_set_already_exists", document_id=document_id, count=len(existing))
                    return existing

                await db.executemany(_INSERT_CHUNK, rows)
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(str(exc), provider_name=_PROVIDER_NAME) from exc

        return [
            Chunk(id=row[0], document_id=document_id, ordinal=row[2], text=row[3], created_at=created_at)
            for row in rows
        ]

    @staticmethod
    async def _fetch_chunks(
        db: aiosqlite.Connection,
        document_id: str,
        limit: int | None,
    ) -> list[Chunk]:
        sql = _SELECT_CHUNKS
        params: tuple = (document_id,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (document_id, limit)
        cursor = await db.execute(sql, params)
        rows = await cursor.fetchall()
        return [Chunk(**dict(row)) for row in rows]

    # ── Flashcards ─────────────────────────────────────────────────────

    async def replace_flashcard_deck(
        self,
        document_id: str,
        title: str,
        cards: list[tuple[str, str]],
    ) -> FlashcardDeck:
        deck_id = _new_id()
        created_at = _now()
        built = [
            Flashcard(id=_new_id(), question=question, answer=answer, ordinal=ordinal)
            for ordinal, (question, answer) in enumerate(cards)
        ]
        try:
            async with self._connect() as db:
                await db.execute(_DELETE_DECK, (document_id,))
                await db.execute(_INSERT_DECK, (deck_id, document_id, title, created_at))
                await db.executemany(
                    _INSERT_CARD,
                    [(c.id, deck_id, c.ordinal, c.question, c.answer) for c in built],
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(str(exc), provider_name=_PROVIDER_NAME) from exc

        logger.info("flashcard_deck_replaced", document_id=document_id, cards=len(built))
        return FlashcardDeck(
            id=deck_id,
            document_id=document_id,
            title=title,
            cards=built,
            created_at=created_at,
        )

    async def get_flashcard_deck(self, document_id: str) -> FlashcardDeck | None:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_DECK, (document_id,))
            deck = await cursor.fetchone()
            if deck is None:
                return None
            cursor = await db.execute(_SELECT_CARDS, (deck["id"],))
            cards = [Flashcard(**dict(row)) for row in await cursor.fetchall()]
        return FlashcardDeck(**dict(deck), cards=cards)

    # ── Quizzes ────────────────────────────────────────────────────────

    async def replace_quiz(
        self,
        document_id: str,
        title: str,
        questions: list[tuple[str, list[str], str]],
    ) -> Quiz:
        quiz_id = _new_id()
        created_at = _now()
        built = [
            QuizQuestion(id=_new_id(), question=question, options=options, answer=answer, ordinal=ordinal)
            for ordinal, (question, options, answer) in enumerate(questions)
        ]
        try:
            async with self._connect() as db:
                await db.execute(_DELETE_QUIZ, (document_id,))
                await db.execute(_INSERT_QUIZ, (quiz_id, document_id, title, created_at))
                await db.executemany(
                    _INSERT_QUESTION,
                    [
                        (q.id, quiz_id, q.ordinal, q.question, json.dumps(q.options), q.answer)
                        for q in built
                    ],
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(str(exc), provider_name=_PROVIDER_NAME) from exc

        logger.info("quiz_replaced", document_id=document_id, questions=len(built))
        return Quiz(id=quiz_id, document_id=document_id, title=title, questions=built, created_at=created_at)

    async def get_quiz(self, document_id: str) -> Quiz | None:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_QUIZ, (document_id,))
            quiz = await cursor.fetchone()
            if quiz is None:
                return None
            cursor = await db.execute(_SELECT_QUESTIONS, (quiz["id"],))
            rows = await cursor.fetchall()
        questions = [
            QuizQuestion(
                id=row["id"],
                ordinal=row["ordinal"],
                question=row["question"],
                options=json.loads(row["options"]),
                answer=row["answer"],
            )
            for row in rows
        ]
        return Quiz(**dict(quiz), questions=questions)

    # ── Podcasts ───────────────────────────────────────────────────────

    async def replace_podcast(
        self,
        document_id: str,
        user_id: str,
        title: str,
        description: str,
        sections: list[SectionPlan],
    ) -> Podcast:
        podcast_id = _new_id()
        created_at = _now()
        built = [
            PodcastSection(
                id=_new_id(),
                title=plan.title,
                description=plan.description,
                content=plan.content,
                duration=plan.estimated_duration,
                ordinal=ordinal,
            )
            for ordinal, plan in enumerate(sections)
        ]
        try:
            async with self._connect() as db:
                await db.execute(_DELETE_PODCAST, (document_id,))
                await db.execute(_INSERT_PODCAST, (
                    podcast_id, document_id, user_id, title, description, "0:00", created_at,
                ))
                await db.executemany(
                    _INSERT_SECTION,
                    [
                        (s.id, podcast_id, s.ordinal, s.title, s.description, s.content, s.duration)
                        for s in built
                    ],
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(str(exc), provider_name=_PROVIDER_NAME) from exc

        logger.info("podcast_replaced", document_id=document_id, sections=len(built))
        return Podcast(
            id=podcast_id,
            document_id=document_id,
            user_id=user_id,
            title=title,
            description=description,
            sections=built,
            created_at=created_at,
        )

    async def get_podcast(self, document_id: str) -> Podcast | None:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_PODCAST, (document_id,))
            podcast = await cursor.fetchone()
            if podcast is None:
                return None
            cursor = await db.execute(_SELECT_SECTIONS, (podcast["id"],))
            sections = [PodcastSection(**dict(row)) for row in await cursor.fetchall()]
        return Podcast(**dict(podcast), sections=sections)

    async def update_section_audio(self, section_id: str, audio_url: str) -> bool:
        try:
            async with self._connect() as db:
                cursor = await db.execute(_UPDATE_SECTION_AUDIO, (audio_url, section_id))
                await db.commit()
                return cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise PersistenceError(str(exc), provider_name=_PROVIDER_NAME) from exc

    async def update_podcast_duration(self, podcast_id: str, total_duration: str) -> bool:
        try:
            async with self._connect() as db:
                cursor = await db.execute(_UPDATE_PODCAST_DURATION, (total_duration, podcast_id))
                await db.commit()
                return cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise PersistenceError(str(exc), provider_name=_PROVIDER_NAME) from exc
