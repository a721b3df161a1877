"""FastAPI routes for document upload and study-artifact generation.

Service dependencies are resolved from ``app.state`` (populated at startup
by ``src.main._build_all``) through ``Annotated[..., Depends(...)]``.  The
caller's identity arrives in the ``X-User-Id`` header, set by the
authenticating gateway in front of this service.

    Endpoint                              Method  Description
    ─────────────────────────────────────────────────────────────────
    /api/v1/documents                     POST    Upload a document
    /api/v1/documents/{id}/content        GET     Assembled chunk text
    /api/v1/flashcards                    POST    Generate flashcard deck
    /api/v1/quizzes                       POST    Generate quiz
    /api/v1/podcasts                      POST    Generate narrated podcast
    /api/v1/health                        GET     Health check
    /api/audio/{filename}                 GET     Stored narration audio
"""

from __future__ import annotations

import asyncio
import uuid
from pathlib import PurePosixPath
from typing import Annotated, Any, Awaitable, TypeVar

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

from src.api.schemas import (
    DocumentContentResponse,
    DocumentResponse,
    ErrorResponse,
    FlashcardsResponse,
    GenerateRequest,
    HealthResponse,
    PodcastResponse,
    QuizResponse,
)
from src.interfaces.document_store import IDocumentStore
from src.interfaces.narration_provider import IAudioStorage
from src.interfaces.storage_provider import IStorageProvider
from src.models.document import Document
from src.pipeline.content_loader import DocumentContentLoader
from src.pipeline.flashcard_pipeline import FlashcardPipeline
from src.pipeline.podcast_pipeline import PodcastPipeline
from src.pipeline.quiz_pipeline import QuizPipeline
from src.utils.errors import PipelineTimeoutError, UnauthorizedError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

VERSION = "0.1.0"

router = APIRouter(prefix="/api/v1")
audio_router = APIRouter(prefix="/api")

_ALLOWED_CONTENT_TYPES = frozenset({"application/pdf", "text/plain", "text/markdown"})
_MAX_FILE_SIZE = 50 * 1024 * 1024
_UPLOAD_CHUNK_SIZE = 64 * 1024
_DEFAULT_PIPELINE_TIMEOUT = 300.0

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}

T = TypeVar("T")


# ------------------------------------------------------------------
# Dependencies
# ------------------------------------------------------------------

def _get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError()
    return x_user_id.strip()


def _get_document_store(request: Request) -> IDocumentStore:
    return request.app.state.document_store


def _get_storage(request: Request) -> IStorageProvider:
    return request.app.state.storage


def _get_loader(request: Request) -> DocumentContentLoader:
    return request.app.state.content_loader


def _get_flashcard_pipeline(request: Request) -> FlashcardPipeline:
    return request.app.state.flashcard_pipeline


def _get_quiz_pipeline(request: Request) -> QuizPipeline:
    return request.app.state.quiz_pipeline


def _get_podcast_pipeline(request: Request) -> PodcastPipeline:
    return request.app.state.podcast_pipeline


def _get_audio_storage(request: Request) -> IAudioStorage:
    return request.app.state.audio_storage


def _get_pipeline_timeout(request: Request) -> float:
    return getattr(request.app.state, "pipeline_timeout", _DEFAULT_PIPELINE_TIMEOUT)


UserIdDep = Annotated[str, Depends(_get_user_id)]
DocumentStoreDep = Annotated[IDocumentStore, Depends(_get_document_store)]
StorageDep = Annotated[IStorageProvider, Depends(_get_storage)]
LoaderDep = Annotated[DocumentContentLoader, Depends(_get_loader)]
FlashcardPipelineDep = Annotated[FlashcardPipeline, Depends(_get_flashcard_pipeline)]
QuizPipelineDep = Annotated[QuizPipeline, Depends(_get_quiz_pipeline)]
PodcastPipelineDep = Annotated[PodcastPipeline, Depends(_get_podcast_pipeline)]
AudioStorageDep = Annotated[IAudioStorage, Depends(_get_audio_storage)]
TimeoutDep = Annotated[float, Depends(_get_pipeline_timeout)]


async def _within_budget(operation: Awaitable[T], timeout: float) -> T:
    try:
        return await asyncio.wait_for(operation, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise PipelineTimeoutError(timeout) from exc


# ------------------------------------------------------------------
# Documents
# ------------------------------------------------------------------

@router.post(
    "/documents",
    response_model=DocumentResponse,
    status_code=201,
    responses={401: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 415: {"model": ErrorResponse}},
    summary="Upload a document",
)
async def upload_document(
    file: UploadFile,
    user_id: UserIdDep,
    store: DocumentStoreDep,
    storage: StorageDep,
) -> DocumentResponse:
    """Store the uploaded bytes and register the document for its owner."""
    content_type = (file.content_type or "").split(";")[0].strip()
    if content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file type: {content_type}. Allowed: {', '.join(sorted(_ALLOWED_CONTENT_TYPES))}",
        )

    parts: list[bytes] = []
    total_size = 0
    while True:
        part = await file.read(_UPLOAD_CHUNK_SIZE)
        if not part:
            break
        total_size += len(part)
        if total_size > _MAX_FILE_SIZE:
            raise HTTPException(
                status_code=413,
                detail=f"File too large: >{_MAX_FILE_SIZE // (1024 * 1024)} MB.",
            )
        parts.append(part)
    data = b"".join(parts)
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    document_id = str(uuid.uuid4())
    name = PurePosixPath(file.filename or "document").name or "document"
    storage_key = f"{user_id}/{document_id}/{name}"

    await storage.put_object(storage_key, data, content_type=content_type)
    document = await store.create_document(
        Document(
            id=document_id,
            owner_id=user_id,
            storage_key=storage_key,
            name=name,
            media_type=content_type,
        )
    )
    _logger.info("document_uploaded", document_id=document_id, size=len(data), media_type=content_type)
    return DocumentResponse(**document.model_dump(exclude={"owner_id"}))


@router.get(
    "/documents/{document_id}/content",
    response_model=DocumentContentResponse,
    responses=_ERROR_RESPONSES,
    summary="Assembled text of a document's chunks",
)
async def get_document_content(
    document_id: str,
    user_id: UserIdDep,
    loader: LoaderDep,
    timeout: TimeoutDep,
) -> DocumentContentResponse:
    content = await _within_budget(loader.load(document_id, user_id), timeout)
    return DocumentContentResponse(content=content.text, chunk_count=len(content.chunks))


# ------------------------------------------------------------------
# Generation
# ------------------------------------------------------------------

@router.post(
    "/flashcards",
    response_model=FlashcardsResponse,
    responses=_ERROR_RESPONSES,
    summary="Generate the flashcard deck for a document",
)
async def create_flashcards(
    body: GenerateRequest,
    user_id: UserIdDep,
    pipeline: FlashcardPipelineDep,
    timeout: TimeoutDep,
) -> FlashcardsResponse:
    deck = await _within_budget(pipeline.run(body.document_id, user_id), timeout)
    return FlashcardsResponse(flashcards=deck)


@router.post(
    "/quizzes",
    response_model=QuizResponse,
    responses=_ERROR_RESPONSES,
    summary="Generate the quiz for a document",
)
async def create_quiz(
    body: GenerateRequest,
    user_id: UserIdDep,
    pipeline: QuizPipelineDep,
    timeout: TimeoutDep,
) -> QuizResponse:
    quiz = await _within_budget(pipeline.run(body.document_id, user_id), timeout)
    return QuizResponse(quiz=quiz)


@router.post(
    "/podcasts",
    response_model=PodcastResponse,
    responses=_ERROR_RESPONSES,
    summary="Generate the narrated podcast for a document",
)
async def create_podcast(
    body: GenerateRequest,
    user_id: UserIdDep,
    pipeline: PodcastPipelineDep,
    timeout: TimeoutDep,
) -> PodcastResponse:
    podcast = await _within_budget(pipeline.run(body.document_id, user_id), timeout)
    return PodcastResponse(podcast=podcast)


# ------------------------------------------------------------------
# Health and audio
# ------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(request: Request) -> HealthResponse:
    state = request.app.state
    providers: dict[str, Any] = {}
    llm = getattr(state, "llm_provider", None)
    if llm is not None:
        providers["llm"] = {"name": llm.get_provider_name(), "available": llm.is_available()}
    narration = getattr(state, "narration", None)
    if narration is not None:
        providers["narration"] = {"name": narration.get_provider_name(), "available": narration.is_available()}
    for key in ("storage", "document_store"):
        provider = getattr(state, key, None)
        if provider is not None:
            providers[key] = {"name": provider.get_provider_name(), "available": True}
    return HealthResponse(status="healthy", version=VERSION, providers=providers)


@audio_router.get("/audio/{filename}", summary="Stored narration audio")
async def get_audio(filename: str, audio_storage: AudioStorageDep) -> FileResponse:
    path = audio_storage.path_for(filename)
    if path is None:
        raise HTTPException(status_code=404, detail=f"Audio not found: {filename}")
    return FileResponse(path, media_type="audio/wav", filename=filename)
