"""Narrated podcast generation.

Flow:

1. Load the document text (shared loader).
2. Plan sections with the injected :class:`SectionPlanner`.
3. Replace the document's podcast and its audio-less sections in one
   transaction.
4. Narrate the first section.  Success stores the audio and attaches its
   URL; any failure attaches the fallback reference
   ``/api/audio/{podcastId}-{sectionId}.wav`` instead.  Narration problems
   never fail the pipeline.
5. Compute the total duration from the narrated section's word count and
   record it.

Store failures after step 3 are logged and the in-memory podcast is
returned as-is.
"""

from __future__ import annotations

import uuid

import structlog

from src.interfaces.document_store import IDocumentStore
from src.interfaces.narration_provider import IAudioStorage, INarrationProvider
from src.models.artifacts import Podcast, PodcastSection, SectionPlan
from src.pipeline.content_loader import DocumentContentLoader
from src.providers.audio.local_audio_storage import AUDIO_URL_PREFIX
from src.services.content_assembler import (
    WORDS_PER_MINUTE,
    SectionPlanner,
    SingleSectionPlanner,
    estimate_duration_seconds,
    format_duration,
)
from src.utils.errors import NoContentAvailableError

logger = structlog.get_logger(logger_name=__name__)


def fallback_audio_url(podcast_id: str, section_id: str) -> str:
    return f"{AUDIO_URL_PREFIX}/{podcast_id}-{section_id}.wav"


class PodcastPipeline:
    """Generates and stores the narrated audio version of a document.

    Parameters
    ----------
    loader:
        Resolves the document and assembles its text.
    document_store:
        Destination for the podcast and its sections.
    narration:
        Text-to-speech service.
    audio_storage:
        Where synthesized audio is written.
    planner:
        Section planning strategy; one section for the whole text by default.
    """

    def __init__(
        self,
        loader: DocumentContentLoader,
        document_store: IDocumentStore,
        narration: INarrationProvider,
        audio_storage: IAudioStorage,
        planner: SectionPlanner | None = None,
        max_chunks: int | None = 20,
        words_per_minute: int = WORDS_PER_MINUTE,
    ) -> None:
        self._loader = loader
        self._store = document_store
        self._narration = narration
        self._audio = audio_storage
        self._planner = planner or SingleSectionPlanner(words_per_minute)
        self._max_chunks = max_chunks
        self._wpm = words_per_minute

    async def run(self, document_id: str, user_id: str | None) -> Podcast:
        """Build the podcast for *document_id* on behalf of *user_id*.

        Raises
        ------
        UnauthorizedError, DocumentNotFoundError, NoContentAvailableError
            Before anything is persisted.
        """
        content = await self._loader.load(document_id, user_id, max_chunks=self._max_chunks)
        document = content.document
        plans = self._planner.plan(content.text, document.name)
        if not plans:
            raise NoContentAvailableError("no sections could be planned", document_id=document_id)

        podcast = await self._persist_podcast(document.id, document.owner_id, document.name, plans)

        first = podcast.sections[0]
        audio_url = await self._narrate(podcast, first)
        sections = [first.model_copy(update={"audio_url": audio_url}), *podcast.sections[1:]]

        total_duration = format_duration(estimate_duration_seconds(first.content, self._wpm))
        if podcast.persisted:
            try:
                await self._store.update_podcast_duration(podcast.id, total_duration)
            except Exception as exc:
                logger.error("podcast_duration_update_failed", podcast_id=podcast.id, error=str(exc))

        logger.info(
            "podcast_generated",
            document_id=document_id,
            podcast_id=podcast.id,
            sections=len(sections),
            total_duration=total_duration,
        )
        return podcast.model_copy(update={"sections": sections, "total_duration": total_duration})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _persist_podcast(
        self,
        document_id: str,
        user_id: str,
        name: str,
        plans: list[SectionPlan],
    ) -> Podcast:
        title = f"{name} - Audio Version"
        description = f"Audio version of {name}"
        try:
            return await self._store.replace_podcast(document_id, user_id, title, description, plans)
        except Exception as exc:
            logger.error("podcast_persist_failed", document_id=document_id, error=str(exc))
            return Podcast(
                id=str(uuid.uuid4()),
                document_id=document_id,
                user_id=user_id,
                title=title,
                description=description,
                sections=[
                    PodcastSection(
                        id=str(uuid.uuid4()),
                        title=plan.title,
                        description=plan.description,
                        content=plan.content,
                        duration=plan.estimated_duration,
                        ordinal=ordinal,
                    )
                    for ordinal, plan in enumerate(plans)
                ],
                persisted=False,
            )

    async def _narrate(self, podcast: Podcast, section: PodcastSection) -> str:
        """Synthesize *section* and return its audio URL, degrading to the fallback."""
        try:
            if not section.content.strip():
                raise ValueError("section has no content to narrate")
            audio = await self._narration.synthesize(section.content)
            if not audio:
                raise ValueError("narration returned empty audio")
            filename = f"{podcast.id}-{section.id}.{self._narration.file_extension}"
            audio_url = await self._audio.save(audio, filename, podcast.user_id)
        except Exception as exc:
            audio_url = fallback_audio_url(podcast.id, section.id)
            logger.warning(
                "narration_degraded",
                podcast_id=podcast.id,
                section_id=section.id,
                fallback_url=audio_url,
                error=str(exc),
            )

        if podcast.persisted:
            try:
                await self._store.update_section_audio(section.id, audio_url)
            except Exception as exc:
                logger.error("section_audio_update_failed", section_id=section.id, error=str(exc))
        return audio_url
