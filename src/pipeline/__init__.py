"""Generation pipelines: flashcards, quizzes and narrated podcasts."""

from src.pipeline.content_loader import DocumentContentLoader, LoadedContent
from src.pipeline.flashcard_pipeline import FlashcardPipeline
from src.pipeline.podcast_pipeline import PodcastPipeline
from src.pipeline.quiz_pipeline import QuizPipeline

__all__ = [
    "DocumentContentLoader",
    "FlashcardPipeline",
    "LoadedContent",
    "PodcastPipeline",
    "QuizPipeline",
]
