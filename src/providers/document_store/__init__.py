"""Relational store adapters (IDocumentStore implementations)."""

from src.providers.document_store.sqlite_document_store import SQLiteDocumentStore

__all__ = ["SQLiteDocumentStore"]
