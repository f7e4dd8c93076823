"""
FastAPI dependencies for the explorer routes.

The GitHub client and the document store are built once in the app
lifespan (see `api/main.py`) and kept on `app.state`. Tests replace these
dependencies through `app.dependency_overrides`.
"""

from __future__ import annotations

from fastapi import Request

from core.github import GithubClient

from .repository import PostgresDocumentStore


def get_github_client(request: Request) -> GithubClient:
    return request.app.state.github_client


def get_document_store(request: Request) -> PostgresDocumentStore:
    return request.app.state.document_store
