"""FastAPI application exposing credibility, compatibility and suggestions."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.credibility.cache import CredibilityCache, SQLiteCredibilityCache
from src.credibility.service import CredibilityService, ProfileNotFoundError
from src.github.provider import GitHubMetadataProvider, RepositoryMetadataProvider
from src.matching.compatibility import calculate_compatibility
from src.matching.models import MatchTarget, MatchUser
from src.store.records import RecordStore, SQLiteRecordStore
from src.suggestions.service import ProjectNotFoundError, TeammateSuggestionService

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 200


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    records_db = os.environ.get("RECORDS_DB_PATH", "data/records.db")
    cache_db = os.environ.get("CREDIBILITY_CACHE_DB_PATH", "data/credibility-cache.db")
    store = SQLiteRecordStore(records_db)
    cache = SQLiteCredibilityCache.from_env(cache_db)
    return create_app(store, cache, GitHubMetadataProvider.from_env())


def create_app(
    store: RecordStore,
    cache: CredibilityCache,
    repo_provider: RepositoryMetadataProvider | None = None,
) -> FastAPI:
    """Create the API app over an injected store, cache and metadata provider."""
    app = FastAPI(docs_url=None, redoc_url=None)
    credibility = CredibilityService(store, cache, repo_provider)
    suggestions = TeammateSuggestionService(store, credibility, repo_provider)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/users/{user_id}/credibility")
    async def user_credibility(user_id: str) -> JSONResponse:
        try:
            result = await credibility.get_user_credibility(user_id)
        except ProfileNotFoundError as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        return JSONResponse(result.model_dump(mode="json"))

    @app.get("/users/{user_id}/credibility/summary")
    async def user_credibility_summary(user_id: str) -> JSONResponse:
        try:
            summary = await credibility.get_user_credibility_summary(user_id)
        except ProfileNotFoundError as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        return JSONResponse(summary.model_dump(mode="json"))

    @app.post("/credibility/batch")
    async def batch_credibility(request: Request) -> JSONResponse:
        body = await _json_body(request)
        user_ids = body.get("user_ids") if isinstance(body, dict) else None
        if not isinstance(user_ids, list) or not all(isinstance(u, str) for u in user_ids):
            return JSONResponse(
                {"error": "user_ids must be a list of strings"}, status_code=400,
            )
        if len(user_ids) > MAX_BATCH_SIZE:
            return JSONResponse(
                {"error": f"At most {MAX_BATCH_SIZE} user_ids per request"},
                status_code=400,
            )
        summaries = await credibility.get_batch_credibility_summaries(user_ids)
        return JSONResponse({
            uid: summary.model_dump(mode="json") for uid, summary in summaries.items()
        })

    @app.post("/compatibility")
    async def compatibility(request: Request) -> JSONResponse:
        body = await _json_body(request)
        if not isinstance(body, dict):
            return JSONResponse({"error": "Expected a JSON object"}, status_code=400)
        try:
            user = MatchUser.model_validate(body.get("user"))
            target = MatchTarget.model_validate(body.get("target"))
        except ValidationError as e:
            details = e.errors(include_url=False, include_context=False)
            return JSONResponse(
                {"error": "Invalid compatibility request", "details": details},
                status_code=400,
            )
        return JSONResponse(calculate_compatibility(user, target).model_dump(mode="json"))

    @app.get("/projects/{project_id}/suggestions")
    async def project_suggestions(project_id: str) -> JSONResponse:
        try:
            results = await suggestions.get_suggested_teammates(project_id)
        except ProjectNotFoundError as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        return JSONResponse([r.model_dump(mode="json") for r in results])

    return app


async def _json_body(request: Request) -> object:
    try:
        return await request.json()
    except ValueError:
        logger.info("Rejected non-JSON request body on %s", request.url.path)
        return None
