"""FastAPI web server for transcript-viewer."""

import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from .backends import get_available_providers
from .config import SEARCH_MIN_QUERY_LENGTH
from .core import MATCH_TYPES, ProjectFolder, SearchResult
from .export import (
    message_to_dict,
    project_to_dict,
    search_result_to_dict,
    session_to_dict,
    session_to_json,
    session_to_markdown,
)
from .provider import ChatProvider
from .search import filter_results, resolve_search_result

logger = logging.getLogger(__name__)

app = FastAPI(title="transcript-viewer", version="0.1.0")

# Provider cache (populated on first request)
_providers: list[ChatProvider] | None = None


def _get_providers() -> list[ChatProvider]:
    """Lazily initialize and cache providers."""
    global _providers
    if _providers is None:
        _providers = get_available_providers()
        logger.info("Detected providers: %s", [p.name for p in _providers])
    return _providers


def _all_projects() -> list[ProjectFolder]:
    projects = []
    for provider in _get_providers():
        try:
            projects.extend(provider.list_projects())
        except OSError as e:
            logger.error("Failed to list projects for %s: %s", provider.name, e)
    return projects


def _find_session_provider(session_id: str) -> ChatProvider:
    """Return the provider holding a session, or raise 404."""
    for provider in _get_providers():
        if provider.get_session_file_path(session_id) is not None:
            return provider
    raise HTTPException(status_code=404, detail="Session not found")


# ── Routes ───────────────────────────────────────────────────────


@app.get("/api/projects")
async def get_projects():
    """Return all projects with their sessions."""
    return [project_to_dict(p) for p in _all_projects()]


@app.get("/api/search")
async def search(
    q: str = Query("", description="Search text"),
    types: list[str] | None = Query(None, description="Match types to keep"),
):
    """Search all sessions, optionally narrowed to some match types."""
    if len(q.strip()) < SEARCH_MIN_QUERY_LENGTH:
        return {"query": q, "total": 0, "results": []}

    if types is not None:
        unknown = sorted(set(types) - set(MATCH_TYPES))
        if unknown:
            raise HTTPException(status_code=422, detail=f"Unknown match types: {', '.join(unknown)}")

    results = []
    for provider in _get_providers():
        try:
            results.extend(provider.search(q))
        except OSError as e:
            logger.error("Search failed for %s: %s", provider.name, e)

    results = filter_results(results, types)
    return {
        "query": q,
        "total": len(results),
        "results": [search_result_to_dict(r) for r in results],
    }


@app.get("/api/search/resolve")
async def resolve(
    session_id: str,
    snippet: str = "",
    message_uuid: str = "",
    match_type: str = "content",
):
    """Resolve a search hit to its session, or a placeholder if it is gone."""
    result = SearchResult(
        session_id=session_id,
        message_uuid=message_uuid,
        snippet=snippet,
        match_type=match_type,
    )
    return session_to_dict(resolve_search_result(result, _all_projects()))


@app.get("/api/session/{session_id}/path")
async def get_session_path(session_id: str):
    """Return the file a session is stored in."""
    for provider in _get_providers():
        path = provider.get_session_file_path(session_id)
        if path is not None:
            return {"session_id": session_id, "path": str(path)}
    raise HTTPException(status_code=404, detail="Session not found")


@app.get("/api/session/{session_id}")
async def get_session(session_id: str):
    """Return the normalized messages of a session."""
    provider = _find_session_provider(session_id)

    try:
        messages = provider.get_session_messages(session_id)
    except OSError as e:
        logger.error("Failed to get messages for %s: %s", session_id, e)
        raise HTTPException(status_code=500, detail="Failed to load messages")

    return {
        "session_id": session_id,
        "messages": [message_to_dict(m) for m in messages],
    }


@app.get("/api/export/{session_id}")
async def export_session(
    session_id: str,
    format: str = Query("md", description="Export format: md or json"),
):
    """Export a session as Markdown or JSON."""
    provider = _find_session_provider(session_id)

    try:
        sessions = [s for p in provider.list_projects() for s in p.chat_sessions]
        messages = provider.get_session_messages(session_id)
    except OSError as e:
        logger.error("Failed to load session %s for export: %s", session_id, e)
        raise HTTPException(status_code=500, detail="Failed to load session")

    session = next((s for s in sessions if s.id == session_id), None)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")

    safe_title = "".join(c if (c.isascii() and c.isalnum()) or c in "-_ " else "" for c in session.title)[:50]

    if format == "json":
        content = session_to_json(session, messages)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{safe_title}.json"'},
        )
    else:
        content = session_to_markdown(session, messages)
        return Response(
            content=content,
            media_type="text/markdown",
            headers={"Content-Disposition": f'attachment; filename="{safe_title}.md"'},
        )
