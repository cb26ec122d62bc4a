"""Search result handling: resolving hits to sessions and filtering by match type."""

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Optional

from .core import MATCH_TYPES, ChatSession, ProjectFolder, SearchResult

PLACEHOLDER_TITLE_PREFIX = "Search Result: "
PLACEHOLDER_SNIPPET_LENGTH = 50

MATCH_TYPE_LABELS = {
    "content": "Message",
    "thinking": "Thinking",
    "tool_name": "Tool",
    "tool_input": "Input",
    "tool_result": "Result",
    "tool_structured_result": "Data",
}


def resolve_search_result(
    result: SearchResult,
    projects: Iterable[ProjectFolder],
    now: Optional[datetime] = None,
) -> ChatSession:
    """Find the session a search hit belongs to.

    Projects and their sessions are scanned in order and the first session
    with a matching id is returned. The project data may be stale, so when
    nothing matches a placeholder session is built from the hit instead.
    """
    for project in projects:
        for session in project.chat_sessions:
            if session.id == result.session_id:
                return session

    stamp = _iso_utc(now or datetime.now(timezone.utc))
    return ChatSession(
        id=result.session_id,
        title=f"{PLACEHOLDER_TITLE_PREFIX}{result.snippet[:PLACEHOLDER_SNIPPET_LENGTH]}...",
        timestamp=stamp,
        project_path="",
        message_count=0,
        last_updated=stamp,
    )


def filter_results(
    results: Iterable[SearchResult],
    active: Optional[Iterable[str]] = None,
) -> list[SearchResult]:
    """Keep the results whose match type is active, in their original order."""
    active_types = select_all() if active is None else frozenset(active)
    return [r for r in results if r.match_type in active_types]


def toggle_match_type(active: Iterable[str], match_type: str) -> frozenset[str]:
    return frozenset(active) ^ {match_type}


def select_all() -> frozenset[str]:
    return frozenset(MATCH_TYPES)


def select_none() -> frozenset[str]:
    return frozenset()


def match_type_label(match_type: str) -> str:
    return MATCH_TYPE_LABELS.get(match_type, "Match")


def _iso_utc(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
