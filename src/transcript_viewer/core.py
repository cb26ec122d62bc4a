"""Core data models for transcript-viewer."""

from dataclasses import dataclass, field
from typing import Literal, Optional, TypedDict, Union

# Ordered: also the default set of active search filters.
MATCH_TYPES = (
    "content",
    "thinking",
    "tool_name",
    "tool_input",
    "tool_result",
    "tool_structured_result",
)

# Plain text, or the raw (unclassified) content segments as the producer wrote them.
MessageContent = Union[str, list[dict]]


@dataclass
class ChatSession:
    """A single chat conversation."""

    id: str
    title: str
    timestamp: str  # ISO 8601, first user message
    project_path: str
    message_count: int = 0
    last_updated: str = ""


@dataclass
class ChatMessage:
    """A single user or assistant message within a session."""

    uuid: str
    parent_uuid: Optional[str]
    timestamp: str
    message_type: str  # "user" | "assistant"
    content: MessageContent
    tool_use_id: Optional[str] = None
    cwd: Optional[str] = None
    version: Optional[str] = None
    model: Optional[str] = None


@dataclass
class ProjectFolder:
    """A project directory and the sessions recorded in it."""

    name: str  # working directory of the sessions, e.g. "/Users/alice/dev/app"
    path: str  # location of the project's session files
    chat_sessions: list[ChatSession] = field(default_factory=list)


@dataclass
class SearchResult:
    """A search hit inside a session."""

    session_id: str
    message_uuid: str
    snippet: str
    match_type: str  # one of MATCH_TYPES


class Task(TypedDict):
    """One entry of a task list written by the todo tool."""

    id: str
    content: str
    status: Literal["pending", "in_progress", "completed"]
    priority: Literal["high", "medium", "low"]
