"""Abstract base class for transcript providers."""

from abc import ABC, abstractmethod
from pathlib import Path

from .core import ChatMessage, ProjectFolder, SearchResult


class ChatProvider(ABC):
    """Base class for transcript backends.

    A backend owns the on-disk format of a tool's sessions and hands back
    projects, messages and search hits in the shared data model. Everything
    returned is a fresh snapshot; callers may hold it as long as they like.
    """

    name: str  # "claude_code"

    @abstractmethod
    def get_base_path(self) -> Path:
        """Return the root directory where sessions are stored."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if session data exists on this machine."""
        ...

    @abstractmethod
    def list_projects(self) -> list[ProjectFolder]:
        """Return all projects with their sessions, most recently active first."""
        ...

    @abstractmethod
    def get_session_messages(self, session_id: str) -> list[ChatMessage]:
        """Return all messages for a given session ID."""
        ...

    @abstractmethod
    def search(self, query: str) -> list[SearchResult]:
        """Return every match of ``query`` across all sessions."""
        ...

    @abstractmethod
    def get_session_file_path(self, session_id: str) -> Path | None:
        """Return the file a session is stored in, or None if it is gone."""
        ...
