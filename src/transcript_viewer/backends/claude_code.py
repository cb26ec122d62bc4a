"""Claude Code transcript backend.

Reads sessions from the ~/.claude/projects/ directory structure. Each project
directory holds one .jsonl file per session.

JSONL entry types:
- "user": User prompts, or tool_result blocks answering the previous
  assistant turn. The line-level "toolUseResult" field carries the
  structured result of that tool call.
- "assistant": AI responses. Content is an array of text, thinking and
  tool_use blocks. One API response is often split over several lines that
  share the same message.id.
- "summary": Session titles, keyed by the uuid of the last message they cover.
- Anything else ("file-history-snapshot", "progress", "system", ...): skipped.
"""

import json
import logging
from pathlib import Path

from ..config import get_claude_code_path
from ..content import (
    ReasoningTrace,
    TextSegment,
    ToolInvocation,
    ToolOutput,
    classify,
    has_tool_calls,
    message_text,
    resolve_tag,
)
from ..core import MATCH_TYPES, ChatMessage, ChatSession, ProjectFolder, SearchResult
from ..provider import ChatProvider
from ..text import generate_title, repair

logger = logging.getLogger(__name__)

MESSAGE_TYPES = ("user", "assistant")

SNIPPET_CONTEXT = 30
SNIPPET_FALLBACK_LENGTH = 60


class ClaudeCodeProvider(ChatProvider):
    """Provider for Claude Code transcripts."""

    name = "claude_code"

    def get_base_path(self) -> Path:
        return get_claude_code_path()

    def is_available(self) -> bool:
        return self.get_base_path().is_dir()

    def list_projects(self) -> list[ProjectFolder]:
        projects = []
        for project_dir in self._project_dirs():
            sessions = self._read_project_sessions(project_dir)
            if not sessions:
                continue

            projects.append(ProjectFolder(
                name=sessions[0].project_path or project_dir.name,
                path=str(project_dir),
                chat_sessions=sessions,
            ))

        projects.sort(
            key=lambda p: max(s.last_updated for s in p.chat_sessions),
            reverse=True,
        )
        return projects

    def get_session_messages(self, session_id: str) -> list[ChatMessage]:
        """Get the merged messages of a session.

        Assistant lines belonging to one API response are merged into a
        single message, and tool results are folded into the assistant
        message that made the calls.
        """
        path = self.get_session_file_path(session_id)
        if path is None:
            return []

        messages: list[ChatMessage] = []
        for entry in _read_entries(path):
            if entry.get("type") not in MESSAGE_TYPES:
                continue

            message = _entry_to_message(entry)
            previous = messages[-1] if messages else None
            message_id = (entry.get("message") or {}).get("id")

            if previous and message_id and _same_response(previous, message, message_id):
                _append_content(previous, message.content)
            elif previous and _answers_tool_calls(previous, message):
                _attach_tool_results(previous, message.content)
            else:
                messages.append(message)

        return messages

    def search(self, query: str) -> list[SearchResult]:
        query_lower = query.lower()
        if not query_lower:
            return []

        results = []
        for project_dir in self._project_dirs():
            for path in sorted(project_dir.glob("*.jsonl")):
                results.extend(self._search_file(path, query_lower))

        # Stable: scan order is kept within each match type.
        results.sort(key=lambda r: MATCH_TYPES.index(r.match_type))
        return results

    def get_session_file_path(self, session_id: str) -> Path | None:
        # Session ids come from URLs; never let one walk out of the project dirs.
        if not session_id or Path(session_id).name != session_id:
            return None

        project_dirs = self._project_dirs()
        for project_dir in project_dirs:
            candidate = project_dir / f"{session_id}.jsonl"
            if candidate.is_file():
                return candidate

        # Resumed sessions keep their original id in a file named after the new one.
        for project_dir in project_dirs:
            for path in sorted(project_dir.glob("*.jsonl")):
                if _file_has_session(path, session_id):
                    return path
        return None

    # ── Private helpers ──────────────────────────────────────────────

    def _project_dirs(self) -> list[Path]:
        base = self.get_base_path()
        if not base.is_dir():
            return []
        return sorted(d for d in base.iterdir() if d.is_dir())

    def _read_project_sessions(self, project_dir: Path) -> list[ChatSession]:
        """Read every session of a project, newest first."""
        entries_by_file = {
            path: _read_entries(path)
            for path in sorted(project_dir.glob("*.jsonl"))
        }

        summaries = {}
        for entries in entries_by_file.values():
            for entry in entries:
                if entry.get("type") == "summary" and entry.get("leafUuid") and entry.get("summary"):
                    summaries[entry["leafUuid"]] = entry["summary"]

        sessions = []
        for path, entries in entries_by_file.items():
            session = _build_session(path, entries, summaries)
            if session:
                sessions.append(session)

        sessions.sort(key=lambda s: s.last_updated, reverse=True)
        return sessions

    def _search_file(self, path: Path, query_lower: str) -> list[SearchResult]:
        results = []
        session_id = ""

        for entry in _read_entries(path):
            if not session_id and entry.get("sessionId"):
                session_id = entry["sessionId"]
            if entry.get("type") not in MESSAGE_TYPES:
                continue

            message = _entry_to_message(entry)
            message_uuid = entry.get("uuid", "")
            for match_type, snippet in _find_matches(message, query_lower):
                results.append(SearchResult(
                    session_id=session_id or path.stem,
                    message_uuid=message_uuid,
                    snippet=snippet,
                    match_type=match_type,
                ))

        return results


def _read_entries(path: Path) -> list[dict]:
    """Parse a JSONL file, skipping blank and malformed lines."""
    entries = []
    try:
        with path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.debug("Bad JSON at %s:%d: %s", path, line_num, e)
                    continue
                if not isinstance(entry, dict):
                    continue
                if entry.get("type") in MESSAGE_TYPES and not isinstance(entry.get("message") or {}, dict):
                    logger.debug("Bad message payload at %s:%d", path, line_num)
                    continue
                entries.append(entry)
    except OSError as e:
        logger.warning("Failed to read JSONL %s: %s", path, e)

    return entries


def _build_session(path: Path, entries: list[dict], summaries: dict[str, str]) -> ChatSession | None:
    """Build session metadata from a file's entries.

    Returns None for files without a user message.
    """
    session_id = ""
    project_path = ""
    first_user_entry = None
    message_count = 0
    last_updated = ""
    last_uuid = ""

    for entry in entries:
        entry_type = entry.get("type")
        if entry_type == "summary":
            continue

        if not session_id and entry.get("sessionId"):
            session_id = entry["sessionId"]
            project_path = entry.get("cwd") or ""

        if entry_type in MESSAGE_TYPES:
            message_count += 1
            last_updated = entry.get("timestamp") or last_updated
            last_uuid = entry.get("uuid") or last_uuid
            if first_user_entry is None and entry_type == "user":
                first_user_entry = entry

    if first_user_entry is None:
        logger.debug("No user message in %s", path)
        return None

    first_message = _entry_to_message(first_user_entry)
    title = summaries.get(last_uuid) or generate_title(message_text(first_message))

    return ChatSession(
        id=session_id or path.stem,
        title=title,
        timestamp=first_message.timestamp,
        project_path=project_path,
        message_count=message_count,
        last_updated=last_updated or first_message.timestamp,
    )


def _entry_to_message(entry: dict) -> ChatMessage:
    msg_data = entry.get("message") or {}
    content = msg_data.get("content")

    if content is None:
        content = ""
    elif not isinstance(content, (str, list)):
        # A lone segment or scalar; keep it as a one-item segment list.
        content = [content]

    if isinstance(content, list):
        blocks = []
        for block in content:
            if isinstance(block, dict):
                blocks.append(dict(block))
            elif isinstance(block, str):
                blocks.append({"type": "text", "text": block})
            else:
                # Classified as unrecognized downstream, never dropped.
                blocks.append(block)

        # The structured tool result lives on the line, not on the block.
        tool_use_result = entry.get("toolUseResult")
        if entry.get("type") == "user" and tool_use_result is not None:
            for block in blocks:
                if resolve_tag(block) == "tool_result":
                    block["tool_use_result"] = tool_use_result
        content = blocks

    uuid = entry.get("uuid", "")
    message_id = msg_data.get("id")
    if message_id:
        uuid = f"{uuid}#{message_id}"

    return ChatMessage(
        uuid=uuid,
        parent_uuid=entry.get("parentUuid"),
        timestamp=entry.get("timestamp", ""),
        message_type=entry.get("type", ""),
        content=content,
        cwd=entry.get("cwd"),
        version=entry.get("version"),
        model=msg_data.get("model"),
    )


def _same_response(previous: ChatMessage, message: ChatMessage, message_id: str) -> bool:
    return (
        previous.message_type == "assistant"
        and message.message_type == "assistant"
        and previous.uuid.endswith(f"#{message_id}")
    )


def _answers_tool_calls(previous: ChatMessage, message: ChatMessage) -> bool:
    """True for a user line carrying tool results for the assistant turn before it."""
    if message.message_type != "user" or isinstance(message.content, str):
        return False
    if not any(resolve_tag(block) == "tool_result" for block in message.content):
        return False
    return previous.message_type == "assistant" and has_tool_calls(previous)


def _as_blocks(content) -> list[dict]:
    if isinstance(content, str):
        return [{"type": "text", "text": content}] if content else []
    return content


def _append_content(previous: ChatMessage, content) -> None:
    previous.content = _as_blocks(previous.content) + _as_blocks(content)


def _attach_tool_results(previous: ChatMessage, blocks: list[dict]) -> None:
    """Place each tool result right after the tool call it answers."""
    merged = list(previous.content)
    for block in blocks:
        position = len(merged)
        tool_use_id = block.get("tool_use_id") if resolve_tag(block) == "tool_result" else None
        if tool_use_id:
            for i, existing in enumerate(merged):
                if resolve_tag(existing) == "tool_use" and existing.get("id") == tool_use_id:
                    position = i + 1
                    while position < len(merged) and resolve_tag(merged[position]) == "tool_result":
                        position += 1
                    break
        merged.insert(position, block)
    previous.content = merged


def _file_has_session(path: Path, session_id: str) -> bool:
    try:
        with path.open(encoding="utf-8") as f:
            for line in f:
                if session_id not in line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(entry, dict) and entry.get("sessionId") == session_id:
                    return True
    except OSError as e:
        logger.warning("Failed to read JSONL %s: %s", path, e)
    return False


def _find_matches(message: ChatMessage, query_lower: str) -> list[tuple[str, str]]:
    """Return (match_type, snippet) for every field of a message matching the query."""
    if isinstance(message.content, str):
        text = repair(message.content)
        return [("content", _snippet(text, query_lower))] if query_lower in text.lower() else []

    matches = []

    def check(match_type: str, text: str | None) -> None:
        if text and query_lower in text.lower():
            matches.append((match_type, _snippet(text, query_lower)))

    for block in message.content:
        segment = classify(block)
        if isinstance(segment, TextSegment):
            check("content", repair(segment.body))
        elif isinstance(segment, ReasoningTrace):
            check("thinking", segment.body)
        elif isinstance(segment, ToolInvocation):
            if query_lower in segment.name.lower():
                matches.append(("tool_name", f"Tool: {segment.name}"))
            if segment.input is not None:
                check("tool_input", json.dumps(segment.input, ensure_ascii=False))
        elif isinstance(segment, ToolOutput):
            check("tool_result", segment.raw_text)
            if segment.structured_payload is not None:
                check("tool_structured_result", json.dumps(segment.structured_payload, ensure_ascii=False))

    return matches


def _snippet(text: str, query_lower: str) -> str:
    """Cut a window of text around the first match, marking trimmed ends."""
    pos = text.lower().find(query_lower)
    if pos < 0:
        snippet = text[:SNIPPET_FALLBACK_LENGTH]
        return snippet + ("..." if len(text) > SNIPPET_FALLBACK_LENGTH else "")

    start = max(0, pos - SNIPPET_CONTEXT)
    end = min(len(text), pos + len(query_lower) + SNIPPET_CONTEXT)
    prefix = "..." if start > 0 else ""
    suffix = "..." if end < len(text) else ""
    return f"{prefix}{text[start:end]}{suffix}"
