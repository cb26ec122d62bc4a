"""Serialization and export of normalized transcripts."""

import json

from .content import (
    ClassifiedSegment,
    ReasoningTrace,
    TextSegment,
    ToolInvocation,
    ToolOutput,
    normalize_content,
)
from .core import ChatMessage, ChatSession, ProjectFolder, SearchResult
from .tasks import extract_tasks, task_progress

TASK_STATUS_MARKS = {"completed": "x", "in_progress": "~", "pending": " "}


def session_to_dict(session: ChatSession) -> dict:
    return {
        "id": session.id,
        "title": session.title,
        "timestamp": session.timestamp,
        "project_path": session.project_path,
        "message_count": session.message_count,
        "last_updated": session.last_updated,
    }


def project_to_dict(project: ProjectFolder) -> dict:
    return {
        "name": project.name,
        "path": project.path,
        "chat_sessions": [session_to_dict(s) for s in project.chat_sessions],
    }


def search_result_to_dict(result: SearchResult) -> dict:
    return {
        "session_id": result.session_id,
        "message_uuid": result.message_uuid,
        "snippet": result.snippet,
        "match_type": result.match_type,
    }


def segment_to_dict(segment: ClassifiedSegment) -> dict:
    """Convert a classified segment to a JSON-serializable dict tagged by kind."""
    if isinstance(segment, TextSegment):
        return {"kind": segment.kind, "body": segment.body}
    if isinstance(segment, ToolInvocation):
        return {
            "kind": segment.kind,
            "name": segment.name,
            "input": segment.input,
            "tool_use_id": segment.tool_use_id,
        }
    if isinstance(segment, ToolOutput):
        return {
            "kind": segment.kind,
            "correlation_id": segment.correlation_id,
            "raw_text": segment.raw_text,
            "structured_payload": segment.structured_payload,
            "tasks": extract_tasks(segment),
        }
    if isinstance(segment, ReasoningTrace):
        return {"kind": segment.kind, "body": segment.body}
    return {"kind": segment.kind, "tag": segment.tag, "fields": segment.fields}


def message_to_dict(message: ChatMessage) -> dict:
    """Convert a message to a dict whose content is the normalized display model."""
    normalized = normalize_content(message.content)
    if isinstance(normalized, str):
        content = {"kind": "plain", "text": normalized}
    else:
        content = {"kind": "segments", "segments": [segment_to_dict(s) for s in normalized]}

    return {
        "uuid": message.uuid,
        "parent_uuid": message.parent_uuid,
        "timestamp": message.timestamp,
        "message_type": message.message_type,
        "content": content,
        "tool_use_id": message.tool_use_id,
        "cwd": message.cwd,
        "version": message.version,
        "model": message.model,
    }


def session_to_markdown(session: ChatSession, messages: list[ChatMessage]) -> str:
    """Export a session and its messages as Markdown."""
    lines = [f"# {session.title}", ""]

    if session.project_path:
        lines.append(f"**Project:** {session.project_path}")
    if session.timestamp:
        lines.append(f"**Created:** {session.timestamp}")
    if session.last_updated:
        lines.append(f"**Updated:** {session.last_updated}")
    lines.append(f"**Messages:** {session.message_count}")
    lines.extend(["", "---", ""])

    for msg in messages:
        ts = f" ({msg.timestamp})" if msg.timestamp else ""
        lines.append(f"## {msg.message_type.capitalize()}{ts}")
        lines.append("")

        normalized = normalize_content(msg.content)
        if isinstance(normalized, str):
            lines.append(normalized)
        else:
            for segment in normalized:
                lines.extend(_segment_to_markdown(segment))
                lines.append("")
        lines.extend(["", "---", ""])

    return "\n".join(lines)


def session_to_json(session: ChatSession, messages: list[ChatMessage]) -> str:
    """Export a session and its normalized messages as JSON."""
    data = {
        "session": session_to_dict(session),
        "messages": [message_to_dict(m) for m in messages],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def _segment_to_markdown(segment: ClassifiedSegment) -> list[str]:
    if isinstance(segment, TextSegment):
        return [segment.body]

    if isinstance(segment, ReasoningTrace):
        return [f"> {line}" if line else ">" for line in segment.body.splitlines()]

    if isinstance(segment, ToolInvocation):
        lines = [f"**Tool:** {segment.name}"]
        if segment.input is not None:
            lines.extend(["", "```json", json.dumps(segment.input, indent=2, ensure_ascii=False), "```"])
        return lines

    if isinstance(segment, ToolOutput):
        tasks = extract_tasks(segment)
        if tasks is not None:
            completed, total = task_progress(tasks)
            lines = [f"**Todo List Updated** ({completed}/{total} completed)", ""]
            for task in tasks:
                if isinstance(task, dict):
                    mark = TASK_STATUS_MARKS.get(task.get("status"), " ")
                    lines.append(f"- [{mark}] {task.get('content', '')} ({task.get('priority', '')})")
            return lines
        if segment.raw_text:
            return ["**Tool Result:**", "", "```", segment.raw_text, "```"]
        return ["**Tool Result:** (no content)"]

    # Unrecognized: show the raw fields so the shape can be diagnosed.
    return [
        f"**Unrecognized segment** `{segment.tag}`",
        "",
        "```json",
        json.dumps(segment.fields, indent=2, ensure_ascii=False, default=str),
        "```",
    ]
