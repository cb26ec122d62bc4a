"""Classification of raw message content into typed segments.

Producers have written content segments in several shapes over time: the
type tag has lived under more than one field name, most payload fields are
optional, and tool results carry either a plain string or a list of
sub-blocks. Everything here is total. A segment that cannot be classified
becomes ``Unrecognized`` with its fields intact, so the renderer can show it
instead of dropping it.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .core import ChatMessage, MessageContent
from .text import repair

# Checked in order; the first non-empty string wins.
TYPE_TAG_FIELDS = ("block_type", "type")

UNKNOWN_TAG = "unknown"


@dataclass(frozen=True)
class TextSegment:
    """Plain text written by the user or the assistant."""

    body: str
    kind = "text"


@dataclass(frozen=True)
class ToolInvocation:
    """A call the assistant made to a named tool."""

    name: str
    input: Any = None
    tool_use_id: Optional[str] = None
    kind = "tool_use"


@dataclass(frozen=True)
class ToolOutput:
    """The result returned for a tool call, matched by correlation id."""

    correlation_id: Optional[str] = None
    raw_text: Optional[str] = None
    structured_payload: Any = None
    kind = "tool_result"


@dataclass(frozen=True)
class ReasoningTrace:
    """The assistant's reasoning before it answered."""

    body: str
    kind = "thinking"


@dataclass(frozen=True)
class Unrecognized:
    """A segment of unknown shape, kept whole for display."""

    tag: str
    fields: dict = field(default_factory=dict)
    kind = "unknown"


ClassifiedSegment = Union[TextSegment, ToolInvocation, ToolOutput, ReasoningTrace, Unrecognized]


def resolve_tag(raw: Any) -> str:
    """Return the effective type tag of a raw segment."""
    if not isinstance(raw, Mapping):
        return UNKNOWN_TAG
    for name in TYPE_TAG_FIELDS:
        value = raw.get(name)
        if isinstance(value, str) and value:
            return value
    return UNKNOWN_TAG


def classify(raw: Any) -> ClassifiedSegment:
    """Resolve a raw content segment into one of the typed segment variants."""
    if not isinstance(raw, Mapping):
        return Unrecognized(tag=UNKNOWN_TAG, fields={"value": raw})

    tag = resolve_tag(raw)

    if tag == "text":
        return TextSegment(body=_string(raw.get("text")))

    if tag == "tool_use":
        return ToolInvocation(
            name=_string(raw.get("name")) or "unknown",
            input=raw.get("input"),
            tool_use_id=raw.get("id") or raw.get("tool_use_id"),
        )

    if tag == "tool_result":
        return ToolOutput(
            correlation_id=raw.get("tool_use_id"),
            raw_text=_tool_result_text(raw.get("content")),
            structured_payload=raw.get("tool_use_result"),
        )

    if tag == "thinking":
        return ReasoningTrace(body=_string(raw.get("thinking")))

    return Unrecognized(tag=tag, fields=dict(raw))


def normalize_content(content: MessageContent) -> Union[str, list[ClassifiedSegment]]:
    """Build the display model of a message body.

    Plain content becomes repaired text. Segment content becomes the list of
    classified segments in their original order, with text bodies repaired.
    """
    if isinstance(content, str):
        return repair(content)

    if isinstance(content, list):
        segments = []
        for raw in content:
            segment = classify(raw)
            if isinstance(segment, TextSegment):
                segment = TextSegment(body=repair(segment.body))
            segments.append(segment)
        return segments

    # Neither shape; keep it visible rather than guessing.
    return [Unrecognized(tag=UNKNOWN_TAG, fields={"content": content})]


def message_text(message: ChatMessage) -> str:
    """Return the repaired plain text of a message, ignoring tool data."""
    if isinstance(message.content, str):
        return repair(message.content)

    parts = [
        block["text"] for block in message.content
        if isinstance(block, Mapping) and isinstance(block.get("text"), str) and block["text"]
    ]
    return repair("\n".join(parts))


def has_tool_calls(message: ChatMessage) -> bool:
    if isinstance(message.content, str):
        return False
    return any(
        isinstance(block, Mapping) and resolve_tag(block) == "tool_use"
        for block in message.content
    )


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _tool_result_text(content: Any) -> Optional[str]:
    """Flatten tool result content to text.

    Newer producers write a list of sub-blocks (text, image, ...) instead of
    a single string.
    """
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return None

    parts = []
    for sub in content:
        if isinstance(sub, str):
            parts.append(sub)
        elif isinstance(sub, Mapping):
            if sub.get("type") == "image":
                parts.append("[Image]")
            elif isinstance(sub.get("text"), str):
                parts.append(sub["text"])
    return "\n".join(parts)
