"""Shared test fixtures for transcript-viewer."""

import json

import pytest

from transcript_viewer.backends.claude_code import ClaudeCodeProvider

TODOS = [
    {"id": "1", "content": "Read the auth module", "status": "completed", "priority": "high"},
    {"id": "2", "content": "Split token validation", "status": "in_progress", "priority": "medium"},
    {"id": "3", "content": "Write tests", "status": "pending", "priority": "low"},
]


def _line(**fields) -> str:
    return json.dumps(fields)


def _base(session_id: str, cwd: str, uuid: str, parent: str | None, timestamp: str) -> dict:
    return {
        "sessionId": session_id,
        "cwd": cwd,
        "version": "1.0.51",
        "uuid": uuid,
        "parentUuid": parent,
        "timestamp": timestamp,
    }


@pytest.fixture
def tmp_claude_code_dir(tmp_path):
    """Create a synthetic Claude Code projects directory with realistic JSONL.

    myapp/session-001.jsonl:
    - summary line titling the session
    - user prompt
    - one assistant response split over two lines (thinking, text + Read)
    - tool_result for Read
    - assistant TodoWrite call and its tool_result with toolUseResult
    - file-history-snapshot (skipped)
    - user prompt containing backspaces
    - assistant reply
    myapp/session-002.jsonl: prompt starting with command markup
    myapp/orphan.jsonl: no user message (not a session)
    other/session-004.jsonl: resumed session whose lines carry id session-003,
    plus one malformed line
    """
    projects = tmp_path / "projects"
    myapp = projects / "-Users-testuser-dev-myapp"
    other = projects / "-Users-testuser-dev-other"
    myapp.mkdir(parents=True)
    other.mkdir(parents=True)

    cwd = "/Users/testuser/dev/myapp"
    lines = [
        _line(type="summary", summary="Refactor auth module", leafUuid="uuid-008"),
        _line(
            type="user",
            message={"role": "user", "content": "Help me refactor the auth module"},
            **_base("session-001", cwd, "uuid-001", None, "2025-01-20T10:00:00Z"),
        ),
        _line(
            type="assistant",
            message={"id": "msg_01", "role": "assistant", "model": "claude-sonnet-4", "content": [
                {"type": "thinking", "thinking": "I should read the module before splitting validation out."},
            ]},
            **_base("session-001", cwd, "uuid-002", "uuid-001", "2025-01-20T10:00:10Z"),
        ),
        _line(
            type="assistant",
            message={"id": "msg_01", "role": "assistant", "model": "claude-sonnet-4", "content": [
                {"type": "text", "text": "Let me read the current code."},
                {"type": "tool_use", "id": "toolu_001", "name": "Read", "input": {"file_path": "/src/auth.ts"}},
            ]},
            **_base("session-001", cwd, "uuid-003", "uuid-002", "2025-01-20T10:00:12Z"),
        ),
        _line(
            type="user",
            message={"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_001",
                 "content": "export function authenticate(token: string) {\n  return jwt.verify(token);\n}"},
            ]},
            toolUseResult={"type": "text", "file": {"filePath": "/src/auth.ts", "numLines": 3}},
            **_base("session-001", cwd, "uuid-004", "uuid-003", "2025-01-20T10:00:13Z"),
        ),
        _line(
            type="assistant",
            message={"id": "msg_02", "role": "assistant", "model": "claude-sonnet-4", "content": [
                {"type": "tool_use", "id": "toolu_002", "name": "TodoWrite", "input": {"todos": TODOS}},
            ]},
            **_base("session-001", cwd, "uuid-005", "uuid-004", "2025-01-20T10:01:00Z"),
        ),
        _line(
            type="user",
            message={"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_002",
                 "content": "Todos have been modified successfully. Ensure that you continue to use the todo list to track your progress."},
            ]},
            toolUseResult={"oldTodos": [], "newTodos": TODOS},
            **_base("session-001", cwd, "uuid-006", "uuid-005", "2025-01-20T10:01:01Z"),
        ),
        _line(type="file-history-snapshot", messageId="uuid-006", snapshot={"trackedFileBackups": {}}),
        _line(
            type="user",
            message={"role": "user", "content": "Looks goof\bd, now split it"},
            **_base("session-001", cwd, "uuid-007", "uuid-006", "2025-01-20T10:05:00Z"),
        ),
        _line(
            type="assistant",
            message={"id": "msg_03", "role": "assistant", "model": "claude-sonnet-4", "content": [
                {"type": "text", "text": "Splitting the validation helpers now."},
            ]},
            **_base("session-001", cwd, "uuid-008", "uuid-007", "2025-01-20T10:05:10Z"),
        ),
    ]
    (myapp / "session-001.jsonl").write_text("\n".join(lines), encoding="utf-8")

    lines = [
        _line(
            type="user",
            message={"role": "user", "content": "<command-name>/init</command-name>\nInitialize the project docs"},
            **_base("session-002", cwd, "uuid-101", None, "2025-01-21T09:00:00Z"),
        ),
        _line(
            type="assistant",
            message={"id": "msg_10", "role": "assistant", "content": [{"type": "text", "text": "Created CLAUDE.md"}]},
            **_base("session-002", cwd, "uuid-102", "uuid-101", "2025-01-21T09:00:30Z"),
        ),
    ]
    (myapp / "session-002.jsonl").write_text("\n".join(lines), encoding="utf-8")

    (myapp / "orphan.jsonl").write_text(
        _line(
            type="assistant",
            message={"id": "msg_99", "role": "assistant", "content": [{"type": "text", "text": "Nobody asked"}]},
            **_base("orphan", cwd, "uuid-901", None, "2025-01-19T08:00:00Z"),
        ),
        encoding="utf-8",
    )

    other_cwd = "/Users/testuser/dev/other"
    lines = [
        _line(
            type="user",
            message={"role": "user", "content": "Write tests for the API endpoints, covering every error path we have today"},
            **_base("session-003", other_cwd, "uuid-201", None, "2025-01-22T08:00:00Z"),
        ),
        "{not json",
        _line(
            type="assistant",
            message={"id": "msg_20", "role": "assistant", "content": [
                {"type": "text", "text": "Running the existing suite first."},
                {"type": "tool_use", "id": "toolu_020", "name": "Bash", "input": {"command": "pytest -q"}},
            ]},
            **_base("session-003", other_cwd, "uuid-202", "uuid-201", "2025-01-22T08:00:20Z"),
        ),
    ]
    (other / "session-004.jsonl").write_text("\n".join(lines), encoding="utf-8")

    return projects


@pytest.fixture
def claude_provider(tmp_claude_code_dir):
    """A ClaudeCodeProvider reading the synthetic projects directory."""
    provider = ClaudeCodeProvider()
    provider.get_base_path = lambda: tmp_claude_code_dir
    return provider


@pytest.fixture
def todos():
    """The task list written by the TodoWrite call in session-001."""
    return [dict(t) for t in TODOS]


@pytest.fixture
def odd_claude_code_dir(tmp_path):
    """A project whose only session holds oddly shaped lines.

    - a user prompt
    - an assistant line whose message is a bare string (skipped)
    - an assistant line with non-object content blocks
    - a user line with null content
    - an assistant line whose content is a single object instead of a list
    """
    projects = tmp_path / "odd-projects"
    project = projects / "-Users-testuser-dev-odd"
    project.mkdir(parents=True)

    cwd = "/Users/testuser/dev/odd"
    lines = [
        _line(
            type="user",
            message={"role": "user", "content": "hello there"},
            **_base("session-odd", cwd, "uuid-301", None, "2025-01-23T08:00:00Z"),
        ),
        _line(type="assistant", message="oops", **_base("session-odd", cwd, "uuid-302", "uuid-301", "2025-01-23T08:00:05Z")),
        _line(
            type="assistant",
            message={"id": "msg_30", "role": "assistant", "content": [42, None, {"type": "text", "text": "hello back"}]},
            **_base("session-odd", cwd, "uuid-303", "uuid-301", "2025-01-23T08:00:10Z"),
        ),
        _line(
            type="user",
            message={"role": "user", "content": None},
            **_base("session-odd", cwd, "uuid-304", "uuid-303", "2025-01-23T08:00:20Z"),
        ),
        _line(
            type="assistant",
            message={"id": "msg_31", "role": "assistant", "content": {"type": "text", "text": "lone hello"}},
            **_base("session-odd", cwd, "uuid-305", "uuid-304", "2025-01-23T08:00:30Z"),
        ),
    ]
    (project / "session-odd.jsonl").write_text("\n".join(lines), encoding="utf-8")
    return projects


@pytest.fixture
def odd_provider(odd_claude_code_dir):
    """A ClaudeCodeProvider reading the oddly shaped project."""
    provider = ClaudeCodeProvider()
    provider.get_base_path = lambda: odd_claude_code_dir
    return provider
