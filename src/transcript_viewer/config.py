"""Path resolution and tunables."""

import os
from pathlib import Path

# Shorter queries match almost everything; the API answers them with no results.
SEARCH_MIN_QUERY_LENGTH = 2


def get_claude_code_path() -> Path:
    """Return the path to Claude Code's projects directory."""
    env = os.environ.get("TRANSCRIPT_VIEWER_CLAUDE_PATH")
    if env:
        return Path(env)

    return Path.home() / ".claude" / "projects"
