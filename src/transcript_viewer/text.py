"""Repairs for raw message text."""

BACKSPACE = "\b"

TITLE_MAX_LENGTH = 50


def repair(raw: str) -> str:
    """Apply backspace characters to the text they were typed into.

    Each backspace deletes the character before it in the repaired output.
    A backspace with nothing before it is dropped.
    """
    if BACKSPACE not in raw:
        return raw

    result: list[str] = []
    for char in raw:
        if char == BACKSPACE:
            if result:
                result.pop()
        else:
            result.append(char)
    return "".join(result)


def generate_title(text: str) -> str:
    """Derive a session title from the first user message."""
    content = repair(text).strip()
    if not content:
        return "Untitled Chat"

    # Skip command markup like <command-name>/init</command-name>
    if content.startswith("<"):
        content = next(
            (line for line in content.splitlines()
             if line.strip() and not line.strip().startswith("<")),
            content,
        )

    first_line = content.splitlines()[0]
    if len(first_line) <= TITLE_MAX_LENGTH:
        return first_line
    return first_line[:TITLE_MAX_LENGTH - 3] + "..."
