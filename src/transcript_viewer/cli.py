"""CLI entry point for transcript-viewer."""

import logging

import click
import uvicorn

from .backends.claude_code import ClaudeCodeProvider
from .export import session_to_json, session_to_markdown


@click.group()
def main():
    """Browse Claude Code transcripts."""
    pass


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level.",
)
def serve(port: int, host: str, log_level: str):
    """Start the JSON API server."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    click.echo(f"Starting transcript-viewer on http://{host}:{port}")
    uvicorn.run("transcript_viewer.server:app", host=host, port=port, reload=False, log_level=log_level)


@main.command()
@click.argument("session_id")
@click.option("--format", "fmt", default="md", type=click.Choice(["md", "json"]), help="Export format.")
def export(session_id: str, fmt: str):
    """Print a session as Markdown or JSON."""
    provider = ClaudeCodeProvider()
    session = next(
        (s for p in provider.list_projects() for s in p.chat_sessions if s.id == session_id),
        None,
    )
    if session is None:
        raise click.ClickException(f"Session not found: {session_id}")

    messages = provider.get_session_messages(session_id)
    if fmt == "json":
        click.echo(session_to_json(session, messages))
    else:
        click.echo(session_to_markdown(session, messages))
