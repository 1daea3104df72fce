"""Typer-based CLI for chatdoc."""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table

from .auth import resolve_auth
from .config import ChatDocConfig
from .errors import ChatDocError
from .llm import ChatClient, build_request_body
from .transcript import ParseFlag, parse_transcript_text
from .transcript.writer import append_response, new_transcript

app = typer.Typer(
    name="chatdoc",
    help="chatdoc - talk to a language-model server through a plain-text transcript",
    add_completion=False,
)

console = Console()


@app.callback()
def _setup(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_document(file: Path) -> str:
    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(code=1)
    return file.read_text(encoding="utf-8")


@app.command()
def check(
    file: Path = typer.Argument(..., help="Transcript file"),
    header_only: bool = typer.Option(
        False,
        "--header-only",
        help="Only validate the header section",
    ),
):
    """Parse a transcript and summarize its structure."""
    document = _read_document(file)
    try:
        result = parse_transcript_text(document, header_only=header_only)
    except ChatDocError as e:
        console.print(f"[red]Error: {escape_markup(str(e))}[/red]")
        raise typer.Exit(code=1)

    header = result.header
    table = Table(title=str(file))
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Server Type", header.server_type)
    table.add_row("Server URL", header.server_url)
    table.add_row("Model ID", header.model_id)
    if header.use_auth is not None:
        table.add_row("Use Auth Token", str(header.use_auth).lower())
    if header.auth_key:
        table.add_row("Auth Token", "(set)")
    if header.show_thinking is not None:
        table.add_row("Show Reasoning", header.show_thinking)
    if header.system_prompt:
        table.add_row("System Prompt", escape_markup(header.system_prompt))
    for name, value in header.options.items():
        table.add_row(f"Option {escape_markup(name)}", escape_markup(value))
    console.print(table)

    if header_only:
        return

    answered = sum(1 for interaction in result.interactions if not interaction.is_open)
    console.print(f"[green]+[/green] {answered} answered message(s)")
    if result.pending is not None:
        console.print("[yellow]Last message is waiting for a reply[/yellow]")
    if ParseFlag.UNCLOSED_USER_MESSAGE in result.flags:
        console.print("[dim]Trailing user message has no closing '<<<'[/dim]")


@app.command()
def send(
    file: Path = typer.Argument(..., help="Transcript file"),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the request body instead of sending it",
    ),
):
    """Send the trailing user message and append the reply to the transcript."""
    document = _read_document(file)

    try:
        config = ChatDocConfig.from_env(start_dir=file.resolve().parent)
        result = parse_transcript_text(document)
        body = build_request_body(result)
        if dry_run:
            console.print_json(json.dumps(body))
            return
        token = resolve_auth(result, config.auth_token, config.auth_token_file)
        client = ChatClient(auth_token=token, timeout=config.request_timeout_seconds)
        with console.status(f"Waiting for {result.header.model_id}..."):
            reply = client.send(result)
        updated = append_response(
            document,
            reply.content,
            result,
            width=config.wrap_width,
            thinking=reply.thinking if result.header.show_thinking is not None else None,
        )
    except ChatDocError as e:
        console.print(f"[red]Error: {escape_markup(str(e))}[/red]")
        raise typer.Exit(code=1)

    file.write_text(updated, encoding="utf-8")
    console.print(f"[green]+[/green] Reply appended to {file}")


@app.command()
def new(
    file: Path = typer.Argument(..., help="Transcript file to create"),
    server_type: str = typer.Option(..., "--server-type", "-t", help="Ollama or OpenWebUI"),
    url: str = typer.Option(..., "--url", "-u", help="Server base URL"),
    model: str = typer.Option(..., "--model", "-m", help="Model identifier"),
    system_prompt: str = typer.Option(None, "--system-prompt", "-s", help="Optional system prompt"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Create a new transcript with a header and an empty prompt."""
    if file.exists() and not force:
        console.print(f"[red]Error: {file} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(code=1)
    file.write_text(
        new_transcript(server_type, url, model, system_prompt=system_prompt),
        encoding="utf-8",
    )
    console.print(f"[green]+[/green] Created transcript: {file}")


@app.command()
def version():
    """Show chatdoc version."""
    from . import __version__
    console.print(f"chatdoc v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
