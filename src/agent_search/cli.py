"""CLI interface for agent-search."""

import logging
import re
from datetime import datetime, timedelta
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agent_search.config import PROJECT_CONFIG_FILE, SearchSettings, parse_agents

app = typer.Typer(
    name="agent-search",
    help="Search across coding agent chat histories",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()

_AGO = re.compile(r"^(\d+)\s+(day|hour|week|month)s?\s+ago$")


def parse_date(value: str) -> datetime:
    """Parse an ISO date or a relative date like "3 days ago".

    Supports: ISO dates, "today", "yesterday", "N days/hours/weeks/months ago",
    "last week", "last month". Months count as 30 days.

    Raises:
        ValueError: If the value matches none of the supported forms
    """
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).astimezone()
    except ValueError:
        pass

    now = datetime.now().astimezone()
    lower = text.lower()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if lower == "today":
        return midnight
    if lower == "yesterday":
        return midnight - timedelta(days=1)
    if lower == "last week":
        return now - timedelta(weeks=1)
    if lower == "last month":
        return now - timedelta(days=30)

    match = _AGO.match(lower)
    if match:
        n, unit = int(match.group(1)), match.group(2)
        deltas = {
            "hour": timedelta(hours=n),
            "day": timedelta(days=n),
            "week": timedelta(weeks=n),
            "month": timedelta(days=30 * n),
        }
        return now - deltas[unit]

    raise ValueError(
        f'Unable to parse date: "{value}". Use ISO format (2024-01-01), '
        'or relative ("yesterday", "3 days ago", "last week").'
    )


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _load_settings() -> SearchSettings:
    try:
        return SearchSettings()
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(1) from None


def _resolve_readers(
    settings: SearchSettings,
    agent: str | None,
    all_agents: bool,
    sessions_dir: str | None,
) -> list:
    """Readers for the selected agents (--all, then --agent, then settings)."""
    from agent_search.sessions import get_reader

    selection = "all" if all_agents else (agent or settings.agents)
    try:
        agents = parse_agents(selection)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    # --sessions-dir only applies to the Claude Code reader
    claude_dir = Path(sessions_dir) if sessions_dir else settings.sessions_dir
    return [get_reader(a, claude_dir if a == "claude" else None) for a in agents]


def _parse_date_option(value: str | None, flag: str) -> datetime | None:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {flag}: {escape(str(e))}")
        raise typer.Exit(1) from None


# ============================================================================
# Commands
# ============================================================================


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query (regex unless --literal)"),
    role: str | None = typer.Option(None, "-r", "--role", help="Filter by message role (user|assistant|tool)"),
    context: int | None = typer.Option(None, "-c", "--context", min=0, help="Messages of context before/after each match"),
    work_dir: str | None = typer.Option(None, "-w", "--work-dir", help="Filter by work directory (substring match)"),
    limit: int | None = typer.Option(None, "-l", "--limit", min=0, help="Limit number of results (0 for unlimited)"),
    json_output: bool = typer.Option(False, "-j", "--json", help="Output results as JSON"),
    output_mode: str | None = typer.Option(None, "--output-mode", help="Output mode: snippet|full|summary"),
    snippet_size: int | None = typer.Option(None, "--snippet-size", min=0, help="Characters around each match in snippet mode"),
    max_content_length: int | None = typer.Option(None, "--max-content-length", min=0, help="Max chars per message in full mode (0 for unlimited)"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", min=0, help="Maximum total tokens (approximate)"),
    literal: bool = typer.Option(False, "--literal", help="Treat query as literal text (disable regex)"),
    since: str | None = typer.Option(None, "--since", help='Only messages after date (ISO, "yesterday", "3 days ago")'),
    before: str | None = typer.Option(None, "--before", help='Only messages before date (ISO, "yesterday", "3 days ago")'),
    agent: str | None = typer.Option(None, "-a", "--agent", help="Agents to search, comma-separated (claude,kimi,codex,opencode)"),
    all_agents: bool = typer.Option(False, "--all", help="Search all supported agents"),
    sessions_dir: str | None = typer.Option(None, "--sessions-dir", help="Claude Code projects directory"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """Search messages across agent chat histories."""
    _setup_logging(verbose)
    settings = _load_settings()
    defaults = settings.snippet_config()

    from pydantic import ValidationError

    from agent_search.format import format_results, format_results_json
    from agent_search.matcher import QueryError
    from agent_search.models import SearchOptions
    from agent_search.search import search_agents

    try:
        options = SearchOptions(
            query=query,
            role=role,
            context_lines=context if context is not None else settings.context_lines,
            work_dir_filter=work_dir,
            limit=limit if limit is not None else settings.limit,
            literal=literal,
            output_mode=output_mode or defaults.mode,
            snippet_size=snippet_size if snippet_size is not None else defaults.snippet_size,
            max_content_length=(
                max_content_length if max_content_length is not None else defaults.max_content_length
            ),
            max_tokens=max_tokens if max_tokens is not None else defaults.max_tokens,
            since=_parse_date_option(since, "--since"),
            before=_parse_date_option(before, "--before"),
        )
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        console.print(f"[red]Error:[/red] {escape(errors)}")
        raise typer.Exit(1) from None

    readers = _resolve_readers(settings, agent, all_agents, sessions_dir)
    try:
        result = search_agents(options, readers)
    except QueryError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    if json_output:
        typer.echo(format_results_json(result))
        return

    if result.total_matches == 0:
        console.print(f'No matches found for query: "{query}"', markup=False)
        console.print(
            f"Searched {result.searched_sessions} sessions across {len(result.agents)} agent(s)"
        )
        return

    console.print(format_results(result), markup=False, highlight=False, soft_wrap=True)


@app.command()
def sessions(
    work_dir: str | None = typer.Option(None, "-w", "--work-dir", help="Filter by work directory (substring match)"),
    limit: int | None = typer.Option(None, "-l", "--limit", min=0, help="Limit number of sessions (0 for unlimited)"),
    json_output: bool = typer.Option(False, "-j", "--json", help="Output as JSON"),
    agent: str | None = typer.Option(None, "-a", "--agent", help="Agents to list, comma-separated (claude,kimi,codex,opencode)"),
    all_agents: bool = typer.Option(False, "--all", help="List sessions of all supported agents"),
    sessions_dir: str | None = typer.Option(None, "--sessions-dir", help="Claude Code projects directory"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """List sessions, most recent first, with a topic preview."""
    _setup_logging(verbose)
    settings = _load_settings()

    from agent_search.format import agent_display_name, format_session_list_json
    from agent_search.search import list_agent_sessions

    readers = _resolve_readers(settings, agent, all_agents, sessions_dir)
    effective_limit = limit if limit is not None else settings.limit
    result = list_agent_sessions(readers, work_dir, effective_limit or None)

    if json_output:
        typer.echo(format_session_list_json(result))
        return

    if not result.sessions:
        console.print("[yellow]No sessions found.[/yellow]")
        raise typer.Exit(0)

    table = Table(
        title=f"{result.total_sessions} sessions",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Time", style="dim")
    table.add_column("Agent")
    table.add_column("Session", style="green")
    table.add_column("Work Dir")
    table.add_column("Messages", justify="right")
    table.add_column("Topic")

    for info in result.sessions:
        table.add_row(
            info.timestamp.strftime("%Y-%m-%d %H:%M"),
            agent_display_name(info.agent_type),
            info.session_id,
            info.work_dir,
            str(info.message_count),
            info.first_message or "",
        )

    console.print(table)
    hidden = result.total_sessions - len(result.sessions)
    if hidden > 0:
        console.print(f"... and {hidden} more sessions")


@app.command()
def info() -> None:
    """Display the effective search configuration."""
    settings = _load_settings()

    table = Table(title="agent-search Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Agents", ", ".join(settings.agent_list()))
    table.add_row("Sessions Directory", str(settings.sessions_dir))
    table.add_row("Output Mode", settings.output_mode)
    table.add_row("Snippet Size", str(settings.snippet_size))
    table.add_row("Max Content Length", str(settings.max_content_length) if settings.max_content_length else "unlimited")
    table.add_row("Max Tokens", str(settings.max_tokens) if settings.max_tokens else "unlimited")
    table.add_row("Context Messages", str(settings.context_lines))
    table.add_row("Result Limit", str(settings.limit) if settings.limit else "unlimited")
    table.add_row("Project Config", PROJECT_CONFIG_FILE if Path(PROJECT_CONFIG_FILE).exists() else "none")

    console.print(table)
    raise typer.Exit(0)


@app.command()
def init() -> None:
    """Create an agent-search.yaml project config in the current directory."""
    config_path = Path(PROJECT_CONFIG_FILE)
    if config_path.exists() and not typer.confirm(f"Overwrite existing {PROJECT_CONFIG_FILE}?", default=False):
        raise typer.Exit(0)

    config_path.write_text(
        "# agent-search project config\n"
        "# Environment variables (AGENT_SEARCH_*) and CLI flags take precedence.\n\n"
        "agents: claude\n"
        "# sessions_dir: ~/.claude/projects\n"
        "output_mode: snippet\n"
        "snippet_size: 200\n"
        "max_content_length: 500\n"
        "# max_tokens: 4000\n"
        "context: 0\n"
        "limit: 50\n"
    )
    console.print(f"[green]Created {PROJECT_CONFIG_FILE}[/green]")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
