"""Knowledge base commands."""

from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..knowledge import KnowledgeBase
from . import app
from ._common import console


@app.command()
def patterns(
    language: Optional[str] = typer.Option(
        None, "--language", "-l", help="Only patterns for this language"
    ),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Free-text search"),
):
    """List or search the catalogued error patterns."""
    kb = KnowledgeBase()
    if search:
        found = kb.search_patterns(search)
        if language:
            scoped = {p.id for p in kb.get_patterns_by_language(language)}
            found = [p for p in found if p.id in scoped]
    elif language:
        found = kb.get_patterns_by_language(language)
    else:
        found = kb.get_all_patterns()

    if not found:
        console.print("[yellow]No matching patterns[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Language")
    table.add_column("Category")
    table.add_column("Description")
    table.add_column("Solutions", justify="right")
    for p in found:
        table.add_row(
            p.id,
            p.language,
            ", ".join(c.value for c in p.matchers.categories),
            escape(p.description),
            str(len(kb.get_solutions(p.id))),
        )
    console.print(table)
