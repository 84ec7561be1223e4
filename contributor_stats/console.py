#!/usr/bin/env python3
"""
Colored console messaging for the command-line tools.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .models import AggregateResult

RULE = "=" * 60
THIN_RULE = "-" * 60


class Reporter:
    """Prints progress and results of a run to the terminal."""

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def usage(self, prog: str, unique: bool = False) -> None:
        self.console.print("[yellow]Usage:[/yellow]")
        self.console.print("  Provide repositories as arguments:")
        self.console.print(f"    {escape(prog)} <owner1>/<repo1> <owner2>/<repo2>")
        self.console.print("\n  Or pipe a list of repositories (one per line):")
        self.console.print(f"    cat path/to/repos.txt | {escape(prog)}")
        if unique:
            self.console.print(
                "\n[yellow]This tool calculates and lists the UNIQUE contributors across all repos.[/yellow]"
            )
        else:
            self.console.print("\n[yellow]Requires the 'PAT' environment variable to be set.[/yellow]")

    def fatal(self, message: str, hint: Optional[str] = None) -> None:
        self.err_console.print(f"[red]Error: {escape(message)}[/red]")
        if hint:
            self.err_console.print(hint)

    def cancelled(self) -> None:
        self.console.print("\n[yellow]Operation cancelled by user[/yellow]")

    def skipped(self, message: str) -> None:
        self.console.print(f"-> [yellow]{escape(message)}[/yellow]")

    def processing(self, repository: str) -> None:
        self.console.print(f"Processing [cyan]{escape(repository)}[/cyan]...")

    def fetching(self, repository: str) -> None:
        self.console.print(f"Fetching all contributors for [cyan]{escape(repository)}[/cyan]...")

    def count_success(self, count: int) -> None:
        self.console.print(f"   [green]Success:[/green] Found {count} contributors.")

    def error(self, message: str) -> None:
        self.console.print(f"   [red]Error:[/red] {escape(message)}")

    def progress(self) -> None:
        self.console.print(".", end="")

    def end_repository(self) -> None:
        self.console.print()

    def count_summary(self, output_dir: Optional[str]) -> None:
        self.console.print("\n[green]Done.[/green]")
        if output_dir:
            self.console.print(
                f"Raw JSON responses and headers have been saved in the [yellow]{escape(output_dir)}/[/yellow] directory."
            )
            self.console.print("This directory is not automatically cleaned up.")

    def aggregate_start(self, repository_count: int, output_dir: Optional[str]) -> None:
        self.console.print(f"Starting contributor fetch for {repository_count} repositories...")
        if output_dir:
            self.console.print(f"This may take a while. JSON responses will be saved in {escape(output_dir)}/")
        self.console.print(THIN_RULE)

    def aggregate_summary(self, result: AggregateResult, output_dir: Optional[str]) -> None:
        self.console.print(THIN_RULE)
        self.console.print("All repositories processed. Calculating unique contributors...")

        if result.is_empty:
            self.console.print("[yellow]No contributors found or all repositories failed.[/yellow]")
            return

        self.console.print(Panel("Analysis Complete!", style="bold green", expand=False))
        self.console.print(
            f"Total unique contributors across all provided repositories: [yellow]{result.unique_count}[/yellow]"
        )
        self.console.print(RULE)
        self.console.print("[cyan]Unique Contributor Logins (alphabetical):[/cyan]")
        for login in result.logins:
            self.console.print(escape(login))
        self.console.print(RULE)
        if output_dir:
            self.console.print(f"Raw JSON responses are saved in the [yellow]{escape(output_dir)}/[/yellow] directory.")
