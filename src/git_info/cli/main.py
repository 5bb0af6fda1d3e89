"""Main CLI interface for git-info."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from git_info.core.exceptions import GitInfoError
from git_info.core.repository import GitInfoRepository, find_repo_root

console = Console()


def get_repo_or_exit(ctx: click.Context) -> GitInfoRepository:
    """Build the repository for the current invocation or exit with an error."""
    try:
        project_root = find_repo_root(ctx.obj["repo_path"])
        repo = GitInfoRepository(project_root)
    except GitInfoError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort() from e

    ctx.call_on_close(repo.close)
    return repo


def _resolve_commit(repo: GitInfoRepository, commit_sha: Optional[str]) -> str:
    if commit_sha:
        return commit_sha

    latest = repo.get_latest_commit()
    if latest is None:
        console.print("[red]Error: Repository has no commits[/red]")
        raise click.Abort()
    return latest.sha


def _format_date(repo: GitInfoRepository, value) -> str:
    if value is None:
        return "-"
    return value.strftime(repo.config.display_date_format)


@click.group()
@click.version_option(package_name="git-info")
@click.option(
    "--repo",
    "repo_path",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Directory inside the git repository",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, repo_path: str, verbose: bool):
    """git-info - authorship history and deleted-line attribution."""
    ctx.ensure_object(dict)
    ctx.obj["repo_path"] = Path(repo_path).resolve()

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )


@main.command()
@click.option("--limit", type=int, default=None, help="Number of commits to show")
@click.pass_context
def log(ctx: click.Context, limit: Optional[int]):
    """Show recent commits."""
    repo = get_repo_or_exit(ctx)

    table = Table(title="Commits")
    table.add_column("SHA", style="cyan", no_wrap=True)
    table.add_column("Date", style="magenta")
    table.add_column("Author", style="green")
    table.add_column("Message")

    try:
        for commit in repo.get_commits(limit=limit):
            table.add_row(commit.short_sha, _format_date(repo, commit.date), escape(commit.author), escape(commit.message))
    except GitInfoError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort() from e

    console.print(table)


@main.command()
@click.argument("commit_sha", required=False)
@click.pass_context
def changes(ctx: click.Context, commit_sha: Optional[str]):
    """Show files changed by a commit (default: latest)."""
    repo = get_repo_or_exit(ctx)

    try:
        commit_sha = _resolve_commit(repo, commit_sha)
        for change in repo.get_commit_changes(commit_sha):
            console.print(f"[yellow]{change.status}[/yellow]\t{escape(change.path)}")
    except GitInfoError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort() from e


@main.command()
@click.argument("path")
@click.option("--limit", type=int, default=None, help="Number of commits to show")
@click.pass_context
def history(ctx: click.Context, path: str, limit: Optional[int]):
    """Show the commits that touched PATH."""
    repo = get_repo_or_exit(ctx)

    table = Table(title=f"History of {path}")
    table.add_column("SHA", style="cyan", no_wrap=True)
    table.add_column("Date", style="magenta")
    table.add_column("Author", style="green")
    table.add_column("Message")

    try:
        for entry in repo.get_file_history(path, limit=limit):
            table.add_row(entry.short_sha, _format_date(repo, entry.date), escape(entry.author), escape(entry.message))
    except GitInfoError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort() from e

    console.print(table)


@main.command()
@click.argument("path")
@click.pass_context
def blame(ctx: click.Context, path: str):
    """Show who last touched each line of PATH."""
    repo = get_repo_or_exit(ctx)

    table = Table(title=f"Blame of {path}")
    table.add_column("Line", style="cyan", justify="right")
    table.add_column("Author", style="green")
    table.add_column("Date", style="magenta")
    table.add_column("Content", overflow="fold")

    try:
        for line in repo.get_file_blame(path):
            table.add_row(str(line.line_number), escape(line.author), _format_date(repo, line.date), escape(line.content))
    except GitInfoError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort() from e

    console.print(table)


@main.command()
@click.argument("commit_sha", required=False)
@click.option("--file", "file_path", help="Only report deletions in this file")
@click.pass_context
def deleted(ctx: click.Context, commit_sha: Optional[str], file_path: Optional[str]):
    """Show lines deleted by a commit and who originally wrote them."""
    repo = get_repo_or_exit(ctx)

    try:
        commit_sha = _resolve_commit(repo, commit_sha)
        lines = list(repo.get_deleted_lines_with_authors(commit_sha, file_path))
        commit = repo.get_commit(commit_sha) if lines else None
    except GitInfoError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort() from e

    if not lines:
        console.print("No deleted lines.")
        return

    if commit is not None:
        title = f"Deleted lines in {file_path}" if file_path else "Deleted lines"
        console.print(
            Panel(
                escape(
                    f"Commit: {commit.sha}\n"
                    f"{_format_date(repo, commit.date)} - {commit.author}: {commit.message}"
                ),
                title=escape(title),
                style="cyan",
            )
        )

    for line in lines:
        console.print(f"[yellow]File: {escape(line.file_path)}[/yellow]")
        console.print(f"[red]- {line.line_number:>3}: {escape(line.text)}[/red]", highlight=False)
        console.print(f"Deleted by: {escape(line.deleted_by)}")
        console.print(f"Author:     {escape(line.original_author)}")
        console.print(f"Committed:  {_format_date(repo, line.original_date)}")
        console.print("-" * 60)

    console.print(f"\n[bold]Total deleted lines:[/bold] {len(lines)}")


if __name__ == "__main__":
    main()
