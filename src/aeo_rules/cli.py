"""CLI interface for aeo-rules."""

import asyncio
import json
import logging
import sys
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .fetcher import FetchError, fetch_page
from .llm import PROVIDERS, StructuredOutputProvider, get_provider
from .models import EvidenceType, IssueSeverity, PageContent, RuleResult
from .registry import default_registry
from .scoring import PageScore, evaluate_rule, score_page

console = Console()

COMMANDS = ["scan", "check-url", "rules", "--help", "--version"]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def evidence_style(kind: EvidenceType) -> str:
    """Get Rich style for an evidence type."""
    return {
        EvidenceType.SUCCESS: "green",
        EvidenceType.INFO: "blue",
        EvidenceType.WARNING: "yellow",
        EvidenceType.ERROR: "red",
    }.get(kind, "white")


def evidence_icon(kind: EvidenceType) -> str:
    return {
        EvidenceType.SUCCESS: "✓",
        EvidenceType.INFO: "ℹ",
        EvidenceType.WARNING: "⚠",
        EvidenceType.ERROR: "✗",
    }.get(kind, "•")


def severity_style(severity: IssueSeverity) -> str:
    return {
        IssueSeverity.CRITICAL: "bold red",
        IssueSeverity.HIGH: "red",
        IssueSeverity.MEDIUM: "yellow",
        IssueSeverity.LOW: "blue",
    }.get(severity, "white")


def score_color(score: int) -> str:
    """Get color for a score value."""
    if score >= 80:
        return "green"
    elif score >= 60:
        return "yellow"
    elif score >= 40:
        return "orange1"
    else:
        return "red"


def print_score_bar(score: int, width: int = 20) -> Text:
    """Create a visual score bar."""
    filled = int((score / 100) * width)
    empty = width - filled
    color = score_color(score)

    bar = Text()
    bar.append("█" * filled, style=color)
    bar.append("░" * empty, style="dim")
    bar.append(f" {score}/100", style=f"bold {color}")
    return bar


def print_rule_result(result: RuleResult, verbose: bool = False) -> None:
    """Print one rule result: score, evidence narrative, issues."""
    console.print()
    console.print(f"  [bold]{result.rule_name}[/bold] ", end="")
    console.print(print_score_bar(result.score))

    for item in result.evidence:
        if not verbose and item.type in (EvidenceType.SUCCESS, EvidenceType.INFO) and item.topic != "Score Calculation":
            continue
        style = evidence_style(item.type)
        delta = item.metadata.get("score")
        suffix = f" [dim]({delta:+d})[/dim]" if delta and item.topic != "Score Calculation" else ""
        console.print(f"    [{style}]{evidence_icon(item.type)}[/] {item.message}{suffix}")
        if verbose and item.metadata.get("code"):
            console.print(f"      [dim]{item.metadata['code']}[/dim]")

    for issue in result.issues:
        style = severity_style(issue.severity)
        console.print(f"    [{style}]{issue.severity.value.upper():<8}[/] {issue.description}")
        console.print(f"      [cyan]→ {issue.recommendation}[/cyan]")


def print_page_score(page: PageScore, fetch_time_ms: int, verbose: bool = False) -> None:
    """Print the page report."""
    console.print()
    console.print(Panel(
        f"[bold]{page.url}[/bold]\n"
        f"[dim]Fetched in {fetch_time_ms}ms, scored in {page.duration_ms}ms[/dim]",
        title="🔍 AEO Rules",
        border_style="blue"
    ))

    console.print()
    console.print("  AEO Score: ", end="")
    console.print(print_score_bar(page.global_score, width=25))
    console.print()

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Rule", style="cyan")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Issues")

    for result in page.rule_results:
        issue_count = len(result.issues)
        table.add_row(
            result.rule_name,
            result.category.value.lower(),
            f"[{score_color(result.score)}]{result.score}/100[/]",
            f"[yellow]{issue_count}[/yellow]" if issue_count else "[green]OK[/green]",
        )
    console.print(table)

    for result in page.rule_results:
        print_rule_result(result, verbose=verbose)

    quick_wins = page.quick_wins
    if quick_wins:
        console.print("\n[bold]🎯 Top Quick Wins:[/bold]\n")
        for i, (result, issue) in enumerate(quick_wins[:3], 1):
            console.print(f"  {i}. [bold]{issue.description}[/bold] [dim]({result.rule_name})[/dim]")
            console.print(f"     [cyan]{issue.recommendation}[/cyan]")
            console.print()

    console.print("[dim]─" * 50 + "[/dim]")
    console.print(f"[dim]aeo-rules v{__version__}[/dim]")
    console.print()


def build_provider(name: str, model: Optional[str], timeout: float) -> Optional[StructuredOutputProvider]:
    if name == "none":
        return None
    provider = get_provider(name, model=model, timeout=timeout)
    if not provider.is_configured():
        console.print(
            f"[yellow]Warning:[/yellow] {provider.api_key_env[0]} not set, "
            f"running without AI-assisted checks"
        )
        return None
    return provider


provider_option = click.option(
    "--provider",
    type=click.Choice(["none", *PROVIDERS]),
    default="none",
    envvar="AEO_RULES_PROVIDER",
    show_default=True,
    help="LLM provider for AI-assisted checks",
)
model_option = click.option("--model", envvar="AEO_RULES_MODEL", help="Override the provider's default model")


@click.group(invoke_without_command=True)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    envvar="AEO_RULES_LOG_LEVEL",
    help="Logging verbosity (stderr)",
)
@click.pass_context
@click.version_option(version=__version__)
def cli(ctx, log_level: str):
    """AEO Rules - score pages for AI answer engine visibility.

    \b
    Quick start:
        aeo-rules scan example.com
        aeo-rules check-url https://example.com/Some_Page
    """
    configure_logging(log_level)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("url")
@click.option("-v", "--verbose", is_flag=True, help="Show all evidence, not just problems")
@click.option("-t", "--timeout", default=30.0, help="Request timeout in seconds")
@click.option("--page-type", help="Only run rules that apply to this page type")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@provider_option
@model_option
def scan(url: str, verbose: bool, timeout: float, page_type: Optional[str], json_output: bool,
         provider: str, model: Optional[str]):
    """Fetch a page and score it with every rule.

    \b
    Examples:
        aeo-rules scan stripe.com
        aeo-rules scan example.com --verbose
        aeo-rules scan example.com --provider openai --json
    """
    registry = default_registry(build_provider(provider, model, timeout), model)

    with console.status(f"[bold blue]Scanning {url}...[/bold blue]"):
        try:
            content, fetch_time_ms = fetch_page(url, timeout=timeout)
        except FetchError as e:
            console.print(f"\n[red]Error:[/red] {e}")
            sys.exit(1)
        page = asyncio.run(score_page(registry, content.url, content, page_type))

    if json_output:
        output = page.to_dict()
        output["fetchTimeMs"] = fetch_time_ms
        click.echo(json.dumps(output, indent=2, ensure_ascii=False))
    else:
        print_page_score(page, fetch_time_ms, verbose=verbose)


@cli.command("check-url")
@click.argument("url")
@click.option("-v", "--verbose", is_flag=True, help="Show all evidence, not just problems")
@click.option("-t", "--timeout", default=30.0, help="LLM request timeout in seconds")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@provider_option
@model_option
def check_url(url: str, verbose: bool, timeout: float, json_output: bool, provider: str, model: Optional[str]):
    """Score the structure of a URL without fetching it.

    \b
    Examples:
        aeo-rules check-url https://example.com/blog/my-post
        aeo-rules check-url "http://example.com/Some_Page/With Spaces"
    """
    registry = default_registry(build_provider(provider, model, timeout), model)
    rule = registry.get("url_structure")
    result = asyncio.run(evaluate_rule(rule, url, PageContent(url=url)))

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_rule_result(result, verbose=verbose)
        console.print()


@cli.command("rules")
def list_rules():
    """List the available rules."""
    registry = default_registry()
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Impact", justify="right")
    table.add_column("Level")

    for rule in registry.all():
        table.add_row(
            rule.id,
            rule.name,
            rule.category.value.lower(),
            str(rule.config.impact_score),
            "domain" if rule.config.is_domain_level else "page",
        )
    console.print(table)


# Convenience: allow `aeo-rules URL` as shortcut for `aeo-rules scan URL`
def main():
    """Entry point that handles both `aeo-rules URL` and `aeo-rules scan URL`."""
    args = sys.argv[1:]

    if args and not args[0].startswith('-') and args[0] not in COMMANDS:
        if '.' in args[0] or args[0] == 'localhost':
            sys.argv.insert(1, 'scan')

    cli()


if __name__ == "__main__":
    main()
