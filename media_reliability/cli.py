"""
Command-line interface for media-reliability.

Provides commands to check a registry, dry-run the matcher on ad-hoc
content and run the report handler against a live post.

Usage:
    media-reliability validate-sources sources.json
    media-reliability scan --sources sources.json --title "..." --url "..."
    media-reliability handle-post t3_abc123
"""

import asyncio
import sys
from pathlib import Path

import click

from media_reliability.observability.logging import setup_logging
from media_reliability.sources.registry import RegistryValidationError, load_sources_file


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Media Reliability - source reliability reports for Reddit submissions."""
    setup_logging(level="DEBUG" if debug else None)


@main.command("validate-sources")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate_sources(path: Path) -> None:
    """Validate a registry JSON file."""
    try:
        sources = load_sources_file(path)
    except RegistryValidationError as e:
        click.echo(click.style(str(e), fg="red"), err=True)
        sys.exit(1)

    tiered = sum(1 for s in sources if s.is_tiered)
    click.echo(click.style(f"✓ {len(sources)} sources valid ({tiered} tiered)", fg="green"))


@main.command()
@click.option(
    "--sources",
    "sources_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Registry JSON file (defaults to RELIABILITY_SOURCES / RELIABILITY_SOURCES_FILE)",
)
@click.option("--title", required=True, help="Post title")
@click.option("--url", default="", help="Post link (empty for a self-post)")
@click.option("--body", default=None, help="Post self-text")
@click.option("--analyze-body", is_flag=True, help="Also scan the body for names and handles")
def scan(
    sources_path: Path | None,
    title: str,
    url: str,
    body: str | None,
    analyze_body: bool,
) -> None:
    """Run the matcher on a title/url/body and print the report.

    Example:
        media-reliability scan --sources sources.json \\
            --title "Acme: big news" --url "https://www.acme.example/story"
    """
    from media_reliability.ingestion.post import process_post
    from media_reliability.ingestion.schemas import RedditPost
    from media_reliability.matching.matcher import SourceMatcher
    from media_reliability.matching.schemas import MatchOptions
    from media_reliability.reporting.comment import build_report, flair_text, should_flair
    from media_reliability.reporting.config import ReporterConfig

    try:
        if sources_path is not None:
            sources = load_sources_file(sources_path)
        else:
            sources = ReporterConfig().load_sources()
    except ValueError as e:
        click.echo(click.style(str(e), fg="red"), err=True)
        sys.exit(1)

    post = RedditPost(id="t3_scan", subreddit_name="scan", title=title, url=url, body=body)
    post_data = process_post(post)
    matched = SourceMatcher(sources, MatchOptions(analyze_body=analyze_body)).find(post_data.content)

    if matched is None:
        click.echo("No sources found")
        return

    click.echo(build_report(matched))
    if should_flair(post_data, matched):
        click.echo(f"\nFlair: {flair_text(matched)}")


@main.command("handle-post")
@click.argument("post_id")
def handle_post(post_id: str) -> None:
    """Run the report handler for one live post.

    Fetches the post, reports on it exactly as a new-submission event
    would, and prints the outcome.
    """
    from media_reliability.ingestion.schemas import PostSubmitEvent
    from media_reliability.reddit.client import RedditClient
    from media_reliability.reporting.service import ReportService

    async def run():
        async with RedditClient() as reddit:
            post = await reddit.get_post_by_id(post_id)
            service = ReportService(reddit)
            return await service.handle_post_submit(PostSubmitEvent.from_post(post))

    outcome = asyncio.run(run())

    if outcome.error:
        click.echo(click.style(f"✗ {outcome.post_id}: {outcome.error}", fg="red"), err=True)
        sys.exit(1)
    if outcome.skipped_reason:
        click.echo(f"Skipped {outcome.post_id}: {outcome.skipped_reason}")
        return

    click.echo(click.style(f"✓ Reported {len(outcome.sources)} sources on {outcome.post_id}", fg="green"))
    click.echo(f"  Comment: {outcome.comment_id}")
    if outcome.flair:
        click.echo(f"  Flair: {outcome.flair}")


if __name__ == "__main__":
    main()
