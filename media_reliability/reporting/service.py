"""
Reliability report service.

Handles a new-submission event end to end:
fetch post -> process -> match sources -> flair -> comment -> distinguish/lock.

Failures never propagate out of handle_post_submit(): they are logged and,
when an error report subreddit is configured, sent there as modmail.
"""

import logging
from dataclasses import dataclass, replace
from typing import Protocol

from media_reliability.ingestion.post import process_post
from media_reliability.ingestion.schemas import PostData, PostSubmitEvent, RedditPost
from media_reliability.matching.matcher import SourceMatcher
from media_reliability.observability.logging import bind_context, clear_context
from media_reliability.reporting.comment import build_report, flair_text, should_flair
from media_reliability.reporting.config import ReporterConfig
from media_reliability.sources.schemas import Source

logger = logging.getLogger(__name__)

ERROR_REPORT_SUBJECT = "An error occurred with the media reliability app"


class RedditActions(Protocol):
    """The Reddit operations the report service relies on."""

    async def get_post_by_id(self, post_id: str) -> RedditPost: ...

    async def submit_comment(self, parent_id: str, text: str) -> str: ...

    async def distinguish_comment(self, comment_id: str, sticky: bool = True) -> None: ...

    async def lock(self, thing_id: str) -> None: ...

    async def set_post_flair(
        self,
        subreddit_name: str,
        post_id: str,
        text: str,
        flair_template_id: str = "",
        css_class: str = "",
    ) -> None: ...

    async def send_private_message(self, to: str, subject: str, text: str) -> None: ...


class EventError(ValueError):
    """Raised when a submission event lacks required fields."""

    pass


@dataclass
class ReportOutcome:
    """What the service did for one event."""

    post_id: str | None
    sources: tuple[Source, ...] = ()
    comment_id: str | None = None
    flair: str | None = None
    skipped_reason: str | None = None
    error: str | None = None

    @property
    def reported(self) -> bool:
        return self.comment_id is not None


def short_post_link(post_id: str) -> str:
    """https://redd.it/<id> for a t3_ fullname or bare id."""
    return f"https://redd.it/{post_id.removeprefix('t3_')}"


class ReportService:
    """
    Posts media reliability reports on new submissions.

    The registry is loaded from config once, at construction; build a new
    service after a configuration change.

    Usage:
        >>> async with RedditClient() as reddit:
        ...     service = ReportService(reddit, ReporterConfig())
        ...     outcome = await service.handle_post_submit(event)
    """

    def __init__(
        self,
        reddit: RedditActions,
        config: ReporterConfig | None = None,
        sources: tuple[Source, ...] | None = None,
    ):
        """
        Initialize report service.

        Args:
            reddit: Reddit API client
            config: Reporter configuration, defaults to ReporterConfig()
            sources: Registry override; loaded from config when None

        Raises:
            RegistryValidationError: If the configured registry is invalid
        """
        self._reddit = reddit
        self.config = config or ReporterConfig()
        registry = sources if sources is not None else self.config.load_sources()
        self._matcher = SourceMatcher(registry, self.config.match_options)

    @property
    def matcher(self) -> SourceMatcher:
        return self._matcher

    def scan(self, post: RedditPost) -> tuple[PostData, tuple[Source, ...] | None]:
        """Process a post and match it against the registry."""
        post_data = process_post(post)
        return post_data, self._matcher.find(post_data.content)

    async def handle_post_submit(self, event: PostSubmitEvent) -> ReportOutcome:
        """
        Report on a new submission.

        Args:
            event: New-submission event

        Returns:
            ReportOutcome describing what was done (or why not)
        """
        bind_context(post_id=event.post_id, subreddit=event.subreddit_name)
        try:
            return await self._handle(event)
        except Exception as e:
            logger.error(f"Failed to report on post {event.post_id}: {e}", exc_info=True)
            if event.post_id:
                await self._try_send_error_report(event.post_id, e)
            return ReportOutcome(post_id=event.post_id, error=str(e))
        finally:
            clear_context()

    async def _handle(self, event: PostSubmitEvent) -> ReportOutcome:
        if not event.post_id or not event.subreddit_name or not event.author_name:
            raise EventError("PostSubmit event missing post id, subreddit name or author name.")

        # Crossposts are judged by the original submission but reported on
        # where they were posted
        post = await self._reddit.get_post_by_id(event.crosspost_parent_id or event.post_id)
        post_data, sources = self.scan(post)
        post_data = replace(post_data, id=event.post_id, subreddit_name=event.subreddit_name)

        if self.config.is_ignored_user(event.author_name):
            logger.info(f"Ignoring post by {event.author_name}")
            return ReportOutcome(post_id=post_data.id, skipped_reason="ignored_user")

        if sources is None:
            logger.info("No sources found")
            return ReportOutcome(post_id=post_data.id, skipped_reason="no_sources")

        return await self._submit_report(post_data, sources)

    async def _submit_report(self, post_data: PostData, sources: tuple[Source, ...]) -> ReportOutcome:
        """Flair the post if appropriate, then post, distinguish and lock the report."""
        flair = None
        if should_flair(post_data, sources):
            flair = flair_text(sources)
            if flair:
                await self._reddit.set_post_flair(
                    subreddit_name=post_data.subreddit_name,
                    post_id=post_data.id,
                    text=flair,
                    flair_template_id=self.config.flair_template_id,
                    css_class=self.config.flair_css_class,
                )

        report = build_report(sources, self.config.comment_footer)
        comment_id = await self._reddit.submit_comment(post_data.id, report)
        await self._reddit.distinguish_comment(comment_id, sticky=True)
        await self._reddit.lock(comment_id)

        logger.info(f"Reported {len(sources)} sources on {post_data.id} as {comment_id}")
        return ReportOutcome(
            post_id=post_data.id,
            sources=sources,
            comment_id=comment_id,
            flair=flair,
        )

    async def _try_send_error_report(self, post_id: str, error: Exception) -> None:
        """Modmail the error report subreddit, if one is configured."""
        subreddit = self.config.error_report_subreddit_name
        if not subreddit:
            return

        try:
            await self._reddit.send_private_message(
                to=f"/r/{subreddit}",
                subject=ERROR_REPORT_SUBJECT,
                text=f"An error occurred with this post: {short_post_link(post_id)}\n\n{type(error).__name__}: {error}",
            )
        except Exception as e:
            logger.error(f"Failed to send error report to r/{subreddit}: {e}")
