from typing import Optional

from app.cache.store import (
    IdentityStore,
    StoreError,
    get_thread_id,
    set_thread_id,
    get_anchor_message_id,
    set_anchor_message_id,
)
from app.discord.api import DiscordClient, DiscordError
from app.github.models import IssuesEvent
from app.logger import get_logger
from app.settings import SyncConfig
from app.sync.formatter import (
    format_anchor,
    format_thread_name,
    format_closed_name,
    format_reopened_name,
    format_issue_body,
    format_notice,
)
from app.sync.labels import filter_labels, is_in_scope
from app.sync.locks import KeyedLock


logger = get_logger("threadhook.sync.issues")


class IssueDispatcher:
    """
    Projects `issues` webhook actions onto the issue's Discord thread.

    An issue is either unmapped (no thread yet) or mapped. The first
    qualifying `opened`/`labeled` action creates the thread; every other
    action only acts on an existing thread and is skipped otherwise.
    """

    def __init__(
        self,
        config: SyncConfig,
        store: IdentityStore,
        discord: DiscordClient,
        locks: Optional[KeyedLock] = None,
    ):
        self.config = config
        self.store = store
        self.discord = discord
        self.locks = locks or KeyedLock()

        self._handlers = {
            "opened": self._on_opened_or_labeled,
            "labeled": self._on_opened_or_labeled,
            "closed": self._on_closed,
            "reopened": self._on_reopened,
            "edited": self._on_edited,
            "assigned": self._on_assignment,
            "unassigned": self._on_assignment,
            "unlabeled": self._on_unlabeled,
        }

    async def handle(self, event: IssuesEvent) -> None:
        issue = event.issue
        watched = self.config.watched_labels

        if not issue.labels:
            logger.debug("issue `%s` has no label", issue.title)
            return

        if not is_in_scope(issue.labels, watched):
            logger.debug(
                "issue `%s` labels %s do not match watched labels %s",
                issue.title,
                sorted(issue.labels),
                sorted(watched),
            )
            return

        handler = self._handlers.get(event.action)
        if handler is None:
            logger.info("Uncovered issue action: %s", event.action)
            return

        labelled = filter_labels(issue.labels, watched)

        async with self.locks.hold(issue.id):
            try:
                await handler(event, labelled)
            except (DiscordError, StoreError):
                logger.exception(
                    "Failed to sync %s for issue %s (#%s)",
                    event.action,
                    issue.id,
                    issue.number,
                )
                return

        logger.debug("%s action done for issue %s", event.action, issue.id)

    # =========================================================
    # Helpers
    # =========================================================

    def _mapped_thread(self, event: IssuesEvent) -> Optional[int]:
        thread_id = get_thread_id(self.store, event.issue.id)
        if thread_id is None:
            logger.warning(
                "No thread mapped for issue %s, skipping %s",
                event.issue.id,
                event.action,
            )
        return thread_id

    async def _notify(self, thread_id: int, kind: str, value: str) -> None:
        await self.discord.send_message(thread_id, format_notice(kind, value))

    # =========================================================
    # Thread creation
    # =========================================================

    async def _create_thread(self, event: IssuesEvent, labelled) -> None:
        issue = event.issue
        home = self.config.channel_id
        ttl = self.config.mapping_ttl

        anchor_id = await self.discord.send_message(home, format_anchor(issue, labelled))

        try:
            thread_id = await self.discord.create_thread(
                home, anchor_id, format_thread_name(issue)
            )
        except DiscordError:
            logger.exception("Failed to create thread for issue %s", issue.id)
            await self._discard_anchor(anchor_id)
            return

        try:
            await self.discord.join_thread(thread_id)
        except DiscordError:
            logger.warning("Failed to join thread %s", thread_id)

        if issue.body and issue.body.strip():
            try:
                await self.discord.send_message(thread_id, format_issue_body(issue))
            except DiscordError:
                logger.warning("Failed to post body of issue %s into thread", issue.id)
        else:
            logger.warning("issue `%s` has no body", issue.title)

        # Anchor first: a stored thread id implies a stored anchor id
        try:
            set_anchor_message_id(self.store, issue.id, anchor_id, ttl)
            set_thread_id(self.store, issue.id, thread_id, ttl)
        except StoreError:
            logger.exception("Failed to persist thread %s for issue %s", thread_id, issue.id)
            await self._discard_thread(thread_id)
            await self._discard_anchor(anchor_id)
            return

        logger.info(
            "Created thread %s for issue %s (anchor message %s)",
            thread_id,
            issue.id,
            anchor_id,
        )

    async def _discard_thread(self, thread_id: int) -> None:
        try:
            await self.discord.delete_thread(thread_id)
        except DiscordError:
            logger.warning("Failed to delete orphan thread %s", thread_id)

    async def _discard_anchor(self, anchor_id: int) -> None:
        try:
            await self.discord.delete_message(self.config.channel_id, anchor_id)
        except DiscordError:
            logger.warning("Failed to delete orphan anchor message %s", anchor_id)

    # =========================================================
    # Action handlers
    # =========================================================

    async def _on_opened_or_labeled(self, event: IssuesEvent, labelled) -> None:
        thread_id = get_thread_id(self.store, event.issue.id)

        if thread_id is None:
            await self._create_thread(event, labelled)
            return

        if event.action != "labeled":
            logger.debug("issue %s already has thread %s", event.issue.id, thread_id)
            return

        if not event.label:
            logger.warning("labeled event for issue %s has no label", event.issue.id)
            return

        await self._notify(thread_id, "Labeled", event.label)

    async def _on_unlabeled(self, event: IssuesEvent, labelled) -> None:
        thread_id = self._mapped_thread(event)
        if thread_id is None:
            return

        if not event.label:
            logger.warning("unlabeled event for issue %s has no label", event.issue.id)
            return

        await self._notify(thread_id, "Unlabeled", event.label)

    async def _on_closed(self, event: IssuesEvent, labelled) -> None:
        thread_id = self._mapped_thread(event)
        if thread_id is None:
            return

        await self.discord.rename_thread(thread_id, format_closed_name(event.issue))

    async def _on_reopened(self, event: IssuesEvent, labelled) -> None:
        thread_id = self._mapped_thread(event)
        if thread_id is None:
            return

        await self.discord.rename_thread(thread_id, format_reopened_name(event.issue))

    async def _on_edited(self, event: IssuesEvent, labelled) -> None:
        if self._mapped_thread(event) is None:
            return

        anchor_id = get_anchor_message_id(self.store, event.issue.id)
        if anchor_id is None:
            logger.warning("No anchor message mapped for issue %s", event.issue.id)
            return

        await self.discord.edit_message(
            self.config.channel_id,
            anchor_id,
            format_anchor(event.issue, labelled),
        )

    async def _on_assignment(self, event: IssuesEvent, labelled) -> None:
        thread_id = self._mapped_thread(event)
        if thread_id is None:
            return

        if not event.assignee:
            logger.warning("%s event for issue %s has no assignee", event.action, event.issue.id)
            return

        kind = "Assigned" if event.action == "assigned" else "Unassigned"
        await self._notify(thread_id, kind, event.assignee)
