from typing import Optional

from app.cache.store import (
    IdentityStore,
    StoreError,
    get_thread_id,
    get_comment_message_id,
    set_comment_message_id,
)
from app.discord.api import DiscordClient, DiscordError
from app.github.models import IssueCommentEvent
from app.logger import get_logger
from app.settings import SyncConfig
from app.sync.formatter import format_comment, format_comment_edit
from app.sync.locks import KeyedLock


logger = get_logger("threadhook.sync.comments")

COMMENT_ACTIONS = ("created", "edited", "deleted")


class CommentDispatcher:
    """
    Mirrors `issue_comment` actions into the parent issue's thread.

    Only issues that already have a thread are mirrored; mirrored
    messages are tracked per comment id.
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

    async def handle(self, event: IssueCommentEvent) -> None:
        if event.action not in COMMENT_ACTIONS:
            logger.info("Uncovered comment action: %s", event.action)
            return

        issue_id = event.issue.id
        comment_id = event.comment.id

        async with self.locks.hold(issue_id):
            try:
                thread_id = get_thread_id(self.store, issue_id)
                if thread_id is None:
                    logger.warning(
                        "No thread mapped for issue %s, skipping comment %s %s",
                        issue_id,
                        comment_id,
                        event.action,
                    )
                    return

                if event.action == "created":
                    await self._on_created(event, thread_id)
                elif event.action == "edited":
                    await self._on_edited(event, thread_id)
                else:
                    await self._on_deleted(event, thread_id)

            except (DiscordError, StoreError):
                logger.exception(
                    "Failed to sync comment %s %s on issue %s",
                    comment_id,
                    event.action,
                    issue_id,
                )
                return

        logger.debug("comment %s action done for %s", event.action, comment_id)

    def _mirrored_message(self, event: IssueCommentEvent) -> Optional[int]:
        message_id = get_comment_message_id(self.store, event.comment.id)
        if message_id is None:
            logger.warning(
                "No message mapped for comment %s, skipping %s",
                event.comment.id,
                event.action,
            )
        return message_id

    async def _on_created(self, event: IssueCommentEvent, thread_id: int) -> None:
        message_id = await self.discord.send_message(
            thread_id, format_comment(event.comment)
        )
        set_comment_message_id(
            self.store, event.comment.id, message_id, self.config.mapping_ttl
        )
        logger.debug("stored comment message id: %s", message_id)

    async def _on_edited(self, event: IssueCommentEvent, thread_id: int) -> None:
        message_id = self._mirrored_message(event)
        if message_id is None:
            return

        await self.discord.edit_message(
            thread_id, message_id, format_comment_edit(event.comment)
        )

    async def _on_deleted(self, event: IssueCommentEvent, thread_id: int) -> None:
        message_id = self._mirrored_message(event)
        if message_id is None:
            return

        await self.discord.delete_message(thread_id, message_id)
