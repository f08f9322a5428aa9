from app.github.models import Event, IssuesEvent, IssueCommentEvent
from app.logger import get_logger
from app.sync.comments import CommentDispatcher
from app.sync.issues import IssueDispatcher


logger = get_logger("threadhook.github.events")


class EventRouter:
    """
    Central GitHub webhook dispatcher.

    Every decoded event ends up on exactly one path: the issue
    dispatcher, the comment dispatcher, or logged and dropped.
    """

    def __init__(self, issues: IssueDispatcher, comments: CommentDispatcher):
        self.issues = issues
        self.comments = comments

    async def route(self, event: Event) -> None:
        try:
            if isinstance(event, IssuesEvent):
                await self.issues.handle(event)

            elif isinstance(event, IssueCommentEvent):
                await self.comments.handle(event)

            else:
                logger.info("Uncovered event: %s", event.kind)

        except Exception:
            # Never crash webhook processing
            logger.exception("Unhandled error while processing event: %s", event)
