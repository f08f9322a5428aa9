from typing import Dict, List, Optional

import pytest

from app.cache.store import StoreError
from app.discord.api import DiscordError
from app.github.models import Comment, Issue, IssueCommentEvent, IssuesEvent
from app.settings import SyncConfig
from app.sync.comments import CommentDispatcher
from app.sync.issues import IssueDispatcher
from app.sync.locks import KeyedLock


HOME_CHANNEL = 1000


class FakeStore:
    """In-memory stand-in for the Redis mapping store."""

    def __init__(self, fail: bool = False, failing_keys=()):
        self.data: Dict[str, str] = {}
        self.writes: List[tuple] = []
        self.fail = fail
        self.failing_keys = set(failing_keys)

    def get(self, key: str) -> Optional[str]:
        if self.fail:
            raise StoreError(f"Failed to read {key}")
        return self.data.get(key)

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        if self.fail:
            raise StoreError(f"Failed to write {key}")
        if key in self.failing_keys:
            # fails once, the next write goes through
            self.failing_keys.discard(key)
            raise StoreError(f"Failed to write {key}")
        self.writes.append((key, value, ttl))
        self.data[key] = value


class FakeDiscord:
    """Records every call; ids are handed out sequentially from 500."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.failing: set = set()
        # (method, channel id) pairs that fail, e.g. ("send_message", 502)
        self.failing_on: set = set()
        self._next_id = 500

    def _record(self, name: str, *args):
        self.calls.append((name, *args))
        if name in self.failing or (args and (name, args[0]) in self.failing_on):
            raise DiscordError(f"{name} failed", 500)

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def send_message(self, channel_id: int, content: str) -> int:
        self._record("send_message", channel_id, content)
        return self._new_id()

    async def create_thread(self, parent_channel_id: int, message_id: int, name: str) -> int:
        self._record("create_thread", parent_channel_id, message_id, name)
        return self._new_id()

    async def rename_thread(self, thread_id: int, name: str) -> None:
        self._record("rename_thread", thread_id, name)

    async def edit_message(self, channel_id: int, message_id: int, content: str) -> None:
        self._record("edit_message", channel_id, message_id, content)

    async def delete_message(self, channel_id: int, message_id: int) -> None:
        self._record("delete_message", channel_id, message_id)

    async def delete_thread(self, thread_id: int) -> None:
        self._record("delete_thread", thread_id)

    async def join_thread(self, thread_id: int) -> None:
        self._record("join_thread", thread_id)


def make_issue(**overrides) -> Issue:
    fields = dict(
        id=42,
        number=7,
        title="Crash on boot",
        body="repro steps",
        labels=("bug",),
        author="octocat",
        assignees=(),
        html_url="https://github.com/acme/widgets/issues/7",
    )
    fields.update(overrides)
    return Issue(**fields)


def make_issues_event(action: str, **overrides) -> IssuesEvent:
    assignee = overrides.pop("assignee", None)
    label = overrides.pop("label", None)
    return IssuesEvent(
        action=action,
        issue=make_issue(**overrides),
        repository="acme/widgets",
        assignee=assignee,
        label=label,
    )


def make_comment_event(action: str, comment_id: int = 9001, body="Same here", issue_id: int = 42) -> IssueCommentEvent:
    return IssueCommentEvent(
        action=action,
        issue=make_issue(id=issue_id),
        comment=Comment(
            id=comment_id,
            author="hubot",
            body=body,
            html_url=f"https://github.com/acme/widgets/issues/7#issuecomment-{comment_id}",
        ),
        repository="acme/widgets",
    )


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig(
        repository="acme/widgets",
        channel_id=HOME_CHANNEL,
        watched_labels=frozenset({"bug", "feature"}),
    )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def discord() -> FakeDiscord:
    return FakeDiscord()


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def issues(config, store, discord, locks) -> IssueDispatcher:
    return IssueDispatcher(config, store, discord, locks)


@pytest.fixture
def comments(config, store, discord, locks) -> CommentDispatcher:
    return CommentDispatcher(config, store, discord, locks)
