import asyncio
from unittest.mock import AsyncMock, patch

from conftest import make_comment_event, make_issues_event
from app.github import events as events_module
from app.github.events import EventRouter
from app.github.models import (
    IssueCommentEvent,
    IssuesEvent,
    UnknownEvent,
    decode_event,
)


ISSUE_PAYLOAD = {
    "id": 42,
    "number": 7,
    "title": "Crash on boot",
    "body": "repro steps",
    "labels": [{"name": "bug"}, {"name": "p1"}],
    "user": {"login": "octocat"},
    "assignees": [{"login": "hubot"}],
    "html_url": "https://github.com/acme/widgets/issues/7",
}


def make_router():
    issues = AsyncMock()
    comments = AsyncMock()
    return EventRouter(issues, comments), issues, comments


# =========================================================
# Routing
# =========================================================

def test_issue_events_go_to_issue_dispatcher():
    router, issues, comments = make_router()
    event = make_issues_event("opened")

    asyncio.run(router.route(event))

    issues.handle.assert_awaited_once_with(event)
    comments.handle.assert_not_awaited()


def test_comment_events_go_to_comment_dispatcher():
    router, issues, comments = make_router()
    event = make_comment_event("created")

    asyncio.run(router.route(event))

    comments.handle.assert_awaited_once_with(event)
    issues.handle.assert_not_awaited()


def test_other_events_are_logged_and_dropped():
    router, issues, comments = make_router()

    with patch.object(events_module.logger, "info") as info:
        asyncio.run(router.route(UnknownEvent(kind="push")))

    issues.handle.assert_not_awaited()
    comments.handle.assert_not_awaited()
    assert "push" in info.call_args.args


def test_router_swallows_unexpected_errors():
    router, issues, _ = make_router()
    issues.handle.side_effect = KeyError("boom")

    asyncio.run(router.route(make_issues_event("opened")))

    issues.handle.assert_awaited_once()


# =========================================================
# Payload decoding
# =========================================================

def test_decode_issues_event():
    event = decode_event("issues", {
        "action": "assigned",
        "issue": ISSUE_PAYLOAD,
        "assignee": {"login": "hubot"},
        "repository": {"full_name": "acme/widgets"},
    })

    assert isinstance(event, IssuesEvent)
    assert event.action == "assigned"
    assert event.assignee == "hubot"
    assert event.label is None
    assert event.repository == "acme/widgets"
    assert event.issue.id == 42
    assert event.issue.labels == ("bug", "p1")
    assert event.issue.assignees == ("hubot",)
    assert event.issue.author == "octocat"


def test_decode_labeled_event_reads_label_name():
    event = decode_event("issues", {
        "action": "labeled",
        "issue": ISSUE_PAYLOAD,
        "label": {"name": "p1"},
    })

    assert event.label == "p1"


def test_decode_issue_with_null_body():
    event = decode_event("issues", {
        "action": "opened",
        "issue": dict(ISSUE_PAYLOAD, body=None, labels=[]),
    })

    assert event.issue.body is None
    assert event.issue.labels == ()


def test_decode_comment_event():
    event = decode_event("issue_comment", {
        "action": "created",
        "issue": ISSUE_PAYLOAD,
        "comment": {
            "id": 9001,
            "user": {"login": "hubot"},
            "body": "Same here",
            "html_url": "https://github.com/acme/widgets/issues/7#issuecomment-9001",
        },
    })

    assert isinstance(event, IssueCommentEvent)
    assert event.comment.id == 9001
    assert event.comment.author == "hubot"
    assert event.issue.id == 42


def test_decode_incomplete_payload_is_unknown():
    event = decode_event("issue_comment", {"action": "created", "issue": ISSUE_PAYLOAD})

    assert isinstance(event, UnknownEvent)
    assert event.kind == "issue_comment"


def test_decode_unrecognized_kind():
    event = decode_event("push", {"ref": "refs/heads/main"})

    assert event == UnknownEvent(kind="push")


def test_decode_non_numeric_ids_is_unknown():
    issue_event = decode_event("issues", {
        "action": "opened",
        "issue": dict(ISSUE_PAYLOAD, id="I_kwDOabc"),
    })
    comment_event = decode_event("issue_comment", {
        "action": "created",
        "issue": ISSUE_PAYLOAD,
        "comment": {"id": "IC_kwDOxyz", "body": "hi"},
    })

    assert issue_event == UnknownEvent(kind="issues", action="opened")
    assert comment_event == UnknownEvent(kind="issue_comment", action="created")


def test_decode_numeric_string_ids():
    event = decode_event("issues", {
        "action": "opened",
        "issue": dict(ISSUE_PAYLOAD, id="42", number="7"),
    })

    assert event.issue.id == 42
    assert event.issue.number == 7
