from conftest import make_issue
from app.github.models import Comment
from app.sync.formatter import (
    MAX_MESSAGE_LENGTH,
    MAX_THREAD_NAME_LENGTH,
    format_anchor,
    format_closed_name,
    format_comment,
    format_notice,
    format_thread_name,
)


def test_thread_names():
    issue = make_issue()

    assert format_thread_name(issue) == "Crash on boot#7"
    assert format_closed_name(issue) == "Crash on boot(closed)"


def test_long_thread_name_fits_discord_limit():
    name = format_thread_name(make_issue(title="x" * 300))

    assert len(name) == MAX_THREAD_NAME_LENGTH
    assert name.endswith("…")


def test_anchor_lists_matching_labels():
    content = format_anchor(make_issue(), {"feature", "bug"})

    assert content == (
        "**Crash on boot**\n"
        "An issue is labelled with `bug`, `feature`, created by octocat\n"
        "> https://github.com/acme/widgets/issues/7"
    )


def test_long_comment_fits_discord_limit():
    comment = Comment(id=1, author="hubot", body="y" * 5000, html_url="https://x")

    assert len(format_comment(comment)) == MAX_MESSAGE_LENGTH


def test_notice():
    assert format_notice("Labeled", "bug") == "Labeled: bug"
