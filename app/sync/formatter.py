from app.github.models import Comment, Issue
from app.sync.labels import format_label_list


# Discord hard limits
MAX_MESSAGE_LENGTH = 2000
MAX_THREAD_NAME_LENGTH = 100

EMPTY_COMMENT_BODY = "..."


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def format_anchor(issue: Issue, labelled) -> str:
    """
    Content of the home-channel message a thread is spawned from.
    """
    content = (
        f"**{issue.title}**\n"
        f"An issue is labelled with {format_label_list(labelled)}, "
        f"created by {issue.author}\n"
        f"> {issue.html_url}"
    )
    return _truncate(content, MAX_MESSAGE_LENGTH)


def format_thread_name(issue: Issue) -> str:
    return _truncate(f"{issue.title}#{issue.number}", MAX_THREAD_NAME_LENGTH)


def format_closed_name(issue: Issue) -> str:
    return _truncate(f"{issue.title}(closed)", MAX_THREAD_NAME_LENGTH)


def format_reopened_name(issue: Issue) -> str:
    return _truncate(issue.title, MAX_THREAD_NAME_LENGTH)


def format_issue_body(issue: Issue) -> str:
    return _truncate(issue.body or "", MAX_MESSAGE_LENGTH)


def format_notice(kind: str, value: str) -> str:
    # e.g. "Assigned: octocat", "Unlabeled: bug"
    return _truncate(f"{kind}: {value}", MAX_MESSAGE_LENGTH)


def format_comment(comment: Comment) -> str:
    body = comment.body or EMPTY_COMMENT_BODY
    return _truncate(
        f"**{comment.author}** added a *comment*:\n{body}\n\n> {comment.html_url}",
        MAX_MESSAGE_LENGTH,
    )


def format_comment_edit(comment: Comment) -> str:
    return _truncate(comment.body or EMPTY_COMMENT_BODY, MAX_MESSAGE_LENGTH)
