from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class Issue:
    id: int
    number: int
    title: str
    body: Optional[str]
    labels: Tuple[str, ...]
    author: str
    assignees: Tuple[str, ...]
    html_url: str


@dataclass(frozen=True)
class Comment:
    id: int
    author: str
    body: Optional[str]
    html_url: str


@dataclass(frozen=True)
class IssuesEvent:
    action: str
    issue: Issue
    repository: Optional[str] = None
    # Payload-level fields, only sent with assigned/unassigned and labeled/unlabeled
    assignee: Optional[str] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class IssueCommentEvent:
    action: str
    issue: Issue
    comment: Comment
    repository: Optional[str] = None


@dataclass(frozen=True)
class UnknownEvent:
    kind: str
    action: Optional[str] = None
    repository: Optional[str] = None


Event = Union[IssuesEvent, IssueCommentEvent, UnknownEvent]


# =========================================================
# Payload decoding
# =========================================================

def _login(user: Any) -> Optional[str]:
    if isinstance(user, dict):
        return user.get("login")
    return None


def _as_id(value: Any) -> Optional[int]:
    # bool is an int subclass but never a GitHub id
    if value is None or isinstance(value, bool):
        return None

    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _decode_issue(raw: Any) -> Optional[Issue]:
    if not isinstance(raw, dict):
        return None

    issue_id = _as_id(raw.get("id"))
    number = _as_id(raw.get("number"))
    if issue_id is None or number is None:
        return None

    labels = tuple(
        lb["name"] for lb in raw.get("labels") or []
        if isinstance(lb, dict) and lb.get("name")
    )
    assignees = tuple(
        login for login in (_login(a) for a in raw.get("assignees") or [])
        if login
    )

    return Issue(
        id=issue_id,
        number=number,
        title=raw.get("title") or "",
        body=raw.get("body"),
        labels=labels,
        author=_login(raw.get("user")) or "unknown",
        assignees=assignees,
        html_url=raw.get("html_url") or "",
    )


def _decode_comment(raw: Any) -> Optional[Comment]:
    if not isinstance(raw, dict):
        return None

    comment_id = _as_id(raw.get("id"))
    if comment_id is None:
        return None

    return Comment(
        id=comment_id,
        author=_login(raw.get("user")) or "unknown",
        body=raw.get("body"),
        html_url=raw.get("html_url") or "",
    )


def decode_event(event_type: str, payload: Dict[str, Any]) -> Event:
    """
    Turn a raw webhook payload into a typed event record.

    Unrecognized kinds, and payloads missing the ids a record needs,
    decode to UnknownEvent so the router can log and drop them.
    """
    action = payload.get("action")
    repo = payload.get("repository")
    repository = repo.get("full_name") if isinstance(repo, dict) else None

    if event_type == "issues":
        issue = _decode_issue(payload.get("issue"))
        if issue and action:
            label = payload.get("label") or {}
            return IssuesEvent(
                action=action,
                issue=issue,
                repository=repository,
                assignee=_login(payload.get("assignee")),
                label=label.get("name") if isinstance(label, dict) else None,
            )

    elif event_type == "issue_comment":
        issue = _decode_issue(payload.get("issue"))
        comment = _decode_comment(payload.get("comment"))
        if issue and comment and action:
            return IssueCommentEvent(
                action=action,
                issue=issue,
                comment=comment,
                repository=repository,
            )

    return UnknownEvent(kind=event_type, action=action, repository=repository)
