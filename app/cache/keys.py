# ---------------------------------------------------------
# Issue ↔ Discord thread mapping
# ---------------------------------------------------------
# Key format:
#   {issue_id}:channel   -> thread channel id
#   {issue_id}:message   -> anchor message id (thread starter)
# ---------------------------------------------------------

THREAD_SUFFIX = ":channel"
ANCHOR_MESSAGE_SUFFIX = ":message"


# ---------------------------------------------------------
# Comment ↔ Discord message mapping
# ---------------------------------------------------------
# Keyed by the GitHub comment id, never the issue id.
#   {comment_id}:cmt_msg -> mirrored message id
# ---------------------------------------------------------

COMMENT_MESSAGE_SUFFIX = ":cmt_msg"


def thread_key(issue_id: int) -> str:
    return f"{issue_id}{THREAD_SUFFIX}"


def anchor_message_key(issue_id: int) -> str:
    return f"{issue_id}{ANCHOR_MESSAGE_SUFFIX}"


def comment_message_key(comment_id: int) -> str:
    return f"{comment_id}{COMMENT_MESSAGE_SUFFIX}"
