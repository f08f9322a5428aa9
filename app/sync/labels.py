from typing import AbstractSet, Iterable


def parse_label_list(raw: str) -> frozenset:
    """
    Parse a comma-separated label list into the watched label set.

    Items are trimmed and empty items dropped; names stay case-sensitive.
    """
    if not raw:
        return frozenset()

    return frozenset(
        name.strip() for name in raw.split(",") if name.strip()
    )


def filter_labels(issue_labels: Iterable[str], watched: AbstractSet[str]) -> frozenset:
    return frozenset(issue_labels) & frozenset(watched)


def is_in_scope(issue_labels: Iterable[str], watched: AbstractSet[str]) -> bool:
    labels = frozenset(issue_labels)

    # Unlabelled issues never qualify
    if not labels:
        return False

    return bool(filter_labels(labels, watched))


def format_label_list(labels: Iterable[str]) -> str:
    return ", ".join(f"`{name}`" for name in sorted(labels))
