"""Select endpoints by keyword and tag, and cap how many are returned.

A path entry is kept when both predicates hold:

* **keyword** -- absent, or found case-insensitively in the path string or
  in the summary/description of any of its operations;
* **tag** -- absent, or listed by at least one of its operations.

:func:`limit_paths` then trims the kept entries to the requested number of
paths and operations, in document order.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

from swagger_reader.parser.normalizer import iter_operations


class LimitResult(NamedTuple):
    paths: dict[str, Any]
    omitted_paths: int
    omitted_operations: int


def filter_paths(
    paths: dict[str, Any],
    keyword: Optional[str] = None,
    tag: Optional[str] = None,
) -> tuple[dict[str, Any], int]:
    """Return the path entries matching *keyword* and *tag*, and their count.

    Empty strings count as "no filter". The count is the number of retained
    path entries, not operations.
    """
    needle = keyword.lower() if keyword else None
    matched: dict[str, Any] = {}

    for path, path_item in paths.items():
        if path_item is None:
            continue
        if needle and not _matches_keyword(path, path_item, needle):
            continue
        if tag and not _has_tag(path_item, tag):
            continue
        matched[path] = path_item

    return matched, len(matched)


def _matches_keyword(path: str, path_item: Any, needle: str) -> bool:
    if needle in path.lower():
        return True
    for _, operation in iter_operations(path_item):
        for field in ("summary", "description"):
            text = operation.get(field)
            if isinstance(text, str) and needle in text.lower():
                return True
    return False


def _has_tag(path_item: Any, tag: str) -> bool:
    for _, operation in iter_operations(path_item):
        tags = operation.get("tags")
        if isinstance(tags, list) and tag in tags:
            return True
    return False


def limit_paths(paths: dict[str, Any], max_paths: int, max_operations: int) -> LimitResult:
    """Keep at most *max_paths* entries holding at most *max_operations* operations.

    A limit of ``0`` means unlimited. The path entry that crosses the
    operation budget keeps only its first operations; later entries are
    dropped. Input path items are never modified.
    """
    kept: dict[str, Any] = {}
    omitted_paths = 0
    omitted_operations = 0
    used_operations = 0

    for path, path_item in paths.items():
        operations = list(iter_operations(path_item))
        remaining = max_operations - used_operations if max_operations else len(operations)

        if (max_paths and len(kept) >= max_paths) or (operations and remaining <= 0):
            omitted_paths += 1
            omitted_operations += len(operations)
            continue

        if len(operations) > remaining:
            dropped = {method for method, _ in operations[remaining:]}
            path_item = {k: v for k, v in path_item.items() if k not in dropped}
            omitted_operations += len(dropped)
            operations = operations[:remaining]

        kept[path] = path_item
        used_operations += len(operations)

    return LimitResult(kept, omitted_paths, omitted_operations)
