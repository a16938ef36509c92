"""Structural change summaries between two workflow snapshot documents.

Snapshots are opaque JSON trees. The diff walks both trees together and
reports *elements* that were added, removed or modified. An element is either
a list item or a scalar leaf reached through objects; an added or removed
object is expanded into the elements it contains, so ``{"steps": ["A", "B"]}``
holds two elements.

List items are matched by a stable identity key when every item in both lists
is an object carrying a unique ``id``/``actionId``/``stepId``; otherwise they
are aligned on a longest common subsequence of equal items and whatever is
left between two aligned items is paired by position. A change anywhere
inside a paired list item is reported once, as a modification of that item.

Summaries are best effort: :func:`summarize_changes` never raises and returns
an incomplete summary when a payload cannot be walked.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, JsonValue

ChangeKind = Literal["added", "removed", "modified"]

ROOT_PATH = "$"
LIST_IDENTITY_KEYS = ("id", "actionId", "stepId")
UNAVAILABLE_SUMMARY = "Change summary unavailable"

_MISSING = object()


class FieldChange(BaseModel):
    """One added, removed or modified element addressed by its path."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    kind: ChangeKind
    old_value: JsonValue = None
    new_value: JsonValue = None


class ChangeSummary(BaseModel):
    """Counts and paths of changed elements relative to the previous version."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_initial: bool = False
    complete: bool = True
    added: int = 0
    removed: int = 0
    modified: int = 0
    added_paths: tuple[str, ...] = ()
    removed_paths: tuple[str, ...] = ()
    modified_paths: tuple[str, ...] = ()
    summary: str = "No changes"

    @property
    def total(self) -> int:
        return self.added + self.removed + self.modified

    @property
    def has_changes(self) -> bool:
        """Return ``True`` when at least one element changed."""
        return self.total > 0

    @classmethod
    def unavailable(cls, *, is_initial: bool = False) -> "ChangeSummary":
        """Return the placeholder used when a diff could not be computed."""
        return cls(is_initial=is_initial, complete=False, summary=UNAVAILABLE_SUMMARY)


def summarize_changes(previous: Any, current: Any) -> ChangeSummary:
    """Summarize ``current`` relative to ``previous``.

    ``previous=None`` marks the initial snapshot, in which case every element
    of ``current`` is reported as added.
    """
    is_initial = previous is None
    try:
        if is_initial:
            changes = list(_expand(current, ROOT_PATH, "added"))
        else:
            changes = diff_documents(previous, current)
        return _summarize(changes, is_initial=is_initial)
    except Exception:  # noqa: BLE001
        return ChangeSummary.unavailable(is_initial=is_initial)


def diff_documents(previous: Any, current: Any) -> list[FieldChange]:
    """Return element-level changes turning ``previous`` into ``current``.

    Raises whatever the walk raises for payloads that are not JSON trees;
    callers needing leniency should use :func:`summarize_changes`.
    """
    changes: list[FieldChange] = []
    _walk(previous, current, ROOT_PATH, changes)
    return changes


def documents_equal(previous: Any, current: Any) -> bool:
    """Return ``True`` when two snapshots would summarize as "No changes"."""
    return _same(previous, current)


def _summarize(changes: list[FieldChange], *, is_initial: bool) -> ChangeSummary:
    paths: dict[ChangeKind, list[str]] = {"added": [], "removed": [], "modified": []}
    for change in changes:
        paths[change.kind].append(change.path)

    added = len(paths["added"])
    removed = len(paths["removed"])
    modified = len(paths["modified"])
    if is_initial:
        text = f"Initial snapshot: {_plural(added, 'element')} added"
    elif added == removed == modified == 0:
        text = "No changes"
    else:
        parts = [
            f"{count} {label}"
            for count, label in (
                (added, "added"),
                (removed, "removed"),
                (modified, "modified"),
            )
            if count
        ]
        text = ", ".join(parts)

    return ChangeSummary(
        is_initial=is_initial,
        added=added,
        removed=removed,
        modified=modified,
        added_paths=tuple(paths["added"]),
        removed_paths=tuple(paths["removed"]),
        modified_paths=tuple(paths["modified"]),
        summary=text,
    )


def _walk(old: Any, new: Any, path: str, out: list[FieldChange]) -> None:
    if isinstance(old, dict) and isinstance(new, dict):
        for key, old_value in old.items():
            child = _key_path(path, key)
            if key not in new:
                out.extend(_expand(old_value, child, "removed"))
            else:
                _walk(old_value, new[key], child, out)
        for key, new_value in new.items():
            if key not in old:
                out.extend(_expand(new_value, _key_path(path, key), "added"))
        return

    if isinstance(old, list) and isinstance(new, list):
        for item_path, old_item, new_item in _pair_items(old, new, path):
            if new_item is _MISSING:
                out.append(FieldChange(path=item_path, kind="removed", old_value=old_item))
            elif old_item is _MISSING:
                out.append(FieldChange(path=item_path, kind="added", new_value=new_item))
            elif not _same(old_item, new_item):
                out.append(
                    FieldChange(
                        path=item_path,
                        kind="modified",
                        old_value=old_item,
                        new_value=new_item,
                    )
                )
        return

    if not _same(old, new):
        out.append(FieldChange(path=path, kind="modified", old_value=old, new_value=new))


def _expand(value: Any, path: str, kind: ChangeKind) -> Iterator[FieldChange]:
    """Yield one change per element contained in an added or removed subtree."""
    if isinstance(value, dict) and value:
        for key, child in value.items():
            yield from _expand(child, _key_path(path, key), kind)
        return
    if isinstance(value, list) and value:
        key = _identity_key(value, value)
        for index, item in enumerate(value):
            item_path = _item_path(path, index, item, key)
            yield _change(item_path, kind, item)
        return
    if isinstance(value, (dict, list)) and path == ROOT_PATH:
        return
    yield _change(path, kind, value)


def _change(path: str, kind: ChangeKind, value: Any) -> FieldChange:
    if kind == "added":
        return FieldChange(path=path, kind=kind, new_value=value)
    return FieldChange(path=path, kind=kind, old_value=value)


def _pair_items(
    old: list[Any], new: list[Any], path: str
) -> Iterator[tuple[str, Any, Any]]:
    key = _identity_key(old, new)
    if key is None:
        yield from _pair_unkeyed(old, new, path)
        return

    new_by_id = {item[key]: item for item in new}
    seen: set[Any] = set()
    for item in old:
        identity = item[key]
        seen.add(identity)
        yield _keyed_path(path, key, identity), item, new_by_id.get(identity, _MISSING)
    for item in new:
        identity = item[key]
        if identity not in seen:
            yield _keyed_path(path, key, identity), _MISSING, item


def _pair_unkeyed(
    old: list[Any], new: list[Any], path: str
) -> Iterator[tuple[str, Any, Any]]:
    """Pair items left between equal anchors, position by position.

    Removed items keep their old index in the path; added and modified items
    use their new index.
    """
    old_start = new_start = 0
    for old_anchor, new_anchor in [*_common_items(old, new), (len(old), len(new))]:
        old_gap = range(old_start, old_anchor)
        new_gap = range(new_start, new_anchor)
        for offset in range(max(len(old_gap), len(new_gap))):
            if offset >= len(new_gap):
                index = old_gap[offset]
                yield f"{path}[{index}]", old[index], _MISSING
            elif offset >= len(old_gap):
                index = new_gap[offset]
                yield f"{path}[{index}]", _MISSING, new[index]
            else:
                index = new_gap[offset]
                yield f"{path}[{index}]", old[old_gap[offset]], new[index]
        old_start, new_start = old_anchor + 1, new_anchor + 1


def _common_items(old: list[Any], new: list[Any]) -> list[tuple[int, int]]:
    """Return index pairs of a longest common subsequence of equal items."""
    rows, cols = len(old), len(new)
    lengths = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(rows - 1, -1, -1):
        for j in range(cols - 1, -1, -1):
            if _same(old[i], new[j]):
                lengths[i][j] = lengths[i + 1][j + 1] + 1
            else:
                lengths[i][j] = max(lengths[i + 1][j], lengths[i][j + 1])

    pairs: list[tuple[int, int]] = []
    i = j = 0
    while i < rows and j < cols:
        if _same(old[i], new[j]):
            pairs.append((i, j))
            i += 1
            j += 1
        elif lengths[i + 1][j] >= lengths[i][j + 1]:
            i += 1
        else:
            j += 1
    return pairs


def _identity_key(old: list[Any], new: list[Any]) -> str | None:
    """Return the identity key shared by every item of both lists, if any."""
    items = [*old, *new]
    if not items or not all(isinstance(item, dict) for item in items):
        return None
    for key in LIST_IDENTITY_KEYS:
        if all(_is_identity(item.get(key)) for item in items) and _unique(
            old, key
        ) and _unique(new, key):
            return key
    return None


def _is_identity(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def _unique(items: list[dict[str, Any]], key: str) -> bool:
    values = [item[key] for item in items]
    return len(values) == len(set(values))


def _item_path(path: str, index: int, item: Any, key: str | None) -> str:
    if key is None:
        return f"{path}[{index}]"
    return _keyed_path(path, key, item[key])


def _keyed_path(path: str, key: str, identity: Any) -> str:
    return f"{path}[{key}={identity}]"


def _key_path(path: str, key: Any) -> str:
    return f"{path}.{key}"


def _same(old: Any, new: Any) -> bool:
    """Compare JSON values treating booleans and numbers as distinct types."""
    if isinstance(old, dict) and isinstance(new, dict):
        return old.keys() == new.keys() and all(_same(old[k], new[k]) for k in old)
    if isinstance(old, list) and isinstance(new, list):
        return len(old) == len(new) and all(map(_same, old, new))
    if isinstance(old, bool) or isinstance(new, bool):
        return type(old) is type(new) and old == new
    return old == new


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
