"""
Snapshot export/import for the entity store.

A snapshot is a plain JSON-serializable dict:

    {
        "files": [[id, FileRecord], ...],
        "folders": [[id, FolderRecord], ...],
        "nextId": int,
        "exportedAt": ISO-8601 string,
    }

Records refer to their parent by id and folders list their children by id.
parse_snapshot() also accepts the older nested layout in which "parent"
and "children" hold whole records; only their "id" is used.

Parsing never touches a live store. It builds a complete StoreState and
raises SnapshotError on the first structural problem, so the caller can
swap the new state in only when everything checked out.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from codeshell.vfs.entities import Entity, FileNode, FolderNode
from codeshell.vfs.ids import counter_of
from codeshell.vfs.paths import join_path


class SnapshotError(ValueError):
    """Raised when a snapshot is malformed or internally inconsistent"""


@dataclass
class StoreState:
    """The two entity tables plus the id counter"""

    files: dict[str, FileNode] = field(default_factory=dict)
    folders: dict[str, FolderNode] = field(default_factory=dict)
    next_id: int = 1

    def lookup(self, entity_id: str) -> Entity | None:
        return self.files.get(entity_id) or self.folders.get(entity_id)


def build_snapshot(state: StoreState, exported_at: datetime) -> dict[str, Any]:
    """Serialize ``state`` into a snapshot dict"""
    return {
        "files": [[file_id, f.to_record()] for file_id, f in state.files.items()],
        "folders": [[folder_id, f.to_record()] for folder_id, f in state.folders.items()],
        "nextId": state.next_id,
        "exportedAt": exported_at.isoformat(),
    }


def encode_snapshot(snapshot: dict[str, Any]) -> bytes:
    """Encode a snapshot for the storage port"""
    return json.dumps(snapshot, ensure_ascii=False).encode("utf-8")


def decode_snapshot(data: bytes) -> dict[str, Any]:
    """Decode bytes read from the storage port"""
    try:
        result = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e
    if not isinstance(result, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    return result


def _ref_id(value: Any, what: str) -> str | None:
    """Normalize a parent/child reference (id string or legacy record) to an id"""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("id"), str):
        return str(value["id"])
    raise SnapshotError(f"Invalid {what} reference: {value!r}")


def _timestamp(value: Any, fallback: datetime, what: str) -> datetime:
    if value is None:
        return fallback
    if not isinstance(value, str):
        raise SnapshotError(f"Invalid {what} timestamp: {value!r}")
    try:
        # Accept the "Z" suffix written by JavaScript's toISOString()
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise SnapshotError(f"Invalid {what} timestamp: {value!r}") from e


def _pairs(snapshot: dict[str, Any], key: str) -> list[tuple[str, dict[str, Any]]]:
    """Read an ``[[id, record], ...]`` list, tolerating its absence"""
    raw = snapshot.get(key) or []
    if not isinstance(raw, list):
        raise SnapshotError(f"'{key}' must be a list")

    pairs: list[tuple[str, dict[str, Any]]] = []
    for item in raw:
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise SnapshotError(f"'{key}' entries must be [id, record] pairs")
        entity_id, record = item
        if not isinstance(entity_id, str) or not isinstance(record, dict):
            raise SnapshotError(f"Malformed entry in '{key}': {item!r}")
        if record.get("id", entity_id) != entity_id:
            raise SnapshotError(f"Record id {record.get('id')!r} does not match key {entity_id!r}")
        if not isinstance(record.get("name"), str):
            raise SnapshotError(f"Entity {entity_id} has no name")
        pairs.append((entity_id, record))
    return pairs


def _parse_file(entity_id: str, record: dict[str, Any], now: datetime) -> FileNode:
    if record.get("type", "file") != "file":
        raise SnapshotError(f"Entity {entity_id} listed as file but typed {record['type']!r}")
    content = record.get("content") or ""
    if not isinstance(content, str):
        raise SnapshotError(f"File {entity_id} content must be text")
    return FileNode(
        id=entity_id,
        name=record["name"],
        content=content,
        created_at=_timestamp(record.get("createdAt"), now, "createdAt"),
        modified_at=_timestamp(record.get("modifiedAt"), now, "modifiedAt"),
        parent_id=_ref_id(record.get("parent"), "parent"),
        is_modified=bool(record.get("isModified", False)),
    )


def _parse_folder(entity_id: str, record: dict[str, Any], now: datetime) -> FolderNode:
    if record.get("type", "folder") != "folder":
        raise SnapshotError(f"Entity {entity_id} listed as folder but typed {record['type']!r}")
    children = record.get("children") or []
    if not isinstance(children, list):
        raise SnapshotError(f"Folder {entity_id} children must be a list")
    child_ids: list[str] = []
    for child in children:
        child_id = _ref_id(child, "child")
        if child_id is None:
            raise SnapshotError(f"Folder {entity_id} has a null child")
        child_ids.append(child_id)
    return FolderNode(
        id=entity_id,
        name=record["name"],
        child_ids=child_ids,
        created_at=_timestamp(record.get("createdAt"), now, "createdAt"),
        parent_id=_ref_id(record.get("parent"), "parent"),
    )


def _check_links(state: StoreState) -> None:
    """Verify that parent links and child lists describe the same tree"""
    for folder in state.folders.values():
        if len(set(folder.child_ids)) != len(folder.child_ids):
            raise SnapshotError(f"Folder {folder.id} lists a child twice")
        for child_id in folder.child_ids:
            child = state.lookup(child_id)
            if child is None:
                raise SnapshotError(f"Folder {folder.id} references missing child {child_id}")
            if child.parent_id != folder.id:
                raise SnapshotError(f"Child {child_id} does not point back to folder {folder.id}")

    entities: list[Entity] = [*state.files.values(), *state.folders.values()]
    for entity in entities:
        if entity.parent_id is None:
            continue
        parent = state.folders.get(entity.parent_id)
        if parent is None:
            raise SnapshotError(f"Entity {entity.id} has missing parent {entity.parent_id}")
        if entity.id not in parent.child_ids:
            raise SnapshotError(f"Entity {entity.id} is not listed by its parent {parent.id}")

    # Parent chains must terminate at the root
    for folder in state.folders.values():
        seen: set[str] = set()
        current: FolderNode | None = folder
        while current is not None:
            if current.id in seen:
                raise SnapshotError(f"Folder {folder.id} is part of a parent cycle")
            seen.add(current.id)
            current = state.folders.get(current.parent_id) if current.parent_id else None


def _assign_paths(state: StoreState) -> None:
    """Derive every path from names and parent links, top-down"""
    stack: list[tuple[Entity, str | None]] = [
        (e, None)
        for e in [*state.folders.values(), *state.files.values()]
        if e.parent_id is None
    ]
    while stack:
        entity, parent_path = stack.pop()
        entity._path = join_path(parent_path, entity.name)
        if isinstance(entity, FolderNode):
            for child_id in entity.child_ids:
                child = state.lookup(child_id)
                if child is not None:
                    stack.append((child, entity.path))


def parse_snapshot(
    snapshot: Any, clock: Callable[[], datetime] = datetime.now
) -> StoreState:
    """Build a fresh StoreState from a snapshot dict.

    Raises:
        SnapshotError: if the snapshot is malformed or inconsistent
    """
    if not isinstance(snapshot, dict):
        raise SnapshotError("Snapshot must be a mapping")

    now = clock()
    state = StoreState()

    for entity_id, record in _pairs(snapshot, "files"):
        if entity_id in state.files:
            raise SnapshotError(f"Duplicate file id {entity_id}")
        state.files[entity_id] = _parse_file(entity_id, record, now)

    for entity_id, record in _pairs(snapshot, "folders"):
        if entity_id in state.folders or entity_id in state.files:
            raise SnapshotError(f"Duplicate id {entity_id}")
        state.folders[entity_id] = _parse_folder(entity_id, record, now)

    _check_links(state)
    _assign_paths(state)

    highest = max(
        (counter_of(i) or 0 for i in [*state.files, *state.folders]),
        default=0,
    )
    next_id = snapshot.get("nextId")
    if next_id is None:
        next_id = highest + 1
    if not isinstance(next_id, int) or isinstance(next_id, bool) or next_id < 1:
        raise SnapshotError(f"Invalid nextId: {next_id!r}")
    state.next_id = max(next_id, highest + 1)

    return state
