"""
File and folder entities held by the entity store.

Entities live in flat id-keyed tables inside the store. A folder refers to
its children by id and every entity refers to its parent by id, so there
are no object cycles and a snapshot is just the two tables.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(eq=False)
class FileNode:
    """A text file in the virtual file system"""

    id: str
    name: str
    content: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)
    parent_id: str | None = None
    is_modified: bool = False
    _path: str = field(default="", repr=False)

    type = "file"

    @property
    def path(self) -> str:
        """Materialized path, maintained by the store"""
        return self._path

    @property
    def extension(self) -> str:
        """Lowercased text after the final dot, or empty string"""
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[1].lower()

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "type": self.type,
            "createdAt": self.created_at.isoformat(),
            "modifiedAt": self.modified_at.isoformat(),
            "parent": self.parent_id,
            "isModified": self.is_modified,
            "path": self._path,
        }


@dataclass(eq=False)
class FolderNode:
    """A folder; children are kept in insertion order"""

    id: str
    name: str
    child_ids: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    parent_id: str | None = None
    _path: str = field(default="", repr=False)

    type = "folder"

    @property
    def path(self) -> str:
        """Materialized path, maintained by the store"""
        return self._path

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "children": list(self.child_ids),
            "createdAt": self.created_at.isoformat(),
            "parent": self.parent_id,
            "path": self._path,
        }


Entity = FileNode | FolderNode
