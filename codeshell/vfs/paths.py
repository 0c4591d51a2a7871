"""
Materialized path derivation.

path(e) = name(e) at the root, else path(parent) + "/" + name(e).
Recomputation is eager: whoever changes a name or a parent link calls
refresh_path() before anyone else can observe the entity.
"""

from collections.abc import Callable, Iterator

from codeshell.vfs.entities import Entity, FileNode, FolderNode

PATH_SEPARATOR = "/"


def join_path(parent_path: str | None, name: str) -> str:
    """Join a parent's path and a leaf name"""
    if parent_path is None:
        return name
    return f"{parent_path}{PATH_SEPARATOR}{name}"


def refresh_path(
    entity: Entity,
    lookup_folder: Callable[[str], FolderNode | None],
    lookup_entity: Callable[[str], Entity | None],
) -> None:
    """Recompute the path of ``entity`` and, for folders, every descendant.

    The parent's path is assumed to be current already.
    """
    parent = lookup_folder(entity.parent_id) if entity.parent_id is not None else None
    entity._path = join_path(parent.path if parent is not None else None, entity.name)

    if isinstance(entity, FolderNode):
        for child in iter_descendants(entity, lookup_entity):
            owner = lookup_folder(child.parent_id) if child.parent_id is not None else None
            child._path = join_path(owner.path if owner is not None else None, child.name)


def iter_descendants(
    folder: FolderNode, lookup_entity: Callable[[str], Entity | None]
) -> Iterator[Entity]:
    """Yield every descendant of ``folder`` top-down (parents before children)"""
    stack = list(reversed(folder.child_ids))
    while stack:
        child = lookup_entity(stack.pop())
        if child is None:
            continue
        yield child
        if isinstance(child, FolderNode):
            stack.extend(reversed(child.child_ids))


def is_ancestor(
    candidate: FolderNode,
    entity: Entity,
    lookup_folder: Callable[[str], FolderNode | None],
) -> bool:
    """Check whether ``candidate`` is ``entity`` itself or one of its ancestors"""
    current: Entity | None = entity
    while current is not None:
        if current is candidate:
            return True
        current = lookup_folder(current.parent_id) if current.parent_id is not None else None
    return False


def ancestors_of(
    entity: FileNode | FolderNode, lookup_folder: Callable[[str], FolderNode | None]
) -> list[FolderNode]:
    """Ancestors from the immediate parent up to the root-level folder"""
    result: list[FolderNode] = []
    parent_id = entity.parent_id
    while parent_id is not None:
        parent = lookup_folder(parent_id)
        if parent is None:
            break
        result.append(parent)
        parent_id = parent.parent_id
    return result
