"""Ancestor walks, path materialization and breadcrumbs.

The ``parent`` chain is the only source of truth for structure. It is
not acyclic by construction, so every walk here carries a visited set and
the context's depth bound:
- revisiting an ID raises InternalInconsistencyError (corrupted data)
- exceeding the bound raises TreeTooDeepError
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final, final

from django.conf import settings

from server.apps.drive.exceptions import (
    EntryNotFoundError,
    InternalInconsistencyError,
    TreeTooDeepError,
)
from server.apps.drive.logic.context import DriveContext
from server.apps.drive.logic.lookups import get_live_entry
from server.apps.drive.models import Entry, EntryKind

logger = logging.getLogger(__name__)

_PATH_SEPARATOR: Final = '/'
_DEFAULT_ROOT_LABEL: Final = 'My Drive'


@final
@dataclass(frozen=True, slots=True)
class Crumb:
    """Breadcrumb item, ``entry_id`` None stands for the root."""

    entry_id: int | None
    name: str


@final
@dataclass(frozen=True, slots=True)
class _FolderState:
    path: str
    reachable: bool


def walk_ancestors(context: DriveContext, entry_id: int) -> list[Entry]:
    """Collect ``entry_id`` and all of its ancestors, root first.

    Entries are returned regardless of their trash state.

    Args:
        context: Drive context.
        entry_id: Entry to start from.

    Returns:
        Chain ordered from the root level entry down to ``entry_id``.

    Raises:
        EntryNotFoundError: If ``entry_id`` is not owned by the owner.
        InternalInconsistencyError: If the chain revisits an entry or
            points outside the owner's tree.
        TreeTooDeepError: If the chain is longer than the depth bound.
    """
    chain: list[Entry] = []
    visited: set[int] = set()
    current_id: int | None = entry_id

    while current_id is not None:
        if current_id in visited:
            logger.error(
                'Cycle in parent chain of entry %d (owner %s): visited %s',
                entry_id,
                context.owner.pk,
                [node.pk for node in chain],
            )
            raise InternalInconsistencyError(
                f'parent chain of entry {entry_id} revisits {current_id}',
            )
        if len(chain) >= context.max_depth:
            logger.warning(
                'Parent chain of entry %d exceeds %d levels (owner %s)',
                entry_id,
                context.max_depth,
                context.owner.pk,
            )
            raise TreeTooDeepError(context.max_depth)

        visited.add(current_id)
        node = Entry.all_objects.filter(
            owner=context.owner,
            pk=current_id,
        ).first()
        if node is None:
            if not chain:
                raise EntryNotFoundError(entry_id)
            logger.error(
                'Entry %d of owner %s has parent %d outside the tree',
                chain[-1].pk,
                context.owner.pk,
                current_id,
            )
            raise InternalInconsistencyError(
                f'entry {chain[-1].pk} points to foreign parent {current_id}',
            )
        chain.append(node)
        current_id = node.parent_id

    chain.reverse()
    return chain


def is_reachable(context: DriveContext, entry: Entry) -> bool:
    """Check that neither the entry nor any of its ancestors is in trash."""
    return not any(
        node.is_deleted for node in walk_ancestors(context, entry.pk)
    )


def get_reachable_folder(
    context: DriveContext,
    folder_id: int | None,
) -> Entry | None:
    """Resolve an optional destination folder visible in the tree.

    A live folder below a trashed folder is rejected: anything put there
    would be hidden and purged together with the trashed ancestor.

    Args:
        context: Drive context.
        folder_id: Folder ID, None for root.

    Returns:
        Folder entry, or None for root.

    Raises:
        EntryNotFoundError: If the folder is not a live owned folder or
            sits below a trashed folder.
    """
    if folder_id is None:
        return None
    folder = get_live_entry(context, folder_id, kind=EntryKind.FOLDER)
    if not is_reachable(context, folder):
        logger.info(
            'Folder %d of owner %s is below a trashed folder',
            folder.pk,
            context.owner.pk,
        )
        raise EntryNotFoundError(folder_id, EntryKind.FOLDER)
    return folder


def join_path(names: Iterable[str]) -> str:
    """Render names from the root down as a materialized path.

    Example: ['Docs', 'Sub'] -> '/Docs/Sub'
    """
    return ''.join(f'{_PATH_SEPARATOR}{name}' for name in names)


def path_for_child(
    context: DriveContext,
    parent: Entry | None,
    name: str,
) -> str:
    """Compute the path a new or re-parented entry will have.

    Args:
        context: Drive context.
        parent: Destination folder, None for root.
        name: Entry name.

    Returns:
        Materialized path.

    Raises:
        TreeTooDeepError: If the entry would exceed the depth bound.
    """
    if parent is None:
        return join_path([name])
    chain = walk_ancestors(context, parent.pk)
    if len(chain) + 1 > context.max_depth:
        raise TreeTooDeepError(context.max_depth)
    return join_path([*(node.name for node in chain), name])


def resolve_ancestor_path(context: DriveContext, entry_id: int) -> list[Entry]:
    """Resolve the ancestor chain of a live entry, root first.

    The target itself is the last element. Cached paths along the chain
    are corrected when stale.

    Args:
        context: Drive context.
        entry_id: Target entry.

    Returns:
        Ordered list of entries from root level to target.

    Raises:
        EntryNotFoundError: If the target or any ancestor is in trash.
        InternalInconsistencyError: If the chain contains a cycle.
        TreeTooDeepError: If the chain exceeds the depth bound.
    """
    get_live_entry(context, entry_id)
    chain = walk_ancestors(context, entry_id)
    if any(node.is_deleted for node in chain):
        raise EntryNotFoundError(entry_id)

    stale: list[Entry] = []
    names: list[str] = []
    for node in chain:
        names.append(node.name)
        expected = join_path(names)
        if node.path != expected:
            node.path = expected
            stale.append(node)
    if stale:
        Entry.all_objects.bulk_update(stale, ['path'])
    return chain


def get_root_label() -> str:
    """Get the display name of the root breadcrumb.

    Returns:
        Label from settings or 'My Drive'.
    """
    return getattr(settings, 'DRIVE_ROOT_LABEL', _DEFAULT_ROOT_LABEL)


def build_breadcrumb(
    context: DriveContext,
    folder_id: int | None,
) -> list[Crumb]:
    """Build breadcrumb items for a folder view.

    Args:
        context: Drive context.
        folder_id: Folder being viewed, None for root.

    Returns:
        Root crumb followed by every folder down to ``folder_id``.
    """
    crumbs = [Crumb(entry_id=None, name=get_root_label())]
    if folder_id is None:
        return crumbs

    get_live_entry(context, folder_id, kind=EntryKind.FOLDER)
    chain = resolve_ancestor_path(context, folder_id)
    crumbs.extend(Crumb(entry_id=node.pk, name=node.name) for node in chain)
    return crumbs


def _folder_state(
    context: DriveContext,
    folder_id: int,
    memo: dict[int, _FolderState],
) -> _FolderState:
    if folder_id not in memo:
        path = ''
        reachable = True
        for node in walk_ancestors(context, folder_id):
            path = f'{path}{_PATH_SEPARATOR}{node.name}'
            reachable = reachable and not node.is_deleted
            memo.setdefault(node.pk, _FolderState(path, reachable))
    return memo[folder_id]


def refresh_paths(
    context: DriveContext,
    entries: Iterable[Entry],
    *,
    reachable_only: bool = False,
) -> list[Entry]:
    """Recompute cached paths of query results from the parent chain.

    Renames and moves only rewrite the path of the entry itself;
    descendants are corrected here, the next time they are read.

    Args:
        context: Drive context.
        entries: Entries to refresh.
        reachable_only: Drop entries sitting below a trashed folder.

    Returns:
        Refreshed entries (filtered when ``reachable_only``).
    """
    memo: dict[int, _FolderState] = {}
    refreshed: list[Entry] = []
    stale: list[Entry] = []

    for entry in entries:
        if entry.parent_id is None:
            state = _FolderState('', reachable=True)
        else:
            state = _folder_state(context, entry.parent_id, memo)
        if reachable_only and not state.reachable:
            continue

        expected = f'{state.path}{_PATH_SEPARATOR}{entry.name}'
        if entry.path != expected:
            entry.path = expected
            stale.append(entry)
        refreshed.append(entry)

    if stale:
        logger.debug('Refreshing %d stale paths', len(stale))
        Entry.all_objects.bulk_update(stale, ['path'])
    return refreshed
