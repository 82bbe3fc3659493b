"""Downward walks over live subtrees: folder sizes and subtree height."""

import logging
from collections.abc import Iterator

from server.apps.drive.exceptions import (
    InternalInconsistencyError,
    TreeTooDeepError,
)
from server.apps.drive.logic.context import DriveContext
from server.apps.drive.logic.lookups import get_live_entry
from server.apps.drive.models import Entry, EntryKind

logger = logging.getLogger(__name__)


def walk_subtree(
    context: DriveContext,
    folder: Entry,
) -> Iterator[tuple[Entry, int]]:
    """Yield every live descendant of ``folder`` with its relative depth.

    A descendant is always yielded after its parent. Trashed children
    (and anything below them) are skipped.

    Args:
        context: Drive context.
        folder: Folder to start from (not yielded itself).

    Yields:
        (entry, depth) pairs, direct children having depth 1.

    Raises:
        InternalInconsistencyError: If an entry is reached twice.
        TreeTooDeepError: If the subtree is deeper than the bound.
    """
    visited = {folder.pk}
    pending = [(folder.pk, 1)]

    while pending:
        folder_id, depth = pending.pop()
        children = Entry.objects.filter(
            owner=context.owner,
            parent_id=folder_id,
        ).order_by('pk')

        for child in children:
            if child.pk in visited:
                logger.error(
                    'Cycle below folder %d (owner %s): entry %d reached twice',
                    folder.pk,
                    context.owner.pk,
                    child.pk,
                )
                raise InternalInconsistencyError(
                    f'subtree of folder {folder.pk} revisits {child.pk}',
                )
            if depth > context.max_depth:
                raise TreeTooDeepError(context.max_depth)

            visited.add(child.pk)
            yield child, depth
            if child.is_folder:
                pending.append((child.pk, depth + 1))


def compute_folder_size(context: DriveContext, folder_id: int) -> int:
    """Sum the sizes of all live files below a folder, at any depth.

    Never cached: any write below the folder would invalidate it.

    Args:
        context: Drive context.
        folder_id: Live folder owned by the context owner.

    Returns:
        Total size in bytes.

    Raises:
        EntryNotFoundError: If the folder is not a live owned folder.
    """
    folder = get_live_entry(context, folder_id, kind=EntryKind.FOLDER)
    return sum(
        entry.size_bytes
        for entry, _ in walk_subtree(context, folder)
        if entry.is_file
    )


def subtree_height(context: DriveContext, entry: Entry) -> int:
    """Count the levels below an entry (0 for files and empty folders)."""
    if entry.is_file:
        return 0
    return max((depth for _, depth in walk_subtree(context, entry)), default=0)
