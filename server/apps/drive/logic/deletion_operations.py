"""Business logic for permanent, recursive removal of entries."""

import logging
from dataclasses import dataclass, field
from typing import final

from server.apps.drive.logic.context import DriveContext
from server.apps.drive.logic.lookups import get_live_entry
from server.apps.drive.logic.subtree import walk_subtree
from server.apps.drive.models import Entry

logger = logging.getLogger(__name__)


@final
@dataclass(slots=True)
class DeletionReport:
    """Outcome of a best-effort permanent deletion.

    ``purged`` counts removed entries. ``dangling_keys`` lists object
    store keys whose release failed although their entry was removed
    (left for a storage cleanup job). ``failed_ids`` lists entries that
    could not be removed at all.
    """

    purged: int = 0
    dangling_keys: list[str] = field(default_factory=list)
    failed_ids: list[int] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """Whether everything was removed without leftovers."""
        return not self.dangling_keys and not self.failed_ids

    def merge(self, other: 'DeletionReport') -> None:
        """Add the counters of another report to this one."""
        self.purged += other.purged
        self.dangling_keys.extend(other.dangling_keys)
        self.failed_ids.extend(other.failed_ids)


def hard_delete_recursive(context: DriveContext, entry_id: int) -> DeletionReport:
    """Permanently delete a live entry and its whole live subtree.

    Used by immediate (non-trash) deletion flows. Safe to re-run on a
    partially deleted subtree.

    Args:
        context: Drive context.
        entry_id: Live file or folder to delete.

    Returns:
        DeletionReport for the subtree.

    Raises:
        EntryNotFoundError: If the entry is not a live owned entry.
    """
    entry = get_live_entry(context, entry_id)
    report = delete_subtree(context, entry)
    logger.info(
        'Hard deleted entry %d (owner %s): %d purged, %d dangling',
        entry_id,
        context.owner.pk,
        report.purged,
        len(report.dangling_keys),
    )
    return report


def delete_subtree(context: DriveContext, root: Entry) -> DeletionReport:
    """Remove ``root`` and every live descendant, deepest first.

    Each file's content is released before its row is removed. A failed
    release is logged and reported, and the walk carries on with the
    remaining entries.

    Args:
        context: Drive context.
        root: Entry to remove (any trash state).

    Returns:
        DeletionReport.
    """
    report = DeletionReport()
    descendants = []
    if root.is_folder:
        descendants = [entry for entry, _ in walk_subtree(context, root)]

    # Descendants always follow their parent in walk order
    for entry in reversed(descendants):
        _remove_entry(context, entry, report)
    _remove_entry(context, root, report)
    return report


def _remove_entry(
    context: DriveContext,
    entry: Entry,
    report: DeletionReport,
) -> None:
    if entry.is_file and entry.content_key:
        try:
            context.storage.delete(entry.content_key)
        except Exception:
            logger.exception(
                'Failed to release content of entry %d, orphaned key: %s',
                entry.pk,
                entry.content_key,
            )
            report.dangling_keys.append(entry.content_key)

    deleted, _ = Entry.all_objects.filter(
        owner=context.owner,
        pk=entry.pk,
    ).delete()
    if deleted:
        report.purged += 1
        logger.debug('Entry removed from database: %d', entry.pk)
    else:
        logger.debug('Entry already removed: %d', entry.pk)
