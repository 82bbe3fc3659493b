"""Business logic for trash (soft delete) operations."""

import logging
from datetime import datetime
from typing import Final

from django.conf import settings
from django.db.models import QuerySet
from django.utils import timezone

from server.apps.drive.infrastructure.naming import restored_name
from server.apps.drive.logic.ancestry import is_reachable, path_for_child
from server.apps.drive.logic.context import DriveContext
from server.apps.drive.logic.deletion_operations import (
    DeletionReport,
    delete_subtree,
)
from server.apps.drive.logic.lookups import (
    get_live_entry,
    get_trashed_entry,
    save_entry,
    sibling_name_taken,
)
from server.apps.drive.models import Entry, EntryKind

logger = logging.getLogger(__name__)

_DEFAULT_RETENTION_DAYS: Final = 30
_MAX_RESTORE_ATTEMPTS: Final = 100


def get_retention_days() -> int:
    """Get how long entries stay in trash before the sweep purges them.

    Returns:
        Retention in days from settings or default of 30.
    """
    return getattr(
        settings,
        'DRIVE_TRASH_RETENTION_DAYS',
        _DEFAULT_RETENTION_DAYS,
    )


def soft_delete_entry(context: DriveContext, entry_id: int) -> Entry:
    """Move an entry to trash.

    Only the targeted entry is flagged; a trashed folder's descendants
    stay as they are and become unreachable until it is restored.
    The current parent is recorded so restore can put it back.

    Args:
        context: Drive context.
        entry_id: ID of the entry to trash.

    Returns:
        Updated entry.

    Raises:
        EntryNotFoundError: If the entry is not a live owned entry.
    """
    entry = get_live_entry(context, entry_id)

    entry.is_deleted = True
    entry.deleted_at = timezone.now()
    entry.original_parent_id = entry.parent_id
    save_entry(entry, update_fields=[
        'is_deleted',
        'deleted_at',
        'original_parent',
    ])

    logger.info(
        'Entry moved to trash: %s (ID: %d, owner: %s)',
        entry.path,
        entry.pk,
        context.owner.pk,
    )
    return entry


def restore_entry(context: DriveContext, entry_id: int) -> Entry:
    """Restore an entry from trash.

    The entry goes back to its original parent when that is still a live
    folder with no trashed ancestor, otherwise to root. If the destination
    already holds a live same-kind entry with the same name, the restored
    entry is renamed with a '(restored)' marker.

    Args:
        context: Drive context.
        entry_id: ID of the trashed entry.

    Returns:
        Restored entry.

    Raises:
        EntryNotFoundError: If the entry is not in the owner's trash.
    """
    entry = get_trashed_entry(context, entry_id)

    target = None
    if entry.original_parent_id is not None:
        target = Entry.objects.filter(
            owner=context.owner,
            pk=entry.original_parent_id,
            kind=EntryKind.FOLDER,
        ).first()
    if target is not None and not is_reachable(context, target):
        target = None
    if target is None and entry.original_parent_id is not None:
        logger.info(
            'Original parent %d of entry %d is gone or hidden, '
            'restoring to root',
            entry.original_parent_id,
            entry.pk,
        )

    target_id = target.pk if target is not None else None
    name = _free_name(context, entry, target_id)
    if name != entry.name:
        logger.info(
            'Restore conflict, renamed %r to %r (ID: %d)',
            entry.name,
            name,
            entry.pk,
        )

    entry.name = name
    entry.parent = target
    entry.path = path_for_child(context, target, name)
    entry.is_deleted = False
    entry.deleted_at = None
    entry.original_parent = None
    save_entry(entry, update_fields=[
        'name',
        'parent',
        'path',
        'is_deleted',
        'deleted_at',
        'original_parent',
    ])

    logger.info('Entry restored: %s (ID: %d)', entry.path, entry.pk)
    return entry


def _free_name(
    context: DriveContext,
    entry: Entry,
    parent_id: int | None,
) -> str:
    candidate = entry.name
    attempt = 0
    while sibling_name_taken(context, parent_id, entry.kind, candidate):
        attempt += 1
        if attempt > _MAX_RESTORE_ATTEMPTS:
            # Let the unique constraint report the conflict
            return entry.name
        candidate = restored_name(
            entry.name,
            attempt,
            keep_suffix=entry.is_file,
        )
    return candidate


def purge_entry(context: DriveContext, entry_id: int) -> DeletionReport:
    """Permanently delete an entry from trash.

    A trashed folder is purged together with its live subtree.

    Args:
        context: Drive context.
        entry_id: ID of the trashed entry.

    Returns:
        DeletionReport.

    Raises:
        EntryNotFoundError: If the entry is not in the owner's trash.
    """
    entry = get_trashed_entry(context, entry_id)
    report = delete_subtree(context, entry)

    logger.info(
        'Entry permanently deleted: %s (ID: %d, purged: %d)',
        entry.name,
        entry_id,
        report.purged,
    )
    return report


def list_trash(context: DriveContext) -> QuerySet[Entry]:
    """List all entries in the owner's trash.

    Args:
        context: Drive context.

    Returns:
        QuerySet of trashed entries, newest first.
    """
    return Entry.all_objects.filter(
        owner=context.owner,
        is_deleted=True,
    ).order_by('-deleted_at', '-pk')


def empty_trash(context: DriveContext) -> DeletionReport:
    """Permanently delete everything in the owner's trash.

    Best effort: an entry that fails is recorded in ``failed_ids`` and
    the remaining entries are still purged.

    Args:
        context: Drive context.

    Returns:
        Aggregated DeletionReport.
    """
    report = DeletionReport()

    for entry in list(list_trash(context)):
        try:
            report.merge(purge_entry(context, entry.pk))
        except Exception:
            logger.exception(
                'Failed to permanently delete entry: %d',
                entry.pk,
            )
            report.failed_ids.append(entry.pk)

    logger.info(
        'Trash emptied for owner %s: %d purged, %d failed, %d dangling',
        context.owner.pk,
        report.purged,
        len(report.failed_ids),
        len(report.dangling_keys),
    )
    return report


def list_expired_trash(cutoff: datetime) -> QuerySet[Entry]:
    """List trashed entries of all owners deleted before ``cutoff``.

    Args:
        cutoff: Deletion time limit.

    Returns:
        QuerySet ordered oldest first.
    """
    return Entry.all_objects.filter(
        is_deleted=True,
        deleted_at__lte=cutoff,
    ).select_related('owner').order_by('deleted_at', 'pk')
