"""Owner-scoped entry lookups shared by the drive operations."""

import logging
from collections.abc import Iterable

from django.db import IntegrityError, transaction

from server.apps.drive.exceptions import EntryConflictError, EntryNotFoundError
from server.apps.drive.logic.context import DriveContext
from server.apps.drive.models import Entry, EntryKind

logger = logging.getLogger(__name__)


def get_live_entry(
    context: DriveContext,
    entry_id: int,
    kind: str | None = None,
) -> Entry:
    """Get a non-deleted entry owned by the context owner.

    Args:
        context: Drive context.
        entry_id: ID of the entry.
        kind: Optional required kind.

    Returns:
        Entry instance.

    Raises:
        EntryNotFoundError: If missing, in trash, of another kind or
            owned by someone else.
    """
    queryset = Entry.objects.filter(owner=context.owner, pk=entry_id)
    if kind is not None:
        queryset = queryset.filter(kind=kind)
    entry = queryset.first()
    if entry is None:
        raise EntryNotFoundError(entry_id, kind or 'entry')
    return entry


def get_parent_folder(
    context: DriveContext,
    parent_id: int | None,
) -> Entry | None:
    """Resolve an optional parent reference.

    Args:
        context: Drive context.
        parent_id: Folder ID, None for root.

    Returns:
        Folder entry, or None for root.

    Raises:
        EntryNotFoundError: If the folder is not a live owned folder.
    """
    if parent_id is None:
        return None
    return get_live_entry(context, parent_id, kind=EntryKind.FOLDER)


def get_trashed_entry(context: DriveContext, entry_id: int) -> Entry:
    """Get an entry that is currently in the owner's trash.

    Args:
        context: Drive context.
        entry_id: ID of the entry.

    Returns:
        Entry instance.

    Raises:
        EntryNotFoundError: If not found or not in trash.
    """
    entry = Entry.all_objects.filter(
        owner=context.owner,
        pk=entry_id,
        is_deleted=True,
    ).first()
    if entry is None:
        raise EntryNotFoundError(entry_id, 'trashed entry')
    return entry


def sibling_name_taken(  # noqa: WPS211
    context: DriveContext,
    parent_id: int | None,
    kind: str,
    name: str,
    exclude_id: int | None = None,
) -> bool:
    """Check whether a live same-kind sibling already uses ``name``.

    Comparison is exact and case-sensitive.

    Args:
        context: Drive context.
        parent_id: Parent folder ID, None for root.
        kind: Entry kind.
        name: Candidate name.
        exclude_id: Entry to ignore (the one being renamed or moved).

    Returns:
        True if the name is taken.
    """
    queryset = Entry.objects.filter(
        owner=context.owner,
        parent_id=parent_id,
        kind=kind,
        name=name,
    )
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    return queryset.exists()


def ensure_name_available(  # noqa: WPS211
    context: DriveContext,
    parent_id: int | None,
    kind: str,
    name: str,
    exclude_id: int | None = None,
) -> None:
    """Raise if a live same-kind sibling already uses ``name``.

    Raises:
        EntryConflictError: If the name is taken.
    """
    if sibling_name_taken(context, parent_id, kind, name, exclude_id):
        logger.info(
            'Name conflict for owner %s: %s %r in parent %s',
            context.owner.pk,
            kind,
            name,
            parent_id,
        )
        raise EntryConflictError(name, kind, parent_id)


def save_entry(entry: Entry, update_fields: Iterable[str] | None = None) -> None:
    """Persist an entry, reporting uniqueness violations as conflicts.

    The sibling unique constraints are the final guard against two
    concurrent requests passing the same application-level check.

    Args:
        entry: Entry to save.
        update_fields: Optional subset of fields to write.

    Raises:
        EntryConflictError: If the database rejects the write.
    """
    fields = None if update_fields is None else [*update_fields, 'modified_at']
    try:
        with transaction.atomic():
            entry.save(update_fields=fields)
    except IntegrityError as error:
        logger.warning(
            'Integrity error while saving %s %r (parent %s): %s',
            entry.kind,
            entry.name,
            entry.parent_id,
            error,
        )
        raise EntryConflictError(
            entry.name,
            entry.kind,
            entry.parent_id,
        ) from error
