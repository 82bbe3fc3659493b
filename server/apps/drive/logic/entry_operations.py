"""Business logic for creating and restructuring drive entries."""

import logging
from dataclasses import dataclass
from typing import Final, final

from django.conf import settings
from django.utils import timezone

from server.apps.drive.commands import (
    AnnotateCommand,
    CreateFileCommand,
    CreateFolderCommand,
    MoveCommand,
    RenameCommand,
    UploadFileCommand,
)
from server.apps.drive.exceptions import (
    InvalidCycleError,
    TreeTooDeepError,
)
from server.apps.drive.infrastructure.naming import detect_mime_type
from server.apps.drive.logic.ancestry import (
    get_reachable_folder,
    path_for_child,
    refresh_paths,
    walk_ancestors,
)
from server.apps.drive.logic.context import DriveContext
from server.apps.drive.logic.lookups import (
    ensure_name_available,
    get_live_entry,
    save_entry,
)
from server.apps.drive.logic.subtree import subtree_height
from server.apps.drive.models import Entry, EntryKind

logger = logging.getLogger(__name__)

_DEFAULT_URL_EXPIRES: Final = 3600


@final
@dataclass(frozen=True, slots=True)
class DownloadLink:
    """Signed URL handed to clients for downloading a file."""

    url: str
    file_name: str
    expires_in: int


def get_url_expiry() -> int:
    """Get signed download URL lifetime in seconds.

    Returns:
        Expiry from settings or default of 3600.
    """
    return getattr(settings, 'DRIVE_SIGNED_URL_EXPIRES', _DEFAULT_URL_EXPIRES)


def create_folder(context: DriveContext, command: CreateFolderCommand) -> Entry:
    """Create a folder under an optional parent folder.

    Args:
        context: Drive context.
        command: Validated create command.

    Returns:
        Created folder entry.

    Raises:
        EntryNotFoundError: If the parent is not a live owned folder
            or sits below a trashed folder.
        EntryConflictError: If a live sibling folder has the same name.
        TreeTooDeepError: If the new folder exceeds the depth bound.
    """
    parent = get_reachable_folder(context, command.parent_id)
    ensure_name_available(
        context,
        command.parent_id,
        EntryKind.FOLDER,
        command.name,
    )

    folder = Entry(
        owner=context.owner,
        kind=EntryKind.FOLDER,
        name=command.name,
        parent=parent,
        path=path_for_child(context, parent, command.name),
    )
    save_entry(folder)

    logger.info(
        'Folder created: %s (ID: %d, owner: %s)',
        folder.path,
        folder.pk,
        context.owner.pk,
    )
    return folder


def create_file(context: DriveContext, command: CreateFileCommand) -> Entry:
    """Create a file entry for content already in the object store.

    Args:
        context: Drive context.
        command: Validated create command.

    Returns:
        Created file entry.

    Raises:
        EntryNotFoundError: If the parent is not a live owned folder
            or sits below a trashed folder.
        EntryConflictError: If a live sibling file has the same name.
        TreeTooDeepError: If the new file exceeds the depth bound.
    """
    parent = get_reachable_folder(context, command.parent_id)
    ensure_name_available(
        context,
        command.parent_id,
        EntryKind.FILE,
        command.name,
    )

    file_entry = Entry(
        owner=context.owner,
        kind=EntryKind.FILE,
        name=command.name,
        parent=parent,
        path=path_for_child(context, parent, command.name),
        content_key=command.content_key,
        size_bytes=command.size_bytes,
        mime_type=command.mime_type,
    )
    save_entry(file_entry)

    logger.info(
        'File created: %s (ID: %d, size: %d, owner: %s)',
        file_entry.path,
        file_entry.pk,
        file_entry.size_bytes,
        context.owner.pk,
    )
    return file_entry


def upload_file(context: DriveContext, command: UploadFileCommand) -> Entry:
    """Upload content to the object store and create its file entry.

    Transaction safety: the parent is validated first, then content is
    uploaded, then the record is created. If the record cannot be
    created the uploaded object is deleted again (rollback).

    Args:
        context: Drive context.
        command: Validated upload command.

    Returns:
        Created file entry.
    """
    get_reachable_folder(context, command.parent_id)
    ensure_name_available(
        context,
        command.parent_id,
        EntryKind.FILE,
        command.name,
    )
    mime_type = command.mime_type or detect_mime_type(command.name)

    # Step 1: Upload to storage first
    content_key = context.storage.put_object(
        command.content,
        command.name,
        mime_type,
        context.owner.pk,
    )

    # Step 2: Create database record
    try:
        return create_file(
            context,
            CreateFileCommand(
                name=command.name,
                content_key=content_key,
                size_bytes=len(command.content),
                mime_type=mime_type,
                parent_id=command.parent_id,
            ),
        )
    except Exception:
        # Rollback: delete uploaded content since the record was not created
        logger.exception(
            'File record not created, rolling back storage upload: %s',
            content_key,
        )
        context.storage.rollback_upload(content_key)
        raise


def rename_entry(context: DriveContext, command: RenameCommand) -> Entry:
    """Rename a file or folder within its current parent.

    Only the entry's own path is rewritten; descendants pick up the new
    prefix lazily when they are next read.

    Args:
        context: Drive context.
        command: Validated rename command.

    Returns:
        Updated entry.

    Raises:
        EntryNotFoundError: If the entry is not a live owned entry.
        EntryConflictError: If a live same-kind sibling has the name.
    """
    entry = get_live_entry(context, command.entry_id)
    if entry.name == command.new_name:
        return entry

    ensure_name_available(
        context,
        entry.parent_id,
        entry.kind,
        command.new_name,
        exclude_id=entry.pk,
    )

    old_path = entry.path
    entry.name = command.new_name
    entry.path = path_for_child(context, entry.parent, command.new_name)
    save_entry(entry, update_fields=['name', 'path'])

    logger.info(
        'Entry renamed: %s -> %s (ID: %d)',
        old_path,
        entry.path,
        entry.pk,
    )
    return entry


def move_entry(context: DriveContext, command: MoveCommand) -> Entry:
    """Move a file or folder under another folder (or to root).

    Args:
        context: Drive context.
        command: Validated move command.

    Returns:
        Updated entry.

    Raises:
        EntryNotFoundError: If the entry or target is not live and owned,
            or the target sits below a trashed folder.
        InvalidCycleError: If a folder would end up inside itself.
        EntryConflictError: If the target has a same-kind sibling with
            the entry's name.
        TreeTooDeepError: If the moved subtree would exceed the bound.
    """
    entry = get_live_entry(context, command.entry_id)
    target = get_reachable_folder(context, command.new_parent_id)

    target_depth = 0
    if target is not None:
        target_chain = walk_ancestors(context, target.pk)
        if any(node.pk == entry.pk for node in target_chain):
            logger.info(
                'Rejected move of %d into its descendant %d',
                entry.pk,
                target.pk,
            )
            raise InvalidCycleError(entry.pk, target.pk)
        target_depth = len(target_chain)

    if target_depth + 1 + subtree_height(context, entry) > context.max_depth:
        raise TreeTooDeepError(context.max_depth)

    if entry.parent_id == command.new_parent_id:
        return entry

    ensure_name_available(
        context,
        command.new_parent_id,
        entry.kind,
        entry.name,
        exclude_id=entry.pk,
    )

    old_path = entry.path
    entry.parent = target
    entry.path = path_for_child(context, target, entry.name)
    save_entry(entry, update_fields=['parent', 'path'])

    logger.info(
        'Entry moved: %s -> %s (ID: %d)',
        old_path,
        entry.path,
        entry.pk,
    )
    return entry


def get_entry(
    context: DriveContext,
    entry_id: int,
    *,
    touch: bool = False,
) -> Entry:
    """Look up a single live entry.

    Args:
        context: Drive context.
        entry_id: ID of the entry.
        touch: Record the read in ``last_accessed_at``.

    Returns:
        Entry with a fresh path.
    """
    entry = get_live_entry(context, entry_id)
    if touch:
        _touch(entry)
    return refresh_paths(context, [entry])[0]


def get_download_url(context: DriveContext, entry_id: int) -> DownloadLink:
    """Create a signed download URL for a live file.

    Args:
        context: Drive context.
        entry_id: ID of the file.

    Returns:
        DownloadLink with URL, file name and expiry.

    Raises:
        EntryNotFoundError: If the entry is not a live owned file.
    """
    file_entry = get_live_entry(context, entry_id, kind=EntryKind.FILE)
    expires_in = get_url_expiry()
    url = context.storage.signed_url(file_entry.content_key, expires_in)
    _touch(file_entry)

    logger.debug('Signed URL issued for file %d', file_entry.pk)
    return DownloadLink(
        url=url,
        file_name=file_entry.name,
        expires_in=expires_in,
    )


def toggle_star(context: DriveContext, entry_id: int) -> Entry:
    """Flip the starred flag of a live entry.

    Args:
        context: Drive context.
        entry_id: ID of the entry.

    Returns:
        Updated entry.
    """
    entry = get_live_entry(context, entry_id)
    entry.is_starred = not entry.is_starred
    save_entry(entry, update_fields=['is_starred'])

    logger.info(
        'Entry %d %s',
        entry.pk,
        'starred' if entry.is_starred else 'unstarred',
    )
    return entry


def annotate_entry(context: DriveContext, command: AnnotateCommand) -> Entry:
    """Store assistant annotations on a live file.

    Only annotation fields are written; structure is never touched.

    Args:
        context: Drive context.
        command: Validated annotate command.

    Returns:
        Updated file entry.
    """
    file_entry = get_live_entry(context, command.entry_id, kind=EntryKind.FILE)
    file_entry.ai_summary = command.summary
    file_entry.ai_key_points = list(command.key_points)
    file_entry.ai_tags = list(command.tags)
    file_entry.ai_processed_at = timezone.now()
    save_entry(file_entry, update_fields=[
        'ai_summary',
        'ai_key_points',
        'ai_tags',
        'ai_processed_at',
    ])

    logger.info(
        'Annotations stored for file %d (%d tags)',
        file_entry.pk,
        len(file_entry.ai_tags),
    )
    return file_entry


def _touch(entry: Entry) -> None:
    entry.last_accessed_at = timezone.now()
    Entry.all_objects.filter(pk=entry.pk).update(
        last_accessed_at=entry.last_accessed_at,
    )
