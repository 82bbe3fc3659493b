"""Read-only views over an owner's drive tree.

Nothing in this module changes structure; the only writes are cached
path corrections made by ``refresh_paths``.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Final, final

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Count, Q, Sum

from server.apps.drive.logic.ancestry import refresh_paths
from server.apps.drive.logic.context import DriveContext
from server.apps.drive.logic.lookups import get_parent_folder
from server.apps.drive.models import Entry, EntryKind

logger = logging.getLogger(__name__)

_DEFAULT_RECENT_LIMIT: Final = 20


@final
@dataclass(frozen=True, slots=True)
class FolderContents:
    """Children of a folder split by kind, each sorted by name."""

    folders: list[Entry]
    files: list[Entry]


@final
@dataclass(frozen=True, slots=True)
class StorageStats:
    """Storage accounting over all of an owner's files."""

    active_bytes: int
    trash_bytes: int
    file_count: int
    trash_count: int

    @property
    def total_bytes(self) -> int:
        """Bytes held in the object store, trash included."""
        return self.active_bytes + self.trash_bytes


def get_recent_limit() -> int:
    """Get default number of entries in the recent view.

    Returns:
        Limit from settings or default of 20.
    """
    return getattr(settings, 'DRIVE_RECENT_LIMIT', _DEFAULT_RECENT_LIMIT)


def sort_entries(entries: list[Entry]) -> list[Entry]:
    """Sort folders before files, then by name in codepoint order."""
    return sorted(entries, key=lambda entry: (entry.is_file, entry.name))


def list_children(
    context: DriveContext,
    parent_id: int | None = None,
    kind: str | None = None,
) -> list[Entry]:
    """List live entries directly inside a folder (or at root).

    Args:
        context: Drive context.
        parent_id: Folder ID, None for root.
        kind: Optional kind filter ('file' or 'folder').

    Returns:
        Entries, folders first, then by name.

    Raises:
        EntryNotFoundError: If the parent is not a live owned folder.
    """
    get_parent_folder(context, parent_id)
    queryset = Entry.objects.filter(owner=context.owner, parent_id=parent_id)
    if kind is not None:
        queryset = queryset.filter(kind=kind)

    logger.debug(
        'Listing children of %s for owner %s',
        parent_id,
        context.owner.pk,
    )
    return sort_entries(refresh_paths(context, queryset))


def get_folder_contents(
    context: DriveContext,
    folder_id: int | None = None,
) -> FolderContents:
    """List a folder's children split into folders and files.

    Args:
        context: Drive context.
        folder_id: Folder ID, None for root.

    Returns:
        FolderContents.
    """
    children = list_children(context, folder_id)
    return FolderContents(
        folders=[entry for entry in children if entry.is_folder],
        files=[entry for entry in children if entry.is_file],
    )


def search_entries(
    context: DriveContext,
    query: str,
    *,
    include_annotations: bool = False,
) -> list[Entry]:
    """Find live entries whose name contains ``query``, ignoring case.

    Entries below a trashed folder are not reachable and never match.

    Args:
        context: Drive context.
        query: Substring to look for.
        include_annotations: Also match assistant summaries and tags.

    Returns:
        Matching entries, folders first, then by name.

    Raises:
        ValidationError: If the query is blank.
    """
    needle = query.strip().casefold()
    if not needle:
        raise ValidationError('Search query is required')

    # Database LIKE only folds ASCII case, so matching happens in Python
    candidates = [
        entry for entry in Entry.objects.filter(owner=context.owner)
        if needle in _haystack(entry, include_annotations=include_annotations)
    ]

    return sort_entries(
        refresh_paths(context, candidates, reachable_only=True),
    )


def _haystack(entry: Entry, *, include_annotations: bool) -> str:
    if not include_annotations:
        return entry.name.casefold()
    tags = ' '.join(entry.ai_tags or [])
    return f'{entry.name} {entry.ai_summary or ""} {tags}'.casefold()


def list_recent(context: DriveContext, limit: int | None = None) -> list[Entry]:
    """List live files by last access, most recent first.

    Args:
        context: Drive context.
        limit: Maximum number of files, defaults to settings.

    Returns:
        Recently accessed files.

    Raises:
        ValidationError: If the limit is not positive.
    """
    if limit is None:
        limit = get_recent_limit()
    if limit < 1:
        raise ValidationError('Limit must be a positive integer')
    queryset = Entry.objects.filter(
        owner=context.owner,
        kind=EntryKind.FILE,
    ).order_by('-last_accessed_at', '-pk')

    recent: list[Entry] = []
    # Unreachable files are dropped, so read in batches until full
    offset = 0
    while len(recent) < limit:
        batch = list(queryset[offset:offset + limit])
        if not batch:
            break
        recent.extend(refresh_paths(context, batch, reachable_only=True))
        offset += limit
    return recent[:limit]


def list_starred(context: DriveContext) -> list[Entry]:
    """List starred live entries, folders first, then by name.

    Args:
        context: Drive context.

    Returns:
        Starred entries.
    """
    queryset = Entry.objects.filter(owner=context.owner, is_starred=True)
    return sort_entries(refresh_paths(context, queryset, reachable_only=True))


def storage_stats(context: DriveContext) -> StorageStats:
    """Account the owner's file bytes, live and trashed, in one query.

    Folders are not counted: their size is derived, never stored.

    Args:
        context: Drive context.

    Returns:
        StorageStats.
    """
    live = Q(is_deleted=False)
    trashed = Q(is_deleted=True)
    totals = Entry.all_objects.filter(
        owner=context.owner,
        kind=EntryKind.FILE,
    ).aggregate(
        active_bytes=Sum('size_bytes', filter=live),
        trash_bytes=Sum('size_bytes', filter=trashed),
        file_count=Count('pk', filter=live),
        trash_count=Count('pk', filter=trashed),
    )
    return StorageStats(
        active_bytes=totals['active_bytes'] or 0,
        trash_bytes=totals['trash_bytes'] or 0,
        file_count=totals['file_count'],
        trash_count=totals['trash_count'],
    )


def list_popular_tags(
    context: DriveContext,
    limit: int = 10,
) -> list[tuple[str, int]]:
    """Count assistant tags across the owner's live files.

    Args:
        context: Drive context.
        limit: Maximum number of tags.

    Returns:
        (tag, count) pairs, most frequent first.
    """
    tag_lists = Entry.objects.filter(
        owner=context.owner,
        kind=EntryKind.FILE,
    ).values_list('ai_tags', flat=True)

    counter: Counter[str] = Counter()
    for tags in tag_lists:
        counter.update(tags or [])
    return counter.most_common(limit)
