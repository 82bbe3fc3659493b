"""Database models for drive app."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_MIME_TYPE_MAX_LENGTH: Final = 255
_CONTENT_KEY_MAX_LENGTH: Final = 1024


class EntryKind(models.TextChoices):
    """Kind of a node in the drive tree."""

    FILE = 'file', 'File'
    FOLDER = 'folder', 'Folder'


class LiveEntryManager(models.Manager['Entry']):
    """Manager hiding soft-deleted entries."""

    @override
    def get_queryset(self) -> models.QuerySet['Entry']:
        """Exclude entries that are in trash."""
        return super().get_queryset().filter(is_deleted=False)


@final
class Entry(models.Model):
    """File or folder node in an owner's drive tree.

    Every owner has exactly one tree. ``parent`` is the authoritative
    structure; ``path`` is a cached, human readable rendering of the
    ancestor chain ('/Docs/Sub/b.txt') that can always be recomputed.

    Folder sizes are never stored, they are summed on demand from the
    live descendant files.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='drive_entries',
        db_index=True,
    )

    kind = models.CharField(
        max_length=6,
        choices=EntryKind.choices,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children',
        help_text='Containing folder, empty for root level entries',
    )

    path = models.TextField(
        default='',
        help_text='Cached path derived from the parent chain',
    )

    # File content (opaque to the tree structure)
    content_key = models.CharField(
        max_length=_CONTENT_KEY_MAX_LENGTH,
        unique=True,
        null=True,
        blank=True,
        help_text='Object store key, empty for folders',
    )

    size_bytes = models.BigIntegerField(
        default=0,
        help_text='File size in bytes, always 0 for folders',
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        blank=True,
        default='',
    )

    # Trash state
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    original_parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        help_text='Parent at the moment the entry was trashed',
    )

    is_starred = models.BooleanField(default=False)
    last_accessed_at = models.DateTimeField(default=timezone.now)

    # Assistant annotations, never part of the tree structure
    ai_summary = models.TextField(null=True, blank=True)
    ai_key_points = models.JSONField(default=list, blank=True)
    ai_tags = models.JSONField(default=list, blank=True)
    ai_processed_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    objects = LiveEntryManager()
    all_objects = models.Manager()

    class Meta:
        """Model metadata."""

        verbose_name = 'Entry'  # type: ignore[mutable-override]
        verbose_name_plural = 'Entries'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-kind', 'name']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['owner', 'parent', 'is_deleted'],
                name='drive_owner_parent_idx',
            ),
            models.Index(
                fields=['owner', 'is_starred', 'is_deleted'],
                name='drive_owner_starred_idx',
            ),
            models.Index(
                fields=['owner', '-last_accessed_at'],
                name='drive_owner_recent_idx',
            ),
            models.Index(
                fields=['owner', 'is_deleted', '-deleted_at'],
                name='drive_owner_trash_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            # Same-kind siblings must have distinct names. NULL parents
            # never compare equal, so root level needs its own constraint.
            models.UniqueConstraint(
                fields=['owner', 'parent', 'kind', 'name'],
                condition=models.Q(is_deleted=False, parent__isnull=False),
                name='drive_entry_sibling_unique',
            ),
            models.UniqueConstraint(
                fields=['owner', 'kind', 'name'],
                condition=models.Q(is_deleted=False, parent__isnull=True),
                name='drive_entry_root_unique',
            ),
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='drive_size_bytes_non_negative',
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(kind=EntryKind.FILE)
                    | models.Q(content_key__isnull=True)
                ),
                name='drive_folder_without_content',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner.username}:{self.path or self.name}'

    @property
    def is_folder(self) -> bool:
        """Whether this entry is a folder."""
        return self.kind == EntryKind.FOLDER

    @property
    def is_file(self) -> bool:
        """Whether this entry is a file."""
        return self.kind == EntryKind.FILE

    def get_extension(self) -> str:
        """Extract file extension.

        Example: 'report.PDF' -> 'pdf'

        Returns:
            Extension without dot (lowercase), empty for folders.
        """
        if self.is_folder or '.' not in self.name.lstrip('.'):
            return ''
        return self.name.rsplit('.', 1)[1].lower()
