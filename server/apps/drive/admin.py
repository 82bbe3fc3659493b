"""Django admin configuration for drive app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.drive.models import Entry

_KIB = 1024
_MIB = _KIB * 1024
_GIB = _MIB * 1024


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < _KIB:
        return f'{size_bytes} B'
    if size_bytes < _MIB:
        return f'{size_bytes / _KIB:.1f} KB'
    if size_bytes < _GIB:
        return f'{size_bytes / _MIB:.1f} MB'
    return f'{size_bytes / _GIB:.1f} GB'


@admin.register(Entry)
class EntryAdmin(admin.ModelAdmin[Entry]):
    """Admin interface for Entry model.

    Lists every entry, trash included. Structure fields are read-only:
    moves, renames and deletes must go through the logic layer.
    """

    list_display = [
        'name',
        'kind',
        'owner',
        'path',
        'size_display',
        'is_starred',
        'is_deleted',
        'modified_at',
    ]

    list_filter = [
        'kind',
        'is_deleted',
        'is_starred',
        'owner',
    ]

    search_fields = [
        'name',
        'path',
        'content_key',
    ]

    readonly_fields = [
        'owner',
        'kind',
        'name',
        'parent',
        'path',
        'content_key',
        'size_bytes',
        'mime_type',
        'is_deleted',
        'deleted_at',
        'original_parent',
        'created_at',
        'modified_at',
        'last_accessed_at',
    ]

    fieldsets = (
        ('Entry', {
            'fields': ('owner', 'kind', 'name', 'parent', 'path'),
        }),
        ('Content', {
            'fields': ('content_key', 'size_bytes', 'mime_type'),
        }),
        ('State', {
            'fields': (
                'is_starred',
                'is_deleted',
                'deleted_at',
                'original_parent',
            ),
        }),
        ('Assistant', {
            'fields': (
                'ai_summary',
                'ai_key_points',
                'ai_tags',
                'ai_processed_at',
            ),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'modified_at', 'last_accessed_at'),
        }),
    )

    def get_queryset(self, request: HttpRequest) -> QuerySet[Entry]:
        """Show trashed entries too and avoid per-row owner queries.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return Entry.all_objects.select_related('owner')

    def size_display(self, obj: Entry) -> str:
        """Display file size in human-readable format.

        Folder sizes are derived on demand and not shown in lists.

        Args:
            obj: Entry instance.

        Returns:
            Formatted size string, '-' for folders.
        """
        if obj.is_folder:
            return '-'
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]
