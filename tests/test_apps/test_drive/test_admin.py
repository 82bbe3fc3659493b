"""Tests for drive admin configuration."""

import pytest
from django.contrib.admin.sites import site
from django.urls import reverse

from server.apps.drive.admin import EntryAdmin, _format_bytes
from server.apps.drive.models import Entry, EntryKind


@pytest.mark.parametrize(('size_bytes', 'expected'), [
    (512, '512 B'),
    (1536, '1.5 KB'),
    (5 * 1024 * 1024, '5.0 MB'),
    (3 * 1024 * 1024 * 1024, '3.0 GB'),
])
def test_format_bytes(size_bytes, expected):
    """Test human-readable size formatting."""
    assert _format_bytes(size_bytes) == expected


@pytest.mark.django_db
class TestEntryAdmin:
    """Tests for EntryAdmin."""

    def test_size_display(self, user):
        """Test files show their size and folders a dash."""
        entry_admin = EntryAdmin(Entry, site)
        file_entry = Entry(
            owner=user,
            kind=EntryKind.FILE,
            name='a.txt',
            size_bytes=2048,
        )
        folder = Entry(owner=user, kind=EntryKind.FOLDER, name='Docs')

        assert entry_admin.size_display(file_entry) == '2.0 KB'
        assert entry_admin.size_display(folder) == '-'

    def test_changelist_includes_trash(self, admin_client, user):
        """Test the changelist shows live and trashed entries."""
        Entry.objects.create(owner=user, kind=EntryKind.FOLDER, name='Live')
        Entry.objects.create(
            owner=user,
            kind=EntryKind.FOLDER,
            name='Trashed',
            is_deleted=True,
        )

        response = admin_client.get(reverse('admin:drive_entry_changelist'))

        assert response.status_code == 200
        assert b'Live' in response.content
        assert b'Trashed' in response.content
