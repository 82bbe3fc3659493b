"""Tests for purge_trash management command."""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from server.apps.drive.logic.trash_operations import soft_delete_entry
from server.apps.drive.models import Entry


def _age(entry, days):
    Entry.all_objects.filter(pk=entry.pk).update(
        deleted_at=timezone.now() - timedelta(days=days),
    )


@pytest.mark.django_db
class TestPurgeTrashCommand:
    """Tests for purge_trash management command."""

    def test_purges_old_entries(self, drive, make_file, bucket_keys):
        """Test entries older than 30 days are permanently deleted."""
        file_entry = make_file('old.txt')
        soft_delete_entry(drive, file_entry.pk)
        _age(file_entry, 31)

        out = StringIO()
        call_command('purge_trash', stdout=out)

        assert not Entry.all_objects.filter(pk=file_entry.pk).exists()
        assert bucket_keys() == set()
        assert 'Purged 1 entries from trash, 0 failed' in out.getvalue()

    def test_preserves_recent_entries(self, drive, make_file):
        """Test entries trashed within retention are kept."""
        file_entry = make_file('recent.txt')
        soft_delete_entry(drive, file_entry.pk)
        _age(file_entry, 5)

        out = StringIO()
        call_command('purge_trash', stdout=out)

        assert Entry.all_objects.filter(pk=file_entry.pk).exists()
        assert 'Purged 0 entries' in out.getvalue()

    def test_purges_folder_subtree(self, drive, make_folder, make_file):
        """Test an expired folder is purged with its live children."""
        docs = make_folder('Docs')
        child = make_file('a.txt', parent=docs)
        soft_delete_entry(drive, docs.pk)
        _age(docs, 40)

        call_command('purge_trash', stdout=StringIO())

        assert not Entry.all_objects.filter(pk__in=[docs.pk, child.pk]).exists()

    def test_dry_run(self, drive, make_file):
        """Test dry run reports without deleting."""
        file_entry = make_file('old.txt')
        soft_delete_entry(drive, file_entry.pk)
        _age(file_entry, 31)

        out = StringIO()
        call_command('purge_trash', '--dry-run', stdout=out)

        assert Entry.all_objects.filter(pk=file_entry.pk).exists()
        assert 'Would purge: file old.txt' in out.getvalue()
        assert 'Would purge 1 entries from trash' in out.getvalue()

    def test_custom_days(self, drive, make_file):
        """Test retention can be overridden on the command line."""
        file_entry = make_file('week.txt')
        soft_delete_entry(drive, file_entry.pk)
        _age(file_entry, 8)

        call_command('purge_trash', '--days', '7', stdout=StringIO())

        assert not Entry.all_objects.filter(pk=file_entry.pk).exists()

    def test_zero_days(self, drive, make_file):
        """Test zero retention purges everything already in trash."""
        file_entry = make_file('today.txt')
        soft_delete_entry(drive, file_entry.pk)

        out = StringIO()
        call_command('purge_trash', '--days', '0', stdout=out)

        assert not Entry.all_objects.filter(pk=file_entry.pk).exists()
        assert 'older than 0 days' in out.getvalue()

    def test_batch_size(self, drive, make_file):
        """Test at most batch size entries are purged per run."""
        for index in range(3):
            file_entry = make_file(f'{index}.txt')
            soft_delete_entry(drive, file_entry.pk)
            _age(file_entry, 31)

        call_command('purge_trash', '--batch-size', '2', stdout=StringIO())

        assert Entry.all_objects.count() == 1

    def test_all_owners(self, drive, other_drive, make_file):
        """Test every owner's expired trash is purged."""
        mine = make_file('a.txt')
        theirs = make_file('b.txt', context=other_drive)
        soft_delete_entry(drive, mine.pk)
        soft_delete_entry(other_drive, theirs.pk)
        _age(mine, 31)
        _age(theirs, 31)

        call_command('purge_trash', stdout=StringIO())

        assert Entry.all_objects.count() == 0
