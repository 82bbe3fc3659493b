"""Tests for trash operations business logic."""

from datetime import timedelta

import pytest
from django.utils import timezone

from server.apps.drive.exceptions import EntryNotFoundError
from server.apps.drive.logic import trash_operations
from server.apps.drive.logic.deletion_operations import hard_delete_recursive
from server.apps.drive.logic.query_operations import list_children
from server.apps.drive.logic.trash_operations import (
    empty_trash,
    list_expired_trash,
    list_trash,
    purge_entry,
    restore_entry,
    soft_delete_entry,
)
from server.apps.drive.models import Entry


@pytest.mark.django_db
class TestSoftDeleteEntry:
    """Tests for soft_delete_entry function."""

    def test_soft_delete_sets_flags(self, drive, make_folder, make_file):
        """Test soft delete sets is_deleted, deleted_at, original_parent."""
        docs = make_folder('Docs')
        file_entry = make_file('a.txt', parent=docs)

        result = soft_delete_entry(drive, file_entry.pk)

        assert result.is_deleted is True
        assert result.deleted_at is not None
        assert result.original_parent_id == docs.pk
        assert not Entry.objects.filter(pk=file_entry.pk).exists()

    def test_soft_delete_preserves_storage(
        self,
        drive,
        make_file,
        bucket_keys,
    ):
        """Test soft delete keeps the content in storage."""
        file_entry = make_file('a.txt')

        soft_delete_entry(drive, file_entry.pk)

        assert file_entry.content_key in bucket_keys()

    def test_folder_is_shallow(self, drive, make_folder, make_file):
        """Test only the folder itself is flagged."""
        docs = make_folder('Docs')
        file_entry = make_file('a.txt', parent=docs)

        soft_delete_entry(drive, docs.pk)

        assert Entry.all_objects.get(pk=file_entry.pk).is_deleted is False
        assert list_children(drive) == []

    def test_already_trashed(self, drive, make_folder):
        """Test trashing twice raises not found."""
        docs = make_folder('Docs')
        soft_delete_entry(drive, docs.pk)

        with pytest.raises(EntryNotFoundError):
            soft_delete_entry(drive, docs.pk)

    def test_frees_name(self, drive, make_folder):
        """Test a new sibling may take a trashed entry's name."""
        docs = make_folder('Docs')
        soft_delete_entry(drive, docs.pk)

        assert make_folder('Docs').pk != docs.pk


@pytest.mark.django_db
class TestRestoreEntry:
    """Tests for restore_entry function."""

    def test_restore_to_original_parent(self, drive, make_folder, make_file):
        """Test restore puts the entry back where it was."""
        docs = make_folder('Docs')
        file_entry = make_file('a.txt', parent=docs)
        soft_delete_entry(drive, file_entry.pk)

        restored = restore_entry(drive, file_entry.pk)

        assert restored.is_deleted is False
        assert restored.deleted_at is None
        assert restored.original_parent_id is None
        assert restored.parent_id == docs.pk
        assert restored.path == '/Docs/a.txt'

    def test_restore_after_parent_purged(self, drive, make_folder, make_file):
        """Test restore falls back to root once the parent is gone."""
        docs = make_folder('Docs')
        file_entry = make_file('a.txt', parent=docs)
        soft_delete_entry(drive, file_entry.pk)
        hard_delete_recursive(drive, docs.pk)

        restored = restore_entry(drive, file_entry.pk)

        assert restored.parent_id is None
        assert restored.path == '/a.txt'
        assert [entry.pk for entry in list_children(drive)] == [file_entry.pk]

    def test_restore_while_parent_trashed(self, drive, make_folder, make_file):
        """Test restore falls back to root when the parent is in trash."""
        docs = make_folder('Docs')
        file_entry = make_file('a.txt', parent=docs)
        soft_delete_entry(drive, file_entry.pk)
        soft_delete_entry(drive, docs.pk)

        restored = restore_entry(drive, file_entry.pk)

        assert restored.parent_id is None

    def test_restore_below_trashed_ancestor(
        self,
        drive,
        make_folder,
        make_file,
        bucket_keys,
    ):
        """Test restore skips a live parent hidden by a trashed ancestor."""
        outer = make_folder('A')
        inner = make_folder('B', parent=outer)
        file_entry = make_file('e.txt', parent=inner)
        soft_delete_entry(drive, file_entry.pk)
        soft_delete_entry(drive, outer.pk)

        restored = restore_entry(drive, file_entry.pk)

        assert restored.parent_id is None
        assert restored.path == '/e.txt'
        assert [entry.pk for entry in list_children(drive)] == [file_entry.pk]

        empty_trash(drive)

        assert Entry.objects.filter(pk=file_entry.pk).exists()
        assert file_entry.content_key in bucket_keys()

    def test_restore_renames_on_conflict(self, drive, make_file):
        """Test restore adds a marker when the name is taken."""
        first = make_file('report.pdf')
        soft_delete_entry(drive, first.pk)
        make_file('report.pdf')

        restored = restore_entry(drive, first.pk)

        assert restored.name == 'report (restored).pdf'
        assert restored.path == '/report (restored).pdf'

    def test_restore_renames_repeatedly(self, drive, make_folder):
        """Test a second conflict gets a numbered marker."""
        make_folder('Docs (restored)')
        first = make_folder('Docs')
        soft_delete_entry(drive, first.pk)
        make_folder('Docs')

        restored = restore_entry(drive, first.pk)

        assert restored.name == 'Docs (restored 2)'

    def test_restored_folder_brings_back_children(
        self,
        drive,
        make_folder,
        make_file,
    ):
        """Test children of a restored folder are reachable again."""
        docs = make_folder('Docs')
        file_entry = make_file('a.txt', parent=docs)
        soft_delete_entry(drive, docs.pk)

        restore_entry(drive, docs.pk)

        assert [entry.pk for entry in list_children(drive, docs.pk)] == [
            file_entry.pk,
        ]

    def test_restore_live_entry(self, drive, make_folder):
        """Test live entries cannot be restored."""
        docs = make_folder('Docs')

        with pytest.raises(EntryNotFoundError):
            restore_entry(drive, docs.pk)


@pytest.mark.django_db
class TestPurgeAndEmptyTrash:
    """Tests for purge_entry, list_trash and empty_trash functions."""

    def test_purge_trashed_folder(
        self,
        drive,
        make_folder,
        make_file,
        bucket_keys,
    ):
        """Test purging a trashed folder removes its subtree and content."""
        docs = make_folder('Docs')
        make_file('a.txt', parent=docs)
        soft_delete_entry(drive, docs.pk)

        report = purge_entry(drive, docs.pk)

        assert report.purged == 2
        assert Entry.all_objects.count() == 0
        assert bucket_keys() == set()

    def test_purge_live_entry(self, drive, make_folder):
        """Test live entries cannot be purged from trash."""
        docs = make_folder('Docs')

        with pytest.raises(EntryNotFoundError):
            purge_entry(drive, docs.pk)

    def test_list_trash_newest_first(self, drive, make_file):
        """Test trash lists only trashed entries, newest first."""
        older = make_file('a.txt')
        newer = make_file('b.txt')
        make_file('c.txt')
        soft_delete_entry(drive, older.pk)
        soft_delete_entry(drive, newer.pk)
        Entry.all_objects.filter(pk=older.pk).update(
            deleted_at=timezone.now() - timedelta(hours=1),
        )

        assert [entry.pk for entry in list_trash(drive)] == [
            newer.pk,
            older.pk,
        ]

    def test_list_trash_is_per_owner(self, drive, other_drive, make_file):
        """Test trash of other owners is not listed."""
        foreign = make_file('a.txt', context=other_drive)
        soft_delete_entry(other_drive, foreign.pk)

        assert list(list_trash(drive)) == []

    def test_empty_trash(self, drive, make_folder, make_file, bucket_keys):
        """Test emptying trash purges every trashed entry."""
        docs = make_folder('Docs')
        make_file('a.txt', parent=docs)
        loose = make_file('b.txt')
        kept = make_file('c.txt')
        soft_delete_entry(drive, docs.pk)
        soft_delete_entry(drive, loose.pk)

        report = empty_trash(drive)

        assert report.purged == 3
        assert report.is_complete
        assert list(Entry.all_objects.values_list('pk', flat=True)) == [
            kept.pk,
        ]
        assert bucket_keys() == {kept.content_key}

    def test_empty_trash_continues_after_failure(
        self,
        drive,
        make_file,
        monkeypatch,
    ):
        """Test one failing entry does not stop the others."""
        broken = make_file('a.txt')
        fine = make_file('b.txt')
        soft_delete_entry(drive, broken.pk)
        soft_delete_entry(drive, fine.pk)

        original_purge = trash_operations.purge_entry

        def flaky_purge(context, entry_id):
            if entry_id == broken.pk:
                raise RuntimeError('database unavailable')
            return original_purge(context, entry_id)

        monkeypatch.setattr(trash_operations, 'purge_entry', flaky_purge)

        report = empty_trash(drive)

        assert report.purged == 1
        assert report.failed_ids == [broken.pk]
        assert Entry.all_objects.filter(pk=broken.pk).exists()
        assert not Entry.all_objects.filter(pk=fine.pk).exists()

    def test_list_expired_trash(self, drive, other_drive, make_file):
        """Test expiry listing spans owners and respects the cutoff."""
        old_mine = make_file('a.txt')
        old_theirs = make_file('b.txt', context=other_drive)
        fresh = make_file('c.txt')
        soft_delete_entry(drive, old_mine.pk)
        soft_delete_entry(other_drive, old_theirs.pk)
        soft_delete_entry(drive, fresh.pk)
        Entry.all_objects.filter(pk__in=[old_mine.pk, old_theirs.pk]).update(
            deleted_at=timezone.now() - timedelta(days=40),
        )

        expired = list_expired_trash(timezone.now() - timedelta(days=30))

        assert {entry.pk for entry in expired} == {old_mine.pk, old_theirs.pk}
