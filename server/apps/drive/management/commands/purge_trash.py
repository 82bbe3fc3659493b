"""Management command to purge expired entries from trash."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.drive.logic.context import DriveContext
from server.apps.drive.logic.trash_operations import (
    get_retention_days,
    list_expired_trash,
    purge_entry,
)

_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Permanently delete entries that stayed in trash past retention."""

    help = 'Purge entries that have been in trash longer than the retention'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--days',
            type=int,
            default=None,
            help='Retention in days (default: DRIVE_TRASH_RETENTION_DAYS)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be purged without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max entries to process (default: {_DEFAULT_BATCH_SIZE})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the purge command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        retention_days = options['days']
        if retention_days is None:
            retention_days = get_retention_days()
        cutoff = timezone.now() - timedelta(days=retention_days)

        self.stdout.write(
            f'Looking for entries trashed before {cutoff} '
            f'(older than {retention_days} days)',
        )

        expired = list_expired_trash(cutoff)[:options['batch_size']]

        count = 0
        failed = 0
        dangling = 0

        for entry in expired:
            if dry_run:
                self.stdout.write(
                    f'Would purge: {entry.kind} {entry.name} '
                    f'(owner: {entry.owner.username}, '
                    f'deleted: {entry.deleted_at})',
                )
                count += 1
                continue

            try:
                report = purge_entry(DriveContext.for_owner(entry.owner), entry.pk)
            except Exception as exc:
                self.stderr.write(f'Failed to purge {entry.pk}: {exc}')
                logger.exception(
                    'Failed to purge entry from trash: %d',
                    entry.pk,
                )
                failed += 1
                continue

            count += 1
            dangling += len(report.dangling_keys)
            logger.info(
                'Purged entry from trash: %s (ID: %d, %d removed)',
                entry.name,
                entry.pk,
                report.purged,
            )

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would purge {count} entries from trash'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Purged {count} entries from trash, {failed} failed, '
                    f'{dangling} dangling objects',
                ),
            )
