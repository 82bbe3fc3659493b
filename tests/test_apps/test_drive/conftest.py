"""Shared fixtures for drive app tests."""

import boto3
import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from moto import mock_aws

from server.apps.drive.commands import CreateFileCommand, CreateFolderCommand
from server.apps.drive.infrastructure.storage import FileStorage
from server.apps.drive.logic.context import DriveContext
from server.apps.drive.logic.entry_operations import create_file, create_folder

User = get_user_model()

BUCKET_NAME = 'cloud-drive'


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches a real account."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def mock_s3(aws_credentials):
    """Mock S3 service with cloud-drive bucket.

    Yields:
        boto3 S3 resource with cloud-drive bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=BUCKET_NAME)
        yield conn


@pytest.fixture
def storage(mock_s3):
    """Drive storage bound to the mocked bucket.

    Returns:
        FileStorage instance.
    """
    return FileStorage(**settings.STORAGES['default']['OPTIONS'])


@pytest.fixture
def drive(user, storage):
    """Drive context of the test user.

    Returns:
        DriveContext with the default depth bound.
    """
    return DriveContext(owner=user, storage=storage, max_depth=100)


@pytest.fixture
def other_drive(other_user, storage):
    """Drive context of the second user.

    Returns:
        DriveContext for isolation tests.
    """
    return DriveContext(owner=other_user, storage=storage, max_depth=100)


@pytest.fixture
def make_folder(drive):
    """Factory creating folders in the test user's drive.

    Returns:
        Callable taking a name and an optional parent entry.
    """
    def factory(name, parent=None, context=None):
        return create_folder(
            context or drive,
            CreateFolderCommand(
                name=name,
                parent_id=parent.pk if parent is not None else None,
            ),
        )
    return factory


@pytest.fixture
def make_file(drive, mock_s3):
    """Factory creating file entries backed by real objects in the bucket.

    Returns:
        Callable taking a name, size and an optional parent entry.
    """
    counter = iter(range(1, 10_000))

    def factory(name, size_bytes=10, parent=None, context=None):
        context = context or drive
        content_key = f'{context.owner.pk}/{next(counter)}-{name}'
        mock_s3.Bucket(BUCKET_NAME).put_object(
            Key=content_key,
            Body=b'x' * size_bytes,
        )
        return create_file(
            context,
            CreateFileCommand(
                name=name,
                content_key=content_key,
                size_bytes=size_bytes,
                mime_type='text/plain',
                parent_id=parent.pk if parent is not None else None,
            ),
        )
    return factory


@pytest.fixture
def bucket_keys(mock_s3):
    """Reader of the keys currently stored in the mocked bucket.

    Returns:
        Callable returning a set of keys.
    """
    def reader():
        return {obj.key for obj in mock_s3.Bucket(BUCKET_NAME).objects.all()}
    return reader
