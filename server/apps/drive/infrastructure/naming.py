"""Name handling utilities for drive entries and stored objects."""

import mimetypes
import re
import time
import uuid
from typing import Final

from django.core.exceptions import ValidationError

NAME_MAX_LENGTH: Final = 255
_RESERVED_NAMES: Final = frozenset(('.', '..'))
_UNSAFE_KEY_CHARS: Final = re.compile(r'[^a-zA-Z0-9.-]')
_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def normalize_entry_name(name: str) -> str:
    """Trim and validate an entry display name.

    Args:
        name: Name supplied by the caller.

    Returns:
        Name without surrounding whitespace.

    Raises:
        ValidationError: If the name is empty, reserved, too long or
            contains a path separator or NUL byte.
    """
    normalized = name.strip()
    if not normalized:
        raise ValidationError('Name cannot be empty')
    if normalized in _RESERVED_NAMES:
        raise ValidationError(f'Name {normalized!r} is reserved')
    if '/' in normalized or '\x00' in normalized:
        raise ValidationError('Name cannot contain "/" or NUL bytes')
    if len(normalized) > NAME_MAX_LENGTH:
        raise ValidationError(
            f'Name is longer than {NAME_MAX_LENGTH} characters',
        )
    return normalized


def sanitize_for_key(name: str) -> str:
    """Replace characters that are unsafe in object store keys.

    Example: 'my report (1).pdf' -> 'my_report__1_.pdf'

    Args:
        name: Original filename.

    Returns:
        Name restricted to letters, digits, dots and dashes.
    """
    return _UNSAFE_KEY_CHARS.sub('_', name)


def build_object_key(owner_id: int, name: str) -> str:
    """Build a unique object store key for an upload.

    Keys follow '{owner_id}/{timestamp_ms}-{uuid}-{sanitized_name}' so
    that every owner's blobs share a prefix and never collide.

    Args:
        owner_id: Owner's user ID.
        name: Original filename.

    Returns:
        Object store key.
    """
    timestamp = int(time.time() * 1000)
    return f'{owner_id}/{timestamp}-{uuid.uuid4()}-{sanitize_for_key(name)}'


def detect_mime_type(filename: str) -> str:
    """Guess MIME type from the filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string, 'application/octet-stream' when unknown.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or _DEFAULT_MIME_TYPE


def restored_name(name: str, attempt: int, *, keep_suffix: bool) -> str:
    """Build the name used when restoring into an occupied slot.

    Example: ('report.pdf', 1) -> 'report (restored).pdf',
    ('report.pdf', 2) -> 'report (restored 2).pdf'

    Args:
        name: Original entry name.
        attempt: 1-based attempt counter.
        keep_suffix: Keep the extension after the marker (files).

    Returns:
        Candidate name.
    """
    marker = ' (restored)' if attempt == 1 else f' (restored {attempt})'
    stem, dot, suffix = name.rpartition('.')
    if not keep_suffix or not stem:
        return f'{name}{marker}'
    return f'{stem}{marker}{dot}{suffix}'
