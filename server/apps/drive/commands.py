"""Typed commands accepted by the drive tree operations.

Each command is validated once, when it is built, so the logic layer can
trust its fields. Validation failures raise Django's ``ValidationError``.
"""

from dataclasses import dataclass, field
from typing import Final, final

from django.core.exceptions import ValidationError

from server.apps.drive.infrastructure.naming import normalize_entry_name

_MAX_TAGS: Final = 10


def _set(command: object, attribute: str, value: object) -> None:
    # Commands are frozen, normalized values are written once here
    object.__setattr__(command, attribute, value)  # noqa: WPS609


def _validate_id(value: int | None, label: str) -> None:
    if value is not None and value <= 0:
        raise ValidationError(f'{label} must be a positive integer')


@final
@dataclass(frozen=True, slots=True)
class CreateFolderCommand:
    """Create a folder under ``parent_id`` (None for root)."""

    name: str
    parent_id: int | None = None

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        _set(self, 'name', normalize_entry_name(self.name))
        _validate_id(self.parent_id, 'parent_id')


@final
@dataclass(frozen=True, slots=True)
class CreateFileCommand:
    """Register already stored content as a file entry."""

    name: str
    content_key: str
    size_bytes: int
    mime_type: str
    parent_id: int | None = None

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        _set(self, 'name', normalize_entry_name(self.name))
        if not self.content_key:
            raise ValidationError('content_key cannot be empty')
        if self.size_bytes < 0:
            raise ValidationError('size_bytes cannot be negative')
        _validate_id(self.parent_id, 'parent_id')


@final
@dataclass(frozen=True, slots=True)
class UploadFileCommand:
    """Upload raw bytes and create a file entry for them.

    ``mime_type`` is guessed from the name when not given.
    """

    name: str
    content: bytes
    mime_type: str | None = None
    parent_id: int | None = None

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        _set(self, 'name', normalize_entry_name(self.name))
        _validate_id(self.parent_id, 'parent_id')


@final
@dataclass(frozen=True, slots=True)
class RenameCommand:
    """Give an entry a new name within its current parent."""

    entry_id: int
    new_name: str

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        _validate_id(self.entry_id, 'entry_id')
        _set(self, 'new_name', normalize_entry_name(self.new_name))


@final
@dataclass(frozen=True, slots=True)
class MoveCommand:
    """Re-parent an entry, ``new_parent_id`` None moves to root."""

    entry_id: int
    new_parent_id: int | None = None

    def __post_init__(self) -> None:
        """Validate fields."""
        _validate_id(self.entry_id, 'entry_id')
        _validate_id(self.new_parent_id, 'new_parent_id')


@final
@dataclass(frozen=True, slots=True)
class AnnotateCommand:
    """Store assistant-derived annotations on a file.

    Tags are trimmed, empty ones dropped, and at most ten are kept.
    """

    entry_id: int
    summary: str | None = None
    key_points: tuple[str, ...] = field(default=())
    tags: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        _validate_id(self.entry_id, 'entry_id')
        summary = (self.summary or '').strip() or None
        _set(self, 'summary', summary)
        _set(self, 'key_points', tuple(
            point.strip() for point in self.key_points if point.strip()
        ))
        cleaned_tags = [str(tag).strip() for tag in self.tags]
        _set(self, 'tags', tuple(tag for tag in cleaned_tags if tag)[:_MAX_TAGS])
