"""Exceptions for drive app.

Every structural precondition failure is raised as a ``DriveError``
subclass so callers can map ``code`` to a transport status.
"""

from typing import ClassVar


class DriveError(Exception):
    """Base class for failures of drive tree operations."""

    code: ClassVar[str] = 'drive_error'


class EntryNotFoundError(DriveError):
    """Entry or parent does not exist, is in trash, or is not owned."""

    code: ClassVar[str] = 'not_found'

    def __init__(self, entry_id: int | None, kind: str = 'entry') -> None:
        """Initialize EntryNotFoundError.

        Args:
            entry_id: ID that could not be resolved.
            kind: What was looked up ('entry', 'folder', 'file').
        """
        self.entry_id = entry_id
        self.kind = kind
        super().__init__(f'{kind.capitalize()} not found: {entry_id}')


class EntryConflictError(DriveError):
    """A live sibling of the same kind already uses the name."""

    code: ClassVar[str] = 'conflict'

    def __init__(
        self,
        name: str,
        kind: str,
        parent_id: int | None,
    ) -> None:
        """Initialize EntryConflictError.

        Args:
            name: Conflicting name.
            kind: Entry kind ('file' or 'folder').
            parent_id: Parent folder ID, None for root.
        """
        self.name = name
        self.kind = kind
        self.parent_id = parent_id
        location = 'root' if parent_id is None else f'folder {parent_id}'
        super().__init__(
            f'A {kind} named {name!r} already exists in {location}',
        )


class InvalidCycleError(DriveError):
    """Move would place a folder inside itself or its own descendant."""

    code: ClassVar[str] = 'invalid_cycle'

    def __init__(self, entry_id: int, target_id: int) -> None:
        """Initialize InvalidCycleError.

        Args:
            entry_id: Folder being moved.
            target_id: Requested destination folder.
        """
        self.entry_id = entry_id
        self.target_id = target_id
        super().__init__(
            f'Cannot move folder {entry_id} into its own '
            f'descendant {target_id}',
        )


class InternalInconsistencyError(DriveError):
    """Stored hierarchy is corrupted (cycle in the parent chain).

    The message is deliberately generic; ``detail`` carries the internal
    context for logs only.
    """

    code: ClassVar[str] = 'internal_inconsistency'

    def __init__(self, detail: str) -> None:
        """Initialize InternalInconsistencyError.

        Args:
            detail: Internal description, not meant for end users.
        """
        self.detail = detail
        super().__init__('Folder hierarchy could not be resolved')


class TreeTooDeepError(DriveError):
    """Hierarchy exceeds the configured depth bound."""

    code: ClassVar[str] = 'too_deep'

    def __init__(self, max_depth: int) -> None:
        """Initialize TreeTooDeepError.

        Args:
            max_depth: Configured maximum number of levels.
        """
        self.max_depth = max_depth
        super().__init__(
            f'Folder hierarchy is deeper than {max_depth} levels',
        )
