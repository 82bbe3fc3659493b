"""Explicit per-request handle passed to every drive operation."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, final

from django.conf import settings
from django.core.files.storage import default_storage

if TYPE_CHECKING:
    from server.apps.drive.infrastructure.storage import FileStorage

# User type for Django's dynamic user model
_User = Any

_DEFAULT_MAX_DEPTH: Final = 100


def get_max_depth() -> int:
    """Get the depth bound for ancestor and subtree walks.

    Returns:
        Maximum depth from settings or default of 100.
    """
    return getattr(settings, 'DRIVE_MAX_TREE_DEPTH', _DEFAULT_MAX_DEPTH)


@final
@dataclass(frozen=True, slots=True)
class DriveContext:
    """Authenticated owner plus the collaborators an operation needs.

    Every query and mutation is scoped to ``owner``; nothing outside the
    owner's tree is ever read or written.
    """

    owner: _User
    storage: 'FileStorage'
    max_depth: int

    @classmethod
    def for_owner(cls, owner: _User) -> 'DriveContext':
        """Build a context with the configured storage and depth bound.

        Args:
            owner: Authenticated user.

        Returns:
            DriveContext for the user.
        """
        return cls(
            owner=owner,
            storage=default_storage,  # type: ignore[arg-type]
            max_depth=get_max_depth(),
        )
