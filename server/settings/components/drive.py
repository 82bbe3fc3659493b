"""Drive tree settings."""

from server.settings.components import config

# Bound for ancestor and subtree walks, also the deepest allowed nesting
DRIVE_MAX_TREE_DEPTH = config('DRIVE_MAX_TREE_DEPTH', default=100, cast=int)

# Lifetime of signed download URLs in seconds
DRIVE_SIGNED_URL_EXPIRES = config(
    'DRIVE_SIGNED_URL_EXPIRES',
    default=3600,
    cast=int,
)

# Days an entry stays in trash before `purge_trash` removes it
DRIVE_TRASH_RETENTION_DAYS = config(
    'DRIVE_TRASH_RETENTION_DAYS',
    default=30,
    cast=int,
)

DRIVE_ROOT_LABEL = config('DRIVE_ROOT_LABEL', default='My Drive')

DRIVE_RECENT_LIMIT = config('DRIVE_RECENT_LIMIT', default=20, cast=int)
