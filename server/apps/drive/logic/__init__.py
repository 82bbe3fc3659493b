"""Business logic layer for drive app.

This package contains all business logic for the drive tree:
- Folder and file creation, rename, move, star, annotations
- Ancestor walks, path materialization and breadcrumbs
- Recursive folder size and recursive deletion
- Trash lifecycle: soft delete, restore, purge, empty
- Read-only listings, search and storage accounting

Every operation receives an explicit DriveContext and is scoped to its
owner. Keep this layer separate from models (data layer) and
infrastructure (external systems).
"""
