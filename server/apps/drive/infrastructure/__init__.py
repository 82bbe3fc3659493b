"""Infrastructure layer for drive app.

This package contains integrations with external systems:
- Custom storage backend for the S3-compatible object store
- Name validation and object key generation

Keep infrastructure concerns separate from business logic.
"""
