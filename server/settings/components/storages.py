"""Django storage configuration for S3-compatible backends.

Drive file contents live in an S3-compatible bucket (AWS S3, MinIO,
Cloudflare R2), all served by the same S3Storage backend. The tree
itself only keeps the object keys.
"""

from typing import Any, Final

from server.settings.components import config

# Uses S3-compatible storage for drive contents, local storage for static files
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.drive.infrastructure.storage.FileStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='cloud-drive',
            ),
            # Empty keys fall back to the boto3 credential chain
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'file_overwrite': False,  # Prevent accidental overwrites
            'default_acl': None,  # Inherit bucket ACL
            'querystring_auth': True,  # Download URLs are always signed
        },
    },
    'staticfiles': {
        # Keep static files separate from drive contents
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
