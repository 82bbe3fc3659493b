"""Settings for the deployed service."""

from typing import Final

from server.settings.components import config

DEBUG: Final = False

ALLOWED_HOSTS: Final = tuple(
    host.strip()
    for host in config('DJANGO_ALLOWED_HOSTS', default='').split(',')
    if host.strip()
)

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
