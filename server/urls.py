"""Main URL mapping configuration file.

The drive is consumed through its logic layer; only the admin is
exposed over HTTP here.
"""

from django.contrib import admin
from django.urls import path

admin.site.site_header = 'Cloud Drive'
admin.site.site_title = 'Cloud Drive admin'

urlpatterns = [
    path('admin/', admin.site.urls),
]
