"""
URL configuration for the school results project.

The result engine itself has no HTTP surface of its own; the portal app
exposes thin JSON/PDF endpoints over it.
"""


from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    path("admin/", admin.site.urls),
    path("portal/", include("portal.urls")),
]

#  MEDIA FILES (only in development)
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
