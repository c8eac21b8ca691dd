"""
URL configuration for CafeDash project.

The staff pages themselves are rendered elsewhere; this project only exposes
the Django admin and the marketing endpoints used by the staff dashboard.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    # Marketing: SMS templates, promo audience and campaigns
    path("marketing/", include("marketing.urls")),
]
