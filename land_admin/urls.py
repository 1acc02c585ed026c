"""
Land Administration Back Office - Root URL Configuration
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('land_registry.urls')),
]
