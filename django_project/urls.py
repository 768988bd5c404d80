"""subdomains portal URL Configuration

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/stable/topics/http/urls/
"""
from django.conf import settings
from django.urls import include, path
from django.contrib import admin

from subdomains.views import HealthCheck

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('subdomains.urls')),
    path('_health', HealthCheck.as_view())
]

if settings.SERVE_STATIC:
    from django.conf.urls.static import static
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
