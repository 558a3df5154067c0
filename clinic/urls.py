"""
URL configuration for the clinic backend project.

The `urlpatterns` list routes URLs to views.  This module includes the
Django admin, the API routes provided by the core app, Prometheus metrics
and uploaded ultrasound images.  OpenAPI documentation is exposed at
``/swagger/`` and ``/redoc/``.
"""
from django.conf import settings
from django.contrib import admin
from django.urls import include, path, re_path
from django.views.static import serve

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

# API metadata for Swagger/OpenAPI documentation
api_info = openapi.Info(
    title="Clinic Backend API",
    default_version='v1',
    description="Role gated clinic operations with real-time department dashboards.",
)

schema_view = get_schema_view(
    api_info,
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    # Django admin site (useful for development)
    path('admin/', admin.site.urls),
    path('', include('django_prometheus.urls')),
    # Include API routes from the core app
    path('', include('core.routers')),
    # Uploaded scan images
    re_path(r'^uploads/(?P<path>.+)$', serve, {'document_root': settings.MEDIA_ROOT}),
    # Swagger and ReDoc
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]

handler404 = 'core.exceptions.json_404'
handler500 = 'core.exceptions.json_500'
