"""
Root URL configuration.

API routes live in ``records.routers``; the admin and the generated
OpenAPI docs (``/swagger/``, ``/redoc/``) are mounted here.
"""
from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

api_info = openapi.Info(
    title="SecureHealth API",
    default_version='v1',
    description="Patient profiles, hospital access grants, record search and daily rewards.",
)

schema_view = get_schema_view(api_info, public=True, permission_classes=(permissions.AllowAny,))

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('records.routers')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
