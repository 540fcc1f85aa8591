"""
URL configuration for the tableserve project.

All API routes live under /api/. The OpenAPI schema is served at
/api/schema/ with Swagger UI at /api/docs/.
"""
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/', include('restaurants.urls')),
    path('api/', include('menu.urls')),
    path('api/', include('tables.urls')),
    path('api/', include('orders.urls')),
    path('api/', include('billing.urls')),
]
