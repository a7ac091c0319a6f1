# gadgetstore/urls.py
"""
Main URL configuration:
1. Django admin
2. Store REST API (gadgetstore.presentation)
3. API documentation (Swagger/Redoc)
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


urlpatterns = [
    path('', include('gadgetstore.presentation.urls')),

    path('admin/', admin.site.urls),

    # ====================================================================
    # API DOCUMENTATION (DRF SPECTACULAR)
    # ====================================================================
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/docs/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
