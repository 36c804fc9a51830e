from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('accounts.urls')),
    path('api/', include('barbershops.urls')),
    path('api/', include('services.urls')),
    path('api/', include('appointments.urls')),
    path('api/', include('reviews.urls')),
]
