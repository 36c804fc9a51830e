from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from . import views


urlpatterns = [
    path('auth/register/', views.RegisterView.as_view(), name='register'),
    path('auth/register-shop/', views.ShopOwnerRegisterView.as_view(), name='register-shop'),
    path('auth/login/', views.LoginView.as_view(), name='login'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('auth/me/', views.MeView.as_view(), name='me'),
    path('admin/users/', views.AdminUserListView.as_view(), name='admin-users'),
    path('admin/users/<uuid:pk>/', views.AdminUserDeactivateView.as_view(), name='admin-user-deactivate'),
]
