from django.urls import path
from rest_framework.routers import DefaultRouter
from barbershops import views

router = DefaultRouter()
router.register(r'shops', views.ShopViewSet, basename='shop')

urlpatterns = [
    path("shops/mine/", views.MyShopView.as_view(), name="my-shop"),
    path("shops/mine/stats/", views.MyShopStatsView.as_view(), name="my-shop-stats"),
    path("shops/<int:pk>/stats/", views.ShopStatsView.as_view(), name="shop-stats"),
    path("admin/stats/", views.AdminStatsView.as_view(), name="admin-stats"),
    path("admin/shops/", views.AdminShopListView.as_view(), name="admin-shops"),
    path("admin/shops/<int:pk>/toggle-active/", views.AdminShopToggleActiveView.as_view(), name="admin-shop-toggle-active"),
    path("admin/shops/<int:pk>/verify/", views.AdminShopVerifyView.as_view(), name="admin-shop-verify"),
]

urlpatterns += router.urls
