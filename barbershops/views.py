import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from barbers.serializers import BarberSerializer
from core.permissions import IsPlatformAdmin, IsShopOwnerOrAdmin
from reviews.serializers import ReviewSerializer
from services.serializers import ServiceSerializer
from .models import Shop
from .serializers import ShopSerializer, ShopSlotsSerializer
from .services import compute_shop_statistics, platform_statistics

logger = logging.getLogger(__name__)


class ShopViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ShopSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None

    def get_queryset(self):
        queryset = Shop.objects.active()
        city = self.request.query_params.get("city", "").strip()
        if city:
            queryset = queryset.in_city(city)
        return queryset.order_by("-average_rating", "shop_name")

    @action(detail=True, methods=["get"])
    def services(self, request, pk=None):
        shop = self.get_object()
        services = shop.services.active()
        return Response(ServiceSerializer(services, many=True).data)

    @action(detail=True, methods=["get"])
    def barbers(self, request, pk=None):
        shop = self.get_object()
        barbers = shop.barbers.filter(is_active=True)
        return Response(BarberSerializer(barbers, many=True).data)

    @action(detail=True, methods=["get"])
    def reviews(self, request, pk=None):
        shop = self.get_object()
        reviews = shop.reviews.select_related("customer").order_by("-created_at")
        return Response(ReviewSerializer(reviews, many=True).data)

    @action(detail=True, methods=["get"], url_path="slots")
    def slots(self, request, pk=None):
        serializer = ShopSlotsSerializer(
            data=request.query_params,
            context={"shop": self.get_object()}
        )
        serializer.is_valid(raise_exception=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


class MyShopView(generics.RetrieveUpdateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ShopSerializer
    http_method_names = ["get", "patch"]

    def get_object(self):
        shop = Shop.objects.filter(owner=self.request.user).first()
        if shop is None:
            raise NotFound("You have not registered a shop yet.")
        return shop


class MyShopStatsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        shop = Shop.objects.filter(owner=request.user).first()
        if shop is None:
            raise NotFound("You have not registered a shop yet.")
        return Response(compute_shop_statistics(shop.pk))


class ShopStatsView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsShopOwnerOrAdmin]

    def get(self, request, pk):
        shop = get_object_or_404(Shop, pk=pk)
        self.check_object_permissions(request, shop)
        return Response(compute_shop_statistics(shop.pk))


class AdminStatsView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        return Response(platform_statistics())


class AdminShopListView(generics.ListAPIView):
    permission_classes = [IsPlatformAdmin]
    serializer_class = ShopSerializer
    queryset = Shop.objects.select_related("owner").order_by("-created_at")


class AdminShopToggleActiveView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request, pk):
        shop = get_object_or_404(Shop, pk=pk)
        shop.is_active = not shop.is_active
        shop.save(update_fields=["is_active", "updated_at"])
        logger.info("Admin %s set shop %s active=%s", request.user.pk, shop.pk, shop.is_active)
        return Response(ShopSerializer(shop).data)


class AdminShopVerifyView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request, pk):
        shop = get_object_or_404(Shop, pk=pk)
        shop.is_verified = True
        shop.save(update_fields=["is_verified", "updated_at"])
        logger.info("Admin %s verified shop %s", request.user.pk, shop.pk)
        return Response(ShopSerializer(shop).data)
