import logging

from rest_framework import permissions, viewsets
from rest_framework.exceptions import NotFound

from core.permissions import IsShopOwnerOrAdmin
from .models import Service
from .serializers import ServiceSerializer

logger = logging.getLogger(__name__)


class ServiceViewSet(viewsets.ModelViewSet):
    """Catalog management for the requesting owner's shop. Deleting only deactivates."""
    serializer_class = ServiceSerializer
    permission_classes = [permissions.IsAuthenticated, IsShopOwnerOrAdmin]
    pagination_class = None

    def get_queryset(self):
        user = self.request.user
        qs = Service.objects.select_related('shop')
        if user.is_admin:
            return qs
        return qs.filter(shop__owner=user)

    def perform_create(self, serializer):
        shop = getattr(self.request.user, 'shop', None)
        if shop is None:
            raise NotFound('Register a shop before adding services.')
        service = serializer.save(shop=shop)
        logger.info('Service %s created for shop %s', service.pk, shop.pk)

    def perform_destroy(self, instance):
        instance.deactivate()
        logger.info('Service %s deactivated', instance.pk)
