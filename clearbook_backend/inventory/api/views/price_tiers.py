# inventory/api/views/price_tiers.py

"""
GET    /api/inventory/items/<id>/price-tiers/
POST   /api/inventory/items/<id>/price-tiers/     (409 on duplicate tier name)
GET    /api/inventory/price-tiers/<id>/
PATCH  /api/inventory/price-tiers/<id>/
DELETE /api/inventory/price-tiers/<id>/
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.views.base import error_response
from inventory.api.serializers.price_tiers import (
    PriceTierSerializer,
    PriceTierUpdateSerializer,
    PriceTierWriteSerializer,
)
from inventory.api.views.base import InventoryAPIView
from inventory.models import InventoryItem, PriceTier
from inventory.services.price_tier_service import (
    DuplicatePriceTierError,
    PriceTierError,
    create_price_tier,
    delete_price_tier,
    list_price_tiers,
    update_price_tier,
)
from permissions.services.audit import log_action


def _tier_error(exc) -> Response:
    if isinstance(exc, DuplicatePriceTierError):
        return error_response(exc, status.HTTP_409_CONFLICT)
    return error_response(exc)


class ItemPriceTierListCreateView(InventoryAPIView):
    serializer_class = PriceTierWriteSerializer

    @extend_schema(tags=["inventory"], responses=PriceTierSerializer(many=True))
    def get(self, request, pk):
        item = self.get_company_object(InventoryItem, pk)
        tiers = list_price_tiers(item).select_related("item")
        return Response(PriceTierSerializer(tiers, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=PriceTierWriteSerializer, responses={201: PriceTierSerializer})
    def post(self, request, pk):
        item = self.get_company_object(InventoryItem, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            tier = create_price_tier(item=item, **s.validated_data)
        except PriceTierError as exc:
            return _tier_error(exc)

        log_action(
            self.company,
            request.user,
            "create_price_tier",
            f"price_tier:{tier.pk}",
            {"sku": item.sku, "tier": tier.tier_name, "price": tier.price},
        )
        return Response(PriceTierSerializer(tier).data, status=status.HTTP_201_CREATED)


class PriceTierDetailView(InventoryAPIView):
    serializer_class = PriceTierUpdateSerializer

    @extend_schema(tags=["inventory"], responses=PriceTierSerializer)
    def get(self, request, pk):
        tier = self.get_company_object(PriceTier, pk)
        return Response(PriceTierSerializer(tier).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=PriceTierUpdateSerializer, responses={200: PriceTierSerializer})
    def patch(self, request, pk):
        tier = self.get_company_object(PriceTier, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            tier = update_price_tier(tier=tier, **s.validated_data)
        except PriceTierError as exc:
            return _tier_error(exc)

        log_action(self.company, request.user, "update_price_tier", f"price_tier:{tier.pk}")
        return Response(PriceTierSerializer(tier).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], responses={204: None})
    def delete(self, request, pk):
        tier = self.get_company_object(PriceTier, pk)
        delete_price_tier(tier=tier)
        log_action(self.company, request.user, "delete_price_tier", f"price_tier:{pk}")
        return Response(status=status.HTTP_204_NO_CONTENT)
