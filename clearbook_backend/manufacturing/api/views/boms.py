# manufacturing/api/views/boms.py

"""
GET  /api/manufacturing/boms/          list (?finished_good_id=&is_active=)
POST /api/manufacturing/boms/          create header + components + operations + overheads
GET  /api/manufacturing/boms/<id>/
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.views.base import error_response
from accounting.models.account import Account
from inventory.models import InventoryItem
from manufacturing.api.serializers.boms import (
    BillOfMaterialsCreateSerializer,
    BillOfMaterialsListSerializer,
    BillOfMaterialsSerializer,
)
from manufacturing.api.views.base import ManufacturingAPIView
from manufacturing.models import BillOfMaterials
from manufacturing.services.bom_service import BOMError, DuplicateBOMError, create_bom
from permissions.services.audit import log_action


class BillOfMaterialsListCreateView(ManufacturingAPIView):
    serializer_class = BillOfMaterialsCreateSerializer

    @extend_schema(
        tags=["manufacturing"],
        parameters=[
            OpenApiParameter(name="finished_good_id", required=False, type=int),
            OpenApiParameter(name="is_active", required=False, type=bool),
        ],
        responses=BillOfMaterialsListSerializer(many=True),
    )
    def get(self, request):
        qs = BillOfMaterials.objects.filter(company=self.company).select_related("finished_good")

        finished_good_id = (request.query_params.get("finished_good_id") or "").strip()
        if finished_good_id.isdigit():
            qs = qs.filter(finished_good_id=int(finished_good_id))

        is_active = (request.query_params.get("is_active") or "").strip().lower()
        if is_active:
            qs = qs.filter(is_active=is_active in {"1", "true", "yes"})

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(BillOfMaterialsListSerializer(page, many=True).data)
        return Response(BillOfMaterialsListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["manufacturing"],
        request=BillOfMaterialsCreateSerializer,
        responses={201: BillOfMaterialsSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        finished_good = self.get_company_object(InventoryItem, data["finished_good_id"])
        components = []
        for row in data["components"]:
            row["item"] = self.get_company_object(InventoryItem, row.pop("item_id"))
            components.append(row)

        overheads = []
        for row in data.get("overheads", []):
            gl_account_id = row.pop("gl_account_id", None)
            row["gl_account"] = self.get_company_object(Account, gl_account_id) if gl_account_id else None
            overheads.append(row)

        try:
            bom = create_bom(
                company=self.company,
                finished_good=finished_good,
                bom_code=data["bom_code"],
                version=data.get("version", "1"),
                name=data["name"],
                description=data.get("description", ""),
                output_quantity=data.get("output_quantity", 1),
                components=components,
                operations=data.get("operations", []),
                overheads=overheads,
            )
        except DuplicateBOMError as exc:
            return error_response(exc, status.HTTP_409_CONFLICT)
        except BOMError as exc:
            return error_response(exc)

        log_action(self.company, request.user, "create_bom", f"bom:{bom.pk}", {"bom_code": bom.bom_code})
        return Response(BillOfMaterialsSerializer(bom).data, status=status.HTTP_201_CREATED)


class BillOfMaterialsDetailView(ManufacturingAPIView):
    @extend_schema(tags=["manufacturing"], responses=BillOfMaterialsSerializer)
    def get(self, request, pk):
        bom = self.get_company_object(BillOfMaterials, pk)
        return Response(BillOfMaterialsSerializer(bom).data, status=status.HTTP_200_OK)
