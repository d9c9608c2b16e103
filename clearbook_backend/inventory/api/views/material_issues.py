# inventory/api/views/material_issues.py

"""
GET  /api/inventory/material-issues/    list (inventory module)
POST /api/inventory/material-issues/    issue stock (admin, staff, store or production manager)
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.views.base import error_response
from inventory.api.serializers.material_issues import MaterialIssueCreateSerializer, MaterialIssueSerializer
from inventory.api.views.base import InventoryAPIView
from inventory.models import InventoryItem, MaterialIssue
from inventory.services.material_issue_service import issue_material
from inventory.services.stock_service import InventoryError
from permissions.roles import CanIssueMaterial
from permissions.services.audit import log_action


class MaterialIssueListCreateView(InventoryAPIView):
    serializer_class = MaterialIssueCreateSerializer

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), CanIssueMaterial()]
        return super().get_permissions()

    @extend_schema(
        tags=["inventory"],
        parameters=[OpenApiParameter(name="item_id", required=False, type=int)],
        responses=MaterialIssueSerializer(many=True),
    )
    def get(self, request):
        qs = (
            MaterialIssue.objects.filter(company=self.company)
            .select_related("item", "production_order", "issued_by")
            .order_by("-issue_date", "-id")
        )
        item_id = (request.query_params.get("item_id") or "").strip()
        if item_id.isdigit():
            qs = qs.filter(item_id=int(item_id))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(MaterialIssueSerializer(page, many=True).data)
        return Response(MaterialIssueSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=MaterialIssueCreateSerializer, responses={201: MaterialIssueSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        item = self.get_company_object(InventoryItem, data["item_id"])
        production_order = None
        if data.get("production_order_id") is not None:
            from manufacturing.models import ProductionOrder

            production_order = get_object_or_404(
                ProductionOrder, company=self.company, pk=data["production_order_id"]
            )

        try:
            issue = issue_material(
                company=self.company,
                item=item,
                quantity=data["quantity"],
                issued_to=data["issued_to"],
                purpose=data.get("purpose", ""),
                production_order=production_order,
                issue_date=data.get("issue_date"),
                user=request.user,
            )
        except InventoryError as exc:
            return error_response(exc)

        log_action(
            self.company,
            request.user,
            "issue_material",
            f"material_issue:{issue.pk}",
            {"issue_number": issue.issue_number, "quantity": issue.quantity},
        )
        return Response(MaterialIssueSerializer(issue).data, status=status.HTTP_201_CREATED)
