# sales/api/views/reports.py

"""
GET /api/sales/reports/ar-aging/?as_of=YYYY-MM-DD
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from sales.api.serializers.customers import AgingQuerySerializer
from sales.api.views.base import SalesAPIView
from sales.services.receivables_service import ar_aging


class ARAgingView(SalesAPIView):
    @extend_schema(
        tags=["sales"],
        parameters=[OpenApiParameter(name="as_of", required=False, type=str, description="YYYY-MM-DD. Defaults to today.")],
        responses=dict,
    )
    def get(self, request):
        s = AgingQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)
        return Response(ar_aging(company=self.company, as_of=s.validated_data.get("as_of")), status=status.HTTP_200_OK)
