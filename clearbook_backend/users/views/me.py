from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.services.permission_service import get_effective_permissions
from users.serializers import UserSerializer


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["auth"],
        responses={200: dict},
        description="Current user profile and effective module permissions",
    )
    def get(self, request):
        user = request.user
        data = dict(UserSerializer(user).data)
        data["permissions"] = sorted(get_effective_permissions(user))
        return Response(data)
