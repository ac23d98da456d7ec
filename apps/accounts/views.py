from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import ProfileSerializer, ProfileUpdateSerializer
from .services import ensure_profile, update_profile


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


@extend_schema(
    methods=['GET'],
    responses={200: ProfileSerializer},
    description="Get the current user's profile, creating it on first access.",
    tags=['auth'],
)
@extend_schema(
    methods=['PATCH'],
    request=ProfileUpdateSerializer,
    responses={
        200: ProfileSerializer,
        400: ErrorResponseSerializer,
    },
    description="Update the current user's display name, phone number or birthday.",
    tags=['auth'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def current_profile(request):
    """Get or update the current user's profile."""
    if request.method == 'GET':
        profile, _ = ensure_profile(request.user)
        return Response(ProfileSerializer(profile).data)

    serializer = ProfileUpdateSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    profile = update_profile(user=request.user, **serializer.validated_data)
    return Response(ProfileSerializer(profile).data)
