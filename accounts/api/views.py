from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from accounts.models import SteamProfile
from accounts.steam import refresh_steam_profile
from csloadout.errors import ValidationError
from .serializers import SteamProfileSerializer, UserSerializer


@api_view(['GET', 'PATCH'])
@permission_classes([permissions.IsAuthenticated])
def me(request):
    """
    GET: the signed-in user and Steam profile.
    PATCH: e-mail address and notification preferences.
    """
    user = request.user
    profile, _ = SteamProfile.objects.get_or_create(user=user)

    if request.method == 'PATCH':
        user_serializer = UserSerializer(user, data=request.data, partial=True)
        profile_serializer = SteamProfileSerializer(profile, data=request.data, partial=True)
        if not user_serializer.is_valid():
            raise ValidationError(user_serializer.errors)
        if not profile_serializer.is_valid():
            raise ValidationError(profile_serializer.errors)
        user_serializer.save()
        profile_serializer.save()
        user.refresh_from_db()

    return Response(UserSerializer(user).data)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def refresh_profile(request):
    """Re-fetch the Steam summary and CS2 ownership."""
    refresh_steam_profile(request.user)
    request.user.refresh_from_db()
    return Response(UserSerializer(request.user).data)
