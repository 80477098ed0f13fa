import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import LoginSerializer, UserSerializer, UserSerializerWithToken

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([AllowAny])  # Initial setup: anyone may register an admin
def registerUser(request):
    serializer = UserSerializerWithToken(data=request.data)

    if serializer.is_valid():
        # create() goes through User.objects.create_user(), which hashes the password
        user = serializer.save()
        logger.info("Registered admin %s", user.pk)

        response_data = {
            "id": user.id,
            "email": user.email,
            "token": serializer.data["token"],
            "message": "Admin registered successfully.",
        }
        return Response(response_data, status=status.HTTP_201_CREATED)

    # Missing fields, invalid email, weak password or duplicate email
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def userProfile(request):
    # request.user is resolved from the bearer token
    serializer = UserSerializer(request.user, many=False)
    return Response(serializer.data)


class LoginView(TokenObtainPairView):
    """POST {email, password} -> {access, refresh, admin}."""

    serializer_class = LoginSerializer
