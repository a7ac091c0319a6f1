# gadgetstore/presentation/views_auth.py
"""
Account registration, login, logout, profile update and the session check.
"""
import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from gadgetstore.core import dependency_injection as di
from .authentication import clear_auth_cookie, current_account, set_auth_cookie
from .serializers import (
    AccountSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
)

logger = logging.getLogger(__name__)


class RegisterAPIView(APIView):
    """POST /api/account/register. Always creates a 'user' account."""
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        di.get_register_account_use_case().execute(
            username=data.get('username'),
            email=data.get('email'),
            password=data.get('password'),
            phone_number=data.get('phone_number'),
        )
        return Response(
            {'success': True, 'message': 'User account created successfully.'},
            status=status.HTTP_201_CREATED
        )


class LoginAPIView(APIView):
    """
    POST /api/account/login. On success the signed token travels in an
    httpOnly cookie and is never returned in the body.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = di.get_authenticate_use_case().execute(
            email=serializer.validated_data.get('email'),
            password=serializer.validated_data.get('password'),
        )
        response = Response({
            'success': True,
            'message': 'user logged in successfully',
            'user': AccountSerializer(account).data,
        })
        logger.info("Account %s logged in", account.id)
        return set_auth_cookie(response, di.token_issuer.issue(account))


class LogoutAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        response = Response({'success': True, 'message': 'Logged out successfully.'})
        return clear_auth_cookie(response)

    get = post


class UpdateProfileAPIView(APIView):
    """PUT/PATCH /api/account/update {username?, email?, phoneNumber?}."""
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        account = di.get_update_profile_use_case().execute(
            current_account(request).id, **serializer.validated_data
        )
        return Response({
            'success': True,
            'message': 'Account updated successfully.',
            'user': AccountSerializer(account).data,
        })

    patch = put


class DashboardAPIView(APIView):
    """Authenticated endpoint used by clients to detect a live session."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            'message': 'Welcome to the dashboard',
            'user': AccountSerializer(current_account(request)).data,
        })
