from django.conf import settings
from rest_framework import exceptions, status
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, AuthenticationFailed

from gadgetstore.infrastructure.mappers import AccountMapper


class TokenRejected(exceptions.APIException):
    """A token was presented but could not be verified."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Failed to authenticate token'
    default_code = 'token_rejected'


class CookieJWTAuthentication(JWTAuthentication):
    """
    Reads the signed token from the auth cookie, falling back to the
    Authorization header. No token means anonymous (the permission check then
    answers 401); a bad or expired token is a 403.
    """

    def get_raw_token_from_request(self, request):
        raw_token = request.COOKIES.get(settings.JWT_COOKIE_NAME)
        if raw_token:
            return raw_token.encode('utf-8')

        header = self.get_header(request)
        if header is None:
            return None
        return self.get_raw_token(header)

    def authenticate(self, request):
        try:
            raw_token = self.get_raw_token_from_request(request)
            if raw_token is None:
                return None
            validated_token = self.get_validated_token(raw_token)
            return self.get_user(validated_token), validated_token
        except (InvalidToken, AuthenticationFailed):
            raise TokenRejected()


def set_auth_cookie(response, token: str):
    response.set_cookie(
        settings.JWT_COOKIE_NAME,
        token,
        max_age=int(settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME'].total_seconds()),
        httponly=True,
        secure=settings.JWT_COOKIE_SECURE,
        samesite=settings.JWT_COOKIE_SAMESITE,
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(settings.JWT_COOKIE_NAME, samesite=settings.JWT_COOKIE_SAMESITE)
    return response


def current_account(request):
    """Core entity of the authenticated caller."""
    return AccountMapper.to_entity(request.user)
