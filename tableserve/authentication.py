import jwt
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed

from restaurants import tokens
from restaurants.models import Restaurant, SuperAdmin


class BearerTokenAuthentication(BaseAuthentication):
    """
    Signed bearer token authentication using the Authorization header.

    Restaurant tokens authenticate as the Restaurant, super admin tokens as
    the SuperAdmin. Revoked tokens are refused.
    """
    keyword = 'Bearer'

    def authenticate(self, request):
        token = self.get_token(request)

        if token is None:
            return None

        try:
            payload = tokens.decode_token(token)
        except jwt.InvalidTokenError:
            raise AuthenticationFailed('Invalid or expired token')

        if tokens.is_revoked(token):
            raise AuthenticationFailed('Token has been revoked')

        if payload.get('is_super_admin'):
            principal = SuperAdmin.objects.filter(
                super_admin_uid=payload.get('super_admin_uid')
            ).first()
        else:
            principal = Restaurant.objects.filter(admin_uid=payload.get('admin_uid')).first()

        if principal is None:
            raise AuthenticationFailed('Invalid or expired token')

        return (principal, token)

    def authenticate_header(self, request):
        return self.keyword

    @classmethod
    def get_token(cls, request):
        auth = get_authorization_header(request).split()

        if not auth or auth[0].decode().lower() != cls.keyword.lower():
            return None

        if len(auth) != 2:
            raise AuthenticationFailed('Invalid Authorization header')

        return auth[1].decode()
