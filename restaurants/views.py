import logging

import jwt
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from tableserve.authentication import BearerTokenAuthentication
from tableserve.permissions import IsRestaurantAdmin, IsSuperAdmin
from tableserve.views import PublicAPIView
from tables import registry

from . import services, tokens
from .models import AuthToken, Restaurant, SuperAdmin
from .serializers import (
    AuthResponseSerializer, LoginSerializer, RegisterSerializer, RestaurantSerializer,
    RestaurantSettingsSerializer, SuperAdminLoginSerializer, SuperAdminRestaurantUpdateSerializer,
    SuperAdminSerializer,
)

logger = logging.getLogger(__name__)


def auth_payload(restaurant):
    return {
        'admin': RestaurantSerializer(restaurant).data,
        'token': tokens.issue_restaurant_token(restaurant),
    }


class RegisterView(PublicAPIView):

    @extend_schema(
        summary="Register a restaurant",
        description="Create a new restaurant account and its tables, returning a bearer token",
        request=RegisterSerializer,
        responses={200: AuthResponseSerializer, 409: OpenApiTypes.OBJECT},
        examples=[
            OpenApiExample(
                'Register Example',
                summary='Register a restaurant with 10 tables',
                value={
                    'admin_uid': 'demo',
                    'password': 'secret123',
                    'restaurant_name': 'Demo Diner',
                    'email': 'owner@demo.example',
                    'table_count': 10,
                }
            )
        ]
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        restaurant = services.onboard_restaurant(serializer.validated_data)
        return Response(auth_payload(restaurant), status=status.HTTP_200_OK)


class LoginView(PublicAPIView):

    @extend_schema(
        summary="Log in as restaurant admin",
        description="Verify credentials and return a bearer token. Missing tables are created on login.",
        request=LoginSerializer,
        responses={200: AuthResponseSerializer, 401: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        restaurant = Restaurant.objects.filter(admin_uid=serializer.validated_data['admin_uid']).first()
        if restaurant is None or not restaurant.check_password(serializer.validated_data['password']):
            raise AuthenticationFailed('Invalid credentials')

        registry.initialize(restaurant, restaurant.table_count)

        return Response(auth_payload(restaurant))


class LogoutView(PublicAPIView):
    # Logout must work for tokens that are about to be refused anyway
    @extend_schema(
        summary="Log out",
        description="Revoke the bearer token presented in the Authorization header",
        request=None,
        responses={200: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        token = BearerTokenAuthentication.get_token(request)
        if token:
            try:
                payload = tokens.decode_token(token)
            except jwt.InvalidTokenError:
                payload = None
            if payload is not None:
                tokens.revoke_token(token, payload)

        return Response({'message': 'Logged out successfully'})


class RestaurantDetailView(APIView):
    def initialize_request(self, request, *args, **kwargs):
        # Authenticators are chosen before the DRF request exists
        self.public_read = request.method == 'GET'
        return super().initialize_request(request, *args, **kwargs)

    def get_authenticators(self):
        if getattr(self, 'public_read', False):
            return []
        return super().get_authenticators()

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsRestaurantAdmin()]

    @extend_schema(
        summary="Get restaurant",
        description="Public restaurant profile used by the customer ordering pages",
        responses={200: RestaurantSerializer},
    )
    def get(self, request, admin_uid):
        restaurant = get_object_or_404(Restaurant, admin_uid=admin_uid)
        return Response(RestaurantSerializer(restaurant).data)

    @extend_schema(
        summary="Update restaurant settings",
        description=(
            "Update profile and configuration. Changing table_count adds or removes tables "
            "and is refused while any table is occupied."
        ),
        request=RestaurantSettingsSerializer,
        responses={200: RestaurantSerializer},
    )
    def patch(self, request, admin_uid):
        serializer = RestaurantSettingsSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        restaurant = services.update_restaurant(request.user, serializer.validated_data)
        return Response(RestaurantSerializer(restaurant).data)


class SuperAdminLoginView(PublicAPIView):

    @extend_schema(
        summary="Log in as super admin",
        request=SuperAdminLoginSerializer,
        responses={200: OpenApiTypes.OBJECT, 401: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        serializer = SuperAdminLoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        super_admin = SuperAdmin.objects.filter(
            super_admin_uid=serializer.validated_data['super_admin_uid']
        ).first()
        if super_admin is None or not super_admin.check_password(serializer.validated_data['password']):
            raise AuthenticationFailed('Invalid credentials')

        return Response({
            'super_admin': SuperAdminSerializer(super_admin).data,
            'token': tokens.issue_super_admin_token(super_admin),
        })


class SuperAdminRestaurantListView(APIView):
    permission_classes = [IsSuperAdmin]

    @extend_schema(
        summary="List all restaurants",
        responses={200: RestaurantSerializer(many=True)},
    )
    def get(self, request):
        restaurants = Restaurant.objects.all()
        return Response(RestaurantSerializer(restaurants, many=True).data)

    @extend_schema(
        summary="Onboard a restaurant",
        description="Create a restaurant account and initialise its tables",
        request=RegisterSerializer,
        responses={201: RestaurantSerializer, 409: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        restaurant = services.onboard_restaurant(serializer.validated_data)
        return Response(RestaurantSerializer(restaurant).data, status=status.HTTP_201_CREATED)


class SuperAdminRestaurantDetailView(APIView):
    permission_classes = [IsSuperAdmin]

    @extend_schema(
        summary="Update a restaurant",
        request=SuperAdminRestaurantUpdateSerializer,
        responses={200: RestaurantSerializer},
    )
    def patch(self, request, admin_uid):
        restaurant = get_object_or_404(Restaurant, admin_uid=admin_uid)

        serializer = SuperAdminRestaurantUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        restaurant = services.update_restaurant(restaurant, serializer.validated_data)
        return Response(RestaurantSerializer(restaurant).data)

    @extend_schema(
        summary="Delete a restaurant",
        description="Delete the restaurant and every table, menu item, order, bill and sales record it owns",
        responses={200: OpenApiTypes.OBJECT},
    )
    def delete(self, request, admin_uid):
        restaurant = get_object_or_404(Restaurant, admin_uid=admin_uid)
        restaurant.delete()
        AuthToken.objects.filter(admin_uid=admin_uid).delete()
        logger.info("Deleted restaurant %s and all related data", admin_uid)

        return Response({'success': True, 'message': 'Restaurant and all related data deleted'})
