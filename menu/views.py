from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from tableserve.permissions import IsRestaurantAdmin
from tableserve.views import PublicAPIView

from .models import MenuItem
from .serializers import MenuItemSerializer


class MenuItemListView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="List menu items",
        description="All menu items of the restaurant, including unavailable ones",
        responses={200: MenuItemSerializer(many=True)},
    )
    def get(self, request, admin_uid):
        items = MenuItem.objects.filter(restaurant=request.user)
        return Response(MenuItemSerializer(items, many=True).data)


class PublicMenuView(PublicAPIView):

    @extend_schema(
        summary="Public menu",
        description="Menu items currently available to customers",
        responses={200: MenuItemSerializer(many=True)},
    )
    def get(self, request, admin_uid):
        items = MenuItem.objects.filter(restaurant_id=admin_uid, is_available=True)
        return Response(MenuItemSerializer(items, many=True).data)


class CreateMenuItemView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Create menu item",
        request=MenuItemSerializer,
        responses={201: MenuItemSerializer},
        examples=[
            OpenApiExample(
                'Create Item Example',
                summary='Add a starter',
                value={'name': 'Paneer Tikka', 'price': '120.00', 'category': 'veg',
                       'subcategory': 'starters'}
            )
        ]
    )
    def post(self, request):
        serializer = MenuItemSerializer(data=request.data)
        if serializer.is_valid():
            item = serializer.save(restaurant=request.user)
            return Response(MenuItemSerializer(item).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class MenuItemDetailView(APIView):
    permission_classes = [IsRestaurantAdmin]

    def get_item(self, request, item_id):
        item = MenuItem.objects.filter(id=item_id, restaurant=request.user).first()
        if item is None:
            raise NotFound('Menu item not found')
        return item

    @extend_schema(
        summary="Update menu item",
        request=MenuItemSerializer,
        responses={200: MenuItemSerializer},
    )
    def patch(self, request, item_id):
        item = self.get_item(request, item_id)
        serializer = MenuItemSerializer(item, data=request.data, partial=True)
        if serializer.is_valid():
            item = serializer.save()
            return Response(MenuItemSerializer(item).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    @extend_schema(
        summary="Delete menu item",
        description="Remove an item from the menu. Orders keep their own name and price snapshot.",
        responses={200: None},
    )
    def delete(self, request, item_id):
        item = self.get_item(request, item_id)
        item.delete()
        return Response({'success': True})
