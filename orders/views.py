from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from tableserve.permissions import IsRestaurantAdmin
from tableserve.views import PublicAPIView

from . import ledger
from .models import Order
from .serializers import (
    ItemStatusSerializer, OrderSerializer, OrderStatusSerializer, PlaceOrderSerializer,
)


def get_own_order(request, order_id):
    order = Order.objects.filter(id=order_id, restaurant=request.user).prefetch_related('items').first()
    if order is None:
        raise NotFound('Order not found')
    return order


class PlaceOrderView(PublicAPIView):

    @extend_schema(
        summary="Place order",
        description=(
            "Customer places an order for their table. Names and prices are copied from the "
            "menu; every line starts pending. The table is bound to the order's session."
        ),
        request=PlaceOrderSerializer,
        responses={201: OrderSerializer},
        examples=[
            OpenApiExample(
                'Place Order Example',
                summary='Two of one item',
                value={
                    'admin_uid': 'demo',
                    'session_id': 'session-1760832000000-k3x9q2m1a',
                    'table_number': 3,
                    'items': [{'menu_item_id': '6f1c3e9a-0d57-4a51-9a43-0f8e2b7d6c11', 'quantity': 2}],
                }
            )
        ]
    )
    def post(self, request):
        serializer = PlaceOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        order = ledger.place(**serializer.validated_data)
        order = Order.objects.prefetch_related('items').get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderListView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="List orders",
        description="Every order of the restaurant, newest first",
        responses={200: OrderSerializer(many=True)},
    )
    def get(self, request, admin_uid):
        orders = ledger.orders_for_restaurant(admin_uid)
        return Response(OrderSerializer(orders, many=True).data)


class ActiveOrderListView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="List active orders",
        responses={200: OrderSerializer(many=True)},
    )
    def get(self, request, admin_uid):
        orders = ledger.active_orders_for_restaurant(admin_uid)
        return Response(OrderSerializer(orders, many=True).data)


class SessionOrderListView(PublicAPIView):

    @extend_schema(
        summary="Orders of a customer session",
        responses={200: OrderSerializer(many=True)},
    )
    def get(self, request, session_id):
        orders = ledger.orders_for_session(session_id)
        return Response(OrderSerializer(orders, many=True).data)


class TableOrderListView(PublicAPIView):

    @extend_schema(
        summary="Active orders of a table",
        responses={200: OrderSerializer(many=True)},
    )
    def get(self, request, admin_uid, table_number):
        orders = ledger.active_orders_for_table(admin_uid, table_number)
        return Response(OrderSerializer(orders, many=True).data)


class OrderItemStatusView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Update order item status",
        description="Set the status of the order line at item_index",
        parameters=[
            OpenApiParameter(name='order_id', type=OpenApiTypes.UUID, location=OpenApiParameter.PATH),
            OpenApiParameter(name='item_index', type=OpenApiTypes.INT, location=OpenApiParameter.PATH,
                             description='Zero-based index of the line within the order'),
        ],
        request=ItemStatusSerializer,
        responses={200: OrderSerializer, 404: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
        examples=[
            OpenApiExample('Accept Item', value={'status': 'accepted'})
        ]
    )
    def patch(self, request, order_id, item_index):
        order = get_own_order(request, order_id)

        serializer = ItemStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        order = ledger.set_item_status(order, item_index, serializer.validated_data['status'])
        return Response(OrderSerializer(order).data)


class OrderStatusView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Update order status",
        description="Directly set an order to active, completed or cancelled",
        request=OrderStatusSerializer,
        responses={200: OrderSerializer},
    )
    def patch(self, request, order_id):
        order = get_own_order(request, order_id)

        serializer = OrderStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        order = ledger.set_order_status(order, serializer.validated_data['order_status'])
        return Response(OrderSerializer(order).data)
