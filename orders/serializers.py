from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ['menu_item_id', 'name', 'price', 'quantity', 'status']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    admin_uid = serializers.CharField(source='restaurant_id', read_only=True)
    items = OrderItemSerializer(many=True, read_only=True,
                                help_text='Order lines; the index in this list addresses a line for status updates')

    class Meta:
        model = Order
        fields = ['id', 'admin_uid', 'session_id', 'table_number', 'items', 'order_status',
                 'created_at', 'updated_at']
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    menu_item_id = serializers.UUIDField(help_text="ID of the menu item ordered")
    quantity = serializers.IntegerField(min_value=1, help_text="Quantity (minimum 1)")


class PlaceOrderSerializer(serializers.Serializer):
    admin_uid = serializers.CharField(help_text="Restaurant identifier")
    session_id = serializers.CharField(max_length=64, help_text="Session returned by the join endpoint")
    table_number = serializers.IntegerField(min_value=1)
    items = OrderLineSerializer(many=True, allow_empty=False)


class ItemStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderItem.STATUS_CHOICES)


class OrderStatusSerializer(serializers.Serializer):
    order_status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
