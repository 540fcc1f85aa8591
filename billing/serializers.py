from rest_framework import serializers

from .models import Bill, SalesHistory


class BillSerializer(serializers.ModelSerializer):
    admin_uid = serializers.CharField(source='restaurant_id', read_only=True)

    class Meta:
        model = Bill
        fields = ['id', 'bill_number', 'admin_uid', 'session_id', 'table_number', 'items',
                 'subtotal', 'discount_percentage', 'discount_amount',
                 'service_charge_percentage', 'service_charge_amount', 'total_amount',
                 'payment_mode', 'is_final', 'generated_at', 'finalized_at']
        read_only_fields = fields


class BillItemSerializer(serializers.Serializer):
    menu_item_id = serializers.UUIDField(required=False, allow_null=True)
    name = serializers.CharField(max_length=200)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)


class GenerateBillSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=64)
    table_number = serializers.IntegerField(min_value=1)
    items = BillItemSerializer(many=True, required=False,
                               help_text="Billable lines; computed from the table's orders when omitted")
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0,
                                                   max_value=100, default=0)
    service_charge_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0,
                                                         max_value=100, default=0)
    payment_mode = serializers.ChoiceField(choices=Bill.PAYMENT_MODE_CHOICES, default=Bill.PAYMENT_CASH)


class FinalizeBillSerializer(serializers.Serializer):
    payment_mode = serializers.ChoiceField(choices=Bill.PAYMENT_MODE_CHOICES, required=False)


class SalesHistorySerializer(serializers.ModelSerializer):
    admin_uid = serializers.CharField(source='restaurant_id', read_only=True)

    class Meta:
        model = SalesHistory
        fields = ['id', 'admin_uid', 'bill', 'table_number', 'total_amount', 'items_sold',
                 'payment_mode', 'created_at']
        read_only_fields = fields


class TodaySalesSerializer(serializers.Serializer):
    date = serializers.DateField()
    total_sales = serializers.DecimalField(max_digits=12, decimal_places=2)
    order_count = serializers.IntegerField()


class DailySalesSerializer(TodaySalesSerializer):
    items_sold = serializers.DictField(child=serializers.IntegerField())


class SalesRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, data):
        if data.get('start_date') and data.get('end_date') and data['start_date'] > data['end_date']:
            raise serializers.ValidationError({'start_date': ['start_date must not be after end_date']})
        return data
