from decimal import Decimal

from rest_framework import serializers

from .models import MenuItem


class MenuItemSerializer(serializers.ModelSerializer):
    admin_uid = serializers.CharField(source='restaurant_id', read_only=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'),
                                     help_text="Unit price (e.g., \"120.00\")")
    ingredients = serializers.ListField(child=serializers.CharField(max_length=100), required=False)

    class Meta:
        model = MenuItem
        fields = ['id', 'admin_uid', 'name', 'price', 'category', 'subcategory', 'description',
                 'image_url', 'ingredients', 'calories', 'is_available', 'created_at', 'updated_at']
        read_only_fields = ['id', 'admin_uid', 'created_at', 'updated_at']

    def validate(self, attrs):
        category = attrs.get('category', getattr(self.instance, 'category', None))
        subcategory = attrs.get('subcategory', getattr(self.instance, 'subcategory', None))

        if subcategory and subcategory not in MenuItem.SUBCATEGORIES.get(category, []):
            raise serializers.ValidationError({
                'subcategory': [f"'{subcategory}' is not a subcategory of '{category}'"]
            })
        return attrs
