import uuid

from rest_framework import serializers

from .models import Restaurant, SuperAdmin


class RestaurantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Restaurant
        fields = ['id', 'admin_uid', 'restaurant_name', 'address', 'email', 'phone',
                 'gst_number', 'upi_id', 'table_count', 'created_at', 'updated_at']
        read_only_fields = fields


class RegisterSerializer(serializers.ModelSerializer):
    admin_uid = serializers.RegexField(
        r'^[A-Za-z0-9_-]+$', max_length=64,
        error_messages={'invalid': "admin_uid may only contain letters, digits, '-' and '_'"},
        help_text="Public restaurant identifier used in URLs",
    )
    password = serializers.CharField(write_only=True, min_length=6,
                                     help_text="Admin password (at least 6 characters)")
    table_count = serializers.IntegerField(min_value=1, required=False,
                                           help_text="Number of physical tables (default 10)")

    class Meta:
        model = Restaurant
        fields = ['admin_uid', 'password', 'restaurant_name', 'email', 'phone',
                 'address', 'gst_number', 'upi_id', 'table_count']
        # Duplicates are reported as 409 by the onboarding service, not as 400 here
        extra_kwargs = {
            'email': {'validators': []},
        }

    def validate_admin_uid(self, value):
        # Would be routed as an order or menu item id
        try:
            uuid.UUID(value)
        except ValueError:
            return value
        raise serializers.ValidationError("admin_uid must not look like a UUID")


class LoginSerializer(serializers.Serializer):
    admin_uid = serializers.CharField(help_text="Restaurant admin identifier")
    password = serializers.CharField(write_only=True)


class RestaurantSettingsSerializer(serializers.ModelSerializer):
    table_count = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = Restaurant
        fields = ['restaurant_name', 'address', 'phone', 'gst_number', 'upi_id', 'table_count']


class SuperAdminRestaurantUpdateSerializer(RestaurantSettingsSerializer):
    password = serializers.CharField(write_only=True, min_length=6, required=False)

    class Meta(RestaurantSettingsSerializer.Meta):
        fields = RestaurantSettingsSerializer.Meta.fields + ['email', 'password']
        extra_kwargs = {'email': {'validators': []}}


class SuperAdminSerializer(serializers.ModelSerializer):
    class Meta:
        model = SuperAdmin
        fields = ['id', 'super_admin_uid', 'name', 'email', 'created_at']
        read_only_fields = fields


class SuperAdminLoginSerializer(serializers.Serializer):
    super_admin_uid = serializers.CharField()
    password = serializers.CharField(write_only=True)


class AuthResponseSerializer(serializers.Serializer):
    admin = RestaurantSerializer()
    token = serializers.CharField(help_text="Signed bearer token for the Authorization header")
