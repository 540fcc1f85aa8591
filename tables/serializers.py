from rest_framework import serializers

from .models import Table


class TableSerializer(serializers.ModelSerializer):
    admin_uid = serializers.CharField(source='restaurant_id', read_only=True)

    class Meta:
        model = Table
        fields = ['id', 'admin_uid', 'table_number', 'status', 'active_session_id', 'otp',
                 'created_at', 'updated_at']
        read_only_fields = fields
        extra_kwargs = {
            'otp': {'help_text': '4-digit access code customers enter to join the table'},
        }


class JoinTableSerializer(serializers.Serializer):
    admin_uid = serializers.CharField(help_text="Restaurant identifier")
    table_number = serializers.IntegerField(min_value=1, help_text="Table number (positive integer)")
    otp = serializers.RegexField(r'^\d{4}$', help_text="4-digit table code, leading zeros significant",
                                 error_messages={'invalid': 'Code must be exactly 4 digits'})


class JoinResultSerializer(serializers.Serializer):
    session_id = serializers.CharField()
    is_existing_session = serializers.BooleanField()
    table_number = serializers.IntegerField()


class ValidateSessionSerializer(serializers.Serializer):
    admin_uid = serializers.CharField()
    table_number = serializers.IntegerField(min_value=1)
    session_id = serializers.CharField()


class SessionStatusSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    table_status = serializers.ChoiceField(choices=Table.STATUS_CHOICES, required=False)
    reason = serializers.CharField(required=False)
