from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from tableserve.permissions import IsRestaurantAdmin
from tableserve.views import PublicAPIView

from . import registry, sessions
from .models import Table
from .serializers import (
    JoinResultSerializer, JoinTableSerializer, SessionStatusSerializer, TableSerializer,
    ValidateSessionSerializer,
)

TABLE_ID_PARAMETER = OpenApiParameter(
    name='table_id',
    type=OpenApiTypes.UUID,
    location=OpenApiParameter.PATH,
    description='Table ID'
)


def get_own_table(request, table_id):
    # Another restaurant's table is reported exactly like a missing one
    table = Table.objects.filter(id=table_id, restaurant=request.user).first()
    if table is None:
        raise NotFound('Table not found')
    return table


class TableListView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="List tables",
        description="All tables of the restaurant with status, session and access code",
        responses={200: TableSerializer(many=True)},
    )
    def get(self, request, admin_uid):
        tables = Table.objects.filter(restaurant=request.user)
        return Response(TableSerializer(tables, many=True).data)


class ResetTableView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Reset table",
        description="Mark the table vacant, end its session and issue a new code",
        parameters=[TABLE_ID_PARAMETER],
        request=None,
        responses={200: TableSerializer},
    )
    def post(self, request, table_id):
        table = get_own_table(request, table_id)
        table = registry.reset(table)
        return Response(TableSerializer(table).data)


class CancelTableView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Cancel table",
        description="Cancel all active orders on the table without billing them, then reset it",
        parameters=[TABLE_ID_PARAMETER],
        request=None,
        responses={200: OpenApiTypes.OBJECT},
    )
    def post(self, request, table_id):
        table = get_own_table(request, table_id)

        if table.is_vacant:
            return Response({
                'error': 'Table is already vacant'
            }, status=status.HTTP_400_BAD_REQUEST)

        table, cancelled = registry.cancel(table)

        return Response({
            'success': True,
            'table': TableSerializer(table).data,
            'cancelled_orders': cancelled,
            'message': 'Table cancelled. All orders have been cancelled and table is now vacant.'
        })


class RegenerateCodeView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Regenerate table code",
        description="Issue a new 4-digit access code. Only allowed while the table is vacant.",
        parameters=[TABLE_ID_PARAMETER],
        request=None,
        responses={200: TableSerializer},
    )
    def post(self, request, table_id):
        table = get_own_table(request, table_id)

        if not table.is_vacant:
            return Response({
                'error': 'Cannot regenerate the code of an occupied table'
            }, status=status.HTTP_400_BAD_REQUEST)

        table = registry.regenerate_code(table)
        return Response(TableSerializer(table).data)


class JoinTableView(PublicAPIView):

    @extend_schema(
        summary="Join table",
        description=(
            "Customer joins a table with its 4-digit code. Returns the table's current session "
            "if one is active, otherwise starts a new one."
        ),
        request=JoinTableSerializer,
        responses={200: JoinResultSerializer, 401: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
        examples=[
            OpenApiExample(
                'Join Example',
                summary='Join table 3',
                value={'admin_uid': 'demo', 'table_number': 3, 'otp': '4821'}
            )
        ]
    )
    def post(self, request):
        serializer = JoinTableSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = sessions.join(data['admin_uid'], data['table_number'], data['otp'])
        return Response(JoinResultSerializer(result).data)


class ValidateSessionView(PublicAPIView):

    @extend_schema(
        summary="Validate customer session",
        description="Polled by customers to detect that staff reset or cancelled their table",
        parameters=[
            OpenApiParameter(name='admin_uid', type=OpenApiTypes.STR, required=True),
            OpenApiParameter(name='table_number', type=OpenApiTypes.INT, required=True),
            OpenApiParameter(name='session_id', type=OpenApiTypes.STR, required=True),
        ],
        responses={200: SessionStatusSerializer},
    )
    def get(self, request):
        serializer = ValidateSessionSerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = sessions.validate(**serializer.validated_data)
        return Response(SessionStatusSerializer(result).data)
