from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from orders import ledger
from tableserve.permissions import IsRestaurantAdmin
from tableserve.views import PublicAPIView

from . import engine, reports
from .models import Bill
from .serializers import (
    BillSerializer, DailySalesSerializer, FinalizeBillSerializer, GenerateBillSerializer,
    SalesRangeSerializer, TodaySalesSerializer,
)


class GenerateBillView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Generate bill",
        description=(
            "Create or recompute the draft bill of the session seated at a table and move the "
            "table to billing. Only accepted, processing and completed lines are billed."
        ),
        request=GenerateBillSerializer,
        responses={201: BillSerializer, 400: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
        examples=[
            OpenApiExample(
                'Generate Bill Example',
                summary='10% service charge, items taken from orders',
                value={
                    'session_id': 'session-1760832000000-k3x9q2m1a',
                    'table_number': 3,
                    'discount_percentage': '0',
                    'service_charge_percentage': '10',
                    'payment_mode': 'upi',
                }
            )
        ]
    )
    def post(self, request):
        serializer = GenerateBillSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        items = data.get('items')
        if items is None:
            items = ledger.billable_items(request.user.admin_uid, data['table_number'],
                                                 session_id=data['session_id'])
        if not items:
            return Response({
                'error': 'No billable items. Accept or complete order items before billing.'
            }, status=status.HTTP_400_BAD_REQUEST)

        bill = engine.generate(
            request.user.admin_uid,
            data['session_id'],
            data['table_number'],
            items=items,
            discount_percentage=data['discount_percentage'],
            service_charge_percentage=data['service_charge_percentage'],
            payment_mode=data['payment_mode'],
        )
        return Response(BillSerializer(bill).data, status=status.HTTP_201_CREATED)


class FinalizeBillView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Finalize bill",
        description=(
            "Close the bill: archive it to sales history, complete the session's orders and "
            "free the table with a new code. A bill can be finalized once."
        ),
        parameters=[
            OpenApiParameter(name='bill_id', type=OpenApiTypes.UUID, location=OpenApiParameter.PATH,
                             description='Bill ID'),
        ],
        request=FinalizeBillSerializer,
        responses={200: BillSerializer, 404: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
    )
    def post(self, request, bill_id):
        bill = Bill.objects.filter(id=bill_id, restaurant=request.user).first()
        if bill is None:
            raise NotFound('Bill not found')

        serializer = FinalizeBillSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        bill = engine.finalize(bill, payment_mode=serializer.validated_data.get('payment_mode'))
        return Response(BillSerializer(bill).data)


class BillListView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="List bills",
        description="Draft and final bills of the restaurant, newest first",
        responses={200: BillSerializer(many=True)},
    )
    def get(self, request, admin_uid):
        bills = Bill.objects.filter(restaurant_id=admin_uid)
        return Response(BillSerializer(bills, many=True).data)


class BillHistoryView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Bill history",
        description="Finalized bills only",
        responses={200: BillSerializer(many=True)},
    )
    def get(self, request, admin_uid):
        bills = Bill.objects.filter(restaurant_id=admin_uid, is_final=True).order_by('-finalized_at')
        return Response(BillSerializer(bills, many=True).data)


class SessionBillView(PublicAPIView):

    @extend_schema(
        summary="Bill of a customer session",
        responses={200: BillSerializer, 404: OpenApiTypes.OBJECT},
    )
    def get(self, request, session_id):
        bill = Bill.objects.filter(session_id=session_id).first()
        if bill is None:
            raise NotFound('No bill for this session yet')
        return Response(BillSerializer(bill).data)


class TodaySalesView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Today's sales",
        responses={200: TodaySalesSerializer},
    )
    def get(self, request, admin_uid):
        return Response(TodaySalesSerializer(reports.today_sales(admin_uid)).data)


class SalesView(APIView):
    permission_classes = [IsRestaurantAdmin]

    @extend_schema(
        summary="Sales by day",
        description="Per-day totals between start_date and end_date (defaults to the last 30 days)",
        parameters=[
            OpenApiParameter(name='start_date', type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY,
                             required=False),
            OpenApiParameter(name='end_date', type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY,
                             required=False),
        ],
        responses={200: DailySalesSerializer(many=True)},
    )
    def get(self, request, admin_uid):
        serializer = SalesRangeSerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        days = reports.sales_by_day(admin_uid, **serializer.validated_data)
        return Response(DailySalesSerializer(days, many=True).data)
