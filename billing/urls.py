from django.urls import path
from . import views

urlpatterns = [
    path('bills', views.GenerateBillView.as_view(), name='generate_bill'),
    path('bills/history/<str:admin_uid>', views.BillHistoryView.as_view(), name='bill_history'),
    path('bills/session/<str:session_id>', views.SessionBillView.as_view(), name='session_bill'),
    path('bills/<uuid:bill_id>/finalize', views.FinalizeBillView.as_view(), name='finalize_bill'),
    path('bills/<str:admin_uid>', views.BillListView.as_view(), name='bills'),
    path('analytics/<str:admin_uid>/today', views.TodaySalesView.as_view(), name='today_sales'),
    path('analytics/<str:admin_uid>/sales', views.SalesView.as_view(), name='sales'),
]
