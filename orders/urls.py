from django.urls import path
from . import views

urlpatterns = [
    path('orders', views.PlaceOrderView.as_view(), name='place_order'),
    path('orders/customer/<str:session_id>', views.SessionOrderListView.as_view(), name='session_orders'),
    path('orders/table/<str:admin_uid>/<int:table_number>', views.TableOrderListView.as_view(), name='table_orders'),
    path('orders/<uuid:order_id>/items/<int:item_index>', views.OrderItemStatusView.as_view(),
         name='order_item_status'),
    path('orders/<uuid:order_id>', views.OrderStatusView.as_view(), name='order_status'),
    path('orders/<str:admin_uid>/active', views.ActiveOrderListView.as_view(), name='active_orders'),
    path('orders/<str:admin_uid>', views.OrderListView.as_view(), name='orders'),
]
