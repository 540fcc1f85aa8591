from django.urls import path
from . import views

urlpatterns = [
    path('tables/session/validate', views.ValidateSessionView.as_view(), name='validate_session'),
    path('tables/join', views.JoinTableView.as_view(), name='join_table'),
    path('tables/<uuid:table_id>/reset', views.ResetTableView.as_view(), name='reset_table'),
    path('tables/<uuid:table_id>/cancel', views.CancelTableView.as_view(), name='cancel_table'),
    path('tables/<uuid:table_id>/regenerate-code', views.RegenerateCodeView.as_view(), name='regenerate_code'),
    path('tables/<str:admin_uid>', views.TableListView.as_view(), name='tables'),
]
