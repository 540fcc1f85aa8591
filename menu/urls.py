from django.urls import path
from . import views

urlpatterns = [
    path('menu-items', views.CreateMenuItemView.as_view(), name='create_menu_item'),
    path('menu-items/public/<str:admin_uid>', views.PublicMenuView.as_view(), name='public_menu'),
    path('menu-items/<uuid:item_id>', views.MenuItemDetailView.as_view(), name='menu_item_detail'),
    path('menu-items/<str:admin_uid>', views.MenuItemListView.as_view(), name='menu_items'),
]
