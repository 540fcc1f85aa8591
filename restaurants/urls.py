from django.urls import path
from . import views

urlpatterns = [
    path('auth/register', views.RegisterView.as_view(), name='register'),
    path('auth/login', views.LoginView.as_view(), name='login'),
    path('auth/logout', views.LogoutView.as_view(), name='logout'),
    path('restaurants/<str:admin_uid>', views.RestaurantDetailView.as_view(), name='restaurant_detail'),
    path('superadmin/login', views.SuperAdminLoginView.as_view(), name='superadmin_login'),
    path('superadmin/restaurants', views.SuperAdminRestaurantListView.as_view(), name='superadmin_restaurants'),
    path('superadmin/restaurants/<str:admin_uid>', views.SuperAdminRestaurantDetailView.as_view(),
         name='superadmin_restaurant_detail'),
]
