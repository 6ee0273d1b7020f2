"""
E-commerce URLs (mounted at /api/brands/<brand_id>/ecommerce/)
"""

from django.urls import path

from . import views

app_name = 'ecommerce'

urlpatterns = [
    path('stores/', views.store_list, name='store_list'),
    path('stores/connect/', views.store_connect, name='store_connect'),
    path('stores/<str:store_id>/', views.store_disconnect, name='store_disconnect'),
    path('stores/<str:store_id>/sync/', views.store_sync, name='store_sync'),
    path('orders/', views.order_list, name='order_list'),
    path('orders/by-customer/<str:customer_id>/', views.customer_orders, name='customer_orders'),
    path('orders/by-ticket/<str:ticket_id>/', views.ticket_orders, name='ticket_orders'),
    path('orders/<str:order_id>/', views.order_detail, name='order_detail'),
    path('orders/<str:order_id>/link/', views.order_link, name='order_link'),
    path('orders/<str:order_id>/link/<str:ticket_id>/', views.order_unlink, name='order_unlink'),
    path('products/', views.product_list, name='product_list'),
]
