from django.urls import path
from .views import *

urlpatterns = [
    path('warehouses/', WarehouseListCreateView.as_view(), name='warehouse-list-create'),
    path('warehouses/<uuid:pk>/', WarehouseDetailView.as_view(), name='warehouse-detail'),
    path('locations/', LocationListCreateView.as_view(), name='location-list-create'),
    path('locations/<uuid:pk>/', LocationDetailView.as_view(), name='location-detail'),
    path('stock/', StockListView.as_view(), name='stock-list'),
    path('movements/', StockMovementListView.as_view(), name='stock-movement-list'),
]
