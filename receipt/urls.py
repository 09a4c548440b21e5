from django.urls import path
from .views import *

urlpatterns = [
    path('', ReceiptListCreateView.as_view(), name='receipt-list-create'),
    path('<uuid:pk>/', ReceiptDetailView.as_view(), name='receipt-detail'),
]
