from django.urls import path
from .views import *

urlpatterns = [
    path('', TransferListCreateView.as_view(), name='transfer-list-create'),
    path('<uuid:pk>/', TransferDetailView.as_view(), name='transfer-detail'),
    path('<uuid:pk>/status/', TransferStatusUpdateView.as_view(), name='transfer-status-update'),
]
