
from django.contrib import admin
from django.urls import path, include



urlpatterns = [
    path("admin/", admin.site.urls),
    path('auth/', include('account.urls')),
    path('catalog/', include('catalog.urls')),
    path('inventory/', include('inventory.urls')),
    path('order/', include('order.urls')),
    path('receipts/', include('receipt.urls')),
    path('transfers/', include('transfer.urls')),
    path('analytics/', include('analytics.urls')),
]
