from django.urls import path
from .views import *

urlpatterns = [
    path('', AnalyticsView.as_view(), name='analytics'),
    path('dashboard/', DashboardView.as_view(), name='dashboard'),
]
