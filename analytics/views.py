from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import permissions

from .services import AnalyticsService


class AnalyticsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(AnalyticsService.analytics_report(request.user))


class DashboardView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(AnalyticsService.dashboard_report(request.user))
