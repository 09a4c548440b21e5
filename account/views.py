from rest_framework import permissions
from rest_framework.generics import CreateAPIView, RetrieveUpdateAPIView
from .serializers import *
from django.contrib.auth import get_user_model

User = get_user_model()

class RegisterUserView(CreateAPIView):
    queryset = User.objects.all()
    permission_classes = [permissions.AllowAny]
    serializer_class = UserSerializer


class ProfileView(RetrieveUpdateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ProfileSerializer

    def get_object(self):
        return self.request.user
