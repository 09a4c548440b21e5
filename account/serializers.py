from rest_framework.serializers import ModelSerializer
from django.contrib.auth import get_user_model
from rest_framework import serializers
User = get_user_model()

class UserSerializer(ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'full_name', 'email', 'created_at', 'updated_at', 'password']
        extra_kwargs = {
            'password': {'write_only': True},}
        read_only_fields = ('id', 'created_at', 'updated_at')
    def create(self, validated_data):
        password = validated_data.pop('password', None)
        email = validated_data.pop('email')
        # default viewer role is attached by the post_save signal
        return User.objects.create_user(email=email, password=password, **validated_data)


class ProfileSerializer(ModelSerializer):
    roles = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = User
        fields = ['id', 'full_name', 'email', 'roles', 'created_at', 'updated_at']
        read_only_fields = ('id', 'email', 'roles', 'created_at', 'updated_at')
