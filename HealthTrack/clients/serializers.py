from rest_framework import serializers
from .models import Client


class ClientSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Client
        fields = ['id', 'name', 'age', 'gender', 'phone', 'address', 'createdAt', 'updatedAt']


class ClientDetailSerializer(ClientSerializer):
    """Client with its enrollments, each joined to its program."""
    enrollments = serializers.SerializerMethodField()

    class Meta(ClientSerializer.Meta):
        fields = ClientSerializer.Meta.fields + ['enrollments']

    def get_enrollments(self, obj):
        from programs.serializers import ClientEnrollmentSerializer
        return ClientEnrollmentSerializer(obj.enrollments.all(), many=True).data
