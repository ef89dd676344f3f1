from rest_framework import serializers
from clients.serializers import ClientSerializer
from .models import Program, Enrollment

class ProgramSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Program
        fields = ['id', 'name', 'description', 'createdAt']

class BaseEnrollmentSerializer(serializers.ModelSerializer):
    clientId = serializers.UUIDField(source='client_id', read_only=True)
    programId = serializers.UUIDField(source='program_id', read_only=True)
    enrolledAt = serializers.DateTimeField(source='enrolled_at', read_only=True)

    class Meta:
        model = Enrollment
        fields = ['id', 'clientId', 'programId', 'enrolledAt']

class EnrollmentSerializer(BaseEnrollmentSerializer):
    """Enrollment joined to both its client and its program."""
    client = ClientSerializer(read_only=True)
    program = ProgramSerializer(read_only=True)

    class Meta(BaseEnrollmentSerializer.Meta):
        fields = BaseEnrollmentSerializer.Meta.fields + ['client', 'program']

class ClientEnrollmentSerializer(BaseEnrollmentSerializer):
    program = ProgramSerializer(read_only=True)

    class Meta(BaseEnrollmentSerializer.Meta):
        fields = BaseEnrollmentSerializer.Meta.fields + ['program']

class ProgramEnrollmentSerializer(BaseEnrollmentSerializer):
    client = ClientSerializer(read_only=True)

    class Meta(BaseEnrollmentSerializer.Meta):
        fields = BaseEnrollmentSerializer.Meta.fields + ['client']

class ProgramDetailSerializer(ProgramSerializer):
    """Program with its enrollments, each joined to its client."""
    enrollments = ProgramEnrollmentSerializer(many=True, read_only=True)

    class Meta(ProgramSerializer.Meta):
        fields = ProgramSerializer.Meta.fields + ['enrollments']
