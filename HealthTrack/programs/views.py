from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from healthtrack.views import ServiceViewSet
from .serializers import (
    ClientEnrollmentSerializer,
    EnrollmentSerializer,
    ProgramDetailSerializer,
    ProgramSerializer,
)
from .services import EnrollmentService, ProgramService


class ProgramViewSet(ServiceViewSet):
    """API endpoint for managing programs."""
    service_class = ProgramService

    def list(self, request):
        programs = self.service.list()
        return Response(ProgramSerializer(programs, many=True).data)

    def retrieve(self, request, pk=None):
        """Get a program together with its enrolled clients."""
        program = self.service.get(pk)
        return Response(ProgramDetailSerializer(program).data)

    def create(self, request):
        data = self.get_payload()
        program = self.service.create(data.get('name'), data.get('description'))
        return Response(ProgramSerializer(program).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        data = self.get_payload()
        program = self.service.update(pk, data.get('name'), data.get('description'))
        return Response(ProgramSerializer(program).data)

    def destroy(self, request, pk=None):
        """Delete a program; refused while it still has enrollments."""
        self.service.delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EnrollmentViewSet(ServiceViewSet):
    """API endpoint for enrolling clients in programs."""
    service_class = EnrollmentService

    def list(self, request):
        enrollments = self.service.list(request.query_params)
        return Response(EnrollmentSerializer(enrollments, many=True).data)

    def create(self, request):
        data = self.get_payload()
        enrollment = self.service.create(data.get('clientId'), data.get('programId'))
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def bulk(self, request):
        """Enroll one client in several programs, skipping existing enrollments."""
        data = self.get_payload()
        enrollments = self.service.create_bulk(data.get('clientId'), data.get('programIds'))
        return Response(
            ClientEnrollmentSerializer(enrollments, many=True).data,
            status=status.HTTP_201_CREATED
        )

    def destroy(self, request, pk=None):
        self.service.delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(
        detail=False,
        methods=['delete'],
        url_path=r'client/(?P<client_id>[^/.]+)/program/(?P<program_id>[^/.]+)',
        url_name='remove-client-from-program',
    )
    def remove_client_from_program(self, request, client_id=None, program_id=None):
        """Remove a client from a program by the (client, program) pair."""
        self.service.delete_by_pair(client_id, program_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
