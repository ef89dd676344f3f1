from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from healthtrack.views import ServiceViewSet
from .serializers import ClientDetailSerializer, ClientSerializer
from .services import ClientService


class ClientViewSet(ServiceViewSet):
    """API endpoint for managing clients."""
    service_class = ClientService

    def list(self, request):
        clients = self.service.list(request.query_params)
        return Response(ClientSerializer(clients, many=True).data)

    @action(detail=False, methods=['get'])
    def search(self, request):
        """Case-insensitive search on client name."""
        clients = self.service.search(request.query_params.get('name'))
        return Response(ClientSerializer(clients, many=True).data)

    def retrieve(self, request, pk=None):
        client = self.service.get(pk)
        return Response(ClientDetailSerializer(client).data)

    def create(self, request):
        client = self.service.create(self.get_payload())
        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        client = self.service.update(pk, self.get_payload())
        return Response(ClientSerializer(client).data)

    def destroy(self, request, pk=None):
        """Delete a client along with all of its enrollments."""
        self.service.delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
