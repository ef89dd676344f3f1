from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .exceptions import ValidationFailed
from .gateway import PersistenceGateway


class ServiceViewSet(viewsets.ViewSet):
    """
    Base viewset that opens a persistence gateway for each request and hands
    it to ``service_class``. Subclasses only dispatch and serialize.
    """
    service_class = None
    permission_classes = [AllowAny]

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.gateway = PersistenceGateway().open()
        self.service = self.service_class(self.gateway)

    def finalize_response(self, request, response, *args, **kwargs):
        gateway = getattr(self, 'gateway', None)
        if gateway is not None:
            gateway.close()
        return super().finalize_response(request, response, *args, **kwargs)

    def get_payload(self):
        """Return the request body, which must be a JSON object."""
        data = self.request.data
        if not hasattr(data, 'get'):
            raise ValidationFailed('Request body must be a JSON object')
        return data


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """Report that the API is up."""
    return Response({'message': 'HealthTrack API is running'})
