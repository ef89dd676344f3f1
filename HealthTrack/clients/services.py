import logging

from healthtrack.exceptions import NotFound, ValidationFailed
from healthtrack.gateway import ErrorKind

from .filters import ClientFilter
from .models import Client

logger = logging.getLogger('healthtrack')

REQUIRED_FIELDS = (
    ('name', 'Name'),
    ('age', 'Age'),
    ('gender', 'Gender'),
    ('phone', 'Phone'),
    ('address', 'Address'),
)

# Upper bound of PositiveIntegerField on every supported backend
MAX_AGE = 2147483647


def is_blank(value):
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def coerce_age(value):
    """Return ``value`` as a non-negative int or raise ValidationFailed."""
    if isinstance(value, bool):
        raise ValidationFailed('Age must be a non-negative integer')
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationFailed('Age must be a non-negative integer')
        value = int(value)
    try:
        age = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationFailed('Age must be a non-negative integer')
    if age < 0 or age > MAX_AGE:
        raise ValidationFailed('Age must be a non-negative integer')
    return age


def clean_text(value, label, max_length=None):
    """Return ``value`` if it is a string no longer than ``max_length``."""
    if not isinstance(value, str):
        raise ValidationFailed(f'{label} must be a string')
    if max_length is not None and len(value) > max_length:
        raise ValidationFailed(f'{label} must be at most {max_length} characters')
    return value


class ClientService:
    """Client management: validation, name normalization and cascade delete."""

    def __init__(self, gateway):
        self.gateway = gateway

    def _clean(self, data):
        for field, label in REQUIRED_FIELDS:
            if is_blank(data.get(field)):
                raise ValidationFailed(f'{label} is required')
        fields = {
            field: clean_text(data[field], label, Client._meta.get_field(field).max_length)
            for field, label in REQUIRED_FIELDS
            if field != 'age'
        }
        fields['name'] = fields['name'].lower()
        fields['age'] = coerce_age(data['age'])
        return fields

    def list(self, params=None):
        queryset = self.gateway.clients()
        if params:
            filterset = ClientFilter(params, queryset=queryset)
            if not filterset.is_valid():
                field, errors = next(iter(filterset.errors.items()))
                raise ValidationFailed(f'{field}: {errors[0]}')
            queryset = filterset.qs
        return list(queryset)

    def search(self, name):
        if is_blank(name):
            raise ValidationFailed('Search term is required')
        return self.gateway.search_clients(str(name).lower())

    def get(self, client_id):
        outcome = self.gateway.get_client(client_id, with_enrollments=True)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Client not found')
        return outcome.unwrap()

    def create(self, data):
        fields = self._clean(data)
        client = self.gateway.insert_client(**fields).unwrap()
        logger.info(f"Created client {client.id}")
        return client

    def update(self, client_id, data):
        fields = self._clean(data)
        outcome = self.gateway.update_client(client_id, **fields)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Client not found')
        return outcome.unwrap()

    def delete(self, client_id):
        # Enrollments go first; a no-op when the client has none
        removed = self.gateway.delete_client_enrollments(client_id)
        outcome = self.gateway.delete_client(client_id)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Client not found')
        outcome.unwrap()
        logger.info(f"Deleted client {client_id} and {removed} enrollment(s)")
