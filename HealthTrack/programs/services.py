import logging

from clients.services import clean_text, is_blank
from healthtrack.exceptions import Conflict, NotFound, ValidationFailed
from healthtrack.gateway import ErrorKind, as_uuid

from .filters import EnrollmentFilter
from .models import Program

logger = logging.getLogger('healthtrack')

DUPLICATE_PROGRAM = 'A program with this name already exists'


class ProgramService:
    """Program management backed by a persistence gateway."""

    def __init__(self, gateway):
        self.gateway = gateway

    def _clean(self, name, description):
        if is_blank(name):
            raise ValidationFailed('Program name is required')
        name = clean_text(name, 'Program name', Program._meta.get_field('name').max_length)
        if description is not None:
            description = clean_text(description, 'Description')
        return name, description

    def list(self):
        return list(self.gateway.programs())

    def get(self, program_id):
        outcome = self.gateway.get_program(program_id, with_enrollments=True)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Program not found')
        return outcome.unwrap()

    def create(self, name, description=None):
        name, description = self._clean(name, description)
        if self.gateway.program_name_taken(name):
            raise Conflict(DUPLICATE_PROGRAM)

        outcome = self.gateway.insert_program(name, description)
        # A concurrent insert can still trip the unique constraint
        if outcome.error is ErrorKind.CONFLICT:
            raise Conflict(DUPLICATE_PROGRAM)
        program = outcome.unwrap()
        logger.info(f"Created program '{program.name}' ({program.id})")
        return program

    def update(self, program_id, name, description=None):
        name, description = self._clean(name, description)
        if self.gateway.get_program(program_id).error is ErrorKind.NOT_FOUND:
            raise NotFound('Program not found')
        if self.gateway.program_name_taken(name, exclude_id=program_id):
            raise Conflict(DUPLICATE_PROGRAM)

        outcome = self.gateway.update_program(program_id, name, description)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Program not found')
        if outcome.error is ErrorKind.CONFLICT:
            raise Conflict(DUPLICATE_PROGRAM)
        return outcome.unwrap()

    def delete(self, program_id):
        enrollment_count = self.gateway.count_program_enrollments(program_id)
        if enrollment_count > 0:
            raise Conflict('Cannot delete program with active enrollments', count=enrollment_count)

        outcome = self.gateway.delete_program(program_id)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Program not found')
        if outcome.error is ErrorKind.CONFLICT:
            # Enrolled between the count and the delete
            raise Conflict(
                'Cannot delete program with active enrollments',
                count=self.gateway.count_program_enrollments(program_id),
            )
        outcome.unwrap()
        logger.info(f"Deleted program {program_id}")


class EnrollmentService:
    """
    Enrollment management: single and bulk enrollment, removal by id or by
    (client, program) pair.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    def list(self, params=None):
        queryset = self.gateway.enrollments()
        if params:
            filterset = EnrollmentFilter(params, queryset=queryset)
            if not filterset.is_valid():
                field, errors = next(iter(filterset.errors.items()))
                raise ValidationFailed(f'{field}: {errors[0]}')
            queryset = filterset.qs
        return list(queryset)

    def _require_client(self, client_id):
        outcome = self.gateway.get_client(client_id)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Client not found')
        return outcome.unwrap()

    def create(self, client_id, program_id):
        if is_blank(client_id):
            raise ValidationFailed('Client ID is required')
        if is_blank(program_id):
            raise ValidationFailed('Program ID is required')

        client = self._require_client(client_id)
        program_outcome = self.gateway.get_program(program_id)
        if program_outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Program not found')
        program = program_outcome.unwrap()

        if self.gateway.find_enrollment(client.id, program.id).ok:
            raise Conflict('Client is already enrolled in this program')

        outcome = self.gateway.insert_enrollment(client, program.id)
        if outcome.error is ErrorKind.CONFLICT:
            raise Conflict('Client is already enrolled in this program')
        enrollment = outcome.unwrap()
        logger.info(f"Enrolled client {client.id} in program {program.id}")
        return enrollment

    def create_bulk(self, client_id, program_ids):
        """
        Enroll a client in several programs at once.

        Programs the client is already enrolled in are skipped up front. The
        remaining ids are inserted one by one; any id whose insert fails (for
        example an unknown program) is left out of the result rather than
        failing the request.
        """
        if is_blank(client_id):
            raise ValidationFailed('Client ID is required')
        if not isinstance(program_ids, (list, tuple)) or len(program_ids) == 0:
            raise ValidationFailed('Program IDs array is required')

        client = self._require_client(client_id)
        existing = self.gateway.client_program_ids(client.id)

        pending = []
        for program_id in program_ids:
            key = as_uuid(program_id)
            if key is not None and key in existing:
                continue
            pending.append(key if key is not None else str(program_id))
        # Repeated ids would only trip the unique constraint
        pending = list(dict.fromkeys(pending))

        if not pending:
            raise ValidationFailed('Client is already enrolled in all specified programs')

        outcomes = self.gateway.insert_enrollments(client, pending)
        created = []
        for program_id, outcome in zip(pending, outcomes):
            if outcome.ok:
                created.append(outcome.value)
            else:
                logger.warning(
                    f"Skipped enrollment of client {client.id} in program {program_id}: {outcome.error.value}"
                )
        logger.info(f"Bulk enrolled client {client.id} in {len(created)} of {len(pending)} program(s)")
        return created

    def delete(self, enrollment_id):
        outcome = self.gateway.delete_enrollment(enrollment_id)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Enrollment not found')
        outcome.unwrap()

    def delete_by_pair(self, client_id, program_id):
        found = self.gateway.find_enrollment(client_id, program_id)
        if found.error is ErrorKind.NOT_FOUND:
            raise NotFound('Enrollment not found')
        enrollment = found.unwrap()

        outcome = self.gateway.delete_enrollment(enrollment.id)
        if outcome.error is ErrorKind.NOT_FOUND:
            raise NotFound('Enrollment not found')
        outcome.unwrap()
