"""Persistence gateway over the Django ORM.

The gateway is constructed explicitly and handed to the domain services.
Writes and single-record lookups return an :class:`Outcome` carrying either
the value or an :class:`ErrorKind`; services decide what each kind means for
the caller.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Set

from django.core.exceptions import ObjectDoesNotExist
from django.db import DEFAULT_DB_ALIAS, DatabaseError, IntegrityError, connections, transaction
from django.db.models import Prefetch

from clients.models import Client
from programs.models import Enrollment, Program

logger = logging.getLogger('healthtrack.gateway')


class ErrorKind(Enum):
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    UNEXPECTED = 'unexpected'


class GatewayError(Exception):
    """Raised when an outcome is unwrapped without a value."""

    def __init__(self, kind: ErrorKind):
        super().__init__(f"Persistence operation failed: {kind.value}")
        self.kind = kind


class GatewayClosed(RuntimeError):
    """Raised when the gateway is used before ``open()`` or after ``close()``."""


@dataclass(frozen=True)
class Outcome:
    value: Any = None
    error: Optional[ErrorKind] = None
    exception: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> 'Outcome':
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, exception: Optional[BaseException] = None) -> 'Outcome':
        return cls(error=kind, exception=exception)

    def unwrap(self) -> Any:
        if self.ok:
            return self.value
        if self.exception is not None:
            raise self.exception
        raise GatewayError(self.error)


def as_uuid(value: Any) -> Optional[uuid.UUID]:
    """Coerce an identifier to a UUID, or ``None`` when it cannot be one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


class PersistenceGateway:
    """Data access for programs, clients and enrollments."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using
        self._connection = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> 'PersistenceGateway':
        connection = connections[self.using]
        connection.ensure_connection()
        self._connection = connection
        return self

    def close(self) -> None:
        # The physical connection stays with Django's request lifecycle.
        self._connection = None

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def __enter__(self) -> 'PersistenceGateway':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self) -> None:
        if self._connection is None:
            raise GatewayClosed("Persistence gateway is not open")

    def _write(self, operation) -> Outcome:
        """Run a write in its own savepoint and classify any failure."""
        self._require_open()
        try:
            with transaction.atomic(using=self.using):
                return Outcome.success(operation())
        except ObjectDoesNotExist as exc:
            return Outcome.failure(ErrorKind.NOT_FOUND, exc)
        except IntegrityError as exc:
            logger.info(f"Integrity violation: {str(exc)}")
            return Outcome.failure(ErrorKind.CONFLICT, exc)
        except DatabaseError as exc:
            logger.error(f"Database error: {str(exc)}", exc_info=True)
            return Outcome.failure(ErrorKind.UNEXPECTED, exc)

    def _lookup(self, queryset, pk: Any) -> Outcome:
        self._require_open()
        key = as_uuid(pk)
        if key is None:
            return Outcome.failure(ErrorKind.NOT_FOUND)
        try:
            return Outcome.success(queryset.get(pk=key))
        except ObjectDoesNotExist:
            return Outcome.failure(ErrorKind.NOT_FOUND)
        except DatabaseError as exc:
            logger.error(f"Database error: {str(exc)}", exc_info=True)
            return Outcome.failure(ErrorKind.UNEXPECTED, exc)

    # ------------------------------------------------------------------
    # Querysets
    # ------------------------------------------------------------------

    def programs(self):
        self._require_open()
        return Program.objects.using(self.using).order_by('name')

    def clients(self):
        self._require_open()
        return Client.objects.using(self.using).order_by('name')

    def enrollments(self):
        self._require_open()
        return (
            Enrollment.objects.using(self.using)
            .select_related('client', 'program')
            .order_by('-enrolled_at')
        )

    # ------------------------------------------------------------------
    # Programs
    # ------------------------------------------------------------------

    def get_program(self, program_id: Any, with_enrollments: bool = False) -> Outcome:
        queryset = self.programs()
        if with_enrollments:
            queryset = queryset.prefetch_related(
                Prefetch('enrollments', queryset=Enrollment.objects.using(self.using).select_related('client'))
            )
        return self._lookup(queryset, program_id)

    def program_name_taken(self, name: str, exclude_id: Any = None) -> bool:
        queryset = self.programs().filter(name=name)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=as_uuid(exclude_id))
        return queryset.exists()

    def insert_program(self, name: str, description: Optional[str]) -> Outcome:
        return self._write(
            lambda: Program.objects.using(self.using).create(name=name, description=description)
        )

    def update_program(self, program_id: Any, name: str, description: Optional[str]) -> Outcome:
        outcome = self.get_program(program_id)
        if not outcome.ok:
            return outcome
        program = outcome.value

        def apply():
            program.name = name
            program.description = description
            program.save(using=self.using)
            return program

        return self._write(apply)

    def count_program_enrollments(self, program_id: Any) -> int:
        self._require_open()
        key = as_uuid(program_id)
        if key is None:
            return 0
        return Enrollment.objects.using(self.using).filter(program_id=key).count()

    def delete_program(self, program_id: Any) -> Outcome:
        outcome = self.get_program(program_id)
        if not outcome.ok:
            return outcome
        program = outcome.value
        return self._write(lambda: program.delete(using=self.using))

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def get_client(self, client_id: Any, with_enrollments: bool = False) -> Outcome:
        queryset = self.clients()
        if with_enrollments:
            queryset = queryset.prefetch_related(
                Prefetch('enrollments', queryset=Enrollment.objects.using(self.using).select_related('program'))
            )
        return self._lookup(queryset, client_id)

    def search_clients(self, term: str) -> List[Client]:
        return list(self.clients().filter(name__contains=term))

    def insert_client(self, **fields) -> Outcome:
        return self._write(lambda: Client.objects.using(self.using).create(**fields))

    def update_client(self, client_id: Any, **fields) -> Outcome:
        outcome = self.get_client(client_id)
        if not outcome.ok:
            return outcome
        client = outcome.value

        def apply():
            for attr, value in fields.items():
                setattr(client, attr, value)
            client.save(using=self.using)
            return client

        return self._write(apply)

    def delete_client_enrollments(self, client_id: Any) -> int:
        self._require_open()
        key = as_uuid(client_id)
        if key is None:
            return 0
        deleted, _ = Enrollment.objects.using(self.using).filter(client_id=key).delete()
        return deleted

    def delete_client(self, client_id: Any) -> Outcome:
        outcome = self.get_client(client_id)
        if not outcome.ok:
            return outcome
        client = outcome.value
        return self._write(lambda: client.delete(using=self.using))

    # ------------------------------------------------------------------
    # Enrollments
    # ------------------------------------------------------------------

    def get_enrollment(self, enrollment_id: Any) -> Outcome:
        return self._lookup(self.enrollments(), enrollment_id)

    def find_enrollment(self, client_id: Any, program_id: Any) -> Outcome:
        self._require_open()
        client_key, program_key = as_uuid(client_id), as_uuid(program_id)
        if client_key is None or program_key is None:
            return Outcome.failure(ErrorKind.NOT_FOUND)
        enrollment = self.enrollments().filter(client_id=client_key, program_id=program_key).first()
        if enrollment is None:
            return Outcome.failure(ErrorKind.NOT_FOUND)
        return Outcome.success(enrollment)

    def client_program_ids(self, client_id: Any) -> Set[uuid.UUID]:
        self._require_open()
        key = as_uuid(client_id)
        if key is None:
            return set()
        return set(
            Enrollment.objects.using(self.using)
            .filter(client_id=key)
            .values_list('program_id', flat=True)
        )

    def insert_enrollment(self, client: Client, program_id: Any) -> Outcome:
        """Enroll an existing client; the program is looked up first."""
        outcome = self.get_program(program_id)
        if not outcome.ok:
            return outcome
        program = outcome.value
        return self._write(
            lambda: Enrollment.objects.using(self.using).create(client=client, program=program)
        )

    def insert_enrollments(self, client: Client, program_ids: Iterable[Any]) -> List[Outcome]:
        """Insert one enrollment per program id; one outcome per id, in order."""
        return [self.insert_enrollment(client, program_id) for program_id in program_ids]

    def delete_enrollment(self, enrollment_id: Any) -> Outcome:
        outcome = self.get_enrollment(enrollment_id)
        if not outcome.ok:
            return outcome
        enrollment = outcome.value
        return self._write(lambda: enrollment.delete(using=self.using))
