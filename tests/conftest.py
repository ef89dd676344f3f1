"""Shared fixtures for the HealthTrack test suite."""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient

from clients.models import Client
from healthtrack.gateway import PersistenceGateway
from programs.models import Enrollment, Program


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def gateway(db):
    """An opened gateway on the default database."""
    with PersistenceGateway() as gw:
        yield gw


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_client(db):
    def _make(name="Jane Doe", age=30, gender="Female", phone="555-0100", address="1 Main St"):
        return Client.objects.create(name=name, age=age, gender=gender, phone=phone, address=address)
    return _make


@pytest.fixture
def make_program(db):
    def _make(name="TB Control", description=None):
        return Program.objects.create(name=name, description=description)
    return _make


@pytest.fixture
def enroll(db):
    def _enroll(client, program):
        return Enrollment.objects.create(client=client, program=program)
    return _enroll


@pytest.fixture
def client_payload() -> dict:
    return {
        "name": "Jane",
        "age": 30,
        "gender": "Female",
        "phone": "555",
        "address": "1 Main St",
    }
