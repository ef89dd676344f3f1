"""HTTP contract tests for /api/programs, /api/clients and /api/enrollments."""

import uuid
from unittest.mock import patch

import pytest

from clients.models import Client
from programs.models import Enrollment, Program

pytestmark = pytest.mark.django_db


def test_health_check(api_client):
    response = api_client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "HealthTrack API is running"}


def test_api_root_lists_every_resource(api_client):
    response = api_client.get("/api/")
    assert response.status_code == 200
    assert set(response.json()) == {"clients", "programs", "enrollments"}


class TestProgramsEndpoint:
    def test_list(self, api_client, make_program):
        make_program(name="Zeta")
        make_program(name="Alpha", description="first")
        response = api_client.get("/api/programs")
        assert response.status_code == 200
        body = response.json()
        assert [p["name"] for p in body] == ["Alpha", "Zeta"]
        assert set(body[0]) == {"id", "name", "description", "createdAt"}

    def test_create(self, api_client):
        response = api_client.post("/api/programs", {"name": "TB Control"}, format="json")
        assert response.status_code == 201
        assert response.json()["name"] == "TB Control"
        assert response.json()["description"] is None

    def test_create_missing_name(self, api_client):
        response = api_client.post("/api/programs", {"description": "x"}, format="json")
        assert response.status_code == 400
        assert response.json() == {"error": "Program name is required"}

    def test_create_duplicate(self, api_client, make_program):
        make_program(name="TB Control")
        response = api_client.post("/api/programs", {"name": "TB Control"}, format="json")
        assert response.status_code == 400
        assert response.json() == {"error": "A program with this name already exists"}
        assert Program.objects.count() == 1

    @pytest.mark.parametrize("payload,error", [
        ({"name": {"a": 1}}, "Program name must be a string"),
        ({"name": 42}, "Program name must be a string"),
        ({"name": "TB", "description": {"a": 1}}, "Description must be a string"),
        ({"name": "x" * 101}, "Program name must be at most 100 characters"),
    ])
    def test_create_rejects_invalid_fields(self, api_client, payload, error):
        response = api_client.post("/api/programs", payload, format="json")
        assert response.status_code == 400
        assert response.json() == {"error": error}
        assert Program.objects.count() == 0

    def test_update_rejects_overlong_name(self, api_client, make_program):
        program = make_program(name="Old")
        response = api_client.put(f"/api/programs/{program.id}", {"name": "x" * 500}, format="json")
        assert response.status_code == 400
        assert response.json() == {"error": "Program name must be at most 100 characters"}
        program.refresh_from_db()
        assert program.name == "Old"

    def test_retrieve_with_enrolled_clients(self, api_client, make_client, make_program, enroll):
        program = make_program()
        client = make_client(name="Jane")
        enroll(client, program)
        response = api_client.get(f"/api/programs/{program.id}")
        assert response.status_code == 200
        enrollments = response.json()["enrollments"]
        assert len(enrollments) == 1
        assert enrollments[0]["clientId"] == str(client.id)
        assert enrollments[0]["client"]["name"] == "jane"

    @pytest.mark.parametrize("program_id", [uuid.uuid4(), "42", "not-a-uuid"])
    def test_retrieve_missing(self, api_client, program_id):
        response = api_client.get(f"/api/programs/{program_id}")
        assert response.status_code == 404
        assert response.json() == {"error": "Program not found"}

    def test_update(self, api_client, make_program):
        program = make_program(name="Old")
        response = api_client.put(
            f"/api/programs/{program.id}", {"name": "New", "description": "d"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["name"] == "New"
        program.refresh_from_db()
        assert program.description == "d"

    def test_update_missing(self, api_client):
        response = api_client.put(f"/api/programs/{uuid.uuid4()}", {"name": "x"}, format="json")
        assert response.status_code == 404

    def test_update_duplicate(self, api_client, make_program):
        make_program(name="Taken")
        program = make_program(name="Mine")
        response = api_client.put(f"/api/programs/{program.id}", {"name": "Taken"}, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "A program with this name already exists"

    def test_delete(self, api_client, make_program):
        program = make_program()
        response = api_client.delete(f"/api/programs/{program.id}")
        assert response.status_code == 204
        assert Program.objects.count() == 0

    def test_delete_missing(self, api_client):
        assert api_client.delete(f"/api/programs/{uuid.uuid4()}").status_code == 404

    def test_patch_not_allowed(self, api_client, make_program):
        program = make_program()
        response = api_client.patch(f"/api/programs/{program.id}", {"name": "x"}, format="json")
        assert response.status_code == 405
        assert "error" in response.json()


class TestClientsEndpoint:
    def test_create_normalizes_name(self, api_client, client_payload):
        client_payload["name"] = "John Doe"
        response = api_client.post("/api/clients", client_payload, format="json")
        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "john doe"
        assert set(body) == {"id", "name", "age", "gender", "phone", "address", "createdAt", "updatedAt"}

    def test_create_missing_field(self, api_client, client_payload):
        del client_payload["phone"]
        response = api_client.post("/api/clients", client_payload, format="json")
        assert response.status_code == 400
        assert response.json() == {"error": "Phone is required"}

    def test_create_rejects_age_beyond_integer_column(self, api_client, client_payload):
        client_payload["age"] = 10**20
        response = api_client.post("/api/clients", client_payload, format="json")
        assert response.status_code == 400
        assert response.json() == {"error": "Age must be a non-negative integer"}
        assert Client.objects.count() == 0

    @pytest.mark.parametrize("field,value,error", [
        ("name", {"First": "X"}, "Name must be a string"),
        ("gender", ["Female"], "Gender must be a string"),
        ("phone", 5550100, "Phone must be a string"),
        ("address", "x" * 256, "Address must be at most 255 characters"),
    ])
    def test_create_rejects_invalid_text(self, api_client, client_payload, field, value, error):
        client_payload[field] = value
        response = api_client.post("/api/clients", client_payload, format="json")
        assert response.status_code == 400
        assert response.json() == {"error": error}
        assert Client.objects.count() == 0

    def test_list_ordered(self, api_client, make_client):
        make_client(name="Zed")
        make_client(name="amy")
        response = api_client.get("/api/clients")
        assert [c["name"] for c in response.json()] == ["amy", "zed"]

    def test_list_filter_by_gender(self, api_client, make_client):
        make_client(name="a", gender="Female")
        make_client(name="b", gender="Male")
        response = api_client.get("/api/clients", {"gender": "male"})
        assert [c["name"] for c in response.json()] == ["b"]

    def test_search(self, api_client, make_client):
        make_client(name="Jane Doe")
        make_client(name="Bob")
        response = api_client.get("/api/clients/search", {"name": "JaN"})
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["jane doe"]

    def test_search_missing_term(self, api_client):
        response = api_client.get("/api/clients/search")
        assert response.status_code == 400
        assert response.json() == {"error": "Search term is required"}

    def test_retrieve_with_programs(self, api_client, make_client, make_program, enroll):
        client = make_client()
        program = make_program(name="Diabetes")
        enroll(client, program)
        response = api_client.get(f"/api/clients/{client.id}")
        assert response.status_code == 200
        enrollments = response.json()["enrollments"]
        assert enrollments[0]["program"]["name"] == "Diabetes"
        assert enrollments[0]["programId"] == str(program.id)

    def test_retrieve_missing(self, api_client):
        response = api_client.get(f"/api/clients/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"error": "Client not found"}

    def test_update(self, api_client, make_client, client_payload):
        client = make_client()
        client_payload.update(name="Jane Q", age="31")
        response = api_client.put(f"/api/clients/{client.id}", client_payload, format="json")
        assert response.status_code == 200
        assert response.json()["name"] == "jane q"
        assert response.json()["age"] == 31

    def test_update_missing(self, api_client, client_payload):
        response = api_client.put(f"/api/clients/{uuid.uuid4()}", client_payload, format="json")
        assert response.status_code == 404

    def test_delete_cascades(self, api_client, make_client, make_program, enroll):
        client = make_client()
        enroll(client, make_program(name="A"))
        enroll(client, make_program(name="B"))
        response = api_client.delete(f"/api/clients/{client.id}")
        assert response.status_code == 204
        assert Enrollment.objects.filter(client_id=client.id).count() == 0
        assert not Client.objects.filter(pk=client.pk).exists()

    def test_delete_missing(self, api_client):
        response = api_client.delete(f"/api/clients/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"error": "Client not found"}

    def test_non_object_body(self, api_client):
        response = api_client.post("/api/clients", ["Jane"], format="json")
        assert response.status_code == 400
        assert response.json() == {"error": "Request body must be a JSON object"}


class TestEnrollmentsEndpoint:
    def test_create_returns_joined_record(self, api_client, make_client, make_program):
        client, program = make_client(), make_program()
        response = api_client.post(
            "/api/enrollments", {"clientId": str(client.id), "programId": str(program.id)}, format="json"
        )
        assert response.status_code == 201
        body = response.json()
        assert body["client"]["id"] == str(client.id)
        assert body["program"]["name"] == program.name
        assert "enrolledAt" in body

    def test_create_missing_ids(self, api_client):
        response = api_client.post("/api/enrollments", {}, format="json")
        assert response.status_code == 400
        assert response.json() == {"error": "Client ID is required"}

    def test_create_unknown_client(self, api_client, make_program):
        response = api_client.post(
            "/api/enrollments", {"clientId": str(uuid.uuid4()), "programId": str(make_program().id)}, format="json"
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Client not found"}

    def test_create_unknown_program(self, api_client, make_client):
        response = api_client.post(
            "/api/enrollments", {"clientId": str(make_client().id), "programId": str(uuid.uuid4())}, format="json"
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Program not found"}

    def test_create_duplicate(self, api_client, make_client, make_program, enroll):
        client, program = make_client(), make_program()
        enroll(client, program)
        response = api_client.post(
            "/api/enrollments", {"clientId": str(client.id), "programId": str(program.id)}, format="json"
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Client is already enrolled in this program"}
        assert Enrollment.objects.filter(client=client, program=program).count() == 1

    def test_list(self, api_client, make_client, make_program, enroll):
        enroll(make_client(), make_program())
        response = api_client.get("/api/enrollments")
        assert response.status_code == 200
        assert set(response.json()[0]) == {"id", "clientId", "programId", "enrolledAt", "client", "program"}

    def test_list_filter_by_program(self, api_client, make_client, make_program, enroll):
        client = make_client()
        a, b = make_program(name="A"), make_program(name="B")
        enroll(client, a)
        enroll(client, b)
        response = api_client.get("/api/enrollments", {"program": str(b.id)})
        assert [e["programId"] for e in response.json()] == [str(b.id)]

    def test_bulk_skips_existing(self, api_client, make_client, make_program, enroll):
        client = make_client()
        p1, p2 = make_program(name="P1"), make_program(name="P2")
        enroll(client, p1)
        response = api_client.post(
            "/api/enrollments/bulk",
            {"clientId": str(client.id), "programIds": [str(p1.id), str(p2.id)]},
            format="json",
        )
        assert response.status_code == 201
        body = response.json()
        assert len(body) == 1
        assert body[0]["program"]["id"] == str(p2.id)
        assert "client" not in body[0]

    def test_bulk_all_existing(self, api_client, make_client, make_program, enroll):
        client, p1 = make_client(), make_program()
        enroll(client, p1)
        response = api_client.post(
            "/api/enrollments/bulk", {"clientId": str(client.id), "programIds": [str(p1.id)]}, format="json"
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Client is already enrolled in all specified programs"}

    def test_bulk_missing_program_ids(self, api_client, make_client):
        response = api_client.post(
            "/api/enrollments/bulk", {"clientId": str(make_client().id), "programIds": []}, format="json"
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Program IDs array is required"}

    def test_bulk_unknown_client(self, api_client, make_program):
        response = api_client.post(
            "/api/enrollments/bulk",
            {"clientId": str(uuid.uuid4()), "programIds": [str(make_program().id)]},
            format="json",
        )
        assert response.status_code == 404

    def test_bulk_unknown_program_is_omitted(self, api_client, make_client, make_program):
        client, program = make_client(), make_program()
        response = api_client.post(
            "/api/enrollments/bulk",
            {"clientId": str(client.id), "programIds": [str(uuid.uuid4()), str(program.id)]},
            format="json",
        )
        assert response.status_code == 201
        assert [e["programId"] for e in response.json()] == [str(program.id)]

    def test_delete(self, api_client, make_client, make_program, enroll):
        enrollment = enroll(make_client(), make_program())
        assert api_client.delete(f"/api/enrollments/{enrollment.id}").status_code == 204
        response = api_client.delete(f"/api/enrollments/{enrollment.id}")
        assert response.status_code == 404
        assert response.json() == {"error": "Enrollment not found"}

    def test_delete_by_pair(self, api_client, make_client, make_program, enroll):
        client, program = make_client(), make_program()
        enroll(client, program)
        url = f"/api/enrollments/client/{client.id}/program/{program.id}"
        assert api_client.delete(url).status_code == 204
        assert Enrollment.objects.count() == 0
        response = api_client.delete(url)
        assert response.status_code == 404
        assert response.json() == {"error": "Enrollment not found"}


class TestErrorRendering:
    def test_unexpected_error_is_500_with_message(self, api_client):
        with patch("programs.services.ProgramService.list", side_effect=RuntimeError("database is locked")):
            response = api_client.get("/api/programs")
        assert response.status_code == 500
        assert response.json() == {"error": "database is locked"}

    def test_malformed_json(self, api_client):
        response = api_client.post("/api/programs", data="{not json", content_type="application/json")
        assert response.status_code == 400
        assert "error" in response.json()


def test_enrollment_lifecycle_scenario(api_client):
    response = api_client.post(
        "/api/clients",
        {"name": "Jane", "age": 30, "gender": "Female", "phone": "555", "address": "1 Main St"},
        format="json",
    )
    assert response.status_code == 201
    client = response.json()
    assert client["name"] == "jane"

    response = api_client.get("/api/clients/search", {"name": "jan"})
    assert response.status_code == 200
    assert client["id"] in [c["id"] for c in response.json()]

    response = api_client.post("/api/programs", {"name": "TB Control"}, format="json")
    assert response.status_code == 201
    program = response.json()

    response = api_client.post(
        "/api/enrollments", {"clientId": client["id"], "programId": program["id"]}, format="json"
    )
    assert response.status_code == 201
    enrollment = response.json()
    assert enrollment["client"]["id"] == client["id"]
    assert enrollment["program"]["id"] == program["id"]

    response = api_client.delete(f"/api/programs/{program['id']}")
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete program with active enrollments", "count": 1}

    assert api_client.delete(f"/api/enrollments/{enrollment['id']}").status_code == 204
    assert api_client.delete(f"/api/programs/{program['id']}").status_code == 204
