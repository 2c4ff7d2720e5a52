"""
Tests for the back-office CRUD endpoints.
"""

import pytest


@pytest.fixture
def client_id(client):
    response = client.post(
        "/api/clients", json={"name": "Carla Mendes", "email": "Carla@Example.com"}
    )
    assert response.status_code == 201
    return response.get_json()["id"]


@pytest.fixture
def simulation_id(client, client_id):
    response = client.post(
        "/api/simulations",
        json={
            "client_id": client_id,
            "name": "Plano Base",
            "start_date": "2025-06-01",
            "real_rate": 0.04,
        },
    )
    assert response.status_code == 201
    return response.get_json()["id"]


class TestClientsApi:
    """Test client endpoints."""

    def test_create_and_get(self, client, client_id):
        response = client.get(f"/api/clients/{client_id}")

        assert response.status_code == 200
        data = response.get_json()
        assert data["name"] == "Carla Mendes"
        assert data["email"] == "carla@example.com"

    def test_list(self, client, client_id):
        response = client.get("/api/clients")

        assert response.status_code == 200
        assert [c["id"] for c in response.get_json()] == [client_id]

    def test_invalid_email(self, client, test_env):
        response = client.post("/api/clients", json={"name": "X", "email": "not-an-email"})

        assert response.status_code == 400
        data = response.get_json()
        assert data["status"] == "error"
        assert data["message"] == "Invalid data"
        assert data["errors"][0]["field"] == "email"

    @pytest.mark.parametrize("email", ["a@b@c.com", "a b@c.d", "x@.com", "x@c."])
    def test_malformed_email_rejected(self, client, test_env, email):
        response = client.post("/api/clients", json={"name": "X", "email": email})

        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "email"

    def test_duplicate_email(self, client, client_id):
        response = client.post(
            "/api/clients", json={"name": "Outra", "email": "carla@example.com"}
        )

        assert response.status_code == 409

    def test_update(self, client, client_id):
        response = client.put(f"/api/clients/{client_id}", json={"phone": "11 98888-7777"})

        assert response.status_code == 200
        data = response.get_json()
        assert data["phone"] == "11 98888-7777"
        assert data["name"] == "Carla Mendes"

    def test_delete_cascades(self, client, client_id, simulation_id):
        response = client.delete(f"/api/clients/{client_id}")

        assert response.status_code == 200
        assert client.get(f"/api/clients/{client_id}").status_code == 404
        assert client.get(f"/api/simulations/{simulation_id}").status_code == 404

    def test_missing_client(self, client, test_env):
        response = client.get("/api/clients/999")

        assert response.status_code == 404
        assert response.get_json()["message"] == "Client not found"


class TestSimulationsApi:
    """Test simulation endpoints and versioning rules."""

    def test_get_includes_flags(self, client, simulation_id):
        data = client.get(f"/api/simulations/{simulation_id}").get_json()

        assert data["status"] == "ATIVO"
        assert data["start_date"] == "2025-06-01"
        assert data["can_edit"] is True
        assert data["can_delete"] is True
        assert data["is_legacy"] is False

    def test_create_for_unknown_client(self, client, test_env):
        response = client.post(
            "/api/simulations",
            json={"client_id": 42, "name": "Plano", "start_date": "2025-01-01"},
        )

        assert response.status_code == 404

    def test_create_validation(self, client, client_id):
        response = client.post(
            "/api/simulations",
            json={"client_id": client_id, "name": "P", "start_date": "2025-01-01"},
        )

        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "name"

    def test_datetime_start_date_is_truncated(self, client, client_id):
        response = client.post(
            "/api/simulations",
            json={
                "client_id": client_id,
                "name": "Plano Datado",
                "start_date": "2025-03-10T14:00:00.000Z",
            },
        )

        assert response.status_code == 201
        assert response.get_json()["start_date"] == "2025-03-10"

    def test_update(self, client, simulation_id):
        response = client.put(
            f"/api/simulations/{simulation_id}",
            json={"description": "Revisado", "real_rate": 0.05},
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["description"] == "Revisado"
        assert data["real_rate"] == 0.05
        assert data["name"] == "Plano Base"

    def test_list_by_client_and_latest(self, client, client_id, simulation_id):
        copy_id = client.post(
            f"/api/simulations/{simulation_id}/duplicate", json={"name": "Plano Base"}
        ).get_json()["id"]

        all_ids = [s["id"] for s in client.get(f"/api/simulations?client_id={client_id}").get_json()]
        latest = client.get("/api/simulations?latest=true").get_json()

        assert sorted(all_ids) == sorted([simulation_id, copy_id])
        assert [s["id"] for s in latest] == [copy_id]

    def test_history(self, client, simulation_id):
        copy_id = client.post(
            f"/api/simulations/{simulation_id}/duplicate", json={"name": "Plano Base"}
        ).get_json()["id"]

        response = client.get("/api/simulations/history", query_string={"name": "Plano Base"})

        assert response.status_code == 200
        assert [s["id"] for s in response.get_json()] == [copy_id, simulation_id]

    def test_history_requires_name(self, client, test_env):
        assert client.get("/api/simulations/history").status_code == 400

    def test_duplicate_copies_children(self, client, simulation_id):
        client.post(
            f"/api/simulations/{simulation_id}/allocations",
            json={"type": "FINANCEIRA", "name": "CDB", "value": 1000},
        )

        response = client.post(f"/api/simulations/{simulation_id}/duplicate")

        assert response.status_code == 201
        copy = response.get_json()
        assert copy["base_id"] == simulation_id
        assert copy["name"] == "Cópia de Plano Base"
        allocations = client.get(f"/api/simulations/{copy['id']}/allocations").get_json()
        assert [a["name"] for a in allocations] == ["CDB"]

    def test_duplicate_missing(self, client, test_env):
        assert client.post("/api/simulations/77/duplicate").status_code == 404

    def test_current_situation_is_read_only(self, client, simulation_id):
        first = client.post(f"/api/simulations/{simulation_id}/current-situation")
        second = client.post(f"/api/simulations/{simulation_id}/current-situation")

        assert first.status_code == 201
        assert second.status_code == 200
        current = first.get_json()
        assert current["status"] == "SITUACAO_ATUAL"
        assert second.get_json()["id"] == current["id"]

        assert client.put(
            f"/api/simulations/{current['id']}", json={"name": "Outro nome"}
        ).status_code == 409
        assert client.delete(f"/api/simulations/{current['id']}").status_code == 409

    def test_legacy_version_cannot_be_edited(self, client, simulation_id):
        older = client.post(f"/api/simulations/{simulation_id}/duplicate").get_json()
        client.post(f"/api/simulations/{simulation_id}/duplicate")

        response = client.put(f"/api/simulations/{older['id']}", json={"description": "x"})

        assert response.status_code == 409

    def test_children_of_current_situation_are_locked(self, client, simulation_id):
        client.post(
            f"/api/simulations/{simulation_id}/allocations",
            json={"type": "FINANCEIRA", "name": "CDB", "value": 1000},
        )
        client.post(
            f"/api/simulations/{simulation_id}/movements",
            json={"type": "ENTRADA", "value": 500, "frequency": "UNICA", "start_date": "2025-02-01"},
        )
        client.post(
            f"/api/simulations/{simulation_id}/insurances",
            json={
                "name": "Seguro",
                "start_date": "2025-01-01",
                "duration_months": 12,
                "insured_value": 1000,
            },
        )
        current_id = client.post(
            f"/api/simulations/{simulation_id}/current-situation"
        ).get_json()["id"]

        allocation = client.get(f"/api/simulations/{current_id}/allocations").get_json()[0]
        movement = client.get(f"/api/simulations/{current_id}/movements").get_json()[0]
        insurance = client.get(f"/api/simulations/{current_id}/insurances").get_json()[0]

        assert client.post(
            f"/api/simulations/{current_id}/allocations",
            json={"type": "FINANCEIRA", "name": "Novo", "value": 10},
        ).status_code == 409
        assert client.put(
            f"/api/allocations/{allocation['id']}", json={"value": 5}
        ).status_code == 409
        assert client.post(
            f"/api/allocations/{allocation['id']}/records",
            json={"date": "2025-06-01", "value": 1200},
        ).status_code == 409
        assert client.delete(f"/api/allocations/{allocation['id']}").status_code == 409
        assert client.put(
            f"/api/movements/{movement['id']}", json={"value": 600}
        ).status_code == 409
        assert client.delete(f"/api/movements/{movement['id']}").status_code == 409
        assert client.put(
            f"/api/insurances/{insurance['id']}", json={"premium": 10}
        ).status_code == 409
        assert client.delete(f"/api/insurances/{insurance['id']}").status_code == 409

        # the source plan stays editable
        assert client.put(
            f"/api/simulations/{simulation_id}", json={"description": "ok"}
        ).status_code == 200

    def test_children_of_legacy_version_are_locked(self, client, simulation_id):
        older = client.post(f"/api/simulations/{simulation_id}/duplicate").get_json()
        client.post(f"/api/simulations/{simulation_id}/duplicate")

        response = client.post(
            f"/api/simulations/{older['id']}/movements",
            json={"type": "SAIDA", "value": 100, "frequency": "UNICA", "start_date": "2025-02-01"},
        )

        assert response.status_code == 409
        assert response.get_json()["message"] == (
            "Current situations and legacy versions cannot be edited"
        )

    def test_delete(self, client, simulation_id):
        assert client.delete(f"/api/simulations/{simulation_id}").status_code == 200
        assert client.get(f"/api/simulations/{simulation_id}").status_code == 404


class TestAllocationsApi:
    def test_create_with_records(self, client, simulation_id):
        response = client.post(
            f"/api/simulations/{simulation_id}/allocations",
            json={
                "type": "IMOBILIZADA",
                "name": "Casa",
                "value": 500000,
                "records": [
                    {"date": "2025-01-01", "value": 510000},
                    {"date": "2025-04-01", "value": 530000},
                ],
            },
        )

        assert response.status_code == 201
        data = response.get_json()
        assert [r["value"] for r in data["records"]] == [510000.0, 530000.0]

    def test_invalid_type(self, client, simulation_id):
        response = client.post(
            f"/api/simulations/{simulation_id}/allocations",
            json={"type": "CRIPTO", "name": "X", "value": 1},
        )

        assert response.status_code == 400

    def test_update_get_and_delete(self, client, simulation_id):
        allocation_id = client.post(
            f"/api/simulations/{simulation_id}/allocations",
            json={"type": "FINANCEIRA", "name": "CDB", "value": 1000},
        ).get_json()["id"]

        updated = client.put(f"/api/allocations/{allocation_id}", json={"value": 1500})
        assert updated.status_code == 200
        assert updated.get_json()["value"] == 1500.0

        assert client.get(f"/api/allocations/{allocation_id}").status_code == 200
        assert client.delete(f"/api/allocations/{allocation_id}").status_code == 200
        assert client.get(f"/api/allocations/{allocation_id}").status_code == 404

    def test_records(self, client, simulation_id):
        allocation_id = client.post(
            f"/api/simulations/{simulation_id}/allocations",
            json={"type": "FINANCEIRA", "name": "CDB", "value": 1000},
        ).get_json()["id"]

        created = client.post(
            f"/api/allocations/{allocation_id}/records",
            json={"date": "2025-02-01", "value": 1100, "notes": "extrato"},
        )
        assert created.status_code == 201

        records = client.get(f"/api/allocations/{allocation_id}/records").get_json()
        assert [(r["date"], r["value"]) for r in records] == [("2025-02-01", 1100.0)]

    def test_missing_simulation(self, client, test_env):
        assert client.get("/api/simulations/5/allocations").status_code == 404


class TestMovementsApi:
    def test_open_ended_recurring_movement(self, client, simulation_id):
        response = client.post(
            f"/api/simulations/{simulation_id}/movements",
            json={
                "type": "SAIDA",
                "value": 2000,
                "description": "Aluguel",
                "frequency": "MENSAL",
                "start_date": "2025-01-01",
            },
        )

        assert response.status_code == 201
        assert response.get_json()["end_date"] is None

        timeline = client.get(
            f"/api/simulations/{simulation_id}/movements/timeline",
            query_string={"start_year": 2025, "end_year": 2025},
        ).get_json()
        assert len(timeline["entries"]) == 12
        assert timeline["summary"][0]["expense"] == 24000.0

    def test_crud(self, client, simulation_id):
        created = client.post(
            f"/api/simulations/{simulation_id}/movements",
            json={
                "type": "ENTRADA",
                "value": 8000,
                "description": "Salário",
                "frequency": "MENSAL",
                "start_date": "2025-01-01",
                "end_date": "2025-12-31",
            },
        )
        assert created.status_code == 201
        movement_id = created.get_json()["id"]

        updated = client.put(f"/api/movements/{movement_id}", json={"value": 9000})
        assert updated.get_json()["value"] == 9000.0

        bad = client.put(f"/api/movements/{movement_id}", json={"end_date": "2024-01-01"})
        assert bad.status_code == 400

        listed = client.get(f"/api/simulations/{simulation_id}/movements").get_json()
        assert [m["id"] for m in listed] == [movement_id]

        assert client.delete(f"/api/movements/{movement_id}").status_code == 200
        assert client.get(f"/api/movements/{movement_id}").status_code == 404

    def test_timeline(self, client, simulation_id):
        client.post(
            f"/api/simulations/{simulation_id}/movements",
            json={
                "type": "ENTRADA",
                "value": 1000,
                "frequency": "MENSAL",
                "start_date": "2025-01-01",
                "end_date": "2025-03-31",
            },
        )
        client.post(
            f"/api/simulations/{simulation_id}/movements",
            json={
                "type": "SAIDA",
                "value": 500,
                "frequency": "UNICA",
                "start_date": "2025-02-01",
            },
        )

        response = client.get(
            f"/api/simulations/{simulation_id}/movements/timeline?start_year=2025&end_year=2025"
        )

        assert response.status_code == 200
        data = response.get_json()
        assert [(e["date"], e["direction"]) for e in data["entries"]] == [
            ("2025-01-01", "ENTRADA"),
            ("2025-02-01", "ENTRADA"),
            ("2025-02-01", "SAIDA"),
            ("2025-03-01", "ENTRADA"),
        ]
        assert data["summary"] == [
            {"year": 2025, "income": 3000.0, "expense": 500.0, "net": 2500.0}
        ]

    def test_timeline_default_window(self, client, simulation_id):
        data = client.get(f"/api/simulations/{simulation_id}/movements/timeline").get_json()

        assert data["start_year"] == 2025
        assert data["end_year"] == 2059
        assert data["entries"] == []

    def test_timeline_default_window_stops_at_last_year(self, client, client_id):
        late_id = client.post(
            "/api/simulations",
            json={"client_id": client_id, "name": "Plano Tardio", "start_date": "2190-01-01"},
        ).get_json()["id"]

        response = client.get(f"/api/simulations/{late_id}/movements/timeline")

        assert response.status_code == 200
        data = response.get_json()
        assert data["start_year"] == 2190
        assert data["end_year"] == 2200
        assert len(data["summary"]) == 11

    def test_timeline_reversed_window(self, client, simulation_id):
        response = client.get(
            f"/api/simulations/{simulation_id}/movements/timeline?start_year=2030&end_year=2025"
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid data"

    def test_timeline_missing_simulation(self, client, test_env):
        response = client.get("/api/simulations/99/movements/timeline?start_year=2025&end_year=2026")

        assert response.status_code == 404


class TestInsurancesApi:
    def test_crud(self, client, simulation_id):
        created = client.post(
            f"/api/simulations/{simulation_id}/insurances",
            json={
                "name": "Vida",
                "start_date": "2025-01-01",
                "duration_months": 240,
                "premium": 150,
                "insured_value": 800000,
            },
        )
        assert created.status_code == 201
        insurance = created.get_json()
        assert insurance["type"] == "VIDA"

        updated = client.put(
            f"/api/insurances/{insurance['id']}", json={"type": "INVALIDEZ"}
        )
        assert updated.get_json()["type"] == "INVALIDEZ"

        listed = client.get(f"/api/simulations/{simulation_id}/insurances").get_json()
        assert [i["insured_value"] for i in listed] == [800000.0]

        assert client.delete(f"/api/insurances/{insurance['id']}").status_code == 200
        assert client.get(f"/api/insurances/{insurance['id']}").status_code == 404

    def test_negative_insured_value(self, client, simulation_id):
        response = client.post(
            f"/api/simulations/{simulation_id}/insurances",
            json={
                "name": "Vida",
                "start_date": "2025-01-01",
                "duration_months": 12,
                "insured_value": -1,
            },
        )

        assert response.status_code == 400
