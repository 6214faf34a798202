"""API tests for vacations, terminations, advances and payroll entries."""

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from hr_payroll.api.app import create_app
from hr_payroll.api.dependencies import get_db_session
from tests.payloads import payroll_payload, vacation_payload


class TestVacationEndpoints:
    """Test vacation lifecycle and approval stamping."""

    async def test_create_defaults(self, client, admin_headers, employee):
        response = await client.post(
            "/api/vacations", json=vacation_payload(employee["id"]), headers=admin_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pendente"
        assert data["days"] == 30
        assert data["approvedAt"] is None
        assert data["approvedBy"] is None

    async def test_client_approved_at_is_ignored(self, client, admin_headers, employee):
        payload = vacation_payload(employee["id"], approvedAt="2020-01-01T00:00:00Z")
        response = await client.post("/api/vacations", json=payload, headers=admin_headers)
        assert response.json()["approvedAt"] is None

    async def test_approval_stamps_time_and_approver(
        self, client, admin_headers, admin_user, employee
    ):
        vacation = (
            await client.post(
                "/api/vacations", json=vacation_payload(employee["id"]), headers=admin_headers
            )
        ).json()

        response = await client.put(
            f"/api/vacations/{vacation['id']}",
            json={"status": "aprovado"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "aprovado"
        assert data["approvedAt"] is not None
        assert data["approvedBy"] == admin_user.id

    async def test_lifecycle(self, client, admin_headers, employee):
        vacation = (
            await client.post(
                "/api/vacations", json=vacation_payload(employee["id"]), headers=admin_headers
            )
        ).json()

        for status in ("aprovado", "em_gozo", "concluido"):
            response = await client.put(
                f"/api/vacations/{vacation['id']}", json={"status": status}, headers=admin_headers
            )
            assert response.status_code == 200
            assert response.json()["status"] == status

    async def test_invalid_transition(self, client, admin_headers, employee):
        vacation = (
            await client.post(
                "/api/vacations", json=vacation_payload(employee["id"]), headers=admin_headers
            )
        ).json()

        response = await client.put(
            f"/api/vacations/{vacation['id']}", json={"status": "concluido"}, headers=admin_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_STATUS_TRANSITION"
        assert body["from_status"] == "pendente"

    async def test_acquisition_end_before_start(self, client, admin_headers, employee):
        payload = vacation_payload(
            employee["id"], acquisitionPeriodStart="2024-01-31", acquisitionPeriodEnd="2023-02-01"
        )
        response = await client.post("/api/vacations", json=payload, headers=admin_headers)
        assert response.status_code == 400

    async def test_non_positive_days(self, client, admin_headers, employee):
        response = await client.post(
            "/api/vacations", json=vacation_payload(employee["id"], days=0), headers=admin_headers
        )
        assert response.status_code == 400

    async def test_unknown_employee(self, client, admin_headers):
        response = await client.post(
            "/api/vacations", json=vacation_payload("no-such-employee"), headers=admin_headers
        )
        assert response.status_code == 404

    async def test_list_includes_employee_name_and_search(self, client, admin_headers, employee):
        await client.post("/api/vacations", json=vacation_payload(employee["id"]), headers=admin_headers)

        listed = await client.get("/api/vacations", params={"search": "maria"}, headers=admin_headers)
        assert listed.json()[0]["employeeName"] == "Maria Silva"

        empty = await client.get("/api/vacations", params={"search": "nobody"}, headers=admin_headers)
        assert empty.json() == []

    async def test_employee_vacations(self, client, admin_headers, employee):
        await client.post(
            "/api/vacations",
            json=vacation_payload(employee["id"], acquisitionPeriodStart="2022-02-01", acquisitionPeriodEnd="2023-01-31"),
            headers=admin_headers,
        )
        await client.post("/api/vacations", json=vacation_payload(employee["id"]), headers=admin_headers)

        response = await client.get(f"/api/employees/{employee['id']}/vacations", headers=admin_headers)

        assert response.status_code == 200
        starts = [v["acquisitionPeriodStart"] for v in response.json()]
        assert starts == ["2023-02-01", "2022-02-01"]

    async def test_employee_vacations_unknown_employee(self, client, admin_headers):
        response = await client.get("/api/employees/nobody/vacations", headers=admin_headers)
        assert response.status_code == 404

    async def test_stats(self, client, admin_headers, employee):
        soon = (date.today() + timedelta(days=10)).isoformat()
        later = (date.today() + timedelta(days=200)).isoformat()
        await client.post(
            "/api/vacations", json=vacation_payload(employee["id"], enjoymentLimit=soon), headers=admin_headers
        )
        await client.post(
            "/api/vacations", json=vacation_payload(employee["id"], enjoymentLimit=later), headers=admin_headers
        )
        approved = (
            await client.post(
                "/api/vacations", json=vacation_payload(employee["id"], enjoymentLimit=later), headers=admin_headers
            )
        ).json()
        await client.put(
            f"/api/vacations/{approved['id']}", json={"status": "aprovado"}, headers=admin_headers
        )

        response = await client.get("/api/vacations/stats", headers=admin_headers)

        assert response.json() == {"pending": 2, "approved": 1, "active": 0, "expiring": 1}


class TestTerminationEndpoints:
    async def test_crud(self, client, admin_headers, employee):
        created = await client.post(
            "/api/terminations",
            json={"employeeId": employee["id"], "terminationDate": "2024-05-31", "reason": "rescisao"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        termination = created.json()
        assert termination["receiptIssued"] is False
        assert termination["fgtsReleased"] is False
        assert termination["severanceProcessed"] is False

        updated = await client.put(
            f"/api/terminations/{termination['id']}",
            json={"fgtsReleased": True},
            headers=admin_headers,
        )
        assert updated.json()["fgtsReleased"] is True
        assert updated.json()["receiptIssued"] is False

        deleted = await client.delete(f"/api/terminations/{termination['id']}", headers=admin_headers)
        assert deleted.status_code == 204

    async def test_invalid_reason(self, client, admin_headers, employee):
        response = await client.post(
            "/api/terminations",
            json={"employeeId": employee["id"], "terminationDate": "2024-05-31", "reason": "ferias"},
            headers=admin_headers,
        )
        assert response.status_code == 400


class TestAdvanceEndpoints:
    """Test advance amount derivation."""

    async def test_defaults_from_employee(self, client, admin_headers, employee):
        response = await client.post(
            "/api/advances",
            json={"employeeId": employee["id"], "month": 3, "year": 2024},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["baseAmount"]) == Decimal("5000.00")
        assert Decimal(data["percentage"]) == Decimal("40.00")
        assert Decimal(data["advanceAmount"]) == Decimal("2000.00")
        assert data["status"] == "pendente"

    async def test_client_amount_is_recomputed(self, client, admin_headers, employee):
        response = await client.post(
            "/api/advances",
            json={
                "employeeId": employee["id"],
                "month": 4,
                "year": 2024,
                "baseAmount": "3000.00",
                "percentage": "25.00",
                "advanceAmount": "9999.99",
            },
            headers=admin_headers,
        )
        assert Decimal(response.json()["advanceAmount"]) == Decimal("750.00")

    async def test_update_recomputes_amount(self, client, admin_headers, employee):
        advance = (
            await client.post(
                "/api/advances",
                json={"employeeId": employee["id"], "month": 3, "year": 2024},
                headers=admin_headers,
            )
        ).json()

        response = await client.put(
            f"/api/advances/{advance['id']}", json={"percentage": "50.00"}, headers=admin_headers
        )

        assert Decimal(response.json()["advanceAmount"]) == Decimal("2500.00")

    @pytest.mark.parametrize("month", [0, 13])
    async def test_month_out_of_range(self, client, admin_headers, employee, month):
        response = await client.post(
            "/api/advances",
            json={"employeeId": employee["id"], "month": month, "year": 2024},
            headers=admin_headers,
        )
        assert response.status_code == 400

    async def test_payment_lifecycle(self, client, admin_headers, employee):
        advance = (
            await client.post(
                "/api/advances",
                json={"employeeId": employee["id"], "month": 3, "year": 2024},
                headers=admin_headers,
            )
        ).json()
        skipped = await client.put(
            f"/api/advances/{advance['id']}", json={"status": "pago"}, headers=admin_headers
        )
        assert skipped.status_code == 400

        for status in ("processado", "pago"):
            response = await client.put(
                f"/api/advances/{advance['id']}", json={"status": status}, headers=admin_headers
            )
            assert response.status_code == 200

    async def test_employee_advances(self, client, admin_headers, employee):
        for month in (1, 2):
            await client.post(
                "/api/advances",
                json={"employeeId": employee["id"], "month": month, "year": 2024},
                headers=admin_headers,
            )
        response = await client.get(f"/api/employees/{employee['id']}/advances", headers=admin_headers)
        assert [a["month"] for a in response.json()] == [2, 1]


class TestPayrollEndpoints:
    """Test gross/net derivation and processing stamps."""

    async def test_example_entry(self, client, admin_headers, employee):
        response = await client.post(
            "/api/payroll", json=payroll_payload(employee["id"]), headers=admin_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["grossAmount"]) == Decimal("3200.00")
        assert Decimal(data["netAmount"]) == Decimal("2800.00")
        assert Decimal(data["tips"]) == Decimal("0.00")
        assert data["processedAt"] is None

    async def test_client_totals_are_ignored(self, client, admin_headers, employee):
        payload = payroll_payload(employee["id"], grossAmount="1.00", netAmount="1.00")
        response = await client.post("/api/payroll", json=payload, headers=admin_headers)
        assert Decimal(response.json()["grossAmount"]) == Decimal("3200.00")

    async def test_update_recomputes_totals(self, client, admin_headers, employee):
        entry = (
            await client.post("/api/payroll", json=payroll_payload(employee["id"]), headers=admin_headers)
        ).json()

        response = await client.put(
            f"/api/payroll/{entry['id']}",
            json={"tips": "50.00", "vouchers": "20.00"},
            headers=admin_headers,
        )

        data = response.json()
        assert Decimal(data["grossAmount"]) == Decimal("3250.00")
        assert Decimal(data["netAmount"]) == Decimal("2830.00")

    async def test_processing_stamps_processed_at(self, client, admin_headers, employee):
        entry = (
            await client.post("/api/payroll", json=payroll_payload(employee["id"]), headers=admin_headers)
        ).json()

        response = await client.put(
            f"/api/payroll/{entry['id']}", json={"status": "processado"}, headers=admin_headers
        )

        assert response.json()["status"] == "processado"
        assert response.json()["processedAt"] is not None

    async def test_created_processed_is_stamped(self, client, admin_headers, employee):
        response = await client.post(
            "/api/payroll",
            json=payroll_payload(employee["id"], status="processado"),
            headers=admin_headers,
        )
        assert response.json()["processedAt"] is not None

    async def test_negative_component_is_rejected(self, client, admin_headers, employee):
        response = await client.post(
            "/api/payroll", json=payroll_payload(employee["id"], inss="-5.00"), headers=admin_headers
        )
        assert response.status_code == 400

    async def test_stats_current_month(self, client, admin_headers, employee):
        today = date.today()
        current = {"month": today.month, "year": today.year}
        await client.post(
            "/api/payroll", json=payroll_payload(employee["id"], **current), headers=admin_headers
        )
        await client.post(
            "/api/payroll",
            json=payroll_payload(employee["id"], status="processado", **current),
            headers=admin_headers,
        )
        await client.post(
            "/api/payroll",
            json=payroll_payload(employee["id"], month=today.month, year=today.year - 1),
            headers=admin_headers,
        )

        response = await client.get("/api/payroll/stats", headers=admin_headers)

        data = response.json()
        assert data["month"] == today.month
        assert Decimal(data["totalThisMonth"]) == Decimal("5600.00")
        assert data["processedThisMonth"] == 1
        assert data["pendingThisMonth"] == 1

    async def test_employee_payroll(self, client, admin_headers, employee):
        await client.post("/api/payroll", json=payroll_payload(employee["id"]), headers=admin_headers)
        response = await client.get(f"/api/employees/{employee['id']}/payroll", headers=admin_headers)
        assert len(response.json()) == 1
        assert response.json()[0]["employeeName"] == "Maria Silva"


class TestLenientTransitions:
    """With strict transitions off, any known status may be set."""

    @pytest.fixture
    async def lenient_client(self, settings, session_factory, admin_user):
        app = create_app(replace(settings, strict_status_transitions=False))

        async def override_db_session():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db_session] = override_db_session
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client, {"Authorization": f"Bearer {app.state.signer.issue(admin_user.id)}"}

    async def test_skip_to_paid(self, lenient_client, employee, client, admin_headers):
        lenient, headers = lenient_client
        entry = (
            await client.post("/api/payroll", json=payroll_payload(employee["id"]), headers=admin_headers)
        ).json()

        response = await lenient.put(
            f"/api/payroll/{entry['id']}", json={"status": "pago"}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "pago"
