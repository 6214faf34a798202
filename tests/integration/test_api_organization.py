"""API tests for branches, job positions and employees."""

from decimal import Decimal

from tests.payloads import branch_payload, employee_payload, payroll_payload, vacation_payload


class TestBranchEndpoints:
    """Test branch CRUD."""

    async def test_create_and_get(self, client, admin_headers):
        response = await client.post("/api/branches", json=branch_payload(), headers=admin_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["fantasyName"] == "Loja Centro"
        assert data["zipCode"] == "01001000"
        assert data["active"] is True
        assert data["id"]

        fetched = await client.get(f"/api/branches/{data['id']}", headers=admin_headers)
        assert fetched.status_code == 200
        assert fetched.json() == data

    async def test_accepts_snake_case_input(self, client, admin_headers):
        payload = branch_payload()
        payload["fantasy_name"] = payload.pop("fantasyName")
        payload["zip_code"] = payload.pop("zipCode")

        response = await client.post("/api/branches", json=payload, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["fantasyName"] == "Loja Centro"

    async def test_update_changes_only_sent_fields(self, client, admin_headers, branch):
        response = await client.put(
            f"/api/branches/{branch['id']}",
            json={"city": "Campinas"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["city"] == "Campinas"
        assert data["fantasyName"] == branch["fantasyName"]

    async def test_duplicate_cnpj_is_rejected(self, client, admin_headers, branch):
        response = await client.post(
            "/api/branches", json=branch_payload(fantasyName="Outra"), headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INTEGRITY_ERROR"

    async def test_missing_branch(self, client, admin_headers):
        response = await client.get("/api/branches/does-not-exist", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

        response = await client.delete("/api/branches/does-not-exist", headers=admin_headers)
        assert response.status_code == 404

    async def test_invalid_state_is_a_validation_error(self, client, admin_headers):
        response = await client.post(
            "/api/branches", json=branch_payload(state="SPX"), headers=admin_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["errors"][0]["field"] == "state"

    async def test_list_reflects_writes_immediately(self, client, admin_headers, branch):
        listed = await client.get("/api/branches", headers=admin_headers)
        assert [b["id"] for b in listed.json()] == [branch["id"]]

        await client.put(
            f"/api/branches/{branch['id']}", json={"city": "Santos"}, headers=admin_headers
        )
        listed = await client.get("/api/branches", headers=admin_headers)
        assert listed.json()[0]["city"] == "Santos"

        await client.delete(f"/api/branches/{branch['id']}", headers=admin_headers)
        listed = await client.get("/api/branches", headers=admin_headers)
        assert listed.json() == []

    async def test_search_for_all_does_not_share_unfiltered_results(self, client, admin_headers, branch):
        await client.post(
            "/api/branches",
            json=branch_payload(fantasyName="Loja Shopping Mall", cnpj="98765432000110"),
            headers=admin_headers,
        )

        searched = await client.get("/api/branches", params={"search": "all"}, headers=admin_headers)
        unfiltered = await client.get("/api/branches", headers=admin_headers)

        assert [b["fantasyName"] for b in searched.json()] == ["Loja Shopping Mall"]
        assert len(unfiltered.json()) == 2

        again = await client.get("/api/branches", params={"search": "all"}, headers=admin_headers)
        assert len(again.json()) == 1


class TestListing:
    """Test search and pagination."""

    async def test_search_is_case_insensitive(self, client, admin_headers, branch):
        for index, name in enumerate(("Ana Paula", "Bruno Lima", "Ana Clara")):
            response = await client.post(
                "/api/employees",
                json=employee_payload(branch["id"], name=name, cpf=f"0000000000{index}"),
                headers=admin_headers,
            )
            assert response.status_code == 201

        response = await client.get("/api/employees", params={"search": "ana"}, headers=admin_headers)

        assert sorted(e["name"] for e in response.json()) == ["Ana Clara", "Ana Paula"]

    async def test_search_wildcards_match_literally(self, client, admin_headers, branch):
        await client.post(
            "/api/branches",
            json=branch_payload(fantasyName="Outlet 100%", cnpj="11111111000111"),
            headers=admin_headers,
        )
        await client.post(
            "/api/branches",
            json=branch_payload(fantasyName="Loja_Norte", cnpj="22222222000122"),
            headers=admin_headers,
        )

        percent = await client.get("/api/branches", params={"search": "%"}, headers=admin_headers)
        underscore = await client.get("/api/branches", params={"search": "_"}, headers=admin_headers)

        assert [b["fantasyName"] for b in percent.json()] == ["Outlet 100%"]
        assert [b["fantasyName"] for b in underscore.json()] == ["Loja_Norte"]

    async def test_limit_and_offset(self, client, admin_headers, branch):
        for index in range(5):
            await client.post(
                "/api/employees",
                json=employee_payload(branch["id"], name=f"Pessoa {index}", cpf=f"1000000000{index}"),
                headers=admin_headers,
            )

        first = await client.get("/api/employees", params={"limit": 2}, headers=admin_headers)
        rest = await client.get(
            "/api/employees", params={"limit": 10, "offset": 2}, headers=admin_headers
        )

        assert len(first.json()) == 2
        assert len(rest.json()) == 3
        assert not {e["id"] for e in first.json()} & {e["id"] for e in rest.json()}

    async def test_limit_is_capped(self, client, admin_headers, employee):
        response = await client.get("/api/employees", params={"limit": 5000}, headers=admin_headers)
        assert response.status_code == 200
        assert len(response.json()) == 1


class TestJobPositionEndpoints:
    async def test_crud(self, client, admin_headers):
        created = await client.post(
            "/api/job-positions",
            json={"name": "Caixa", "baseSalary": "2100.00"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        position = created.json()
        assert Decimal(position["baseSalary"]) == Decimal("2100.00")

        updated = await client.put(
            f"/api/job-positions/{position['id']}",
            json={"description": "Operador de caixa"},
            headers=admin_headers,
        )
        assert updated.json()["description"] == "Operador de caixa"

        deleted = await client.delete(f"/api/job-positions/{position['id']}", headers=admin_headers)
        assert deleted.status_code == 204

    async def test_deleting_position_keeps_employee(self, client, admin_headers, branch):
        position = (
            await client.post("/api/job-positions", json={"name": "Gerente"}, headers=admin_headers)
        ).json()
        employee = (
            await client.post(
                "/api/employees",
                json=employee_payload(branch["id"], positionId=position["id"]),
                headers=admin_headers,
            )
        ).json()

        await client.delete(f"/api/job-positions/{position['id']}", headers=admin_headers)

        response = await client.get(f"/api/employees/{employee['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["positionId"] is None


class TestEmployeeEndpoints:
    """Test employee CRUD, validation, cascades and stats."""

    async def test_defaults(self, employee):
        assert Decimal(employee["advancePercentage"]) == Decimal("40.00")
        assert employee["status"] == "ativo"
        assert Decimal(employee["baseSalary"]) == Decimal("5000.00")

    async def test_negative_salary_is_rejected(self, client, admin_headers, branch):
        response = await client.post(
            "/api/employees",
            json=employee_payload(branch["id"], baseSalary="-1.00"),
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "baseSalary"

    async def test_percentage_over_100_is_rejected(self, client, admin_headers, branch):
        response = await client.post(
            "/api/employees",
            json=employee_payload(branch["id"], advancePercentage="100.01"),
            headers=admin_headers,
        )
        assert response.status_code == 400

    async def test_unknown_status_is_rejected(self, client, admin_headers, employee):
        response = await client.put(
            f"/api/employees/{employee['id']}",
            json={"status": "ferias"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    async def test_unknown_branch_is_not_found(self, client, admin_headers):
        response = await client.post(
            "/api/employees", json=employee_payload("no-such-branch"), headers=admin_headers
        )
        assert response.status_code == 404
        assert response.json() == {"detail": "Branch 'no-such-branch' not found", "code": "NOT_FOUND"}

    async def test_unknown_position_is_not_found(self, client, admin_headers, branch, employee):
        created = await client.post(
            "/api/employees",
            json=employee_payload(branch["id"], cpf="30000000001", positionId="no-such-position"),
            headers=admin_headers,
        )
        assert created.status_code == 404

        updated = await client.put(
            f"/api/employees/{employee['id']}",
            json={"positionId": "no-such-position"},
            headers=admin_headers,
        )
        assert updated.status_code == 404
        assert updated.json()["code"] == "NOT_FOUND"

    async def test_rename_shows_in_record_lists(self, client, admin_headers, employee):
        await client.post("/api/vacations", json=vacation_payload(employee["id"]), headers=admin_headers)
        listed = await client.get("/api/vacations", headers=admin_headers)
        assert listed.json()[0]["employeeName"] == "Maria Silva"

        await client.put(
            f"/api/employees/{employee['id']}", json={"name": "Maria Souza"}, headers=admin_headers
        )

        listed = await client.get("/api/vacations", headers=admin_headers)
        assert listed.json()[0]["employeeName"] == "Maria Souza"
        own = await client.get(f"/api/employees/{employee['id']}/vacations", headers=admin_headers)
        assert own.json()[0]["employeeName"] == "Maria Souza"

    async def test_duplicate_cpf_is_rejected(self, client, admin_headers, employee):
        response = await client.post(
            "/api/employees",
            json=employee_payload(employee["branchId"], name="Outra Pessoa"),
            headers=admin_headers,
        )
        assert response.status_code == 400

    async def test_update_sets_updated_at(self, client, admin_headers, employee):
        response = await client.put(
            f"/api/employees/{employee['id']}",
            json={"status": "afastado"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "afastado"
        assert response.json()["updatedAt"] >= employee["updatedAt"]

    async def test_stats(self, client, admin_headers, branch):
        statuses = ("ativo", "ativo", "inativo", "afastado")
        for index, status in enumerate(statuses):
            await client.post(
                "/api/employees",
                json=employee_payload(branch["id"], cpf=f"2000000000{index}", status=status),
                headers=admin_headers,
            )

        response = await client.get("/api/employees/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"total": 4, "active": 2, "inactive": 1, "onLeave": 1}

    async def test_stats_refresh_after_write(self, client, admin_headers, branch):
        assert (await client.get("/api/employees/stats", headers=admin_headers)).json()["total"] == 0
        await client.post("/api/employees", json=employee_payload(branch["id"]), headers=admin_headers)
        assert (await client.get("/api/employees/stats", headers=admin_headers)).json()["total"] == 1

    async def test_delete_employee_cascades_to_records(self, client, admin_headers, employee):
        employee_id = employee["id"]
        await client.post("/api/vacations", json=vacation_payload(employee_id), headers=admin_headers)
        await client.post(
            "/api/advances",
            json={"employeeId": employee_id, "month": 3, "year": 2024},
            headers=admin_headers,
        )
        await client.post("/api/payroll", json=payroll_payload(employee_id), headers=admin_headers)
        await client.post(
            "/api/terminations",
            json={"employeeId": employee_id, "terminationDate": "2024-05-31", "reason": "demissao"},
            headers=admin_headers,
        )
        # prime the list caches
        for path in ("vacations", "advances", "payroll", "terminations"):
            assert len((await client.get(f"/api/{path}", headers=admin_headers)).json()) == 1

        response = await client.delete(f"/api/employees/{employee_id}", headers=admin_headers)

        assert response.status_code == 204
        for path in ("vacations", "advances", "payroll", "terminations"):
            assert (await client.get(f"/api/{path}", headers=admin_headers)).json() == []

    async def test_delete_branch_cascades_to_employees(self, client, admin_headers, branch, employee):
        await client.post("/api/vacations", json=vacation_payload(employee["id"]), headers=admin_headers)
        assert len((await client.get("/api/employees", headers=admin_headers)).json()) == 1

        await client.delete(f"/api/branches/{branch['id']}", headers=admin_headers)

        assert (await client.get("/api/employees", headers=admin_headers)).json() == []
        assert (await client.get("/api/vacations", headers=admin_headers)).json() == []
        missing = await client.get(f"/api/employees/{employee['id']}", headers=admin_headers)
        assert missing.status_code == 404
