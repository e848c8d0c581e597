def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_session_flow_over_http(client, make_pc, make_client, make_product):
    pc = make_pc("PC01")
    other_pc = make_pc("PC02")
    customer = make_client("Carlos", "Charly")
    product = make_product("Hora", "5.00")

    r = client.get("/pcs/")
    assert r.status_code == 200
    assert [p["number"] for p in r.json()] == ["PC01", "PC02"]

    # Abrir sesion
    r = client.post(f"/pcs/{pc['id']}/session", json={"client_id": customer["id"]})
    assert r.status_code == 201
    session_id = r.json()["id"]

    # Segunda apertura sobre la misma PC
    r = client.post(f"/pcs/{pc['id']}/session", json={"client_id": customer["id"]})
    assert r.status_code == 409
    assert "detail" in r.json()

    r = client.get(f"/pcs/{pc['id']}/session")
    assert r.json()["id"] == session_id

    # Consumos
    r = client.post(f"/sessions/{session_id}/consumptions", json={"product_id": product["id"], "quantity": 2})
    assert r.status_code == 201
    line_id = r.json()["id"]
    r = client.patch(f"/consumptions/{line_id}/quantity", json={"quantity": 0})
    assert r.status_code == 422
    r = client.patch(f"/consumptions/{line_id}/paid", json={"paid": True})
    assert r.json()["paid"] is True

    r = client.get(f"/sessions/{session_id}/summary")
    assert r.json()["total_amount"] == 10.0
    assert r.json()["advance_payment"] == 10.0

    r = client.post(f"/sessions/{session_id}/consumptions", json={"product_id": product["id"]})
    assert r.status_code == 201

    # Mover y cobrar
    r = client.post(f"/sessions/{session_id}/move", json={"target_pc_id": other_pc["id"]})
    assert r.status_code == 200
    assert r.json()["pc_number"] == "PC02"

    r = client.post(f"/sessions/{session_id}/close", json={"cash": "2.00"}, headers={"X-Operator": "caja1"})
    assert r.status_code == 200
    body = r.json()
    assert body["session"]["status"] == "inactive"
    assert body["session"]["closed_by"] == "caja1"
    assert body["session"]["debt"] == 3.0
    assert body["debit"]["status"] is False
    debit_id = body["debit"]["id"]

    statuses = {p["number"]: p["status"] for p in client.get("/pcs/").json()}
    assert statuses == {"PC01": "available", "PC02": "available"}

    # Abonos
    r = client.post(f"/debits/{debit_id}/payments", json={"amount": "1.00", "payment_method": "yape"}, headers={"Idempotency-Key": "k1"})
    assert r.status_code == 201
    r = client.post(f"/debits/{debit_id}/payments", json={"amount": "1.00", "payment_method": "yape"}, headers={"Idempotency-Key": "k1"})
    assert r.json()["replayed"] is True
    r = client.post(f"/debits/{debit_id}/payments", json={"amount": "5.00"})
    assert r.status_code == 422

    r = client.post(f"/debits/{debit_id}/payments", json={"amount": "2.00"})
    assert r.status_code == 201
    assert r.json()["debit"]["status"] is True

    r = client.get(f"/debits/{debit_id}")
    assert r.json()["amount"] == 0.0
    r = client.get(f"/debits/{debit_id}/details")
    assert len(r.json()) == 2


def test_unknown_ids_return_404(client):
    assert client.get("/sessions/999").status_code == 404
    assert client.get("/debits/999").status_code == 404
    assert client.patch("/consumptions/999/paid", json={"paid": True}).status_code == 404


def test_pc_maintenance(client, make_pc):
    pc = make_pc()
    r = client.patch(f"/pcs/{pc['id']}/status", json={"status": "maintenance"})
    assert r.status_code == 200
    assert r.json()["status"] == "maintenance"
    r = client.patch(f"/pcs/{pc['id']}/status", json={"status": "occupied"})
    assert r.status_code == 422


def test_catalog_and_accounting(client):
    r = client.post("/clients/", json={"name": "  Rosa ", "nickname": "Rosi"})
    assert r.status_code == 201
    assert r.json()["name"] == "Rosa"
    assert r.json()["display_name"] == "Rosi"

    r = client.post("/products/", json={"name": "Agua", "price": "1.50"})
    assert r.status_code == 201
    assert client.get("/products/").json()[0]["price"] == 1.5

    r = client.post("/accounting/movements", json={"type": "egreso", "amount": "4.00", "detail": "Papel"})
    assert r.status_code == 201
    r = client.post("/accounting/movements", json={"type": "otro", "amount": "4.00", "detail": "x"})
    assert r.status_code == 422
    r = client.get("/accounting/movements", params={"type": "egreso"})
    assert len(r.json()) == 1


def test_report_endpoints(client):
    r = client.get("/reports/cash", params={"start_date": "2024-05-03", "end_date": "2024-05-01"})
    assert r.status_code == 422

    r = client.get("/reports/cash", params={"start_date": "2024-05-01"})
    assert r.status_code == 200
    assert r.json()["total_general"] == 0.0

    r = client.get("/reports/sessions/monthly", params={"year": 2024, "month": 4})
    assert len(r.json()) == 30

    r = client.get("/reports/sessions/export", params={"start_date": "2024-05-01"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/vnd.openxmlformats")
