def create(client, payload, **overrides):
    response = client.post("/api/templates", json={**payload, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def connect_gmail(client):
    client.patch("/api/settings", json={
        "email_mode": "gmail-draft",
        "gmail_client_id": "client-id",
        "gmail_client_secret": "client-secret",
    })
    state = client.post("/api/gmail/auth-url").json()["state"]
    response = client.get("/api/gmail/callback", params={"code": "auth-code", "state": state})
    assert response.status_code == 200


# ==================== TERMS ====================

def test_current_term_defaults_to_today(client):
    body = client.get("/api/terms/current").json()

    assert body["in_term"] is True
    assert body["on"] == "2025-09-15"
    assert body["label"] == "1st half autumn term (8 weeks)"
    assert body["term"]["start_date"] == "2025-09-01"
    assert body["weeks_count"] == 8


def test_outside_term_time(client):
    body = client.get("/api/terms/current", params={"on": "2025-12-31"}).json()

    assert body["in_term"] is False
    assert body["label"] == "Outside term time"
    assert body["term"] is None


def test_academic_year(client):
    body = client.get("/api/terms/academic-year/2025").json()

    assert body["start_year"] == 2025
    assert [(p["half"], p["season"]) for p in body["periods"]] == [
        ("1st", "autumn"), ("2nd", "autumn"),
        ("1st", "spring"), ("2nd", "spring"),
        ("1st", "summer"), ("2nd", "summer"),
    ]
    assert body["periods"][5]["end_date"] == "2026-07-18"


# ==================== TEMPLATES ====================

def test_template_crud(client, template_payload):
    created = create(client, template_payload)
    template_id = created["id"]

    assert client.get("/api/templates").json()[0]["id"] == template_id
    assert client.get("/api/templates/current").json()["template_id"] == template_id

    updated = client.put(f"/api/templates/{template_id}", json={"students": "Emma and Leo Doe"}).json()
    assert updated["students"] == "Emma and Leo Doe"
    assert updated["recipient"] == "John Doe"

    assert client.delete(f"/api/templates/{template_id}").status_code == 204
    assert client.get(f"/api/templates/{template_id}").status_code == 404
    assert client.get("/api/templates/current").json() == {"template_id": None, "template": None}


def test_template_validation(client, template_payload):
    assert client.post("/api/templates", json={**template_payload, "cost": "-1"}).status_code == 422
    assert client.post("/api/templates", json={**template_payload, "day": "Funday"}).status_code == 422
    assert client.post("/api/templates", json={**template_payload, "recipient": "   "}).status_code == 422


def test_select_template(client, template_payload):
    first = create(client, template_payload)
    create(client, template_payload, recipient="Jane Roe")

    response = client.put("/api/templates/current", json={"template_id": first["id"]})
    assert response.json()["template"]["recipient"] == "John Doe"

    assert client.put("/api/templates/current", json={"template_id": "missing"}).status_code == 404
    assert client.put("/api/templates/current", json={"template_id": None}).json()["template_id"] is None


def test_unknown_template_is_404(client):
    assert client.put("/api/templates/missing", json={"recipient": "x"}).status_code == 404
    assert client.delete("/api/templates/missing").status_code == 404


# ==================== SETTINGS ====================

def test_settings_defaults_and_patch(client):
    assert client.get("/api/settings").json()["theme"] == "dark"

    body = client.patch("/api/settings", json={"theme": "light", "show_notifications": False}).json()

    assert body["theme"] == "light"
    assert body["show_notifications"] is False
    assert body["email_mode"] == "clipboard"


def test_settings_never_echo_client_secret(client):
    patched = client.patch("/api/settings", json={"gmail_client_id": "client-id", "gmail_client_secret": "s3cret"}).json()
    fetched = client.get("/api/settings").json()

    for body in (patched, fetched):
        assert "gmail_client_secret" not in body
        assert "s3cret" not in str(body)
        assert body["has_gmail_client_secret"] is True
        assert body["gmail_client_id"] == "client-id"


def test_settings_reject_unknown_mode(client):
    assert client.patch("/api/settings", json={"email_mode": "fax"}).status_code == 422


def test_default_body_template(client):
    body = client.get("/api/settings/email-body-template/default").json()

    assert body["template"].startswith("Hi {{recipient}},")
    assert body["template"].endswith("Kind regards\nRobert")
    assert "{{isAre}}" in body["placeholders"]
    assert len(body["placeholders"]) == 10


# ==================== INVOICES ====================

def test_current_invoice(client, template_payload):
    create(client, template_payload)

    body = client.get("/api/invoices/current").json()

    assert body["subject"] == "Invoice for Piano Lessons 1st half autumn term 2025"
    assert "8 x £25.00 = £200.00" in body["body"]
    assert float(body["total_cost"]) == 200
    assert body["lesson_count"] == 8


def test_custom_body_template_applies(client, template_payload):
    create(client, template_payload)
    client.patch("/api/settings", json={"custom_email_body_template": "{{recipient}} owes £{{totalCost}}"})

    assert client.get("/api/invoices/current").json()["body"] == "John Doe owes £200.00"


def test_invoices_for_all_templates(client, template_payload):
    create(client, template_payload)
    create(client, template_payload, recipient="Jane Roe", day="Friday", cost="30")

    body = client.get("/api/invoices").json()

    assert {invoice["recipient"] for invoice in body} == {"John Doe", "Jane Roe"}


def test_invoice_for_template(client, template_payload):
    created = create(client, template_payload)

    body = client.get(f"/api/invoices/{created['id']}", params={"on": "2025-11-10"}).json()

    assert body["term_info"] == "2nd half autumn term 2025"
    assert body["lesson_count"] == 7
    assert client.get("/api/invoices/missing").status_code == 404


def test_invoice_outside_term_is_conflict(client, template_payload):
    create(client, template_payload)

    response = client.get("/api/invoices/current", params={"on": "2025-12-31"})

    assert response.status_code == 409
    assert response.json()["detail"] == "Outside term time"


def test_current_invoice_without_selection(client):
    assert client.get("/api/invoices/current").status_code == 404


def test_dispatch_clipboard_returns_text(client, template_payload):
    create(client, template_payload)

    body = client.post("/api/invoices/current/dispatch").json()

    assert body["mode"] == "clipboard"
    assert body["subject"].startswith("Invoice for Piano Lessons")
    assert body["draft_id"] is None


def test_dispatch_gmail_creates_draft(client, template_payload, fake_google):
    create(client, template_payload)
    connect_gmail(client)

    body = client.post("/api/invoices/current/dispatch").json()

    assert body["mode"] == "gmail-draft"
    assert body["draft_id"] == "draft-1"
    assert client.get("/api/gmail/status").json()["connected"] is True


def test_dispatch_gmail_not_connected(client, template_payload):
    create(client, template_payload)
    client.patch("/api/settings", json={
        "email_mode": "gmail-draft",
        "gmail_client_id": "client-id",
        "gmail_client_secret": "client-secret",
    })

    assert client.post("/api/invoices/current/dispatch").status_code == 401


def test_dispatch_gmail_upstream_error(client, template_payload, fake_google):
    create(client, template_payload)
    connect_gmail(client)
    fake_google.draft_status = 500

    assert client.post("/api/invoices/current/dispatch").status_code == 502


def test_bulk_dispatch_reports_partial_failure(client, template_payload, fake_google):
    create(client, template_payload)
    create(client, template_payload, recipient="Jane Roe", instrument="drum")
    connect_gmail(client)
    fake_google.fail_subjects = {"Drum"}

    body = client.post("/api/invoices/dispatch").json()

    assert body["success"] == 1
    assert body["failed"] == 1
    assert body["errors"] == ["Jane Roe: Gmail API error: draft rejected"]
    assert len(body["invoices"]) == 2


def test_bulk_dispatch_without_templates(client):
    assert client.post("/api/invoices/dispatch").status_code == 404


# ==================== GMAIL ====================

def test_auth_url_requires_credentials(client):
    assert client.post("/api/gmail/auth-url").status_code == 400


def test_callback_with_bad_state(client):
    client.patch("/api/settings", json={"gmail_client_id": "id", "gmail_client_secret": "secret"})
    client.post("/api/gmail/auth-url")

    response = client.get("/api/gmail/callback", params={"code": "c", "state": "wrong"})

    assert response.status_code == 400
    assert "Authorization failed" in response.text


def test_disconnect(client):
    connect_gmail(client)
    assert client.post("/api/gmail/disconnect").status_code == 204

    status = client.get("/api/gmail/status").json()
    assert status["has_token"] is False
    assert status["connected"] is False


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"


def test_current_term_at_end_of_calendar(client):
    body = client.get("/api/terms/current", params={"on": "9999-12-31"}).json()
    assert body["in_term"] is False
