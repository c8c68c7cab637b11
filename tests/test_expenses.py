# tests/test_expenses.py
import pytest

BASE = "/api/admin/expenses"


@pytest.fixture
def category(client, admin_headers) -> dict:
    resp = client.post(
        f"{BASE}/categories",
        headers=admin_headers,
        json={"name": "Packaging", "description": "Boxes and pouches"},
    )
    assert resp.status_code == 201
    return resp.json()["data"]


def _expense(category_id: str, **overrides) -> dict:
    body = {
        "title": "Gift boxes",
        "amount": 450.5,
        "category_id": category_id,
        "expense_date": "2026-03-01T10:00:00",
        "tags": ["boxes", " bulk "],
    }
    body.update(overrides)
    return body


def test_expenses_require_token(client):
    assert client.get(BASE).status_code == 401


def test_category_names_are_unique(client, admin_headers, category):
    resp = client.post(f"{BASE}/categories", headers=admin_headers, json={"name": "packaging"})

    assert resp.status_code == 409
    assert resp.json()["code"] == "DUPLICATE_RESOURCE"


def test_list_categories(client, admin_headers, category):
    data = client.get(f"{BASE}/categories", headers=admin_headers).json()["data"]

    assert [c["name"] for c in data] == ["Packaging"]


def test_create_expense_records_author(client, admin, admin_headers, category):
    resp = client.post(BASE, headers=admin_headers, json=_expense(category["id"]))

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["added_by"] == str(admin.id)
    assert data["amount"] == 450.5
    assert data["tags"] == ["boxes", "bulk"]


def test_expense_needs_existing_category(client, admin_headers):
    resp = client.post(
        BASE,
        headers=admin_headers,
        json=_expense("00000000-0000-0000-0000-000000000000"),
    )

    assert resp.status_code == 404


def test_amount_must_be_positive(client, admin_headers, category):
    resp = client.post(BASE, headers=admin_headers, json=_expense(category["id"], amount=0))

    assert resp.status_code == 400


def test_list_filters_by_date(client, admin_headers, category):
    client.post(BASE, headers=admin_headers, json=_expense(category["id"]))
    client.post(
        BASE,
        headers=admin_headers,
        json=_expense(category["id"], title="Courier", expense_date="2026-04-15T09:00:00"),
    )

    april = client.get(
        BASE, headers=admin_headers, params={"date_from": "2026-04-01T00:00:00"}
    ).json()["data"]
    everything = client.get(BASE, headers=admin_headers).json()["data"]

    assert [e["title"] for e in april["expenses"]] == ["Courier"]
    assert everything["pagination"]["total"] == 2
    # newest expense first
    assert [e["title"] for e in everything["expenses"]] == ["Courier", "Gift boxes"]


def test_update_and_delete_expense(client, admin_headers, category):
    expense = client.post(BASE, headers=admin_headers, json=_expense(category["id"])).json()["data"]

    updated = client.patch(
        f"{BASE}/{expense['id']}",
        headers=admin_headers,
        json={"amount": 500, "receipt": "https://img.example.com/receipt.jpg"},
    ).json()["data"]
    deleted = client.delete(f"{BASE}/{expense['id']}", headers=admin_headers)

    assert updated["amount"] == 500.0
    assert updated["receipt"] == "https://img.example.com/receipt.jpg"
    assert deleted.status_code == 200
    assert client.get(BASE, headers=admin_headers).json()["data"]["pagination"]["total"] == 0


def test_summary_totals_by_category(client, admin_headers, category):
    shipping = client.post(
        f"{BASE}/categories", headers=admin_headers, json={"name": "Shipping"}
    ).json()["data"]
    client.post(BASE, headers=admin_headers, json=_expense(category["id"], amount=100))
    client.post(BASE, headers=admin_headers, json=_expense(category["id"], amount=50.25))
    client.post(BASE, headers=admin_headers, json=_expense(shipping["id"], amount=80))

    summary = client.get(f"{BASE}/summary", headers=admin_headers).json()["data"]

    assert summary["total"] == 230.25
    assert summary["count"] == 3
    assert [(c["category_name"], c["total"], c["count"]) for c in summary["by_category"]] == [
        ("Packaging", 150.25, 2),
        ("Shipping", 80.0, 1),
    ]


def test_expense_dates_with_offsets_are_stored_as_utc(client, admin_headers, category):
    # 02:00 in India is still 31 March in UTC
    client.post(
        BASE,
        headers=admin_headers,
        json=_expense(category["id"], title="Late courier", expense_date="2026-04-01T02:00:00+05:30"),
    )

    april = client.get(
        BASE, headers=admin_headers, params={"date_from": "2026-04-01T00:00:00"}
    ).json()["data"]
    march = client.get(
        BASE, headers=admin_headers, params={"date_to": "2026-03-31T23:59:59"}
    ).json()["data"]

    assert april["pagination"]["total"] == 0
    assert [e["title"] for e in march["expenses"]] == ["Late courier"]


def test_update_expense_with_naive_date(client, admin_headers, category):
    expense = client.post(BASE, headers=admin_headers, json=_expense(category["id"])).json()["data"]

    resp = client.patch(
        f"{BASE}/{expense['id']}",
        headers=admin_headers,
        json={"expense_date": "2026-05-10T08:00:00"},
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["expense_date"].startswith("2026-05-10T08:00:00")


def test_get_expense_with_category_and_author(client, admin_headers, category):
    expense = client.post(BASE, headers=admin_headers, json=_expense(category["id"])).json()["data"]

    resp = client.get(f"{BASE}/{expense['id']}", headers=admin_headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["title"] == "Gift boxes"
    assert data["category_name"] == "Packaging"
    assert data["added_by_name"] == "Shop Admin"


def test_get_unknown_expense_is_404(client, admin_headers):
    resp = client.get(f"{BASE}/00000000-0000-0000-0000-000000000000", headers=admin_headers)

    assert resp.status_code == 404
