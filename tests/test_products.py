# tests/test_products.py
ADMIN = "/api/admin/products"
PUBLIC = "/api/products"


def _product(**overrides) -> dict:
    body = {
        "name": "Figaro Chain",
        "description": "18k gold plated",
        "product_type": "chain",
        "price": 1499.0,
        "images": ["https://img.example.com/figaro.jpg"],
    }
    body.update(overrides)
    return body


def _create(client, headers, **overrides):
    return client.post(ADMIN, headers=headers, json=_product(**overrides))


# -------- Admin: create --------


def test_create_assigns_codes_per_type(client, admin_headers):
    first = _create(client, admin_headers).json()["data"]
    second = _create(client, admin_headers, name="Rope Chain").json()["data"]
    bracelet = _create(
        client, admin_headers, name="Charm Bracelet", product_type="bracelet-anklet"
    ).json()["data"]

    assert [first["product_code"], second["product_code"], bracelet["product_code"]] == [
        "CH001",
        "CH002",
        "BR001",
    ]
    assert first["price"] == 1499.0
    assert first["is_active"] is True


def test_create_requires_auth(client):
    resp = client.post(ADMIN, json=_product())

    assert resp.status_code == 401


def test_client_cannot_choose_product_code(client, admin_headers):
    resp = _create(client, admin_headers, product_code="CH777")

    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"


def test_unknown_product_type_rejected(client, admin_headers):
    resp = _create(client, admin_headers, product_type="ring")

    assert resp.status_code == 400


def test_discount_above_price_rejected(client, admin_headers):
    resp = _create(client, admin_headers, price=100, discounted_price=120)

    assert resp.status_code == 400


def test_non_positive_price_rejected(client, admin_headers):
    assert _create(client, admin_headers, price=0).status_code == 400


def test_image_urls_must_be_http(client, admin_headers):
    resp = _create(client, admin_headers, images=["ftp://img.example.com/a.jpg"])

    assert resp.status_code == 400


# -------- Admin: update / delete --------


def test_partial_update(client, admin_headers):
    product = _create(client, admin_headers).json()["data"]

    resp = client.patch(
        f"{ADMIN}/{product['id']}",
        headers=admin_headers,
        json={"name": "Figaro Chain 20in", "discounted_price": 999},
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "Figaro Chain 20in"
    assert data["discounted_price"] == 999.0
    assert data["product_code"] == product["product_code"]
    assert data["price"] == 1499.0


def test_price_below_existing_discount_rejected(client, admin_headers):
    product = _create(client, admin_headers, price=100, discounted_price=80).json()["data"]

    resp = client.patch(f"{ADMIN}/{product['id']}", headers=admin_headers, json={"price": 70})

    assert resp.status_code == 400
    assert resp.json()["details"][0]["field"] == "discounted_price"


def test_null_discount_clears_it(client, admin_headers):
    product = _create(client, admin_headers, price=100, discounted_price=80).json()["data"]

    resp = client.patch(
        f"{ADMIN}/{product['id']}", headers=admin_headers, json={"discounted_price": None}
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["discounted_price"] is None


def test_product_type_is_immutable(client, admin_headers):
    product = _create(client, admin_headers).json()["data"]

    resp = client.patch(
        f"{ADMIN}/{product['id']}",
        headers=admin_headers,
        json={"product_type": "bracelet-anklet"},
    )

    assert resp.status_code == 400


def test_delete_product(client, admin_headers):
    product = _create(client, admin_headers).json()["data"]

    assert client.delete(f"{ADMIN}/{product['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"{ADMIN}/{product['id']}", headers=admin_headers).status_code == 404


def test_codes_are_not_reused_after_delete(client, admin_headers):
    product = _create(client, admin_headers).json()["data"]
    client.delete(f"{ADMIN}/{product['id']}", headers=admin_headers)

    again = _create(client, admin_headers).json()["data"]

    assert again["product_code"] == "CH002"


def test_admin_list_filters(client, admin_headers):
    _create(client, admin_headers)
    _create(client, admin_headers, name="Hidden Chain", is_active=False)
    _create(client, admin_headers, name="Anklet", product_type="bracelet-anklet")

    everything = client.get(ADMIN, headers=admin_headers).json()["data"]
    inactive = client.get(ADMIN, headers=admin_headers, params={"is_active": False}).json()["data"]
    bracelets = client.get(
        ADMIN, headers=admin_headers, params={"product_type": "bracelet-anklet"}
    ).json()["data"]
    searched = client.get(ADMIN, headers=admin_headers, params={"search": "hidden"}).json()["data"]

    assert everything["pagination"]["total"] == 3
    assert [p["name"] for p in inactive["products"]] == ["Hidden Chain"]
    assert [p["product_code"] for p in bracelets["products"]] == ["BR001"]
    assert [p["name"] for p in searched["products"]] == ["Hidden Chain"]


# -------- Public --------


def test_public_list_hides_inactive(client, make_product):
    make_product(name="Visible Chain")
    make_product(name="Hidden Chain", is_active=False)

    data = client.get(PUBLIC).json()["data"]

    assert [p["name"] for p in data["products"]] == ["Visible Chain"]
    assert data["pagination"] == {"page": 1, "limit": 20, "total": 1, "total_pages": 1}


def test_public_get_by_id_and_code(client, make_product):
    product = make_product(name="Box Chain", price="250.00")

    by_id = client.get(f"{PUBLIC}/{product.id}")
    by_code = client.get(f"{PUBLIC}/code/{product.product_code.lower()}")

    assert by_id.status_code == 200
    assert by_id.json()["data"]["price"] == 250.0
    assert by_code.json()["data"]["id"] == str(product.id)


def test_public_get_inactive_is_not_found(client, make_product):
    product = make_product(is_active=False)

    resp = client.get(f"{PUBLIC}/{product.id}")

    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_public_pagination(client, make_product):
    for i in range(5):
        make_product(name=f"Chain {i}")

    data = client.get(PUBLIC, params={"page": 2, "limit": 2}).json()["data"]

    assert len(data["products"]) == 2
    assert data["pagination"]["total"] == 5
    assert data["pagination"]["total_pages"] == 3


def test_public_get_by_malformed_code_is_not_found(client, make_product):
    make_product()

    resp = client.get(f"{PUBLIC}/code/RING-1")

    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_error_envelope_is_documented(client):
    schema = client.get("/openapi.json").json()

    assert "ErrorResponse" in schema["components"]["schemas"]
    responses = schema["paths"]["/api/orders"]["post"]["responses"]
    assert responses["429"]["content"]["application/json"]["schema"]["$ref"].endswith(
        "/ErrorResponse"
    )
