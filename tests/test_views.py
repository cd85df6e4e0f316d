from .conftest import product_data

def test_home_redirects_to_products(client):
    response = client.get("/", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/products"

def test_products_page_lists_and_paginates(client):
    for index in range(3):
        client.post("/api/products", json=product_data(title=f"Lamp {index}", price=index + 1))

    response = client.get("/products", params={"limit": 2, "sort": "asc"})

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Lamp 0" in response.text
    assert "Lamp 2" not in response.text
    assert "/products?limit=2&amp;sort=asc&amp;page=2" in response.text

def test_products_page_with_bad_sort(client):
    response = client.get("/products", params={"sort": "sideways"})

    assert response.status_code == 400
    assert "Invalid listing options" in response.text

def test_product_detail_page(client):
    product = client.post("/api/products", json=product_data(title="Desk <oak>")).json()["data"]

    response = client.get(f"/products/{product['id']}")

    assert response.status_code == 200
    assert "Desk &lt;oak&gt;" in response.text

def test_missing_product_page_is_404(client):
    assert client.get("/products/999").status_code == 404
    assert client.get("/products/nope").status_code == 404

def test_cart_page_shows_subtotals_and_dangling_lines(client):
    kept = client.post("/api/products", json=product_data(title="Chair", price=20)).json()["data"]
    gone = client.post("/api/products", json=product_data(title="Stool", price=5)).json()["data"]
    cart = client.post("/api/carts").json()["data"]
    client.post(f"/api/carts/{cart['id']}/products/{kept['id']}", json={"quantity": 2})
    client.post(f"/api/carts/{cart['id']}/products/{gone['id']}")
    client.delete(f"/api/products/{gone['id']}")

    response = client.get(f"/carts/{cart['id']}")

    assert response.status_code == 200
    assert "Chair" in response.text
    assert "$40.00" in response.text
    assert "Product not found" in response.text

def test_missing_cart_page_is_404(client):
    response = client.get("/carts/999")

    assert response.status_code == 404
    assert "Cart not found" in response.text

def test_realtime_page(client):
    client.post("/api/products", json=product_data(title="Live lamp"))

    response = client.get("/realtimeproducts")

    assert response.status_code == 200
    assert "Live lamp" in response.text
    assert "/static/js/realtime.js" in response.text
    assert client.get("/static/js/realtime.js").status_code == 200
