def test_create_user_then_return_existing(client):
    first = client.post(
        "/api/users",
        json={"email": " Ada@Example.com ", "name": "Ada", "country": "NG"},
    )

    assert first.status_code == 201
    created = first.json()
    assert created["id"] == 1
    assert created["email"] == "ada@example.com"
    assert created["country"] == "NG"
    assert "createdAt" in created

    second = client.post("/api/users", json={"email": "ada@example.com", "name": "Other"})

    assert second.status_code == 200
    assert second.json()["id"] == 1
    assert second.json()["name"] == "Ada"


def test_create_user_requires_email(client):
    response = client.post("/api/users", json={"name": "Nobody"})

    assert response.status_code == 400
    assert response.json() == {"error": "Email is required"}


def test_get_user(client):
    client.post("/api/users", json={"email": "ben@example.com"})

    found = client.get("/api/users/BEN@example.com")
    missing = client.get("/api/users/nobody@example.com")

    assert found.status_code == 200
    assert found.json()["email"] == "ben@example.com"
    assert missing.status_code == 404
    assert missing.json() == {"error": "User not found"}


def test_update_user_country(client):
    client.post("/api/users", json={"email": "chi@example.com"})

    response = client.patch("/api/users/chi@example.com", json={"country": "GH", "name": "Chi"})

    assert response.status_code == 200
    assert response.json()["country"] == "GH"
    assert response.json()["name"] == "Chi"


def test_update_user_requires_country(client):
    client.post("/api/users", json={"email": "chi@example.com"})

    response = client.patch("/api/users/chi@example.com", json={"name": "Chi"})

    assert response.status_code == 400
    assert response.json() == {"error": "Country is required"}


def test_update_unknown_user_is_404(client):
    response = client.patch("/api/users/ghost@example.com", json={"country": "GB"})

    assert response.status_code == 404
