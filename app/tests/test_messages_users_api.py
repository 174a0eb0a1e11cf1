from app.services.cache import cache_service


async def test_list_messages_newest_first(client):
    response = await client.get("/api/v1/messages")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [m["body"] for m in body["messages"]] == [f"message {i}" for i in range(11, 1, -1)]

    author = body["messages"][0]["author"]
    assert author["username"] == "admin"
    assert author["admin"] is True
    assert set(author) == {"id", "username", "avatar", "admin"}


async def test_list_messages_skip(client):
    response = await client.get("/api/v1/messages", params={"skip": 10})

    assert [m["body"] for m in response.json()["messages"]] == ["message 1", "message 0"]


async def test_list_messages_bad_skip(client):
    for skip in ("-1", "abc"):
        response = await client.get("/api/v1/messages", params={"skip": skip})
        assert response.status_code == 400
        assert response.json()["success"] is False


async def test_list_messages_skip_out_of_range(client):
    response = await client.get("/api/v1/messages", params={"skip": "99999999999999999999"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "skip is out of range"}


async def test_get_user_by_name(client, catalog):
    response = await client.get("/api/v1/users", params={"name": "admin"})

    assert response.status_code == 200
    assert response.json() == {
        "user": "admin",
        "email": "admin@rapphim.local",
        "id": catalog["users"]["admin"],
    }


async def test_get_unknown_user(client):
    response = await client.get("/api/v1/users", params={"name": "ghost"})

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User not found"}


async def test_list_categories_sorted_by_name(client):
    response = await client.get("/api/v1/categories")

    assert response.status_code == 200
    assert [c["slug"] for c in response.json()["data"]] == ["drama", "comedy", "action"]


async def test_create_category(client):
    response = await client.post(
        "/api/v1/categories", json={"name": "Kinh dị", "slug": "horror"}
    )

    assert response.status_code == 201
    assert response.json()["data"]["slug"] == "horror"

    duplicate = await client.post("/api/v1/categories", json={"name": "Khác", "slug": "horror"})
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Category slug already exists"

    duplicate = await client.post("/api/v1/categories", json={"name": "Hài", "slug": "funny"})
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Category name already exists"


async def test_create_category_drops_cached_listings(client, monkeypatch):
    calls = []

    async def invalidate_movie_lists():
        calls.append(True)
        return 0

    monkeypatch.setattr(cache_service, "invalidate_movie_lists", invalidate_movie_lists)

    response = await client.post("/api/v1/categories", json={"name": "Tài liệu", "slug": "documentary"})

    assert response.status_code == 201
    assert calls == [True]


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_unknown_route(client):
    response = await client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert response.json()["success"] is False
