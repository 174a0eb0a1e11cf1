from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.api.deps import get_catalog_service
from app.main import app as fastapi_app
from app.models import Season
from app.services.catalog import CatalogQueryService

MOVIES_URL = "/api/v1/movies"


def slugs(body):
    return [m["slug"] for m in body["data"]]


# ==================== LISTINGS ====================

async def test_list_movies_envelope(client):
    response = await client.get(MOVIES_URL, params={"limit": 3})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["page"] == 1
    assert body["length"] == 3
    assert slugs(body) == ["the-batman", "dune", "mad-max"]
    assert body["nextPage"] == "http://test/api/v1/movies?page=2&limit=3&matchName="
    assert "categories" not in body["data"][0]


async def test_list_movies_populate_and_category_slugs(client):
    response = await client.get(
        MOVIES_URL, params={"categorySlugs": "comedy", "populate": "true"}
    )

    body = response.json()
    assert slugs(body) == ["pinocchio"]
    assert body["data"][0]["categories"][0]["slug"] == "comedy"


async def test_list_movies_category_slugs_comma_separated(client):
    response = await client.get(MOVIES_URL, params={"categorySlugs": "comedy,drama"})
    repeated = await client.get(MOVIES_URL, params=[("categorySlugs", "comedy"), ("categorySlugs", "drama")])

    assert slugs(response.json()) == ["dune", "squid-game", "pinocchio", "a-quiet-place", "interstellar"]
    assert slugs(repeated.json()) == slugs(response.json())


async def test_list_movies_match_name(client):
    response = await client.get(MOVIES_URL, params={"matchName": "BATMAN"})

    body = response.json()
    assert slugs(body) == ["the-batman"]
    assert body["nextPage"].endswith("matchName=BATMAN")


async def test_list_movies_bad_page(client):
    for page in ("0", "-1", "abc"):
        response = await client.get(MOVIES_URL, params={"page": page})
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "page must be a positive integer"}


async def test_list_movies_page_out_of_range(client):
    response = await client.get(MOVIES_URL, params={"page": "99999999999999999999", "limit": 10})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "page and limit are out of range"}


class FailingSession:
    """Session stand-in whose every query fails with `error`"""

    def __init__(self, error):
        self.error = error

    async def execute(self, *args, **kwargs):
        raise self.error


async def test_database_down_is_unavailable(client):
    session = FailingSession(OperationalError("SELECT 1", {}, ConnectionRefusedError()))
    fastapi_app.dependency_overrides[get_catalog_service] = lambda: CatalogQueryService(session)

    response = await client.get(f"{MOVIES_URL}/top")

    assert response.status_code == 503
    assert response.json() == {"success": False, "message": "Database unavailable"}


async def test_unexpected_error_keeps_error_body(client):
    session = FailingSession(RuntimeError("boom"))
    fastapi_app.dependency_overrides[get_catalog_service] = lambda: CatalogQueryService(session)

    response = await client.get(f"{MOVIES_URL}/single-episode")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to fetch movies"}


async def test_top_movies(client):
    response = await client.get(f"{MOVIES_URL}/top", params={"limit": 3})

    body = response.json()
    assert slugs(body) == ["squid-game", "mad-max", "interstellar"]
    assert body["nextPage"] == "http://test/api/v1/movies/top?page=2&limit=3"


async def test_single_episode_movies(client):
    response = await client.get(f"{MOVIES_URL}/single-episode", params={"limit": 2, "page": 2})

    body = response.json()
    assert response.status_code == 200
    assert body["page"] == 2
    assert slugs(body) == ["interstellar"]


async def test_movies_by_category(client):
    response = await client.get(f"{MOVIES_URL}/category/action")

    body = response.json()
    assert slugs(body) == ["the-batman", "dune", "mad-max", "squid-game"]
    assert all("categories" in m for m in body["data"])


async def test_movies_by_unknown_category(client):
    response = await client.get(f"{MOVIES_URL}/category/no-such-category")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Category not found"}


# ==================== DETAIL ====================

async def test_get_movie_counts_a_view(client):
    first = await client.get(f"{MOVIES_URL}/interstellar")
    assert first.status_code == 200
    assert first.json()["data"]["view_count"] == 50
    assert first.json()["isFavorite"] is None

    # the first view is recorded after the response went out
    second = await client.get(f"{MOVIES_URL}/interstellar")
    assert second.json()["data"]["view_count"] == 51


async def test_get_movie_favorite(client, catalog):
    response = await client.get(
        f"{MOVIES_URL}/interstellar", params={"user_id": catalog["users"]["admin"]}
    )
    assert response.json()["isFavorite"] is True

    response = await client.get(
        f"{MOVIES_URL}/pinocchio", params={"user_id": catalog["users"]["admin"]}
    )
    assert response.json()["isFavorite"] is False


async def test_get_movie_not_found(client):
    response = await client.get(f"{MOVIES_URL}/no-such-movie")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Movie not found"}


async def test_get_season(client):
    response = await client.get(f"{MOVIES_URL}/squid-game/seasons/2")

    data = response.json()["data"]
    assert data["movie"]["slug"] == "squid-game"
    assert data["season"]["number"] == 2
    assert [e["number"] for e in data["season"]["episodes"]] == list(range(1, 8))


async def test_get_episode(client):
    response = await client.get(f"{MOVIES_URL}/squid-game/seasons/1/episodes/3")

    data = response.json()["data"]
    assert data["season"]["number"] == 1
    assert data["episode"]["number"] == 3


async def test_get_episode_not_found(client):
    response = await client.get(f"{MOVIES_URL}/squid-game/seasons/1/episodes/10")

    assert response.status_code == 404
    assert response.json()["message"] == "Episode not found"


# ==================== CRUD ====================

async def test_create_movie(client, catalog):
    payload = {
        "title": "Ký Sinh Trùng",
        "english_title": "Parasite",
        "slug": "parasite",
        "release_year": 2019,
        "category_ids": [catalog["categories"]["drama"]],
    }
    response = await client.post(MOVIES_URL, json=payload)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["slug"] == "parasite"
    assert data["view_count"] == 0
    assert data["created_at"] is not None
    assert [c["slug"] for c in data["categories"]] == ["drama"]

    listing = await client.get(MOVIES_URL, params={"limit": 1})
    assert slugs(listing.json()) == ["parasite"]


async def test_create_movie_duplicate_slug(client):
    response = await client.post(MOVIES_URL, json={"title": "Dune", "slug": "dune"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Movie slug already exists"}


async def test_update_movie(client, catalog):
    movie_id = catalog["movies"]["dune"]
    response = await client.put(
        f"{MOVIES_URL}/{movie_id}",
        json={"title": "Xứ Cát: Phần Một", "category_ids": [catalog["categories"]["comedy"]]},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Xứ Cát: Phần Một"
    assert data["english_title"] == "Dune"
    assert [c["slug"] for c in data["categories"]] == ["comedy"]


async def test_update_movie_slug_taken(client, catalog):
    response = await client.put(
        f"{MOVIES_URL}/{catalog['movies']['dune']}", json={"slug": "mad-max"}
    )
    assert response.status_code == 400


async def test_update_unknown_movie(client):
    response = await client.put(f"{MOVIES_URL}/999999", json={"title": "Nope"})
    assert response.status_code == 404


async def test_delete_movie_keeps_seasons(client, db, catalog):
    movie_id = catalog["movies"]["squid-game"]

    response = await client.delete(f"{MOVIES_URL}/{movie_id}")
    assert response.status_code == 200
    assert response.json()["data"]["slug"] == "squid-game"

    response = await client.get(f"{MOVIES_URL}/squid-game")
    assert response.status_code == 404

    seasons = (await db.execute(select(Season).order_by(Season.id))).scalars().all()
    assert len(seasons) == 7
    assert all(s.movie_id != movie_id for s in seasons)


async def test_delete_unknown_movie(client):
    response = await client.delete(f"{MOVIES_URL}/999999")
    assert response.status_code == 404
