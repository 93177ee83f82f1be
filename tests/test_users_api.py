from app.core.config import settings

PREFIX = settings.API_PREFIX


def test_create_and_fetch_user(client, repository):
    response = client.post(f"{PREFIX}/users", json={
        "login": "john_doe",
        "password": "secret123",
        "location": {"lat": 59.93428, "lon": 30.335098},
        "social_net": "telegram",
    })
    assert response.status_code == 201
    user_id = response.json()["user_id"]
    assert user_id in repository.users

    response = client.get(f"{PREFIX}/users/{user_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == user_id
    assert data["login"] == "john_doe"
    assert "password" not in data


def test_create_invalid_user(client):
    response = client.post(f"{PREFIX}/users", json={"login": "ab", "social_net": "myspace"})
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "INVALID_INPUT"
    assert len(data["details"]) == 2


def test_create_malformed_body(client):
    response = client.post(f"{PREFIX}/users", json={"location": {"lat": "north"}})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_create_duplicate(client, stored_user):
    response = client.post(f"{PREFIX}/users", json={"id": stored_user.id, "login": "other_user"})
    assert response.status_code == 409
    assert response.json()["code"] == "ALREADY_EXISTS"


def test_get_missing_user(client):
    response = client.get(f"{PREFIX}/users/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "User not found", "code": "NOT_FOUND", "details": None}


def test_search_users(client, repository, stored_user):
    response = client.get(f"{PREFIX}/users", params={
        "q": "john",
        "social_net": "telegram",
        "lat": "59.9",
        "lon": "30.3",
        "radius": "5km",
        "date_from": "2023-01-01T00:00:00Z",
        "sort_by": "login",
        "page": "2",
        "size": "500",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["page"] == 2
    assert data["users"][0]["id"] == stored_user.id
    assert "password" not in data["users"][0]

    filters = repository.searches[-1]
    assert filters.search == "john"
    assert filters.distance == "5km"
    assert filters.size == 50
    assert filters.date_from.year == 2023


def test_search_empty_params_are_absent(client, repository):
    response = client.get(f"{PREFIX}/users", params={
        "q": "",
        "social_net": "",
        "date_to": "",
        "lat": "",
        "lon": "",
        "page": "",
        "size": "",
    })
    assert response.status_code == 200
    assert response.json() == {"users": [], "total": 0, "page": 1}

    filters = repository.searches[-1]
    assert filters.search is None
    assert filters.social_net is None
    assert filters.date_to is None
    assert filters.lat is None
    assert filters.lon is None
    assert filters.page is None
    assert filters.size is None


def test_search_bad_date(client):
    response = client.get(f"{PREFIX}/users", params={"date_from": "yesterday"})
    assert response.status_code == 400


def test_search_bad_sort_order(client):
    response = client.get(f"{PREFIX}/users", params={"sort_by": "login", "sort_order": "sideways"})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_replace_user(client, stored_user):
    response = client.put(f"{PREFIX}/users/{stored_user.id}", json={"login": "renamed_user"})
    assert response.status_code == 200
    data = response.json()
    assert data["login"] == "renamed_user"
    assert data["reg_date"].startswith("2023-01-15T12:34:56")


def test_patch_rejects_registration_date(client, stored_user):
    response = client.patch(
        f"{PREFIX}/users/{stored_user.id}",
        json={"reg_date": "2020-01-01T00:00:00Z"},
    )
    assert response.status_code == 400


def test_patch_user(client, stored_user):
    response = client.patch(f"{PREFIX}/users/{stored_user.id}", json={"comment": "VIP"})
    assert response.status_code == 200
    assert response.json()["comment"] == "VIP"
    assert response.json()["login"] == stored_user.login


def test_delete_user(client, repository, stored_user):
    response = client.delete(f"{PREFIX}/users/{stored_user.id}")
    assert response.status_code == 204
    assert response.content == b""
    assert stored_user.id not in repository.users

    response = client.delete(f"{PREFIX}/users/{stored_user.id}")
    assert response.status_code == 404


def test_user_map(client, tile_provider, stored_user):
    response = client.get(f"{PREFIX}/users/{stored_user.id}/map", params={"zoom": 13})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == tile_provider.payload

    client.get(f"{PREFIX}/users/{stored_user.id}/map", params={"zoom": 13})
    assert len(tile_provider.calls) == 1


def test_user_map_bad_zoom(client, stored_user):
    response = client.get(f"{PREFIX}/users/{stored_user.id}/map", params={"zoom": 25})
    assert response.status_code == 400


def test_search_malformed_numbers(client):
    for params in ({"lat": "north"}, {"page": "1.5"}, {"size": "ten"}):
        response = client.get(f"{PREFIX}/users", params=params)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"
