"""HTTP tests for /tags and /genres."""

import pytest

from tests.test_api.conftest import create_genre, create_tag, create_user, user_headers


@pytest.mark.parametrize("prefix", ["/tags", "/genres"])
class TestLabelEndpoints:
    def test_create_and_get(self, client, prefix):
        user = create_user(client)
        response = client.post(
            prefix, json={"name": "signed", "color": "#123456"}, headers=user_headers(user["id"])
        )
        assert response.status_code == 201
        created = response.json()
        assert created["user_id"] == user["id"]

        fetched = client.get(f"{prefix}/{created['id']}").json()
        assert fetched == created

    def test_create_blank_name_is_400(self, client, prefix):
        user = create_user(client)
        response = client.post(prefix, json={"name": " ", "color": "#fff"}, headers=user_headers(user["id"]))
        assert response.status_code == 400

    def test_create_requires_header(self, client, prefix):
        assert client.post(prefix, json={"name": "x", "color": "#fff"}).status_code == 400

    def test_list_ordered_by_name_and_filtered(self, client, prefix):
        user = create_user(client)
        headers = user_headers(user["id"])
        client.post(prefix, json={"name": "zebra", "color": "#fff"}, headers=headers)
        client.post(prefix, json={"name": "apple", "color": "#fff"}, headers=headers)

        assert [label["name"] for label in client.get(prefix).json()] == ["apple", "zebra"]
        assert [label["name"] for label in client.get(prefix, params={"name": "zeb"}).json()] == ["zebra"]

    def test_partial_update(self, client, prefix):
        user = create_user(client)
        headers = user_headers(user["id"])
        created = client.post(prefix, json={"name": "old", "color": "#111"}, headers=headers).json()
        response = client.put(f"{prefix}/{created['id']}", json={"name": "new"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["name"] == "new"
        assert response.json()["color"] == "#111"

    def test_update_missing_is_404(self, client, prefix):
        user = create_user(client)
        response = client.put(f"{prefix}/99999", json={"name": "x"}, headers=user_headers(user["id"]))
        assert response.status_code == 404

    def test_delete(self, client, prefix):
        user = create_user(client)
        headers = user_headers(user["id"])
        created = client.post(prefix, json={"name": "gone", "color": "#fff"}, headers=headers).json()
        assert client.delete(f"{prefix}/{created['id']}", headers=headers).status_code == 204
        assert client.get(f"{prefix}/{created['id']}").status_code == 404
        assert client.delete(f"{prefix}/{created['id']}", headers=headers).status_code == 404


def test_deleting_tag_detaches_it_from_books(client):
    from tests.test_api.conftest import create_book

    user = create_user(client)
    tag = create_tag(client, user["id"])
    genre = create_genre(client, user["id"])
    book = create_book(client, user["id"], tags=[tag["id"]], genres=[genre["id"]])

    client.delete(f"/tags/{tag['id']}", headers=user_headers(user["id"]))

    body = client.get(f"/books/{book['id']}").json()
    assert body["tags"] == []
    assert [g["id"] for g in body["genres"]] == [genre["id"]]
