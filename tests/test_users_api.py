import pytest

API = "/api/v1"


@pytest.fixture()
def user(make_user):
    return make_user(bio="Writes Rust", avatar_url="https://avatars.example.com/1")


def test_get_me(client, make_experience, user, auth_headers):
    for offset in range(6):
        make_experience(user, title=f"Experience {offset}", created_offset=offset)

    response = client.get(f"{API}/users/me", headers=auth_headers(user))

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == user.id
    assert data["user"]["email"] == user.email
    assert data["stats"]["experience_count"] == 6
    assert data["stats"]["average_rating_given"] == 0
    assert [e["title"] for e in data["recent_experiences"]] == [
        "Experience 5",
        "Experience 4",
        "Experience 3",
        "Experience 2",
        "Experience 1",
    ]


def test_get_public_profile(client, make_user, make_experience, user, auth_headers):
    viewer = make_user()
    make_experience(user, tags=["rust", "cli"], ai_assistant_type="cursor")
    make_experience(
        user, tags=["rust"], ai_assistant_type="claude", description="d" * 300
    )

    response = client.get(f"{API}/users/{user.id}", headers=auth_headers(viewer))

    assert response.status_code == 200
    data = response.json()
    assert "email" not in data["user"]
    assert data["user"]["bio"] == "Writes Rust"
    assert data["stats"]["ai_assistant_distribution"] == {"cursor": 1, "claude": 1}
    assert data["stats"]["top_tags"][0] == {"tag": "rust", "count": 2}
    assert len(data["experiences"]) == 2
    assert all(len(e["description"]) <= 203 for e in data["experiences"])


def test_get_unknown_user(client, user, auth_headers):
    response = client.get(f"{API}/users/9999", headers=auth_headers(user))

    assert response.status_code == 404
    assert response.json()["detail"]["message"] == "User not found"


def test_update_me(client, user, auth_headers):
    response = client.put(
        f"{API}/users/me",
        json={"bio": "Now writes Go", "avatarUrl": "https://avatars.example.com/2"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Profile updated successfully"
    assert data["user"]["bio"] == "Now writes Go"
    assert data["user"]["avatar_url"] == "https://avatars.example.com/2"
    assert data["user"]["username"] == user.username


def test_update_me_username_taken(client, make_user, user, auth_headers):
    taken = make_user()

    response = client.put(
        f"{API}/users/me",
        json={"username": taken.username.upper()},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Username already taken"


def test_update_me_keeps_own_username(client, user, auth_headers):
    response = client.put(
        f"{API}/users/me", json={"username": user.username}, headers=auth_headers(user)
    )

    assert response.status_code == 200


@pytest.mark.parametrize(
    "payload",
    [
        {"username": "ab"},
        {"username": "has spaces!"},
        {"email": "not-an-email"},
        {"bio": "b" * 501},
        {"avatarUrl": "javascript:alert(1)"},
    ],
)
def test_update_me_validation(client, user, auth_headers, payload):
    response = client.put(f"{API}/users/me", json=payload, headers=auth_headers(user))

    assert response.status_code == 400


def test_unexpected_errors_do_not_leak_details(monkeypatch, client, user, auth_headers):
    def explode(self, current_user):
        raise RuntimeError("connection string postgres://secret")

    monkeypatch.setattr("experience_hub.flows.profile_flow.ProfileFlow.get_me", explode)

    response = client.get(f"{API}/users/me", headers=auth_headers(user))

    assert response.status_code == 500
    assert response.json()["detail"]["error_code"] == "INTERNAL_SERVER_ERROR"
    assert "secret" not in response.text


def test_update_me_username_claimed_concurrently(
    monkeypatch, db, client, make_user, user, auth_headers
):
    taken = make_user()
    headers = auth_headers(user)
    original_username = user.username

    # Both requests pass the availability check before either writes
    monkeypatch.setattr(
        "experience_hub.components.users.crud.UsersCRUD.username_taken",
        lambda self, username, exclude_user_id=None: False,
    )

    response = client.put(
        f"{API}/users/me", json={"username": taken.username}, headers=headers
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Username already taken"
    db.expire_all()
    assert user.username == original_username
