import pytest

from experience_hub.components.experiences.models import Experiences, Prompts
from experience_hub.components.interactions.models import Comments, Reactions
from experience_hub.components.users.models import Users

API = "/api/v1"


def experience_payload(**overrides):
    payload = {
        "title": "Generating migrations",
        "description": "How an assistant wrote my Alembic migrations end to end.",
        "aiAssistantType": "claude",
        "tags": ["Python", "alembic", "python"],
        "githubUrls": ["https://www.github.com/octo/migrations/tree/main"],
        "isNews": False,
        "prompts": [
            {"content": "Write a migration for the users table", "context": "SQLAlchemy 2"},
            {"content": "Now add indexes for lookups", "resultsAchieved": "Worked first try"},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def author(make_user):
    return make_user()


@pytest.fixture()
def other(make_user):
    return make_user()


def test_create_experience(db, client, author, auth_headers):
    response = client.post(
        f"{API}/experiences/", json=experience_payload(), headers=auth_headers(author)
    )

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Generating migrations"
    assert data["ai_assistant_type"] == "claude"
    assert data["tags"] == ["python", "alembic"]
    assert data["github_urls"] == ["https://github.com/octo/migrations/tree/main"]
    assert data["prompt_count"] == 2
    assert data["average_rating"] == 0
    assert [p["order_index"] for p in data["prompts"]] == [0, 1]
    assert data["prompts"][1]["results_achieved"] == "Worked first try"
    assert data["user"]["id"] == author.id

    db.expire_all()
    assert db.get(Users, author.id).experience_count == 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "abc"},
        {"description": "too short"},
        {"aiAssistantType": "copilot-x"},
        {"githubUrls": []},
        {"githubUrls": ["https://gitlab.com/octo/repo"]},
        {"githubUrls": ["http://github.com/octo/repo"]},
        {"githubUrls": ["https://github.com/octo"]},
        {"prompts": [{"content": "short"}]},
        {"prompts": [{"content": "long enough prompt", "context": "x" * 501}]},
    ],
)
def test_create_experience_validation(db, client, author, auth_headers, overrides):
    response = client.post(
        f"{API}/experiences/",
        json=experience_payload(**overrides),
        headers=auth_headers(author),
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "REQUEST_VALIDATION_ERROR"
    assert db.query(Experiences).count() == 0


def test_get_experience_detail(db, client, make_experience, author, other, auth_headers):
    experience = make_experience(author, prompts=2, tags=["go"])
    client.post(
        f"{API}/experiences/{experience.id}/reactions",
        json={"type": "like"},
        headers=auth_headers(other),
    )
    client.post(
        f"{API}/experiences/{experience.id}/comments",
        json={"content": "Helpful"},
        headers=auth_headers(other),
    )
    client.post(
        f"{API}/prompts/{experience.prompts[0].id}/ratings",
        json={"rating": 4},
        headers=auth_headers(other),
    )

    response = client.get(
        f"{API}/experiences/{experience.id}", headers=auth_headers(other)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["tags"] == ["go"]
    assert data["reaction_counts"] == {"like": 1}
    assert data["comment_count"] == 1
    assert data["comments"][0]["user"]["username"] == other.username
    assert data["average_rating"] == 4.0
    assert data["prompts"][0]["average_rating"] == 4.0
    assert data["prompts"][0]["rating_count"] == 1


def test_get_missing_experience(client, other, auth_headers):
    response = client.get(f"{API}/experiences/404", headers=auth_headers(other))

    assert response.status_code == 404


def test_feed_endpoint(client, make_experience, author, auth_headers):
    make_experience(author, ai_assistant_type="claude", tags=["python"], average_rating=4.0)
    make_experience(author, ai_assistant_type="gpt", tags=["python"], average_rating=5.0)
    make_experience(author, ai_assistant_type="claude", tags=["rust"], average_rating=3.0)

    response = client.get(
        f"{API}/experiences/",
        params={"aiAssistant": "claude", "tags": "python,rust", "limit": 1, "page": 2},
        headers=auth_headers(author),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["pages"] == 2
    assert data["page"] == 2
    assert [e["average_rating"] for e in data["experiences"]] == [3.0]


@pytest.mark.parametrize(
    "params", [{"page": "x"}, {"page": 0}, {"limit": 500}, {"ai_assistant": "nope"}]
)
def test_feed_endpoint_rejects_bad_parameters(client, author, auth_headers, params):
    response = client.get(
        f"{API}/experiences/", params=params, headers=auth_headers(author)
    )

    assert response.status_code == 400


def test_update_experience(client, make_experience, author, auth_headers):
    experience = make_experience(author, tags=["old"])

    response = client.put(
        f"{API}/experiences/{experience.id}",
        json={"title": "A better title", "tags": ["New", "tags"], "isNews": True},
        headers=auth_headers(author),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "A better title"
    assert data["tags"] == ["new", "tags"]
    assert data["is_news"] is True
    assert data["ai_assistant_type"] == "claude"


def test_only_owner_can_modify(db, client, make_experience, author, other, auth_headers):
    experience = make_experience(author)

    update = client.put(
        f"{API}/experiences/{experience.id}",
        json={"title": "Hijacked title"},
        headers=auth_headers(other),
    )
    delete = client.delete(
        f"{API}/experiences/{experience.id}", headers=auth_headers(other)
    )
    add_prompt = client.post(
        f"{API}/experiences/{experience.id}/prompts",
        json={"content": "Sneaky extra prompt"},
        headers=auth_headers(other),
    )

    assert update.status_code == 403
    assert delete.status_code == 403
    assert add_prompt.status_code == 403
    assert update.json()["detail"]["error_code"] == "PERMISSION_DENIED"

    db.expire_all()
    stored = db.get(Experiences, experience.id)
    assert stored.title != "Hijacked title"
    assert stored.deleted_at is None


def test_delete_cascades_and_refreshes_rollups(
    db, client, make_experience, author, other, auth_headers
):
    experience = make_experience(author, prompts=2)
    kept = make_experience(author, prompts=1)
    headers = auth_headers(other)

    client.post(f"{API}/experiences/{experience.id}/reactions", json={"type": "like"}, headers=headers)
    client.post(f"{API}/experiences/{experience.id}/comments", json={"content": "Nice"}, headers=headers)
    client.post(f"{API}/prompts/{experience.prompts[0].id}/ratings", json={"rating": 5}, headers=headers)
    client.post(f"{API}/prompts/{kept.prompts[0].id}/ratings", json={"rating": 3}, headers=headers)

    response = client.delete(
        f"{API}/experiences/{experience.id}", headers=auth_headers(author)
    )

    assert response.status_code == 204
    assert response.content == b""

    db.expire_all()
    assert db.get(Experiences, experience.id).deleted_at is not None
    assert all(
        prompt.deleted_at is not None
        for prompt in db.query(Prompts).filter(Prompts.experience_id == experience.id)
    )
    assert all(
        comment.deleted_at is not None
        for comment in db.query(Comments).filter(Comments.experience_id == experience.id)
    )
    assert db.query(Reactions).filter(Reactions.experience_id == experience.id).count() == 0

    owner = db.get(Users, author.id)
    assert owner.experience_count == 1
    assert owner.total_rating == 3
    assert owner.rating_count == 1

    feed = client.get(f"{API}/experiences/", headers=headers).json()
    assert [e["id"] for e in feed["experiences"]] == [kept.id]

    gone = client.get(f"{API}/experiences/{experience.id}", headers=headers)
    assert gone.status_code == 404


def test_add_and_delete_prompt(db, client, make_experience, author, other, auth_headers):
    experience = make_experience(author, prompts=1)

    response = client.post(
        f"{API}/experiences/{experience.id}/prompts",
        json={"content": "A follow up prompt to try", "resultsAchieved": "Good"},
        headers=auth_headers(author),
    )

    assert response.status_code == 201
    prompt = response.json()
    assert prompt["order_index"] == 1

    client.post(
        f"{API}/prompts/{prompt['id']}/ratings",
        json={"rating": 1},
        headers=auth_headers(other),
    )

    forbidden = client.delete(f"{API}/prompts/{prompt['id']}", headers=auth_headers(other))
    assert forbidden.status_code == 403

    deleted = client.delete(f"{API}/prompts/{prompt['id']}", headers=auth_headers(author))
    assert deleted.status_code == 204

    db.expire_all()
    stored = db.get(Experiences, experience.id)
    assert stored.prompt_count == 1
    assert stored.average_rating == 0
    assert db.get(Users, author.id).rating_count == 0

    rate_deleted = client.post(
        f"{API}/prompts/{prompt['id']}/ratings",
        json={"rating": 4},
        headers=auth_headers(other),
    )
    assert rate_deleted.status_code == 404
