from datetime import datetime, timedelta, timezone

import pytest

from experience_hub.components.aggregation.controller import AggregationController
from experience_hub.components.experiences.models import Experiences, Prompts
from experience_hub.components.interactions.models import (
    Comments,
    PromptRatings,
    Reactions,
)
from experience_hub.components.soft_delete.controller import SoftDeleteController
from experience_hub.components.users.models import Users
from experience_hub.core.exceptions import NotFoundException, ValidationException
from scripts.manage_deleted import main as manage_main

API = "/api/v1"
EARLIER = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture()
def controller(db):
    return SoftDeleteController(db)


@pytest.fixture()
def aggregation(db):
    return AggregationController(db)


@pytest.fixture()
def author(make_user):
    return make_user()


@pytest.fixture()
def other(make_user):
    return make_user()


def live_comments(db):
    return db.query(Comments).filter(Comments.deleted_at.is_(None)).count()


def test_delete_user_cascades_and_refreshes_caches(
    db, controller, aggregation, make_experience, author, other
):
    own = make_experience(author, prompts=2)
    theirs = make_experience(other, prompts=1)
    aggregation.record_comment(theirs.id, author.id, "Nice work")
    aggregation.record_comment(own.id, other.id, "Thanks for sharing")
    aggregation.record_rating(own.prompts[0].id, other.id, 4)
    aggregation.record_reaction(theirs.id, author.id, "helpful")
    db.commit()

    result = controller.delete_user(author)
    db.commit()
    db.expire_all()

    assert result == {"experiences": 1, "commented_on": 1}
    assert author.is_deleted
    assert author.experience_count == 0
    assert author.rating_count == 0
    assert own.is_deleted
    assert all(prompt.is_deleted for prompt in own.prompts)
    assert live_comments(db) == 0
    assert theirs.comment_count == 0
    # Reactions the user gave stay attributed to them
    assert theirs.reaction_count == 1
    assert not theirs.is_deleted


def test_delete_user_twice_is_rejected(db, controller, author):
    controller.delete_user(author)

    with pytest.raises(ValidationException):
        controller.delete_user(author)


def test_restore_experience_recomputes_rollups(
    db, controller, aggregation, make_experience, author, other
):
    experience = make_experience(author, prompts=2)
    aggregation.record_rating(experience.prompts[0].id, other.id, 4)
    aggregation.record_comment(experience.id, other.id, "Helpful walkthrough")
    aggregation.record_reaction(experience.id, other.id, "like")
    controller.prompts_crud.soft_delete(experience.prompts[1], EARLIER)
    aggregation.recompute_experience_rollup(experience.id)
    controller.delete_experience(experience)
    db.commit()

    db.expire_all()
    assert author.experience_count == 0
    assert author.rating_count == 0

    controller.restore_experience(experience.id)
    db.commit()
    db.expire_all()

    assert not experience.is_deleted
    assert experience.prompt_count == 1
    assert experience.average_rating == 4.0
    assert experience.comment_count == 1
    # Reactions are removed by the delete and do not come back
    assert experience.reaction_count == 0
    assert db.get(Prompts, experience.prompts[1].id).is_deleted
    assert author.experience_count == 1
    assert author.total_rating == 4.0
    assert author.rating_count == 1


def test_restore_live_experience_is_rejected(controller, make_experience, author):
    experience = make_experience(author)

    with pytest.raises(ValidationException):
        controller.restore_experience(experience.id)


def test_restore_missing_experience(controller):
    with pytest.raises(NotFoundException):
        controller.restore_experience(4242)


def test_restore_experience_of_deleted_user_is_rejected(
    db, controller, make_experience, author
):
    experience = make_experience(author)
    controller.delete_user(author)
    db.commit()

    with pytest.raises(ValidationException):
        controller.restore_experience(experience.id)


def test_restore_user_brings_back_cascaded_rows(
    db, controller, aggregation, make_experience, author, other
):
    cascaded = make_experience(author, prompts=1)
    removed_earlier = make_experience(author, prompts=1)
    theirs = make_experience(other, prompts=1)
    aggregation.record_comment(theirs.id, author.id, "Great idea")
    controller.delete_experience(removed_earlier, EARLIER)
    db.commit()

    controller.delete_user(author)
    db.commit()

    controller.restore_user(author.id)
    db.commit()
    db.expire_all()

    assert not author.is_deleted
    assert not cascaded.is_deleted
    assert removed_earlier.is_deleted
    assert author.experience_count == 1
    assert theirs.comment_count == 1
    assert live_comments(db) == 1


def test_restore_active_user_is_rejected(controller, author):
    with pytest.raises(ValidationException):
        controller.restore_user(author.id)


def test_purge_removes_only_expired_rows(
    db, controller, aggregation, make_experience, author, other
):
    expired = make_experience(author, prompts=1)
    aggregation.record_rating(expired.prompts[0].id, other.id, 5)
    controller.delete_experience(expired, EARLIER)

    recent = make_experience(author, prompts=1)
    controller.delete_experience(recent, EARLIER + timedelta(days=2))

    live = make_experience(author, prompts=2)
    controller.prompts_crud.soft_delete(live.prompts[1], EARLIER)
    removed_comment = aggregation.record_comment(live.id, other.id, "Outdated")
    aggregation.remove_comment(removed_comment)
    removed_comment.deleted_at = EARLIER
    aggregation.record_comment(live.id, other.id, "Still relevant")
    aggregation.recompute_experience_rollup(live.id)
    live_id, recent_id = live.id, recent.id
    db.commit()

    purged = controller.purge_deleted(EARLIER + timedelta(days=1))
    db.commit()

    assert purged == {
        "ratings": 1,
        "comments": 1,
        "reactions": 0,
        "prompts": 2,
        "experiences": 1,
    }
    assert {row.id for row in db.query(Experiences.id)} == {live_id, recent_id}
    assert db.query(PromptRatings).count() == 0
    assert db.query(Users).count() == 2

    live = db.get(Experiences, live_id)
    assert live.prompt_count == 1
    assert live.comment_count == 1


def test_delete_me(db, client, make_experience, author, other, auth_headers):
    headers = auth_headers(author)
    make_experience(author)

    response = client.delete(f"{API}/users/me", headers=headers)

    assert response.status_code == 204
    assert client.get(f"{API}/users/me", headers=headers).status_code == 401

    feed = client.get(f"{API}/experiences/", headers=auth_headers(other)).json()
    assert feed["experiences"] == []


def test_manage_script_purges_expired_rows(db, controller, make_experience, author):
    experience = make_experience(author, prompts=1)
    controller.delete_experience(
        experience, datetime.now(timezone.utc) - timedelta(days=40)
    )
    db.commit()

    assert manage_main(["purge", "--days", "30"]) == 0

    db.expire_all()
    assert db.query(Experiences).count() == 0
    assert db.query(Reactions).count() == 0


def test_manage_script_deletes_and_restores_user(db, make_experience, author):
    make_experience(author)
    author_id = author.id
    db.commit()

    assert manage_main(["delete-user", str(author_id)]) == 0
    db.expire_all()
    assert db.get(Users, author_id).is_deleted
    db.commit()

    assert manage_main(["restore-user", str(author_id)]) == 0
    db.expire_all()
    assert not db.get(Users, author_id).is_deleted
    assert db.get(Users, author_id).experience_count == 1


@pytest.mark.parametrize(
    "argv",
    [
        ["restore-experience", "999"],
        ["restore-user", "999"],
        ["delete-user", "999"],
    ],
)
def test_manage_script_reports_failures(db, argv):
    assert manage_main(argv) == 1
