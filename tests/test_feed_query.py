from datetime import datetime, timezone

import pytest

from experience_hub.components.experiences.query_builder import (
    FeedQueryBuilder,
    escape_like,
)
from experience_hub.components.experiences.schemas import FeedQuery
from experience_hub.core.exceptions import ValidationException


def _ids(page):
    return [experience.id for experience in page.experiences]


@pytest.fixture()
def builder(db):
    return FeedQueryBuilder(db)


def test_default_ordering_rating_then_recency(db, builder, make_user, make_experience):
    author = make_user()
    low = make_experience(author, average_rating=2.0, created_offset=30)
    high_old = make_experience(author, average_rating=4.5, created_offset=0)
    high_new = make_experience(author, average_rating=4.5, created_offset=10)

    page = builder.paginate(FeedQuery.parse())

    assert _ids(page) == [high_new.id, high_old.id, low.id]
    assert page.total == 3
    assert page.pages == 1


def test_second_page_holds_third_ranked(builder, make_user, make_experience):
    author = make_user()
    make_experience(author, average_rating=5.0)
    make_experience(author, average_rating=4.0)
    third = make_experience(author, average_rating=3.0)

    page = builder.paginate(FeedQuery.parse(page=2, limit=2))

    assert _ids(page) == [third.id]
    assert page.total == 3
    assert page.pages == 2
    assert page.page == 2


def test_pages_partition_the_result_set(builder, make_user, make_experience):
    author = make_user()
    # Equal ratings and timestamps leave only the id tie-break
    created = [make_experience(author, average_rating=3.0) for _ in range(7)]

    seen = []
    for number in range(1, 4):
        seen.extend(_ids(builder.paginate(FeedQuery.parse(page=number, limit=3))))

    assert sorted(seen) == sorted(experience.id for experience in created)
    assert len(seen) == len(set(seen))


def test_ai_assistant_and_tags_filters(builder, make_user, make_experience):
    author = make_user()
    claude_python = make_experience(author, ai_assistant_type="claude", tags=["python"])
    claude_rust = make_experience(author, ai_assistant_type="claude", tags=["rust"])
    make_experience(author, ai_assistant_type="claude", tags=["go"])
    make_experience(author, ai_assistant_type="gpt", tags=["python"])

    page = builder.paginate(
        FeedQuery.parse(ai_assistant="claude", tags=["python", "rust"])
    )

    assert sorted(_ids(page)) == sorted([claude_python.id, claude_rust.id])


def test_tag_filter_is_exact_membership(builder, make_user, make_experience):
    author = make_user()
    make_experience(author, tags=["python3"])
    exact = make_experience(author, tags=["web", "python"])

    page = builder.paginate(FeedQuery.parse(tags="python"))

    assert _ids(page) == [exact.id]


def test_search_is_case_insensitive_over_text_and_tags(
    builder, make_user, make_experience
):
    author = make_user()
    by_title = make_experience(author, title="Async Django views")
    by_tag = make_experience(author, title="Something else", tags=["django"])
    make_experience(author, title="Unrelated")

    page = builder.paginate(FeedQuery.parse(search="DJANGO"))

    assert sorted(_ids(page)) == sorted([by_title.id, by_tag.id])


def test_search_treats_wildcards_literally(builder, make_user, make_experience):
    author = make_user()
    make_experience(author, title="Plain title")
    percent = make_experience(author, title="Coverage went to 100% today")

    page = builder.paginate(FeedQuery.parse(search="100%"))

    assert _ids(page) == [percent.id]
    assert escape_like("a_b%c") == "a\\_b\\%c"


def test_deleted_experiences_and_authors_are_hidden(
    db, builder, make_user, make_experience
):
    author, gone_author = make_user(), make_user()
    visible = make_experience(author)
    deleted = make_experience(author)
    make_experience(gone_author)

    deleted.deleted_at = datetime.now(timezone.utc)
    gone_author.deleted_at = datetime.now(timezone.utc)
    db.commit()

    page = builder.paginate(FeedQuery.parse())

    assert _ids(page) == [visible.id]
    assert page.total == 1


def test_recent_and_popular_sorts(builder, make_user, make_experience):
    author = make_user()
    old_popular = make_experience(author, reaction_count=10, created_offset=0)
    new_quiet = make_experience(author, reaction_count=0, created_offset=60)

    recent = builder.paginate(FeedQuery.parse(sort="recent"))
    popular = builder.paginate(FeedQuery.parse(sort="popular"))

    assert _ids(recent) == [new_quiet.id, old_popular.id]
    assert _ids(popular) == [old_popular.id, new_quiet.id]


def test_empty_feed(builder):
    page = builder.paginate(FeedQuery.parse())

    assert page.experiences == []
    assert page.total == 0
    assert page.pages == 0


@pytest.mark.parametrize(
    "params",
    [
        {"page": 0},
        {"page": "abc"},
        {"limit": 0},
        {"limit": 101},
        {"ai_assistant": "copilot-x"},
        {"sort": "random"},
        {"search": "x" * 101},
    ],
)
def test_invalid_feed_parameters(params):
    with pytest.raises(ValidationException):
        FeedQuery.parse(**params)


def test_feed_query_normalises_inputs():
    feed_query = FeedQuery.parse(tags="Python, #Rust,python", search="  term  ")

    assert feed_query.tags == ["python", "rust"]
    assert feed_query.search == "term"
    assert feed_query.offset == 0
