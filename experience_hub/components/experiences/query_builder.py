import math

from sqlalchemy import desc, literal, or_
from sqlalchemy.orm import Query, Session, contains_eager

from experience_hub.components.experiences.models import Experiences
from experience_hub.components.experiences.schemas import FeedPage, FeedQuery
from experience_hub.components.users.models import Users
from experience_hub.core.enums import FeedSort
from experience_hub.core.utils import TAG_SEPARATOR

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class FeedQueryBuilder:
    """
    Assembles the experience feed.

    Filter dimensions combine with AND; tags within their dimension combine
    with OR. Soft-deleted experiences and experiences of soft-deleted users
    never appear.
    """

    def __init__(self, db: Session):
        self.db = db

    def paginate(self, feed_query: FeedQuery) -> FeedPage:
        base_query = self.build_query(feed_query)

        total = base_query.count()

        experiences = (
            base_query.options(contains_eager(Experiences.user))
            .order_by(*self.order_by(feed_query.sort))
            .offset(feed_query.offset)
            .limit(feed_query.limit)
            .all()
        )

        return FeedPage(
            experiences=experiences,
            total=total,
            page=feed_query.page,
            limit=feed_query.limit,
            pages=math.ceil(total / feed_query.limit),
        )

    def build_query(self, feed_query: FeedQuery) -> Query:
        query = (
            self.db.query(Experiences)
            .join(Users, Experiences.user_id == Users.id)
            .filter(Experiences.deleted_at.is_(None), Users.deleted_at.is_(None))
        )

        for clause in self.filters(feed_query):
            query = query.filter(clause)

        return query

    def filters(self, feed_query: FeedQuery) -> list:
        clauses = []

        if feed_query.ai_assistant:
            clauses.append(
                Experiences.ai_assistant_type == feed_query.ai_assistant.value
            )

        if feed_query.tags:
            clauses.append(or_(*[self._has_tag(tag) for tag in feed_query.tags]))

        if feed_query.search:
            pattern = f"%{escape_like(feed_query.search)}%"
            clauses.append(
                or_(
                    Experiences.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Experiences.description.ilike(pattern, escape=LIKE_ESCAPE),
                    Experiences.tags.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        return clauses

    def order_by(self, sort: FeedSort) -> list:
        # id breaks remaining ties so pages never overlap
        if sort == FeedSort.RECENT:
            return [desc(Experiences.created_at), desc(Experiences.id)]

        if sort == FeedSort.POPULAR:
            return [
                desc(Experiences.reaction_count),
                desc(Experiences.created_at),
                desc(Experiences.id),
            ]

        return [
            desc(Experiences.average_rating),
            desc(Experiences.created_at),
            desc(Experiences.id),
        ]

    def _has_tag(self, tag: str):
        # Exact membership in the delimited column, not a substring match
        wrapped = literal(TAG_SEPARATOR) + Experiences.tags + literal(TAG_SEPARATOR)
        return wrapped.contains(f"{TAG_SEPARATOR}{tag}{TAG_SEPARATOR}")
