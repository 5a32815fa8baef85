"""Aggregate counts and recent activity for the admin dashboard."""

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from designhub.models import Contest, PracticeRequest, Proposal, User
from designhub.schemas.admin import AdminStats, AdminStatsResponse, RecentContest, RecentUser

RECENT_LIMIT = 5


def _grouped_counts(db: Session, column, id_column) -> dict[str, int]:
    rows = db.query(column, func.count(id_column)).group_by(column).all()
    return {str(key): count for key, count in rows}


def get_admin_stats(db: Session) -> AdminStatsResponse:
    """
    Totals per entity, users by role, contests by status, and the five newest users and contests.

    The reads are independent of each other; they run on one session.
    """
    stats = AdminStats(
        total_users=db.query(func.count(User.id)).scalar() or 0,
        total_contests=db.query(func.count(Contest.id)).scalar() or 0,
        total_proposals=db.query(func.count(Proposal.id)).scalar() or 0,
        total_practices=db.query(func.count(PracticeRequest.id)).scalar() or 0,
        users_by_role=_grouped_counts(db, User.role, User.id),
        contests_by_status=_grouped_counts(db, Contest.status, Contest.id),
    )
    recent_users = (
        db.query(User)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    recent_contests = (
        db.query(Contest)
        .options(joinedload(Contest.client))
        .order_by(Contest.created_at.desc(), Contest.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    return AdminStatsResponse(
        stats=stats,
        recent_users=[RecentUser.model_validate(u) for u in recent_users],
        recent_contests=[RecentContest.model_validate(c) for c in recent_contests],
    )
