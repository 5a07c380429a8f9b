from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from fedforum import db
from fedforum.errors import Conflict
from fedforum.models import Group, User, group_follower


def create_group(resolver, name: str, display_name: str | None = None, summary: str = '', icon: str = '') -> Group:
    server = resolver.local_server()
    if db.session.execute(db.select(Group).filter_by(name=name, server_id=server.id)).scalar_one_or_none():
        raise Conflict(f'Group {name} already exists')
    group = Group(name=name, display_name=display_name or name, summary=summary, icon=icon)
    db.session.add(group)
    group.server = server
    group.uri = resolver.uri_for(group)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f'Group {name} already exists')
    return group


def add_follower(group: Group, user: User) -> bool:
    """Add user to the group's followers. Returns False if they were already following."""
    if group.is_followed_by(user):
        return False
    try:
        with db.session.begin_nested():
            db.session.execute(group_follower.insert().values(group_id=group.id, user_id=user.id))
    except IntegrityError:
        current_app.logger.info(f'{user.uri} started following {group.uri} concurrently')
        return False
    return True


def get_followers(group: Group) -> list[User]:
    """Followers, most recent follow first"""
    return db.session.execute(
        db.select(User).join(group_follower, group_follower.c.user_id == User.id)
        .where(group_follower.c.group_id == group.id)
        .order_by(group_follower.c.created_at.desc(), User.id.desc())
    ).scalars().all()
