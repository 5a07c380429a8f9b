from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from fedforum import db
from fedforum.errors import Conflict
from fedforum.models import User, Post, Group, user_like, group_follower


def create_user(resolver, name: str, display_name: str | None = None, summary: str = '', icon: str = '') -> User:
    server = resolver.local_server()
    if db.session.execute(db.select(User).filter_by(name=name, server_id=server.id)).scalar_one_or_none():
        raise Conflict(f'User {name} already exists')
    user = User(name=name, display_name=display_name or name, summary=summary, icon=icon)
    db.session.add(user)
    user.server = server
    user.uri = resolver.uri_for(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f'User {name} already exists')
    return user


def add_like(user: User, post: Post) -> bool:
    """Record that user likes post. Returns False if they already did."""
    if user.liked.filter(Post.id == post.id).first() is not None:
        return False
    user.liked.append(post)
    return True


def get_likes(user: User) -> list[Post]:
    return db.session.execute(
        db.select(Post).join(user_like, user_like.c.post_id == Post.id)
        .where(user_like.c.user_id == user.id)
        .order_by(user_like.c.created_at.desc(), Post.id.desc())
    ).scalars().all()


def get_following(user: User) -> list[Group]:
    return db.session.execute(
        db.select(Group).join(group_follower, group_follower.c.group_id == Group.id)
        .where(group_follower.c.user_id == user.id)
        .order_by(group_follower.c.created_at.desc(), Group.id.desc())
    ).scalars().all()
