"""Local and remote actors: users and groups"""
from __future__ import annotations
from datetime import timedelta
from typing import Optional, TYPE_CHECKING
import jwt
from sqlalchemy import String, Integer, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, declared_attr, validates

from fedforum import db
from fedforum.constants import ACTOR_PERSON, ACTOR_GROUP, PATH_USER, PATH_GROUP
from fedforum.models.base import TimestampMixin, utcnow

if TYPE_CHECKING:
    from fedforum.models.server import Server


group_follower = db.Table(
    'group_follower',
    db.Column('group_id', db.Integer, db.ForeignKey('group.id'), primary_key=True),
    db.Column('user_id', db.Integer, db.ForeignKey('user.id'), primary_key=True),
    db.Column('created_at', db.DateTime, default=utcnow, nullable=False),
)

user_like = db.Table(
    'user_like',
    db.Column('user_id', db.Integer, db.ForeignKey('user.id'), primary_key=True),
    db.Column('post_id', db.Integer, db.ForeignKey('post.id'), primary_key=True),
    db.Column('created_at', db.DateTime, default=utcnow, nullable=False),
)


class ActorMixin:
    """Fields shared by every federation identity.

    ``uri`` is frozen the first time it is set: peers know an actor only by it, so it can never change.
    """
    actor_type = ''
    path_segment = ''

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    summary: Mapped[str] = mapped_column(Text, default='', nullable=False)
    icon: Mapped[str] = mapped_column(String(1024), default='', nullable=False)
    uri: Mapped[str] = mapped_column(String(1024), unique=True, index=True, nullable=False)
    server_id: Mapped[int] = mapped_column(Integer, ForeignKey('server.id'), nullable=False, index=True)

    @declared_attr
    def server(cls) -> Mapped['Server']:
        return relationship('Server', back_populates=cls.__tablename__ + 's')

    @validates('uri')
    def validate_uri(self, key, value):
        if self.uri is not None and self.uri != value:
            raise ValueError(f'uri of {self!r} is already set to {self.uri}')
        return value

    def inbox_uri(self) -> str:
        return self.uri + '/inbox/'

    def outbox_uri(self) -> str:
        return self.uri + '/outbox/'

    def followers_uri(self) -> str:
        return self.uri + '/followers/'

    def following_uri(self) -> str:
        return self.uri + '/following/'

    def likes_uri(self) -> str:
        return self.uri + '/likes/'

    def display(self) -> str:
        return self.display_name or self.name


class User(ActorMixin, TimestampMixin, db.Model):
    __tablename__ = 'user'
    __table_args__ = (
        UniqueConstraint('name', 'server_id', name='uq_user_name_server'),
    )
    actor_type = ACTOR_PERSON
    path_segment = PATH_USER

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    following = relationship('Group', secondary=group_follower, back_populates='followers', lazy='dynamic')
    liked = relationship('Post', secondary=user_like, lazy='dynamic')
    posts = relationship('Post', back_populates='sender', lazy='dynamic')

    def encode_jwt_token(self, secret_key: str, expiry_days: int = 30) -> str:
        payload = {'sub': str(self.id), 'iss': self.uri, 'iat': utcnow(),
                   'exp': utcnow() + timedelta(days=expiry_days)}
        return jwt.encode(payload, secret_key, algorithm='HS256')

    def __repr__(self):
        return f'<User {self.name}>'


class Group(ActorMixin, TimestampMixin, db.Model):
    __tablename__ = 'group'
    __table_args__ = (
        UniqueConstraint('name', 'server_id', name='uq_group_name_server'),
    )
    actor_type = ACTOR_GROUP
    path_segment = PATH_GROUP

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    followers = relationship('User', secondary=group_follower, back_populates='following', lazy='dynamic')

    def is_followed_by(self, user: User) -> bool:
        return self.followers.filter(User.id == user.id).first() is not None

    def __repr__(self):
        return f'<Group {self.name}>'
