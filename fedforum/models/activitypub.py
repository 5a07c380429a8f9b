"""Activities received or produced by this server, and the federation log"""
from __future__ import annotations
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Integer, Text, ForeignKey, Index, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fedforum import db
from fedforum.models.base import TimestampMixin

if TYPE_CHECKING:
    from fedforum.models.actor import User, Group
    from fedforum.models.content import Post


activity_destination_group = db.Table(
    'activity_destination_group',
    db.Column('activity_id', db.Integer, db.ForeignKey('activity.id'), primary_key=True),
    db.Column('group_id', db.Integer, db.ForeignKey('group.id'), primary_key=True),
)

activity_destination_user = db.Table(
    'activity_destination_user',
    db.Column('activity_id', db.Integer, db.ForeignKey('activity.id'), primary_key=True),
    db.Column('user_id', db.Integer, db.ForeignKey('user.id'), primary_key=True),
)


class Activity(TimestampMixin, db.Model):
    """A federation event, stored with its full payload.

    Once saved only two things may change: destinations are added (never removed) and the
    payload's audience may gain entries.
    """
    __tablename__ = 'activity'
    __table_args__ = (
        CheckConstraint('source_user_id IS NULL OR source_group_id IS NULL', name='ck_activity_single_source'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    uri: Mapped[Optional[str]] = mapped_column(String(1024), unique=True, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    activity_object: Mapped[dict] = mapped_column(JSON, nullable=False)

    source_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('user.id'), index=True)
    source_group_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('group.id'), index=True)
    target_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('user.id'), index=True)
    target_post_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('post.id'), index=True)

    source_user = relationship('User', foreign_keys=[source_user_id])
    source_group = relationship('Group', foreign_keys=[source_group_id])
    target_user = relationship('User', foreign_keys=[target_user_id])
    target_post = relationship('Post', foreign_keys=[target_post_id])
    destination_groups = relationship('Group', secondary=activity_destination_group, collection_class=set)
    destination_users = relationship('User', secondary=activity_destination_user, collection_class=set)

    def is_known(self) -> bool:
        return self.uri is not None

    def source(self) -> Optional[User | Group]:
        return self.source_user or self.source_group

    def set_source(self, actor: User | Group) -> None:
        from fedforum.models.actor import Group
        if isinstance(actor, Group):
            self.source_user = None
            self.source_group = actor
        else:
            self.source_group = None
            self.source_user = actor

    def add_destination(self, actor: User | Group) -> bool:
        """Idempotently record that ``actor`` received this activity. Returns True if it was new."""
        from fedforum.models.actor import Group
        destinations = self.destination_groups if isinstance(actor, Group) else self.destination_users
        if actor in destinations:
            return False
        destinations.add(actor)
        return True

    def annotate_audience(self, collection_uri: str) -> None:
        payload = dict(self.activity_object)
        audience = payload.get('audience')
        if audience is None:
            audience = [collection_uri]
        elif isinstance(audience, list):
            if collection_uri not in audience:
                audience = audience + [collection_uri]
        elif audience != collection_uri:
            audience = [audience, collection_uri]
        payload['audience'] = audience
        # reassigned rather than mutated so the JSON column is flagged dirty
        self.activity_object = payload

    def __repr__(self):
        return f'<Activity {self.type} {self.uri}>'


class ActivityPubLog(TimestampMixin, db.Model):
    """ActivityPub activity logging"""
    __tablename__ = 'activity_pub_log'
    __table_args__ = (
        Index('idx_activitypub_log_lookup', 'activity_id', 'direction'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    direction: Mapped[str] = mapped_column(String(3), nullable=False)  # 'in' or 'out'
    activity_id: Mapped[str] = mapped_column(String(1024), index=True, nullable=False)
    activity_type: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    result: Mapped[Optional[str]] = mapped_column(String(10))  # 'success', 'failure', etc.
    activity_json: Mapped[Optional[str]] = mapped_column(Text)
    exception_message: Mapped[Optional[str]] = mapped_column(Text)
