"""Posts and their thread structure"""
from __future__ import annotations
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fedforum import db
from fedforum.models.base import TimestampMixin, SoftDeleteMixin, utcnow

if TYPE_CHECKING:
    from fedforum.models.actor import User, Group
    from fedforum.models.server import Server


post_group = db.Table(
    'post_group',
    db.Column('post_id', db.Integer, db.ForeignKey('post.id'), primary_key=True),
    db.Column('group_id', db.Integer, db.ForeignKey('group.id'), primary_key=True),
)


class Post(TimestampMixin, SoftDeleteMixin, db.Model):
    __tablename__ = 'post'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    uri: Mapped[str] = mapped_column(String(1024), unique=True, index=True, nullable=False)
    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey('user.id'), nullable=False, index=True)
    server_id: Mapped[int] = mapped_column(Integer, ForeignKey('server.id'), nullable=False, index=True)
    parent_uri: Mapped[Optional[str]] = mapped_column(String(1024), index=True)
    parent_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('post.id'), index=True)
    subject: Mapped[Optional[str]] = mapped_column(String(255))
    content: Mapped[str] = mapped_column(Text, default='', nullable=False)
    source: Mapped[Optional[str]] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)

    sender = relationship('User', back_populates='posts')
    server = relationship('Server')
    groups = relationship('Group', secondary=post_group, lazy='selectin')
    parent = relationship('Post', remote_side=[id], back_populates='children')
    children = relationship('Post', back_populates='parent', lazy='dynamic', order_by='Post.timestamp')

    def __repr__(self):
        return f'<Post {self.uuid}>'
