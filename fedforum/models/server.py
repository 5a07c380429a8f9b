"""Federation peers, including the local instance"""
from __future__ import annotations
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fedforum import db
from fedforum.models.base import TimestampMixin

if TYPE_CHECKING:
    from fedforum.models.actor import User, Group

DEFAULT_PORTS = {'http': 80, 'https': 443}


class Server(TimestampMixin, db.Model):
    """A (scheme, hostname, port) tuple. One row per hostname, shared by every actor and post on it."""
    __tablename__ = 'server'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    scheme: Mapped[str] = mapped_column(String(10), nullable=False, default='https')
    hostname: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    port: Mapped[Optional[int]] = mapped_column(Integer)   # None = default port for the scheme

    users = relationship('User', back_populates='server', lazy='dynamic')
    groups = relationship('Group', back_populates='server', lazy='dynamic')

    def base_url(self) -> str:
        if self.port and self.port != DEFAULT_PORTS.get(self.scheme):
            return f'{self.scheme}://{self.hostname}:{self.port}'
        return f'{self.scheme}://{self.hostname}'

    def __repr__(self):
        return f'<Server {self.base_url()}>'
