"""Mapping between local actor records and federation uris"""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from furl import furl
from sqlalchemy.exc import IntegrityError

from fedforum import db
from fedforum.constants import PATH_USER, PATH_GROUP
from fedforum.errors import NotFound, BadRequest
from fedforum.instance.util import find_or_create_server, find_server, server_from_uri, local_server
from fedforum.models import User, Group, Server

ActorClass = type[User] | type[Group]

# path segments other software uses for group actors
GROUP_SEGMENTS = {PATH_GROUP, 'groups', 'c', 'm', 'communities'}


@dataclass(frozen=True)
class ActorStub:
    """The little we know about a remote actor from a mention in an activity"""
    name: str
    hostname: str
    scheme: str = 'https'
    port: int | None = None
    uri: str | None = None
    kind: ActorClass = User


def stub_from_uri(uri: str, kind: ActorClass | None = None) -> ActorStub:
    try:
        scheme, hostname, port = server_from_uri(uri)
    except ValueError as e:
        raise BadRequest(str(e))
    segments = [s for s in furl(uri).path.segments if s]
    if not segments:
        raise BadRequest(f'{uri} does not name an actor')
    if kind is None:
        kind = Group if len(segments) > 1 and segments[-2].lower() in GROUP_SEGMENTS else User
    return ActorStub(name=segments[-1], hostname=hostname, scheme=scheme, port=port, uri=uri, kind=kind)


class IdentityResolver:
    def __init__(self, settings):
        self.settings = settings

    def local_server(self) -> Server:
        return local_server(self.settings)

    def uri_for(self, actor: User | Group) -> str:
        """The actor's uri, derived from (server, path segment, name) if it has none yet.

        Only the creation path may store the derived value: a uri must never be recomputed later.
        """
        if actor.uri:
            return actor.uri
        server = actor.server
        if server is None:
            raise BadRequest(f'{actor.name} has no home server')
        return f'{server.base_url()}/{actor.path_segment}/{actor.name}'

    def resolve_local(self, name: str, kind: ActorClass = User) -> User | Group:
        server = self.local_server()
        actor = db.session.execute(db.select(kind).filter_by(name=name, server_id=server.id)).scalar_one_or_none()
        if actor is None:
            raise NotFound(f'{kind.__name__} {name} not found')
        return actor

    def resolve_global(self, name: str, hostname: str, kind: ActorClass = User,
                       scheme: str = 'https', port: int | None = None) -> User | Group:
        server = find_or_create_server(scheme, hostname, port)
        actor = db.session.execute(db.select(kind).filter_by(name=name, server_id=server.id)).scalar_one_or_none()
        if actor is None:
            raise NotFound(f'{kind.__name__} {name}@{hostname} not found')
        return actor

    def find_by_uri(self, uri: str, kind: ActorClass | None = None) -> User | Group | None:
        kinds = (kind,) if kind else (User, Group)
        for k in kinds:
            actor = db.session.execute(db.select(k).filter_by(uri=uri)).scalar_one_or_none()
            if actor is not None:
                return actor
        return None

    def find_or_create_remote(self, stub: ActorStub) -> User | Group:
        """Look the actor up, creating a shadow record on first contact."""
        try:
            return self.resolve_global(stub.name, stub.hostname, stub.kind, stub.scheme, stub.port)
        except NotFound:
            pass

        if self.settings.is_local_address(stub.scheme, stub.hostname, stub.port):
            # local actors are never invented from a mention
            raise NotFound(f'{stub.kind.__name__} {stub.name} not found')

        server = find_server(stub.hostname)
        actor = stub.kind(name=stub.name, display_name=stub.name, summary='', icon='')
        try:
            with db.session.begin_nested():
                db.session.add(actor)
                actor.server = server
                actor.uri = stub.uri or self.uri_for(actor)
        except IntegrityError:
            current_app.logger.info(f'{stub.kind.__name__} {actor.uri} was created concurrently, reusing it')
            existing = self.find_by_uri(actor.uri, stub.kind)
            if existing is None:
                raise
            return existing
        current_app.logger.info(f'Created shadow {stub.kind.__name__} {actor.uri}')
        return actor

    def actor_from_uri(self, uri: str, kind: ActorClass | None = None) -> User | Group:
        """Resolve any actor uri to a record, creating a shadow actor for unseen remote ones."""
        actor = self.find_by_uri(uri, kind)
        if actor is not None:
            return actor
        stub = stub_from_uri(uri, kind)
        if self.settings.is_local_address(stub.scheme, stub.hostname, stub.port):
            return self.resolve_local(stub.name, stub.kind)
        return self.find_or_create_remote(stub)
