from __future__ import annotations

from furl import furl
from flask import current_app
from sqlalchemy.exc import IntegrityError

from fedforum import db
from fedforum.models import Server
from fedforum.models.server import DEFAULT_PORTS


def server_from_uri(uri: str) -> tuple[str, str, int | None]:
    """Split a uri into (scheme, hostname, port). Port is None when it is the scheme's default."""
    f = furl(uri)
    if not f.scheme or not f.host:
        raise ValueError(f'{uri} is not an absolute uri')
    port = f.port if f.port != DEFAULT_PORTS.get(f.scheme) else None
    return f.scheme, f.host.lower(), port


def find_server(hostname: str) -> Server | None:
    return db.session.execute(db.select(Server).filter_by(hostname=hostname.lower())).scalar_one_or_none()


def find_or_create_server(scheme: str, hostname: str, port: int | None = None) -> Server:
    """Servers are keyed by hostname: a second reference to the same host reuses the existing row."""
    hostname = hostname.lower()
    server = find_server(hostname)
    if server is not None:
        return server

    server = Server(scheme=scheme, hostname=hostname, port=port)
    try:
        with db.session.begin_nested():
            db.session.add(server)
    except IntegrityError:
        # another request created it between our lookup and insert
        current_app.logger.info(f'Server {hostname} was created concurrently, reusing it')
        server = find_server(hostname)
    return server


def local_server(settings) -> Server:
    return find_or_create_server(settings.scheme, settings.hostname, settings.port)
