from __future__ import annotations

import jwt
from flask import current_app

from fedforum import db
from fedforum.errors import Unauthorized
from fedforum.models import User


def authorise_api_user(auth: str | None, settings, id_match: int | None = None) -> User:
    """The local user a ``Bearer <jwt>`` header belongs to. Raises Unauthorized otherwise."""
    if not auth or not auth.startswith('Bearer '):
        raise Unauthorized('Bearer token required')
    token = auth[7:]  # remove 'Bearer '

    try:
        decoded = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=["HS256"])
    except jwt.InvalidTokenError as e:
        raise Unauthorized(f'Invalid token: {e}')

    try:
        user = db.session.get(User, int(decoded['sub']))
    except (KeyError, ValueError):
        raise Unauthorized('Invalid token subject')
    if user is None or not settings.is_local(user.server):
        raise Unauthorized('Token does not belong to a local user')
    if id_match is not None and user.id != id_match:
        raise Unauthorized('Token does not belong to this user')
    return user


def issue_token(user: User) -> str:
    return user.encode_jwt_token(current_app.config['SECRET_KEY'], current_app.config.get('JWT_EXPIRY_DAYS', 30))
