"""
ActivityPub Routes Package

Modules:
    - actors: actor profiles and their followers/following/likes collections
    - inbox: inbox collections and delivery of inbound activities
    - outbox: outbox collections and client submission of activities
    - posts: posts and their reply threads
    - helpers: shared utility functions
"""

from flask import Blueprint

bp = Blueprint('activitypub', __name__)

from . import (
    actors,
    inbox,
    outbox,
    posts,
)
