"""
Inbox endpoints

GET lists the activities delivered to an actor. POST hands an inbound activity to the actor's
dispatcher. Signatures are not verified.
"""

from __future__ import annotations

from flask import current_app

from fedforum.activitypub.core import federation_core
from fedforum.activitypub.routes import bp
from fedforum.activitypub.routes.actors import _local_actor
from fedforum.activitypub.routes.helpers import make_activitypub_response, paged, inbox_uris, request_activity
from fedforum.models import Group


@bp.route('/<any(user, group):kind>/<name>/inbox', methods=['GET'], strict_slashes=False)
def actor_inbox(kind: str, name: str):
    core = federation_core()
    actor = _local_actor(core, kind, name)
    return paged(core, inbox_uris(actor), actor.inbox_uri())


@bp.route('/<any(user, group):kind>/<name>/inbox', methods=['POST'], strict_slashes=False)
def actor_inbox_post(kind: str, name: str):
    core = federation_core()
    actor = _local_actor(core, kind, name)
    data = request_activity()
    current_app.logger.info(f'{data.get("type")} {data.get("id")} arrived at {actor.uri}')
    dispatcher = core.groups if isinstance(actor, Group) else core.users
    return make_activitypub_response(dispatcher.handle_incoming(actor, data))
