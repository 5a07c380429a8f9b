"""
Outbox endpoints

POST requires a bearer token. A user's outbox only accepts its owner's token; a group's outbox
accepts any local user.
"""

from __future__ import annotations

from fedforum.activitypub.core import federation_core
from fedforum.activitypub.routes import bp
from fedforum.activitypub.routes.actors import _local_actor
from fedforum.activitypub.routes.helpers import make_activitypub_response, paged, outbox_uris, request_activity, \
    authenticated_local_user
from fedforum.models import Group


@bp.route('/<any(user, group):kind>/<name>/outbox', methods=['GET'], strict_slashes=False)
def actor_outbox(kind: str, name: str):
    core = federation_core()
    actor = _local_actor(core, kind, name)
    return paged(core, outbox_uris(actor), actor.outbox_uri())


@bp.route('/<any(user, group):kind>/<name>/outbox', methods=['POST'], strict_slashes=False)
def actor_outbox_post(kind: str, name: str):
    core = federation_core()
    actor = _local_actor(core, kind, name)
    if isinstance(actor, Group):
        authenticated_local_user(core)
        result = core.groups.dispatch(actor, request_activity())
    else:
        authenticated_local_user(core, id_match=actor.id)
        result = core.users.dispatch(actor, request_activity())
    headers = {'Location': result['id']} if isinstance(result, dict) and result.get('id') else None
    return make_activitypub_response(result, 201, headers)
