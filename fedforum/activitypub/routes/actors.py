"""
Actor profile and collection endpoints

Endpoints:
    - /user/<name>, /group/<name> - actor profiles
    - /<kind>/<name>/followers - followers collection
    - /<kind>/<name>/following - following collection
    - /<kind>/<name>/likes - liked posts collection
"""

from __future__ import annotations

from fedforum.activitypub.core import federation_core
from fedforum.activitypub.objects import actor_object
from fedforum.activitypub.routes import bp
from fedforum.activitypub.routes.helpers import make_activitypub_response, paged
from fedforum.group.util import get_followers
from fedforum.models import User, Group
from fedforum.user.utils import get_following, get_likes

ACTOR_KINDS = {'user': User, 'group': Group}


def _local_actor(core, kind: str, name: str) -> User | Group:
    return core.resolver.resolve_local(name, ACTOR_KINDS[kind])


@bp.route('/<any(user, group):kind>/<name>', methods=['GET'])
def actor_profile(kind: str, name: str):
    core = federation_core()
    return make_activitypub_response(actor_object(_local_actor(core, kind, name)))


@bp.route('/<any(user, group):kind>/<name>/followers', methods=['GET'], strict_slashes=False)
def actor_followers(kind: str, name: str):
    core = federation_core()
    actor = _local_actor(core, kind, name)
    # only groups can be followed
    followers = get_followers(actor) if isinstance(actor, Group) else []
    return paged(core, followers, actor.followers_uri())


@bp.route('/<any(user, group):kind>/<name>/following', methods=['GET'], strict_slashes=False)
def actor_following(kind: str, name: str):
    core = federation_core()
    actor = _local_actor(core, kind, name)
    following = get_following(actor) if isinstance(actor, User) else []
    return paged(core, following, actor.following_uri())


@bp.route('/<any(user, group):kind>/<name>/likes', methods=['GET'], strict_slashes=False)
def actor_likes(kind: str, name: str):
    core = federation_core()
    actor = _local_actor(core, kind, name)
    likes = get_likes(actor) if isinstance(actor, User) else []
    return paged(core, likes, actor.likes_uri())
