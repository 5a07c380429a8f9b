"""
Post endpoints

A deleted post answers 410 Gone; an unknown uuid answers 404.
"""

from __future__ import annotations

from fedforum.activitypub.core import federation_core
from fedforum.activitypub.objects import note_object
from fedforum.activitypub.routes import bp
from fedforum.activitypub.routes.helpers import make_activitypub_response
from fedforum.errors import Gone
from fedforum.post.util import PostThread


def _visible_post(core, uuid: str):
    post = core.posts.find_by_uuid(uuid)
    if post.deleted:
        raise Gone(f'Post {uuid} has been deleted')
    return post


@bp.route('/post/<uuid>', methods=['GET'])
def post_ap(uuid: str):
    core = federation_core()
    return make_activitypub_response(note_object(_visible_post(core, uuid)))


@bp.route('/post/<uuid>/replies', methods=['GET'], strict_slashes=False)
def post_replies(uuid: str):
    core = federation_core()
    post = _visible_post(core, uuid)
    replies = [reply for _, reply in PostThread(post, include_root=False) if not reply.deleted]
    return make_activitypub_response(core.store.create_collection(replies, post.uri + '/replies'))
