"""
Actor and Note representations

Actors serialise identically whether they are local or shadow copies of remote actors; the
collection endpoints hang off the actor's uri with a trailing slash.
"""
from __future__ import annotations

from typing import Literal, Optional, TypedDict, NotRequired

from fedforum.activitypub.util import default_context, ap_datetime
from fedforum.constants import OBJECT_NOTE, AP_PUBLIC
from fedforum.models import User, Group, Post

ActorObject = TypedDict('ActorObject', {
    '@context': str,
    'id': str,
    'type': Literal['Person', 'Group'],
    'name': str,
    'preferredUsername': str,
    'summary': str,
    'icon': str,
    'inbox': str,
    'outbox': str,
    'followers': str,
    'following': str,
    'liked': NotRequired[str],
    'published': NotRequired[str],
})


class NoteObject(TypedDict):
    id: str
    type: str
    attributedTo: str
    content: str
    to: list[str]
    audience: list[str]
    published: str
    name: NotRequired[Optional[str]]
    inReplyTo: NotRequired[str]
    source: NotRequired[dict]
    replies: NotRequired[str]


def actor_object(actor: User | Group) -> ActorObject:
    obj = ActorObject({
        '@context': default_context(),
        'id': actor.uri,
        'type': actor.actor_type,
        'name': actor.display(),
        'preferredUsername': actor.name,
        'summary': actor.summary or '',
        'icon': actor.icon or '',
        'inbox': actor.inbox_uri(),
        'outbox': actor.outbox_uri(),
        'followers': actor.followers_uri(),
        'following': actor.following_uri(),
    })
    if isinstance(actor, User):
        obj['liked'] = actor.likes_uri()
    if actor.created_at:
        obj['published'] = ap_datetime(actor.created_at)
    return obj


def note_object(post: Post) -> NoteObject:
    group_uris = [group.uri for group in post.groups]
    note = NoteObject(id=post.uri, type=OBJECT_NOTE, attributedTo=post.sender.uri, content=post.content,
                      to=[AP_PUBLIC] + group_uris, audience=group_uris, published=ap_datetime(post.timestamp),
                      replies=post.uri + '/replies')
    if post.subject:
        note['name'] = post.subject
    if post.parent_uri:
        note['inReplyTo'] = post.parent_uri
    if post.source:
        note['source'] = {'content': post.source, 'mediaType': 'text/markdown'}
    return note
