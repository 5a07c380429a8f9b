from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from fedforum.activitypub.dispatch import UserDispatcher, GroupDispatcher
from fedforum.activitypub.identity import IdentityResolver
from fedforum.activitypub.settings import FederationSettings
from fedforum.activitypub.store import ActivityStore
from fedforum.post.util import PostService


@dataclass
class FederationCore:
    settings: FederationSettings
    resolver: IdentityResolver
    store: ActivityStore
    posts: PostService
    users: UserDispatcher
    groups: GroupDispatcher


def build_core(settings: FederationSettings, delivery) -> FederationCore:
    resolver = IdentityResolver(settings)
    store = ActivityStore(settings, delivery)
    posts = PostService(settings, resolver)
    return FederationCore(settings=settings, resolver=resolver, store=store, posts=posts,
                          users=UserDispatcher(settings, resolver, store, posts),
                          groups=GroupDispatcher(settings, resolver, store, posts))


def federation_core() -> FederationCore:
    """The core wired with the current app's settings and delivery capability"""
    return build_core(current_app.extensions['federation_settings'], current_app.extensions['delivery'])
