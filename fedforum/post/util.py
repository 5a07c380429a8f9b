from __future__ import annotations

import time
import uuid
from typing import Iterator

import arrow
from flask import current_app

from fedforum import db
from fedforum.constants import PATH_POST, AP_PUBLIC
from fedforum.errors import BadRequest, NotFound
from fedforum.instance.util import find_or_create_server, server_from_uri
from fedforum.models import Post, Group, User, post_group, utcnow


class PostThread:
    """Depth-first walk of a post and its replies.

    Children are fetched only when the walk reaches their parent, and every ``iter()`` starts a fresh walk.
    Yields ``(depth, post)`` with the root at depth 0.
    """

    def __init__(self, root: Post, include_root: bool = True):
        self.root = root
        self.include_root = include_root

    def __iter__(self) -> Iterator[tuple[int, Post]]:
        stack = [(0, self.root)]
        while stack:
            depth, post = stack.pop()
            if depth > 0 or self.include_root:
                yield depth, post
            children = post.children.order_by(None).order_by(Post.timestamp.desc(), Post.id.desc()).all()
            stack.extend((depth + 1, child) for child in children)


class PostService:
    def __init__(self, settings, resolver):
        self.settings = settings
        self.resolver = resolver

    def namespace(self) -> uuid.UUID:
        return uuid.uuid5(uuid.NAMESPACE_DNS, self.settings.hostname)

    def new_uuid(self, data: str = '') -> str:
        return str(uuid.uuid5(self.namespace(), f'{time.time_ns()}{uuid.uuid4().hex}{data}'))

    def uri_from_uuid(self, post_uuid: str) -> str:
        return f'{self.settings.base_url()}/{PATH_POST}/{post_uuid}'

    def is_local(self, post: Post) -> bool:
        return self.settings.is_local(post.server)

    def find_by_uri(self, uri: str) -> Post | None:
        return db.session.execute(db.select(Post).filter_by(uri=uri)).scalar_one_or_none()

    def find_by_uuid(self, post_uuid: str) -> Post:
        """Deleted posts are returned too, so callers can tell 'gone' from 'never existed'."""
        post = db.session.execute(db.select(Post).filter_by(uuid=post_uuid)).scalar_one_or_none()
        if post is None:
            raise NotFound(f'Post {post_uuid} not found')
        return post

    def create_from_activity(self, activity: dict, sender: User | None = None, groups: list[Group] | None = None) -> Post:
        """Store the post carried by a Create activity and return it.

        Remote senders and groups named in the addressing become shadow actors. A post whose uri we
        already hold gains any of ``groups`` it lacks and is otherwise returned unchanged.
        """
        obj = activity.get('object')
        if not isinstance(obj, dict) or 'content' not in obj:
            raise BadRequest('Create activity has no object with content')

        if sender is None:
            sender_uri = activity.get('actor') or obj.get('attributedTo')
            if not isinstance(sender_uri, str):
                raise BadRequest('Create activity has no actor')
            sender = self.resolver.actor_from_uri(sender_uri, User)

        local_sender = self.settings.is_local(sender.server)
        if not local_sender and obj.get('id'):
            existing = self.find_by_uri(obj['id'])
            if existing is not None:
                for group in groups or []:
                    if group not in existing.groups:
                        existing.groups.append(group)
                return existing

        post_uuid = self.new_uuid(obj.get('content') or '')
        if local_sender:
            uri = self.uri_from_uuid(post_uuid)
            server = sender.server
        else:
            uri = obj.get('id') or self.uri_from_uuid(post_uuid)
            try:
                server = find_or_create_server(*server_from_uri(uri))
            except ValueError as e:
                raise BadRequest(str(e))

        parent = None
        parent_uri = obj.get('inReplyTo')
        if parent_uri:
            parent = self.find_by_uri(parent_uri)
            if parent is None:
                raise BadRequest(f'Parent post {parent_uri} is unknown')

        post = Post(uuid=post_uuid, uri=uri, server=server, parent_uri=parent_uri,
                    subject=obj.get('name') or obj.get('summary'), content=obj.get('content') or '',
                    source=self._source_text(obj.get('source')),
                    timestamp=self._published(obj.get('published')) or utcnow())
        db.session.add(post)
        post.sender = sender
        post.parent = parent
        for group in list(groups or []) + self.groups_from_addressing(obj, activity):
            if group not in post.groups:
                post.groups.append(group)
        db.session.flush()
        current_app.logger.info(f'Stored post {post.uri} from {sender.uri}')
        return post

    def groups_from_addressing(self, obj: dict, activity: dict) -> list[Group]:
        uris = []
        for source in (obj, activity):
            for field in ('audience', 'to', 'cc'):
                value = source.get(field)
                if isinstance(value, str):
                    value = [value]
                for uri in value or []:
                    if isinstance(uri, str) and uri not in uris and uri != AP_PUBLIC and not uri.rstrip('/').endswith('/followers'):
                        uris.append(uri)

        groups = []
        for uri in uris:
            actor = self.resolver.find_by_uri(uri, Group)
            if actor is None:
                actor = self._group_from_uri(uri)
            if actor is not None and actor not in groups:
                groups.append(actor)
        return groups

    def _group_from_uri(self, uri: str) -> Group | None:
        from fedforum.activitypub.identity import stub_from_uri
        try:
            stub = stub_from_uri(uri)
        except BadRequest:
            return None
        if stub.kind is not Group:
            return None
        if self.settings.is_local_address(stub.scheme, stub.hostname, stub.port):
            return self.resolver.resolve_local(stub.name, Group)
        return self.resolver.find_or_create_remote(stub)

    def soft_delete(self, post: Post) -> Post:
        if not self.is_local(post):
            raise BadRequest("Can't delete a non-local post")
        post.soft_delete()
        return post

    def get_replies(self, post: Post) -> list[Post]:
        return post.children.all()

    def get_parent(self, post: Post) -> Post | None:
        if post.parent is None and post.parent_uri:
            # the parent may have arrived after the reply
            post.parent = self.find_by_uri(post.parent_uri)
        return post.parent

    def count_children(self, post: Post) -> int:
        return sum(1 for _ in PostThread(post, include_root=False))

    def find_top_level_by_group(self, group: Group) -> list[Post]:
        return db.session.execute(
            db.select(Post).join(post_group, post_group.c.post_id == Post.id)
            .where(post_group.c.group_id == group.id, Post.parent_id.is_(None), Post.deleted.is_(False))
            .order_by(Post.timestamp.desc(), Post.id.desc())
        ).scalars().all()

    @staticmethod
    def _source_text(source) -> str | None:
        if isinstance(source, dict):
            return source.get('content')
        return source

    @staticmethod
    def _published(published):
        if published:
            try:
                return arrow.get(published).to('UTC').naive
            except (TypeError, ValueError):
                current_app.logger.warning(f'Ignoring unparseable published date {published!r}')
        return None
