"""
Activity dispatch

Users and groups get separate dispatch tables. A user's outbox accepts Create, Delete and Like from
its owner. A group never originates activities of its own: it relays Creates to its followers and
answers Follows with an Accept. Recognised types without a handler fail with ActivityNotImplemented,
anything else with BadRequest.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError

from fedforum import db
from fedforum.activitypub.fanout import deliver_to_followers
from fedforum.activitypub.util import wrap_in_create, new_activity_id, create_accept_activity, object_uri, \
    log_incoming_ap, log_outgoing_ap
from fedforum.constants import ACTIVITY_TYPES, ACTIVITY_CREATE, ACTIVITY_DELETE, ACTIVITY_LIKE, ACTIVITY_FOLLOW, \
    ACTIVITY_ACCEPT, RESULT_SUCCESS, RESULT_FAILURE
from fedforum.errors import FederationError, BadRequest, NotFound, Conflict, InternalError, ActivityNotImplemented
from fedforum.group.util import add_follower
from fedforum.models import Activity, User, Group
from fedforum.user.utils import add_like


class Dispatcher:
    outbox_handlers: dict[str, str] = {}
    inbox_handlers: dict[str, str] = {}

    def __init__(self, settings, resolver, store, posts):
        self.settings = settings
        self.resolver = resolver
        self.store = store
        self.posts = posts

    def dispatch(self, owner, payload: dict):
        """Handle an activity submitted to ``owner``'s outbox"""
        return self._route(self.outbox_handlers, owner, payload, outbox=True)

    def handle_incoming(self, owner, payload: dict):
        """Handle an activity delivered to ``owner``'s inbox"""
        return self._route(self.inbox_handlers, owner, payload, outbox=False)

    def prepare_outbox(self, owner, payload: dict) -> dict:
        return payload

    def _route(self, table: dict[str, str], owner, payload: dict, outbox: bool):
        if not isinstance(payload, dict):
            raise BadRequest('Activity must be a JSON object')
        log_ap = log_outgoing_ap if outbox else log_incoming_ap
        try:
            if outbox:
                payload = self.prepare_outbox(owner, payload)
            activity_type = payload.get('type')
            handler = table.get(activity_type)
            if handler is None:
                if activity_type in ACTIVITY_TYPES:
                    raise ActivityNotImplemented(f'{activity_type} activities are not supported')
                raise BadRequest(f'Invalid activity type {activity_type}')
            result = self._run(getattr(self, handler), owner, payload)
        except FederationError as e:
            db.session.rollback()
            log_ap(payload.get('id'), payload.get('type'), RESULT_FAILURE, payload, e.message,
                   log_to_db=self.settings.log_to_db)
            raise
        log_ap(payload.get('id'), payload.get('type'), RESULT_SUCCESS, payload, log_to_db=self.settings.log_to_db)
        return result

    def _run(self, handler, owner, payload: dict):
        """Storage errors never leave the dispatcher raw."""
        try:
            result = handler(owner, payload)
            db.session.commit()
            return result
        except NoResultFound as e:
            db.session.rollback()
            raise NotFound(str(e)) from e
        except IntegrityError as e:
            db.session.rollback()
            raise Conflict('Activity conflicts with stored state') from e
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f'Storage failure handling {payload.get("id")}')
            raise InternalError('Storage failure') from e
        except ValueError as e:
            db.session.rollback()
            raise BadRequest(str(e)) from e

    def _receive(self, owner, payload: dict) -> tuple[Activity, bool]:
        """Find or build the activity and record ``owner`` as a destination. True if owner is new to it."""
        if not payload.get('id'):
            raise BadRequest('Incoming activity has no id')
        activity = self.store.find_or_create(payload)
        return activity, activity.add_destination(owner)

    def _sender(self, payload: dict, kind=User) -> User | Group:
        actor_uri = object_uri(payload.get('actor'))
        if not actor_uri:
            raise BadRequest('Activity has no actor')
        return self.resolver.actor_from_uri(actor_uri, kind)

    def _post_from_object(self, payload: dict):
        uri = object_uri(payload.get('object'))
        if not uri:
            raise BadRequest(f'{payload.get("type")} activity has no object')
        post = self.posts.find_by_uri(uri)
        if post is None:
            raise NotFound(f'Post {uri} not found')
        return post


class UserDispatcher(Dispatcher):
    outbox_handlers = {
        ACTIVITY_CREATE: 'create',
        ACTIVITY_DELETE: 'delete',
        ACTIVITY_LIKE: 'like',
    }
    inbox_handlers = {
        ACTIVITY_CREATE: 'incoming_create',
        ACTIVITY_LIKE: 'incoming_like',
        ACTIVITY_ACCEPT: 'incoming_accept',
    }

    def prepare_outbox(self, user: User, payload: dict) -> dict:
        if payload.get('type') not in ACTIVITY_TYPES and payload.get('content') is not None:
            payload = wrap_in_create(self.settings, payload, user.uri)
        # the server names what its users publish
        return {**payload, 'id': new_activity_id(self.settings), 'actor': user.uri}

    def create(self, user: User, payload: dict) -> dict:
        post = self.posts.create_from_activity(payload, sender=user)
        payload = {**payload, 'object': {**payload['object'], 'id': post.uri, 'attributedTo': user.uri}}
        activity = self.store.create(payload)
        activity.set_source(user)
        activity.target_post = post
        return self.store.save(activity).activity_object

    def delete(self, user: User, payload: dict) -> dict:
        post = self._post_from_object(payload)
        if post.sender_id != user.id:
            raise BadRequest(f'{user.name} can only delete their own posts')
        self.posts.soft_delete(post)
        activity = self.store.create(payload)
        activity.set_source(user)
        activity.target_post = post
        return self.store.save(activity).activity_object

    def like(self, user: User, payload: dict) -> dict:
        post = self._post_from_object(payload)
        add_like(user, post)
        activity = self.store.create(payload)
        activity.set_source(user)
        activity.target_post = post
        return self.store.save(activity).activity_object

    def incoming_create(self, user: User, payload: dict) -> dict:
        activity, _ = self._receive(user, payload)
        if not activity.is_known():
            sender = self._sender(payload)
            activity.set_source(sender)
            activity.target_post = self.posts.create_from_activity(payload, sender=sender)
        return self.store.save(activity).activity_object

    def incoming_like(self, user: User, payload: dict) -> dict:
        activity, _ = self._receive(user, payload)
        if not activity.is_known():
            sender = self._sender(payload)
            post = self._post_from_object(payload)
            add_like(sender, post)
            activity.set_source(sender)
            activity.target_post = post
        return self.store.save(activity).activity_object

    def incoming_accept(self, user: User, payload: dict) -> dict:
        activity, _ = self._receive(user, payload)
        if not activity.is_known():
            activity.set_source(self._sender(payload, Group))
            activity.target_user = user
            current_app.logger.info(f'{payload.get("actor")} accepted follow {object_uri(payload.get("object"))} '
                                    f'from {user.uri}')
        return self.store.save(activity).activity_object


class GroupDispatcher(Dispatcher):
    outbox_handlers = {
        ACTIVITY_ACCEPT: 'accept',
        ACTIVITY_CREATE: 'relay',
    }
    inbox_handlers = {
        ACTIVITY_CREATE: 'relay',
        ACTIVITY_FOLLOW: 'follow',
    }

    def relay(self, group: Group, payload: dict) -> dict:
        """Store a Create addressed to the group and pass it on to the group's followers.

        The same activity may reach the group more than once, e.g. when cross-posted; it is relayed
        only the first time.
        """
        activity, new_destination = self._receive(group, payload)
        if not activity.is_known():
            sender = self._sender(payload)
            activity.set_source(sender)
            activity.target_post = self.posts.create_from_activity(payload, sender=sender, groups=[group])
        if activity.target_post is not None and group not in activity.target_post.groups:
            activity.target_post.groups.append(group)

        activity = self.store.save(activity)
        if not new_destination:
            return activity.activity_object

        activity.annotate_audience(group.followers_uri())
        db.session.commit()
        deliver_to_followers(self.store, activity, group)
        return activity.activity_object

    def follow(self, group: Group, payload: dict) -> dict | bool:
        target = object_uri(payload.get('object'))
        if target and target.rstrip('/') != group.uri:
            raise BadRequest(f'Follow for {target} delivered to {group.uri}')
        follower = self._sender(payload)
        activity, _ = self._receive(group, payload)
        if not activity.is_known():
            activity.set_source(follower)
        activity = self.store.save(activity)

        if not add_follower(group, follower):
            return False
        db.session.commit()
        current_app.logger.info(f'{follower.uri} now follows {group.uri}')

        accept = create_accept_activity(self.settings, group.uri, activity.uri, follower.uri)
        return self.dispatch(group, accept)

    def accept(self, group: Group, payload: dict) -> dict:
        follow_uri = object_uri(payload.get('object'))
        follow = self.store.find_by_uri(follow_uri)
        if follow is None:
            raise NotFound(f'Follow activity {follow_uri} not found')
        if follow.type != ACTIVITY_FOLLOW or follow.source_user is None:
            raise BadRequest(f'{follow_uri} is not a Follow from a user')
        requester = follow.source_user

        activity = self.store.create(payload)
        activity.set_source(group)
        activity.target_user = requester
        activity = self.store.save(activity)
        db.session.commit()

        report = self.store.deliver_to(activity, [requester.inbox_uri()])
        if not report.ok:
            raise InternalError(f'Could not deliver Accept to {requester.uri}')
        return activity.activity_object
