"""
Tests for the activity dispatch state machine.
"""
import dataclasses

import pytest

from conftest import create_activity
from fedforum import db
from fedforum.activitypub.core import build_core
from fedforum.errors import BadRequest, NotFound, InternalError, ActivityNotImplemented
from fedforum.group.util import add_follower, create_group
from fedforum.models import Activity, ActivityPubLog, Post, group_follower


def count(model):
    return db.session.execute(db.select(db.func.count(model.id))).scalar()


def follow_activity(actor, group, n=1):
    return {'id': f'{actor.uri}/follows/{n}', 'type': 'Follow', 'actor': actor.uri, 'object': group.uri}


class TestActivityTypes:

    def test_unknown_type_is_bad_request(self, core, alice, forum):
        with pytest.raises(BadRequest) as e:
            core.users.dispatch(alice, {'type': 'Foo', 'object': 'x'})
        assert 'Foo' in e.value.message
        with pytest.raises(BadRequest) as e:
            core.groups.handle_incoming(forum, {'id': 'https://remote.example/a/1', 'type': 'Foo'})
        assert 'Foo' in e.value.message

    @pytest.mark.parametrize('activity_type', ['Update', 'Add', 'Remove', 'Block', 'Undo', 'Reject'])
    def test_placeholder_types_are_not_implemented(self, core, alice, activity_type):
        with pytest.raises(ActivityNotImplemented):
            core.users.dispatch(alice, {'type': activity_type, 'object': 'x'})

    def test_groups_do_not_originate_likes(self, core, forum):
        with pytest.raises(ActivityNotImplemented):
            core.groups.dispatch(forum, {'id': 'https://test.localhost/activity/1', 'type': 'Like'})

    def test_users_do_not_accept_follows(self, core, alice, remote_users):
        with pytest.raises(ActivityNotImplemented):
            core.users.handle_incoming(alice, follow_activity(remote_users[0], alice))


class TestUserOutbox:

    def test_bare_object_is_wrapped_in_create(self, core, alice, forum):
        result = core.users.dispatch(alice, {'type': 'Note', 'content': 'Hello forum', 'to': [forum.uri]})

        assert result['type'] == 'Create'
        assert result['actor'] == alice.uri
        post = core.posts.find_by_uri(result['object']['id'])
        assert post.content == 'Hello forum'
        assert post.sender_id == alice.id
        assert post.groups == [forum]
        activity = core.store.find_by_uri(result['id'])
        assert activity.source_user_id == alice.id
        assert activity.target_post_id == post.id

    def test_local_post_uri_derives_from_uuid(self, core, alice):
        result = core.users.dispatch(alice, {'content': 'Hi'})
        post = core.posts.find_by_uri(result['object']['id'])
        assert post.uri == f'https://test.localhost/post/{post.uuid}'

    def test_reply_to_unknown_parent(self, core, alice):
        with pytest.raises(BadRequest):
            core.users.dispatch(alice, {'content': 'Hi', 'inReplyTo': 'https://remote.example/notes/404'})
        assert count(Post) == 0

    def test_reply_links_parent(self, core, alice):
        parent = core.users.dispatch(alice, {'content': 'Parent'})['object']['id']
        reply = core.users.dispatch(alice, {'content': 'Reply', 'inReplyTo': parent})['object']['id']
        assert core.posts.find_by_uri(reply).parent.uri == parent

    def test_delete_soft_deletes(self, core, alice):
        post_uri = core.users.dispatch(alice, {'content': 'Oops'})['object']['id']
        post = core.posts.find_by_uri(post_uri)

        result = core.users.dispatch(alice, {'type': 'Delete', 'object': post_uri})

        assert result['type'] == 'Delete'
        assert post.deleted is True
        assert core.posts.find_by_uuid(post.uuid).id == post.id

    def test_delete_remote_post_fails(self, core, alice, remote_users):
        core.groups.relay(create_group(core.resolver, 'lobby'),
                          create_activity(remote_users[0].uri, 'https://remote.example/notes/1'))
        with pytest.raises(BadRequest):
            core.users.dispatch(alice, {'type': 'Delete', 'object': 'https://remote.example/notes/1'})
        assert core.posts.find_by_uri('https://remote.example/notes/1').deleted is False

    def test_delete_unknown_post(self, core, alice):
        with pytest.raises(NotFound):
            core.users.dispatch(alice, {'type': 'Delete', 'object': 'https://test.localhost/post/nope'})

    def test_like_records_relation(self, core, alice):
        post_uri = core.users.dispatch(alice, {'content': 'Nice'})['object']['id']
        core.users.dispatch(alice, {'type': 'Like', 'object': post_uri})
        core.users.dispatch(alice, {'type': 'Like', 'object': post_uri})
        assert [post.uri for post in alice.liked] == [post_uri]
        assert count(Activity) == 3

    def test_like_unknown_post(self, core, alice):
        with pytest.raises(NotFound):
            core.users.dispatch(alice, {'type': 'Like', 'object': 'https://remote.example/notes/404'})


class TestGroupInbox:

    def test_same_activity_twice_is_stored_once(self, core, forum, remote_users, delivery):
        add_follower(forum, remote_users[0])
        payload = create_activity(remote_users[1].uri, 'https://remote.example/notes/1')

        core.groups.handle_incoming(forum, payload)
        core.groups.handle_incoming(forum, payload)

        assert count(Activity) == 1
        assert count(Post) == 1
        assert core.store.find_by_uri(payload['id']).destination_groups == {forum}
        # relayed only on first arrival
        assert len(delivery.inboxes('Create')) == 1

    def test_cross_posted_activity_accumulates_groups(self, core, forum, remote_users):
        other = create_group(core.resolver, 'other')
        payload = create_activity(remote_users[0].uri, 'https://remote.example/notes/1')

        core.groups.handle_incoming(forum, payload)
        core.groups.handle_incoming(other, payload)

        activity = core.store.find_by_uri(payload['id'])
        assert count(Activity) == 1
        assert activity.destination_groups == {forum, other}
        assert set(activity.target_post.groups) == {forum, other}

    def test_same_note_in_a_second_create_joins_the_group(self, core, forum, remote_users):
        other = create_group(core.resolver, 'other')
        note_id = 'https://remote.example/notes/1'

        core.groups.handle_incoming(forum, create_activity(remote_users[0].uri, note_id,
                                                           activity_id='https://remote.example/activities/a1'))
        core.groups.handle_incoming(other, create_activity(remote_users[0].uri, note_id,
                                                           activity_id='https://remote.example/activities/a2'))

        assert count(Post) == 1
        assert set(core.posts.find_by_uri(note_id).groups) == {forum, other}
        assert core.posts.find_top_level_by_group(other) == [core.posts.find_by_uri(note_id)]

    def test_create_stamps_audience(self, core, forum, remote_users):
        payload = create_activity(remote_users[0].uri, 'https://remote.example/notes/1')
        result = core.groups.handle_incoming(forum, payload)
        assert forum.followers_uri() in result['audience']

    def test_fan_out_excludes_sender(self, core, forum, remote_users, delivery):
        u1, u2, u3 = remote_users
        for user in remote_users:
            add_follower(forum, user)
        db.session.commit()

        core.groups.handle_incoming(forum, create_activity(u2.uri, 'https://remote.example/notes/1'))

        assert sorted(delivery.inboxes('Create')) == sorted([u1.inbox_uri(), u3.inbox_uri()])

    def test_fan_out_failure_keeps_activity(self, core, forum, remote_users, delivery):
        u1, u2, u3 = remote_users
        for user in remote_users:
            add_follower(forum, user)
        db.session.commit()
        delivery.failing.add(u1.inbox_uri())
        payload = create_activity(u2.uri, 'https://remote.example/notes/1')

        with pytest.raises(InternalError):
            core.groups.handle_incoming(forum, payload)

        assert u3.inbox_uri() in delivery.inboxes('Create')
        assert core.store.find_by_uri(payload['id']) is not None
        assert core.posts.find_by_uri('https://remote.example/notes/1') is not None

    def test_create_without_id(self, core, forum, remote_users):
        payload = create_activity(remote_users[0].uri, 'https://remote.example/notes/1')
        del payload['id']
        with pytest.raises(BadRequest):
            core.groups.handle_incoming(forum, payload)


class TestFollow:

    def test_follow_is_accepted(self, core, forum, remote_users, delivery):
        bob = remote_users[0]
        follow = follow_activity(bob, forum)

        result = core.groups.handle_incoming(forum, follow)

        assert result['type'] == 'Accept'
        assert result['actor'] == forum.uri
        assert result['object'] == follow['id']
        assert forum.is_followed_by(bob)
        assert delivery.inboxes('Accept') == [bob.inbox_uri()]
        accept = core.store.find_by_uri(result['id'])
        assert accept.source_group_id == forum.id
        assert accept.target_user_id == bob.id

    def test_follow_twice_returns_false(self, core, forum, remote_users, delivery):
        bob = remote_users[0]
        core.groups.handle_incoming(forum, follow_activity(bob, forum, 1))

        assert core.groups.handle_incoming(forum, follow_activity(bob, forum, 2)) is False

        rows = db.session.execute(db.select(group_follower).where(group_follower.c.group_id == forum.id)).all()
        assert len(rows) == 1
        assert len(delivery.inboxes('Accept')) == 1

    def test_follow_for_another_group(self, core, forum, remote_users):
        other = create_group(core.resolver, 'other')
        with pytest.raises(BadRequest):
            core.groups.handle_incoming(forum, follow_activity(remote_users[0], other))

    def test_accept_needs_known_follow(self, core, forum):
        with pytest.raises(NotFound):
            core.groups.dispatch(forum, {'id': 'https://test.localhost/activity/1', 'type': 'Accept',
                                         'actor': forum.uri, 'object': 'https://remote.example/follows/404'})

    def test_failed_accept_delivery_keeps_follower(self, core, forum, remote_users, delivery):
        bob = remote_users[0]
        delivery.failing.add(bob.inbox_uri())
        with pytest.raises(InternalError):
            core.groups.handle_incoming(forum, follow_activity(bob, forum))
        assert forum.is_followed_by(bob)


class TestUserInbox:

    def test_incoming_create_stores_post(self, core, alice, remote_users):
        payload = create_activity(remote_users[0].uri, 'https://remote.example/notes/1', to=[alice.uri])
        core.users.handle_incoming(alice, payload)
        core.users.handle_incoming(alice, payload)

        activity = core.store.find_by_uri(payload['id'])
        assert activity.destination_users == {alice}
        assert activity.target_post.sender_id == remote_users[0].id
        assert count(Post) == 1

    def test_incoming_like(self, core, alice, remote_users):
        post_uri = core.users.dispatch(alice, {'content': 'Hi'})['object']['id']
        bob = remote_users[0]
        core.users.handle_incoming(alice, {'id': 'https://remote.example/likes/1', 'type': 'Like',
                                           'actor': bob.uri, 'object': post_uri})
        assert [post.uri for post in bob.liked] == [post_uri]

    def test_incoming_accept(self, core, alice):
        payload = {'id': 'https://remote.example/accepts/1', 'type': 'Accept',
                   'actor': 'https://remote.example/group/news',
                   'object': {'id': f'{alice.uri}/follows/1', 'type': 'Follow', 'actor': alice.uri,
                              'object': 'https://remote.example/group/news'}}
        core.users.handle_incoming(alice, payload)

        activity = core.store.find_by_uri(payload['id'])
        assert activity.source().uri == 'https://remote.example/group/news'
        assert activity.target_user == alice
        assert activity.destination_users == {alice}


class TestActivityLog:

    def logged_core(self, core, delivery):
        return build_core(dataclasses.replace(core.settings, log_to_db=True), delivery)

    def test_nothing_logged_by_default(self, core, alice):
        core.users.dispatch(alice, {'content': 'Hi'})
        assert count(ActivityPubLog) == 0

    def test_outbox_submission_is_logged_as_outgoing(self, core, alice, delivery):
        result = self.logged_core(core, delivery).users.dispatch(alice, {'content': 'Hi'})
        log = db.session.execute(db.select(ActivityPubLog)).scalar_one()
        assert log.activity_id == result['id']
        assert log.direction == 'out'
        assert log.result == 'success'

    def test_inbox_delivery_is_logged_as_incoming(self, core, forum, remote_users, delivery):
        payload = create_activity(remote_users[0].uri, 'https://remote.example/notes/1')
        self.logged_core(core, delivery).groups.handle_incoming(forum, payload)
        log = db.session.execute(db.select(ActivityPubLog).filter_by(activity_id=payload['id'])).scalar_one()
        assert log.direction == 'in'

    def test_synthesized_accept_is_logged_as_outgoing(self, core, forum, remote_users, delivery):
        bob = remote_users[0]
        self.logged_core(core, delivery).groups.handle_incoming(forum, follow_activity(bob, forum))
        directions = {log.activity_type: log.direction
                      for log in db.session.execute(db.select(ActivityPubLog)).scalars()}
        assert directions['Follow'] == 'in'
        assert directions['Accept'] == 'out'
