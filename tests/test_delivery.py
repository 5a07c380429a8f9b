"""
Tests for outbound delivery.
"""
from unittest.mock import Mock, patch

import httpx

from fedforum import db
from fedforum.activitypub.delivery import HttpDelivery, QueuedDelivery, post_request
from fedforum.models import ActivityPubLog

ACTIVITY = {'id': 'https://test.localhost/activity/1', 'type': 'Accept'}


def response(status_code):
    return Mock(status_code=status_code, is_success=200 <= status_code < 300)


class TestHttpDelivery:

    def test_success(self):
        client = Mock()
        client.post.return_value = response(202)

        assert HttpDelivery(client, timeout=3).deliver(ACTIVITY, 'https://remote.example/inbox') is True

        args, kwargs = client.post.call_args
        assert args == ('https://remote.example/inbox',)
        assert kwargs['json']['@context'] == 'https://www.w3.org/ns/activitystreams'
        assert kwargs['headers']['Content-Type'] == 'application/activity+json'
        assert kwargs['timeout'] == 3

    def test_error_status(self):
        client = Mock()
        client.post.return_value = response(500)
        assert HttpDelivery(client).deliver(ACTIVITY, 'https://remote.example/inbox') is False

    def test_transport_error(self):
        client = Mock()
        client.post.side_effect = httpx.ConnectError('connection refused')
        assert HttpDelivery(client).deliver(ACTIVITY, 'https://remote.example/inbox') is False

    def test_deliver_many_settles_every_target(self):
        def post(inbox, **kwargs):
            if 'down' in inbox:
                raise httpx.ReadTimeout('timed out')
            return response(200)

        client = Mock()
        client.post.side_effect = post
        inboxes = ['https://a.example/inbox', 'https://down.example/inbox', 'https://c.example/inbox']

        report = HttpDelivery(client, workers=3).deliver_many(ACTIVITY, inboxes)

        assert sorted(report.succeeded) == ['https://a.example/inbox', 'https://c.example/inbox']
        assert report.failed == ['https://down.example/inbox']
        assert client.post.call_count == 3

    def test_deliver_many_nothing_to_do(self):
        client = Mock()
        assert HttpDelivery(client).deliver_many(ACTIVITY, []).ok
        client.post.assert_not_called()


class TestQueuedDelivery:

    def test_each_target_is_queued(self):
        with patch('fedforum.activitypub.delivery.post_request') as task:
            report = QueuedDelivery(Mock(), timeout=5, user_agent='ua').deliver_many(
                ACTIVITY, ['https://a.example/inbox', 'https://b.example/inbox'])
        assert report.ok
        assert task.delay.call_count == 2
        task.delay.assert_any_call('https://a.example/inbox', ACTIVITY, 5, 'ua', False)

    def test_post_request_task_logs(self, app):
        with patch('fedforum.activitypub.delivery.httpx_client') as client:
            client.post.return_value = response(200)
            assert post_request('https://remote.example/inbox', ACTIVITY, log_to_db=True) is True

        log = db.session.execute(db.select(ActivityPubLog)).scalar_one()
        assert log.direction == 'out'
        assert log.result == 'success'
        assert log.activity_id == ACTIVITY['id']
