import pytest

from fedforum.activitypub.delivery import DeliveryReport


class TestConfig:
    """Test configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SERVER_NAME = 'test.localhost'
    HTTP_PROTOCOL = 'https'
    SECRET_KEY = 'test-secret-key'
    CELERY_BROKER_URL = 'memory://'
    CELERY_ALWAYS_EAGER = True
    PAGE_LENGTH = 100
    DELIVERY_QUEUE = False
    LOG_ACTIVITYPUB_TO_DB = False


class RecordingDelivery:
    """Stands in for HTTP delivery. Inboxes listed in ``failing`` report failure."""

    def __init__(self):
        self.sent = []
        self.failing = set()

    def deliver(self, activity, inbox):
        self.sent.append((activity, inbox))
        return inbox not in self.failing

    def deliver_many(self, activity, inboxes):
        report = DeliveryReport()
        for inbox in inboxes:
            (report.succeeded if self.deliver(activity, inbox) else report.failed).append(inbox)
        return report

    def inboxes(self, activity_type=None):
        return [inbox for activity, inbox in self.sent if activity_type is None or activity['type'] == activity_type]


@pytest.fixture
def test_app():
    """Create application for testing"""
    from fedforum import create_app, db

    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app(test_app):
    """Alias for test_app for compatibility"""
    return test_app


@pytest.fixture
def client(test_app):
    """Create test client"""
    return test_app.test_client()


@pytest.fixture
def delivery(app):
    recorder = RecordingDelivery()
    app.extensions['delivery'] = recorder
    return recorder


@pytest.fixture
def core(app, delivery):
    from fedforum.activitypub.core import federation_core
    return federation_core()


@pytest.fixture
def alice(core):
    from fedforum.user.utils import create_user
    return create_user(core.resolver, 'alice', 'Alice')


@pytest.fixture
def forum(core):
    from fedforum.group.util import create_group
    return create_group(core.resolver, 'forum', 'The Forum', 'A place to talk')


@pytest.fixture
def remote_users(core):
    """Three shadow users on a remote server"""
    from fedforum import db
    users = [core.resolver.actor_from_uri(f'https://remote.example/users/u{n}') for n in (1, 2, 3)]
    db.session.commit()
    return users


def create_activity(actor_uri, note_id, content='hello', activity_id=None, **extra):
    payload = {
        'id': activity_id or note_id + '/activity',
        'type': 'Create',
        'actor': actor_uri,
        'object': {'id': note_id, 'type': 'Note', 'content': content, 'attributedTo': actor_uri},
    }
    payload.update(extra)
    return payload
