"""
Tests for federation settings, error rendering and CLI commands.
"""
from fedforum.activitypub.settings import FederationSettings
from fedforum.models import User


class TestFederationSettings:

    def test_from_config(self):
        settings = FederationSettings.from_config({'SERVER_NAME': 'Forum.Example:8443', 'HTTP_PROTOCOL': 'https',
                                                   'PAGE_LENGTH': '25'})
        assert settings.hostname == 'forum.example'
        assert settings.port == 8443
        assert settings.page_length == 25
        assert settings.base_url() == 'https://forum.example:8443'

    def test_page_length_is_at_least_one(self):
        settings = FederationSettings.from_config({'SERVER_NAME': 'forum.example', 'PAGE_LENGTH': '0'})
        assert settings.page_length == 1

    def test_default_port_is_local(self):
        settings = FederationSettings(scheme='https', hostname='forum.example')
        assert settings.is_local_address('https', 'forum.example', 443)
        assert settings.is_local_address('https', 'FORUM.example', None)
        assert not settings.is_local_address('http', 'forum.example', None)
        assert not settings.is_local_address('https', 'forum.example', 8443)
        assert settings.base_url() == 'https://forum.example'


class TestCli:

    def test_create_user(self, app):
        result = app.test_cli_runner().invoke(args=['create-user', 'carol', '--display-name', 'Carol'])
        assert result.exit_code == 0
        assert 'https://test.localhost/user/carol' in result.output
        assert User.query.filter_by(name='carol').one().display_name == 'Carol'

    def test_create_user_twice(self, app):
        runner = app.test_cli_runner()
        runner.invoke(args=['create-user', 'carol'])
        result = runner.invoke(args=['create-user', 'carol'])
        assert result.exit_code != 0
        assert 'already exists' in result.output

    def test_create_group_and_token(self, app):
        runner = app.test_cli_runner()
        assert runner.invoke(args=['create-group', 'lounge']).exit_code == 0
        runner.invoke(args=['create-user', 'dave'])
        result = runner.invoke(args=['token', 'dave'])
        assert result.exit_code == 0
        assert result.output.count('.') == 2
