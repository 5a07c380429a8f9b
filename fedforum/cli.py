# if commands in this file are not working make sure you set the FLASK_APP environment variable.
# e.g. export FLASK_APP=forum.py
import click
from flask import current_app

from fedforum import db
from fedforum.activitypub.identity import IdentityResolver
from fedforum.auth.util import issue_token
from fedforum.errors import FederationError
from fedforum.group.util import create_group
from fedforum.user.utils import create_user


def register(app):
    @app.cli.command('init-db')
    def init_db():
        """Create all tables. Use 'flask db upgrade' on databases managed by migrations."""
        db.create_all()
        print('Done')

    @app.cli.command('create-user')
    @click.argument('name')
    @click.option('--display-name', default=None)
    @click.option('--summary', default='')
    def create_user_command(name, display_name, summary):
        """Create a local user."""
        resolver = IdentityResolver(current_app.extensions['federation_settings'])
        try:
            user = create_user(resolver, name, display_name, summary)
        except FederationError as e:
            raise click.ClickException(e.message)
        print(f'Created {user.uri}')

    @app.cli.command('create-group')
    @click.argument('name')
    @click.option('--display-name', default=None)
    @click.option('--summary', default='')
    def create_group_command(name, display_name, summary):
        """Create a local group."""
        resolver = IdentityResolver(current_app.extensions['federation_settings'])
        try:
            group = create_group(resolver, name, display_name, summary)
        except FederationError as e:
            raise click.ClickException(e.message)
        print(f'Created {group.uri}')

    @app.cli.command('token')
    @click.argument('name')
    def token_command(name):
        """Issue a bearer token for a local user."""
        resolver = IdentityResolver(current_app.extensions['federation_settings'])
        try:
            user = resolver.resolve_local(name)
        except FederationError as e:
            raise click.ClickException(e.message)
        print(issue_token(user))
