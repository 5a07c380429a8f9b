import logging
from logging.handlers import RotatingFileHandler
import os
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from werkzeug.middleware.proxy_fix import ProxyFix
from celery import Celery
import httpx

from config import Config


db = SQLAlchemy(session_options={"autoflush": False})
migrate = Migrate()
celery = Celery(__name__, broker=Config.CELERY_BROKER_URL)
httpx_client = httpx.Client(http2=True)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1)

    db.init_app(app)
    migrate.init_app(app, db, render_as_batch=True)
    celery.conf.update(app.config)
    celery.conf.update(CELERY_ROUTES={
        'fedforum.activitypub.delivery.post_request': {'queue': 'send'},
    })

    from fedforum.activitypub.settings import FederationSettings
    from fedforum.activitypub.delivery import delivery_from_settings
    settings = FederationSettings.from_config(app.config)
    app.extensions['federation_settings'] = settings
    app.extensions['delivery'] = delivery_from_settings(settings, app.logger)

    from fedforum.errors import bp as errors_bp
    app.register_blueprint(errors_bp)
    from fedforum.activitypub.routes import bp as activitypub_bp
    app.register_blueprint(activitypub_bp)

    from fedforum import cli
    cli.register(app)

    # log rotation
    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = RotatingFileHandler('logs/fedforum.log',
                                           maxBytes=1002400, backupCount=15)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s '
            '[in %(pathname)s:%(lineno)d]'))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Started!')

    return app


from fedforum import models
