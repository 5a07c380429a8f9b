import os

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))


class Config(object):
    SERVER_NAME = (os.environ.get('SERVER_NAME') or 'localhost').lower()
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guesss'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
                              'sqlite:///' + os.path.join(basedir, 'fedforum.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False     # set to true to see SQL in console
    CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL') or 'redis://localhost:6379/0'
    RESULT_BACKEND = os.environ.get('RESULT_BACKEND') or 'redis://localhost:6379/0'
    CELERY_ALWAYS_EAGER = bool(int(os.environ.get('CELERY_ALWAYS_EAGER', 0)))
    HTTP_PROTOCOL = os.environ.get('HTTP_PROTOCOL') or 'https'  # useful during development

    PAGE_LENGTH = int(os.environ.get('PAGE_LENGTH') or 100)
    DELIVERY_TIMEOUT = float(os.environ.get('DELIVERY_TIMEOUT') or 10)
    DELIVERY_QUEUE = bool(int(os.environ.get('DELIVERY_QUEUE', 0)))    # 1 = hand deliveries to celery
    DELIVERY_WORKERS = int(os.environ.get('DELIVERY_WORKERS') or 8)
    LOG_ACTIVITYPUB_TO_DB = bool(int(os.environ.get('LOG_ACTIVITYPUB_TO_DB', 0)))
    USER_AGENT = os.environ.get('USER_AGENT') or 'fedforum/0.1'
    JWT_EXPIRY_DAYS = int(os.environ.get('JWT_EXPIRY_DAYS') or 30)
