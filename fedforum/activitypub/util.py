from __future__ import annotations

import json
import uuid

from flask import current_app

from fedforum import db
from fedforum.constants import AP_CONTEXT, ACTIVITY_CREATE, ACTIVITY_ACCEPT, PATH_ACTIVITY, DIRECTION_IN, \
    DIRECTION_OUT
from fedforum.models import ActivityPubLog


def default_context():
    return AP_CONTEXT


def new_activity_id(settings) -> str:
    return f'{settings.base_url()}/{PATH_ACTIVITY}/{uuid.uuid4()}'


def wrap_in_create(settings, data: dict, actor_uri: str) -> dict:
    """Client submissions may be a bare object; those are treated as an implicit Create."""
    return {
        '@context': default_context(),
        'id': new_activity_id(settings),
        'type': ACTIVITY_CREATE,
        'actor': actor_uri,
        'object': data,
        'to': data.get('to', []),
        'cc': data.get('cc', []),
    }


def create_accept_activity(settings, actor_uri: str, follow_id: str, target_uri: str) -> dict:
    return {
        '@context': default_context(),
        'id': new_activity_id(settings),
        'type': ACTIVITY_ACCEPT,
        'actor': actor_uri,
        'object': follow_id,
        'target': target_uri,
    }


def object_uri(value) -> str | None:
    """The uri an activity's object refers to, whether given inline or by reference"""
    if isinstance(value, dict):
        value = value.get('id')
    return value if isinstance(value, str) and value else None


def log_incoming_ap(activity_id, activity_type, result, saved_json=None, message=None, log_to_db=False):
    _log_ap(DIRECTION_IN, activity_id, activity_type, result, saved_json, message, log_to_db)


def log_outgoing_ap(activity_id, activity_type, result, saved_json=None, message=None, log_to_db=False):
    _log_ap(DIRECTION_OUT, activity_id, activity_type, result, saved_json, message, log_to_db)


def _log_ap(direction, activity_id, activity_type, result, saved_json, message, log_to_db):
    current_app.logger.info(f'activity {direction}: {activity_id} Type: {activity_type}, Result: {result}, {message or ""}')
    if log_to_db:
        activity_log = ActivityPubLog(direction=direction, activity_id=activity_id or '', activity_type=activity_type,
                                      result=result)
        if message:
            activity_log.exception_message = message
        if saved_json:
            activity_log.activity_json = json.dumps(saved_json)
        db.session.add(activity_log)
        db.session.commit()


def ap_datetime(date_time) -> str:
    return date_time.isoformat() + '+00:00'
