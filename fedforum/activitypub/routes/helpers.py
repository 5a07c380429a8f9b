"""
Helper functions for ActivityPub routes
"""

from __future__ import annotations
from typing import Any, TypeAlias
import json

from flask import request

from fedforum import db
from fedforum.activitypub.core import FederationCore
from fedforum.auth.util import authorise_api_user
from fedforum.constants import AP_CONTENT_TYPE
from fedforum.errors import BadRequest
from fedforum.models import Activity, User, Group, activity_destination_group, activity_destination_user

JsonDict: TypeAlias = dict[str, Any]
HttpStatusCode: TypeAlias = int


def make_activitypub_response(data: Any, status_code: HttpStatusCode = 200, headers: dict | None = None):
    response_headers = {'Content-Type': AP_CONTENT_TYPE}
    if headers:
        response_headers.update(headers)
    return json.dumps(data), status_code, response_headers


def requested_page() -> int:
    return request.args.get('page', 1, type=int)


def request_activity() -> JsonDict:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return data


def authenticated_local_user(core: FederationCore, id_match: int | None = None) -> User:
    return authorise_api_user(request.headers.get('Authorization'), core.settings, id_match=id_match)


def paged(core: FederationCore, items: list, collection_uri: str):
    return make_activitypub_response(
        core.store.create_paged_collection(items, core.settings.page_length, collection_uri, requested_page()))


def inbox_uris(actor: User | Group) -> list[str]:
    if isinstance(actor, Group):
        query = db.select(Activity.uri).join(activity_destination_group,
                                             activity_destination_group.c.activity_id == Activity.id) \
            .where(activity_destination_group.c.group_id == actor.id)
    else:
        query = db.select(Activity.uri).join(activity_destination_user,
                                             activity_destination_user.c.activity_id == Activity.id) \
            .where(activity_destination_user.c.user_id == actor.id)
    return db.session.execute(query.order_by(Activity.created_at.desc(), Activity.id.desc())).scalars().all()


def outbox_uris(actor: User | Group) -> list[str]:
    if isinstance(actor, Group):
        query = db.select(Activity.uri).where(Activity.source_group_id == actor.id)
    else:
        query = db.select(Activity.uri).where(Activity.source_user_id == actor.id)
    return db.session.execute(query.order_by(Activity.created_at.desc(), Activity.id.desc())).scalars().all()
