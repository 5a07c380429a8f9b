"""Persistence and deduplication of activities"""
from __future__ import annotations

from typing import Sequence

from flask import current_app
from sqlalchemy.exc import IntegrityError

from fedforum import db
from fedforum.constants import RESULT_SUCCESS, RESULT_FAILURE
from fedforum.activitypub.collection import create_collection, create_paged_collection
from fedforum.activitypub.delivery import DeliveryReport
from fedforum.activitypub.util import new_activity_id, log_outgoing_ap
from fedforum.errors import BadRequest
from fedforum.models import Activity


class ActivityStore:
    def __init__(self, settings, delivery):
        self.settings = settings
        self.delivery = delivery

    def find_by_uri(self, uri: str) -> Activity | None:
        if not uri:
            return None
        return db.session.execute(db.select(Activity).filter_by(uri=uri)).scalar_one_or_none()

    def find_or_create(self, payload: dict) -> Activity:
        return self.find_by_uri(payload.get('id')) or self.create(payload)

    def create(self, payload: dict) -> Activity:
        """An unsaved activity shell. Its uri stays empty until it is saved."""
        if not isinstance(payload, dict) or not isinstance(payload.get('type'), str):
            raise BadRequest('Activity has no type')
        return Activity(type=payload['type'], activity_object=dict(payload))

    def save(self, activity: Activity) -> Activity:
        """Insert ``activity``, or fold it into the stored activity with the same uri.

        Folding only ever adds destinations. Returns the persisted record, which may not be ``activity``.
        """
        if activity.id is not None:
            db.session.flush()
            return activity

        uri = activity.uri or activity.activity_object.get('id')
        if not uri:
            uri = new_activity_id(self.settings)
            activity.activity_object = {**activity.activity_object, 'id': uri}

        existing = self.find_by_uri(uri)
        if existing is not None:
            return self.merge(existing, activity)

        activity.uri = uri
        try:
            with db.session.begin_nested():
                db.session.add(activity)
        except IntegrityError:
            existing = self.find_by_uri(uri)
            if existing is None:
                raise
            current_app.logger.info(f'Activity {uri} was stored concurrently, merging')
            return self.merge(existing, activity)
        return activity

    def merge(self, existing: Activity, incoming: Activity) -> Activity:
        for group in incoming.destination_groups:
            existing.add_destination(group)
        for user in incoming.destination_users:
            existing.add_destination(user)
        db.session.flush()
        return existing

    def create_collection(self, items: Sequence, collection_uri: str | None = None) -> dict:
        return create_collection(items, collection_uri)

    def create_paged_collection(self, items: Sequence, page_size: int | None, collection_uri: str,
                                page: int | None = 1) -> dict:
        return create_paged_collection(items, page_size or self.settings.page_length, collection_uri, page)

    def deliver_to(self, activity: Activity, inboxes: list[str]) -> DeliveryReport:
        """Send to every inbox. A failing inbox never stops delivery to the rest."""
        payload = activity.activity_object
        report = self.delivery.deliver_many(payload, list(dict.fromkeys(inboxes)))
        for inbox in report.failed:
            current_app.logger.warning(f'Delivery of {activity.uri} to {inbox} failed')
            log_outgoing_ap(activity.uri, activity.type, RESULT_FAILURE, payload, f'could not send to {inbox}',
                            log_to_db=self.settings.log_to_db)
        if report.succeeded and not self.settings.delivery_queue:
            log_outgoing_ap(activity.uri, activity.type, RESULT_SUCCESS, payload,
                            'delivered to ' + ', '.join(report.succeeded), log_to_db=self.settings.log_to_db)
        return report
