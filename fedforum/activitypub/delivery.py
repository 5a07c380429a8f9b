"""Outbound delivery of activities to remote inboxes"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import httpx
from flask import current_app

from fedforum import celery, httpx_client
from fedforum.constants import AP_CONTENT_TYPE, RESULT_SUCCESS, RESULT_FAILURE
from fedforum.activitypub.util import default_context, log_outgoing_ap


@dataclass
class DeliveryReport:
    """Outcome of delivering one activity to several inboxes, available once every attempt has settled"""
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class HttpDelivery:
    """POSTs activities straight to inboxes, concurrently when there are several."""

    def __init__(self, client: httpx.Client, timeout: float = 10.0, user_agent: str = 'fedforum', workers: int = 8,
                 logger: logging.Logger | None = None, log_to_db: bool = False):
        self.client = client
        self.timeout = timeout
        self.user_agent = user_agent
        self.workers = workers
        self.logger = logger or logging.getLogger(__name__)
        self.log_to_db = log_to_db

    def deliver(self, activity: dict, inbox: str) -> bool:
        body = activity if '@context' in activity else {'@context': default_context(), **activity}
        try:
            response = self.client.post(inbox, json=body, timeout=self.timeout,
                                        headers={'Content-Type': AP_CONTENT_TYPE, 'User-Agent': self.user_agent})
        except httpx.HTTPError as e:
            self.logger.warning(f'Could not deliver {activity.get("id")} to {inbox}: {e}')
            return False
        if not response.is_success:
            self.logger.warning(f'Delivery of {activity.get("id")} to {inbox} got {response.status_code}')
            return False
        return True

    def deliver_many(self, activity: dict, inboxes: list[str]) -> DeliveryReport:
        report = DeliveryReport()
        if not inboxes:
            return report
        with ThreadPoolExecutor(max_workers=min(self.workers, len(inboxes))) as executor:
            futures = {inbox: executor.submit(self.deliver, activity, inbox) for inbox in inboxes}
        for inbox, future in futures.items():
            try:
                delivered = future.result()
            except Exception:
                self.logger.exception(f'Delivery to {inbox} raised')
                delivered = False
            (report.succeeded if delivered else report.failed).append(inbox)
        return report


class QueuedDelivery(HttpDelivery):
    """Hands each delivery to a celery worker. A delivery counts as settled once it is queued."""

    def deliver(self, activity: dict, inbox: str) -> bool:
        post_request.delay(inbox, activity, self.timeout, self.user_agent, self.log_to_db)
        return True

    def deliver_many(self, activity: dict, inboxes: list[str]) -> DeliveryReport:
        report = DeliveryReport()
        for inbox in inboxes:
            try:
                self.deliver(activity, inbox)
            except Exception:
                self.logger.exception(f'Could not queue delivery to {inbox}')
                report.failed.append(inbox)
            else:
                report.succeeded.append(inbox)
        return report


def delivery_from_settings(settings, logger: logging.Logger | None = None) -> HttpDelivery:
    delivery_class = QueuedDelivery if settings.delivery_queue else HttpDelivery
    return delivery_class(httpx_client, timeout=settings.delivery_timeout, user_agent=settings.user_agent,
                          workers=settings.delivery_workers, logger=logger, log_to_db=settings.log_to_db)


@celery.task
def post_request(uri: str, body: dict, timeout: float = 10.0, user_agent: str = 'fedforum',
                 log_to_db: bool = False) -> bool:
    delivered = HttpDelivery(httpx_client, timeout=timeout, user_agent=user_agent,
                             logger=current_app.logger).deliver(body, uri)
    log_outgoing_ap(body.get('id'), body.get('type'), RESULT_SUCCESS if delivered else RESULT_FAILURE, body,
                    None if delivered else f'could not send to {uri}', log_to_db=log_to_db)
    return delivered
