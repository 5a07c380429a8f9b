from __future__ import annotations

from flask import current_app

from fedforum.activitypub.delivery import DeliveryReport
from fedforum.errors import InternalError
from fedforum.group.util import get_followers
from fedforum.models import Activity, Group, User


def follower_inboxes(activity: Activity, group: Group, sender: User | Group | None = None) -> list[str]:
    """Inboxes of the group's followers, leaving out whoever originated the activity"""
    sender = sender or activity.source()
    sender_uri = sender.uri if sender is not None else activity.activity_object.get('actor')
    return [follower.inbox_uri() for follower in get_followers(group) if follower.uri != sender_uri]


def deliver_to_followers(store, activity: Activity, group: Group, sender: User | Group | None = None) -> DeliveryReport:
    """Relay ``activity`` to the followers of ``group``.

    Callers must have committed the activity first: a failed delivery is reported as an
    InternalError but the stored state stays.
    """
    inboxes = follower_inboxes(activity, group, sender)
    if not inboxes:
        return DeliveryReport()
    report = store.deliver_to(activity, inboxes)
    if not report.ok:
        current_app.logger.error(f'{group.uri} could not relay {activity.uri} to {len(report.failed)} of '
                                 f'{len(inboxes)} followers')
        raise InternalError(f'Delivery to {len(report.failed)} follower(s) failed')
    return report
