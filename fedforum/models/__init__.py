from fedforum.models.base import utcnow, TimestampMixin, SoftDeleteMixin
from fedforum.models.server import Server
from fedforum.models.actor import User, Group, group_follower, user_like
from fedforum.models.content import Post, post_group
from fedforum.models.activitypub import Activity, ActivityPubLog, activity_destination_group, \
    activity_destination_user

__all__ = [
    'utcnow', 'TimestampMixin', 'SoftDeleteMixin',
    'Server', 'User', 'Group', 'group_follower', 'user_like',
    'Post', 'post_group',
    'Activity', 'ActivityPubLog', 'activity_destination_group', 'activity_destination_user',
]
