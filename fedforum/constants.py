AP_CONTEXT = 'https://www.w3.org/ns/activitystreams'
AP_CONTENT_TYPE = 'application/activity+json'
AP_PUBLIC = 'https://www.w3.org/ns/activitystreams#Public'

# path segments used when deriving local uris
PATH_USER = 'user'
PATH_GROUP = 'group'
PATH_POST = 'post'
PATH_ACTIVITY = 'activity'

ACTIVITY_CREATE = 'Create'
ACTIVITY_DELETE = 'Delete'
ACTIVITY_FOLLOW = 'Follow'
ACTIVITY_ACCEPT = 'Accept'
ACTIVITY_REJECT = 'Reject'
ACTIVITY_LIKE = 'Like'
ACTIVITY_UPDATE = 'Update'
ACTIVITY_ADD = 'Add'
ACTIVITY_REMOVE = 'Remove'
ACTIVITY_BLOCK = 'Block'
ACTIVITY_UNDO = 'Undo'

ACTIVITY_TYPES = (ACTIVITY_CREATE, ACTIVITY_DELETE, ACTIVITY_FOLLOW, ACTIVITY_ACCEPT, ACTIVITY_REJECT,
                  ACTIVITY_LIKE, ACTIVITY_UPDATE, ACTIVITY_ADD, ACTIVITY_REMOVE, ACTIVITY_BLOCK, ACTIVITY_UNDO)

ACTOR_PERSON = 'Person'
ACTOR_GROUP = 'Group'
OBJECT_NOTE = 'Note'

DIRECTION_IN = 'in'
DIRECTION_OUT = 'out'
RESULT_SUCCESS = 'success'
RESULT_FAILURE = 'failure'
