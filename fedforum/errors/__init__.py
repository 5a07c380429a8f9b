from flask import Blueprint

bp = Blueprint('errors', __name__)


class FederationError(Exception):
    """Base for every error the federation core reports to its callers"""
    status_code = 500
    kind = 'InternalError'

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message or self.kind


class BadRequest(FederationError):
    """Malformed or semantically invalid activity"""
    status_code = 400
    kind = 'BadRequest'


class Unauthorized(FederationError):
    status_code = 401
    kind = 'Unauthorized'


class NotFound(FederationError):
    status_code = 404
    kind = 'NotFound'


class Conflict(FederationError):
    status_code = 409
    kind = 'Conflict'


class Gone(FederationError):
    """The content existed but has been deleted"""
    status_code = 410
    kind = 'Gone'


class InternalError(FederationError):
    status_code = 500
    kind = 'InternalError'


class ActivityNotImplemented(FederationError):
    """A recognised activity type this server does not support yet"""
    status_code = 501
    kind = 'NotImplemented'


from fedforum.errors import handlers
