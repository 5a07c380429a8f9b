from flask import jsonify, current_app, request

from fedforum import db
from fedforum.errors import bp, FederationError


def error_response(kind: str, message: str, status_code: int):
    return jsonify({'error': kind, 'message': message}), status_code


@bp.app_errorhandler(FederationError)
def federation_error(error: FederationError):
    if error.status_code >= 500:
        db.session.rollback()
        current_app.logger.error(f'{request.method} {request.path} failed: {error.message}')
    return error_response(error.kind, error.message, error.status_code)


@bp.app_errorhandler(404)
def not_found_error(error):
    return error_response('NotFound', 'not found', 404)


@bp.app_errorhandler(405)
def method_not_allowed_error(error):
    return error_response('MethodNotAllowed', 'method not allowed', 405)


@bp.app_errorhandler(500)
def internal_error_500(error):
    db.session.rollback()
    return error_response('InternalError', 'internal server error', 500)
