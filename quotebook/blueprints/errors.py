"""JSON error responses for the API."""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from quotebook import db
from quotebook.exceptions import QuotebookError

logger = logging.getLogger(__name__)

HTTP_ERROR_TYPES = {
    400: 'validation',
    401: 'unauthorized',
    403: 'forbidden',
    404: 'not_found',
    405: 'validation',
    409: 'state',
}


def error_response(message, error_type, status, fields=None):
    body = {'error': message, 'type': error_type}
    if fields:
        body['fields'] = fields
    return jsonify(body), status


def register_error_handlers(app):
    @app.errorhandler(QuotebookError)
    def handle_domain_error(e):
        db.session.rollback()
        if e.status_code >= 500:
            logger.error('%s: %s', type(e).__name__, e.message)
        return error_response(e.message, e.error_type, e.status_code, e.fields)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        error_type = HTTP_ERROR_TYPES.get(e.code, 'server')
        return error_response(e.description, error_type, e.code)

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(e):
        db.session.rollback()
        logger.exception('Database error')
        return error_response('An unexpected error occurred. Please try again.', 'server', 500)

    @app.errorhandler(500)
    def internal_error(e):
        db.session.rollback()
        original = getattr(e, 'original_exception', None)
        if original is not None:
            logger.error('Unhandled exception', exc_info=original)
        return error_response('An unexpected error occurred. Please try again.', 'server', 500)
