from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError
from ..users.model import SessionUser
from .serialization import to_json

logger = logging.getLogger(__name__)


def current_user() -> SessionUser:
    user = SessionUser.from_session(session)
    if user is None:
        raise AuthenticationError("Authentication required")
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user()
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user.role.value not in allowed:
                raise AuthorizationError("Insufficient permissions")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def json_response(payload: Any, status: int = 200):
    return jsonify(to_json(payload)), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        body = {"error": exc.message, "kind": exc.kind.value}
        body.update(exc.details)
        return json_response(body, exc.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return json_response({"error": exc.description or exc.name}, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_response({"error": "Internal server error"}, 500)

    @app.after_request
    def log_request(response):
        logger.info("%s %s -> %s", request.method, request.path, response.status_code)
        return response
