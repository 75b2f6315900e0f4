"""Bearer-token authentication on top of Flask-Login.

The request loader trusts the signed token alone and never touches the
database, so an unauthenticated request is rejected before any query runs.
"""
import uuid

from flask import request
from flask_login import LoginManager, UserMixin

from catalog.context import get_context
from catalog.envelope import failure


class TokenUser(UserMixin):
    def __init__(self, claims):
        # Raises ValueError for a well-signed token whose subject is not a UUID
        self.id = str(uuid.UUID(str(claims['userId'])))
        self.email = claims.get('email')
        self.claims = claims

    @property
    def user_uuid(self):
        return uuid.UUID(str(self.id))


def bearer_token():
    header = request.headers.get('Authorization', '')
    parts = header.split(' ')
    return parts[1] if len(parts) > 1 and parts[1] else None


def load_user_from_request(req):
    token = bearer_token()
    if not token:
        return None
    claims = get_context().tokens.verify(token)
    if claims is None:
        return None
    try:
        return TokenUser(claims)
    except (KeyError, ValueError):
        return None


def unauthorized():
    if not bearer_token():
        return failure('Access token required', 401)
    return failure('Invalid or expired token', 403)


class BearerLoginManager(LoginManager):
    """LoginManager that authenticates from the Authorization header only.

    Flask-Login consults a ``remember_token`` cookie ahead of the request
    loader. This API never sets that cookie, so whenever one arrives the
    bearer token is checked instead.
    """

    def _load_user_from_remember_cookie(self, cookie):
        return self._load_user_from_request(request)


def init_auth(login_manager):
    login_manager.request_loader(load_user_from_request)
    login_manager.unauthorized_handler(unauthorized)
