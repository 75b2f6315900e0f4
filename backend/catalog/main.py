import time
from datetime import datetime, timezone

from flask import Blueprint, request, current_app
from sqlalchemy import text

from catalog import db
from catalog.context import get_context
from catalog.envelope import success, failure
from catalog.models import User
from catalog.services.games import is_unique_violation
from catalog.services.validation import AUTH_ERROR_STATUS, LoginRequest, RegisterRequest, validate

main = Blueprint('main', __name__)


def _auth_payload(user):
    token = get_context().tokens.issue(str(user.id), user.email)
    return {'token': token, 'user': user.to_dict()}


@main.route('/auth/register', methods=['POST'])
def register():
    payload = validate(RegisterRequest, request.get_json(silent=True), status=AUTH_ERROR_STATUS)
    try:
        if User.query.filter_by(email=payload.email).first():
            return failure('User already exists', 409)

        user = User(email=payload.email, name=payload.name)
        user.set_password(payload.password)
        db.session.add(user)
        db.session.commit()
        current_app.logger.info(f"[auth.register] user={user.id}")
        return success(_auth_payload(user), message='User registered successfully', status=201)
    except Exception as exc:
        db.session.rollback()
        if is_unique_violation(exc):
            return failure('User already exists', 409)
        current_app.logger.error(f"[auth.register] failed: {exc}")
        return failure('Internal server error', 500)


@main.route('/auth/login', methods=['POST'])
def login():
    payload = validate(LoginRequest, request.get_json(silent=True), status=AUTH_ERROR_STATUS)
    try:
        user = User.query.filter_by(email=payload.email).first()
        if not user or not user.check_password(payload.password):
            return failure('Invalid credentials', 401)
        return success(_auth_payload(user), message='Login successful')
    except Exception as exc:
        current_app.logger.error(f"[auth.login] failed: {exc}")
        return failure('Internal server error', 500)


@main.route('/health', methods=['GET'])
def health():
    try:
        start = time.perf_counter()
        db.session.execute(text('SELECT 1'))
        elapsed_ms = int((time.perf_counter() - start) * 1000)
    except Exception as exc:
        db.session.rollback()
        current_app.logger.error(f"[health] store check failed: {exc}")
        return failure('Health check failed', 500)
    return success({
        'status': 'healthy',
        'database': 'connected',
        'dbResponseTime': f'{elapsed_ms}ms',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'version': current_app.config.get('API_VERSION', '1.0.0'),
    })
