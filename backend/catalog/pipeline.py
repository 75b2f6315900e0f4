"""Request pipeline hooks.

Order per request: CORS (flask-cors), global rate limit, write-path rate
limit, body size (MAX_CONTENT_LENGTH), request log, dispatch. Security
and rate-limit headers are added to every response on the way out.
"""
from datetime import datetime, timezone

from flask import current_app, g, request
from werkzeug.exceptions import RequestEntityTooLarge

from catalog.context import get_context
from catalog.errors import RateLimited

SECURITY_HEADERS = {
    'Content-Security-Policy': (
        "default-src 'self'; script-src 'self'; "
        "style-src 'self' 'unsafe-inline'; img-src 'self' data: https:"
    ),
    'Strict-Transport-Security': 'max-age=31536000; includeSubDomains; preload',
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'SAMEORIGIN',
    'Referrer-Policy': 'no-referrer',
    'X-DNS-Prefetch-Control': 'off',
    'Cross-Origin-Opener-Policy': 'same-origin',
    'Cross-Origin-Resource-Policy': 'same-origin',
}

REDACTED_HEADERS = frozenset({'authorization', 'cookie'})
WRITE_EXEMPT_METHODS = frozenset({'GET', 'OPTIONS'})


def redact_headers(headers):
    return {k: v for k, v in headers.items() if k.lower() not in REDACTED_HEADERS}


def client_address():
    return request.remote_addr or 'unknown'


def _is_api(path):
    return path == '/api' or path.startswith('/api/')


def _is_games_write(path, method):
    return method not in WRITE_EXEMPT_METHODS and (path == '/api/games' or path.startswith('/api/games/'))


def enforce_rate_limits():
    if request.method == 'OPTIONS' or not _is_api(request.path):
        return None
    ctx = get_context()
    key = client_address()
    result = ctx.global_limiter.hit(key)
    g.rate_limit = result
    if not result.allowed:
        current_app.logger.warning(f"[ratelimit] global quota exceeded for {key}")
        raise RateLimited()
    if _is_games_write(request.path, request.method):
        write_result = ctx.write_limiter.hit(key)
        # Report whichever budget is closer to running out
        if write_result.remaining < result.remaining:
            g.rate_limit = write_result
        if not write_result.allowed:
            current_app.logger.warning(f"[ratelimit] write quota exceeded for {key}")
            raise RateLimited()
    return None


def enforce_body_limit():
    limit = current_app.config.get('MAX_CONTENT_LENGTH')
    length = request.content_length
    if limit is not None and length is not None and length > limit:
        raise RequestEntityTooLarge()
    return None


def log_request():
    current_app.logger.info(
        f"[request] {datetime.now(timezone.utc).isoformat()} {request.method} {request.path} "
        f"ip={client_address()} ua={request.headers.get('User-Agent', '-')}"
    )
    current_app.logger.debug(f"[request] headers={redact_headers(request.headers)}")


def add_response_headers(response):
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    result = g.get('rate_limit')
    if result is not None:
        for name, value in result.headers().items():
            response.headers[name] = value
    return response


def init_pipeline(app):
    app.before_request(enforce_rate_limits)
    app.before_request(enforce_body_limit)
    app.before_request(log_request)
    app.after_request(add_response_headers)
