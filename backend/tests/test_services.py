import sqlite3
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.datastructures import MultiDict

from catalog import create_app
from catalog.context import CatalogContext
from catalog.errors import ConfigurationError, ValidationFailed
from catalog.services.games import ListQuery, is_unique_violation, pagination_meta
from catalog.services.ratelimit import RateLimiter
from catalog.services.tokens import TokenService
from catalog.services.validation import GamePayload, LoginRequest, RegisterRequest, parse_game_id, validate


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def test_token_roundtrip():
    tokens = TokenService('s3cret')
    uid = str(uuid.uuid4())
    claims = tokens.verify(tokens.issue(uid, 'a@b.com'))
    assert claims['userId'] == uid
    assert claims['email'] == 'a@b.com'


def test_token_rejects_garbage_and_expiry():
    tokens = TokenService('s3cret')
    assert tokens.verify(None) is None
    assert tokens.verify('') is None
    assert tokens.verify('abc.def.ghi') is None
    old = tokens.issue('u', 'a@b.com', now=datetime.now(timezone.utc) - timedelta(days=2))
    assert tokens.verify(old) is None


def test_token_requires_secret():
    with pytest.raises(ConfigurationError):
        TokenService('')
    with pytest.raises(ConfigurationError):
        TokenService(None)


def test_create_app_fails_fast_without_jwt_secret():
    config = type('NoSecret', (), {'TESTING': True, 'JWT_SECRET': None})
    with pytest.raises(ConfigurationError):
        create_app(config)


# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------

class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_rate_limiter_window_resets():
    clock = FakeClock()
    limiter = RateLimiter(limit=2, window=60, clock=clock)
    assert limiter.hit('a').allowed
    second = limiter.hit('a')
    assert second.allowed and second.remaining == 0
    third = limiter.hit('a')
    assert not third.allowed
    assert third.reset_in == 60
    # Other clients have their own budget
    assert limiter.hit('b').allowed

    clock.now += 61
    fresh = limiter.hit('a')
    assert fresh.allowed
    assert fresh.remaining == 1


def test_rate_limiter_headers():
    limiter = RateLimiter(limit=5, window=900, clock=FakeClock())
    headers = limiter.hit('x').headers()
    assert headers == {
        'RateLimit-Policy': '5;w=900',
        'RateLimit-Limit': '5',
        'RateLimit-Remaining': '4',
        'RateLimit-Reset': '900',
    }


def test_rate_limiter_prunes_expired_clients():
    clock = FakeClock()
    limiter = RateLimiter(limit=1, window=10, clock=clock)
    limiter.hit('gone')
    clock.now += 30
    limiter.hit('new')
    assert 'gone' not in limiter._hits


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def test_game_payload_rounds_and_nulls():
    payload = validate(GamePayload, {
        'name': ' Hades ', 'genre': 'Roguelike', 'rating': '9.25', 'price': 24.994,
        'description': '   ', 'releaseDate': '', 'platform': None, 'extra': True,
    })
    assert payload.to_record() == {
        'name': 'Hades',
        'genre': 'Roguelike',
        'rating': 9.2,
        'price': 24.99,
        'description': None,
        'release_date': None,
        'platform': None,
    }


def test_game_payload_errors_carry_fields():
    with pytest.raises(ValidationFailed) as info:
        validate(GamePayload, {'name': '', 'genre': 'x' * 101, 'rating': 'high', 'price': 10000,
                               'releaseDate': 'not-a-date'})
    err = info.value
    assert err.status == 400
    assert {d['field'] for d in err.details} == {'name', 'genre', 'rating', 'price', 'releaseDate'}


def test_validate_rejects_non_object():
    with pytest.raises(ValidationFailed) as info:
        validate(GamePayload, ['not', 'a', 'dict'])
    assert info.value.status == 400


def test_auth_schemas_use_422_status():
    with pytest.raises(ValidationFailed) as info:
        validate(RegisterRequest, {'email': 'x', 'password': 'p', 'name': 'n'}, status=422)
    assert info.value.status == 422
    assert validate(LoginRequest, {'email': ' X@Y.COM ', 'password': 'p'}).email == 'x@y.com'


def test_register_keeps_password_whitespace():
    payload = validate(RegisterRequest, {'email': 'a@b.com', 'password': ' secret ', 'name': ' A '})
    assert payload.password == ' secret '
    assert payload.name == 'A'


def test_parse_game_id():
    gid = uuid.uuid4()
    assert parse_game_id(str(gid)) == gid
    assert parse_game_id(str(gid).upper()) == gid
    for bad in ('', '123', f'{{{gid}}}', str(gid).replace('-', ''), f'{gid}; DROP TABLE games'):
        with pytest.raises(ValidationFailed):
            parse_game_id(bad)


# ---------------------------------------------------------------------------
# Listing helpers
# ---------------------------------------------------------------------------

def test_list_query_from_args():
    q = ListQuery.from_args(MultiDict({'page': '3', 'limit': '25', 'sortBy': 'price', 'sortOrder': 'desc', 'search': ' zel '}))
    assert (q.page, q.limit, q.sort_by, q.descending, q.search, q.offset) == (3, 25, 'price', True, ' zel ', 50)

    q = ListQuery.from_args(MultiDict({'page': '0', 'limit': '0'}))
    assert (q.page, q.limit) == (1, 10)

    q = ListQuery.from_args(MultiDict({'page': '-4', 'limit': 'many', 'sortBy': 'id'}))
    assert (q.page, q.limit, q.sort_by, q.descending) == (1, 10, 'name', False)


def test_pagination_meta():
    meta = pagination_meta(ListQuery(page=1, limit=10), 0)
    assert meta['totalPages'] == 0
    assert meta['hasNextPage'] is False
    meta = pagination_meta(ListQuery(page=2, limit=10), 25)
    assert (meta['totalPages'], meta['hasNextPage'], meta['hasPreviousPage']) == (3, True, True)


class _PgError(Exception):
    def __init__(self, pgcode):
        super().__init__('duplicate key value violates unique constraint')
        self.pgcode = pgcode


def test_is_unique_violation():
    assert is_unique_violation(IntegrityError('INSERT', {}, _PgError('23505')))
    assert not is_unique_violation(IntegrityError('INSERT', {}, _PgError('23503')))
    sqlite_dup = sqlite3.IntegrityError('UNIQUE constraint failed: games.name')
    assert is_unique_violation(IntegrityError('INSERT', {}, sqlite_dup))
    assert not is_unique_violation(OperationalError('SELECT', {}, Exception('timeout')))
    assert not is_unique_violation(ValueError('nope'))


# ---------------------------------------------------------------------------
# Context lifecycle
# ---------------------------------------------------------------------------

def test_context_close_is_idempotent():
    ctx = CatalogContext({'JWT_SECRET': 'x', 'LIST_QUERY_WORKERS': 1})
    assert ctx.executor.submit(lambda: 42).result() == 42
    ctx.close()
    ctx.close()
    assert ctx.closed
    with pytest.raises(RuntimeError):
        ctx.executor.submit(lambda: 1)
