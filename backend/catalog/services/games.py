"""Game queries.

Each function issues one parameterized statement (the list issues two, in
parallel). Client values are always bound parameters; the sort column is
looked up in ``SORTABLE_COLUMNS`` and never taken from the request text.
"""
import math
import uuid
from dataclasses import dataclass
from typing import List, Optional

from flask import current_app
from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError

from catalog import db
from catalog.models import GAME_COLUMNS, SORTABLE_COLUMNS, Game, serialize_game, utcnow

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_SORT = 'name'

UNIQUE_VIOLATION = '23505'


@dataclass
class ListQuery:
    page: int = 1
    limit: int = DEFAULT_LIMIT
    sort_by: str = DEFAULT_SORT
    descending: bool = False
    search: str = ''

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args) -> 'ListQuery':
        """Build from query-string args, falling back to defaults on junk.

        A zero page or limit counts as not given. The search term is used
        as sent, surrounding whitespace included.
        """
        page = _int_or(args.get('page'), 1) or 1
        limit = _int_or(args.get('limit'), DEFAULT_LIMIT) or DEFAULT_LIMIT
        sort_by = args.get('sortBy') or DEFAULT_SORT
        return cls(
            page=max(1, page),
            limit=min(MAX_LIMIT, max(1, limit)),
            sort_by=sort_by if sort_by in SORTABLE_COLUMNS else DEFAULT_SORT,
            descending=args.get('sortOrder') == 'desc',
            search=args.get('search') or '',
        )


def _int_or(value, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _search_clause(term: str):
    pattern = f'%{term}%'
    return or_(Game.name.ilike(pattern), Game.genre.ilike(pattern), Game.description.ilike(pattern))


def page_statement(query: ListQuery):
    stmt = select(*GAME_COLUMNS)
    if query.search:
        stmt = stmt.where(_search_clause(query.search))
    column = SORTABLE_COLUMNS[query.sort_by]
    order = column.desc() if query.descending else column.asc()
    # id as tie-breaker keeps pages stable when sort values repeat
    return stmt.order_by(order, Game.id.asc()).limit(query.limit).offset(query.offset)


def count_statement(query: ListQuery):
    stmt = select(func.count()).select_from(Game)
    if query.search:
        stmt = stmt.where(_search_clause(query.search))
    return stmt


def fetch_page(query: ListQuery) -> List[dict]:
    rows = db.session.execute(page_statement(query)).mappings().all()
    return [serialize_game(r) for r in rows]


def fetch_count(query: ListQuery) -> int:
    return int(db.session.execute(count_statement(query)).scalar_one())


def pagination_meta(query: ListQuery, total: int) -> dict:
    total_pages = math.ceil(total / query.limit)
    return {
        'currentPage': query.page,
        'totalPages': total_pages,
        'totalItems': total,
        'itemsPerPage': query.limit,
        'hasNextPage': query.page < total_pages,
        'hasPreviousPage': query.page > 1,
    }


def list_games(query: ListQuery, executor=None):
    """Return ``(games, meta)``.

    With an executor, the page and count queries run concurrently, each in
    its own app context (and so its own session and connection).
    """
    if executor is None:
        return fetch_page(query), pagination_meta(query, fetch_count(query))
    app = current_app._get_current_object()
    page_future = executor.submit(_in_app_context, app, fetch_page, query)
    count_future = executor.submit(_in_app_context, app, fetch_count, query)
    games = page_future.result()
    total = count_future.result()
    return games, pagination_meta(query, total)


def _in_app_context(app, fn, *args):
    with app.app_context():
        return fn(*args)


def get_game(game_id: uuid.UUID) -> Optional[dict]:
    row = db.session.execute(select(*GAME_COLUMNS).where(Game.id == game_id)).mappings().first()
    return serialize_game(row) if row else None


def create_game(record: dict, user_id: uuid.UUID) -> dict:
    now = utcnow()
    stmt = (
        insert(Game)
        .values(id=uuid.uuid4(), created_by=user_id, created_at=now, updated_at=now, **record)
        .returning(*GAME_COLUMNS)
    )
    row = _write(stmt)
    return serialize_game(row)


def update_game(game_id: uuid.UUID, record: dict, user_id: uuid.UUID) -> Optional[dict]:
    stmt = (
        update(Game)
        .where(Game.id == game_id)
        .values(updated_by=user_id, updated_at=utcnow(), **record)
        .returning(*GAME_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    row = _write(stmt)
    return serialize_game(row) if row else None


def delete_game(game_id: uuid.UUID) -> bool:
    stmt = (
        delete(Game)
        .where(Game.id == game_id)
        .returning(Game.id)
        .execution_options(synchronize_session=False)
    )
    row = _write(stmt)
    return row is not None


def _write(stmt):
    try:
        row = db.session.execute(stmt).mappings().first()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return row


def is_unique_violation(exc: Exception) -> bool:
    """True if *exc* is the store reporting a duplicate key."""
    if not isinstance(exc, IntegrityError):
        return False
    orig = exc.orig
    code = getattr(orig, 'pgcode', None) or getattr(orig, 'sqlstate', None)
    if code:
        return code == UNIQUE_VIOLATION
    return 'UNIQUE constraint failed' in str(orig)
