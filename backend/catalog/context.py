from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from flask import current_app

from catalog.services.ratelimit import RateLimiter
from catalog.services.tokens import TokenService

EXTENSION_KEY = 'catalog'


class CatalogContext:
    """Process-wide collaborators shared by every request.

    Built once in ``create_app`` and reachable from handlers through
    :func:`get_context`. ``close`` drains the list-query workers and
    disposes the connection pool; call it on shutdown.
    """

    def __init__(self, config):
        self.tokens = TokenService(
            config.get('JWT_SECRET'),
            lifetime=timedelta(hours=int(config.get('JWT_EXPIRES_HOURS', 24))),
        )
        window = int(config.get('RATELIMIT_WINDOW_SEC', 900))
        self.global_limiter = RateLimiter(int(config.get('RATELIMIT_GLOBAL_MAX', 100)), window)
        self.write_limiter = RateLimiter(int(config.get('RATELIMIT_WRITE_MAX', 20)), window)
        self.executor = ThreadPoolExecutor(
            max_workers=int(config.get('LIST_QUERY_WORKERS', 4)),
            thread_name_prefix='catalog-list',
        )
        self.closed = False

    def init_app(self, app):
        app.extensions[EXTENSION_KEY] = self

    def close(self, engine=None):
        if self.closed:
            return
        self.executor.shutdown(wait=True)
        if engine is not None:
            engine.dispose()
        self.closed = True


def get_context() -> CatalogContext:
    return current_app.extensions[EXTENSION_KEY]
