import os


def _database_uri():
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']
    host = os.environ.get('DB_HOST', 'localhost')
    port = os.environ.get('DB_PORT', '5432')
    name = os.environ.get('DB_NAME', 'games')
    user = os.environ.get('DB_USER', 'postgres')
    password = os.environ.get('DB_PASSWORD', 'password')
    return f'postgresql://{user}:{password}@{host}:{port}/{name}'


def _connect_args():
    args = {
        'connect_timeout': 2,
        # Per-statement timeout (ms)
        'options': '-c statement_timeout=30000',
    }
    if os.environ.get('DB_SSL') == 'true':
        args['sslmode'] = 'require'
        if os.environ.get('DB_CA_CERT'):
            args['sslrootcert'] = os.environ['DB_CA_CERT']
        if os.environ.get('DB_CLIENT_CERT'):
            args['sslcert'] = os.environ['DB_CLIENT_CERT']
        if os.environ.get('DB_CLIENT_KEY'):
            args['sslkey'] = os.environ['DB_CLIENT_KEY']
    return args


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Small fixed pool; acquisition fails after 2s instead of queueing
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'max_overflow': 0,
        'pool_timeout': 2,
        'pool_recycle': 30,
        'pool_pre_ping': True,
        'connect_args': _connect_args(),
    }
    # Bearer tokens. No default: the app refuses to start without a secret.
    JWT_SECRET = os.environ.get('JWT_SECRET')
    JWT_EXPIRES_HOURS = int(os.environ.get('JWT_EXPIRES_HOURS', '24'))
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '12'))
    ALLOWED_ORIGINS = [
        o.strip() for o in os.environ.get('ALLOWED_ORIGINS', 'http://localhost:4200').split(',') if o.strip()
    ]
    # Rate limiting (per client address, fixed window)
    RATELIMIT_WINDOW_SEC = int(os.environ.get('RATELIMIT_WINDOW_SEC', '900'))
    RATELIMIT_GLOBAL_MAX = int(os.environ.get('RATELIMIT_GLOBAL_MAX', '100'))
    RATELIMIT_WRITE_MAX = int(os.environ.get('RATELIMIT_WRITE_MAX', '20'))
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024
    API_VERSION = os.environ.get('API_VERSION', '1.0.0')
    # Threads used to run the list page and count queries side by side
    LIST_QUERY_WORKERS = int(os.environ.get('LIST_QUERY_WORKERS', '4'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '4000'))
