import logging
from datetime import date

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
import click
from config import Config

from catalog.auth import BearerLoginManager

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = BearerLoginManager()

DEMO_USER = {'email': 'demo@example.com', 'password': 'password', 'name': 'Demo User'}
DEMO_GAMES = [
    {
        'name': 'The Legend of Zelda: Breath of the Wild',
        'genre': 'Action-Adventure',
        'rating': 9.7,
        'price': 59.99,
        'description': 'An open-world adventure game set in the kingdom of Hyrule.',
        'release_date': date(2017, 3, 3),
        'platform': ['Nintendo Switch', 'Wii U'],
    },
    {
        'name': 'God of War',
        'genre': 'Action',
        'rating': 9.5,
        'price': 49.99,
        'description': 'Follow Kratos and his son Atreus on an epic journey through Norse mythology.',
        'release_date': date(2018, 4, 20),
        'platform': ['PlayStation 4', 'PlayStation 5', 'PC'],
    },
    {
        'name': 'Elden Ring',
        'genre': 'Action RPG',
        'rating': 9.3,
        'price': 59.99,
        'description': 'A dark fantasy action RPG developed by FromSoftware and George R.R. Martin.',
        'release_date': date(2022, 2, 25),
        'platform': ['PC', 'PlayStation 4', 'PlayStation 5', 'Xbox One', 'Xbox Series X/S'],
    },
    {
        'name': 'Minecraft',
        'genre': 'Sandbox',
        'rating': 9.0,
        'price': 26.95,
        'description': 'A sandbox game where players can build and explore blocky worlds.',
        'release_date': date(2011, 11, 18),
        'platform': ['PC', 'Mobile', 'Console'],
    },
    {
        'name': 'Stardew Valley',
        'genre': 'Simulation',
        'rating': 8.9,
        'price': 14.99,
        'description': "A farming simulation game where you inherit your grandfather's old farm plot.",
        'release_date': date(2016, 2, 26),
        'platform': ['PC', 'Mobile', 'Console'],
    },
]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Fails fast when JWT_SECRET is missing
    from catalog.context import CatalogContext
    CatalogContext(flask_app.config).init_app(flask_app)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    CORS(
        flask_app,
        origins=flask_app.config.get('ALLOWED_ORIGINS') or [],
        methods=['GET', 'POST', 'PUT', 'DELETE'],
        allow_headers=['Content-Type', 'Authorization'],
        supports_credentials=True,
        max_age=86400,
    )

    from catalog.auth import init_auth
    init_auth(login_manager)

    from catalog.pipeline import init_pipeline
    init_pipeline(flask_app)

    from catalog.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from catalog.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from catalog.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    @click.command('init-db')
    def init_db_command():
        """Creates any missing tables."""
        import catalog.models  # noqa: F401
        with flask_app.app_context():
            db.create_all()
        click.echo('Database tables created.')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from catalog.models import User, Game
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            user = User(email=DEMO_USER['email'], name=DEMO_USER['name'])
            user.set_password(DEMO_USER['password'])
            db.session.add(user)
            db.session.flush()
            for g in DEMO_GAMES:
                db.session.add(Game(created_by=user.id, **g))

            db.session.commit()
            click.echo('Database has been reset and seeded!')

    flask_app.cli.add_command(init_db_command)
    flask_app.cli.add_command(db_reset_command)

    return flask_app
