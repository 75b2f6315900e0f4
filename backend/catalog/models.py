import uuid
from datetime import datetime, timezone

from catalog import db, bcrypt


def utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value is not None else None


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        # password_hash never leaves the server
        return {
            'id': str(self.id),
            'email': self.email,
            'name': self.name,
        }


class Game(db.Model):
    __tablename__ = 'games'
    __table_args__ = (
        db.CheckConstraint('rating >= 0 AND rating <= 10', name='ck_games_rating_range'),
        db.CheckConstraint('price >= 0 AND price <= 9999.99', name='ck_games_price_range'),
    )
    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(255), unique=True, nullable=False)
    genre = db.Column(db.String(100), nullable=False)
    rating = db.Column(db.Numeric(3, 1, asdecimal=False), nullable=False)
    price = db.Column(db.Numeric(6, 2, asdecimal=False), nullable=False)
    description = db.Column(db.String(1000), nullable=True)
    release_date = db.Column(db.Date, nullable=True)
    platform = db.Column(db.JSON(none_as_null=True), nullable=True)  # ordered list of platform names
    created_by = db.Column(db.Uuid, db.ForeignKey('users.id'), nullable=False)
    updated_by = db.Column(db.Uuid, db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)


# Columns projected by every game query, in response order
GAME_COLUMNS = (
    Game.id, Game.name, Game.genre, Game.rating, Game.price, Game.description,
    Game.release_date, Game.platform, Game.created_by, Game.updated_by,
    Game.created_at, Game.updated_at,
)

# Sort keys accepted from clients, mapped to the columns they order by
SORTABLE_COLUMNS = {
    'name': Game.name,
    'genre': Game.genre,
    'rating': Game.rating,
    'price': Game.price,
    'created_at': Game.created_at,
}


def serialize_game(row):
    """Shape a game row (ORM object or result mapping) for the API."""
    get = row.get if hasattr(row, 'get') else lambda key: getattr(row, key)
    return {
        'id': str(get('id')),
        'name': get('name'),
        'genre': get('genre'),
        'rating': float(get('rating')),
        'price': float(get('price')),
        'description': get('description'),
        'releaseDate': _iso(get('release_date')),
        'platform': get('platform'),
        'createdBy': str(get('created_by')) if get('created_by') else None,
        'updatedBy': str(get('updated_by')) if get('updated_by') else None,
        'createdAt': _iso(get('created_at')),
        'updatedAt': _iso(get('updated_at')),
    }
