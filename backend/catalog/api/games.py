from flask import Blueprint, request, current_app
from flask_login import login_required, current_user

from catalog.context import get_context
from catalog.envelope import success, failure
from catalog.services import games as svc
from catalog.services.validation import GamePayload, parse_game_id, validate


games = Blueprint('games', __name__)


@games.route('', methods=['GET'])
@login_required
def list_games():
    query = svc.ListQuery.from_args(request.args)
    try:
        items, meta = svc.list_games(query, executor=get_context().executor)
    except Exception as exc:
        current_app.logger.error(f"[games.list] failed: {exc}")
        return failure('Failed to retrieve games', 500)
    return success(items, message='Games retrieved successfully', meta=meta)


@games.route('/<game_id>', methods=['GET'])
@login_required
def get_game(game_id):
    gid = parse_game_id(game_id)
    try:
        game = svc.get_game(gid)
    except Exception as exc:
        current_app.logger.error(f"[games.get] id={gid} failed: {exc}")
        return failure('Failed to retrieve game', 500)
    if game is None:
        return failure('Game not found', 404)
    return success(game, message='Game retrieved successfully')


@games.route('', methods=['POST'])
@login_required
def create_game():
    payload = validate(GamePayload, request.get_json(silent=True))
    try:
        game = svc.create_game(payload.to_record(), current_user.user_uuid)
    except Exception as exc:
        current_app.logger.error(f"[games.create] failed: {exc}")
        if svc.is_unique_violation(exc):
            return failure('Game with this name already exists', 409)
        return failure('Failed to create game', 500)
    current_app.logger.info(f"[games.create] id={game['id']} by={current_user.id}")
    return success(game, message='Game created successfully', status=201)


@games.route('/<game_id>', methods=['PUT'])
@login_required
def update_game(game_id):
    gid = parse_game_id(game_id)
    payload = validate(GamePayload, request.get_json(silent=True))
    try:
        game = svc.update_game(gid, payload.to_record(), current_user.user_uuid)
    except Exception as exc:
        current_app.logger.error(f"[games.update] id={gid} failed: {exc}")
        if svc.is_unique_violation(exc):
            return failure('Game with this name already exists', 409)
        return failure('Failed to update game', 500)
    if game is None:
        return failure('Game not found', 404)
    current_app.logger.info(f"[games.update] id={gid} by={current_user.id}")
    return success(game, message='Game updated successfully')


@games.route('/<game_id>', methods=['DELETE'])
@login_required
def delete_game(game_id):
    gid = parse_game_id(game_id)
    try:
        deleted = svc.delete_game(gid)
    except Exception as exc:
        current_app.logger.error(f"[games.delete] id={gid} failed: {exc}")
        return failure('Failed to delete game', 500)
    if not deleted:
        return failure('Game not found', 404)
    current_app.logger.info(f"[games.delete] id={gid} by={current_user.id}")
    return success(None, message='Game deleted successfully')
