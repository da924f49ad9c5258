# app/routes/matchmaking_routes.py
from flask import Blueprint, request, jsonify
from app.services.matchmaking_service import MatchmakingService
from app.services.ticket_service import TicketService
from app.services.video_room_service import VideoRoomService
from app.utils.validation import validate_required, validate_uuid, normalize_uuid
from functools import wraps

matchmaking_bp = Blueprint('matchmaking', __name__, url_prefix='/api/matchmaking')

# service keys → wire keys
_WIRE_KEYS = {
    'room_id': 'roomId',
    'daily_url': 'dailyUrl',
}


def require_auth(f):
    """Require X-User-ID header (set by the auth gateway after JWT verification)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user_id = request.headers.get('X-User-ID')
        if not user_id:
            return jsonify({'success': False, 'error': 'Authentication required'}), 401
        ok, _ = validate_uuid(user_id)
        if not ok:
            return jsonify({'success': False, 'error': 'Invalid user id'}), 400
        return f(normalize_uuid(user_id), *args, **kwargs)
    return decorated_function


def require_admin(f):
    """Must be stacked under require_auth"""
    @wraps(f)
    def decorated_function(user_id, *args, **kwargs):
        if not TicketService.is_admin(user_id):
            return jsonify({'success': False, 'error': 'Admin access required'}), 403
        return f(user_id, *args, **kwargs)
    return decorated_function


def _event_id_from_body():
    """Returns (event_id, error_response)"""
    data = request.get_json(silent=True)
    ok, error = validate_required(data, ['eventId'])
    if not ok:
        return None, (jsonify({'success': False, 'error': error}), 400)

    ok, _ = validate_uuid(data['eventId'])
    if not ok:
        return None, (jsonify({'success': False, 'error': 'Invalid event ID'}), 400)

    return normalize_uuid(data['eventId']), None


def _to_wire(result, *keys):
    """Pick keys from a service result, camelCase them and drop empty values"""
    body = {}
    for key in keys:
        value = result.get(key)
        if value is None:
            continue
        body[_WIRE_KEYS.get(key, key)] = value
    return body


def _failure(result):
    status = result.get('code', 400)
    if status >= 500:
        return jsonify({'success': False, 'error': 'Internal server error'}), status
    return jsonify({'success': False, 'error': result.get('error')}), status


@matchmaking_bp.route('/join', methods=['POST'])
@require_auth
def join_queue(user_id):
    """Join the queue for an event (requires an active ticket)"""
    event_id, error = _event_id_from_body()
    if error:
        return error

    result = MatchmakingService.join(event_id, user_id)
    if not result.get('success'):
        return _failure(result)

    return jsonify(_to_wire(result, 'success', 'status', 'matched', 'room_id', 'daily_url')), 200


@matchmaking_bp.route('/leave', methods=['POST'])
@require_auth
def leave_queue(user_id):
    event_id, error = _event_id_from_body()
    if error:
        return error

    result = MatchmakingService.leave(event_id, user_id)
    if not result.get('success'):
        return _failure(result)

    return jsonify({'success': True}), 200


@matchmaking_bp.route('/status', methods=['GET'])
@require_auth
def get_status(user_id):
    event_id = request.args.get('eventId')
    if not event_id:
        return jsonify({'success': False, 'error': 'eventId parameter required'}), 400

    ok, _ = validate_uuid(event_id)
    if not ok:
        return jsonify({'success': False, 'error': 'Invalid event ID'}), 400

    result = MatchmakingService.status(normalize_uuid(event_id), user_id)
    if not result.get('success'):
        return _failure(result)

    return jsonify(_to_wire(result, 'status', 'room_id', 'daily_url')), 200


@matchmaking_bp.route('/next-match', methods=['POST'])
@require_auth
def next_match(user_id):
    """Back to waiting after a chat ends, then try to pair again"""
    event_id, error = _event_id_from_body()
    if error:
        return error

    result = MatchmakingService.next_match(event_id, user_id)
    if not result.get('success'):
        return _failure(result)

    return jsonify(_to_wire(result, 'success', 'matched', 'room_id', 'daily_url')), 200


@matchmaking_bp.route('/match-users', methods=['POST'])
@require_auth
@require_admin
def force_match(user_id):
    """Admin: run one pairing attempt for an event"""
    event_id, error = _event_id_from_body()
    if error:
        return error

    result = MatchmakingService.force_match(event_id)
    if result.get('code', 0) >= 500:
        return _failure(result)

    if not result.get('matched'):
        return jsonify({'matched': False, 'error': result.get('error')}), 200

    return jsonify(_to_wire(result, 'matched', 'room_id', 'daily_url', 'users')), 200


@matchmaking_bp.route('/room', methods=['GET'])
@require_auth
def get_room(user_id):
    """Details of the room the caller is currently matched into"""
    room_id = request.args.get('roomId')
    if not room_id:
        return jsonify({'success': False, 'error': 'roomId parameter required'}), 400

    ok, _ = validate_uuid(room_id)
    if not ok:
        return jsonify({'success': False, 'error': 'Invalid room ID'}), 400

    result = VideoRoomService.get_room_for_user(normalize_uuid(room_id), user_id)
    if not result.get('success'):
        return _failure(result)

    room = result['room']
    body = {
        'roomId': room['id'],
        'eventId': room['event_id'],
        'status': room['status'],
        'createdAt': room['created_at'],
    }
    if room['daily_url']:
        body['dailyUrl'] = room['daily_url']
    return jsonify(body), 200

# Export bp for auto-registration
bp = matchmaking_bp
