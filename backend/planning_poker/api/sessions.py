from flask import Blueprint, jsonify, request, current_app
from planning_poker import registry


sessions = Blueprint('sessions', __name__)


def _session_url(session_key: str) -> str:
    base = current_app.config.get('PUBLIC_BASE_URL') or request.host_url
    return f"{base.rstrip('/')}/session/{session_key}"


@sessions.route('/create-session', methods=['POST'])
def create_session():
    """
    Opens a new session owned by the named facilitator.
    """
    data = request.get_json(silent=True) or {}
    facilitator_name = data.get('facilitatorName')
    if not isinstance(facilitator_name, str):
        facilitator_name = ''
    session_key = registry.create(facilitator_name.strip())
    return jsonify({
        'sessionId': session_key,
        'url': _session_url(session_key),
    }), 200


@sessions.route('/sessions/<string:session_key>', methods=['GET'])
def get_session(session_key):
    """
    Lets a page check a shared link before opening the socket.
    """
    session = registry.get(session_key)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404
    with session.lock:
        return jsonify(session.summary()), 200
