import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list, shared by Flask-CORS and Socket.IO
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
        ).split(',') if o.strip()
    ]
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Advisory round timer shown by clients (seconds)
    DEFAULT_TIMER_DURATION_SEC = int(os.environ.get('DEFAULT_TIMER_DURATION_SEC', '15'))
    SESSION_KEY_LENGTH = int(os.environ.get('SESSION_KEY_LENGTH', '8'))
    # Vote card that never counts towards statistics
    UNSURE_VOTE = os.environ.get('UNSURE_VOTE', '?')
    # Optional: base for shareable session links. Empty uses the request host.
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', '')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
