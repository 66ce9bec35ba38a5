from functools import wraps
from flask import request, jsonify, current_app


def require_admin_key(f):
    """Decorator restricting a route to the admin role via the X-API-KEY header."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get('ADMIN_API_KEY')
        api_key = request.headers.get('X-API-KEY')
        if not expected or not api_key or api_key != expected:
            return jsonify({"error": "Unauthorized: Invalid or missing API key"}), 401
        return f(*args, **kwargs)
    return decorated_function
