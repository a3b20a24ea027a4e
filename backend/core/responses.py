from typing import Any


def api_response(message: str, data: Any = None, success: bool = True) -> dict:
    return {'success': success, 'message': message, 'data': data}


def error_response(message: str) -> dict:
    return {'success': False, 'message': message}
