#  _  __
# | |/ /___ ___ _ __  ___ _ _ ®
# | ' </ -_) -_) '_ \/ -_) '_|
# |_|\_\___\___| .__/\___|_|
#              |_|
#
# Keeper Directory Provisioner
# Copyright 2026 Keeper Security Inc.
# Contact: ops@keepersecurity.com
#

import hmac
import logging
import sys
from functools import wraps
from typing import Callable, Any

from flask import request, current_app, jsonify


def _create_logger():
    service_logger = logging.getLogger('provisioner_service')
    if not service_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        service_logger.addHandler(handler)
        # Prevent log propagation to parent loggers to avoid duplicate entries
        service_logger.propagate = False
        service_logger.setLevel(logging.INFO)
    return service_logger


logger = _create_logger()


def auth_check(fn: Callable) -> Callable:
    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        stored_key = current_app.config.get('API_KEY') or ''
        api_key = request.headers.get('api-key') or ''
        if not stored_key or not api_key or not hmac.compare_digest(api_key.strip(), stored_key.strip()):
            logger.warning(f"Rejected request to {request.path}: invalid api key")
            return jsonify({'success': False, 'error': 'Please provide a valid api key'}), 401
        return fn(*args, **kwargs)
    return wrapper


def catch_all(fn: Callable) -> Callable:
    """Global exception handler"""
    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception:
            logger.exception(f"Unhandled error in {fn.__name__}")
            return jsonify({'success': False, 'error': 'An internal error occurred'}), 500
    return wrapper


def api_decorator() -> Callable:
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        @auth_check
        @catch_all
        def wrapped_function(*args, **kwargs):
            return f(*args, **kwargs)
        return wrapped_function
    return decorator
