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

"""
Provisioning API endpoints.

The caller identity always comes from the service configuration, never from
the request, so the domain check cannot be bypassed by a client.
"""

from typing import Tuple

from flask import Blueprint, request, jsonify, current_app, Response

from .decorators import api_decorator, logger
from ..error import (ProvisioningError, PrivilegeDenied, DuplicateIdentity, ValidationFailed,
                     CreateRejected, DirectoryUnavailable)
from ..models import Profile

ERROR_STATUS = [
    (PrivilegeDenied, 403),
    (DuplicateIdentity, 409),
    (ValidationFailed, 400),
    (CreateRejected, 422),
    (DirectoryUnavailable, 503),
]


def error_response(e: ProvisioningError) -> Tuple[Response, int]:
    status = next((code for cls, code in ERROR_STATUS if isinstance(e, cls)), 500)
    body = {'success': False, 'error': e.message}
    if isinstance(e, ValidationFailed):
        body['field'] = e.field
    return jsonify(body), status


def create_provisioning_blueprint():
    """Create blueprint for provisioning API endpoints."""
    bp = Blueprint("provisioning_bp", __name__)

    @bp.route("/users", methods=["POST"])
    @api_decorator()
    def create_user() -> Tuple[Response, int]:
        """
        Create a directory account.

        POST /api/v1/users
        Content-Type: application/json

        Body:
        {
            "firstName": "Jane",
            "lastName": "Doe",
            "title": "Engineer",
            "department": "R&D",
            "primaryEmail": "jane.doe@acme.com",
            "secondaryEmail": "jane@example.com",
            "phoneNumber": "+14165551234",
            "organizationalUnitPath": "/Engineering",
            "managerEmail": "boss@acme.com",
            "dry_run": false
        }

        Returns:
            201: Account created (200 for dry run)
            400: Validation failed
            403: Caller is not a super admin
            409: Email already exists
            422: Directory rejected the account
            503: Directory unavailable
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'success': False, 'error': 'Request body required'}), 400

        params = current_app.config['PARAMS']
        dry_run = data.get('dry_run') is True
        try:
            orchestrator = params.get_orchestrator()
            result = orchestrator.create_user(Profile.from_dict(data), dry_run=dry_run)
        except ProvisioningError as e:
            return error_response(e)
        logger.info(f"Provisioning request for {result['account']['email']} completed")
        return jsonify(result), 200 if dry_run else 201

    @bp.route("/users", methods=["GET"])
    @api_decorator()
    def list_users() -> Tuple[Response, int]:
        params = current_app.config['PARAMS']
        try:
            users = params.get_orchestrator(notify=False).get_all_users()
        except ProvisioningError as e:
            return error_response(e)
        return jsonify({'success': True, 'users': [x.to_dict() for x in users]}), 200

    @bp.route("/org-units", methods=["GET"])
    @api_decorator()
    def list_org_units() -> Tuple[Response, int]:
        params = current_app.config['PARAMS']
        try:
            org_units = params.get_orchestrator(notify=False).get_ous()
        except ProvisioningError as e:
            return error_response(e)
        return jsonify({'success': True, 'org_units': [x.to_dict() for x in org_units]}), 200

    return bp
