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

import logging

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from .api import create_provisioning_blueprint
from .decorators import logger
from ..params import ProvisionParams


def create_app(params):    # type: (ProvisionParams) -> Flask
    """Create and configure the provisioning service."""
    logger.debug("Initializing provisioning service")

    logging.getLogger('werkzeug').setLevel(logging.ERROR)

    service_config = params.config.get('service') or {}
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1, x_prefix=1)
    app.config['PARAMS'] = params
    app.config['API_KEY'] = service_config.get('api_key') or ''
    if not app.config['API_KEY']:
        logger.warning("Service API key is not configured: all API requests will be rejected")

    @app.route("/health", methods=["GET"])
    def health_check():
        """Health check endpoint for orchestrators."""
        return jsonify({"status": "ok"}), 200

    app.register_blueprint(create_provisioning_blueprint(), url_prefix='/api/v1')
    logger.debug("Route initialization completed successfully")
    return app
