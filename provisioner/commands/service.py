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

import argparse
import logging

from .base import Command, CommandError


def register_commands(commands):
    commands['service-start'] = ServiceStartCommand()


def register_command_info(_, command_info):
    command_info['service-start'] = 'Start provisioning REST service'


service_start_parser = argparse.ArgumentParser(prog='service-start', description='Starts provisioning REST service')
service_start_parser.add_argument('--host', dest='host', action='store', help='interface to listen on')
service_start_parser.add_argument('--port', dest='port', type=int, action='store', help='port to listen on')


class ServiceStartCommand(Command):
    def get_parser(self):
        return service_start_parser

    def execute(self, params, **kwargs):
        from ..service import create_app

        service_config = params.config.get('service') or {}
        host = kwargs.get('host') or service_config.get('host') or '127.0.0.1'
        port = kwargs.get('port') or service_config.get('port') or 8900
        if not service_config.get('api_key'):
            raise CommandError('"service.api_key" is not configured')

        params.caller()
        app = create_app(params)
        logging.info('Provisioning service is listening on %s:%s', host, port)
        app.run(host=host, port=int(port))
