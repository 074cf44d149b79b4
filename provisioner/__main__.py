# -*- coding: utf-8 -*-
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
import json
import logging
import os
import shlex
import sys

import certifi

from . import __version__
from . import cli
from . import utils
from .params import ProvisionParams


def get_params_from_config(config_filename=None):    # type: (str) -> ProvisionParams
    if os.getenv('PROVISIONER_DEBUG'):
        logging.getLogger().setLevel(logging.DEBUG)
        logging.info('Debug ON')

    def get_env_config():
        path = os.getenv('PROVISIONER_CONFIG_FILE')
        if path:
            logging.debug('Setting config file from PROVISIONER_CONFIG_FILE env variable %s', path)
        return path

    config_filename = config_filename or get_env_config()
    if not config_filename:
        config_filename = 'config.json'
        if os.path.isfile(config_filename):
            config_filename = os.path.join(os.getcwd(), config_filename)
        else:
            config_filename = os.path.join(utils.get_default_path(), config_filename)
    else:
        config_filename = os.path.expanduser(config_filename)

    params = ProvisionParams(config_filename=config_filename)
    if os.path.exists(config_filename):
        try:
            with open(params.config_filename) as config_file:
                params.load_config(json.load(config_file))
        except ValueError as e:
            logging.error('Unable to parse JSON configuration file "%s": %s', os.path.abspath(config_filename), e)
            raise
        except IOError as ioe:
            logging.warning('Error: Unable to open config file %s: %s', config_filename, ioe)

    user = os.getenv('PROVISIONER_USER')
    if user and not params.user:
        params.user = user

    return params


def usage(m):
    print(m)
    parser.print_help()
    cli.display_command_help()
    sys.exit(1)


parser = argparse.ArgumentParser(prog='provisioner', add_help=False, allow_abbrev=False)
parser.add_argument('--user', '-u', dest='user', action='store', help='Super-admin email address.')
parser.add_argument('--version', dest='version', action='store_true', help='Display version')
parser.add_argument('--config', dest='config', action='store', help='Config file to use')
parser.add_argument('--debug', dest='debug', action='store_true', help='Turn on debug mode')
parser.add_argument('--batch-mode', dest='batch_mode', action='store_true', help='Run in batch mode.')
parser.add_argument('command', nargs='?', type=str, action='store', help='Command')
parser.add_argument('options', nargs='*', action='store', help='Options')
parser.error = usage


def main():
    os.environ['SSL_CERT_FILE'] = certifi.where()
    logging.basicConfig(format='%(message)s')

    opts, flags = parser.parse_known_args(sys.argv[1:])
    params = get_params_from_config(opts.config)

    if opts.batch_mode:
        params.batch_mode = True

    if opts.debug:
        params.debug = opts.debug

    logging.getLogger().setLevel(logging.WARNING if params.batch_mode else logging.DEBUG if params.debug else logging.INFO)

    if opts.user is not None:
        params.user = opts.user

    if opts.version:
        print(f'Keeper Directory Provisioner, version {__version__}')
        return

    if flags and len(flags) > 0:
        if flags[0] in ('-h', '--help'):
            flags.clear()
            opts.command = '?'
    elif opts.command == 'help' and len(opts.options) == 0:
        opts.command = '?'
    if (opts.command or '') == '?':
        usage('')

    if not opts.command:
        opts.command = 'shell'

    if opts.command == 'shell':
        errno = cli.loop(params)
    else:
        flags = ' '.join([shlex.quote(x) for x in flags]) if flags is not None else ''
        options = ' '.join([shlex.quote(x) for x in opts.options]) if opts.options is not None else ''
        options = ' -- ' + options if options.startswith('-') else options
        command = ' '.join([opts.command, options, flags]).strip()
        params.batch_mode = True
        errno = cli.runcommands(params, [command])

    sys.exit(errno)


if __name__ == '__main__':
    main()
