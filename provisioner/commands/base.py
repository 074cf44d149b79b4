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

import abc
import argparse
import csv
import io
import json
import logging
import os
import shlex
from collections import OrderedDict
from typing import Optional, Sequence, List, Any, Dict

from tabulate import tabulate

from .. import error
from ..params import ProvisionParams

aliases = {}                 # type: Dict[str, str]
commands = {}                # type: Dict[str, Command]
command_info = OrderedDict()


report_output_parser = argparse.ArgumentParser(add_help=False)
report_output_parser.add_argument('--format', dest='format', action='store', choices=['table', 'csv', 'json'],
                                  default='table', help='format of output')
report_output_parser.add_argument('--output', dest='output', action='store',
                                  help='path to resulting output file (ignored for "table" format)')


class CommandError(error.CommandError):
    def __init__(self, message):
        super().__init__('', message)


class ParseError(Exception):
    pass


def register_commands(commands, aliases, command_info):
    from . import directory
    directory.register_commands(commands)
    directory.register_command_info(aliases, command_info)

    from . import service
    service.register_commands(commands)
    service.register_command_info(aliases, command_info)


def raise_parse_exception(m):
    raise ParseError(m)


def suppress_exit(*args):
    raise ParseError()


def dump_report_data(data, headers, fmt='', filename=None):
    # type: (List[List[Any]], Sequence[str], Optional[str], Optional[str]) -> Optional[str]
    """Renders rows as a table on stdout, or as csv/json returned as text or written to filename"""
    if fmt not in ('csv', 'json'):
        print(tabulate(data, headers=headers))
        return None

    if fmt == 'csv':
        fd = io.StringIO()
        csv_writer = csv.writer(fd)
        csv_writer.writerow(headers)
        csv_writer.writerows(data)
        report = fd.getvalue()
    else:
        report = json.dumps([dict(zip(headers, row)) for row in data], indent=2)

    if not filename:
        return report
    if not os.path.splitext(filename)[1]:
        filename += '.' + fmt
    with open(filename, 'w', newline='', encoding='utf-8') as fd:
        fd.write(report)
    logging.info('Report path: %s', os.path.abspath(filename))
    return None


class CliCommand(abc.ABC):
    @abc.abstractmethod
    def execute_args(self, params, args, **kwargs):   # type: (ProvisionParams, str, ...) -> Any
        pass

    def is_authorised(self):
        return True


class Command(CliCommand):
    def execute(self, params, **kwargs):     # type: (ProvisionParams, Any) -> Any
        raise NotImplementedError()

    def execute_args(self, params, args, **kwargs):
        # type: (ProvisionParams, str, ...) -> Any
        try:
            d = {}
            d.update(kwargs)
            parser = self._get_parser_safe()
            args = '' if args is None else args
            if parser:
                opts = parser.parse_args(shlex.split(args))
                d.update(opts.__dict__)

            return self.execute(params, **d)
        except ParseError as e:
            logging.error(e)

    def get_parser(self):   # type: () -> Optional[argparse.ArgumentParser]
        return None

    def _get_parser_safe(self):
        parser = self.get_parser()
        if parser:
            if parser.exit != suppress_exit:
                parser.exit = suppress_exit
            if parser.error != raise_parse_exception:
                parser.error = raise_parse_exception
        return parser
