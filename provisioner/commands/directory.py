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
from typing import Dict, Any

import yaml

from .base import Command, raise_parse_exception, suppress_exit, dump_report_data, report_output_parser
from .. import generator
from ..error import CommandError, ProvisioningError, ValidationFailed
from ..models import Profile, PROFILE_FIELDS
from ..params import ProvisionParams
from ..privilege import PrivilegeGate
from ..uniqueness import UniquenessChecker


def register_commands(commands):
    commands['create-user'] = CreateUserCommand()
    commands['ou-list'] = OrgUnitListCommand()
    commands['user-list'] = UserListCommand()
    commands['check-email'] = CheckEmailCommand()
    commands['generate-password'] = GeneratePasswordCommand()
    commands['whoami'] = WhoAmICommand()


def register_command_info(aliases, command_info):
    aliases['cu'] = 'create-user'
    aliases['ou'] = 'ou-list'
    aliases['ul'] = 'user-list'
    aliases['gen'] = 'generate-password'
    command_info['create-user'] = 'Create directory user account'
    command_info['ou-list'] = 'List organizational units'
    command_info['user-list'] = 'List active directory users'
    command_info['check-email'] = 'Check whether an address is used by any account or alias'
    command_info['generate-password'] = 'Generate temporary passwords'
    command_info['whoami'] = 'Display administrator account and privilege'


create_user_parser = argparse.ArgumentParser(prog='create-user', description='Creates directory user account')
create_user_parser.add_argument('--profile', dest='profile', action='store',
                                help='YAML or JSON file with the user profile')
create_user_parser.add_argument('--first-name', dest='first_name', action='store', help='first name')
create_user_parser.add_argument('--last-name', dest='last_name', action='store', help='last name')
create_user_parser.add_argument('--title', dest='title', action='store', help='job title')
create_user_parser.add_argument('--department', dest='department', action='store', help='department')
create_user_parser.add_argument('--secondary-email', dest='secondary_email', action='store',
                                help='personal (recovery) email address')
create_user_parser.add_argument('--phone', dest='phone_number', action='store',
                                help='phone number: +<country code><number>')
create_user_parser.add_argument('--ou', dest='org_unit_path', action='store', help='organizational unit path')
create_user_parser.add_argument('--manager-email', dest='manager_email', action='store', help='manager email')
create_user_parser.add_argument('--manager-name', dest='manager_name', action='store', help='manager name')
create_user_parser.add_argument('--dry-run', dest='dry_run', action='store_true',
                                help='validate the profile without creating the account')
create_user_parser.add_argument('--no-notify', dest='no_notify', action='store_true',
                                help='do not send the welcome email')
create_user_parser.add_argument('--format', dest='format', action='store', choices=['text', 'json'],
                                default='text', help='format of output')
create_user_parser.add_argument('email', nargs='?', help='primary email')
create_user_parser.error = raise_parse_exception
create_user_parser.exit = suppress_exit

ou_list_parser = argparse.ArgumentParser(prog='ou-list', parents=[report_output_parser],
                                         description='Displays organizational units')

user_list_parser = argparse.ArgumentParser(prog='user-list', parents=[report_output_parser],
                                           description='Displays active directory users')

check_email_parser = argparse.ArgumentParser(prog='check-email',
                                             description='Checks primary addresses and aliases for an email')
check_email_parser.add_argument('email', help='email address')

generate_password_parser = argparse.ArgumentParser(prog='generate-password',
                                                   description='Generates temporary passwords')
generate_password_parser.add_argument('--count', '-c', dest='count', type=int, action='store', default=1,
                                      help='number of passwords')

whoami_parser = argparse.ArgumentParser(prog='whoami', description='Displays administrator account')


def load_profile_file(file_path):    # type: (str) -> Dict[str, Any]
    if not os.path.exists(file_path):
        raise CommandError('create-user', f'Profile file not found: {file_path}')
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CommandError('create-user', f'Profile syntax error in {file_path}:\n{e}')
    if isinstance(data, dict) and isinstance(data.get('user'), dict):
        data = data['user']
    if not isinstance(data, dict):
        raise CommandError('create-user', 'Invalid profile: Root element must be a dictionary/object')
    return data


class CreateUserCommand(Command):
    def get_parser(self):
        return create_user_parser

    def execute(self, params, **kwargs):    # type: (ProvisionParams, Any) -> Any
        data = {}
        profile_file = kwargs.get('profile')
        if profile_file:
            data.update(load_profile_file(os.path.expanduser(profile_file)))
        # command line options take precedence over the profile file
        for camel_name, attr in PROFILE_FIELDS.items():
            value = kwargs.get('email' if attr == 'primary_email' else attr)
            if value:
                data[camel_name] = value
        profile = Profile.from_dict(data)

        output_format = kwargs.get('format') or 'text'
        orchestrator = params.get_orchestrator(notify=kwargs.get('no_notify') is not True)
        try:
            result = orchestrator.create_user(profile, dry_run=kwargs.get('dry_run') is True)
        except ProvisioningError as e:
            if output_format == 'json':
                stage = orchestrator.failed_stage or orchestrator.stage
                rs = {'success': False, 'error': e.message, 'stage': stage.value}
                if isinstance(e, ValidationFailed):
                    rs['field'] = e.field
                print(json.dumps(rs, indent=2))
            raise CommandError('create-user', e.message)

        if output_format == 'json':
            return json.dumps(result, indent=2)

        account = result['account']
        print(result['message'])
        print(f'{"Email:":>16s} {account["email"]}')
        print(f'{"Name:":>16s} {account["name"]}')
        print(f'{"Department:":>16s} {account["department"]}')
        print(f'{"Title:":>16s} {account["title"]}')
        if account.get('manager'):
            print(f'{"Manager:":>16s} {account["manager"]}')
        if result.get('notification') == 'failed':
            logging.warning('Welcome email to "%s" was not delivered', profile.secondary_email)


class OrgUnitListCommand(Command):
    def get_parser(self):
        return ou_list_parser

    def execute(self, params, **kwargs):
        org_units = params.get_orchestrator(notify=False).get_ous()
        fmt = kwargs.get('format')
        headers = ['path', 'display_name'] if fmt == 'json' else ['Path', 'Display Name']
        table = [[x.path, x.display_name] for x in org_units]
        return dump_report_data(table, headers, fmt=fmt, filename=kwargs.get('output'))


class UserListCommand(Command):
    def get_parser(self):
        return user_list_parser

    def execute(self, params, **kwargs):
        users = params.get_orchestrator(notify=False).get_all_users()
        fmt = kwargs.get('format')
        headers = ['email', 'name'] if fmt == 'json' else ['Email', 'Name']
        table = [[x.email, x.name] for x in users]
        return dump_report_data(table, headers, fmt=fmt, filename=kwargs.get('output'))


class CheckEmailCommand(Command):
    def get_parser(self):
        return check_email_parser

    def execute(self, params, **kwargs):
        email = kwargs.get('email')
        checker = UniquenessChecker(params.get_directory(), page_size=params.page_size, limit=params.scan_limit())
        try:
            exists = checker.email_exists_anywhere(email)
        except ProvisioningError as e:
            raise CommandError('check-email', e.message)
        if exists:
            print(f'"{email}" is already used by an account or alias')
        else:
            print(f'"{email}" is available')
        return exists


class GeneratePasswordCommand(Command):
    def get_parser(self):
        return generate_password_parser

    def is_authorised(self):
        return False

    def execute(self, params, **kwargs):
        count = kwargs.get('count') or 1
        if count < 1:
            raise CommandError('generate-password', '--count should be a positive number')
        gen = generator.TemporaryPasswordGenerator()
        return '\n'.join(gen.generate() for _ in range(count))


class WhoAmICommand(Command):
    def get_parser(self):
        return whoami_parser

    def execute(self, params, **kwargs):
        caller = params.caller()
        result = PrivilegeGate(params.get_directory()).probe(caller)
        print(f'{"Administrator:":>16s} {caller.address}')
        print(f'{"Domain:":>16s} {caller.domain}')
        print(f'{"Privilege:":>16s} {result.value}')
