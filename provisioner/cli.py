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
import os

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter

from .commands import register_commands, aliases, commands, command_info
from .error import CommandError, Error
from .params import ProvisionParams

register_commands(commands, aliases, command_info)


def display_command_help():
    alias_lookup = {x[1]: x[0] for x in aliases.items()}
    print('\nCommands:')
    print('=' * 80)
    for cmd, description in command_info.items():
        alias = alias_lookup.get(cmd) or ''
        print(f'  {cmd.ljust(20)} {alias.ljust(6)} {description}')
    print('')
    print(f'  {"shell".ljust(27)} Interactive shell')
    print(f'  {"quit".ljust(20)} {"q".ljust(6)} Exit shell')


def command_and_args_from_cmd(command_line):
    args = ''
    pos = command_line.find(' ')
    if pos > 0:
        cmd = command_line[:pos]
        args = command_line[pos + 1:].strip()
    else:
        cmd = command_line.strip()

    return cmd, args


def do_command(params, command_line):    # type: (ProvisionParams, str) -> any
    cmd, args = command_and_args_from_cmd(command_line)
    if not cmd:
        return
    if cmd in ('?', 'h', 'help'):
        display_command_help()
        return

    orig_cmd = cmd
    if cmd in aliases and cmd not in commands:
        cmd = aliases[cmd]

    command = commands.get(cmd)
    if command is None:
        logging.warning('Unknown command "%s"', orig_cmd)
        display_command_help()
        return

    if command.is_authorised() and not params.user:
        raise CommandError(orig_cmd, 'Administrator address is not configured. Use --user or set "user" in config')

    return command.execute_args(params, args, command=orig_cmd)


def runcommands(params, commands_to_run=None):    # type: (ProvisionParams, list) -> int
    error_no = 0
    for command in commands_to_run if commands_to_run is not None else params.commands:
        logging.debug('Executing [%s]...', command)
        try:
            result = do_command(params, command)
            if result is not None:
                print(result)
        except CommandError as e:
            error_no = 1
            logging.error(str(e))
        except Error as e:
            error_no = 1
            logging.error('Directory Error: %s', e.message)
        except Exception as e:
            error_no = 1
            logging.debug(e, exc_info=True)
            logging.error('An unexpected error occurred: %s', e)
    return error_no


def loop(params):  # type: (ProvisionParams) -> int
    error_no = 0

    logging.getLogger().setLevel(logging.DEBUG if params.debug else logging.WARNING if params.batch_mode else logging.INFO)
    prompt_session = None
    if not params.batch_mode:
        if os.isatty(0) and os.isatty(1):
            completer = WordCompleter(list(commands.keys()) + list(aliases.keys()))
            prompt_session = PromptSession(multiline=False, completer=completer, complete_while_typing=False)
        if params.user:
            logging.info('Administrator: %s', params.user)
        else:
            logging.info('Administrator address is not set. Restart with --user <email>')

    while True:
        command = ''
        if len(params.commands) > 0:
            command = params.commands[0].strip()
            params.commands = params.commands[1:]

        try:
            if not command:
                if prompt_session is not None:
                    command = prompt_session.prompt('Provisioner> ')
                else:
                    command = input('Provisioner> ')

            if command.lower() in ('q', 'quit'):
                break

            command = command.strip()
            if params.batch_mode:
                logging.info('> %s', command)
            error_no = 1
            result = do_command(params, command)
            error_no = 0
            if result:
                print(result)
        except EOFError:
            break
        except KeyboardInterrupt:
            pass
        except CommandError as e:
            logging.warning('%s', e)
        except Error as e:
            logging.error('Directory Error: %s', e.message)
        except Exception as e:
            logging.debug(e, exc_info=True)
            logging.error('An unexpected error occurred: %s', e)

        if params.batch_mode and error_no != 0:
            break

    if not params.batch_mode:
        logging.info('\nGoodbye.\n')

    return error_no
