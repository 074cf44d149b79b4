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

from .base import register_commands, aliases, commands, command_info

__all__ = ['register_commands', 'aliases', 'commands', 'command_info']
