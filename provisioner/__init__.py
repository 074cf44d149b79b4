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

__version__ = '1.0.0'
