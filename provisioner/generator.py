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
import string
from secrets import choice
from collections import namedtuple

from Cryptodome.Random.random import shuffle

from .constants import TEMPORARY_PASSWORD_LENGTH, TEMPORARY_PASSWORD_SPECIAL_CHARACTERS

PasswordStrength = namedtuple('PasswordStrength', 'length caps lower digits symbols')


def get_password_strength(password, special_characters=TEMPORARY_PASSWORD_SPECIAL_CHARACTERS):
    # type: (str, str) -> PasswordStrength
    length = len(password)
    caps = 0
    lower = 0
    digits = 0
    symbols = 0

    for ch in password:
        if ch in string.ascii_uppercase:
            caps += 1
        elif ch in string.ascii_lowercase:
            lower += 1
        elif ch in string.digits:
            digits += 1
        elif ch in special_characters:
            symbols += 1
    return PasswordStrength(length=length, caps=caps, lower=lower, digits=digits, symbols=symbols)


def generate_temporary_password():
    generator = TemporaryPasswordGenerator()
    return generator.generate()


class PasswordGenerator(abc.ABC):
    @abc.abstractmethod
    def generate(self):   # type: () -> str
        pass


class TemporaryPasswordGenerator(PasswordGenerator):
    """Temporary credential with at least one character of every class

    One character per class is seeded first, the rest is drawn from the combined
    alphabet, and the result is shuffled with a cryptographic random source.
    """
    def __init__(self, length=TEMPORARY_PASSWORD_LENGTH, special_characters=TEMPORARY_PASSWORD_SPECIAL_CHARACTERS):
        # type: (int, str) -> None
        if not special_characters:
            raise ValueError('Special character set is empty')
        self.categories = [
            string.ascii_uppercase,
            string.ascii_lowercase,
            string.digits,
            special_characters,
        ]
        if length < len(self.categories):
            raise ValueError(f'Password length should be at least {len(self.categories)}')
        self.length = length
        self.alphabet = ''.join(self.categories)

    def generate(self):    # type: () -> str
        password_list = [choice(chars) for chars in self.categories]
        password_list.extend(choice(self.alphabet) for _ in range(self.length - len(password_list)))
        shuffle(password_list)
        return ''.join(password_list)
