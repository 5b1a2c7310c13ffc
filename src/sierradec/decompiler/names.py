'''Identifier naming for emitted pseudo-source'''

import re

from ..common import *

__all__ = ['var_name', 'function_name']

_NON_IDENT = re.compile(r'[^A-Za-z0-9_]')
_NUMERIC_ID = re.compile(r'^\[(\d+)\]$')


def var_name(var_id: int) -> str:
    '''`[3]` -> `v3`'''
    return f'{get_config().var_prefix}{var_id}'


def function_name(function_id: str) -> str:
    '''`[2]` -> `f_2`, `test::add` -> `f_test__add`'''
    prefix = get_config().function_prefix
    m = _NUMERIC_ID.match(function_id)
    if m:
        return f'{prefix}{m.group(1)}'

    return f'{prefix}{_NON_IDENT.sub("_", function_id)}'
