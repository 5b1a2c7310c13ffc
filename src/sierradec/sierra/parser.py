'''
Sierra text loader

Parses the textual Sierra format into the immutable Program Model:

    type [0] = u32 [storable: true, drop: true, dup: true, zero_sized: false];
    libfunc [0] = u32_overflowing_add;
    [0]([0], [1], [2]) { fallthrough([3], [4]) 3([5], [6]) };
    return([3], [4]);
    test::add@0([0]: RangeCheck, [1]: u32, [2]: u32) -> (RangeCheck, u32);

Ids are either numeric (`[3]`) or debug names carrying nested generic
arguments (`Array<u32>`, `core::option::Option::<u32>`, `Struct<ut@Tuple, u32>`).
'''

import logging
from pathlib import Path
from typing import NamedTuple

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from ..common import *
from ..ir.program import *

__all__ = [
    'SIERRA_GRAMMAR',
    'SierraParser',
    'load_program',
    'load_program_file',
    'read_source',
]

logger = logging.getLogger(__name__)


SIERRA_GRAMMAR = r'''
start: type_declaration* libfunc_declaration* statement* function*

type_declaration: "type" concrete_id "=" long_id type_info? ";"
type_info: "[" (info_item ("," info_item)*)? "]"
info_item: NAME ":" NAME

libfunc_declaration: "libfunc" concrete_id "=" long_id ";"

?statement: simple_invocation
          | branching_invocation
          | return_statement

simple_invocation: concrete_id "(" var_list ")" "->" "(" var_list ")" ";"
branching_invocation: concrete_id "(" var_list ")" "{" branch* "}" ";"
return_statement: "return" "(" var_list ")" ";"

branch: "fallthrough" "(" var_list ")"  -> fallthrough_branch
      | INT "(" var_list ")"            -> jump_branch

function: concrete_id "@" INT "(" param_list ")" "->" "(" type_list ")" ";"
param_list: (param ("," param)*)?
param: var ":" concrete_id
type_list: (concrete_id ("," concrete_id)*)?

var_list: (var ("," var)*)?
var: "[" INT "]"

?concrete_id: numeric_id
            | long_id
            | tuple_id
numeric_id: "[" INT "]"
tuple_id: "(" tuple_items? ")"
tuple_items: concrete_id ("," concrete_id)* ","?
long_id: NAME generic_args?
generic_args: TURBOFISH? "<" generic_arg ("," generic_arg)* ">"

generic_arg: concrete_id            -> type_arg
           | INT                    -> value_arg
           | NAME "@" concrete_id   -> user_arg

TURBOFISH: "::"
NAME: /[A-Za-z_][A-Za-z0-9_]*(::[A-Za-z_][A-Za-z0-9_]*)*/
INT: /-?[0-9]+/
COMMENT: /\/\/[^\n]*/

%import common.WS
%ignore WS
%ignore COMMENT
'''


_USER_ARG_KINDS = {
    'ut': GenericArgKind.USER_TYPE,
    'user': GenericArgKind.USER_FUNC,
    'lib': GenericArgKind.LIBFUNC,
}


class _LongId(NamedTuple):
    name: str
    args: tuple[GenericArg, ...]
    turbofish: bool

    @property
    def text(self) -> str:
        return format_generic_id(self.name, self.args, self.turbofish)


class _RawInvocation(NamedTuple):
    '''Invocation whose fallthrough targets are not resolved yet'''
    libfunc_id: str
    args: tuple[int, ...]
    branches: tuple[tuple[int | None, tuple[int, ...]], ...]


def _id_text(concrete_id: str | _LongId) -> str:
    if isinstance(concrete_id, _LongId):
        return concrete_id.text

    return concrete_id


@v_args(inline = True)
class SierraTransformer(Transformer):
    '''Turns the parse tree into model objects'''

    def start(self, *items):
        return list(items)

    def INT(self, token):
        return int(token)

    def NAME(self, token):
        return str(token)

    # ids

    def numeric_id(self, value):
        return f'[{value}]'

    def tuple_items(self, *concrete_ids):
        return tuple(_id_text(c) for c in concrete_ids)

    def tuple_id(self, items = ()):
        '''`()`, `(u32,)`, `(u32, felt252)`'''
        if len(items) == 1:
            return f'({items[0]},)'

        return f'({", ".join(items)})'

    def long_id(self, name, generic_args = None):
        if generic_args is None:
            return _LongId(name, (), False)

        turbofish, args = generic_args
        return _LongId(name, args, turbofish)

    def generic_args(self, *children):
        turbofish = False
        if children and isinstance(children[0], Token) and children[0].type == 'TURBOFISH':
            turbofish = True
            children = children[1:]

        return turbofish, tuple(children)

    def type_arg(self, concrete_id):
        return GenericArg.of_type(_id_text(concrete_id))

    def value_arg(self, value):
        return GenericArg.int_value(value)

    def user_arg(self, prefix, concrete_id):
        kind = _USER_ARG_KINDS.get(prefix)
        if kind is None:
            raise LoadError(f'unknown generic argument prefix {prefix!r}@')

        return GenericArg(kind, _id_text(concrete_id))

    # declarations

    def type_declaration(self, concrete_id, rhs, *_info):
        return TypeDeclaration(_id_text(concrete_id), rhs.name, rhs.args)

    def libfunc_declaration(self, concrete_id, rhs):
        return LibfuncDeclaration(_id_text(concrete_id), rhs.name, rhs.args)

    # statements

    def var(self, value):
        return value

    def var_list(self, *vars):
        return tuple(vars)

    def fallthrough_branch(self, results):
        return None, results

    def jump_branch(self, target, results):
        return target, results

    def simple_invocation(self, concrete_id, args, results):
        return _RawInvocation(_id_text(concrete_id), args, ((None, results),))

    def branching_invocation(self, concrete_id, args, *branches):
        return _RawInvocation(_id_text(concrete_id), args, tuple(branches))

    def return_statement(self, vars):
        return Return(vars)

    # functions

    def param(self, var, concrete_id):
        return Param(var, _id_text(concrete_id))

    def param_list(self, *params):
        return tuple(params)

    def type_list(self, *type_ids):
        return tuple(_id_text(t) for t in type_ids)

    def function(self, concrete_id, entry, params, ret_types):
        return Function(_id_text(concrete_id), params, ret_types, entry)


class SierraParser:
    '''Sierra text -> Program'''

    _lark: Lark | None = None

    @classmethod
    def _get_lark(cls) -> Lark:
        if cls._lark is None:
            cls._lark = Lark(SIERRA_GRAMMAR, parser = 'lalr')

        return cls._lark

    @classmethod
    def parse(cls, text: str) -> Program:
        try:
            tree = cls._get_lark().parse(text)

        except UnexpectedInput as e:
            raise LoadError(f'syntax error near {_context(text, e)!r}', e.line, e.column) from e

        try:
            items = SierraTransformer().transform(tree)

        except VisitError as e:
            if isinstance(e.orig_exc, DecompilerError):
                raise e.orig_exc from e

            raise

        program = cls._build_program(items)
        logger.info(f'Loaded {program}')
        return program

    @classmethod
    def _build_program(cls, items: list) -> Program:
        types = []
        libfuncs = []
        raw_statements = []
        functions = []

        for item in items:
            if isinstance(item, TypeDeclaration):
                types.append(item)

            elif isinstance(item, LibfuncDeclaration):
                libfuncs.append(item)

            elif isinstance(item, (_RawInvocation, Return)):
                raw_statements.append(item)

            elif isinstance(item, Function):
                functions.append(item)

            else:
                raise LoadError(f'unexpected item {item!r}')

        _check_unique('type', [t.id for t in types])
        _check_unique('libfunc', [lf.id for lf in libfuncs])
        _check_unique('function', [f.id for f in functions])

        count = len(raw_statements)
        statements = []
        for idx, raw in enumerate(raw_statements):
            if isinstance(raw, Return):
                statements.append(raw)
                continue

            if not raw.branches:
                raise LoadError(f'statement {idx}: invocation of {raw.libfunc_id} has no branches')

            branches = []
            for target, results in raw.branches:
                if target is None:
                    target = idx + 1

                if not 0 <= target < count:
                    raise LoadError(f'statement {idx}: branch target {target} out of range')

                branches.append(Branch(target, results))

            statements.append(Invocation(raw.libfunc_id, raw.args, tuple(branches)))

        for func in functions:
            if not 0 <= func.entry < count:
                raise LoadError(f'function {func.id}: entry point {func.entry} out of range')

        return Program(tuple(types), tuple(libfuncs), tuple(statements), tuple(functions))


def _check_unique(what: str, ids: list[str]):
    seen = set()
    for item_id in ids:
        if item_id in seen:
            raise LoadError(f'duplicate {what} id {item_id}')

        seen.add(item_id)


def _context(text: str, e: UnexpectedInput) -> str:
    try:
        return e.get_context(text, span = 20).splitlines()[0].strip()

    except (AttributeError, IndexError):
        return ''


def load_program(text: str) -> Program:
    '''Load a program from Sierra text'''
    return SierraParser.parse(text)


def read_source(path: str | Path) -> str:
    '''Sierra text of a file; OSError propagates, undecodable bytes are a LoadError'''
    path = Path(path)
    logger.debug(f'Reading {path}')
    try:
        return path.read_text(encoding = 'utf-8')

    except UnicodeDecodeError as e:
        raise LoadError(f'{path}: not valid UTF-8 text ({e.reason} at byte {e.start})') from e


def load_program_file(path: str | Path) -> Program:
    '''Load a program from a Sierra file'''
    return load_program(read_source(path))
