'''
Program Model - immutable in-memory form of a loaded Sierra program

Concrete ids (types, libfuncs, functions) are kept as their canonical text:
either a numeric id such as `[3]` or a debug name such as `Array<u32>`.
Variable ids are plain integers, statements are addressed by their index in
the shared `Program.statements` tuple.
'''

from dataclasses import dataclass
from enum import Enum, auto

__all__ = [
    'GenericArgKind',
    'GenericArg',
    'TypeDeclaration',
    'LibfuncDeclaration',
    'Branch',
    'Invocation',
    'Return',
    'Statement',
    'Param',
    'Function',
    'Program',
    'format_generic_id',
]


class GenericArgKind(Enum):
    '''Kinds of generic arguments'''
    TYPE = auto()       # Reference to a concrete type id
    VALUE = auto()      # Integer literal
    USER_TYPE = auto()  # ut@...
    USER_FUNC = auto()  # user@...
    LIBFUNC = auto()    # lib@...


_ARG_PREFIXES = {
    GenericArgKind.USER_TYPE: 'ut@',
    GenericArgKind.USER_FUNC: 'user@',
    GenericArgKind.LIBFUNC: 'lib@',
}


@dataclass(frozen = True)
class GenericArg:
    '''Generic argument of a type or libfunc declaration'''
    kind: GenericArgKind
    value: int | str

    @classmethod
    def of_type(cls, type_id: str) -> 'GenericArg':
        return cls(GenericArgKind.TYPE, type_id)

    @classmethod
    def int_value(cls, value: int) -> 'GenericArg':
        return cls(GenericArgKind.VALUE, value)

    def __str__(self) -> str:
        return f'{_ARG_PREFIXES.get(self.kind, "")}{self.value}'


def format_generic_id(name: str, args: tuple[GenericArg, ...] = (), turbofish: bool = False) -> str:
    '''Canonical text of a generic id with its arguments'''
    if not args:
        return name

    sep = '::' if turbofish else ''
    return f'{name}{sep}<{", ".join(str(arg) for arg in args)}>'


@dataclass(frozen = True)
class TypeDeclaration:
    '''`type <id> = <generic_id><args>;`, declaration info is not kept'''
    id: str
    generic_id: str
    args: tuple[GenericArg, ...] = ()

    def __str__(self) -> str:
        return f'type {self.id} = {format_generic_id(self.generic_id, self.args)}'


@dataclass(frozen = True)
class LibfuncDeclaration:
    '''`libfunc <id> = <generic_id><args>;`'''
    id: str
    generic_id: str
    args: tuple[GenericArg, ...] = ()

    def __str__(self) -> str:
        return f'libfunc {self.id} = {format_generic_id(self.generic_id, self.args)}'


@dataclass(frozen = True)
class Branch:
    '''One successor of an invocation'''
    target: int
    results: tuple[int, ...] = ()


class Statement:
    '''Base class for statements'''
    pass


@dataclass(frozen = True)
class Invocation(Statement):
    '''Libfunc invocation with one or more branches'''
    libfunc_id: str
    args: tuple[int, ...]
    branches: tuple[Branch, ...]

    def __str__(self) -> str:
        args = ', '.join(f'[{a}]' for a in self.args)
        branches = ' '.join(
            f'{b.target}({", ".join(f"[{r}]" for r in b.results)})' for b in self.branches
        )
        return f'{self.libfunc_id}({args}) {{ {branches} }}'


@dataclass(frozen = True)
class Return(Statement):
    '''Terminal statement'''
    vars: tuple[int, ...] = ()

    def __str__(self) -> str:
        return f'return({", ".join(f"[{v}]" for v in self.vars)})'


@dataclass(frozen = True)
class Param:
    '''Function parameter'''
    var_id: int
    type_id: str


@dataclass(frozen = True)
class Function:
    '''Function entry point and signature'''
    id: str
    params: tuple[Param, ...]
    ret_types: tuple[str, ...]
    entry: int

    @property
    def param_types(self) -> tuple[str, ...]:
        return tuple(p.type_id for p in self.params)


@dataclass(frozen = True)
class Program:
    '''Loaded program: declarations, the flat statement list and functions'''
    types: tuple[TypeDeclaration, ...] = ()
    libfuncs: tuple[LibfuncDeclaration, ...] = ()
    statements: tuple[Statement, ...] = ()
    functions: tuple[Function, ...] = ()

    def statement(self, idx: int) -> Statement:
        return self.statements[idx]

    def __str__(self) -> str:
        return (
            f'Program(types = {len(self.types)}, libfuncs = {len(self.libfuncs)}, '
            f'statements = {len(self.statements)}, functions = {len(self.functions)})'
        )
