'''
Function / Program Emitter - signature lines around walked bodies
'''

import logging

from ..common import *
from ..ir.program import *
from ..sierra.catalog import Catalog
from .names import *
from .types import TypeResolver
from .walker import StatementWalker

__all__ = [
    'FunctionEmitter',
    'ProgramEmitter',
]

logger = logging.getLogger(__name__)


class FunctionEmitter:
    '''Emit one function as a block of pseudo-source lines'''

    def __init__(self, program: Program, catalog: Catalog, resolver: TypeResolver = None):
        self.resolver = resolver or TypeResolver(catalog)
        self.walker = StatementWalker(program, catalog, self.resolver)

    def signature(self, function: Function) -> str:
        params = ', '.join(
            f'{var_name(param.var_id)}: {self.resolver.resolve(param.type_id)}'
            for param in function.params
        )
        ret_types = ', '.join(self.resolver.resolve_all(function.ret_types))
        return f'pub fn {function_name(function.id)}({params}) -> ({ret_types}) {{'

    def emit(self, function: Function) -> list[str]:
        header = self.signature(function)
        body = self.walker.walk(function)
        return [header, *body.lines, '}']


class ProgramEmitter:
    '''Emit every function of a program in declaration order

    Emission is all-or-nothing: the first fatal error aborts the whole program.
    '''

    def __init__(self, program: Program, catalog: Catalog = None):
        self.program = program
        self.catalog = catalog or Catalog(program)
        self.function_emitter = FunctionEmitter(program, self.catalog)

    def emit_lines(self) -> list[str]:
        lines = []

        for i, function in enumerate(self.program.functions):
            try:
                block = self.function_emitter.emit(function)

            except DecompilerError as e:
                logger.error(f'failed to emit {function.id}: {e}')
                e.add_note(f'while emitting function {function.id}')
                raise

            if i:
                lines.append('')

            lines.extend(block)
            logger.debug(f'emitted {function.id}: {len(block)} lines')

        return lines

    def emit(self) -> str:
        '''Full output text, newline terminated'''
        lines = self.emit_lines()
        return '\n'.join(lines) + '\n' if lines else ''
