'''
Decompilation pipeline - Sierra text to pseudo-source text

    text --LoadPass--> Program --DecompilePass--> text
'''

import logging
from pathlib import Path
from typing import Any

from .ir import *
from .sierra import Catalog, CatalogTable, load_program, read_source
from .decompiler import ProgramEmitter

__all__ = [
    'Pass',
    'Pipeline',
    'LoadPass',
    'DecompilePass',
    'decompile_source',
    'decompile_file',
]

logger = logging.getLogger(__name__)


class Pass:
    '''Pass base class'''

    def run(self, input_data: Any) -> Any:
        '''Execute the pass'''
        raise NotImplementedError(f'{self.__class__.__name__}.run() not implemented')


class Pipeline:
    '''Ordered passes, each fed the previous pass's output'''

    def __init__(self, passes: list[Pass] = None):
        self.passes = passes or []

    def add_pass(self, pass_obj: Pass) -> 'Pipeline':
        self.passes.append(pass_obj)
        return self

    def run(self, input_data: Any) -> Any:
        result = input_data
        for pass_obj in self.passes:
            result = pass_obj.run(result)
            logger.debug(f'{pass_obj.__class__.__name__} -> {type(result).__name__}')

        return result


class LoadPass(Pass):
    '''Sierra text -> Program'''

    def run(self, input_data: str) -> Program:
        return load_program(input_data)


class DecompilePass(Pass):
    '''Program -> pseudo-source text'''

    def __init__(self, table: CatalogTable = None):
        self.table = table

    def run(self, input_data: Program) -> str:
        catalog = Catalog(input_data, self.table)
        text = ProgramEmitter(input_data, catalog).emit()
        logger.info(f'decompiled {len(input_data.functions)} functions')
        return text


def decompile_source(text: str, table: CatalogTable = None) -> str:
    '''Decompile Sierra text

    Raises:
        DecompilerError: any load, lookup, unsupported operator or cycle error
    '''
    pipeline = Pipeline([LoadPass(), DecompilePass(table)])
    return pipeline.run(text)


def decompile_file(path: str | Path, table: CatalogTable = None) -> str:
    '''Decompile a Sierra file; OSError propagates, undecodable bytes raise LoadError'''
    text = read_source(path)
    return decompile_source(text, table)
