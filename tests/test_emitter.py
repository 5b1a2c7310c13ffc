#!/usr/bin/env python3
'''
Unit tests for function and program emission
'''

from pathlib import Path
import sys
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from sierradec.common import *
from sierradec.sierra import Catalog, load_program_file
from sierradec.decompiler import *

DATA_DIR = Path(__file__).parent / 'data'


def expected(name: str) -> str:
    return (DATA_DIR / f'{name}.cairo_dec').read_text(encoding = 'utf-8')


class TestNames(unittest.TestCase):
    '''Test identifier naming'''

    def setUp(self):
        get_config().reset()

    def tearDown(self):
        get_config().reset()

    def test_var_name(self):
        self.assertEqual(var_name(12), 'v12')

    def test_function_name(self):
        self.assertEqual(function_name('[3]'), 'f_3')
        self.assertEqual(function_name('test::add'), 'f_test__add')
        self.assertEqual(function_name('core::Into::<u8>::into'), 'f_core__Into___u8___into')

    def test_prefixes(self):
        get_config().set('function_prefix', 'fn_')
        get_config().set('var_prefix', 'x')

        self.assertEqual(function_name('[3]'), 'fn_3')
        self.assertEqual(var_name(1), 'x1')


class TestFunctionEmitter(unittest.TestCase):
    '''Test per-function emission'''

    def setUp(self):
        get_config().reset()
        self.program = load_program_file(DATA_DIR / 'checked_add.sierra')
        self.emitter = FunctionEmitter(self.program, Catalog(self.program))

    def test_signature(self):
        self.assertEqual(
            self.emitter.signature(self.program.functions[0]),
            'pub fn f_test__add(v0: RangeCheck, v1: u32, v2: u32) -> (RangeCheck, u32) {'
        )

    def test_block(self):
        lines = self.emitter.emit(self.program.functions[0])

        self.assertEqual(lines[0], self.emitter.signature(self.program.functions[0]))
        self.assertEqual(lines[-1], '}')
        self.assertEqual('\n'.join(lines) + '\n', expected('checked_add'))


class TestProgramEmitter(unittest.TestCase):
    '''Test whole-program emission'''

    def setUp(self):
        get_config().reset()

    def emit(self, name: str) -> str:
        return ProgramEmitter(load_program_file(DATA_DIR / f'{name}.sierra')).emit()

    def test_checked_add(self):
        self.assertEqual(self.emit('checked_add'), expected('checked_add'))

    def test_array_append(self):
        self.assertEqual(self.emit('array_append'), expected('array_append'))

    def test_multiple_functions(self):
        '''Functions in declared order, blank-line separated'''
        self.assertEqual(self.emit('numeric_ids'), expected('numeric_ids'))

    def test_structs(self):
        self.assertEqual(self.emit('structs'), expected('structs'))

    def test_all_or_nothing(self):
        program = load_program_file(DATA_DIR / 'unsupported.sierra')
        emitter = ProgramEmitter(program)

        with self.assertLogs('sierradec.decompiler.emitter', 'ERROR') as logs:
            with self.assertRaises(UnsupportedOperatorError) as cm:
                emitter.emit()

        self.assertIn('test::sum', logs.output[0])
        self.assertIn('while emitting function test::sum', cm.exception.__notes__)

    def test_cycle_aborts(self):
        program = load_program_file(DATA_DIR / 'cycle.sierra')

        with self.assertLogs('sierradec.decompiler.emitter', 'ERROR'):
            with self.assertRaises(ControlFlowCycleError):
                ProgramEmitter(program).emit()


if __name__ == '__main__':
    unittest.main()
