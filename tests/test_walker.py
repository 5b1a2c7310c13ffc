#!/usr/bin/env python3
'''
Unit tests for the statement walker
'''

from pathlib import Path
import sys
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from sierradec.common import *
from sierradec.sierra import Catalog, load_program, load_program_file
from sierradec.decompiler import StatementWalker

DATA_DIR = Path(__file__).parent / 'data'


def walk(program, function_index = 0):
    walker = StatementWalker(program, Catalog(program))
    return walker.walk(program.functions[function_index])


def walk_fixture(name: str, function_index = 0):
    return walk(load_program_file(DATA_DIR / f'{name}.sierra'), function_index)


class TestStatementWalker(unittest.TestCase):
    '''Test body emission'''

    def setUp(self):
        get_config().reset()

    def tearDown(self):
        get_config().reset()

    def test_checked_add(self):
        result = walk_fixture('checked_add')

        self.assertEqual(result.lines, [
            '    let (v4: u32, v4_overflowed: bool) = v1 + v2;',
            '    if !v4_overflowed {',
            '        let v3: RangeCheck = v0;',
            '        return v3, v4;',
            '    } else {',
            '        let v5: RangeCheck = v0;',
            '        let v6: u32 = v4;',
            '        drop(v6);',
            '        let v7: u32 = 4294967295;',
            '        return v5, v7;',
            '    }',
        ])

    def test_each_statement_visited_once(self):
        result = walk_fixture('checked_add')
        self.assertEqual(result.visited, list(range(11)))

    def test_array_append(self):
        result = walk_fixture('array_append')

        self.assertEqual(result.lines, [
            '    v0.append(v1);',
            '    let mut v2: Array<felt252> = v0;',
            '    return v2;',
        ])

    def test_templates(self):
        result = walk_fixture('structs')

        self.assertEqual(result.lines[:4], [
            '    let v2: (u32, felt252) = Struct {',
            '        field_0: v0,',
            '        field_1: v1,',
            '    };',
        ])
        self.assertIn('    let (v3: u32, v4: felt252) = v2;', result.lines)
        self.assertIn('    let v7: () = Struct {};', result.lines)
        self.assertIn('    let mut v8: Array<u32> = Array::new();', result.lines)
        self.assertIn('    let v10: Enum<u32, ()> = Enum::Variant0(v5);', result.lines)

    def test_dup_skips_unchanged_result(self):
        result = walk_fixture('structs')

        self.assertIn('    let v5: u32 = v3;', result.lines)
        self.assertNotIn('    let v3: u32 = v3;', result.lines)

    def test_function_call(self):
        result = walk_fixture('numeric_ids', 1)

        self.assertEqual(result.lines, [
            '    let (v8: RangeCheck, v9: u8) = f_0(v0, v1, v1);',
            '    return v8, v9;',
        ])

    def test_empty_return(self):
        program = load_program('''
            type felt252 = felt252;
            libfunc drop<felt252> = drop<felt252>;
            drop<felt252>([0]) -> ();
            return();
            test::sink@0([0]: felt252) -> ();
        ''')

        self.assertEqual(walk(program).lines, [
            '    drop(v0);',
            '    return;',
        ])

    def test_redeclaration_is_assignment(self):
        program = load_program('''
            type felt252 = felt252;
            libfunc rename<felt252> = rename<felt252>;
            rename<felt252>([0]) -> ([1]);
            rename<felt252>([1]) -> ([0]);
            return([0]);
            test::swap@0([0]: felt252) -> (felt252);
        ''')

        self.assertEqual(walk(program).lines, [
            '    let v1: felt252 = v0;',
            '    v0 = v1;',
            '    return v0;',
        ])

    def test_converging_branches(self):
        '''Both branches reach the same tail; each path walks it'''
        program = load_program('''
            type RangeCheck = RangeCheck;
            type u32 = u32;
            libfunc u32_overflowing_add = u32_overflowing_add;
            u32_overflowing_add([0], [1], [2]) { fallthrough([3], [4]) 1([3], [4]) };
            return([3], [4]);
            test::add@0([0]: RangeCheck, [1]: u32, [2]: u32) -> (RangeCheck, u32);
        ''')

        result = walk(program)
        self.assertEqual(result.visited, [0, 1, 1])
        self.assertEqual(result.lines, [
            '    let (v4: u32, v4_overflowed: bool) = v1 + v2;',
            '    if !v4_overflowed {',
            '        let v3: RangeCheck = v0;',
            '        return v3, v4;',
            '    } else {',
            '        v3 = v0;',
            '        return v3, v4;',
            '    }',
        ])

    def test_indent_config(self):
        get_config().set('indent', 2)
        result = walk_fixture('array_append')

        self.assertEqual(result.lines[0], '  v0.append(v1);')

    def test_long_chain(self):
        '''Straight-line bodies longer than the recursion limit'''
        count = sys.getrecursionlimit() + 100
        text = '\n'.join([
            'libfunc branch_align = branch_align;',
            *['branch_align() -> ();'] * count,
            'return();',
            'test::long@0() -> ();',
        ])

        result = walk(load_program(text))
        self.assertEqual(result.lines, ['    return;'])
        self.assertEqual(len(result.visited), count + 1)


class TestStatementWalkerErrors(unittest.TestCase):
    '''Fatal walker errors'''

    def setUp(self):
        get_config().reset()

    def test_cycle(self):
        with self.assertRaises(ControlFlowCycleError) as cm:
            walk_fixture('cycle')

        self.assertEqual(cm.exception.statement_idx, 0)

    def test_unsupported_operator(self):
        with self.assertRaises(UnsupportedOperatorError) as cm:
            walk_fixture('unsupported', 1)

        self.assertEqual(cm.exception.generic_id, 'felt252_add')
        self.assertEqual(cm.exception.statement_idx, 3)

    def test_supported_function_unaffected(self):
        result = walk_fixture('unsupported', 0)
        self.assertEqual(result.lines, ['    return v0;'])

    def test_branch_count_mismatch(self):
        program = load_program('''
            type RangeCheck = RangeCheck;
            type u32 = u32;
            libfunc u32_overflowing_add = u32_overflowing_add;
            u32_overflowing_add([0], [1], [2]) -> ([3], [4]);
            return([3], [4]);
            test::add@0([0]: RangeCheck, [1]: u32, [2]: u32) -> (RangeCheck, u32);
        ''')

        with self.assertRaises(LoadError):
            walk(program)

    def test_struct_member_count_mismatch(self):
        program = load_program('''
            type u32 = u32;
            type Tuple<u32, u32> = Struct<ut@Tuple, u32, u32>;
            libfunc struct_construct<Tuple<u32, u32>> = struct_construct<Tuple<u32, u32>>;
            struct_construct<Tuple<u32, u32>>([0]) -> ([1]);
            return([1]);
            test::f@0([0]: u32) -> (Tuple<u32, u32>);
        ''')

        with self.assertRaises(LoadError):
            walk(program)

    def test_result_count_mismatch(self):
        program = load_program('''
            type felt252 = felt252;
            libfunc drop<felt252> = drop<felt252>;
            drop<felt252>([0]) -> ([1]);
            return([1]);
            test::f@0([0]: felt252) -> (felt252);
        ''')

        with self.assertRaises(LoadError):
            walk(program)


if __name__ == '__main__':
    unittest.main()
