'''
Statement Walker - flat branch-addressed statements to nested pseudo-source

Starting at a function's entry, the walker follows branch targets and emits
one or more lines per statement:

- single-successor invocations are inlined at the current depth
- checked arithmetic (the only two-successor operator with a template) opens
  an `if !overflowed { ... } else { ... }` pair one level deeper
- a Return terminates the current path

No control-flow graph is built. Work is driven by an explicit stack of
(statement index, depth) items so long straight-line bodies do not exhaust the
interpreter's recursion limit. Indices on the path being walked are tracked;
reaching one of them again is a back-edge and raises ControlFlowCycleError.
'''

import logging
from dataclasses import dataclass, field
from typing import Callable, NamedTuple

from ..common import *
from ..ir.program import *
from ..sierra.catalog import Catalog
from ..sierra.descriptors import *
from .names import *
from .types import TypeResolver

__all__ = [
    'WalkResult',
    'StatementWalker',
]

logger = logging.getLogger(__name__)


class _Visit(NamedTuple):
    index: int
    depth: int
    segment: list[int]      # indices entered since the last branch point


class _Unwind(NamedTuple):
    segment: list[int]


class _Deferred(NamedTuple):
    build: Callable[[], list[str]]


@dataclass
class WalkResult:
    '''Emitted body lines and the statements visited, in visit order'''
    lines: list[str] = field(default_factory = list)
    visited: list[int] = field(default_factory = list)


class _FunctionContext(StrictBase):
    '''Mutable state owned by one function's emission'''
    function: Function
    result: WalkResult
    declared: set[int]
    active: set[int]

    def __init__(self, function: Function):
        self.function = function
        self.result = WalkResult()
        self.declared = {param.var_id for param in function.params}
        self.active = set()

    def bind(self, var_id: int, type_text: str, mutable: bool = False) -> str:
        '''Left-hand side of a binding of `var_id`'''
        if var_id in self.declared:
            return f'{var_name(var_id)} = '

        self.declared.add(var_id)
        mut = 'mut ' if mutable else ''
        return f'let {mut}{var_name(var_id)}: {type_text} = '

    def bind_tuple(self, var_ids, type_texts) -> str:
        '''Left-hand side of a destructuring binding'''
        var_ids = list(var_ids)
        if var_ids and all(var_id in self.declared for var_id in var_ids):
            return f'({", ".join(var_name(v) for v in var_ids)}) = '

        self.declared.update(var_ids)
        items = ', '.join(f'{var_name(v)}: {t}' for v, t in zip(var_ids, type_texts))
        return f'let ({items}) = '


class StatementWalker:
    '''Emit the body of a function'''

    def __init__(self, program: Program, catalog: Catalog, resolver: TypeResolver = None):
        self.program = program
        self.catalog = catalog
        self.resolver = resolver or TypeResolver(catalog)

    def walk(self, function: Function) -> WalkResult:
        '''Walk a function body from its entry point'''
        ctx = _FunctionContext(function)
        stack: list = [_Visit(function.entry, 1, [])]

        while stack:
            item = stack.pop()

            if isinstance(item, str):
                ctx.result.lines.append(item)

            elif isinstance(item, _Unwind):
                ctx.active.difference_update(item.segment)

            elif isinstance(item, _Deferred):
                ctx.result.lines.extend(item.build())

            else:
                self._visit(ctx, item, stack)

        logger.debug(
            f'{function.id}: visited {len(ctx.result.visited)} statements, '
            f'emitted {len(ctx.result.lines)} lines'
        )
        return ctx.result

    def _visit(self, ctx: _FunctionContext, item: _Visit, stack: list):
        index, depth, segment = item

        if index in ctx.active:
            raise ControlFlowCycleError(index)

        ctx.active.add(index)
        segment.append(index)
        ctx.result.visited.append(index)

        statement = self.program.statement(index)
        indent = default_indent() * depth

        if isinstance(statement, Return):
            values = ', '.join(var_name(v) for v in statement.vars)
            ctx.result.lines.append(f'{indent}return {values};' if values else f'{indent}return;')
            return

        if not isinstance(statement, Invocation):
            raise LoadError(f'statement {index}: unknown statement {statement!r}')

        desc = self.catalog.get_libfunc(statement.libfunc_id)
        if isinstance(desc, UnsupportedLibfunc):
            raise UnsupportedOperatorError(statement.libfunc_id, desc.generic_id, index)

        self._check_branches(statement, desc, index)

        if isinstance(desc, OverflowingArithLibfunc):
            self._emit_overflowing_arith(ctx, statement, desc, index, depth, segment, stack)
            return

        # Every line of the statement is built before any of it is emitted
        lines = self._format_invocation(ctx, statement, desc, index, indent)
        ctx.result.lines.extend(lines)
        stack.append(_Visit(statement.branches[0].target, depth, segment))

    def _check_branches(self, inv: Invocation, desc: LibfuncDescriptor, index: int):
        signatures = desc.branch_signatures
        if len(inv.branches) != len(signatures):
            raise LoadError(
                f'statement {index}: {inv.libfunc_id} has {len(inv.branches)} branch(es), '
                f'expected {len(signatures)}'
            )

        for i, (branch, signature) in enumerate(zip(inv.branches, signatures)):
            if len(branch.results) != len(signature.vars):
                raise LoadError(
                    f'statement {index}: branch {i} of {inv.libfunc_id} has {len(branch.results)} result(s), '
                    f'expected {len(signature.vars)}'
                )

    def _expect_args(self, inv: Invocation, count: int, index: int):
        if len(inv.args) != count:
            raise LoadError(
                f'statement {index}: {inv.libfunc_id} takes {count} argument(s), got {len(inv.args)}'
            )

    def _result_types(self, desc: LibfuncDescriptor, branch: int = 0) -> list[str]:
        return self.resolver.resolve_all(desc.branch_signatures[branch].vars)

    def _format_invocation(
        self,
        ctx: _FunctionContext,
        inv: Invocation,
        desc: LibfuncDescriptor,
        index: int,
        indent: str
    ) -> list[str]:
        '''Lines for a single-branch invocation'''
        results = inv.branches[0].results
        args = [var_name(a) for a in inv.args]

        if isinstance(desc, StructuralLibfunc):
            return []

        elif isinstance(desc, ArrayNewLibfunc):
            self._expect_args(inv, 0, index)
            ty, = self._result_types(desc)
            return [f'{indent}{ctx.bind(results[0], ty, mutable = True)}Array::new();']

        elif isinstance(desc, ArrayAppendLibfunc):
            self._expect_args(inv, 2, index)
            ty, = self._result_types(desc)
            array, value = args
            return [
                f'{indent}{array}.append({value});',
                f'{indent}{ctx.bind(results[0], ty, mutable = True)}{array};',
            ]

        elif isinstance(desc, StructConstructLibfunc):
            self._expect_args(inv, len(desc.members), index)
            ty, = self._result_types(desc)
            binding = ctx.bind(results[0], ty)
            if not args:
                return [f'{indent}{binding}Struct {{}};']

            field_indent = indent + default_indent()
            return [
                f'{indent}{binding}Struct {{',
                *[f'{field_indent}field_{i}: {arg},' for i, arg in enumerate(args)],
                f'{indent}}};',
            ]

        elif isinstance(desc, StructDeconstructLibfunc):
            self._expect_args(inv, 1, index)
            types = self._result_types(desc)
            return [f'{indent}{ctx.bind_tuple(results, types)}{args[0]};']

        elif isinstance(desc, EnumInitLibfunc):
            self._expect_args(inv, 1, index)
            ty, = self._result_types(desc)
            return [f'{indent}{ctx.bind(results[0], ty)}Enum::Variant{desc.index}({", ".join(args)});']

        elif isinstance(desc, ConstLibfunc):
            self._expect_args(inv, 0, index)
            ty, = self._result_types(desc)
            value = ', '.join(str(v) for v in desc.values)
            return [f'{indent}{ctx.bind(results[0], ty)}{value};']

        elif isinstance(desc, DropLibfunc):
            self._expect_args(inv, 1, index)
            return [f'{indent}drop({args[0]});']

        elif isinstance(desc, (DupLibfunc, RenameLibfunc)):
            self._expect_args(inv, 1, index)
            types = self._result_types(desc)
            return [
                f'{indent}{ctx.bind(result, ty)}{args[0]};'
                for result, ty in zip(results, types)
                if result != inv.args[0]
            ]

        elif isinstance(desc, FunctionCallLibfunc):
            callee = self.catalog.get_function(desc.function_id)
            self._expect_args(inv, len(callee.params), index)
            call = f'{function_name(callee.id)}({", ".join(args)})'
            types = self._result_types(desc)

            if not results:
                return [f'{indent}{call};']

            elif len(results) == 1:
                return [f'{indent}{ctx.bind(results[0], types[0])}{call};']

            return [f'{indent}{ctx.bind_tuple(results, types)}{call};']

        raise UnsupportedOperatorError(inv.libfunc_id, desc.generic_id, index)

    def _emit_overflowing_arith(
        self,
        ctx: _FunctionContext,
        inv: Invocation,
        desc: OverflowingArithLibfunc,
        index: int,
        depth: int,
        segment: list[int],
        stack: list
    ):
        '''
        let (v4: u32, v4_overflowed: bool) = v1 + v2;
        if !v4_overflowed {
            let v3: RangeCheck = v0;
            ...
        } else {
            let v5: RangeCheck = v0;
            let v6: u32 = v4;
            ...
        }
        '''
        self._expect_args(inv, 3, index)

        indent = default_indent() * depth
        inner = default_indent() * (depth + 1)

        range_check, lhs, rhs = (var_name(a) for a in inv.args)
        ok_branch, overflow_branch = inv.branches
        ok_range_check, ok_value = ok_branch.results
        overflow_range_check, overflow_value = overflow_branch.results

        int_ty = self.resolver.resolve(desc.int_type)
        ok_types = self._result_types(desc, 0)
        overflow_types = self._result_types(desc, 1)

        value = var_name(ok_value)
        flag = f'{value}_overflowed'

        head = ctx.bind_tuple([ok_value], [int_ty])
        if head.startswith('let '):
            head = f'let ({value}: {int_ty}, {flag}: bool) = '
        else:
            head = f'({value}, {flag}) = '

        ctx.result.lines.extend([
            f'{indent}{head}{lhs} {desc.operator} {rhs};',
            f'{indent}if !{flag} {{',
            f'{inner}{ctx.bind(ok_range_check, ok_types[0])}{range_check};',
        ])

        def open_else() -> list[str]:
            lines = [
                f'{indent}}} else {{',
                f'{inner}{ctx.bind(overflow_range_check, overflow_types[0])}{range_check};',
            ]
            if overflow_value != ok_value:
                lines.append(f'{inner}{ctx.bind(overflow_value, overflow_types[1])}{value};')

            return lines

        ok_segment = []
        overflow_segment = []

        stack.append(f'{indent}}}')
        stack.append(_Unwind(overflow_segment))
        stack.append(_Visit(overflow_branch.target, depth + 1, overflow_segment))
        stack.append(_Deferred(open_else))
        stack.append(_Unwind(ok_segment))
        stack.append(_Visit(ok_branch.target, depth + 1, ok_segment))
