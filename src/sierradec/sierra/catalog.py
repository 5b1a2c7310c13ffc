'''
Sierra Catalog - read-only type/libfunc oracle for a loaded program

Declarations are specialized lazily: looking up a type or libfunc id turns
its generic declaration into a descriptor (see descriptors.py) and caches it.
Which generic names are known, and which operator kind each libfunc belongs
to, comes from a YAML table (catalog.yaml, optionally extended by the user).
'''

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

import yaml

from ..common import *
from ..ir.program import *
from .descriptors import *

__all__ = [
    'CatalogTable',
    'Catalog',
    'BUILTIN_CATALOG_PATH',
]

logger = logging.getLogger(__name__)

BUILTIN_CATALOG_PATH = Path(__file__).with_name('catalog.yaml')

UNSUPPORTED_KIND = 'unsupported'


class CatalogTable:
    '''Known generic types and libfuncs'''

    _builtin: Optional['CatalogTable'] = None

    def __init__(self):
        self.scalars: Dict[str, str] = {}
        self.wrappers: Dict[str, str] = {}
        self.libfunc_kinds: Dict[str, str] = {}

    @classmethod
    def builtin(cls) -> 'CatalogTable':
        '''Table shipped with the package'''
        if cls._builtin is None:
            table = cls()
            table.load_yaml(BUILTIN_CATALOG_PATH)
            cls._builtin = table

        return cls._builtin

    @classmethod
    def default(cls) -> 'CatalogTable':
        '''Builtin table, extended by the configured catalog file if any'''
        extra = get_config().catalog
        if not extra:
            return cls.builtin()

        table = cls.builtin().copy()
        table.load_yaml(Path(extra))
        return table

    def copy(self) -> 'CatalogTable':
        table = CatalogTable()
        table.scalars = dict(self.scalars)
        table.wrappers = dict(self.wrappers)
        table.libfunc_kinds = dict(self.libfunc_kinds)
        return table

    def load_yaml(self, path: Path):
        '''Load a table from YAML, entries override earlier ones'''
        with open(path, 'r', encoding = 'utf-8') as f:
            data = yaml.safe_load(f)

        if not data:
            return

        types = data.get('types') or {}
        self.scalars.update(types.get('scalars') or {})
        self.wrappers.update(types.get('wrappers') or {})
        self._load_libfuncs(data.get('libfuncs') or {})

        logger.debug(f'Loaded catalog table {path}: {len(self.scalars)} scalars, {len(self.libfunc_kinds)} libfuncs')

    def _load_libfuncs(self, libfuncs_data: Dict[str, List[str]]):
        for kind, names in libfuncs_data.items():
            for name in names or ():
                self.libfunc_kinds[name] = kind

    def libfunc_kind(self, generic_id: str) -> str | None:
        return self.libfunc_kinds.get(generic_id)


class Catalog:
    '''Type and libfunc lookups for one program'''

    def __init__(self, program: Program, table: CatalogTable = None):
        self.program = program
        self.table = table or CatalogTable.default()

        self._type_decls = {decl.id: decl for decl in program.types}
        self._libfunc_decls = {decl.id: decl for decl in program.libfuncs}
        self._functions = {func.id: func for func in program.functions}
        self._type_index: dict[tuple[str, tuple[GenericArg, ...]], str] | None = None

        self._types: dict[str, TypeDescriptor] = {}
        self._libfuncs: dict[str, LibfuncDescriptor] = {}

        self._libfunc_builders: dict[str, Callable[[LibfuncDeclaration], LibfuncDescriptor]] = {
            'structural'        : self._build_structural,
            'array_new'         : self._build_array_new,
            'array_append'      : self._build_array_append,
            'struct_construct'  : self._build_struct_construct,
            'struct_deconstruct': self._build_struct_deconstruct,
            'enum_init'         : self._build_enum_init,
            'const_as_immediate': self._build_const_as_immediate,
            'int_const'         : self._build_int_const,
            'drop'              : self._build_drop,
            'dup'               : self._build_dup,
            'rename'            : self._build_rename,
            'function_call'     : self._build_function_call,
            'overflowing_add'   : self._build_overflowing_arith,
            'overflowing_sub'   : self._build_overflowing_arith,
        }

    # ========================================================================
    # Functions
    # ========================================================================

    def get_function(self, function_id: str) -> Function:
        func = self._functions.get(function_id)
        if func is None:
            raise OperatorLookupError(function_id, 'unknown function id')

        return func

    # ========================================================================
    # Types
    # ========================================================================

    def get_type(self, type_id: str) -> TypeDescriptor:
        '''Specialized descriptor of a declared type'''
        desc = self._types.get(type_id)
        if desc is not None:
            return desc

        decl = self._type_decls.get(type_id)
        if decl is None:
            raise TypeLookupError(type_id)

        desc = self._specialize_type(decl)
        self._types[type_id] = desc
        return desc

    def find_type(self, generic_id: str, args: tuple[GenericArg, ...] = ()) -> str:
        '''Id of the declared type `generic_id<args>`'''
        if self._type_index is None:
            self._type_index = {(decl.generic_id, decl.args): decl.id for decl in self.program.types}

        type_id = self._type_index.get((generic_id, tuple(args)))
        if type_id is None:
            raise TypeLookupError(format_generic_id(generic_id, tuple(args)), 'type not declared')

        return type_id

    def _specialize_type(self, decl: TypeDeclaration) -> TypeDescriptor:
        generic = decl.generic_id

        if generic in self.table.scalars:
            self._expect_args(decl, 0)
            return ScalarType(decl.id, self.table.scalars[generic])

        if generic in self.table.wrappers:
            inner, = self._type_args(decl, 1)
            return WrapperType(decl.id, self.table.wrappers[generic], inner)

        if generic == 'Array':
            element, = self._type_args(decl, 1)
            return ArrayType(decl.id, element)

        if generic in ('Struct', 'Enum'):
            if not decl.args or decl.args[0].kind != GenericArgKind.USER_TYPE:
                raise TypeLookupError(decl.id, f'{generic} requires a user type argument')

            user_type = str(decl.args[0].value)
            members = self._type_args(decl, None, start = 1)
            if generic == 'Struct':
                return StructType(decl.id, user_type, members)

            return EnumType(decl.id, user_type, members)

        if generic == 'Const':
            if not decl.args or decl.args[0].kind != GenericArgKind.TYPE:
                raise TypeLookupError(decl.id, 'Const requires an underlying type argument')

            values = []
            for arg in decl.args[1:]:
                if arg.kind != GenericArgKind.VALUE:
                    raise TypeLookupError(decl.id, 'unsupported Const layout')

                values.append(arg.value)

            if not values:
                raise TypeLookupError(decl.id, 'Const without a value')

            return ConstType(decl.id, str(decl.args[0].value), tuple(values))

        raise TypeLookupError(decl.id, f'unknown generic type {generic!r}')

    def _expect_args(self, decl: TypeDeclaration | LibfuncDeclaration, count: int):
        if len(decl.args) != count:
            error = TypeLookupError if isinstance(decl, TypeDeclaration) else OperatorLookupError
            raise error(decl.id, f'expected {count} generic argument(s), got {len(decl.args)}')

    def _type_args(
        self,
        decl: TypeDeclaration | LibfuncDeclaration,
        count: int | None,
        start: int = 0
    ) -> tuple[str, ...]:
        '''Type-kind generic args of a declaration, as type ids'''
        if count is not None:
            self._expect_args(decl, count)

        error = TypeLookupError if isinstance(decl, TypeDeclaration) else OperatorLookupError
        type_ids = []
        for arg in decl.args[start:]:
            if arg.kind != GenericArgKind.TYPE:
                raise error(decl.id, f'expected a type argument, got {arg}')

            type_ids.append(str(arg.value))

        return tuple(type_ids)

    # ========================================================================
    # Libfuncs
    # ========================================================================

    def get_libfunc(self, libfunc_id: str) -> LibfuncDescriptor:
        '''Specialized descriptor of a declared libfunc'''
        desc = self._libfuncs.get(libfunc_id)
        if desc is not None:
            return desc

        decl = self._libfunc_decls.get(libfunc_id)
        if decl is None:
            raise OperatorLookupError(libfunc_id)

        kind = self.table.libfunc_kind(decl.generic_id)
        builder = self._libfunc_builders.get(kind)

        if builder is None:
            desc = UnsupportedLibfunc(decl.id, decl.generic_id, (), recognized = kind == UNSUPPORTED_KIND)

        else:
            desc = builder(decl)

        self._libfuncs[libfunc_id] = desc
        return desc

    def _build_structural(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        generic = decl.generic_id

        if generic in ('store_temp', 'store_local'):
            ty, = self._type_args(decl, 1)
            results = (ty,)

        elif generic == 'alloc_local':
            ty, = self._type_args(decl, 1)
            results = (self.find_type('Uninitialized', (GenericArg.of_type(ty),)),)

        else:
            results = ()

        return StructuralLibfunc(decl.id, generic, (BranchSignature(results),))

    def _build_array_new(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        element, = self._type_args(decl, 1)
        array = self.find_type('Array', (GenericArg.of_type(element),))
        return ArrayNewLibfunc(decl.id, decl.generic_id, (BranchSignature((array,)),))

    def _build_array_append(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        element, = self._type_args(decl, 1)
        array = self.find_type('Array', (GenericArg.of_type(element),))
        return ArrayAppendLibfunc(decl.id, decl.generic_id, (BranchSignature((array,)),))

    def _build_struct_construct(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        struct_type, = self._type_args(decl, 1)
        desc = self._expect_type(decl, struct_type, StructType)
        return StructConstructLibfunc(decl.id, decl.generic_id, (BranchSignature((struct_type,)),), desc.members)

    def _build_struct_deconstruct(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        struct_type, = self._type_args(decl, 1)
        desc = self._expect_type(decl, struct_type, StructType)
        return StructDeconstructLibfunc(decl.id, decl.generic_id, (BranchSignature(desc.members),))

    def _build_enum_init(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        self._expect_args(decl, 2)
        enum_arg, index = decl.args

        if enum_arg.kind != GenericArgKind.TYPE or index.kind != GenericArgKind.VALUE:
            raise OperatorLookupError(decl.id, 'enum_init expects <enum type, variant index>')

        enum_type = str(enum_arg.value)
        desc = self._expect_type(decl, enum_type, EnumType)
        if not 0 <= index.value < len(desc.variants):
            raise OperatorLookupError(decl.id, f'variant index {index.value} out of range')

        return EnumInitLibfunc(decl.id, decl.generic_id, (BranchSignature((enum_type,)),), index.value)

    def _build_const_as_immediate(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        const_type, = self._type_args(decl, 1)
        desc = self._expect_type(decl, const_type, ConstType)
        return ConstLibfunc(decl.id, decl.generic_id, (BranchSignature((desc.inner,)),), desc.values)

    def _build_int_const(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        self._expect_args(decl, 1)
        value = decl.args[0]
        if value.kind != GenericArgKind.VALUE:
            raise OperatorLookupError(decl.id, f'expected a value argument, got {value}')

        int_type = self.find_type(decl.generic_id.removesuffix('_const'))
        return ConstLibfunc(decl.id, decl.generic_id, (BranchSignature((int_type,)),), (value.value,))

    def _build_drop(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        self._type_args(decl, 1)
        return DropLibfunc(decl.id, decl.generic_id, (BranchSignature(()),))

    def _build_dup(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        ty, = self._type_args(decl, 1)
        return DupLibfunc(decl.id, decl.generic_id, (BranchSignature((ty, ty)),))

    def _build_rename(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        ty, = self._type_args(decl, 1)
        return RenameLibfunc(decl.id, decl.generic_id, (BranchSignature((ty,)),))

    def _build_function_call(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        self._expect_args(decl, 1)
        callee = decl.args[0]
        if callee.kind != GenericArgKind.USER_FUNC:
            raise OperatorLookupError(decl.id, f'expected a user function argument, got {callee}')

        func = self.get_function(str(callee.value))
        return FunctionCallLibfunc(decl.id, decl.generic_id, (BranchSignature(func.ret_types),), func.id)

    def _build_overflowing_arith(self, decl: LibfuncDeclaration) -> LibfuncDescriptor:
        self._expect_args(decl, 0)
        int_name = decl.generic_id.partition('_overflowing_')[0]
        operator = '+' if self.table.libfunc_kind(decl.generic_id) == 'overflowing_add' else '-'

        range_check = self.find_type('RangeCheck')
        int_type = self.find_type(int_name)
        signature = BranchSignature((range_check, int_type))

        return OverflowingArithLibfunc(decl.id, decl.generic_id, (signature, signature), operator, int_type)

    def _expect_type(self, decl: LibfuncDeclaration, type_id: str, expected: type) -> TypeDescriptor:
        desc = self.get_type(type_id)
        if not isinstance(desc, expected):
            raise OperatorLookupError(decl.id, f'{type_id} is not a {expected.__name__}')

        return desc
