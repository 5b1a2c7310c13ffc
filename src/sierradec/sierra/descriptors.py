'''
Catalog descriptors - specialized types and libfuncs

Each descriptor class is one case of a closed set. Libfunc descriptors carry
their per-branch result signatures (ordered concrete type ids) and the payload
their pseudo-source template needs.
'''

from dataclasses import dataclass

__all__ = [
    # Types
    'TypeDescriptor',
    'ScalarType',
    'ArrayType',
    'WrapperType',
    'StructType',
    'EnumType',
    'ConstType',

    # Libfuncs
    'BranchSignature',
    'LibfuncDescriptor',
    'StructuralLibfunc',
    'ArrayNewLibfunc',
    'ArrayAppendLibfunc',
    'StructConstructLibfunc',
    'StructDeconstructLibfunc',
    'EnumInitLibfunc',
    'ConstLibfunc',
    'DropLibfunc',
    'DupLibfunc',
    'RenameLibfunc',
    'FunctionCallLibfunc',
    'OverflowingArithLibfunc',
    'UnsupportedLibfunc',
]


# ============================================================================
# Types
# ============================================================================

@dataclass(frozen = True)
class TypeDescriptor:
    '''Base class for specialized types'''
    id: str


@dataclass(frozen = True)
class ScalarType(TypeDescriptor):
    keyword: str


@dataclass(frozen = True)
class ArrayType(TypeDescriptor):
    element: str


@dataclass(frozen = True)
class WrapperType(TypeDescriptor):
    '''NonZero / Nullable / Uninitialized / Snapshot'''
    keyword: str
    inner: str


@dataclass(frozen = True)
class StructType(TypeDescriptor):
    user_type: str
    members: tuple[str, ...]


@dataclass(frozen = True)
class EnumType(TypeDescriptor):
    user_type: str
    variants: tuple[str, ...]


@dataclass(frozen = True)
class ConstType(TypeDescriptor):
    inner: str
    values: tuple[int, ...]


# ============================================================================
# Libfuncs
# ============================================================================

@dataclass(frozen = True)
class BranchSignature:
    '''Result types produced along one branch'''
    vars: tuple[str, ...] = ()


@dataclass(frozen = True)
class LibfuncDescriptor:
    '''Base class for specialized libfuncs'''
    id: str
    generic_id: str
    branch_signatures: tuple[BranchSignature, ...]


@dataclass(frozen = True)
class StructuralLibfunc(LibfuncDescriptor):
    '''Bookkeeping markers and memory slot handling; no pseudo-source'''
    pass


@dataclass(frozen = True)
class ArrayNewLibfunc(LibfuncDescriptor):
    pass


@dataclass(frozen = True)
class ArrayAppendLibfunc(LibfuncDescriptor):
    pass


@dataclass(frozen = True)
class StructConstructLibfunc(LibfuncDescriptor):
    '''Takes one argument per struct member'''
    members: tuple[str, ...]


@dataclass(frozen = True)
class StructDeconstructLibfunc(LibfuncDescriptor):
    '''Member types are the branch signature'''
    pass


@dataclass(frozen = True)
class EnumInitLibfunc(LibfuncDescriptor):
    index: int


@dataclass(frozen = True)
class ConstLibfunc(LibfuncDescriptor):
    '''const_as_immediate<Const<T, v>> and <int>_const<v>'''
    values: tuple[int, ...]


@dataclass(frozen = True)
class DropLibfunc(LibfuncDescriptor):
    pass


@dataclass(frozen = True)
class DupLibfunc(LibfuncDescriptor):
    pass


@dataclass(frozen = True)
class RenameLibfunc(LibfuncDescriptor):
    pass


@dataclass(frozen = True)
class FunctionCallLibfunc(LibfuncDescriptor):
    function_id: str


@dataclass(frozen = True)
class OverflowingArithLibfunc(LibfuncDescriptor):
    '''Checked add/sub: branch 0 is the no-overflow path, branch 1 the overflow path'''
    operator: str
    int_type: str


@dataclass(frozen = True)
class UnsupportedLibfunc(LibfuncDescriptor):
    '''Declared libfunc without a pseudo-source template'''
    recognized: bool
