'''Error taxonomy shared by the loader, the catalog and the decompiler'''

__all__ = [
    'DecompilerError',
    'LoadError',
    'TypeLookupError',
    'OperatorLookupError',
    'UnsupportedOperatorError',
    'ControlFlowCycleError',
]


class DecompilerError(Exception):
    '''Base class for every fatal sierradec error'''
    pass


class LoadError(DecompilerError):
    '''Malformed program text or an inconsistent program model'''

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        if line is not None:
            message = f'{message} (line {line}, column {column})'

        super().__init__(message)
        self.line = line
        self.column = column


class TypeLookupError(DecompilerError, LookupError):
    '''Type id unknown to the catalog, or not specializable'''

    def __init__(self, type_id: str, reason: str = 'unknown type id'):
        super().__init__(f'{reason}: {type_id}')
        self.type_id = type_id


class OperatorLookupError(DecompilerError, LookupError):
    '''Libfunc or function id unknown to the catalog, or not specializable'''

    def __init__(self, libfunc_id: str, reason: str = 'unknown libfunc id'):
        super().__init__(f'{reason}: {libfunc_id}')
        self.libfunc_id = libfunc_id


class UnsupportedOperatorError(DecompilerError):
    '''Operator kind the statement walker has no template for'''

    def __init__(self, libfunc_id: str, generic_id: str, statement_idx: int | None = None):
        message = f'unsupported libfunc {generic_id!r} ({libfunc_id})'
        if statement_idx is not None:
            message = f'{message} at statement {statement_idx}'

        super().__init__(message)
        self.libfunc_id = libfunc_id
        self.generic_id = generic_id
        self.statement_idx = statement_idx


class ControlFlowCycleError(DecompilerError):
    '''Branch graph revisits a statement on the path being walked'''

    def __init__(self, statement_idx: int):
        super().__init__(f'control flow cycle back to statement {statement_idx}')
        self.statement_idx = statement_idx
