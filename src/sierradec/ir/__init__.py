'''Sierra program model'''

from .program import *

__all__ = [
    # Generic args
    'GenericArgKind',
    'GenericArg',
    'format_generic_id',

    # Declarations
    'TypeDeclaration',
    'LibfuncDeclaration',

    # Statements
    'Statement',
    'Branch',
    'Invocation',
    'Return',

    # Functions
    'Param',
    'Function',
    'Program',
]
