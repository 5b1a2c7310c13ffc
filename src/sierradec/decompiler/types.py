'''Type Resolver - concrete type ids to readable type expressions'''

from ..common import *
from ..sierra.catalog import Catalog
from ..sierra.descriptors import *

__all__ = ['TypeResolver']


class TypeResolver:
    '''Resolve type ids through the catalog

    Resolution is pure; results are memoized per resolver.
    '''

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self._cache: dict[str, str] = {}

    def resolve(self, type_id: str) -> str:
        '''Type expression for a concrete type id

        Raises:
            TypeLookupError: type id (or a nested one) is unknown
        '''
        text = self._cache.get(type_id)
        if text is None:
            text = self._format_type(self.catalog.get_type(type_id))
            self._cache[type_id] = text

        return text

    def resolve_all(self, type_ids) -> list[str]:
        return [self.resolve(type_id) for type_id in type_ids]

    def _format_type(self, desc: TypeDescriptor) -> str:
        if isinstance(desc, ScalarType):
            return desc.keyword

        elif isinstance(desc, ArrayType):
            return f'Array<{self.resolve(desc.element)}>'

        elif isinstance(desc, WrapperType):
            return f'{desc.keyword}<{self.resolve(desc.inner)}>'

        elif isinstance(desc, StructType):
            return f'({", ".join(self.resolve_all(desc.members))})'

        elif isinstance(desc, EnumType):
            return f'Enum<{", ".join(self.resolve_all(desc.variants))}>'

        elif isinstance(desc, ConstType):
            # Consumers want the value itself, not a type annotation
            return ', '.join(str(value) for value in desc.values)

        raise TypeLookupError(desc.id, f'no type expression for {type(desc).__name__}')
