'''
Attribute-checked base class for mutable state objects
'''

__all__ = ['StrictBase']


class StrictBase:
    '''Only attributes annotated on the class (or a base) may be assigned'''
    _allowed_attrs_: frozenset[str]

    def __init_subclass__(cls):
        allowed = set()
        for klass in reversed(cls.__mro__):
            allowed.update(getattr(klass, '__annotations__', {}).keys())

        cls._allowed_attrs_ = frozenset(allowed)

    def __setattr__(self, name, value):
        if name not in self._allowed_attrs_:
            raise AttributeError(f'{type(self).__name__} has no attribute {name!r}')

        object.__setattr__(self, name, value)
