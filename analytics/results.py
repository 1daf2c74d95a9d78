"""Base class for computed statistics value objects."""

import copy


class StatsResult:
    """A derived, read-only snapshot. Subclasses list their fields in _FIELDS.

    Attributes cannot be reassigned, and container fields are copied on
    access, so a cached result cannot be changed through a reference to it.
    """

    _FIELDS = ()

    def __init__(self, **values):
        unknown = set(values) - set(self._FIELDS)
        if unknown:
            raise TypeError(f"Unknown fields for {type(self).__name__}: {', '.join(sorted(unknown))}")
        defaults = self._defaults()
        object.__setattr__(self, '_values', {
            field: values[field] if field in values else defaults.get(field, 0)
            for field in self._FIELDS
        })

    def _defaults(self) -> dict:
        """Zero-state values for fields whose default is not 0."""
        return {}

    def __getattr__(self, name):
        values = self.__dict__.get('_values')
        if values is None or name not in values:
            raise AttributeError(f"{type(self).__name__} has no field {name!r}")
        return copy.deepcopy(values[name])

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def to_dict(self) -> dict:
        return copy.deepcopy(self._values)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"{type(self).__name__}({self._values!r})"
