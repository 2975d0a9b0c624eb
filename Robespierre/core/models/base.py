"""
Shared base for entity models.

Entities are pydantic models whose wire field ``_id`` is exposed as ``id``.
The server announces changes as partial objects (a dict holding only the
changed fields) plus an optional field to clear; :meth:`Entity.patch` and
:meth:`Entity.clear` apply those in place.
"""

from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict


@lru_cache(maxsize=None)
def _wire_names(cls) -> Dict[str, str]:
    names = {}
    for name, info in cls.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


class Entity(BaseModel):
    """Base class for every cacheable entity."""

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    # clearable field -> attribute path it resets
    CLEAR_PATHS: ClassVar[Dict[str, Tuple[str, ...]]] = {}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    def _patchable(self, name: str) -> bool:
        return name != "id"

    def patch(self, data: Mapping[str, Any]) -> None:
        """
        Overwrite the fields present in ``data``.

        Keys may be wire names or attribute names; keys this entity does not
        have are ignored. Either every field is applied or none is.

        Raises:
            pydantic.ValidationError: If the patched entity would be invalid
        """
        names = _wire_names(type(self))
        updates = {}
        for key, value in data.items():
            name = names.get(key)
            if name is not None and self._patchable(name):
                updates[name] = value
        if not updates:
            return

        patched = type(self).model_validate({**self.model_dump(), **updates})
        for name in updates:
            setattr(self, name, getattr(patched, name))

    def clear(self, field: Optional[Enum]) -> None:
        """Reset the attribute named by a ``*Field`` enum member to empty."""
        if field is None:
            return

        path = self.CLEAR_PATHS.get(field.value)
        if path is None:
            raise ValueError(f"{type(self).__name__} has no clearable field {field.value!r}")

        if len(path) == 1:
            setattr(self, path[0], None)
            return

        container = getattr(self, path[0])
        if isinstance(container, dict):
            container.pop(path[1], None)


__all__ = ['Entity']
