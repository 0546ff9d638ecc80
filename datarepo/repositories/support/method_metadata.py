"""Per-call metadata of repository CRUD methods.

The repository factory binds a ``CrudMethodMetadata`` around every CRUD
call; the repository adapter reads it through the accessor to pick the
constrained or unconstrained data manager.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass

from datarepo.config import get_settings
from datarepo.repositories.annotations import APPLY_CONSTRAINTS_ATTR


@dataclass(frozen=True)
class CrudMethodMetadata:
    """Metadata of the CRUD method currently being executed."""

    apply_constraints: bool = True


_current_metadata: ContextVar[CrudMethodMetadata | None] = ContextVar(
    "crud_method_metadata", default=None
)


class CrudMethodMetadataAccessor:
    """Gives access to the metadata of the CRUD method being executed."""

    def __init__(self, default: CrudMethodMetadata | None = None) -> None:
        self._default = default

    @property
    def default(self) -> CrudMethodMetadata:
        if self._default is None:
            return CrudMethodMetadata(get_settings().apply_constraints_by_default)
        return self._default

    def get_crud_method_metadata(self) -> CrudMethodMetadata:
        """Return the bound metadata, or the default outside a repository call."""
        return _current_metadata.get() or self.default

    @contextmanager
    def bind(self, metadata: CrudMethodMetadata) -> Iterator[CrudMethodMetadata]:
        """Bind ``metadata`` for the duration of the block."""
        token = _current_metadata.set(metadata)
        try:
            yield metadata
        finally:
            _current_metadata.reset(token)


def determine_apply_constraints(method: Callable, repository_interface: type) -> bool:
    """Decide whether access constraints apply to a repository method.

    Looked up in order: the method itself, the same-named method on the
    interface and its ancestors, the interface and its ancestors. Falls
    back to the configured default.
    """
    if hasattr(method, APPLY_CONSTRAINTS_ATTR):
        return getattr(method, APPLY_CONSTRAINTS_ATTR)

    name = getattr(method, "__name__", None)
    if name is not None:
        for cls in repository_interface.__mro__:
            declared = vars(cls).get(name)
            if declared is not None and hasattr(declared, APPLY_CONSTRAINTS_ATTR):
                return getattr(declared, APPLY_CONSTRAINTS_ATTR)

    for cls in repository_interface.__mro__:
        if APPLY_CONSTRAINTS_ATTR in vars(cls):
            return vars(cls)[APPLY_CONSTRAINTS_ATTR]

    return get_settings().apply_constraints_by_default


def crud_method_metadata_for(method: Callable, repository_interface: type) -> CrudMethodMetadata:
    return CrudMethodMetadata(determine_apply_constraints(method, repository_interface))


__all__ = [
    "CrudMethodMetadata",
    "CrudMethodMetadataAccessor",
    "crud_method_metadata_for",
    "determine_apply_constraints",
]
