"""
Row to object mapping helpers
"""

from types import SimpleNamespace
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .errors import InvalidArgumentError


class Record(SimpleNamespace):
    """Generic object built from a row when no target type is given"""

    def as_dict(self) -> Dict[str, Any]:
        return dict(vars(self))


def hydrate(obj: Any, row: Mapping[str, Any]) -> Any:
    """
    Copy column values of a row onto an object

    A column named ``name`` is stored on the private attribute ``_name``
    when the object already has one; otherwise it becomes the public
    attribute ``name``.

    Args:
        obj: Object to populate
        row: Column name to value mapping

    Returns:
        The same object

    Raises:
        InvalidArgumentError: If a column maps to a read-only attribute
    """
    for column, value in row.items():
        private_name = f"_{column}"
        target = private_name if hasattr(obj, private_name) else column
        try:
            setattr(obj, target, value)
        except AttributeError as e:
            raise InvalidArgumentError(
                f"Cannot set column '{column}' on {type(obj).__name__}: {e}"
            ) from e
    return obj


def make_object(row: Mapping[str, Any], target_type: Optional[Callable[..., Any]] = None,
                constructor_args: Sequence[Any] = ()) -> Any:
    """
    Create an object from a row

    The target is constructed first and populated afterwards, so column
    values override whatever the constructor assigned.

    Args:
        row: Column name to value mapping
        target_type: Class to instantiate, or None for a Record
        constructor_args: Positional arguments for the target constructor

    Returns:
        Populated object
    """
    if target_type is None:
        return Record(**row)
    return hydrate(target_type(*constructor_args), row)
