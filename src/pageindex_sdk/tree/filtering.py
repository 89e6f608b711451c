from collections.abc import Collection, Mapping
from typing import Any

from pydantic import BaseModel

ELLIPSIS = "..."


def remove_fields(
    data: Any,
    fields: Collection[str] = ("text",),
    max_len: int | None = None,
) -> Any:
    """Return a copy of ``data`` with the named keys dropped at every depth.

    Mappings and lists/tuples are rebuilt, pydantic models are dumped first
    (only the fields that were actually set), other values pass through.
    With ``max_len`` set, strings longer than it are cut to ``max_len``
    characters plus ``"..."``.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)

    if isinstance(data, Mapping):
        return {
            key: remove_fields(value, fields, max_len)
            for key, value in data.items()
            if key not in fields
        }

    if isinstance(data, (list, tuple)):
        return [remove_fields(item, fields, max_len) for item in data]

    if isinstance(data, str) and max_len is not None and len(data) > max_len:
        return data[:max_len] + ELLIPSIS

    return data
