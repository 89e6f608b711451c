"""Human-readable views of document trees."""

from collections.abc import Collection
from pprint import pformat

from .filtering import remove_fields
from .models import TreeInput

DEFAULT_EXCLUDE_FIELDS = ("text", "page_index")


def format_tree(
    tree: TreeInput,
    exclude_fields: Collection[str] = DEFAULT_EXCLUDE_FIELDS,
    max_len: int | None = 40,
) -> str:
    """Format a filtered, truncated copy of ``tree``. Key order is kept."""
    cleaned = remove_fields(tree, exclude_fields, max_len)
    return pformat(cleaned, sort_dicts=False)


def print_tree(
    tree: TreeInput,
    exclude_fields: Collection[str] = DEFAULT_EXCLUDE_FIELDS,
) -> None:
    print(format_tree(tree, exclude_fields))


def wrap_text(text: str, width: int = 100) -> list[str]:
    """Hard-wrap each line of ``text`` at ``width`` characters.

    Empty lines produce no output.
    """
    if width <= 0:
        raise ValueError("width must be > 0")

    wrapped: list[str] = []
    for line in text.split("\n"):
        wrapped.extend(line[i : i + width] for i in range(0, len(line), width))
    return wrapped


def print_wrapped(text: str, width: int = 100) -> None:
    for line in wrap_text(text, width):
        print(line)
