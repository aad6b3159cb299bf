"""Document instance stored and queried through an EDV client."""

from collections import namedtuple
from typing import Mapping


class EdvDocument(namedtuple("EdvDocument", "id meta content")):
    """Vault document: an id plus the indexed `meta` and `content` objects."""

    __slots__ = ()

    def __new__(cls, id: str = None, meta: Mapping = None, content: Mapping = None):
        """Initialize some defaults on document."""
        return super().__new__(cls, id, meta or {}, content)

    def resolve(self, attribute: str):
        """Return the value at a dotted attribute path, or None if absent.

        Args:
            attribute: Path such as `content.type` or `meta.issuer`

        """
        root, _, path = attribute.partition(".")
        value = self._asdict().get(root)
        for key in path.split(".") if path else ():
            if not isinstance(value, Mapping):
                return None
            value = value.get(key)
        return value
