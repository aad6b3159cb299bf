"""Base classes for Models and Schemas."""

import json
import sys

from abc import ABC
from typing import Mapping, Optional, Type, Union

from marshmallow import EXCLUDE, Schema, ValidationError, post_dump, post_load

from ..core.error import BaseError


def resolve_class(the_cls, relative_cls: Optional[type] = None) -> type:
    """
    Resolve a class given directly or by name.

    Args:
        the_cls: The class, or the name of a class in the module of
            `relative_cls`
        relative_cls: Class whose module is searched for a class name

    Returns:
        The resolved class

    """
    if isinstance(the_cls, type):
        return the_cls
    if isinstance(the_cls, str) and relative_cls:
        resolved = getattr(sys.modules[relative_cls.__module__], the_cls, None)
        if isinstance(resolved, type):
            return resolved
    raise TypeError(
        f"Could not resolve class from {the_cls}; incorrect type {type(the_cls)}"
    )


class BaseModelError(BaseError):
    """Base exception class for base model errors."""


class BaseModel(ABC):
    """Base model that provides convenience methods."""

    class Meta:
        """BaseModel meta data."""

        schema_class = None

    def __init__(self):
        """
        Initialize BaseModel.

        Raises:
            TypeError: If schema_class is not set on Meta

        """
        if not self.Meta.schema_class:
            raise TypeError(
                "Can't instantiate abstract class {} with no schema_class".format(
                    self.__class__.__name__
                )
            )

    @classmethod
    def _get_schema_class(cls) -> Type["BaseModelSchema"]:
        """Get the resolved schema class."""
        return resolve_class(cls.Meta.schema_class, cls)

    @property
    def Schema(self) -> Type["BaseModelSchema"]:
        """Accessor for the model's schema class."""
        return self._get_schema_class()

    @classmethod
    def deserialize(cls, obj: Union[str, Mapping], *, unknown: str = None):
        """
        Convert from JSON representation to a model instance.

        Args:
            obj: The dict (or JSON string) to load into a model instance
            unknown: Behaviour for unknown attributes

        Returns:
            A model instance for this data

        """
        schema = cls._get_schema_class()(unknown=unknown or EXCLUDE)
        try:
            return schema.loads(obj) if isinstance(obj, str) else schema.load(obj)
        except (AttributeError, ValidationError) as err:
            raise BaseModelError(f"{cls.__name__} schema validation failed") from err

    def serialize(self, *, as_string: bool = False) -> Union[str, dict]:
        """
        Create a JSON-compatible dict representation of the model instance.

        Args:
            as_string: Return a string of JSON instead of a dict

        Returns:
            A dict representation of this model, or a JSON string if as_string is True

        """
        schema = self.Schema(unknown=EXCLUDE)
        try:
            return (
                schema.dumps(self, separators=(",", ":"))
                if as_string
                else schema.dump(self)
            )
        except (AttributeError, ValidationError) as err:
            raise BaseModelError(
                f"{self.__class__.__name__} schema validation failed"
            ) from err

    def to_json(self) -> str:
        """Create a JSON representation of the model instance."""
        return json.dumps(self.serialize())

    def __repr__(self) -> str:
        """Return a human readable representation of this class."""
        items = ("{}={}".format(k, repr(v)) for k, v in self.__dict__.items())
        return "<{}({})>".format(self.__class__.__name__, ", ".join(items))


class BaseModelSchema(Schema):
    """BaseModel schema."""

    class Meta:
        """BaseModelSchema metadata."""

        model_class = None
        skip_values = [None]

    def __init__(self, *args, **kwargs):
        """
        Initialize BaseModelSchema.

        Raises:
            TypeError: If model_class is not set on Meta

        """
        super().__init__(*args, **kwargs)
        if not self.Meta.model_class:
            raise TypeError(
                "Can't instantiate abstract class {} with no model_class".format(
                    self.__class__.__name__
                )
            )

    @property
    def Model(self) -> type:
        """Accessor for the schema's model class."""
        return resolve_class(self.Meta.model_class, self.__class__)

    @post_load
    def make_model(self, data: dict, **kwargs):
        """Return model instance after loading."""
        return self.Model(**data)

    @post_dump
    def remove_skipped_values(self, data, **kwargs):
        """Remove values that are are marked to skip."""
        skip_vals = getattr(self.Meta, "skip_values", [None])
        return {key: value for key, value in data.items() if value not in skip_vals}
