from __future__ import annotations

import dataclasses
import typing as t

import construct as c
from typing_extensions import Self


def subcon(cls: type[Struct]) -> t.Any:
    return dataclasses.field(metadata={"substruct": cls})


@dataclasses.dataclass(frozen=True)
class Struct:
    """Immutable value bound to a construct definition.

    Subclasses are frozen dataclasses that declare a `SUBCON` with the same
    field names. Nested structs are marked with `subcon()` so that parsing
    can turn containers back into the proper classes.
    """

    SUBCON: t.ClassVar[c.Construct]

    def _to_container(self) -> dict[str, t.Any]:
        result = {}
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            if isinstance(value, Struct):
                value = value._to_container()
            elif isinstance(value, (list, tuple)):
                value = [v._to_container() if isinstance(v, Struct) else v for v in value]
            result[field.name] = value
        return result

    def build(self) -> bytes:
        return self.SUBCON.build(self._to_container())

    @staticmethod
    def _decontainerize(item: t.Any) -> t.Any:
        if isinstance(item, c.ListContainer):
            return tuple(Struct._decontainerize(i) for i in item)
        return item

    @classmethod
    def _to_struct_recursive(cls, data: c.Container) -> Self:
        values = {}
        for field in dataclasses.fields(cls):
            field_data = data.get(field.name)
            subcls = field.metadata.get("substruct")
            if subcls is None:
                values[field.name] = cls._decontainerize(field_data)
            elif isinstance(field_data, c.ListContainer):
                values[field.name] = tuple(
                    subcls._to_struct_recursive(d) for d in field_data
                )
            elif isinstance(field_data, c.Container):
                values[field.name] = subcls._to_struct_recursive(field_data)
            elif field_data is None:
                values[field.name] = None
            else:
                raise ValueError(
                    f"Mismatched type for field {field.name}: expected a struct, found {type(field_data)}"
                )
        return cls(**values)

    @classmethod
    def parse(cls, data: bytes) -> Self:
        result = cls.SUBCON.parse(data)
        return cls._to_struct_recursive(result)

    @classmethod
    def parse_stream(cls, stream: t.BinaryIO) -> Self:
        result = cls.SUBCON.parse_stream(stream)
        return cls._to_struct_recursive(result)
