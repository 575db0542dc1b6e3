from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from STBLib.Exceptions import StackUnderflowException, UnexpectedValueTypeException


class ValueType(Enum):
    VT_Int32 = 0
    VT_Float32 = 1
    VT_Bool = 2
    VT_Null = 3
    VT_UInt16 = 4
    VT_String = 5


@dataclass(frozen=True)
class StackValue:
    type: ValueType
    value: Any = None

    @classmethod
    def int32(cls, value: int) -> "StackValue":
        return cls(ValueType.VT_Int32, value)

    @classmethod
    def float32(cls, value: float) -> "StackValue":
        return cls(ValueType.VT_Float32, value)

    @classmethod
    def boolean(cls, value: bool = True) -> "StackValue":
        return cls(ValueType.VT_Bool, value)

    @classmethod
    def null(cls) -> "StackValue":
        return cls(ValueType.VT_Null)

    @classmethod
    def uint16(cls, value: int) -> "StackValue":
        return cls(ValueType.VT_UInt16, value & 0xFFFF)

    @classmethod
    def string(cls, value: str) -> "StackValue":
        return cls(ValueType.VT_String, value)

    @property
    def is_null(self) -> bool:
        return self.type == ValueType.VT_Null

    def __str__(self) -> str:
        if self.is_null:
            return "null"
        return f"{self.type.name[3:]}({self.value!r})"


class ValueStack:
    def __init__(self):
        self._values: List[StackValue] = []

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: StackValue):
        self._values.append(value)

    def pop(self) -> StackValue:
        if not self._values:
            raise StackUnderflowException()
        return self._values.pop()

    def pop_expect(self, value_type: ValueType) -> Any:
        value = self.pop()
        if value.type != value_type:
            raise UnexpectedValueTypeException(value_type.name[3:], str(value))
        return value.value

    def snapshot(self) -> List[StackValue]:
        return list(self._values)
