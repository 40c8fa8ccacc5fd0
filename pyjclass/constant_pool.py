"""
Constant pool entries and the pool decoder.

Entries only hold the raw indices and bytes read from the class file.
Anything that needs another entry (a class name, a string value) is
resolved through the pool passed in by the caller, so entries never point
back at the pool that owns them.
"""

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import ClassVar, Iterator, Optional

from .codec import (
    combine_halves,
    decode_modified_utf8,
    double_from_bits,
    float_from_bits,
    int_from_bytes,
    to_signed64,
)
from .errors import UnknownConstantTagError
from .flags import ConstantPoolTag, MethodHandleKind, WIDE_TAGS
from .reader import ByteCursor


logger = logging.getLogger(__name__)


class Constant:
    """Base class for constant pool entries."""
    tag: ClassVar[ConstantPoolTag]

    @property
    def usable(self) -> bool:
        return True


@dataclass(frozen=True)
class UnusableConstant(Constant):
    """Stands in for slot 0, Long/Double filler slots and bad indices."""
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.UNUSABLE

    @property
    def usable(self) -> bool:
        return False


UNUSABLE = UnusableConstant()


@dataclass(frozen=True)
class Utf8Constant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.UTF8
    length: int
    data: bytes

    @cached_property
    def text(self) -> str:
        return decode_modified_utf8(self.data)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class IntegerConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INTEGER
    data: bytes

    @cached_property
    def value(self) -> int:
        return int_from_bytes(self.data)


@dataclass(frozen=True)
class FloatConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.FLOAT
    data: bytes

    @cached_property
    def bits(self) -> int:
        return int.from_bytes(self.data, "big")

    @cached_property
    def value(self) -> float:
        return float_from_bits(self.bits)


@dataclass(frozen=True)
class LongConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.LONG
    high_bytes: bytes
    low_bytes: bytes

    @cached_property
    def unsigned_value(self) -> int:
        return combine_halves(int.from_bytes(self.high_bytes, "big"),
                              int.from_bytes(self.low_bytes, "big"))

    @cached_property
    def value(self) -> int:
        return to_signed64(self.unsigned_value)


@dataclass(frozen=True)
class DoubleConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.DOUBLE
    high_bytes: bytes
    low_bytes: bytes

    @cached_property
    def bits(self) -> int:
        return combine_halves(int.from_bytes(self.high_bytes, "big"),
                              int.from_bytes(self.low_bytes, "big"))

    @cached_property
    def value(self) -> float:
        return double_from_bits(self.bits)


@dataclass(frozen=True)
class ClassConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.CLASS
    name_index: int

    def get_name(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_utf8(self.name_index)


@dataclass(frozen=True)
class StringConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.STRING
    string_index: int

    def get_value(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_utf8(self.string_index)


@dataclass(frozen=True)
class NameAndTypeConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.NAME_AND_TYPE
    name_index: int
    descriptor_index: int

    def get_name(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_utf8(self.name_index)

    def get_descriptor(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_utf8(self.descriptor_index)


class _MemberRef(Constant):
    """Shared resolution for field, method and interface method refs."""
    class_index: int
    name_and_type_index: int

    def get_class_name(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_class_name(self.class_index)

    def get_name(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_name_and_type(self.name_and_type_index)[0]

    def get_descriptor(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_name_and_type(self.name_and_type_index)[1]


@dataclass(frozen=True)
class FieldrefConstant(_MemberRef):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.FIELDREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class MethodrefConstant(_MemberRef):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHODREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class InterfaceMethodrefConstant(_MemberRef):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INTERFACE_METHODREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class MethodHandleConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHOD_HANDLE
    reference_kind: int
    reference_index: int

    @property
    def kind(self) -> Optional[MethodHandleKind]:
        try:
            return MethodHandleKind(self.reference_kind)
        except ValueError:
            return None

    def get_reference(self, pool: "ConstantPool") -> Constant:
        return pool.get_entry(self.reference_index)


@dataclass(frozen=True)
class MethodTypeConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHOD_TYPE
    descriptor_index: int

    def get_descriptor(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_utf8(self.descriptor_index)


class _DynamicRef(Constant):
    bootstrap_method_attr_index: int
    name_and_type_index: int

    def get_name(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_name_and_type(self.name_and_type_index)[0]

    def get_descriptor(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_name_and_type(self.name_and_type_index)[1]


@dataclass(frozen=True)
class DynamicConstant(_DynamicRef):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.DYNAMIC
    bootstrap_method_attr_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class InvokeDynamicConstant(_DynamicRef):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INVOKE_DYNAMIC
    bootstrap_method_attr_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ModuleConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.MODULE
    name_index: int

    def get_name(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_utf8(self.name_index)


@dataclass(frozen=True)
class PackageConstant(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.PACKAGE
    name_index: int

    def get_name(self, pool: "ConstantPool") -> Optional[str]:
        return pool.get_utf8(self.name_index)


class ConstantPool:
    """The decoded constant pool of one class file (1-indexed)."""

    def __init__(self, count: int, entries: dict[int, Constant]):
        self.count = count
        self._entries = dict(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, Constant]]:
        return iter(sorted(self._entries.items()))

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConstantPool):
            return NotImplemented
        return self.count == other.count and self._entries == other._entries

    def __hash__(self) -> int:
        return hash((self.count, frozenset(self._entries.items())))

    def __repr__(self) -> str:
        return f"ConstantPool(count={self.count}, entries={len(self._entries)})"

    def get_entry(self, index: int) -> Constant:
        """Entry at index, or UNUSABLE when there is none."""
        return self._entries.get(index, UNUSABLE)

    def get_utf8(self, index: int) -> Optional[str]:
        entry = self.get_entry(index)
        if isinstance(entry, Utf8Constant):
            return entry.text
        return None

    def get_class_name(self, index: int) -> Optional[str]:
        entry = self.get_entry(index)
        if isinstance(entry, ClassConstant):
            return entry.get_name(self)
        return None

    def get_name_and_type(self, index: int) -> tuple[Optional[str], Optional[str]]:
        entry = self.get_entry(index)
        if isinstance(entry, NameAndTypeConstant):
            return entry.get_name(self), entry.get_descriptor(self)
        return None, None


def _read_index_pair(cursor: ByteCursor) -> tuple[int, int]:
    return cursor.read_u2(), cursor.read_u2()


def _read_utf8(cursor: ByteCursor) -> Utf8Constant:
    length = cursor.read_u2()
    return Utf8Constant(length, cursor.read_bytes(length))


_READERS = {
    ConstantPoolTag.CLASS: lambda c: ClassConstant(c.read_u2()),
    ConstantPoolTag.FIELDREF: lambda c: FieldrefConstant(*_read_index_pair(c)),
    ConstantPoolTag.METHODREF: lambda c: MethodrefConstant(*_read_index_pair(c)),
    ConstantPoolTag.INTERFACE_METHODREF: lambda c: InterfaceMethodrefConstant(*_read_index_pair(c)),
    ConstantPoolTag.STRING: lambda c: StringConstant(c.read_u2()),
    ConstantPoolTag.INTEGER: lambda c: IntegerConstant(c.read_bytes(4)),
    ConstantPoolTag.FLOAT: lambda c: FloatConstant(c.read_bytes(4)),
    ConstantPoolTag.LONG: lambda c: LongConstant(c.read_bytes(4), c.read_bytes(4)),
    ConstantPoolTag.DOUBLE: lambda c: DoubleConstant(c.read_bytes(4), c.read_bytes(4)),
    ConstantPoolTag.NAME_AND_TYPE: lambda c: NameAndTypeConstant(*_read_index_pair(c)),
    ConstantPoolTag.UTF8: _read_utf8,
    ConstantPoolTag.METHOD_HANDLE: lambda c: MethodHandleConstant(c.read_u1(), c.read_u2()),
    ConstantPoolTag.METHOD_TYPE: lambda c: MethodTypeConstant(c.read_u2()),
    ConstantPoolTag.DYNAMIC: lambda c: DynamicConstant(*_read_index_pair(c)),
    ConstantPoolTag.INVOKE_DYNAMIC: lambda c: InvokeDynamicConstant(*_read_index_pair(c)),
    ConstantPoolTag.MODULE: lambda c: ModuleConstant(c.read_u2()),
    ConstantPoolTag.PACKAGE: lambda c: PackageConstant(c.read_u2()),
}


def read_constant(cursor: ByteCursor) -> Constant:
    """Read one tagged entry."""
    offset = cursor.offset
    tag = cursor.read_u1()
    reader = _READERS.get(tag)
    if reader is None:
        raise UnknownConstantTagError(tag, offset=offset)
    return reader(cursor)


def read_constant_pool(cursor: ByteCursor, count: int, verbose: bool = False) -> ConstantPool:
    """Read entries 1..count-1; the cursor sits just after constant_pool_count."""
    entries = {}
    index = 1
    while index < count:
        entry = read_constant(cursor)
        entries[index] = entry
        if verbose:
            logger.debug("constant #%s: %s", index, entry)
        index += 2 if entry.tag in WIDE_TAGS else 1
    logger.debug("Read constant pool with %s entries (count %s)", len(entries), count)
    return ConstantPool(count, entries)
