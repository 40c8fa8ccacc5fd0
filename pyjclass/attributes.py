"""
Class file attributes.

Every attribute starts with the same header (u2 name index, u4 length)
followed by ``length`` bytes, so any attribute can be read generically as an
:class:`AttributeInfo`. :func:`upgrade_attribute` then looks the resolved
name up in a fixed table and re-parses the payload into a typed record.
Names missing from the table stay as opaque :class:`AttributeInfo` values.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Optional

from .constant_pool import (
    ConstantPool,
    DoubleConstant,
    FloatConstant,
    IntegerConstant,
    LongConstant,
    StringConstant,
)
from .errors import DecodeError
from .flags import AccessFlags
from .reader import ByteCursor


logger = logging.getLogger(__name__)


class Attribute:
    """Base class for raw and typed attributes."""
    name_index: int

    def get_name(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_utf8(self.name_index)


@dataclass(frozen=True)
class AttributeInfo(Attribute):
    """An attribute in its raw form: name index, declared length, payload."""
    name_index: int
    length: int
    info: bytes

    def upgrade(self, pool: ConstantPool) -> Attribute:
        return upgrade_attribute(self, pool)


def read_attribute(cursor: ByteCursor) -> AttributeInfo:
    """Read a single attribute."""
    name_index = cursor.read_u2()
    length = cursor.read_u4()
    info = cursor.read_bytes(length)
    return AttributeInfo(name_index, length, info)


def read_attributes(cursor: ByteCursor) -> tuple[AttributeInfo, ...]:
    """Read a u2 count followed by that many attributes."""
    count = cursor.read_u2()
    return tuple(read_attribute(cursor) for _ in range(count))


def _read_table(cursor: ByteCursor, read_row, count: Optional[int] = None) -> tuple:
    if count is None:
        count = cursor.read_u2()
    return tuple(read_row(cursor) for _ in range(count))


# ==================== ConstantValue ====================

@dataclass(frozen=True)
class ConstantValueAttribute(Attribute):
    name_index: int
    constant_value_index: int

    def get_value(self, pool: ConstantPool) -> Any:
        """The field's constant: int, float, str, or None if unresolvable."""
        entry = pool.get_entry(self.constant_value_index)
        if isinstance(entry, (IntegerConstant, FloatConstant, LongConstant, DoubleConstant)):
            return entry.value
        if isinstance(entry, StringConstant):
            return entry.get_value(pool)
        return None


def _parse_constant_value(cursor, name_index, pool):
    return ConstantValueAttribute(name_index, cursor.read_u2())


# ==================== Code ====================

@dataclass(frozen=True)
class ExceptionTableEntry:
    """A protected code range and its handler."""
    start_pc: int
    end_pc: int
    handler_pc: int
    catch_type: int  # 0 for finally (catches all), otherwise constant pool index of class

    @property
    def is_catch_all(self) -> bool:
        return self.catch_type == 0

    def get_catch_type_name(self, pool: ConstantPool) -> Optional[str]:
        if self.is_catch_all:
            return None
        return pool.get_class_name(self.catch_type)


@dataclass(frozen=True)
class CodeAttribute(Attribute):
    name_index: int
    max_stack: int
    max_locals: int
    code: bytes
    exception_table: tuple[ExceptionTableEntry, ...]
    attributes: tuple[Attribute, ...]

    def find_attribute(self, name: str, pool: ConstantPool) -> Optional[Attribute]:
        return find_attribute(self.attributes, name, pool)


def _read_exception_table_entry(cursor):
    return ExceptionTableEntry(cursor.read_u2(), cursor.read_u2(),
                               cursor.read_u2(), cursor.read_u2())


def _parse_code(cursor, name_index, pool):
    max_stack = cursor.read_u2()
    max_locals = cursor.read_u2()
    code_length = cursor.read_u4()
    code = cursor.read_bytes(code_length)
    exception_table = _read_table(cursor, _read_exception_table_entry)
    attributes = tuple(upgrade_attribute(attribute, pool)
                       for attribute in read_attributes(cursor))
    return CodeAttribute(name_index, max_stack, max_locals, code,
                         exception_table, attributes)


# ==================== SourceFile / Signature ====================

@dataclass(frozen=True)
class SourceFileAttribute(Attribute):
    name_index: int
    source_file_index: int

    def get_source_file(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_utf8(self.source_file_index)


def _parse_source_file(cursor, name_index, pool):
    return SourceFileAttribute(name_index, cursor.read_u2())


@dataclass(frozen=True)
class SignatureAttribute(Attribute):
    name_index: int
    signature_index: int

    def get_signature(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_utf8(self.signature_index)


def _parse_signature(cursor, name_index, pool):
    return SignatureAttribute(name_index, cursor.read_u2())


# ==================== InnerClasses ====================

@dataclass(frozen=True)
class InnerClassEntry:
    inner_class_info_index: int
    outer_class_info_index: int
    inner_name_index: int
    inner_class_access_flags: AccessFlags

    def get_inner_class_name(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_class_name(self.inner_class_info_index)

    def get_outer_class_name(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_class_name(self.outer_class_info_index)

    def get_inner_name(self, pool: ConstantPool) -> Optional[str]:
        """Simple name, None for anonymous classes."""
        return pool.get_utf8(self.inner_name_index)


@dataclass(frozen=True)
class InnerClassesAttribute(Attribute):
    name_index: int
    classes: tuple[InnerClassEntry, ...]


def _read_inner_class(cursor):
    return InnerClassEntry(cursor.read_u2(), cursor.read_u2(), cursor.read_u2(),
                           AccessFlags(cursor.read_u2()))


def _parse_inner_classes(cursor, name_index, pool):
    return InnerClassesAttribute(name_index, _read_table(cursor, _read_inner_class))


# ==================== MethodParameters ====================

@dataclass(frozen=True)
class MethodParameter:
    name_index: int  # 0 for a parameter without a name
    access_flags: AccessFlags

    def get_name(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_utf8(self.name_index)


@dataclass(frozen=True)
class MethodParametersAttribute(Attribute):
    name_index: int
    parameters: tuple[MethodParameter, ...]

    def get_parameter_names(self, pool: ConstantPool) -> tuple[Optional[str], ...]:
        return tuple(parameter.get_name(pool) for parameter in self.parameters)


def _read_method_parameter(cursor):
    return MethodParameter(cursor.read_u2(), AccessFlags(cursor.read_u2()))


def _parse_method_parameters(cursor, name_index, pool):
    # parameters_count is a u1, unlike every other table count
    count = cursor.read_u1()
    return MethodParametersAttribute(name_index, _read_table(cursor, _read_method_parameter, count))


# ==================== Exceptions ====================

@dataclass(frozen=True)
class ExceptionsAttribute(Attribute):
    name_index: int
    exception_index_table: tuple[int, ...]

    def get_exception_names(self, pool: ConstantPool) -> tuple[Optional[str], ...]:
        return tuple(pool.get_class_name(index) for index in self.exception_index_table)


def _parse_exceptions(cursor, name_index, pool):
    return ExceptionsAttribute(name_index, _read_table(cursor, ByteCursor.read_u2))


# ==================== LineNumberTable / LocalVariableTable ====================

@dataclass(frozen=True)
class LineNumberEntry:
    start_pc: int
    line_number: int


@dataclass(frozen=True)
class LineNumberTableAttribute(Attribute):
    name_index: int
    line_number_table: tuple[LineNumberEntry, ...]


def _parse_line_number_table(cursor, name_index, pool):
    rows = _read_table(cursor, lambda c: LineNumberEntry(c.read_u2(), c.read_u2()))
    return LineNumberTableAttribute(name_index, rows)


@dataclass(frozen=True)
class LocalVariableEntry:
    start_pc: int
    length: int
    name_index: int
    descriptor_index: int
    index: int

    def get_name(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_utf8(self.name_index)

    def get_descriptor(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_utf8(self.descriptor_index)


@dataclass(frozen=True)
class LocalVariableTableAttribute(Attribute):
    name_index: int
    local_variable_table: tuple[LocalVariableEntry, ...]


def _read_local_variable(cursor):
    return LocalVariableEntry(cursor.read_u2(), cursor.read_u2(), cursor.read_u2(),
                              cursor.read_u2(), cursor.read_u2())


def _parse_local_variable_table(cursor, name_index, pool):
    return LocalVariableTableAttribute(name_index, _read_table(cursor, _read_local_variable))


# ==================== BootstrapMethods / EnclosingMethod ====================

@dataclass(frozen=True)
class BootstrapMethod:
    bootstrap_method_ref: int
    bootstrap_arguments: tuple[int, ...]


@dataclass(frozen=True)
class BootstrapMethodsAttribute(Attribute):
    name_index: int
    bootstrap_methods: tuple[BootstrapMethod, ...]


def _read_bootstrap_method(cursor):
    ref = cursor.read_u2()
    return BootstrapMethod(ref, _read_table(cursor, ByteCursor.read_u2))


def _parse_bootstrap_methods(cursor, name_index, pool):
    return BootstrapMethodsAttribute(name_index, _read_table(cursor, _read_bootstrap_method))


@dataclass(frozen=True)
class EnclosingMethodAttribute(Attribute):
    name_index: int
    class_index: int
    method_index: int  # 0 when not enclosed by a method

    def get_class_name(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_class_name(self.class_index)

    def get_method_name_and_type(self, pool: ConstantPool) -> tuple[Optional[str], Optional[str]]:
        return pool.get_name_and_type(self.method_index)


def _parse_enclosing_method(cursor, name_index, pool):
    return EnclosingMethodAttribute(name_index, cursor.read_u2(), cursor.read_u2())


# ==================== Deprecated / Synthetic ====================

@dataclass(frozen=True)
class DeprecatedAttribute(Attribute):
    name_index: int


@dataclass(frozen=True)
class SyntheticAttribute(Attribute):
    name_index: int


# ==================== Annotations ====================

@dataclass(frozen=True)
class EnumConstValue:
    type_name_index: int
    const_name_index: int


@dataclass(frozen=True)
class ElementValue:
    """An annotation element value.

    ``value`` depends on ``tag``: a constant pool index for ``BCDFIJSZs``
    and ``c``, an :class:`EnumConstValue` for ``e``, an :class:`Annotation`
    for ``@`` and a tuple of element values for ``[``.

    :meth:`resolve` turns nested annotations into element dicts and arrays
    into lists, so the result only holds plain Python values. A constant
    of the wrong kind, or a char outside the Unicode range, resolves to None.
    """
    tag: str
    value: Any

    def resolve(self, pool: ConstantPool) -> Any:
        if self.tag == "s" or self.tag == "c":
            return pool.get_utf8(self.value)
        if self.tag in _CONSTANT_KINDS:
            entry = pool.get_entry(self.value)
            if not isinstance(entry, _CONSTANT_KINDS[self.tag]):
                return None
            if self.tag == "Z":
                return bool(entry.value)
            if self.tag == "C":
                if not 0 <= entry.value <= 0x10FFFF:
                    return None
                return chr(entry.value)
            return entry.value
        if self.tag == "e":
            return (pool.get_utf8(self.value.type_name_index),
                    pool.get_utf8(self.value.const_name_index))
        if self.tag == "@":
            return self.value.get_elements(pool)
        return [element.resolve(pool) for element in self.value]


# Constant pool entry kind each primitive element tag must point at
_CONSTANT_KINDS = {
    "B": IntegerConstant,
    "C": IntegerConstant,
    "I": IntegerConstant,
    "S": IntegerConstant,
    "Z": IntegerConstant,
    "F": FloatConstant,
    "J": LongConstant,
    "D": DoubleConstant,
}


@dataclass(frozen=True)
class ElementValuePair:
    element_name_index: int
    value: ElementValue


@dataclass(frozen=True)
class Annotation:
    type_index: int
    element_value_pairs: tuple[ElementValuePair, ...]

    def get_type(self, pool: ConstantPool) -> Optional[str]:
        """Field descriptor of the annotation type, e.g. Ljava/lang/Deprecated;"""
        return pool.get_utf8(self.type_index)

    def get_elements(self, pool: ConstantPool) -> dict:
        return {pool.get_utf8(pair.element_name_index): pair.value.resolve(pool)
                for pair in self.element_value_pairs}


@dataclass(frozen=True)
class AnnotationsAttribute(Attribute):
    name_index: int
    annotations: tuple[Annotation, ...]
    visible: bool


def _read_annotation(cursor) -> Annotation:
    """Read a single annotation."""
    type_index = cursor.read_u2()
    pairs = _read_table(cursor, lambda c: ElementValuePair(c.read_u2(), _read_element_value(c)))
    return Annotation(type_index, pairs)


def _read_element_value(cursor) -> ElementValue:
    """Read an annotation element value."""
    offset = cursor.offset
    tag = chr(cursor.read_u1())

    if tag in "BCDFIJSZsc":
        return ElementValue(tag, cursor.read_u2())
    elif tag == "e":
        return ElementValue(tag, EnumConstValue(cursor.read_u2(), cursor.read_u2()))
    elif tag == "@":
        return ElementValue(tag, _read_annotation(cursor))
    elif tag == "[":
        return ElementValue(tag, _read_table(cursor, _read_element_value))
    else:
        raise DecodeError(f"Unknown annotation element value tag: {tag!r}", offset=offset)


def _parse_annotations(cursor, name_index, pool, visible):
    return AnnotationsAttribute(name_index, _read_table(cursor, _read_annotation), visible)


# ==================== Upgrade ====================

ATTRIBUTE_PARSERS = {
    "ConstantValue": _parse_constant_value,
    "Code": _parse_code,
    "SourceFile": _parse_source_file,
    "InnerClasses": _parse_inner_classes,
    "Signature": _parse_signature,
    "MethodParameters": _parse_method_parameters,
    "Exceptions": _parse_exceptions,
    "LineNumberTable": _parse_line_number_table,
    "LocalVariableTable": _parse_local_variable_table,
    "BootstrapMethods": _parse_bootstrap_methods,
    "EnclosingMethod": _parse_enclosing_method,
    "Deprecated": lambda cursor, name_index, pool: DeprecatedAttribute(name_index),
    "Synthetic": lambda cursor, name_index, pool: SyntheticAttribute(name_index),
    "RuntimeVisibleAnnotations": partial(_parse_annotations, visible=True),
    "RuntimeInvisibleAnnotations": partial(_parse_annotations, visible=False),
}


def upgrade_attribute(attribute: Attribute, pool: ConstantPool) -> Attribute:
    """Re-parse a raw attribute into its typed form when its name is known.

    Unknown or unresolvable names, and attributes that are already typed,
    are returned unchanged. A payload too short for its kind raises
    :class:`~pyjclass.errors.TruncatedInputError`.
    """
    if not isinstance(attribute, AttributeInfo):
        return attribute
    name = attribute.get_name(pool)
    parser = ATTRIBUTE_PARSERS.get(name)
    if parser is None:
        logger.debug("Keeping attribute %r opaque (%s bytes)", name, attribute.length)
        return attribute

    cursor = ByteCursor(attribute.info)
    try:
        upgraded = parser(cursor, attribute.name_index, pool)
    except DecodeError as exc:
        if exc.stage is None:
            exc.stage = f"{name} attribute"
        raise
    if not cursor.at_end:
        logger.debug("%s attribute has %s unused trailing bytes", name, cursor.remaining)
    return upgraded


def find_attribute(attributes, name: str, pool: ConstantPool) -> Optional[Attribute]:
    """First attribute with the given name, upgraded; None if absent."""
    for attribute in attributes:
        if attribute.get_name(pool) == name:
            return upgrade_attribute(attribute, pool)
    return None
