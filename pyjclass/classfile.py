"""
Structural model of a decoded class file.

Fields, methods and attributes only hold constant pool indices. Their
accessors take the owning :class:`ConstantPool` explicitly; ``ClassFile``
wraps the common lookups with its own pool.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .attributes import (
    Attribute,
    CodeAttribute,
    ConstantValueAttribute,
    ExceptionsAttribute,
    InnerClassEntry,
    InnerClassesAttribute,
    MethodParametersAttribute,
    SignatureAttribute,
    SourceFileAttribute,
    find_attribute,
)
from .constant_pool import ConstantPool
from .descriptors import (
    MethodDescriptor,
    TypeSignature,
    parse_field_descriptor,
    parse_method_descriptor,
)
from .flags import AccessFlags


class MemberInfo:
    """Shared accessors for fields and methods."""
    access_flags: AccessFlags
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...]

    def get_name(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_utf8(self.name_index)

    def get_descriptor(self, pool: ConstantPool) -> Optional[str]:
        return pool.get_utf8(self.descriptor_index)

    def find_attribute(self, name: str, pool: ConstantPool) -> Optional[Attribute]:
        return find_attribute(self.attributes, name, pool)

    def get_signature(self, pool: ConstantPool) -> Optional[str]:
        """Generic signature from the Signature attribute, if any."""
        attribute = self.find_attribute("Signature", pool)
        if isinstance(attribute, SignatureAttribute):
            return attribute.get_signature(pool)
        return None


@dataclass(frozen=True)
class FieldInfo(MemberInfo):
    access_flags: AccessFlags
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...] = ()

    def get_type(self, pool: ConstantPool) -> Optional[TypeSignature]:
        descriptor = self.get_descriptor(pool)
        if descriptor is None:
            return None
        return parse_field_descriptor(descriptor)

    def get_constant_value(self, pool: ConstantPool) -> Any:
        attribute = self.find_attribute("ConstantValue", pool)
        if isinstance(attribute, ConstantValueAttribute):
            return attribute.get_value(pool)
        return None


@dataclass(frozen=True)
class MethodInfo(MemberInfo):
    access_flags: AccessFlags
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...] = ()

    def get_method_descriptor(self, pool: ConstantPool) -> Optional[MethodDescriptor]:
        descriptor = self.get_descriptor(pool)
        if descriptor is None:
            return None
        return parse_method_descriptor(descriptor)

    def get_parameter_names(self, pool: ConstantPool) -> tuple[Optional[str], ...]:
        """Formal parameter names recorded in MethodParameters."""
        attribute = self.find_attribute("MethodParameters", pool)
        if isinstance(attribute, MethodParametersAttribute):
            return attribute.get_parameter_names(pool)
        return ()

    def get_code(self, pool: ConstantPool) -> Optional[CodeAttribute]:
        attribute = self.find_attribute("Code", pool)
        if isinstance(attribute, CodeAttribute):
            return attribute
        return None

    def get_exceptions(self, pool: ConstantPool) -> tuple[Optional[str], ...]:
        """Checked exceptions declared in the throws clause."""
        attribute = self.find_attribute("Exceptions", pool)
        if isinstance(attribute, ExceptionsAttribute):
            return attribute.get_exception_names(pool)
        return ()


@dataclass(frozen=True)
class ClassFile:
    """A decoded class file."""
    magic: int
    minor_version: int
    major_version: int
    constant_pool: ConstantPool = field(repr=False)
    access_flags: AccessFlags
    this_class: int
    super_class: int
    interfaces: tuple[int, ...]
    fields: tuple[FieldInfo, ...]
    methods: tuple[MethodInfo, ...]
    attributes: tuple[Attribute, ...]

    @property
    def version(self) -> tuple[int, int]:
        return (self.major_version, self.minor_version)

    @property
    def constant_pool_count(self) -> int:
        return self.constant_pool.count

    @property
    def name(self) -> Optional[str]:
        return self.constant_pool.get_class_name(self.this_class)

    @property
    def super_class_name(self) -> Optional[str]:
        """None for java/lang/Object, the only class without a superclass."""
        if self.super_class == 0:
            return None
        return self.constant_pool.get_class_name(self.super_class)

    @property
    def interface_names(self) -> tuple[Optional[str], ...]:
        return tuple(self.constant_pool.get_class_name(index) for index in self.interfaces)

    @property
    def signature(self) -> Optional[str]:
        attribute = self.find_attribute("Signature")
        if isinstance(attribute, SignatureAttribute):
            return attribute.get_signature(self.constant_pool)
        return None

    @property
    def source_file(self) -> Optional[str]:
        attribute = self.find_attribute("SourceFile")
        if isinstance(attribute, SourceFileAttribute):
            return attribute.get_source_file(self.constant_pool)
        return None

    @property
    def inner_classes(self) -> tuple[InnerClassEntry, ...]:
        attribute = self.find_attribute("InnerClasses")
        if isinstance(attribute, InnerClassesAttribute):
            return attribute.classes
        return ()

    def find_attribute(self, name: str) -> Optional[Attribute]:
        return find_attribute(self.attributes, name, self.constant_pool)

    def get_field(self, name: str) -> Optional[FieldInfo]:
        for field_info in self.fields:
            if field_info.get_name(self.constant_pool) == name:
                return field_info
        return None

    def get_methods(self, name: str) -> tuple[MethodInfo, ...]:
        """All overloads with the given name."""
        return tuple(method for method in self.methods
                     if method.get_name(self.constant_pool) == name)
