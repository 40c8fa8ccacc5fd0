"""pyjclass - A decoder for JVM class files."""

from .attributes import (
    Annotation,
    AnnotationsAttribute,
    Attribute,
    AttributeInfo,
    BootstrapMethodsAttribute,
    CodeAttribute,
    ConstantValueAttribute,
    DeprecatedAttribute,
    ElementValue,
    EnclosingMethodAttribute,
    ExceptionTableEntry,
    ExceptionsAttribute,
    InnerClassEntry,
    InnerClassesAttribute,
    LineNumberTableAttribute,
    LocalVariableTableAttribute,
    MethodParameter,
    MethodParametersAttribute,
    SignatureAttribute,
    SourceFileAttribute,
    SyntheticAttribute,
    upgrade_attribute,
)
from .classfile import ClassFile, FieldInfo, MethodInfo
from .config import DecoderConfig
from .constant_pool import UNUSABLE, Constant, ConstantPool
from .decoder import ClassFileDecoder, decode
from .descriptors import (
    parse_class_signature,
    parse_field_descriptor,
    parse_field_signature,
    parse_method_descriptor,
    parse_method_signature,
)
from .errors import (
    BadMagicError,
    DecodeError,
    DescriptorError,
    TruncatedInputError,
    UnknownConstantTagError,
)
from .flags import CLASS_FILE_MAGIC, AccessFlags, ConstantPoolTag, MethodHandleKind

__version__ = "0.1.0"
__all__ = [
    "decode",
    "ClassFileDecoder",
    "DecoderConfig",
    "ClassFile",
    "FieldInfo",
    "MethodInfo",
    "Constant",
    "ConstantPool",
    "UNUSABLE",
    "Attribute",
    "AttributeInfo",
    "Annotation",
    "AnnotationsAttribute",
    "BootstrapMethodsAttribute",
    "CodeAttribute",
    "ConstantValueAttribute",
    "DeprecatedAttribute",
    "ElementValue",
    "EnclosingMethodAttribute",
    "ExceptionTableEntry",
    "ExceptionsAttribute",
    "InnerClassEntry",
    "InnerClassesAttribute",
    "LineNumberTableAttribute",
    "LocalVariableTableAttribute",
    "MethodParameter",
    "MethodParametersAttribute",
    "SignatureAttribute",
    "SourceFileAttribute",
    "SyntheticAttribute",
    "upgrade_attribute",
    "parse_field_descriptor",
    "parse_method_descriptor",
    "parse_class_signature",
    "parse_method_signature",
    "parse_field_signature",
    "DecodeError",
    "TruncatedInputError",
    "UnknownConstantTagError",
    "BadMagicError",
    "DescriptorError",
    "AccessFlags",
    "ConstantPoolTag",
    "MethodHandleKind",
    "CLASS_FILE_MAGIC",
]
