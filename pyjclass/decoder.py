"""
Class file decoder.

Reads the fixed top-level sequence: magic, version, constant pool, access
flags, this/super class, interfaces, fields, methods and attributes. Each
step depends on the previous one and there is no way to resynchronize, so
the first error aborts the whole decode.
"""

import logging
from typing import Optional

from .attributes import Attribute, read_attributes, upgrade_attribute
from .classfile import ClassFile, FieldInfo, MethodInfo
from .config import DEFAULT_CONFIG, DecoderConfig
from .constant_pool import ConstantPool, read_constant_pool
from .errors import BadMagicError, DecodeError
from .flags import CLASS_FILE_MAGIC, AccessFlags
from .reader import Buffer, ByteCursor


logger = logging.getLogger(__name__)


class ClassFileDecoder:
    """Decodes one class file buffer into a :class:`ClassFile`."""

    def __init__(self, data: Buffer, config: Optional[DecoderConfig] = None):
        self.cursor = ByteCursor(data)
        self.config = config or DEFAULT_CONFIG
        self.constant_pool: Optional[ConstantPool] = None
        self.stage = "magic"

    def decode(self) -> ClassFile:
        """Read the class file and return the model."""
        try:
            return self._decode()
        except DecodeError as exc:
            if exc.stage is None:
                exc.stage = self.stage
            if exc.offset is None:
                exc.offset = self.cursor.offset
            raise

    def _decode(self) -> ClassFile:
        # Magic number
        magic = self.cursor.read_u4()
        logger.debug("Read magic header value 0x%X", magic)
        if self.config.verify_magic and magic != CLASS_FILE_MAGIC:
            raise BadMagicError(magic)

        # Version
        self.stage = "version"
        minor_version = self.cursor.read_u2()
        major_version = self.cursor.read_u2()
        logger.debug("Version %s.%s", major_version, minor_version)

        # Constant pool
        self.stage = "constant pool"
        constant_pool_count = self.cursor.read_u2()
        self.constant_pool = read_constant_pool(
            self.cursor, constant_pool_count, verbose=self.config.verbose)

        # Access flags
        self.stage = "access flags"
        access_flags = AccessFlags(self.cursor.read_u2())
        logger.debug("Access flags: %s", access_flags)

        # This/super class
        self.stage = "this/super class"
        this_class = self.cursor.read_u2()
        super_class = self.cursor.read_u2()

        self.stage = "interfaces"
        interfaces = self.read_interfaces()

        self.stage = "fields"
        fields = self.read_fields()

        self.stage = "methods"
        methods = self.read_methods()

        # Class attributes
        self.stage = "class attributes"
        attributes = self.read_attributes()

        if not self.cursor.at_end:
            logger.warning("Ignoring %s trailing bytes after the last class attribute",
                           self.cursor.remaining)

        return ClassFile(
            magic=magic,
            minor_version=minor_version,
            major_version=major_version,
            constant_pool=self.constant_pool,
            access_flags=access_flags,
            this_class=this_class,
            super_class=super_class,
            interfaces=interfaces,
            fields=fields,
            methods=methods,
            attributes=attributes,
        )

    def read_interfaces(self) -> tuple[int, ...]:
        """Read all interface indices."""
        count = self.cursor.read_u2()
        interfaces = tuple(self.cursor.read_u2() for _ in range(count))
        logger.debug("Loaded interfaces: %s", interfaces)
        return interfaces

    def read_fields(self) -> tuple[FieldInfo, ...]:
        count = self.cursor.read_u2()
        fields = tuple(self.read_field() for _ in range(count))
        logger.debug("Loaded %s fields", len(fields))
        return fields

    def read_field(self) -> FieldInfo:
        """Read a field."""
        access = AccessFlags(self.cursor.read_u2())
        name_index = self.cursor.read_u2()
        descriptor_index = self.cursor.read_u2()
        return FieldInfo(access, name_index, descriptor_index, self.read_attributes())

    def read_methods(self) -> tuple[MethodInfo, ...]:
        count = self.cursor.read_u2()
        methods = tuple(self.read_method() for _ in range(count))
        logger.debug("Loaded %s methods", len(methods))
        return methods

    def read_method(self) -> MethodInfo:
        """Read a method."""
        access = AccessFlags(self.cursor.read_u2())
        name_index = self.cursor.read_u2()
        descriptor_index = self.cursor.read_u2()
        return MethodInfo(access, name_index, descriptor_index, self.read_attributes())

    def read_attributes(self) -> tuple[Attribute, ...]:
        """Read an attribute list, upgrading known kinds if configured."""
        attributes = read_attributes(self.cursor)
        if not self.config.upgrade_attributes:
            return attributes
        return tuple(upgrade_attribute(attribute, self.constant_pool)
                     for attribute in attributes)


def decode(data: Buffer, config: Optional[DecoderConfig] = None) -> ClassFile:
    """Decode a complete class file image.

    Raises :class:`~pyjclass.errors.DecodeError` when the buffer is truncated
    or otherwise malformed; no partial model is ever returned.
    """
    return ClassFileDecoder(data, config).decode()
