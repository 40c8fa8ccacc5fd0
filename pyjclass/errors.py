"""
Exceptions raised while decoding class files.
"""

from typing import Optional


class DecodeError(Exception):
    """The buffer is not a valid or supported class file."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.stage = stage

    def __str__(self) -> str:
        where = []
        if self.stage is not None:
            where.append(f"while reading {self.stage}")
        if self.offset is not None:
            where.append(f"at offset {self.offset}")
        if where:
            return f"{self.message} ({', '.join(where)})"
        return self.message


class TruncatedInputError(DecodeError):
    """A read would run past the end of the buffer."""

    def __init__(self, offset: int, wanted: int, available: int,
                 stage: Optional[str] = None):
        super().__init__(
            f"Unexpected end of data: wanted {wanted} byte(s), {available} left",
            offset=offset,
            stage=stage,
        )
        self.wanted = wanted
        self.available = available


class UnknownConstantTagError(DecodeError):
    """Constant pool tag outside the known set."""

    def __init__(self, tag: int, offset: Optional[int] = None):
        super().__init__(f"Unknown constant pool tag: {tag}", offset=offset)
        self.tag = tag


class BadMagicError(DecodeError):
    """First four bytes are not 0xCAFEBABE."""

    def __init__(self, magic: int):
        super().__init__(f"Invalid class file magic: {hex(magic)}", offset=0, stage="magic")
        self.magic = magic


class DescriptorError(ValueError):
    """Malformed field/method descriptor or generic signature."""
    pass
