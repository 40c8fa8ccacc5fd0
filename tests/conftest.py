"""Builders for hand-made class file fixtures."""

import struct

import pytest


def encode_modified_utf8(text: str) -> bytes:
    out = bytearray()
    for ch in text:
        cp = ord(ch)
        if 0 < cp < 0x80:
            out.append(cp)
        elif cp < 0x800:
            out.extend((0xC0 | (cp >> 6), 0x80 | (cp & 0x3F)))
        elif cp < 0x10000:
            out.extend((0xE0 | (cp >> 12), 0x80 | ((cp >> 6) & 0x3F), 0x80 | (cp & 0x3F)))
        else:
            cp -= 0x10000
            for surrogate in (0xD800 | (cp >> 10), 0xDC00 | (cp & 0x3FF)):
                out.extend((0xE0 | (surrogate >> 12), 0x80 | ((surrogate >> 6) & 0x3F),
                            0x80 | (surrogate & 0x3F)))
    return bytes(out)


class PoolBuilder:
    """Constant pool writer; entries are deduplicated like javac does."""

    def __init__(self):
        self._entries: list = [None]  # 1-indexed
        self._cache: dict = {}

    @property
    def count(self) -> int:
        return len(self._entries)

    def _add(self, entry: bytes, wide: bool = False) -> int:
        if entry in self._cache:
            return self._cache[entry]
        idx = len(self._entries)
        self._entries.append(entry)
        self._cache[entry] = idx
        # Long and Double take two slots
        if wide:
            self._entries.append(None)
        return idx

    def add_raw_utf8(self, data: bytes) -> int:
        return self._add(struct.pack(">BH", 1, len(data)) + data)

    def add_utf8(self, value: str) -> int:
        return self.add_raw_utf8(encode_modified_utf8(value))

    def add_integer(self, value: int) -> int:
        return self._add(struct.pack(">Bi", 3, value))

    def add_float_bits(self, bits: int) -> int:
        return self._add(struct.pack(">BI", 4, bits))

    def add_long(self, value: int) -> int:
        return self._add(struct.pack(">Bq", 5, value), wide=True)

    def add_double_bits(self, bits: int) -> int:
        return self._add(struct.pack(">BQ", 6, bits), wide=True)

    def add_class(self, internal_name: str) -> int:
        return self._add(struct.pack(">BH", 7, self.add_utf8(internal_name)))

    def add_string(self, value: str) -> int:
        return self._add(struct.pack(">BH", 8, self.add_utf8(value)))

    def add_name_and_type(self, name: str, descriptor: str) -> int:
        return self._add(struct.pack(">BHH", 12, self.add_utf8(name), self.add_utf8(descriptor)))

    def _add_ref(self, tag: int, class_name: str, name: str, descriptor: str) -> int:
        class_idx = self.add_class(class_name)
        nat_idx = self.add_name_and_type(name, descriptor)
        return self._add(struct.pack(">BHH", tag, class_idx, nat_idx))

    def add_fieldref(self, class_name: str, field_name: str, descriptor: str) -> int:
        return self._add_ref(9, class_name, field_name, descriptor)

    def add_methodref(self, class_name: str, method_name: str, descriptor: str) -> int:
        return self._add_ref(10, class_name, method_name, descriptor)

    def add_interface_methodref(self, class_name: str, method_name: str, descriptor: str) -> int:
        return self._add_ref(11, class_name, method_name, descriptor)

    def add_method_handle(self, kind: int, reference_index: int) -> int:
        return self._add(struct.pack(">BBH", 15, kind, reference_index))

    def add_method_type(self, descriptor: str) -> int:
        return self._add(struct.pack(">BH", 16, self.add_utf8(descriptor)))

    def add_dynamic(self, bootstrap_index: int, name: str, descriptor: str) -> int:
        return self._add(struct.pack(">BHH", 17, bootstrap_index,
                                     self.add_name_and_type(name, descriptor)))

    def add_invoke_dynamic(self, bootstrap_index: int, name: str, descriptor: str) -> int:
        return self._add(struct.pack(">BHH", 18, bootstrap_index,
                                     self.add_name_and_type(name, descriptor)))

    def add_module(self, name: str) -> int:
        return self._add(struct.pack(">BH", 19, self.add_utf8(name)))

    def add_package(self, name: str) -> int:
        return self._add(struct.pack(">BH", 20, self.add_utf8(name)))

    def to_bytes(self) -> bytes:
        out = bytearray(struct.pack(">H", self.count))
        for entry in self._entries[1:]:
            if entry is not None:
                out.extend(entry)
        return bytes(out)


class ClassBuilder:
    """Writes a minimal but well-formed class file."""

    def __init__(self, name: str = "Hello", super_name="java/lang/Object"):
        self.pool = PoolBuilder()
        self.minor_version = 0
        self.major_version = 52
        self.access_flags = 0x0021
        self.this_class = self.pool.add_class(name)
        self.super_class = self.pool.add_class(super_name) if super_name else 0
        self.interfaces: list[int] = []
        self.fields: list[bytes] = []
        self.methods: list[bytes] = []
        self.attributes: list[bytes] = []

    def attribute(self, name: str, payload: bytes) -> bytes:
        return struct.pack(">HI", self.pool.add_utf8(name), len(payload)) + payload

    @staticmethod
    def attribute_list(attributes) -> bytes:
        return struct.pack(">H", len(attributes)) + b"".join(attributes)

    def code(self, max_stack: int, max_locals: int, code: bytes,
             exception_table=(), attributes=()) -> bytes:
        data = bytearray(struct.pack(">HHI", max_stack, max_locals, len(code)))
        data.extend(code)
        data.extend(struct.pack(">H", len(exception_table)))
        for entry in exception_table:
            data.extend(struct.pack(">HHHH", *entry))
        data.extend(self.attribute_list(attributes))
        return self.attribute("Code", bytes(data))

    def add_interface(self, name: str):
        self.interfaces.append(self.pool.add_class(name))

    def _member(self, access_flags: int, name: str, descriptor: str, attributes) -> bytes:
        return (struct.pack(">HHH", access_flags, self.pool.add_utf8(name),
                            self.pool.add_utf8(descriptor))
                + self.attribute_list(attributes))

    def add_field(self, access_flags: int, name: str, descriptor: str, attributes=()):
        self.fields.append(self._member(access_flags, name, descriptor, attributes))

    def add_method(self, access_flags: int, name: str, descriptor: str, attributes=()):
        self.methods.append(self._member(access_flags, name, descriptor, attributes))

    def add_attribute(self, name: str, payload: bytes):
        self.attributes.append(self.attribute(name, payload))

    def to_bytes(self) -> bytes:
        out = bytearray(struct.pack(">IHH", 0xCAFEBABE, self.minor_version, self.major_version))
        out.extend(self.pool.to_bytes())
        out.extend(struct.pack(">HHH", self.access_flags, self.this_class, self.super_class))
        out.extend(struct.pack(">H", len(self.interfaces)))
        for idx in self.interfaces:
            out.extend(struct.pack(">H", idx))
        out.extend(struct.pack(">H", len(self.fields)))
        for field_data in self.fields:
            out.extend(field_data)
        out.extend(struct.pack(">H", len(self.methods)))
        for method_data in self.methods:
            out.extend(method_data)
        out.extend(self.attribute_list(self.attributes))
        return bytes(out)


@pytest.fixture
def pool_builder():
    return PoolBuilder()


@pytest.fixture
def class_builder():
    return ClassBuilder()


@pytest.fixture
def class_factory():
    """ClassBuilder itself, for tests that need a custom class name."""
    return ClassBuilder
