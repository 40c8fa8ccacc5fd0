"""
Descriptor and generic signature parser using Lark.

Descriptors (``(ILjava/lang/String;)V``) and Signature attribute strings
(``<T:Ljava/lang/Object;>(TT;)Ljava/util/List<TT;>;``) share one grammar
with a start symbol per entry point.
"""

from abc import ABC
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from lark import Lark, Transformer
from lark.exceptions import LarkError

from .errors import DescriptorError


GRAMMAR_FILE = Path(__file__).parent / "descriptors.lark"

START_SYMBOLS = [
    "field_descriptor",
    "method_descriptor",
    "class_signature",
    "method_signature",
    "field_signature",
]

BASE_TYPE_NAMES = {
    "B": "byte", "C": "char", "D": "double", "F": "float",
    "I": "int", "J": "long", "S": "short", "Z": "boolean", "V": "void",
}


class TypeSignature(ABC):
    """Base class for parsed descriptor and signature types."""
    pass


@dataclass(frozen=True)
class BaseType(TypeSignature):
    """Primitive type or void (B, C, D, F, I, J, S, Z, V)."""
    descriptor: str

    @property
    def name(self) -> str:
        return BASE_TYPE_NAMES[self.descriptor]

    @property
    def is_void(self) -> bool:
        return self.descriptor == "V"


@dataclass(frozen=True)
class ObjectType(TypeSignature):
    """Class type from a descriptor (L<binary name>;)."""
    class_name: str

    @property
    def java_name(self) -> str:
        return self.class_name.replace("/", ".")


@dataclass(frozen=True)
class ArrayType(TypeSignature):
    """Array type ([<component>), in descriptors and signatures alike."""
    component: TypeSignature

    @property
    def dimensions(self) -> int:
        if isinstance(self.component, ArrayType):
            return self.component.dimensions + 1
        return 1

    @property
    def element(self) -> TypeSignature:
        if isinstance(self.component, ArrayType):
            return self.component.element
        return self.component


@dataclass(frozen=True)
class MethodDescriptor:
    parameter_types: tuple[TypeSignature, ...]
    return_type: TypeSignature


@dataclass(frozen=True)
class TypeVariableSignature(TypeSignature):
    """Type variable reference (T<name>;)."""
    name: str


@dataclass(frozen=True)
class TypeArgument:
    """One entry between ``<`` and ``>``.

    ``wildcard`` holds the indicator character as written (``+``, ``-`` or
    ``*``) and is None for an exact type. A bare ``*`` has no signature.
    """
    wildcard: Optional[str]
    signature: Optional[TypeSignature]


@dataclass(frozen=True)
class SimpleClassTypeSignature:
    name: str
    type_arguments: tuple[TypeArgument, ...] = ()


@dataclass(frozen=True)
class ClassTypeSignature(TypeSignature):
    """Parameterized class reference from a Signature attribute.

    ``package`` uses slashes and is empty for the default package.
    ``inner_types`` are the ``.Name<...>`` segments after the outer class.
    """
    package: str
    simple_type: SimpleClassTypeSignature
    inner_types: tuple[SimpleClassTypeSignature, ...] = ()

    @property
    def full_name(self) -> str:
        """Binary name with type arguments erased, e.g. java/util/Map$Entry."""
        names = [self.simple_type.name] + [inner.name for inner in self.inner_types]
        erased = "$".join(names)
        if not self.package:
            return erased
        return f"{self.package}/{erased}"


@dataclass(frozen=True)
class TypeParameter:
    """Declared type variable; the class bound is None for ``T::`` forms."""
    name: str
    class_bound: Optional[TypeSignature]
    interface_bounds: tuple[TypeSignature, ...] = ()


@dataclass(frozen=True)
class ClassSignature:
    type_parameters: tuple[TypeParameter, ...]
    superclass: ClassTypeSignature
    interfaces: tuple[ClassTypeSignature, ...]


@dataclass(frozen=True)
class ThrowsSignature:
    """A ``^`` clause: either a class type or a type variable."""
    exception_type: TypeSignature


@dataclass(frozen=True)
class MethodSignature:
    type_parameters: tuple[TypeParameter, ...]
    parameter_types: tuple[TypeSignature, ...]
    return_type: TypeSignature
    throws: tuple[ThrowsSignature, ...]


class DescriptorTransformer(Transformer):
    """Transforms the Lark parse tree into descriptor/signature values."""

    # ==================== DESCRIPTORS ====================

    def field_descriptor(self, items):
        return items[0]

    def method_descriptor(self, items):
        return MethodDescriptor(parameter_types=tuple(items[:-1]), return_type=items[-1])

    def base_type(self, items):
        return BaseType(str(items[0]))

    def void_type(self, items):
        return BaseType("V")

    def object_type(self, items):
        return ObjectType(str(items[0]))

    def array_type(self, items):
        return ArrayType(items[0])

    # ==================== SIGNATURES ====================

    def class_signature(self, items):
        type_params = ()
        if isinstance(items[0], tuple):
            type_params, items = items[0], items[1:]
        return ClassSignature(
            type_parameters=type_params,
            superclass=items[0],
            interfaces=tuple(items[1:]),
        )

    def method_signature(self, items):
        type_params = ()
        if items and isinstance(items[0], tuple):
            type_params, items = items[0], items[1:]
        throws = tuple(item for item in items if isinstance(item, ThrowsSignature))
        rest = [item for item in items if not isinstance(item, ThrowsSignature)]
        return MethodSignature(
            type_parameters=type_params,
            parameter_types=tuple(rest[:-1]),
            return_type=rest[-1],
            throws=throws,
        )

    def field_signature(self, items):
        return items[0]

    def type_parameters(self, items):
        return tuple(items)

    def type_parameter(self, items):
        return TypeParameter(
            name=str(items[0]),
            class_bound=items[1],
            interface_bounds=tuple(items[2:]),
        )

    def class_bound(self, items):
        return items[0] if items else None

    def interface_bound(self, items):
        return items[0]

    def class_type_signature(self, items):
        package = ""
        if isinstance(items[0], str):
            package, items = items[0], items[1:]
        return ClassTypeSignature(
            package=package,
            simple_type=items[0],
            inner_types=tuple(items[1:]),
        )

    def package_specifier(self, items):
        return "/".join(str(item) for item in items)

    def simple_class_type_signature(self, items):
        type_args = items[1] if len(items) > 1 else ()
        return SimpleClassTypeSignature(str(items[0]), type_args)

    def class_type_suffix(self, items):
        return items[0]

    def type_arguments(self, items):
        return tuple(items)

    def type_argument(self, items):
        if len(items) == 2:
            return TypeArgument(str(items[0]), items[1])
        return TypeArgument(None, items[0])

    def unbounded_type_argument(self, items):
        return TypeArgument("*", None)

    def type_variable_signature(self, items):
        return TypeVariableSignature(str(items[0]))

    def array_type_signature(self, items):
        return ArrayType(items[0])

    def throws_signature(self, items):
        return ThrowsSignature(items[0])


class DescriptorParser:
    """Parses descriptors and generic signatures."""

    def __init__(self):
        with open(GRAMMAR_FILE, "r") as f:
            grammar = f.read()

        self._parser = Lark(
            grammar,
            parser="earley",
            start=START_SYMBOLS,
            maybe_placeholders=False,
        )
        self._transformer = DescriptorTransformer()

    def parse(self, text: str, start: str):
        try:
            tree = self._parser.parse(text, start=start)
            return self._transformer.transform(tree)
        except LarkError as exc:
            raise DescriptorError(f"Malformed {start.replace('_', ' ')}: {text!r}") from exc


@lru_cache(maxsize=None)
def get_parser() -> DescriptorParser:
    return DescriptorParser()


def parse_field_descriptor(text: str) -> TypeSignature:
    return get_parser().parse(text, "field_descriptor")


def parse_method_descriptor(text: str) -> MethodDescriptor:
    return get_parser().parse(text, "method_descriptor")


def parse_class_signature(text: str) -> ClassSignature:
    return get_parser().parse(text, "class_signature")


def parse_method_signature(text: str) -> MethodSignature:
    return get_parser().parse(text, "method_signature")


def parse_field_signature(text: str) -> TypeSignature:
    return get_parser().parse(text, "field_signature")
