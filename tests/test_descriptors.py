"""Tests for descriptor and generic signature parsing."""

import pytest

from pyjclass.descriptors import (
    ArrayType,
    BaseType,
    ClassTypeSignature,
    ObjectType,
    TypeArgument,
    TypeVariableSignature,
    parse_class_signature,
    parse_field_descriptor,
    parse_field_signature,
    parse_method_descriptor,
    parse_method_signature,
)
from pyjclass.errors import DescriptorError


class TestFieldDescriptor:
    @pytest.mark.parametrize("text, name", [
        ("B", "byte"), ("C", "char"), ("D", "double"), ("F", "float"),
        ("I", "int"), ("J", "long"), ("S", "short"), ("Z", "boolean"),
    ])
    def test_base_types(self, text, name):
        parsed = parse_field_descriptor(text)
        assert parsed == BaseType(text)
        assert parsed.name == name
        assert not parsed.is_void

    def test_object_type(self):
        parsed = parse_field_descriptor("Ljava/lang/String;")
        assert parsed == ObjectType("java/lang/String")
        assert parsed.java_name == "java.lang.String"

    def test_nested_class(self):
        assert parse_field_descriptor("Ljava/util/Map$Entry;") == ObjectType("java/util/Map$Entry")

    def test_array(self):
        parsed = parse_field_descriptor("[[I")
        assert parsed == ArrayType(ArrayType(BaseType("I")))
        assert parsed.dimensions == 2
        assert parsed.element == BaseType("I")

    @pytest.mark.parametrize("text", ["", "V", "X", "Ljava/lang/String", "[", "II"])
    def test_malformed(self, text):
        with pytest.raises(DescriptorError):
            parse_field_descriptor(text)


class TestMethodDescriptor:
    def test_no_arguments(self):
        parsed = parse_method_descriptor("()V")
        assert parsed.parameter_types == ()
        assert parsed.return_type.is_void

    def test_mixed_arguments(self):
        parsed = parse_method_descriptor("(IDLjava/lang/Thread;[J)Ljava/lang/Object;")
        assert parsed.parameter_types == (
            BaseType("I"),
            BaseType("D"),
            ObjectType("java/lang/Thread"),
            ArrayType(BaseType("J")),
        )
        assert parsed.return_type == ObjectType("java/lang/Object")

    @pytest.mark.parametrize("text", ["(V)V", "()", "I", "(I"])
    def test_malformed(self, text):
        with pytest.raises(DescriptorError):
            parse_method_descriptor(text)


class TestSignatures:
    def test_parameterized_field(self):
        parsed = parse_field_signature("Ljava/util/List<Ljava/lang/String;>;")
        assert isinstance(parsed, ClassTypeSignature)
        assert parsed.package == "java/util"
        assert parsed.simple_type.name == "List"
        (argument,) = parsed.simple_type.type_arguments
        assert argument.wildcard is None
        assert argument.signature.full_name == "java/lang/String"

    def test_type_variable(self):
        assert parse_field_signature("TT;") == TypeVariableSignature("T")

    def test_wildcards(self):
        parsed = parse_field_signature("Ljava/util/Map<+Ljava/lang/Number;-TK;*>;")
        extends, super_, unbounded = parsed.simple_type.type_arguments
        assert extends.wildcard == "+"
        assert extends.signature.full_name == "java/lang/Number"
        assert super_ == TypeArgument("-", TypeVariableSignature("K"))
        assert unbounded == TypeArgument("*", None)

    def test_inner_class_type(self):
        parsed = parse_field_signature("Lcom/example/Outer<TT;>.Inner;")
        assert parsed.full_name == "com/example/Outer$Inner"
        assert parsed.inner_types[0].name == "Inner"

    def test_class_without_package(self):
        parsed = parse_field_signature("LHello;")
        assert parsed.package == ""
        assert parsed.full_name == "Hello"

    def test_class_signature(self):
        parsed = parse_class_signature(
            "<K:Ljava/lang/Object;V::Ljava/lang/Comparable<TV;>;>"
            "Ljava/util/AbstractMap<TK;TV;>;Ljava/io/Serializable;")
        key, value = parsed.type_parameters
        assert key.name == "K"
        assert key.class_bound.full_name == "java/lang/Object"
        assert value.class_bound is None
        assert value.interface_bounds[0].full_name == "java/lang/Comparable"
        assert parsed.superclass.full_name == "java/util/AbstractMap"
        assert [i.full_name for i in parsed.interfaces] == ["java/io/Serializable"]

    def test_class_signature_without_type_parameters(self):
        parsed = parse_class_signature("Ljava/lang/Object;Ljava/util/List<Ljava/lang/String;>;")
        assert parsed.type_parameters == ()
        assert parsed.interfaces[0].simple_type.name == "List"

    def test_method_signature(self):
        parsed = parse_method_signature(
            "<T:Ljava/lang/Exception;>([TT;I)Ljava/util/List<TT;>;^TT;^Ljava/io/IOException;")
        assert parsed.type_parameters[0].name == "T"
        assert parsed.parameter_types == (
            ArrayType(TypeVariableSignature("T")),
            BaseType("I"),
        )
        assert parsed.return_type.full_name == "java/util/List"
        assert parsed.throws[0].exception_type == TypeVariableSignature("T")
        assert parsed.throws[1].exception_type.full_name == "java/io/IOException"

    def test_void_method_signature(self):
        parsed = parse_method_signature("(Ljava/util/List<*>;)V")
        assert parsed.type_parameters == ()
        assert parsed.return_type == BaseType("V")
        assert parsed.throws == ()

    @pytest.mark.parametrize("text", ["Ljava/util/List<>;", "TT", "<>V", "I"])
    def test_malformed_field_signature(self, text):
        with pytest.raises(DescriptorError):
            parse_field_signature(text)
