"""
Tests for signature translation.
"""

import pytest

from exportgen.errors import UnknownTypeError
from exportgen.generators.signature import (
    Conversion,
    Representation,
    render_call_arguments,
    render_declaration,
    render_signature,
    translate_types,
)
from exportgen.parser.decls import Declaration


class TestTranslateTypes:
    """Test type list translation."""

    def test_native_passthrough(self, registry):
        types = ["torch::Tensor", "int", "Unregistered"]
        assert translate_types(types, Representation.NATIVE, registry) == types

    def test_boundary(self, registry):
        types = ["torch::Tensor", "std::vector<torch::Tensor>", "int64_t", "const char*"]
        assert translate_types(types, Representation.BOUNDARY, registry) == [
            "void*", "void*", "int64_t", "const char*",
        ]

    def test_boundary_keeps_qualifiers(self, registry):
        """Only boxed types are substituted; the rest keep their spelling."""
        types = ["const torch::Tensor&", "int64_t&", "const double", "char * const"]
        assert translate_types(types, Representation.BOUNDARY, registry) == [
            "void*", "int64_t&", "const double", "char * const",
        ]

    def test_boundary_unknown(self, registry):
        with pytest.raises(UnknownTypeError):
            translate_types(["Unregistered"], Representation.BOUNDARY, registry)


class TestRenderSignature:
    """Test parameter list rendering."""

    def test_native(self, registry, tensor_add):
        assert render_signature(tensor_add, Representation.NATIVE, registry) == (
            "torch::Tensor self, torch::Tensor other, double alpha"
        )

    def test_boundary_keeps_order(self, registry, tensor_add):
        assert render_signature(tensor_add, Representation.BOUNDARY, registry) == (
            "void* self, void* other, double alpha"
        )

    def test_empty(self, registry):
        decl = Declaration.make("seed", "void")
        assert render_signature(decl, Representation.BOUNDARY, registry) == ""

    def test_unknown_names_declaration(self, registry):
        decl = Declaration.make("make_pair", "int", [("p", "TensorPair")])
        with pytest.raises(UnknownTypeError) as exc:
            render_signature(decl, Representation.BOUNDARY, registry)
        assert exc.value.declaration == "make_pair"
        assert exc.value.type_name == "TensorPair"


class TestRenderCallArguments:
    """Test forwarded argument lists."""

    def test_boundary_to_native_unboxes(self, registry, tensor_add):
        assert render_call_arguments(
            tensor_add, Conversion.BOUNDARY_TO_NATIVE, registry
        ) == "from_raw::Tensor(self), from_raw::Tensor(other), alpha"

    def test_none_forwards_names(self, registry, tensor_add):
        assert render_call_arguments(
            tensor_add, Conversion.NONE, registry
        ) == "self, other, alpha"

    def test_registered_type(self, registry):
        registry.register("TensorPair", "MakeTensorPair", "FromTensorPair")
        decl = Declaration.make("first", "torch::Tensor", [("pair", "const TensorPair&")])
        assert render_call_arguments(
            decl, Conversion.BOUNDARY_TO_NATIVE, registry
        ) == "FromTensorPair(pair)"


class TestRenderDeclaration:
    """Test full declaration strings."""

    def test_plain(self, registry, add_one):
        assert render_declaration(
            add_one, Representation.NATIVE, registry
        ) == "int add_one (int x)"

    def test_macro_and_prefix(self, registry, tensor_add):
        assert render_declaration(
            tensor_add,
            Representation.BOUNDARY,
            registry,
            name_prefix="_",
            linkage_macro="MYPKG_API",
        ) == "MYPKG_API void* _tensor_add (void* self, void* other, double alpha)"

    def test_inline(self, registry, tensor_add):
        assert render_declaration(
            tensor_add, Representation.NATIVE, registry, is_inline=True
        ) == "inline torch::Tensor tensor_add (torch::Tensor self, torch::Tensor other, double alpha)"
