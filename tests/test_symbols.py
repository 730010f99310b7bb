"""Tests for types, the symbol table and expression typing."""

import pytest

from pyjmm.ast import Kind, Node, class_decl, method_statements
from pyjmm.reports import CompileError
from pyjmm.symboltable import build_symbol_table
from pyjmm.types import (
    ANY,
    BOOLEAN,
    INT,
    INT_ARRAY,
    Type,
    binary_operator_type,
    is_assignable,
    type_from_node,
)
from pyjmm.typeutils import TypeUtils

SOURCE = """
import io;
import java.util.Scanner;

class Shapes extends Scanner {
    int count;
    boolean[] flags;

    public int area(int w, int h) {
        int result;
        result = w * h;
        return result;
    }

    public int total(int... sizes) {
        return sizes.length;
    }

    public static void main(String[] args) {
    }
}
"""


@pytest.fixture
def table(table_for):
    return table_for(SOURCE)


class TestTypes:
    def test_equality(self):
        assert Type("int") == INT
        assert Type("int", True) == INT_ARRAY
        assert Type("int") != INT_ARRAY

    def test_element_and_array(self):
        assert INT_ARRAY.element_type() == INT
        assert INT.array_of() == INT_ARRAY
        with pytest.raises(CompileError):
            INT.element_type()

    def test_primitive(self):
        assert INT.is_primitive
        assert not INT_ARRAY.is_primitive
        assert Type("Foo").is_reference

    def test_str(self):
        assert str(INT_ARRAY) == "int[]"
        assert str(Type("Foo")) == "Foo"

    def test_assignable(self):
        assert is_assignable(INT, INT)
        assert not is_assignable(INT, BOOLEAN)
        assert is_assignable(INT, ANY)
        assert is_assignable(ANY, BOOLEAN)
        assert is_assignable(INT_ARRAY, INT_ARRAY)
        assert not is_assignable(INT_ARRAY, INT)
        assert not is_assignable(INT, INT_ARRAY)
        assert not is_assignable(INT_ARRAY, Type("boolean", True))
        assert is_assignable(ANY, INT_ARRAY)
        assert not is_assignable(None, INT)

    def test_binary_operator_type(self):
        assert binary_operator_type("+") == INT
        assert binary_operator_type("<") == BOOLEAN
        assert binary_operator_type("&&") == BOOLEAN
        with pytest.raises(CompileError):
            binary_operator_type("%")

    def test_type_from_node(self):
        varargs = Node(Kind.TYPE, (), {"name": "int", "is_array": False, "is_varargs": True})
        assert type_from_node(varargs) == INT_ARRAY
        with pytest.raises(CompileError):
            type_from_node(Node(Kind.INTEGER_LITERAL, (), {"value": 1}))


class TestSymbolTable:
    def test_class_information(self, table):
        assert table.class_name == "Shapes"
        assert table.super_class == "Scanner"
        assert table.imports == ("io", "java.util.Scanner")
        assert table.import_names == {"io", "Scanner"}

    def test_imports_match_by_full_or_simple_name(self, table):
        assert table.is_imported("Scanner")
        assert table.is_imported("java.util.Scanner")
        assert not table.is_imported("util")

    def test_fields(self, table):
        assert [f.name for f in table.fields] == ["count", "flags"]
        assert table.get_field("flags").type == Type("boolean", True)
        assert table.get_field("missing") is None

    def test_methods(self, table):
        assert table.methods == ["area", "total", "main"]
        assert table.get_return_type("area") == INT
        assert [p.name for p in table.get_parameters("area")] == ["w", "h"]
        assert [v.name for v in table.get_local_variables("area")] == ["result"]

    def test_method_flags(self, table):
        assert table.method("total").is_varargs
        assert not table.method("area").is_varargs
        assert table.is_static("main")
        assert not table.is_static("area")
        assert table.method("main").is_public

    def test_variable_lookup(self, table):
        assert table.get_parameter("area", "w").type == INT
        assert table.get_local("area", "result").type == INT
        assert table.get_parameter("area", "result") is None
        assert table.get_local("nowhere", "result") is None
        assert table.get_parameter(None, "w") is None

    def test_unknown_method(self, table):
        with pytest.raises(CompileError):
            table.method("perimeter")

    def test_string_rendering(self, table):
        text = str(table)
        assert "Class: Shapes" in text
        assert "Method: int area(int w, int h)" in text
        assert "Field: boolean[] flags" in text

    def test_missing_class_declaration(self):
        with pytest.raises(CompileError):
            build_symbol_table(Node(Kind.PROGRAM, ()))


class TestExpressionTypes:
    def method_expressions(self, parse, body, method="f"):
        source = f"""
        import io;
        class T {{
            int field;
            public int {method}(int[] a, boolean b) {{
                {body}
                return 0;
            }}
        }}
        """
        program = parse(source)
        table = build_symbol_table(program)
        method_node = class_decl(program).children_of(Kind.METHOD_DECL)[0]
        statements = method_statements(method_node)
        return TypeUtils(table), statements

    def test_basic_types(self, parse):
        utils, statements = self.method_expressions(parse, "io.print(a[0], b, field, a.length, !b, 1 < 2);")
        call = statements[0].child(0)
        args = call.children[1:]
        assert [utils.get_expr_type(a, "f") for a in args] == [INT, BOOLEAN, INT, INT, BOOLEAN, BOOLEAN]

    def test_call_types(self, parse):
        utils, statements = self.method_expressions(parse, "io.print(this.f(a, b), io.read(), a.length());")
        args = statements[0].child(0).children[1:]
        assert [utils.get_expr_type(a, "f") for a in args] == [INT, ANY, INT]

    def test_unresolved_variable_is_any(self, parse):
        utils, statements = self.method_expressions(parse, "io.print(unknown);")
        arg = statements[0].child(0).child(1)
        assert utils.get_expr_type(arg, "f") == ANY

    def test_array_literal_types(self, parse):
        utils, _ = self.method_expressions(parse, "")
        literal = Node(Kind.ARRAY_EXPR, (Node(Kind.BOOLEAN_LITERAL, (), {"value": True}),))
        assert utils.get_expr_type(literal, "f") == Type("boolean", True)
        assert utils.get_expr_type(Node(Kind.ARRAY_EXPR, ()), "f") == INT_ARRAY
        tagged = Node(Kind.ARRAY_EXPR, (), {"element_type": "boolean"})
        assert utils.get_expr_type(tagged, "f") == Type("boolean", True)

    def test_unsupported_kind(self, parse):
        utils, _ = self.method_expressions(parse, "")
        with pytest.raises(CompileError):
            utils.get_expr_type(Node(Kind.RETURN_STMT, ()), "f")
