"""Tests for the Jmm parser."""

import json

import pytest

from pyjmm.ast import Kind, ParentIndex, class_decl, method_locals, method_params, method_statements
from pyjmm.reports import ParseError


def first_method(program):
    return class_decl(program).children_of(Kind.METHOD_DECL)[0]


class TestBasicParsing:
    def test_empty_class(self, parse):
        result = parse("class Foo {}")
        assert result.kind == Kind.PROGRAM
        cls = class_decl(result)
        assert cls.get("name") == "Foo"
        assert not cls.has("superclass")

    def test_imports(self, parse):
        result = parse("""
        import io;
        import java.util.Scanner;
        class Foo {}
        """)
        imports = result.children_of(Kind.IMPORT_DECL)
        assert [i.get("name") for i in imports] == ["io", "java.util.Scanner"]

    def test_extends(self, parse):
        result = parse("import Base; class Foo extends Base {}")
        assert class_decl(result).get("superclass") == "Base"

    def test_field_declaration(self, parse):
        result = parse("class Foo { int x; boolean[] flags; Foo other; }")
        fields = class_decl(result).children_of(Kind.VAR_DECL)
        assert [f.get("name") for f in fields] == ["x", "flags", "other"]
        flags_type = fields[1].child(0)
        assert flags_type.get("name") == "boolean"
        assert flags_type.get("is_array") is True
        assert fields[2].child(0).get("name") == "Foo"

    def test_method_declaration(self, parse):
        result = parse("""
        class Foo {
            public static void main(String[] args) {
            }
            int helper(int a, boolean b) {
                return a;
            }
        }
        """)
        main, helper = class_decl(result).children_of(Kind.METHOD_DECL)
        assert main.get("name") == "main"
        assert main.get("is_public") is True
        assert main.get("is_static") is True
        assert helper.get("is_public") is False
        assert [p.get("name") for p in method_params(helper)] == ["a", "b"]
        assert main.child(0).get("name") == "void"

    def test_varargs_parameter(self, parse):
        result = parse("class Foo { public int sum(int... xs) { return 0; } }")
        param = method_params(first_method(result))[0]
        type_node = param.child(0)
        assert type_node.get("is_varargs") is True
        assert type_node.get("is_array") is True

    def test_comments_are_ignored(self, parse):
        result = parse("""
        // leading comment
        class Foo { /* block
        comment */ int x; }
        """)
        assert len(class_decl(result).children) == 1


class TestStatements:
    def test_local_declarations_are_hoisted(self, parse):
        result = parse("""
        class Foo {
            public int f(boolean c) {
                int x;
                if (c) {
                    int y;
                    y = 1;
                }
                return 0;
            }
        }
        """)
        method = first_method(result)
        assert [v.get("name") for v in method_locals(method)] == ["x", "y"]
        statements = method_statements(method)
        assert [s.kind for s in statements] == [Kind.IF_STMT, Kind.RETURN_STMT]
        then_block = statements[0].child(1)
        assert [s.kind for s in then_block.children] == [Kind.ASSIGN_STMT]

    def test_initializer_becomes_assignment(self, parse):
        result = parse("class Foo { public int f() { int x = 3; return x; } }")
        method = first_method(result)
        assert [v.get("name") for v in method_locals(method)] == ["x"]
        assign = method_statements(method)[0]
        assert assign.kind == Kind.ASSIGN_STMT
        assert assign.child(0).get("name") == "x"
        assert assign.child(1).get("value") == 3

    def test_if_else_and_while(self, parse):
        result = parse("""
        class Foo {
            public void f(int n) {
                while (n > 0) {
                    n = n - 1;
                }
                if (n == 0) n = 1; else n = 2;
            }
        }
        """)
        loop, branch = method_statements(first_method(result))
        assert loop.kind == Kind.WHILE_STMT
        assert loop.child(0).get("op") == ">"
        assert loop.child(1).kind == Kind.BLOCK_STMT
        assert branch.kind == Kind.IF_STMT
        assert len(branch.children) == 3

    def test_array_assignment(self, parse):
        result = parse("class Foo { public void f(int[] a) { a[0] = 1; } }")
        statement = method_statements(first_method(result))[0]
        assert statement.kind == Kind.ARRAY_ASSIGN_STMT
        array, index, value = statement.children
        assert array.get("name") == "a"
        assert index.get("value") == 0
        assert value.get("value") == 1

    def test_return_without_value(self, parse):
        result = parse("class Foo { public void f() { return; } }")
        statement = method_statements(first_method(result))[0]
        assert statement.kind == Kind.RETURN_STMT
        assert statement.children == ()


class TestExpressions:
    def expression(self, parse, text):
        result = parse(f"class Foo {{ public int f() {{ return {text}; }} }}")
        return method_statements(first_method(result))[0].child(0)

    def test_precedence(self, parse):
        expr = self.expression(parse, "1 + 2 * 3")
        assert expr.get("op") == "+"
        assert expr.child(1).get("op") == "*"

    def test_left_associativity(self, parse):
        expr = self.expression(parse, "8 - 4 - 2")
        assert expr.get("op") == "-"
        assert expr.child(0).get("op") == "-"
        assert expr.child(1).get("value") == 2

    def test_logical_operators(self, parse):
        expr = self.expression(parse, "a < b && !c || d")
        assert expr.get("op") == "||"
        conjunction = expr.child(0)
        assert conjunction.get("op") == "&&"
        assert conjunction.child(1).kind == Kind.UNARY_EXPR
        assert conjunction.child(1).get("op") == "!"

    def test_parenthesized(self, parse):
        expr = self.expression(parse, "(1 + 2) * 3")
        assert expr.get("op") == "*"
        assert expr.child(0).kind == Kind.PAREN_EXPR

    def test_length_and_length_call(self, parse):
        assert self.expression(parse, "a.length").kind == Kind.LENGTH_EXPR
        call = self.expression(parse, "a.length()")
        assert call.kind == Kind.FUNC_EXPR
        assert call.get("name") == "length"

    def test_method_call(self, parse):
        call = self.expression(parse, "this.add(1, x)")
        assert call.kind == Kind.FUNC_EXPR
        assert call.get("name") == "add"
        receiver, *args = call.children
        assert receiver.kind == Kind.THIS_EXPR
        assert [a.kind for a in args] == [Kind.INTEGER_LITERAL, Kind.VAR_REF_EXPR]

    def test_allocations(self, parse):
        new_array = self.expression(parse, "new int[5]")
        assert new_array.kind == Kind.NEW_ARRAY_EXPR
        assert new_array.get("name") == "int"
        new_object = self.expression(parse, "new Foo()")
        assert new_object.kind == Kind.NEW_EXPR
        assert new_object.get("name") == "Foo"

    def test_array_literal_and_access(self, parse):
        literal = self.expression(parse, "[1, 2, 3]")
        assert literal.kind == Kind.ARRAY_EXPR
        assert len(literal.children) == 3
        access = self.expression(parse, "a[i + 1]")
        assert access.kind == Kind.ARRAY_ACCESS_EXPR
        assert access.child(1).get("op") == "+"

    def test_boolean_literals(self, parse):
        assert self.expression(parse, "true").get("value") is True
        assert self.expression(parse, "false").get("value") is False


class TestPositionsAndErrors:
    def test_positions(self, parse):
        result = parse("class Foo {\n    public int f() {\n        return x;\n    }\n}\n")
        ret = method_statements(first_method(result))[0]
        assert ret.line == 3
        assert ret.child(0).line == 3
        assert ret.child(0).column == 16

    def test_syntax_error(self, parse):
        with pytest.raises(ParseError) as info:
            parse("class Foo {\n    int x\n}")
        assert info.value.line == 3

    def test_missing_class(self, parse):
        with pytest.raises(ParseError):
            parse("import io;")


class TestTreeUtilities:
    def test_json_serialization(self, parse):
        result = parse("class Foo { int x; }")
        data = json.loads(result.to_json())
        assert data["kind"] == "Program"
        cls = data["children"][0]
        assert cls["kind"] == "ClassDecl"
        assert cls["name"] == "Foo"
        assert cls["children"][0]["name"] == "x"

    def test_structural_equality_ignores_positions(self, parse):
        a = parse("class Foo { public int f() { return 1; } }")
        b = parse("class Foo {\n\n  public int f() {\n return 1;\n }\n}")
        assert a == b

    def test_parent_index(self, parse):
        result = parse("class Foo { public int f() { return 1 + 2; } }")
        index = ParentIndex(result)
        literal = next(result.descendants(Kind.INTEGER_LITERAL))
        assert index.parent(literal).kind == Kind.BINARY_EXPR
        assert index.enclosing_method(literal).get("name") == "f"
        assert index.parent(result) is None

    def test_descendants_pre_order(self, parse):
        result = parse("class Foo { public int f() { return 1 + 2; } }")
        values = [n.get("value") for n in result.descendants(Kind.INTEGER_LITERAL)]
        assert values == [1, 2]

    def test_kind_categories(self):
        assert Kind.WHILE_STMT.is_statement
        assert not Kind.WHILE_STMT.is_expression
        assert Kind.FUNC_EXPR.is_expression
        assert not Kind.METHOD_DECL.is_statement

    def test_parse_file(self, parser, tmp_path):
        path = tmp_path / "Foo.jmm"
        path.write_text("class Foo { int x; }", encoding="utf-8")
        assert parser.parse_file(str(path)) == parser.parse("class Foo { int x; }")
