"""Tests for the semantic analysis passes."""

import pytest

from pyjmm.analysis import AnalysisPass, completes, validate
from pyjmm.ast import Kind, Node
from pyjmm.reports import ReportType, Stage
from pyjmm.symboltable import build_symbol_table


@pytest.fixture
def check(parse):
    """Validate a source file and return the error messages."""
    def run(source):
        program = parse(source)
        reports = validate(program, build_symbol_table(program))
        assert all(r.stage is Stage.SEMANTIC and r.type is ReportType.ERROR for r in reports)
        return [r.message for r in reports]
    return run


def method(body, signature="public int f(int x, boolean c, int[] arr)", members="", imports=""):
    return f"""
    {imports}
    class T {{
        {members}
        {signature} {{
            {body}
        }}
    }}
    """


class TestValidProgram:
    def test_no_reports(self, check):
        source = """
        import io;
        class Counter {
            int total;
            public int add(int x) {
                total = total + x;
                return total;
            }
            public static void main(String[] args) {
                Counter c;
                int[] values;
                c = new Counter();
                values = [1, 2, 3];
                io.println(c.add(values[0]));
                io.println(values.length);
            }
        }
        """
        assert check(source) == []


class TestDeclarations:
    def test_duplicate_field(self, check):
        assert "Duplicate field: 'a'" in check("class T { int a; boolean a; }")

    def test_duplicate_method(self, check):
        source = "class T { public void f() {} public int f() { return 1; } }"
        assert "Duplicate method: 'f'" in check(source)

    def test_duplicate_import_by_simple_name(self, check):
        assert "Duplicate import: 'B'" in check("import a.B; import c.B; class T {}")

    def test_parameter_and_local_share_namespace(self, check):
        source = method("int x; return x;", signature="public int f(int x)")
        assert "Duplicate variable: 'x'" in check(source)

    def test_distinct_names(self, check):
        source = method("int y; y = x; return y;", signature="public int f(int x)")
        assert check(source) == []


class TestVarargsDeclarations:
    def test_varargs_last_is_valid(self, check):
        assert check(method("return x;", signature="public int f(int x, int... rest)")) == []

    def test_varargs_not_last(self, check):
        source = method("return x;", signature="public int f(int... rest, int x)")
        assert "Varargs parameter 'rest' must be the last parameter" in check(source)

    def test_two_varargs(self, check):
        source = method("return 0;", signature="public int f(int... a, int... b)")
        assert "Method 'f' declares more than one varargs parameter" in check(source)

    def test_varargs_field(self, check):
        assert "Field 'a' cannot be varargs" in check("class T { int... a; }")

    def test_varargs_local(self, check):
        source = method("int... v; return 0;", signature="public int f()")
        assert "Local variable 'v' cannot be varargs" in check(source)

    def test_varargs_return(self, check):
        source = "class T { public int... f() { return [1]; } }"
        assert "Return type of method 'f' cannot be varargs" in check(source)


class TestReferences:
    def test_undeclared_variable(self, check):
        assert "Variable 'y' is not declared" in check(method("return y;"))

    def test_import_is_a_valid_name(self, check):
        assert check(method("io.println(x); return x;", imports="import io;")) == []

    def test_field_in_static_method(self, check):
        source = "class T { int a; public static void main(String[] args) { a = 1; } }"
        assert "Cannot access field 'a' from static method 'main'" in check(source)

    def test_this_in_static_method(self, check):
        source = "class T { public void g() {} public static void main(String[] args) { this.g(); } }"
        assert "Cannot use 'this' in static method 'main'" in check(source)

    def test_undefined_method(self, check):
        assert "Method 'g' is not defined" in check(method("return this.g();"))

    def test_imported_receiver_accepts_any_method(self, check):
        source = method("Helper h; h = new Helper(); return h.anything(x, c);", imports="import lib.Helper;")
        assert check(source) == []

    def test_inherited_method(self, check):
        source = """
        import Base;
        class T extends Base {
            public int f() { return this.inherited(); }
        }
        """
        assert check(source) == []

    def test_superclass_must_be_imported_for_inheritance(self, check):
        source = "class T extends Base { public int f() { return this.inherited(); } }"
        assert "Method 'inherited' is not defined" in check(source)

    def test_argument_count(self, check):
        source = method("return this.g(1, 2);", members="public int g(int a) { return a; }")
        assert "Method 'g' expects 1 arguments, got 2" in check(source)

    def test_argument_type(self, check):
        source = method("return this.g(c);", members="public int g(int a) { return a; }")
        assert "Argument of type 'boolean' is not compatible with parameter 'a' of type 'int'" in check(source)

    def test_varargs_call(self, check):
        members = "public int g(int a, int... rest) { return a; }"
        assert check(method("return this.g(1) + this.g(1, 2, 3) + this.g(1, arr);", members=members)) == []

    def test_varargs_element_type(self, check):
        members = "public int g(int... rest) { return 0; }"
        messages = check(method("return this.g(1, c);", members=members))
        assert "Varargs element of type 'boolean' is not compatible with 'int'" in messages

    def test_varargs_missing_fixed_argument(self, check):
        members = "public int g(int a, int... rest) { return a; }"
        assert "Method 'g' expects at least 1 arguments, got 0" in check(method("return this.g();", members=members))


class TestTypeChecks:
    def test_condition_must_be_boolean(self, check):
        assert "Condition of if statement must be of type 'boolean', found 'int'" in check(
            method("if (x) { x = 1; } else { x = 2; } return x;"))
        assert "Condition of while statement must be of type 'boolean', found 'int'" in check(
            method("while (x) { x = 1; } return x;"))

    def test_incompatible_operands(self, check):
        assert "Incompatible operands for '+': 'int' and 'boolean'" in check(method("return x + c;"))

    def test_arithmetic_requires_int(self, check):
        messages = check(method("c = c && c; return c * c;"))
        assert "Operand of '*' must be of type 'int', found 'boolean'" in messages

    def test_logical_requires_boolean(self, check):
        messages = check(method("c = x && x; return x;"))
        assert "Operand of '&&' must be of type 'boolean', found 'int'" in messages

    def test_unary_requires_boolean(self, check):
        assert "Operand of '!' must be of type 'boolean', found 'int'" in check(method("c = !x; return x;"))

    def test_indexing(self, check):
        assert "Indexing requires an array, found 'int'" in check(method("return x[0];"))
        assert "Array index must be of type 'int', found 'boolean'" in check(method("return arr[c];"))

    def test_array_literal_elements(self, check):
        messages = check(method("int[] v; v = [1, c]; return 0;"))
        assert "Cannot assign element of type 'boolean' to 'int[]'" in messages

    def test_new_array_size(self, check):
        assert "Array size must be of type 'int', found 'boolean'" in check(method("arr = new int[c]; return 0;"))

    def test_length_requires_array(self, check):
        assert "'length' requires an array, found 'int'" in check(method("return x.length;"))

    def test_assignment(self, check):
        assert "Cannot assign 'boolean' to 'x' of type 'int'" in check(method("x = c; return x;"))

    def test_assignment_to_superclass(self, check):
        source = """
        import Base;
        class T extends Base {
            public int f() {
                Base b;
                T t;
                b = new T();
                t = new Base();
                return 0;
            }
        }
        """
        assert check(source) == ["Cannot assign 'Base' to 't' of type 'T'"]

    def test_imported_call_result_is_assignable(self, check):
        assert check(method("x = io.read(); c = io.ready(); return x;", imports="import io;")) == []

    def test_array_element_assignment(self, check):
        messages = check(method("arr[0] = c; return 0;"))
        assert "Assigned array element must be of type 'int', found 'boolean'" in messages
        assert "Indexed assignment requires an array, found 'int'" in check(method("x[0] = 1; return 0;"))


class TestControlFlow:
    def test_void_declarations(self, check):
        assert "Field 'v' cannot be void" in check("class T { void v; }")
        assert "Variable 'v' cannot be void" in check(method("void v; return 0;"))

    def test_unreachable_after_return(self, check):
        assert "Unreachable statement after return" in check(method("return 1; x = 2;"))
        assert "Unreachable statement after return" in check(method("{ return 1; x = 2; }"))

    def test_missing_return(self, check):
        assert "Method 'f' is missing a return statement" in check(method("x = 1;"))

    def test_if_without_else_does_not_complete(self, check):
        assert "Method 'f' is missing a return statement" in check(method("if (c) { return 1; }"))

    def test_if_else_completes(self, check):
        assert check(method("if (c) { return 1; } else { return 2; }")) == []

    def test_nested_returns_complete(self, check):
        body = "if (c) { if (x < 1) { return 1; } else { return 2; } } else { return 3; }"
        assert check(method(body)) == []

    def test_while_never_completes(self, check):
        assert "Method 'f' is missing a return statement" in check(method("while (c) { return 1; }"))

    def test_void_method_returning_value(self, check):
        source = method("return 1;", signature="public void f()")
        assert "Void method 'f' cannot return a value" in check(source)

    def test_return_without_value(self, check):
        assert "Method 'f' must return a value of type 'int'" in check(method("return;"))

    def test_return_type_mismatch(self, check):
        assert "Method 'f' returns 'boolean', expected 'int'" in check(method("return c;"))

    def test_return_subclass_for_superclass(self, check):
        source = """
        import Base;
        class T extends Base {
            public Base f() { return this; }
            public T g() { Base b; b = new Base(); return b; }
        }
        """
        assert check(source) == ["Method 'g' returns 'Base', expected 'T'"]

    def test_completes(self):
        ret = Node(Kind.RETURN_STMT, ())
        other = Node(Kind.EXPR_STMT, ())
        assert completes(ret)
        assert completes(Node(Kind.BLOCK_STMT, (other, ret)))
        assert not completes(Node(Kind.BLOCK_STMT, (other,)))
        condition = Node(Kind.BOOLEAN_LITERAL, (), {"value": True})
        assert completes(Node(Kind.IF_STMT, (condition, ret, ret)))
        assert not completes(Node(Kind.IF_STMT, (condition, ret)))
        assert not completes(Node(Kind.WHILE_STMT, (condition, ret)))


class TestReportPositions:
    def test_error_position(self, parse):
        source = "class T {\n    public int f() {\n        return y;\n    }\n}\n"
        program = parse(source)
        reports = validate(program, build_symbol_table(program))
        assert len(reports) == 1
        report = reports[0]
        assert (report.line, report.column) == (3, 16)
        assert str(report) == "error@semantic, line 3, col 16: Variable 'y' is not declared"


class ReturnOwners(AnalysisPass):
    def build(self):
        self.owners = []
        self.add_visit(Kind.METHOD_DECL, self.record)
        self.add_visit(Kind.RETURN_STMT, self.record)
        self.add_visit(Kind.CLASS_DECL, self.record)

    def record(self, node):
        self.owners.append((node.kind, self.method_name))


class TestAnalysisPass:
    def test_handlers_see_enclosing_method(self, parse):
        source = """
        class T {
            int x;
            public int f() { if (true) { return 1; } return 2; }
            public static int g() { while (false) { } return 3; }
        }
        """
        program = parse(source)
        walker = ReturnOwners(build_symbol_table(program))
        assert walker.analyze(program) == []
        assert walker.owners == [
            (Kind.CLASS_DECL, None),
            (Kind.METHOD_DECL, "f"),
            (Kind.RETURN_STMT, "f"),
            (Kind.RETURN_STMT, "f"),
            (Kind.METHOD_DECL, "g"),
            (Kind.RETURN_STMT, "g"),
        ]
        assert walker.current_method is None
