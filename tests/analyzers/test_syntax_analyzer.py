"""Tests for SyntaxAnalyzer."""

from errorscope.analyzers import SyntaxAnalyzer
from errorscope.models import Category, Severity


def _rules(records):
    return [r.rule for r in records]


class TestPythonSyntax:
    def setup_method(self):
        self.analyzer = SyntaxAnalyzer()

    def test_clean_file(self):
        assert self.analyzer.analyze_file("ok.py", "x = 1\nprint(x)\n", "python") == []

    def test_syntax_error(self):
        records = self.analyzer.analyze_file("bad.py", "x = 1\ndef f(:\n    pass\n", "python")
        assert _rules(records) == ["syntax_error"]
        record = records[0]
        assert record.location.line == 2
        assert record.category is Category.SYNTAX
        assert record.severity is Severity.ERROR
        assert record.detected_by == "SyntaxAnalyzer"
        assert record.language == "python"

    def test_python2_print(self):
        records = self.analyzer.analyze_file("old.py", 'print "hello"\n', "python")
        assert _rules(records) == ["print_statement"]

    def test_indentation_error(self):
        records = self.analyzer.analyze_file("ind.py", "def f():\nreturn 1\n", "python")
        assert _rules(records) == ["indentation_error"]

    def test_mixed_indentation_warning(self):
        content = "if True:\n \tx = 1\n"
        records = [
            r for r in self.analyzer.analyze_file("mix.py", content, "python")
            if r.rule == "mixed_indentation"
        ]
        assert len(records) == 1
        assert records[0].severity is Severity.WARNING
        assert records[0].location.line == 2


class TestJsonSyntax:
    def setup_method(self):
        self.analyzer = SyntaxAnalyzer()

    def test_valid(self):
        assert self.analyzer.analyze_file("a.json", '{"a": [1, 2]}\n', "json") == []

    def test_empty_file_ignored(self):
        assert self.analyzer.analyze_file("a.json", "  \n", "json") == []

    def test_trailing_comma(self):
        records = self.analyzer.analyze_file("a.json", '{\n  "a": 1,\n}\n', "json")
        assert _rules(records) == ["trailing_comma"]
        assert records[0].location.line == 3

    def test_single_quotes(self):
        records = self.analyzer.analyze_file("a.json", "{'a': 1}", "json")
        assert _rules(records) == ["single_quotes"]

    def test_other_errors(self):
        records = self.analyzer.analyze_file("a.json", '{"a" 1}', "json")
        assert _rules(records) == ["invalid_json"]
        assert records[0].message.startswith("Invalid JSON:")


class TestBracedLanguages:
    def setup_method(self):
        self.analyzer = SyntaxAnalyzer()

    def test_balanced(self):
        content = "function f(a) {\n  return [a, {b: 1}];\n}\n"
        assert self.analyzer.analyze_file("a.js", content, "javascript") == []

    def test_brackets_in_strings_and_comments_ignored(self):
        content = 'const s = "(((";\n// }}}\n/* ] */\nconst t = `[`;\n'
        assert self.analyzer.analyze_file("a.js", content, "javascript") == []

    def test_unclosed(self):
        content = "function f() {\n  return 1;\n"
        records = self.analyzer.analyze_file("a.js", content, "javascript")
        assert _rules(records) == ["unclosed_bracket"]
        assert records[0].location.line == 1
        assert records[0].location.column == 14

    def test_unexpected(self):
        records = self.analyzer.analyze_file("a.js", "x = 1;\n}\n", "javascript")
        assert _rules(records) == ["unexpected_bracket"]
        assert records[0].location.line == 2

    def test_mismatched(self):
        records = self.analyzer.analyze_file("A.java", "class A { void f() { ] }\n", "java")
        assert _rules(records) == ["mismatched_bracket"]

    def test_assignment_in_condition(self):
        content = "if (x = 5) {\n  go();\n}\n"
        records = self.analyzer.analyze_file("a.js", content, "javascript")
        assert _rules(records) == ["assignment_in_condition"]
        assert records[0].severity is Severity.WARNING

    def test_comparison_in_condition_not_flagged(self):
        content = "if (x === 5) {\n  go();\n}\nwhile (y == 2) {}\n"
        assert self.analyzer.analyze_file("a.js", content, "javascript") == []

    def test_typescript_any(self):
        content = "function f(x: any): number {\n  return 1;\n}\n"
        records = self.analyzer.analyze_file("a.ts", content, "typescript")
        assert _rules(records) == ["any_type_usage"]
        assert records[0].severity is Severity.INFO

    def test_any_ignored_for_javascript(self):
        content = "const o = {a: any};\n"
        assert self.analyzer.analyze_file("a.js", content, "javascript") == []
