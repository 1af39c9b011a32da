"""Runtime analysis: constructs that parse fine but fail, leak or misbehave
when executed."""

from __future__ import annotations

import ast
import re
import warnings
from dataclasses import dataclass
from typing import List, Optional

from ..models import Category, ErrorRecord, Severity
from ._text import blank_strings_and_comments, line_at
from .base import FileAnalyzer
from .languages import LANGUAGES

_SQL_CONCAT = re.compile(
    r"""(?i)["'`]\s*(?:select|insert|update|delete)\b[^"'`]*["'`]\s*(?:\+|%|\.format\()"""
)
_SQL_FSTRING = re.compile(r"""(?i)\bf["'](?:select|insert|update|delete)\b[^"']*\{""")


@dataclass(frozen=True)
class _LineRule:
    rule: str
    pattern: re.Pattern
    message: str
    category: Category
    severity: Severity
    # Rule is silent when this token appears anywhere in the cleaned file.
    unless_present: Optional[str] = None


_JS_RULES = (
    _LineRule(
        "loose_equality",
        re.compile(r"(?<![=!<>])[=!]=(?!=)"),
        "Loose equality comparison (use === / !==)",
        Category.LOGICAL,
        Severity.WARNING,
    ),
    _LineRule(
        "eval_usage",
        re.compile(r"\beval\s*\("),
        "Usage of eval() is dangerous",
        Category.SECURITY,
        Severity.CRITICAL,
    ),
    _LineRule(
        "unhandled_promise",
        re.compile(r"\.then\s*\("),
        "Promise without error handling (.then without .catch)",
        Category.RUNTIME,
        Severity.WARNING,
        unless_present=".catch(",
    ),
    _LineRule(
        "interval_leak",
        re.compile(r"\bsetInterval\s*\("),
        "setInterval without clearInterval",
        Category.PERFORMANCE,
        Severity.WARNING,
        unless_present="clearInterval",
    ),
    _LineRule(
        "event_listener_leak",
        re.compile(r"\.addEventListener\s*\("),
        "Event listener without cleanup (no removeEventListener)",
        Category.PERFORMANCE,
        Severity.WARNING,
        unless_present="removeEventListener",
    ),
    _LineRule(
        "console_log",
        re.compile(r"\bconsole\.log\s*\("),
        "console.log left in code",
        Category.PERFORMANCE,
        Severity.INFO,
    ),
    _LineRule(
        "sync_fs",
        re.compile(r"\bfs\.\w+Sync\s*\("),
        "Synchronous file system call blocks the event loop",
        Category.PERFORMANCE,
        Severity.WARNING,
    ),
    _LineRule(
        "inner_html",
        re.compile(r"\.innerHTML\s*=(?!=)"),
        "Assignment to innerHTML may allow cross-site scripting",
        Category.SECURITY,
        Severity.WARNING,
    ),
    _LineRule(
        "infinite_loop",
        re.compile(r"\bwhile\s*\(\s*true\s*\)|\bfor\s*\(\s*;\s*;\s*\)"),
        "Potential infinite loop",
        Category.RUNTIME,
        Severity.WARNING,
        unless_present="break",
    ),
)


class RuntimeAnalyzer(FileAnalyzer):
    """Flags runtime hazards in Python (via the AST) and JavaScript/TypeScript
    (via line rules over comment- and string-free text)."""

    name = "RuntimeAnalyzer"
    languages = ("python", "javascript", "typescript")

    def analyze_file(self, file_path: str, content: str, language: str) -> List[ErrorRecord]:
        if language == "python":
            records = self._check_python(file_path, content)
        else:
            records = self._check_script(file_path, content, language)
        records.extend(self._check_sql(file_path, content, language))
        return records

    def _check_python(self, file_path: str, content: str) -> List[ErrorRecord]:
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", SyntaxWarning)
                tree = ast.parse(content, filename=file_path)
        except SyntaxError:
            # Unparseable files are reported by SyntaxAnalyzer.
            return []

        visitor = _PythonRuntimeVisitor()
        visitor.visit(tree)
        return [
            self.make_record(
                file_path,
                node.lineno,
                message,
                category,
                severity,
                rule=rule,
                column=node.col_offset + 1,
                context=line_at(content, node.lineno),
                language="python",
            )
            for rule, node, message, category, severity in visitor.findings
        ]

    def _check_script(self, file_path: str, content: str, language: str) -> List[ErrorRecord]:
        cleaned = blank_strings_and_comments(content, LANGUAGES[language])
        records: List[ErrorRecord] = []
        for rule in _JS_RULES:
            if rule.unless_present and rule.unless_present in cleaned:
                continue
            for lineno, text in enumerate(cleaned.splitlines(), start=1):
                match = rule.pattern.search(text)
                if match is None:
                    continue
                records.append(
                    self.make_record(
                        file_path,
                        lineno,
                        rule.message,
                        rule.category,
                        rule.severity,
                        rule=rule.rule,
                        column=match.start() + 1,
                        context=line_at(content, lineno),
                        language=language,
                    )
                )
        return records

    def _check_sql(self, file_path: str, content: str, language: str) -> List[ErrorRecord]:
        records: List[ErrorRecord] = []
        for lineno, text in enumerate(content.splitlines(), start=1):
            match = _SQL_CONCAT.search(text) or _SQL_FSTRING.search(text)
            if match is None:
                continue
            records.append(
                self.make_record(
                    file_path,
                    lineno,
                    "SQL query built from string concatenation (possible SQL injection)",
                    Category.SECURITY,
                    Severity.CRITICAL,
                    rule="sql_injection",
                    column=match.start() + 1,
                    context=text,
                    language=language,
                )
            )
        return records


class _PythonRuntimeVisitor(ast.NodeVisitor):
    def __init__(self) -> None:
        self.findings: list[tuple[str, ast.AST, str, Category, Severity]] = []

    def _add(self, rule: str, node: ast.AST, message: str, category: Category, severity: Severity):
        self.findings.append((rule, node, message, category, severity))

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.type is None:
            self._add(
                "bare_except",
                node,
                "Bare except clause catches all exceptions",
                Category.RUNTIME,
                Severity.WARNING,
            )
        self.generic_visit(node)

    def _check_defaults(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        defaults = list(node.args.defaults) + [d for d in node.args.kw_defaults if d is not None]
        for default in defaults:
            if isinstance(default, (ast.List, ast.Dict, ast.Set)):
                self._add(
                    "mutable_default",
                    default,
                    f"Mutable default argument in {node.name}()",
                    Category.RUNTIME,
                    Severity.WARNING,
                )

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._check_defaults(node)
        self.generic_visit(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._check_defaults(node)
        self.generic_visit(node)

    def visit_Call(self, node: ast.Call) -> None:
        if isinstance(node.func, ast.Name) and node.func.id in ("eval", "exec"):
            self._add(
                f"{node.func.id}_usage",
                node,
                f"Usage of {node.func.id}() can execute arbitrary code",
                Category.SECURITY,
                Severity.ERROR,
            )
        self.generic_visit(node)

    def visit_BinOp(self, node: ast.BinOp) -> None:
        if (
            isinstance(node.op, (ast.Div, ast.FloorDiv, ast.Mod))
            and isinstance(node.right, ast.Constant)
            and not isinstance(node.right.value, (str, bytes))
            and node.right.value == 0
        ):
            self._add(
                "division_by_zero",
                node,
                "Division by zero will raise ZeroDivisionError",
                Category.RUNTIME,
                Severity.CRITICAL,
            )
        self.generic_visit(node)

    def visit_While(self, node: ast.While) -> None:
        if (
            isinstance(node.test, ast.Constant)
            and node.test.value is True
            and not _has_loop_exit(node.body)
        ):
            self._add(
                "infinite_loop",
                node,
                "while True loop without break or return",
                Category.RUNTIME,
                Severity.WARNING,
            )
        self.generic_visit(node)


def _has_loop_exit(body: list[ast.stmt]) -> bool:
    """True if the loop body can leave the loop (nested loops' breaks excluded)."""
    stack: list[ast.AST] = list(body)
    while stack:
        node = stack.pop()
        if isinstance(node, (ast.Break, ast.Return, ast.Raise)):
            return True
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)):
            continue
        if isinstance(node, (ast.For, ast.AsyncFor, ast.While)):
            # break inside a nested loop only exits that loop
            stack.extend(n for n in ast.walk(node) if isinstance(n, (ast.Return, ast.Raise)))
            continue
        stack.extend(ast.iter_child_nodes(node))
    return False
