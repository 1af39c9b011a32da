"""Syntax analysis: real parsers where the standard library has one,
line heuristics elsewhere."""

from __future__ import annotations

import ast
import json
import re
import warnings
from typing import List

from ..models import Category, ErrorRecord, Severity
from ._text import blank_strings_and_comments, find_bracket_problem, line_at
from .base import FileAnalyzer
from .languages import LANGUAGES

_PY2_PRINT = re.compile(r"^\s*print\s+[\"'\w]")
_ASSIGN_IN_CONDITION = re.compile(r"\b(?:if|while)\s*\(\s*[\w.\[\]]+\s*=(?!=)")
_TS_ANY = re.compile(r":\s*any\b")


class SyntaxAnalyzer(FileAnalyzer):
    """Reports code that will not parse, plus syntax-level smells."""

    name = "SyntaxAnalyzer"
    languages = ("python", "javascript", "typescript", "java", "json")

    def analyze_file(self, file_path: str, content: str, language: str) -> List[ErrorRecord]:
        if language == "python":
            return self._check_python(file_path, content)
        if language == "json":
            return self._check_json(file_path, content)
        if language in ("javascript", "typescript", "java"):
            return self._check_braced(file_path, content, language)
        return []

    def _check_python(self, file_path: str, content: str) -> List[ErrorRecord]:
        records: List[ErrorRecord] = []
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", SyntaxWarning)
                ast.parse(content, filename=file_path)
        except SyntaxError as e:
            line = e.lineno or 1
            text = e.text if e.text is not None else line_at(content, line)
            if _PY2_PRINT.match(text or ""):
                rule, message = "print_statement", "Python 2 print statement (use print() function)"
            elif isinstance(e, IndentationError):
                rule, message = "indentation_error", f"Indentation error: {e.msg}"
            else:
                rule, message = "syntax_error", f"Syntax error: {e.msg}"
            records.append(
                self.make_record(
                    file_path,
                    line,
                    message,
                    Category.SYNTAX,
                    Severity.ERROR,
                    rule=rule,
                    column=e.offset or None,
                    context=text,
                    language="python",
                )
            )

        for lineno, text in enumerate(content.splitlines(), start=1):
            indent = text[: len(text) - len(text.lstrip())]
            if " " in indent and "\t" in indent:
                records.append(
                    self.make_record(
                        file_path,
                        lineno,
                        "Inconsistent indentation: tabs and spaces mixed",
                        Category.SYNTAX,
                        Severity.WARNING,
                        rule="mixed_indentation",
                        column=1,
                        context=text,
                        language="python",
                    )
                )
        return records

    def _check_json(self, file_path: str, content: str) -> List[ErrorRecord]:
        if not content.strip():
            return []
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            before = content[: e.pos].rstrip()
            at = content[e.pos : e.pos + 1]
            if before.endswith(",") and at in ("}", "]"):
                rule, message = "trailing_comma", "Trailing comma in JSON"
            elif at == "'":
                rule, message = "single_quotes", "Single quotes not allowed in JSON (use double quotes)"
            else:
                rule, message = "invalid_json", f"Invalid JSON: {e.msg}"
            return [
                self.make_record(
                    file_path,
                    e.lineno,
                    message,
                    Category.SYNTAX,
                    Severity.ERROR,
                    rule=rule,
                    column=e.colno,
                    context=line_at(content, e.lineno),
                    language="json",
                )
            ]
        return []

    def _check_braced(self, file_path: str, content: str, language: str) -> List[ErrorRecord]:
        records: List[ErrorRecord] = []
        cleaned = blank_strings_and_comments(content, LANGUAGES[language])

        problem = find_bracket_problem(cleaned)
        if problem is not None:
            records.append(
                self.make_record(
                    file_path,
                    problem.line,
                    problem.message,
                    Category.SYNTAX,
                    Severity.ERROR,
                    rule=problem.rule,
                    column=problem.column,
                    context=line_at(content, problem.line),
                    language=language,
                )
            )

        if language == "java":
            return records

        for lineno, text in enumerate(cleaned.splitlines(), start=1):
            match = _ASSIGN_IN_CONDITION.search(text)
            if match:
                records.append(
                    self.make_record(
                        file_path,
                        lineno,
                        "Assignment in condition (use === for comparison)",
                        Category.SYNTAX,
                        Severity.WARNING,
                        rule="assignment_in_condition",
                        column=match.start() + 1,
                        context=line_at(content, lineno),
                        language=language,
                    )
                )
            if language == "typescript":
                match = _TS_ANY.search(text)
                if match:
                    records.append(
                        self.make_record(
                            file_path,
                            lineno,
                            'Usage of "any" type reduces type safety',
                            Category.SYNTAX,
                            Severity.INFO,
                            rule="any_type_usage",
                            column=match.start() + 1,
                            context=line_at(content, lineno),
                            language=language,
                        )
                    )
        return records
