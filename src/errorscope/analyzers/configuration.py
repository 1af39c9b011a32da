"""Configuration file validation: parse errors, schema checks and
best-practice checks for common project configuration files."""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Callable, List, Optional

import yaml

from ..models import Category, ErrorRecord, Severity
from ._text import line_at
from .base import FileAnalyzer

_TOML_POSITION = re.compile(r"at line (\d+), column (\d+)")
_ENV_LINE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")
_ENV_UPPER_KEY = re.compile(r"^[A-Z][A-Z0-9_]*$")
_SECRET_KEY = re.compile(r"(?i)(password|passwd|secret|api_?key|private_?key|token)")
_PLACEHOLDER = re.compile(r"(?i)^(|changeme|change_me|xxx+|<.*>|\$\{.*\}|your[_-].*)$")
_ENV_TEMPLATES = (".env.example", ".env.sample", ".env.template", ".env.dist")
_DEPRECATED_NPM = ("request", "node-uuid", "colors")
_TYPE_NAMES = {str: "string", dict: "object", list: "array", bool: "boolean"}


@dataclass(frozen=True)
class _Practice:
    rule: str
    violated: Callable[[dict], bool]
    message: str
    severity: Severity
    key: Optional[str] = None


@dataclass(frozen=True)
class _JsonSchema:
    required: tuple[str, ...] = ()
    types: dict[str, tuple[type, ...]] = field(default_factory=dict)
    practices: tuple[_Practice, ...] = ()


def _npm_deps(config: dict) -> dict:
    deps: dict = {}
    for key in ("dependencies", "devDependencies"):
        if isinstance(config.get(key), dict):
            deps.update(config[key])
    return deps


def _compiler_options(config: dict) -> dict:
    options = config.get("compilerOptions")
    return options if isinstance(options, dict) else {}


_JSON_SCHEMAS: dict[str, _JsonSchema] = {
    "package.json": _JsonSchema(
        required=("name", "version"),
        types={
            "name": (str,),
            "version": (str,),
            "description": (str,),
            "main": (str,),
            "scripts": (dict,),
            "dependencies": (dict,),
            "devDependencies": (dict,),
        },
        practices=(
            _Practice("missing_license", lambda c: not c.get("license"), "Missing license field", Severity.WARNING),
            _Practice(
                "missing_engines",
                lambda c: not c.get("engines"),
                "Missing engines field (Node.js version)",
                Severity.INFO,
            ),
            _Practice(
                "deprecated_dependency",
                lambda c: any(d in _npm_deps(c) for d in _DEPRECATED_NPM),
                "Using deprecated dependencies",
                Severity.WARNING,
                key="dependencies",
            ),
        ),
    ),
    "tsconfig.json": _JsonSchema(
        required=("compilerOptions",),
        types={"compilerOptions": (dict,), "include": (list,), "exclude": (list,)},
        practices=(
            _Practice(
                "strict_mode",
                lambda c: _compiler_options(c).get("strict") is not True,
                "TypeScript strict mode not enabled",
                Severity.WARNING,
                key="compilerOptions",
            ),
            _Practice(
                "no_implicit_any",
                lambda c: _compiler_options(c).get("noImplicitAny") is False,
                "noImplicitAny is disabled",
                Severity.WARNING,
                key="noImplicitAny",
            ),
        ),
    ),
    ".eslintrc.json": _JsonSchema(
        types={"rules": (dict,), "extends": (str, list), "plugins": (list,), "env": (dict,)},
    ),
}
_JSON_SCHEMAS[".eslintrc"] = _JSON_SCHEMAS[".eslintrc.json"]


class ConfigurationValidator(FileAnalyzer):
    """Validates JSON, TOML, YAML and .env configuration files.

    JSON decode errors are left to SyntaxAnalyzer; this analyzer checks the
    structure of JSON files that parse.
    """

    name = "ConfigurationValidator"
    languages = ("json", "toml", "yaml", "env")

    def analyze_file(self, file_path: str, content: str, language: str) -> List[ErrorRecord]:
        if language == "json":
            return self._check_json(file_path, content)
        if language == "toml":
            return self._check_toml(file_path, content)
        if language == "yaml":
            return self._check_yaml(file_path, content)
        if language == "env":
            return self._check_env(file_path, content)
        return []

    def _record(
        self,
        file_path: str,
        content: str,
        line: int,
        message: str,
        severity: Severity,
        rule: str,
        language: str,
        column: Optional[int] = None,
        category: Category = Category.CONFIGURATION,
    ) -> ErrorRecord:
        return self.make_record(
            file_path,
            line,
            message,
            category,
            severity,
            rule=rule,
            column=column,
            context=line_at(content, line) or None,
            language=language,
        )

    # ── JSON ──────────────────────────────────────────────────────

    def _check_json(self, file_path: str, content: str) -> List[ErrorRecord]:
        schema = _JSON_SCHEMAS.get(PurePosixPath(file_path).name)
        if schema is None:
            return []
        try:
            config = json.loads(content)
        except json.JSONDecodeError:
            return []
        if not isinstance(config, dict):
            return [
                self._record(
                    file_path, content, 1, "Configuration root must be an object", Severity.ERROR,
                    "invalid_root", "json",
                )
            ]

        records: List[ErrorRecord] = []
        for key in schema.required:
            if key not in config:
                records.append(
                    self._record(
                        file_path, content, 1, f"Missing required field: {key}", Severity.ERROR,
                        "missing_required_field", "json",
                    )
                )
        for key, expected in schema.types.items():
            if key in config and not isinstance(config[key], expected):
                wanted = " or ".join(_TYPE_NAMES.get(t, t.__name__) for t in expected)
                records.append(
                    self._record(
                        file_path, content, _json_key_line(content, key),
                        f"Field {key} should be {wanted}", Severity.ERROR, "type_mismatch", "json",
                    )
                )
        for practice in schema.practices:
            if practice.violated(config):
                line = _json_key_line(content, practice.key) if practice.key else 1
                records.append(
                    self._record(
                        file_path, content, line, practice.message, practice.severity,
                        practice.rule, "json",
                    )
                )
        return records

    # ── TOML ──────────────────────────────────────────────────────

    def _check_toml(self, file_path: str, content: str) -> List[ErrorRecord]:
        try:
            config = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            match = _TOML_POSITION.search(str(e))
            line, column = (int(match.group(1)), int(match.group(2))) if match else (1, None)
            return [
                self._record(
                    file_path, content, line, f"Invalid TOML: {str(e)}", Severity.ERROR,
                    "invalid_toml", "toml", column=column,
                )
            ]

        if PurePosixPath(file_path).name != "pyproject.toml":
            return []

        records: List[ErrorRecord] = []
        project = config.get("project")
        if isinstance(project, dict):
            if "name" not in project:
                records.append(
                    self._record(
                        file_path, content, _toml_table_line(content, "project"),
                        "Missing required field: project.name", Severity.ERROR,
                        "missing_required_field", "toml",
                    )
                )
            dynamic = project.get("dynamic") or []
            if "version" not in project and "version" not in dynamic:
                records.append(
                    self._record(
                        file_path, content, _toml_table_line(content, "project"),
                        "Missing project.version (or dynamic version)", Severity.ERROR,
                        "missing_required_field", "toml",
                    )
                )
        if "build-system" not in config:
            records.append(
                self._record(
                    file_path, content, 1, "Missing [build-system] table", Severity.WARNING,
                    "missing_build_system", "toml",
                )
            )
        return records

    # ── YAML ──────────────────────────────────────────────────────

    def _check_yaml(self, file_path: str, content: str) -> List[ErrorRecord]:
        try:
            for _document in yaml.safe_load_all(content):
                pass
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None) or getattr(e, "context_mark", None)
            line, column = (mark.line + 1, mark.column + 1) if mark is not None else (1, None)
            # end-of-stream marks sit one past the last line
            line = max(1, min(line, len(content.splitlines())))
            problem = getattr(e, "problem", None) or str(e)
            rule = "yaml_tab_indent" if "'\\t'" in problem else "invalid_yaml"
            return [
                self._record(
                    file_path, content, line, f"Invalid YAML: {problem}", Severity.ERROR,
                    rule, "yaml", column=column,
                )
            ]
        return []

    # ── .env ──────────────────────────────────────────────────────

    def _check_env(self, file_path: str, content: str) -> List[ErrorRecord]:
        records: List[ErrorRecord] = []
        is_template = PurePosixPath(file_path).name in _ENV_TEMPLATES

        for lineno, text in enumerate(content.splitlines(), start=1):
            stripped = text.strip()
            if not stripped or stripped.startswith("#"):
                continue
            match = _ENV_LINE.match(stripped)
            if match is None:
                records.append(
                    self._record(
                        file_path, content, lineno, "Invalid .env line (expected KEY=value)",
                        Severity.ERROR, "invalid_env_line", "env",
                    )
                )
                continue

            key, value = match.group(1), match.group(2).strip().strip("\"'")
            if not _ENV_UPPER_KEY.match(key):
                records.append(
                    self._record(
                        file_path, content, lineno,
                        f"Environment variable {key} should be UPPER_SNAKE_CASE",
                        Severity.INFO, "env_key_format", "env",
                    )
                )
            if not is_template and _SECRET_KEY.search(key) and not _PLACEHOLDER.match(value):
                records.append(
                    self._record(
                        file_path, content, lineno, f"Potential secret in .env file: {key}",
                        Severity.CRITICAL, "secret_in_env", "env", category=Category.SECURITY,
                    )
                )
        return records


def _json_key_line(content: str, key: Optional[str]) -> int:
    if not key:
        return 1
    needle = f'"{key}"'
    for lineno, text in enumerate(content.splitlines(), start=1):
        if needle in text:
            return lineno
    return 1


def _toml_table_line(content: str, table: str) -> int:
    header = f"[{table}]"
    for lineno, text in enumerate(content.splitlines(), start=1):
        if text.strip() == header:
            return lineno
    return 1
