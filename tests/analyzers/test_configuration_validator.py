"""Tests for ConfigurationValidator."""

import json

import pytest

from errorscope.analyzers import ConfigurationValidator
from errorscope.models import Category, Severity


def _rules(records):
    return sorted(r.rule for r in records)


class TestPackageJson:
    def setup_method(self):
        self.analyzer = ConfigurationValidator()

    def _check(self, data, name="package.json"):
        return self.analyzer.analyze_file(name, json.dumps(data, indent=2), "json")

    def test_complete_manifest(self):
        data = {"name": "a", "version": "1.0.0", "license": "MIT", "engines": {"node": ">=18"}}
        assert self._check(data) == []

    def test_missing_required_fields(self):
        records = self._check({"license": "MIT", "engines": {}})
        missing = [r for r in records if r.rule == "missing_required_field"]
        assert sorted(r.message for r in missing) == [
            "Missing required field: name",
            "Missing required field: version",
        ]
        assert all(r.severity is Severity.ERROR for r in missing)

    def test_type_mismatch_points_at_key(self):
        data = {"name": "a", "version": 1, "license": "MIT", "engines": {"node": "18"}}
        records = self._check(data)
        assert _rules(records) == ["type_mismatch"]
        assert records[0].message == "Field version should be string"
        assert records[0].location.line == 3

    def test_best_practices(self):
        data = {"name": "a", "version": "1.0.0", "dependencies": {"request": "^2.0.0"}}
        records = self._check(data)
        assert _rules(records) == ["deprecated_dependency", "missing_engines", "missing_license"]
        severities = {r.rule: r.severity for r in records}
        assert severities["missing_engines"] is Severity.INFO
        assert severities["missing_license"] is Severity.WARNING

    def test_non_object_root(self):
        records = self.analyzer.analyze_file("package.json", "[1, 2]", "json")
        assert _rules(records) == ["invalid_root"]

    def test_unparseable_json_left_to_syntax(self):
        assert self.analyzer.analyze_file("package.json", '{"name": ', "json") == []

    def test_unknown_json_file_not_checked(self):
        assert self.analyzer.analyze_file("data.json", "[]", "json") == []

    def test_nested_path_uses_basename(self):
        records = self.analyzer.analyze_file("packages/a/package.json", "{}", "json")
        assert "missing_required_field" in _rules(records)


class TestTsconfig:
    def test_strict_mode(self):
        analyzer = ConfigurationValidator()
        content = json.dumps({"compilerOptions": {"noImplicitAny": False}}, indent=2)
        records = analyzer.analyze_file("tsconfig.json", content, "json")
        assert _rules(records) == ["no_implicit_any", "strict_mode"]

    def test_strict_ok(self):
        analyzer = ConfigurationValidator()
        content = json.dumps({"compilerOptions": {"strict": True}})
        assert analyzer.analyze_file("tsconfig.json", content, "json") == []


class TestToml:
    def setup_method(self):
        self.analyzer = ConfigurationValidator()

    def test_invalid_toml(self):
        records = self.analyzer.analyze_file("a.toml", "x = 1\ny = = 2\n", "toml")
        assert _rules(records) == ["invalid_toml"]
        assert records[0].location.line == 2

    def test_other_toml_files_only_parsed(self):
        assert self.analyzer.analyze_file("ruff.toml", "line-length = 100\n", "toml") == []

    def test_pyproject_checks(self):
        content = '[project]\ndescription = "x"\n'
        records = self.analyzer.analyze_file("pyproject.toml", content, "toml")
        assert _rules(records) == [
            "missing_build_system",
            "missing_required_field",
            "missing_required_field",
        ]

    def test_dynamic_version_accepted(self):
        content = (
            '[build-system]\nrequires = ["setuptools"]\n\n'
            '[project]\nname = "x"\ndynamic = ["version"]\n'
        )
        assert self.analyzer.analyze_file("pyproject.toml", content, "toml") == []


class TestYaml:
    def setup_method(self):
        self.analyzer = ConfigurationValidator()

    def test_valid(self):
        content = "name: ci\non:\n  push:\n    branches: [main]\nsteps:\n  - run: make\n"
        assert self.analyzer.analyze_file("ci.yml", content, "yaml") == []

    def test_multiple_documents(self):
        assert self.analyzer.analyze_file("k8s.yaml", "a: 1\n---\nb: 2\n", "yaml") == []

    def test_tab_indent(self):
        records = self.analyzer.analyze_file("a.yaml", "a:\n\tb: 1\n", "yaml")
        assert _rules(records) == ["yaml_tab_indent"]
        assert records[0].location.line == 2

    def test_invalid_line(self):
        records = self.analyzer.analyze_file("a.yaml", "a: 1\njust words\n", "yaml")
        assert _rules(records) == ["invalid_yaml"]
        assert records[0].severity is Severity.ERROR
        assert records[0].location.line == 2

    def test_block_scalar_skipped(self):
        content = "script: |\n  echo hello\n  just words\nnext: 1\n"
        assert self.analyzer.analyze_file("a.yaml", content, "yaml") == []

    def test_mapping_value_inside_scalar(self):
        records = self.analyzer.analyze_file("a.yml", "name: demo\n  version: 1\n", "yaml")
        assert _rules(records) == ["invalid_yaml"]
        assert records[0].location.line == 2
        assert records[0].location.column is not None

    @pytest.mark.parametrize(
        "content",
        ['key: "unterminated', "items:\n- a\n  - b: [1, 2\n"],
    )
    def test_parser_errors_reported_once(self, content):
        records = self.analyzer.analyze_file("b.yml", content, "yaml")
        assert _rules(records) == ["invalid_yaml"]
        assert 1 <= records[0].location.line <= len(content.splitlines())


class TestEnv:
    def setup_method(self):
        self.analyzer = ConfigurationValidator()

    def test_secret_detected(self):
        records = self.analyzer.analyze_file(".env", "API_KEY=abc123\nPORT=80\n", "env")
        assert _rules(records) == ["secret_in_env"]
        assert records[0].category is Category.SECURITY
        assert records[0].severity is Severity.CRITICAL

    def test_placeholders_and_templates(self):
        content = "API_KEY=\nPASSWORD=changeme\nTOKEN=${TOKEN}\n"
        assert self.analyzer.analyze_file(".env", content, "env") == []
        assert self.analyzer.analyze_file(".env.example", "API_KEY=abc123\n", "env") == []

    def test_invalid_line_and_key_format(self):
        records = self.analyzer.analyze_file(".env", "# c\nnot a pair\nlower_key=1\n", "env")
        assert _rules(records) == ["env_key_format", "invalid_env_line"]
