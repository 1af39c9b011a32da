"""Language detection by file extension and well-known file names."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class LanguageConfig:
    """What the analyzers need to know about a language."""

    name: str
    extensions: tuple[str, ...]
    file_names: tuple[str, ...] = ()
    line_comment: Optional[str] = None
    block_comment: Optional[tuple[str, str]] = None
    string_quotes: tuple[str, ...] = field(default=('"', "'"))


LANGUAGES: dict[str, LanguageConfig] = {
    "python": LanguageConfig(
        name="python",
        extensions=(".py", ".pyw"),
        line_comment="#",
    ),
    "javascript": LanguageConfig(
        name="javascript",
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        line_comment="//",
        block_comment=("/*", "*/"),
        string_quotes=('"', "'", "`"),
    ),
    "typescript": LanguageConfig(
        name="typescript",
        extensions=(".ts", ".tsx"),
        line_comment="//",
        block_comment=("/*", "*/"),
        string_quotes=('"', "'", "`"),
    ),
    "java": LanguageConfig(
        name="java",
        extensions=(".java",),
        line_comment="//",
        block_comment=("/*", "*/"),
    ),
    "json": LanguageConfig(
        name="json",
        extensions=(".json",),
        file_names=(".eslintrc", ".babelrc", ".prettierrc"),
    ),
    "toml": LanguageConfig(name="toml", extensions=(".toml",), line_comment="#"),
    "yaml": LanguageConfig(name="yaml", extensions=(".yaml", ".yml"), line_comment="#"),
    "env": LanguageConfig(
        name="env",
        extensions=(".env",),
        file_names=(".env",),
        line_comment="#",
    ),
}

_BY_EXTENSION = {ext: cfg.name for cfg in LANGUAGES.values() for ext in cfg.extensions}
_BY_FILE_NAME = {name: cfg.name for cfg in LANGUAGES.values() for name in cfg.file_names}


def detect_language(path: "Path | str") -> Optional[str]:
    """Language id for a path, or None when it is not a known source file.

    ``.env.local`` and ``.env.production`` count as env files.
    """
    p = Path(path)
    if p.name in _BY_FILE_NAME:
        return _BY_FILE_NAME[p.name]
    if p.name.startswith(".env."):
        return "env"
    return _BY_EXTENSION.get(p.suffix.lower())


def get_language_config(name: str) -> Optional[LanguageConfig]:
    return LANGUAGES.get(name)


def get_all_known_extensions() -> set[str]:
    return set(_BY_EXTENSION)


def is_known_source(path: "Path | str") -> bool:
    return detect_language(path) is not None
