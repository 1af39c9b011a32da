"""Built-in patterns, solutions and best practices."""

from __future__ import annotations

from typing import Sequence

from ..models import (
    ANY_LANGUAGE,
    BestPractice,
    Category,
    CodeExample,
    Pattern,
    PatternMatchers,
    Solution,
)

SYNTAX = Category.SYNTAX
RUNTIME = Category.RUNTIME
CONFIGURATION = Category.CONFIGURATION
SECURITY = Category.SECURITY
PERFORMANCE = Category.PERFORMANCE
LOGICAL = Category.LOGICAL


def _pattern(
    id: str,
    name: str,
    language: str,
    keywords: Sequence[str],
    categories: Sequence[Category],
    description: str,
    causes: Sequence[str] = (),
    related: Sequence[str] = (),
) -> Pattern:
    return Pattern(
        id=id,
        name=name,
        language=language,
        matchers=PatternMatchers(keywords=tuple(keywords), categories=tuple(categories)),
        description=description,
        common_causes=tuple(causes),
        related=tuple(related),
    )


def _solution(
    id: str,
    pattern_id: str,
    title: str,
    description: str,
    steps: Sequence[str],
    confidence: float,
    difficulty: str = "easy",
    minutes: int = 5,
    tools: Sequence[str] = (),
    references: Sequence[str] = (),
    examples: Sequence[tuple[str, str]] = (),
) -> Solution:
    return Solution(
        id=id,
        pattern_id=pattern_id,
        title=title,
        description=description,
        steps=tuple(steps),
        confidence=confidence,
        difficulty=difficulty,
        estimated_minutes=minutes,
        tools=tuple(tools),
        references=tuple(references),
        examples=tuple(CodeExample(incorrect=bad, correct=good) for bad, good in examples),
    )


# ── Patterns ──────────────────────────────────────────────────────

PATTERNS: tuple[Pattern, ...] = (
    # Python
    _pattern(
        "py_syntax_error",
        "Python Syntax Error",
        "python",
        ["syntax_error", "invalid syntax", r"\bSyntax error\b", "was never closed", "expected ':'"],
        [SYNTAX],
        "Python source that the interpreter cannot parse",
        ["Missing colon after a block statement", "Unclosed bracket or string", "Keyword used as a name"],
        ["py_indentation", "py2_print_statement"],
    ),
    _pattern(
        "py_indentation",
        "Python Indentation Error",
        "python",
        ["IndentationError", "indentation", "unexpected indent", "expected an indented block"],
        [SYNTAX],
        "Inconsistent indentation in Python code",
        ["Mixed tabs and spaces", "Inconsistent indentation level", "Missing indentation after colon"],
        ["py_syntax_error"],
    ),
    _pattern(
        "py2_print_statement",
        "Python 2 Print Statement",
        "python",
        ["print_statement", "print statement"],
        [SYNTAX],
        "Python 2 print statement in Python 3 code",
        ["Code ported from Python 2", "Copied example written for Python 2"],
    ),
    _pattern(
        "py_bare_except",
        "Bare Except Clause",
        "python",
        ["bare_except", "bare except"],
        [RUNTIME],
        "except: without an exception type also catches SystemExit and KeyboardInterrupt",
        ["Quick fix to silence an error", "Unknown failure modes"],
    ),
    _pattern(
        "py_mutable_default",
        "Mutable Default Argument",
        "python",
        ["mutable_default", "mutable default"],
        [RUNTIME],
        "A list, dict or set default is created once and shared between calls",
        ["Default written as [] or {}", "Assuming defaults are evaluated per call"],
    ),
    _pattern(
        "division_by_zero",
        "Division by Zero",
        ANY_LANGUAGE,
        ["division_by_zero", "ZeroDivisionError", "division by zero"],
        [RUNTIME],
        "Dividing by a literal zero",
        ["Placeholder value left in code", "Missing guard for empty input"],
    ),
    _pattern(
        "py_attribute_error",
        "Python Attribute Error",
        "python",
        ["AttributeError", "has no attribute"],
        [RUNTIME],
        "Accessing a non-existent attribute",
        ["Object is None", "Typo in attribute name", "Wrong object type", "Method not defined"],
        ["py_none_check"],
    ),
    # JavaScript / TypeScript
    _pattern(
        "js_null_reference",
        "Null Reference Error",
        "javascript",
        ["TypeError.*null", "TypeError.*undefined", "Cannot read propert"],
        [RUNTIME],
        "Accessing property of null or undefined value",
        [
            "Variable not initialized",
            "API response missing expected data",
            "Async data not loaded yet",
            "Object property does not exist",
        ],
    ),
    _pattern(
        "js_unhandled_promise",
        "Unhandled Promise Rejection",
        "javascript",
        ["unhandled_promise", "UnhandledPromiseRejection", "unhandled.*rejection", "without error handling"],
        [RUNTIME],
        "Promise rejection without error handling",
        ["Missing .catch() handler", "No try-catch around await", "Error thrown in async function"],
    ),
    _pattern(
        "js_syntax_error",
        "JavaScript Syntax Error",
        "javascript",
        ["SyntaxError", "Unexpected token", "bracket", "Unexpected end of input"],
        [SYNTAX],
        "Invalid JavaScript syntax",
        ["Missing bracket or parenthesis", "Unclosed string literal", "Stray closing brace"],
    ),
    _pattern(
        "js_reference_error",
        "Reference Error",
        "javascript",
        ["ReferenceError", "is not defined"],
        [RUNTIME],
        "Using an undefined variable",
        ["Variable not declared", "Typo in variable name", "Variable out of scope", "Import missing"],
    ),
    _pattern(
        "js_loose_equality",
        "Loose Equality Comparison",
        "javascript",
        ["loose_equality", "loose equality"],
        [LOGICAL],
        "== and != coerce types before comparing",
        ["Habit from other languages", "Comparing values of different types"],
    ),
    _pattern(
        "js_assignment_in_condition",
        "Assignment in Condition",
        "javascript",
        ["assignment_in_condition", "assignment in condition"],
        [SYNTAX],
        "A single = inside if/while assigns instead of comparing",
        ["Typo for === or ==", "Intentional assignment without extra parentheses"],
    ),
    _pattern(
        "js_memory_leak",
        "Uncleared Timer or Listener",
        "javascript",
        ["interval_leak", "event_listener_leak", "setInterval", "addEventListener"],
        [PERFORMANCE],
        "Timers and listeners that are never removed keep their closures alive",
        ["Missing cleanup in component unmount", "Listener added on every render"],
    ),
    _pattern(
        "js_blocking_io",
        "Blocking File System Call",
        "javascript",
        ["sync_fs", "Synchronous file system"],
        [PERFORMANCE],
        "fs.*Sync calls block the event loop for the duration of the I/O",
        ["Startup code reused in request handlers", "Simpler API chosen for convenience"],
    ),
    _pattern(
        "js_console_log",
        "Leftover console.log",
        "javascript",
        ["console_log", r"console\.log"],
        [PERFORMANCE],
        "Debug output left in production code",
        ["Debugging statement not removed", "No logging library in place"],
    ),
    _pattern(
        "infinite_loop",
        "Potential Infinite Loop",
        ANY_LANGUAGE,
        ["infinite_loop", "infinite loop", r"while True loop"],
        [RUNTIME],
        "Loop without a reachable exit condition",
        ["Missing break", "Exit condition never becomes false"],
    ),
    _pattern(
        "ts_any_type",
        "Any Type Usage",
        "typescript",
        ["any_type_usage", '"any" type'],
        [SYNTAX],
        "The any type switches off type checking for a value",
        ["Third-party data without types", "Type too complex to write quickly"],
        ["ts_strict_mode"],
    ),
    _pattern(
        "ts_strict_mode",
        "TypeScript Strict Mode Disabled",
        ANY_LANGUAGE,
        ["strict_mode", "strict mode", "noImplicitAny"],
        [CONFIGURATION],
        "tsconfig.json without strict type checking",
        ["Project started from a permissive template", "Migration from JavaScript"],
        ["ts_any_type"],
    ),
    # Configuration
    _pattern(
        "config_json_invalid",
        "Invalid JSON Configuration",
        "json",
        ["invalid_json", "trailing_comma", "single_quotes", "Invalid JSON", r"JSON.*parse"],
        [SYNTAX, CONFIGURATION],
        "JSON syntax error in a configuration or data file",
        ["Trailing comma", "Single quotes instead of double", "Unquoted keys", "Missing comma between items"],
    ),
    _pattern(
        "config_missing_field",
        "Missing or Mistyped Configuration Field",
        ANY_LANGUAGE,
        ["missing_required_field", "Missing required field", "type_mismatch", "invalid_root"],
        [CONFIGURATION],
        "A configuration file lacks a required field or uses the wrong type",
        ["Hand-written configuration", "Field renamed in a newer tool version"],
    ),
    _pattern(
        "config_package_metadata",
        "Incomplete package.json Metadata",
        "json",
        ["missing_license", "missing_engines", "deprecated_dependency"],
        [CONFIGURATION],
        "package.json lacks recommended metadata or depends on deprecated packages",
        ["Scaffolded package never completed", "Old dependencies never upgraded"],
    ),
    _pattern(
        "config_toml_invalid",
        "Invalid TOML",
        "toml",
        ["invalid_toml", "missing_build_system"],
        [CONFIGURATION],
        "TOML file that does not parse or lacks required tables",
        ["Unquoted string value", "Duplicate key", "Missing [build-system] table"],
    ),
    _pattern(
        "config_yaml_invalid",
        "Malformed YAML",
        "yaml",
        ["yaml_tab_indent", "yaml_invalid_line"],
        [CONFIGURATION],
        "YAML with tab indentation or lines that are not mappings or list items",
        ["Editor inserting tabs", "Missing colon after a key"],
    ),
    _pattern(
        "config_env_format",
        "Malformed .env Entry",
        "env",
        ["invalid_env_line", "env_key_format"],
        [CONFIGURATION],
        ".env lines that are not KEY=value pairs",
        ["Spaces in variable names", "Shell syntax the loader does not support"],
    ),
    _pattern(
        "config_env_missing",
        "Missing Environment Variable",
        ANY_LANGUAGE,
        [r"env.*undefined", r"environment variable.*not set", r"missing.*env\b"],
        [CONFIGURATION, RUNTIME],
        "Required environment variable not set",
        [
            ".env file not loaded",
            "Variable not defined in .env",
            "Typo in variable name",
            "Different variable name in production",
        ],
    ),
    # Security
    _pattern(
        "sec_sql_injection",
        "SQL Injection Vulnerability",
        ANY_LANGUAGE,
        ["sql_injection", "SQL injection", r"SELECT.*\+.*input", r"query.*\+.*req\."],
        [SECURITY],
        "User input concatenated into an SQL query",
        ["String concatenation in SQL", "Template literals with user input", "Missing parameterized queries"],
    ),
    _pattern(
        "sec_xss",
        "Cross-Site Scripting (XSS)",
        "javascript",
        ["inner_html", "innerHTML", "dangerouslySetInnerHTML", r"document\.write", "cross-site scripting"],
        [SECURITY],
        "Unsanitized input rendered as HTML",
        ["Using innerHTML with user data", "Not sanitizing HTML content", "Rendering user input directly"],
    ),
    _pattern(
        "sec_code_eval",
        "Dynamic Code Evaluation",
        ANY_LANGUAGE,
        ["eval_usage", "exec_usage", r"\beval\(", r"\bexec\("],
        [SECURITY],
        "eval/exec run arbitrary code built at runtime",
        ["Parsing data with eval", "Building functions from strings"],
    ),
    _pattern(
        "sec_secret_in_env",
        "Secret Committed in .env",
        "env",
        ["secret_in_env", "Potential secret"],
        [SECURITY],
        "Credentials stored in a .env file that may be committed",
        [".env not listed in .gitignore", "Real credentials used for local development"],
    ),
    # Category-level fallbacks
    _pattern(
        "generic_syntax",
        "Syntax Problem",
        ANY_LANGUAGE,
        [],
        [SYNTAX],
        "Any syntax-level problem",
    ),
    _pattern(
        "generic_runtime",
        "Runtime Hazard",
        ANY_LANGUAGE,
        [],
        [RUNTIME],
        "Any construct likely to fail at runtime",
    ),
    _pattern(
        "generic_configuration",
        "Configuration Problem",
        ANY_LANGUAGE,
        [],
        [CONFIGURATION],
        "Any configuration problem",
    ),
    _pattern(
        "generic_security",
        "Security Weakness",
        ANY_LANGUAGE,
        [],
        [SECURITY],
        "Any security weakness",
    ),
    _pattern(
        "generic_performance",
        "Performance Problem",
        ANY_LANGUAGE,
        [],
        [PERFORMANCE],
        "Any performance problem",
    ),
    _pattern(
        "generic_logical",
        "Logic Problem",
        ANY_LANGUAGE,
        [],
        [LOGICAL],
        "Any logic problem",
    ),
    _pattern(
        "generic_analyzer_failure",
        "Analyzer Failure",
        ANY_LANGUAGE,
        [],
        [Category.ANALYZER_FAILURE],
        "An analyzer raised instead of reporting results",
    ),
)


# ── Solutions ─────────────────────────────────────────────────────

SOLUTIONS: tuple[Solution, ...] = (
    _solution(
        "sol_py_fix_syntax",
        "py_syntax_error",
        "Fix the reported syntax error",
        "Correct the statement at the reported line and column",
        [
            "Open the file at the reported line",
            "Check for a missing colon, bracket or quote on that line or the one before",
            "Run python -m py_compile on the file",
        ],
        0.85,
        minutes=3,
        tools=["python -m py_compile", "ruff"],
        examples=[("if x > 1\n    run()", "if x > 1:\n    run()")],
    ),
    _solution(
        "sol_py_reindent",
        "py_indentation",
        "Fix indentation",
        "Re-indent the block with four spaces and no tabs",
        [
            "Choose a consistent indentation style (spaces)",
            "Configure your editor to insert spaces for tabs",
            "Re-indent the affected lines",
            "Use an auto-formatter such as Black",
        ],
        0.9,
        minutes=2,
        tools=["black", "ruff format"],
    ),
    _solution(
        "sol_py_print_function",
        "py2_print_statement",
        "Use the print() function",
        "Wrap the printed expression in parentheses",
        ["Replace print x with print(x)", "Run 2to3 -f print on older modules"],
        0.95,
        minutes=1,
        tools=["2to3", "pyupgrade"],
        examples=[('print "done"', 'print("done")')],
    ),
    _solution(
        "sol_py_specific_except",
        "py_bare_except",
        "Catch specific exceptions",
        "Name the exceptions the block can actually handle",
        [
            "Find which exceptions the try block can raise",
            "Replace except: with except (ValueError, KeyError):",
            "Use except Exception: only where everything must be logged and re-raised",
        ],
        0.85,
        minutes=5,
        tools=["ruff (E722)", "pylint"],
        examples=[("except:\n    pass", "except ValueError:\n    logger.warning('bad value')")],
    ),
    _solution(
        "sol_py_none_default",
        "py_mutable_default",
        "Use None as the default",
        "Default to None and create the container inside the function",
        [
            "Change the default to None",
            "Create the list or dict at the start of the function when the argument is None",
        ],
        0.95,
        minutes=2,
        tools=["ruff (B006)", "flake8-bugbear"],
        examples=[
            (
                "def add(item, items=[]):",
                "def add(item, items=None):\n    items = [] if items is None else items",
            )
        ],
    ),
    _solution(
        "sol_guard_divisor",
        "division_by_zero",
        "Guard the divisor",
        "Replace the literal zero or check the divisor before dividing",
        ["Find where the zero comes from", "Return early or raise a clear error when the divisor is 0"],
        0.8,
        minutes=5,
    ),
    _solution(
        "sol_py_none_check",
        "py_attribute_error",
        "Check for None before attribute access",
        "Verify the object type and handle missing values explicitly",
        [
            "Print or log the type of the object at the failing line",
            "Add an explicit None check or use getattr with a default",
            "Fix the upstream code returning the wrong type",
        ],
        0.7,
        difficulty="medium",
        minutes=15,
        tools=["mypy"],
    ),
    _solution(
        "sol_optional_chaining",
        "js_null_reference",
        "Use Optional Chaining",
        "Use ?. operator to safely access nested properties",
        [
            "Replace direct property access with optional chaining",
            "Add nullish coalescing for default values",
            "Test with null/undefined values",
        ],
        0.8,
        minutes=5,
        references=[
            "https://developer.mozilla.org/en-US/docs/Web/JavaScript/Reference/Operators/Optional_chaining"
        ],
        examples=[("const name = user.profile.name;", 'const name = user?.profile?.name ?? "Unknown";')],
    ),
    _solution(
        "sol_catch_handler",
        "js_unhandled_promise",
        "Add .catch() Handler",
        "Add error handling to promise chain",
        [
            "Add .catch() at the end of promise chain",
            "Log or handle the error appropriately",
            "Consider adding global unhandledrejection handler",
        ],
        0.85,
        minutes=5,
        tools=["eslint-plugin-promise"],
        examples=[("fetchData().then(process);", "fetchData().then(process).catch(handleError);")],
    ),
    _solution(
        "sol_try_catch_async",
        "js_unhandled_promise",
        "Use try-catch with async/await",
        "Wrap async operations in try-catch",
        ["Convert to async/await syntax", "Wrap await in try-catch block", "Handle error in catch block"],
        0.75,
        difficulty="medium",
        minutes=10,
    ),
    _solution(
        "sol_balance_brackets",
        "js_syntax_error",
        "Close unclosed bracket",
        "Find and close the unbalanced bracket",
        [
            "Identify the type of bracket that is unbalanced",
            "Find the matching opening bracket",
            "Add or remove the closing bracket at the appropriate location",
            "Verify bracket matching with editor highlighting",
        ],
        0.8,
        minutes=2,
        tools=["eslint", "prettier"],
    ),
    _solution(
        "sol_declare_variable",
        "js_reference_error",
        "Declare or import the variable",
        "Make the name available in the scope where it is used",
        ["Check the spelling of the name", "Add the missing import or declaration", "Enable no-undef in ESLint"],
        0.8,
        minutes=5,
        tools=["eslint"],
    ),
    _solution(
        "sol_strict_equality",
        "js_loose_equality",
        "Use strict equality",
        "Replace == with === and != with !==",
        ["Replace the operator", "Convert operands explicitly where coercion was intended", "Enable eqeqeq"],
        0.9,
        minutes=1,
        tools=["eslint (eqeqeq)"],
        examples=[("if (count == '0')", "if (count === 0)")],
    ),
    _solution(
        "sol_fix_condition_assignment",
        "js_assignment_in_condition",
        "Fix assignment in condition",
        "Replace assignment operator with comparison operator",
        [
            "Locate the condition with assignment",
            "Replace = with === (strict equality)",
            "If assignment was intentional, wrap in parentheses: if ((x = value))",
        ],
        0.9,
        minutes=1,
        tools=["eslint (no-cond-assign)"],
    ),
    _solution(
        "sol_cleanup_timers",
        "js_memory_leak",
        "Clear timers and remove listeners",
        "Pair every setInterval/addEventListener with its cleanup call",
        [
            "Store the interval id or handler reference",
            "Call clearInterval/removeEventListener when the owner is destroyed",
            "Verify with a heap snapshot that memory stays flat",
        ],
        0.8,
        difficulty="medium",
        minutes=15,
        tools=["Chrome DevTools Memory panel"],
    ),
    _solution(
        "sol_async_fs",
        "js_blocking_io",
        "Use the asynchronous fs API",
        "Switch to fs.promises and await the result",
        ["Replace fs.readFileSync with await fs.promises.readFile", "Make the caller async"],
        0.8,
        difficulty="medium",
        minutes=10,
    ),
    _solution(
        "sol_remove_console",
        "js_console_log",
        "Remove console statements",
        "Delete debug output or route it through a logger",
        ["Remove the console.log call", "Use a logging library with levels", "Enable no-console in ESLint"],
        0.9,
        minutes=1,
        tools=["eslint (no-console)"],
    ),
    _solution(
        "sol_loop_exit",
        "infinite_loop",
        "Add an exit condition",
        "Give the loop a reachable break or a bounded condition",
        ["Decide when the loop is finished", "Add a break, return or bounded counter", "Add a timeout for I/O loops"],
        0.7,
        difficulty="medium",
        minutes=10,
    ),
    _solution(
        "sol_replace_any",
        "ts_any_type",
        "Replace any with a specific type",
        "Describe the value with an interface or use unknown and narrow it",
        ["Write an interface for the value", "Use unknown where the type is really unknown", "Enable noImplicitAny"],
        0.75,
        difficulty="medium",
        minutes=15,
        tools=["typescript-eslint (no-explicit-any)"],
    ),
    _solution(
        "sol_enable_strict",
        "ts_strict_mode",
        "Enable TypeScript strict mode",
        "Enable strict mode for better type safety",
        ["Open tsconfig.json", 'Add "strict": true to compilerOptions', "Fix any type errors that appear"],
        0.85,
        difficulty="medium",
        minutes=30,
        tools=["tsc"],
    ),
    _solution(
        "sol_json_validate",
        "config_json_invalid",
        "Validate JSON Syntax",
        "Use JSON validator to find and fix errors",
        [
            "Use a JSON validator or IDE extension",
            "Fix reported syntax errors",
            "Remove trailing commas",
            "Use double quotes for strings and keys",
        ],
        0.9,
        minutes=2,
        tools=["jsonlint", "python -m json.tool"],
        examples=[("{ 'name': 'test', }", '{ "name": "test" }')],
    ),
    _solution(
        "sol_add_required_field",
        "config_missing_field",
        "Add required field",
        "Add the missing required field to the configuration",
        ["Open the configuration file", "Add the missing field with appropriate value", "Validate the configuration"],
        0.9,
        minutes=2,
    ),
    _solution(
        "sol_complete_package_json",
        "config_package_metadata",
        "Complete package.json",
        "Add licence and engines fields and replace deprecated dependencies",
        ["Add a license field", "Declare supported Node.js versions in engines", "Replace deprecated packages"],
        0.7,
        minutes=10,
        tools=["npm pkg", "npm outdated"],
    ),
    _solution(
        "sol_fix_toml",
        "config_toml_invalid",
        "Fix TOML syntax",
        "Correct the value or table at the reported position",
        ["Quote string values", "Remove duplicate keys", "Add the missing table"],
        0.85,
        minutes=3,
        tools=["taplo"],
    ),
    _solution(
        "sol_fix_yaml",
        "config_yaml_invalid",
        "Fix YAML indentation",
        "Indent with spaces and make every line a key: value pair or list item",
        ["Replace tabs with spaces", "Add the missing colon after the key", "Run a YAML linter"],
        0.85,
        minutes=3,
        tools=["yamllint"],
    ),
    _solution(
        "sol_fix_env_line",
        "config_env_format",
        "Use KEY=value lines",
        "Rewrite entries as UPPER_SNAKE_CASE=value",
        ["Remove spaces around the key", "Rename keys to UPPER_SNAKE_CASE", "Quote values containing spaces"],
        0.85,
        minutes=2,
        tools=["dotenv-linter"],
    ),
    _solution(
        "sol_env_defaults",
        "config_env_missing",
        "Validate environment at startup",
        "Fail fast with a clear message when a required variable is missing",
        ["List required variables in .env.example", "Check them at startup", "Document them in the README"],
        0.75,
        difficulty="medium",
        minutes=15,
        tools=["dotenv", "envalid"],
    ),
    _solution(
        "sol_parameterized",
        "sec_sql_injection",
        "Use Parameterized Queries",
        "Replace string concatenation with parameters",
        [
            "Identify queries with string concatenation",
            "Replace with parameterized query syntax",
            "Pass user input as separate parameters",
            "Test with malicious input",
        ],
        0.95,
        difficulty="medium",
        minutes=20,
        tools=["sqlmap", "OWASP ZAP", "bandit"],
        references=["https://cheatsheetseries.owasp.org/cheatsheets/SQL_Injection_Prevention_Cheat_Sheet.html"],
        examples=[
            (
                "db.query(`SELECT * FROM users WHERE id = ${userId}`)",
                'db.query("SELECT * FROM users WHERE id = ?", [userId])',
            )
        ],
    ),
    _solution(
        "sol_text_content",
        "sec_xss",
        "Render text, not HTML",
        "Use textContent or sanitize HTML before inserting it",
        ["Replace innerHTML with textContent", "Sanitize unavoidable HTML with DOMPurify", "Add a Content-Security-Policy"],
        0.9,
        difficulty="medium",
        minutes=15,
        tools=["DOMPurify", "eslint-plugin-security"],
    ),
    _solution(
        "sol_remove_eval",
        "sec_code_eval",
        "Remove eval/exec",
        "Parse data with a real parser and dispatch functions by name",
        ["Use json.loads / JSON.parse or ast.literal_eval for data", "Use a lookup table instead of building code"],
        0.9,
        difficulty="medium",
        minutes=15,
        tools=["bandit", "eslint (no-eval)"],
    ),
    _solution(
        "sol_rotate_secret",
        "sec_secret_in_env",
        "Move the secret out of the repository",
        "Rotate the credential and load it from a secret store",
        [
            "Rotate the exposed credential",
            "Add .env to .gitignore and commit a .env.example instead",
            "Load secrets from the environment or a secret manager",
        ],
        0.9,
        difficulty="medium",
        minutes=20,
        tools=["git-secrets", "gitleaks"],
    ),
    _solution(
        "sol_generic_syntax",
        "generic_syntax",
        "Review the reported line",
        "Inspect the code at the reported location and run the language's parser or linter",
        ["Open the file at the reported line", "Run the project's linter", "Fix the reported construct"],
        0.3,
        minutes=10,
    ),
    _solution(
        "sol_generic_runtime",
        "generic_runtime",
        "Reproduce and guard",
        "Reproduce the failure in a test and add a guard for the failing case",
        ["Write a failing test", "Add input validation or error handling", "Re-run the tests"],
        0.3,
        difficulty="medium",
        minutes=20,
    ),
    _solution(
        "sol_generic_configuration",
        "generic_configuration",
        "Validate the configuration file",
        "Check the file against the tool's documented schema",
        ["Open the tool's configuration reference", "Compare the reported field", "Re-run the tool"],
        0.3,
        minutes=10,
    ),
    _solution(
        "sol_generic_security",
        "generic_security",
        "Review with a security checklist",
        "Check the code against OWASP guidance for the reported issue",
        ["Identify untrusted input reaching the code", "Apply the OWASP cheat sheet", "Add a regression test"],
        0.3,
        difficulty="hard",
        minutes=30,
        references=["https://cheatsheetseries.owasp.org/"],
    ),
    _solution(
        "sol_generic_performance",
        "generic_performance",
        "Profile the hot path",
        "Measure before changing the code",
        ["Profile the affected code path", "Fix the measured bottleneck", "Compare before and after"],
        0.3,
        difficulty="medium",
        minutes=30,
    ),
    _solution(
        "sol_generic_logical",
        "generic_logical",
        "Add a test for the intended behaviour",
        "Pin down the expected behaviour with a test, then fix the logic",
        ["Write a test describing the intended behaviour", "Fix the logic until it passes"],
        0.3,
        difficulty="medium",
        minutes=20,
    ),
    _solution(
        "sol_generic_analyzer_failure",
        "generic_analyzer_failure",
        "Investigate the analyzer failure",
        "Re-run the scan with verbose logging to see the analyzer's traceback",
        ["Re-run with --verbose", "Check whether a single file triggers the failure", "Report the failure upstream"],
        0.3,
        minutes=15,
    ),
)


# ── Best practices ────────────────────────────────────────────────

BEST_PRACTICES: tuple[BestPractice, ...] = (
    BestPractice(
        "bp_py_specific_except",
        "python",
        "Catch specific exceptions",
        "Never use a bare except: clause",
        "Name the exception types the block handles",
        violation=r"^\s*except\s*:",
    ),
    BestPractice(
        "bp_py_no_mutable_defaults",
        "python",
        "No mutable default arguments",
        "Default arguments are evaluated once",
        "Use None and create the container inside the function",
        violation=r"def\s+\w+\s*\([^)]*=\s*(\[\]|\{\}|set\(\))",
    ),
    BestPractice(
        "bp_py_type_hints",
        "python",
        "Use type hints",
        "Add type hints to function signatures",
        "Add type hints to function parameters and return types",
    ),
    BestPractice(
        "bp_strict_equality",
        "javascript",
        "Use strict equality",
        "Always use === instead of ==",
        "Replace == with ===",
        violation=r"(?<![=!<>])[=!]=(?!=)",
    ),
    BestPractice(
        "bp_const_let",
        "javascript",
        "Use const/let instead of var",
        "Prefer const and let over var",
        "Replace var with const or let",
        violation=r"\bvar\s+\w",
    ),
    BestPractice(
        "bp_no_console",
        "javascript",
        "Remove console statements",
        "Remove console.log in production code",
        "Remove or replace with proper logging",
        violation=r"\bconsole\.log\s*\(",
    ),
    BestPractice(
        "bp_no_any",
        "typescript",
        "Avoid any type",
        "Use specific types instead of any",
        "Replace any with specific type",
        violation=r":\s*any\b",
    ),
    BestPractice(
        "bp_strict_null",
        "typescript",
        "Enable strict null checks",
        "Use strictNullChecks in tsconfig",
        'Add "strictNullChecks": true to tsconfig.json',
    ),
    BestPractice(
        "bp_json_double_quotes",
        "json",
        "Double-quoted strings",
        "JSON strings and keys use double quotes",
        "Replace single quotes with double quotes",
        violation=r"'[^'\n]*'\s*:",
    ),
    BestPractice(
        "bp_env_no_secrets",
        "env",
        "Keep secrets out of .env files in version control",
        "Commit .env.example with placeholders instead of real values",
        "Move credentials to a secret store",
        violation=r"(?im)^\s*\w*(password|secret|api_?key|private_?key|token)\w*\s*=\s*\S+",
    ),
)
