"""Built-in category descriptions and diagnostic checklists."""

from __future__ import annotations

from typing import Dict, Tuple

from ..models import Category, CategoryDescription, DiagnosticStep, Severity


def _steps(*pairs: Tuple[str, str]) -> Tuple[DiagnosticStep, ...]:
    return tuple(
        DiagnosticStep(step=i, action=action, question=question)
        for i, (action, question) in enumerate(pairs, start=1)
    )


DESCRIPTIONS: Dict[Category, CategoryDescription] = {
    Category.SYNTAX: CategoryDescription(
        "Syntax Error",
        "Code that violates the grammar of its language and cannot be parsed.",
        (
            "Missing or mismatched brackets, parentheses or braces",
            "Missing separators such as commas or colons",
            "Unclosed string literals",
            "Keywords used as names",
            "Inconsistent indentation",
        ),
    ),
    Category.RUNTIME: CategoryDescription(
        "Runtime Error",
        "An operation that fails while the program runs.",
        (
            "None or undefined value accessed",
            "Division by zero",
            "Index out of range",
            "Type mismatch in an operation",
            "Unhandled promise rejection",
        ),
    ),
    Category.LOGICAL: CategoryDescription(
        "Logical Error",
        "Code that runs without crashing but produces wrong results.",
        (
            "Off-by-one errors in loops",
            "Wrong comparison operator",
            "Incorrect boolean logic",
            "Unreachable code after an early return",
        ),
    ),
    Category.CONFIGURATION: CategoryDescription(
        "Configuration Error",
        "A configuration file that is invalid or incomplete.",
        (
            "Missing required fields",
            "Invalid JSON, YAML or TOML syntax",
            "Wrong value types",
            "Incompatible version specifications",
        ),
    ),
    Category.SECURITY: CategoryDescription(
        "Security Vulnerability",
        "A weakness that could be exploited to compromise the system.",
        (
            "Dynamic code execution on untrusted input",
            "Injection through string-built queries or commands",
            "Hardcoded credentials",
            "Missing input validation",
        ),
    ),
    Category.PERFORMANCE: CategoryDescription(
        "Performance Issue",
        "Code that runs slower or uses more resources than necessary.",
        (
            "Nested loops over large inputs",
            "Blocking I/O on a hot path",
            "Resources that are never released",
            "Repeated work that could be cached",
        ),
    ),
    Category.ANALYZER_FAILURE: CategoryDescription(
        "Analyzer Failure",
        "An analyzer could not finish, so part of the scan is missing.",
        (
            "Unreadable or undecodable file",
            "Analyzer bug triggered by unusual input",
        ),
    ),
}

UNKNOWN_DESCRIPTION = CategoryDescription(
    "Unknown Error", "An unknown error occurred.", ("Unknown cause",)
)

# Checked before the category checklists.
PATTERN_STEPS: Dict[str, Tuple[DiagnosticStep, ...]] = {
    "js_null_reference": _steps(
        ("Check if the variable is initialized", "Is the variable assigned a value before use?"),
        ("Verify the API response structure", "Does the API always return the expected shape?"),
        ("Check for race conditions", "Could the data be read before it is loaded?"),
        ("Add null checks", "Should optional chaining or an explicit check be added?"),
    ),
    "js_unhandled_promise": _steps(
        ("Identify the promise source", "Where is the promise created?"),
        ("Check for a .catch() handler", "Is there a .catch() in the promise chain?"),
        ("Review async/await usage", "Is the await wrapped in try/catch?"),
        ("Check global handlers", "Is there a global unhandledrejection handler?"),
        ("Decide the failure behaviour", "What should happen when the promise fails?"),
    ),
}

CATEGORY_STEPS: Dict[Category, Tuple[DiagnosticStep, ...]] = {
    Category.RUNTIME: _steps(
        ("Reproduce with the failing input", "Which input makes the operation fail?"),
        ("Check values before use", "Can the value be None, empty or zero here?"),
        ("Review error handling", "Are failures from callees handled or propagated?"),
        ("Add a guard or a test", "Which check or test would have caught this?"),
    ),
    Category.CONFIGURATION: _steps(
        ("Validate file syntax", "Does the file parse as JSON, YAML or TOML?"),
        ("Check required fields", "Are all required fields present?"),
        ("Verify field types", "Do the values have the expected types?"),
        ("Check environment variables", "Are referenced environment variables set?"),
        ("Compare with the documented schema", "Does the file match what the tool expects?"),
    ),
    Category.PERFORMANCE: _steps(
        ("Profile the code", "Which function takes the most time?"),
        ("Check algorithm complexity", "How does the cost grow with input size?"),
        ("Review loop bodies", "Is work repeated inside loops unnecessarily?"),
        ("Check resource cleanup", "Are handles, listeners and timers released?"),
        ("Consider caching", "Can results be reused instead of recomputed?"),
    ),
    Category.SECURITY: _steps(
        ("Trace the input", "Can an attacker control the value reaching this line?"),
        ("Check for a safe API", "Is there a parameterized or non-evaluating alternative?"),
        ("Review secrets handling", "Should this value come from the environment instead?"),
        ("Add a regression test", "Which test proves the input is now handled safely?"),
    ),
}

GENERIC_STEPS: Tuple[DiagnosticStep, ...] = _steps(
    ("Reproduce the error", "Can you consistently reproduce this error?"),
    ("Check the error location", "Is the problem at the reported line and column?"),
    ("Review recent changes", "What changed recently that might have caused this?"),
    ("Check dependencies", "Are all dependencies installed and compatible?"),
    ("Apply the suggested fix", "Does the suggested resolution fix the issue?"),
)

IMPACT: Dict[Severity, str] = {
    Severity.CRITICAL: "Critical: Application cannot function",
    Severity.ERROR: "High: Major functionality affected",
    Severity.WARNING: "Low: Minor inconvenience",
    Severity.INFO: "Minimal: Cosmetic or informational",
}

URGENCY: Dict[Severity, str] = {
    Severity.CRITICAL: "Immediate: Fix before deployment",
    Severity.ERROR: "High: Fix within current sprint",
    Severity.WARNING: "Medium: Plan for upcoming sprint",
    Severity.INFO: "Low: Address when convenient",
}

SECURITY_URGENCY = "Immediate: Security vulnerabilities should be fixed immediately"
