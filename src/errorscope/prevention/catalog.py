"""Built-in prevention strategies, grouped by the category they prevent."""

from ..models import Category, PreventionStrategy

STRATEGIES: tuple[PreventionStrategy, ...] = (
    # Syntax
    PreventionStrategy(
        id="linter_setup",
        category=Category.SYNTAX,
        title="Run a linter in the editor and in CI",
        description="Catch syntax errors while typing and block them before merge",
        tools=("ruff", "ESLint"),
        steps=(
            "Install the linter for each language in the repository",
            "Commit a shared configuration file",
            "Enable editor integration",
            "Add a lint step to CI",
            "Run the linter from a pre-commit hook",
        ),
        tradeoffs="Adds a CI step and some initial configuration effort.",
        benefits=(
            "Catches errors before runtime",
            "Enforces code style",
            "Integrates with editors",
        ),
        config_example=(
            "# pyproject.toml\n"
            "[tool.ruff]\n"
            "line-length = 100\n"
            "\n"
            "[tool.ruff.lint]\n"
            'select = ["E", "F", "B"]\n'
        ),
    ),
    PreventionStrategy(
        id="formatter_setup",
        category=Category.SYNTAX,
        title="Format code automatically",
        description="Let a formatter own indentation and layout",
        tools=("black", "Prettier"),
        steps=(
            "Install the formatter",
            "Enable format-on-save",
            "Check formatting in CI",
        ),
        tradeoffs="Opinionated formatting may not match team preferences.",
        benefits=("Consistent code style", "Reduces code review friction"),
        config_example='// .prettierrc\n{\n  "semi": true,\n  "singleQuote": true\n}\n',
    ),
    PreventionStrategy(
        id="typescript_strict",
        category=Category.SYNTAX,
        title="Enable TypeScript strict mode",
        description="Use TypeScript with strict mode for compile-time error detection",
        tools=("TypeScript",),
        steps=(
            "Install TypeScript: npm install -D typescript",
            "Create tsconfig.json with strict: true",
            "Migrate JavaScript files to TypeScript",
            "Fix type errors as they appear",
            "Set up build pipeline",
            "Type-check in CI with tsc --noEmit",
        ),
        tradeoffs="Requires learning TypeScript. Initial migration effort. Longer build times.",
        benefits=("Compile-time type checking", "Better IDE support", "Self-documenting code"),
        config_example=(
            '// tsconfig.json\n{\n  "compilerOptions": {\n    "strict": true,\n'
            '    "noImplicitAny": true\n  }\n}\n'
        ),
    ),
    # Runtime
    PreventionStrategy(
        id="static_typing",
        category=Category.RUNTIME,
        title="Type-check Python code",
        description="Find None access and wrong-type calls before they run",
        tools=("mypy", "pyright"),
        steps=(
            "Add type hints to public functions",
            "Run mypy on the package in CI",
            "Tighten settings module by module",
        ),
        tradeoffs="Annotations take time to write; third-party stubs may be missing.",
        benefits=(
            "Prevents None-related attribute errors",
            "Documents interfaces",
            "Safer refactoring",
        ),
        config_example="# pyproject.toml\n[tool.mypy]\nstrict = true\n",
    ),
    PreventionStrategy(
        id="promise_handling",
        category=Category.RUNTIME,
        title="Standardize promise error handling",
        description="Make every promise chain end in error handling",
        tools=("ESLint", "eslint-plugin-promise"),
        steps=(
            "Install eslint-plugin-promise",
            "Enable promise/catch-or-return",
            "Add a global unhandledrejection handler",
            "Prefer async/await with try/catch",
        ),
        tradeoffs="More verbose code in every async call site.",
        benefits=("No silent failures", "Consistent error reporting"),
    ),
    PreventionStrategy(
        id="unit_tests",
        category=Category.RUNTIME,
        title="Cover error paths with tests",
        description="Test the failure branches, not only the happy path",
        tools=("pytest", "Jest"),
        steps=(
            "Write tests for empty, missing and malformed input",
            "Run the suite in CI",
            "Track coverage of exception branches",
        ),
        tradeoffs="Test maintenance cost grows with the codebase.",
        benefits=("Regressions caught early", "Executable documentation", "Safer refactoring"),
    ),
    # Security
    PreventionStrategy(
        id="security_audit",
        category=Category.SECURITY,
        title="Regular security audits",
        description="Scan code and dependencies for known vulnerabilities",
        tools=("bandit", "pip-audit", "npm audit"),
        steps=(
            "Run bandit on Python sources",
            "Run pip-audit / npm audit on dependencies",
            "Fail CI on high-severity findings",
            "Review results each release",
        ),
        tradeoffs="False positives need triage time.",
        benefits=("Known vulnerabilities caught", "Dependency hygiene", "Audit trail"),
    ),
    PreventionStrategy(
        id="parameterized_queries",
        category=Category.SECURITY,
        title="Use parameterized queries",
        description="Never build SQL from strings",
        tools=("DB-API placeholders", "SQLAlchemy", "Prepared statements"),
        steps=(
            "Find queries built with concatenation or f-strings",
            "Replace them with placeholders",
            "Add a lint rule that flags string-built SQL",
        ),
        tradeoffs="Dynamic queries (variable columns) need a query builder.",
        benefits=("Prevents SQL injection", "Query plans can be cached"),
        config_example='cursor.execute("SELECT * FROM users WHERE id = %s", (user_id,))\n',
    ),
    PreventionStrategy(
        id="secret_scanning",
        category=Category.SECURITY,
        title="Scan commits for secrets",
        description="Block credentials from entering version control",
        tools=("gitleaks", "git-secrets"),
        steps=(
            "Add .env to .gitignore",
            "Install a pre-commit secret scanner",
            "Scan history once and rotate anything found",
        ),
        tradeoffs="Scanners occasionally flag test fixtures.",
        benefits=("Credentials stay out of history", "Fast feedback for developers"),
    ),
    # Configuration
    PreventionStrategy(
        id="schema_validation",
        category=Category.CONFIGURATION,
        title="Validate configuration with schemas",
        description="Check configuration files against a schema in CI",
        tools=("JSON Schema", "check-jsonschema", "taplo"),
        steps=(
            "Pick or write a schema for each configuration file",
            "Validate in the editor",
            "Validate in CI",
            "Fail startup on invalid configuration",
        ),
        tradeoffs="Schemas must be kept in step with the tools they describe.",
        benefits=("Typos caught before deploy", "Editor completion", "Documented configuration"),
    ),
    PreventionStrategy(
        id="env_management",
        category=Category.CONFIGURATION,
        title="Proper environment variable management",
        description="Declare required variables and validate them at startup",
        tools=("python-dotenv", "envalid", "dotenv-safe"),
        steps=(
            "Commit a .env.example listing every variable",
            "Validate required variables at startup",
            "Keep real values out of the repository",
        ),
        tradeoffs="One more file to keep updated.",
        benefits=("Clear failure on missing variables", "Onboarding documentation", "No secrets in git"),
    ),
    # Performance
    PreventionStrategy(
        id="performance_monitoring",
        category=Category.PERFORMANCE,
        title="Set up performance monitoring",
        description="Measure latency and resource use continuously",
        tools=("py-spy", "Lighthouse", "APM tools"),
        steps=(
            "Define performance budgets",
            "Profile hot paths",
            "Track metrics per release",
            "Alert on regressions",
        ),
        tradeoffs="Monitoring adds overhead and cost.",
        benefits=("Regressions visible quickly", "Data-driven optimisation", "Capacity planning"),
    ),
    PreventionStrategy(
        id="async_io",
        category=Category.PERFORMANCE,
        title="Keep blocking I/O off hot paths",
        description="Use asynchronous APIs where requests share an event loop",
        tools=("fs.promises", "asyncio"),
        steps=(
            "List synchronous I/O calls in request handlers",
            "Replace them with asynchronous equivalents",
            "Lint for new synchronous calls",
        ),
        tradeoffs="Async code is harder to read and debug.",
        benefits=("Higher throughput", "Lower tail latency"),
    ),
    # Logical
    PreventionStrategy(
        id="code_review_checklist",
        category=Category.LOGICAL,
        title="Use a code review checklist",
        description="Check comparisons, boundaries and error paths in review",
        tools=("Pull request templates",),
        steps=(
            "Write a short checklist",
            "Add it to the pull request template",
            "Revisit it after incidents",
        ),
        tradeoffs="Checklists become noise if they grow too long.",
        benefits=("Shared review standard", "Fewer repeated mistakes"),
    ),
    PreventionStrategy(
        id="strict_comparisons",
        category=Category.LOGICAL,
        title="Enforce strict comparisons",
        description="Lint for loose equality and implicit coercion",
        tools=("ESLint (eqeqeq)",),
        steps=("Enable eqeqeq", "Fix existing violations"),
        tradeoffs="Some intentional null == undefined checks need rewriting.",
        benefits=("No coercion surprises",),
    ),
)
