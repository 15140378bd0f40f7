"""Python anti-pattern rules."""

from __future__ import annotations

from perfguard.catalog.base import RuleSet, rule

PY_IMPORT = RuleSet(
    name="py_import",
    title="Import placement",
    rules=(
        rule(
            r"def\s+\w+\(.*\):[ \t]*\n[ \t]+import\s+"
            r"(pandas|numpy|tensorflow|torch|scipy|sklearn|matplotlib)",
            "medium",
            "PY_HEAVY_IMPORT_IN_FUNC",
            "Heavy module imported inside a function body",
            "Move heavy imports (pandas, numpy, ...) to module level",
        ),
        rule(
            r"import\s+\*\s+from",
            "medium",
            "PY_WILDCARD_IMPORT",
            "Wildcard import pulls an entire module namespace into scope",
            "Import only what you need: from module import specific_function",
        ),
    ),
)

PY_STRING = RuleSet(
    name="py_string",
    title="String building in loops",
    rules=(
        rule(
            r'for\s+.*:[ \t]*\n[ \t]+\w+\s*\+=\s*["\x27]',
            "medium",
            "PY_STRING_CONCAT_LOOP",
            "String concatenation with += in a loop is O(n^2)",
            'Collect strings in a list and use "".join(parts) after the loop',
        ),
        rule(
            r'for\s+.*:[ \t]*\n[ \t]+\w+\s*=\s*\w+\s*\+\s*["\x27]',
            "medium",
            "PY_STRING_PLUS_LOOP",
            "String + concatenation in a loop creates a new string each iteration",
            'Use list append and "".join() for linear-time string building',
        ),
    ),
)

PY_GENERATOR = RuleSet(
    name="py_generator",
    title="Eager materialization",
    rules=(
        rule(
            r"\[\s*\w+\s+for\s+\w+\s+in\s+range\s*\(\s*\d{5,}",
            "medium",
            "PY_LARGE_LIST_COMP",
            "Large list comprehension (100K+ items) consumes excessive memory",
            "Use a generator expression or process the range in chunks",
        ),
        rule(
            r"\.readlines\(\)",
            "medium",
            "PY_READLINES",
            ".readlines() loads the entire file into memory as a list",
            "Iterate the file object directly: for line in file:",
        ),
        rule(
            r"\.read\(\)\s*$",
            "medium",
            "PY_READ_WHOLE_FILE",
            ".read() loads the entire file contents into memory",
            'Read in chunks: for chunk in iter(lambda: f.read(8192), b"")',
        ),
    ),
)

PY_ASYNC = RuleSet(
    name="py_async",
    title="Blocking calls in async code",
    rules=(
        rule(
            r"time\.sleep\s*\(",
            "critical",
            "PY_SLEEP_IN_ASYNC",
            "time.sleep() blocks the event loop in async code",
            "Use await asyncio.sleep() instead of time.sleep() in async functions",
        ),
        rule(
            r"requests\.(get|post|put|delete|patch)\s*\(",
            "high",
            "PY_SYNC_HTTP_IN_ASYNC",
            "Synchronous requests call blocks the event loop when used from async code",
            "Use aiohttp or httpx.AsyncClient for non-blocking HTTP",
        ),
        rule(
            r"open\s*\(.*\)\s*as\s",
            "high",
            "PY_SYNC_FILE_IN_ASYNC",
            "Synchronous file I/O blocks the event loop in async context",
            "Use aiofiles: async with aiofiles.open() as f:",
        ),
        rule(
            r"subprocess\.(run|call|check_output)\s*\(",
            "high",
            "PY_SYNC_SUBPROCESS",
            "Synchronous subprocess call blocks the event loop",
            "Use asyncio.create_subprocess_exec() or asyncio.create_subprocess_shell()",
        ),
    ),
)

PY_CONNECTION = RuleSet(
    name="py_connection",
    title="Connection pooling",
    rules=(
        rule(
            r"psycopg2\.connect\s*\(",
            "high",
            "PY_NO_CONN_POOL_PG",
            "Direct psycopg2 connection without pooling",
            "Use psycopg2.pool.ThreadedConnectionPool or a SQLAlchemy engine pool",
        ),
        rule(
            r"pymysql\.connect\s*\(",
            "high",
            "PY_NO_CONN_POOL_MYSQL",
            "Direct pymysql connection without pooling",
            "Use a connection pool: SQLAlchemy create_engine() or DBUtils.PooledDB",
        ),
        rule(
            r"sqlite3\.connect\s*\(",
            "medium",
            "PY_SQLITE_DIRECT",
            "Direct sqlite3 connection without pooling or WAL mode",
            "Use SQLAlchemy for connection management or enable WAL mode",
        ),
        rule(
            r"MongoClient\s*\(",
            "medium",
            "PY_MONGO_NO_POOL_HINT",
            "MongoClient created: maxPoolSize should be configured",
            "Set maxPoolSize: MongoClient(uri, maxPoolSize=50)",
        ),
    ),
)

PY_REGEX = RuleSet(
    name="py_regex",
    title="Regex compilation in loops",
    rules=(
        rule(
            r"for\s+.*:[ \t]*\n[ \t]+.*re\.(search|match|findall|sub)\s*\(",
            "medium",
            "PY_REGEX_IN_LOOP",
            "Module-level regex call inside a loop recompiles or re-looks-up the pattern",
            "Compile outside the loop: pattern = re.compile(...) then pattern.search()",
        ),
        rule(
            r"for\s+.*:[ \t]*\n[ \t]+.*re\.compile\s*\(",
            "medium",
            "PY_RECOMPILE_IN_LOOP",
            "re.compile() inside a loop compiles the same pattern repeatedly",
            "Move re.compile() before the loop and reuse the compiled pattern",
        ),
    ),
)

RULE_SETS = (
    PY_IMPORT,
    PY_STRING,
    PY_GENERATOR,
    PY_ASYNC,
    PY_CONNECTION,
    PY_REGEX,
)
