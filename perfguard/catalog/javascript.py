"""JavaScript and TypeScript anti-pattern rules."""

from __future__ import annotations

from perfguard.catalog.base import RuleSet, rule

JS_ASYNC = RuleSet(
    name="js_async",
    title="await inside loops",
    rules=(
        rule(
            r"for\s*\(.*await\s",
            "critical",
            "JS_AWAIT_IN_FOR",
            "await inside a for loop runs async operations sequentially",
            "Collect promises and use Promise.all(): await Promise.all(items.map(fn))",
        ),
        rule(
            r"for\s+.*of.*await\s",
            "critical",
            "JS_AWAIT_IN_FOR_OF",
            "await inside a for...of loop runs async operations sequentially",
            "Use Promise.all() with .map() for parallel execution",
        ),
        rule(
            r"\.forEach\(.*await\s",
            "critical",
            "JS_AWAIT_IN_FOREACH",
            "await inside forEach: forEach does not await promises, failures go silent",
            "Use for...of with await, or Promise.all() with .map()",
        ),
        rule(
            r"while\s*\(.*await\s",
            "high",
            "JS_AWAIT_IN_WHILE",
            "await inside a while loop serializes async work and may block for long",
            "Consider batching or a streaming approach instead of sequential awaits",
        ),
    ),
)

JS_PROMISE = RuleSet(
    name="js_promise",
    title="Missing Promise.all",
    rules=(
        rule(
            r"await\s+\w+\(.*\)\s*;[ \t]*\n[ \t]*await\s+\w+\(",
            "high",
            "JS_SEQUENTIAL_AWAIT",
            "Multiple sequential awaits that may be independent",
            "If operations are independent, use Promise.all([op1(), op2()])",
        ),
        rule(
            r"await\s+fetch\(.*\)\s*;[ \t]*\n[ \t]*await\s+fetch\(",
            "high",
            "JS_SEQUENTIAL_FETCH",
            "Multiple sequential fetch calls",
            "Fetch in parallel: await Promise.all([fetch(url1), fetch(url2)])",
        ),
    ),
)

JS_SYNC_IO = RuleSet(
    name="js_sync_io",
    title="Synchronous file I/O",
    rules=(
        rule(
            r"readFileSync\s*\(",
            "high",
            "JS_SYNC_READ",
            "readFileSync blocks the event loop and stalls concurrent requests",
            "Use fs.promises.readFile() or fs.readFile() with a callback",
        ),
        rule(
            r"writeFileSync\s*\(",
            "high",
            "JS_SYNC_WRITE",
            "writeFileSync blocks the event loop",
            "Use fs.promises.writeFile() or fs.writeFile() with a callback",
        ),
        rule(
            r"appendFileSync\s*\(",
            "high",
            "JS_SYNC_APPEND",
            "appendFileSync blocks the event loop",
            "Use fs.promises.appendFile() for non-blocking appends",
        ),
        rule(
            r"mkdirSync\s*\(",
            "medium",
            "JS_SYNC_MKDIR",
            "mkdirSync blocks the event loop",
            "Use fs.promises.mkdir() for non-blocking directory creation",
        ),
        rule(
            r"existsSync\s*\(",
            "medium",
            "JS_SYNC_EXISTS",
            "existsSync blocks the event loop",
            "Use fs.promises.access() or fs.promises.stat() for non-blocking checks",
        ),
        rule(
            r"readdirSync\s*\(",
            "medium",
            "JS_SYNC_READDIR",
            "readdirSync blocks the event loop",
            "Use fs.promises.readdir() for non-blocking directory listing",
        ),
    ),
)

JS_SERIALIZATION = RuleSet(
    name="js_serialization",
    title="Inefficient serialization",
    rules=(
        rule(
            r"JSON\.parse\s*\(\s*JSON\.stringify\s*\(",
            "medium",
            "JS_JSON_CLONE",
            "JSON.parse(JSON.stringify()) deep clone is slow and drops functions and dates",
            "Use structuredClone() or a dedicated clone helper",
        ),
        rule(
            r"JSON\.stringify\(.*\)\s*\.length",
            "medium",
            "JS_STRINGIFY_LENGTH",
            "Stringifying an entire object just to check its size",
            "Estimate size without serializing, e.g. with the object-sizeof package",
        ),
    ),
)

JS_ARRAY = RuleSet(
    name="js_array",
    title="Array pipeline misuse",
    rules=(
        rule(
            r"\.map\s*\(\s*async",
            "high",
            "JS_ASYNC_MAP_NO_AWAIT",
            "async callback in .map() creates promises that may never be awaited",
            "Wrap in Promise.all(): await Promise.all(items.map(async (item) => ...))",
        ),
        rule(
            r"\.filter\(.*\)\.map\(.*\)\.filter\(",
            "medium",
            "JS_CHAINED_ARRAY_OPS",
            "Chained array operations iterate the array several times",
            "Use .reduce() or a single loop to combine filter and map steps",
        ),
    ),
)

JS_MEMORY = RuleSet(
    name="js_memory",
    title="Memory leaks",
    rules=(
        rule(
            r"addEventListener\s*\(",
            "high",
            "JS_EVENT_NO_CLEANUP",
            "addEventListener without a matching removeEventListener may leak memory",
            "Keep the listener reference and call removeEventListener on cleanup",
        ),
        rule(
            r"setInterval\s*\(",
            "high",
            "JS_INTERVAL_NO_CLEAR",
            "setInterval without clearInterval runs indefinitely and leaks memory",
            "Store the interval id and call clearInterval(id) on cleanup",
        ),
        rule(
            r"new\s+EventEmitter",
            "medium",
            "JS_EMITTER_LEAK",
            "EventEmitter without setMaxListeners or removeListener may leak",
            "Call .setMaxListeners() and .removeListener() in cleanup paths",
        ),
    ),
)

JS_REACT = RuleSet(
    name="js_react",
    title="Bundle weight",
    rules=(
        rule(
            r'import\s+_\s+from\s+["\x27]lodash["\x27]',
            "high",
            "JS_LODASH_FULL",
            "Importing the entire lodash bundle instead of specific functions",
            'Import specific functions: import debounce from "lodash/debounce"',
        ),
        rule(
            r'import\s+\{.*\}\s+from\s+["\x27]lodash["\x27]',
            "high",
            "JS_LODASH_NAMED",
            "Named imports from lodash still pull the whole bundle without a babel plugin",
            'Use lodash-es or import from "lodash/functionName" for tree-shaking',
        ),
        rule(
            r"import\s+moment\s+from",
            "medium",
            "JS_MOMENT_IMPORT",
            "moment.js is large and mutable",
            "Use date-fns, dayjs, or native Intl APIs instead",
        ),
    ),
)

JS_PAGINATION = RuleSet(
    name="js_pagination",
    title="Missing pagination",
    rules=(
        rule(
            r"res\.json\s*\(\s*await.*\.find\(",
            "high",
            "JS_NO_PAGINATION",
            "API response returns all query results without pagination",
            "Add limit/offset or cursor pagination: .find().limit(20).skip(page*20)",
        ),
        rule(
            r"res\.send\s*\(\s*await.*\.findAll",
            "high",
            "JS_NO_PAGINATION_FINDALL",
            "API response returns findAll() without pagination",
            "Add limit and offset: .findAll({ limit: 20, offset: page * 20 })",
        ),
        rule(
            r"return.*\.find\(\s*\)",
            "high",
            "JS_RETURN_FIND_ALL",
            "Returning all documents without pagination",
            "Add pagination parameters: .find().limit(pageSize).skip(page * pageSize)",
        ),
    ),
)

JS_CONSOLE = RuleSet(
    name="js_console",
    title="Console output in production code",
    rules=(
        rule(
            r"console\.log\s*\(",
            "low",
            "JS_CONSOLE_LOG",
            "console.log left in code adds overhead and leaks information",
            "Remove console.log or use a structured logger with log levels",
        ),
        rule(
            r"console\.dir\s*\(",
            "low",
            "JS_CONSOLE_DIR",
            "console.dir serializes entire objects for output",
            "Remove console.dir or use a structured logger with levels",
        ),
        rule(
            r"console\.table\s*\(",
            "low",
            "JS_CONSOLE_TABLE",
            "console.table is expensive debug serialization",
            "Remove console.table or gate it behind a debug flag",
        ),
    ),
)

RULE_SETS = (
    JS_ASYNC,
    JS_PROMISE,
    JS_SYNC_IO,
    JS_SERIALIZATION,
    JS_ARRAY,
    JS_MEMORY,
    JS_REACT,
    JS_PAGINATION,
    JS_CONSOLE,
)
