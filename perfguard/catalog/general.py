"""Language-agnostic rules applied to every scanned file."""

from __future__ import annotations

from perfguard.catalog.base import RuleSet, rule

GEN_RETRY = RuleSet(
    name="gen_retry",
    title="Retry loops",
    rules=(
        rule(
            r"while\s*(true|True|\(true\)).*retry",
            "high",
            "GEN_UNBOUNDED_RETRY",
            "Unbounded retry loop without backoff can overwhelm downstream services",
            "Add exponential backoff with a maximum retry count",
        ),
        rule(
            r"retry.*while\s*(true|True)",
            "high",
            "GEN_RETRY_NO_BACKOFF",
            "Retry loop without exponential backoff",
            "Add exponential backoff and a maximum retry count",
        ),
        rule(
            r"for.*retry.*<\s*\d+",
            "medium",
            "GEN_RETRY_NO_DELAY",
            "Retry loop without a delay between attempts",
            "Add a delay with exponential backoff between attempts",
        ),
    ),
)

GEN_TIMEOUT = RuleSet(
    name="gen_timeout",
    title="Missing timeouts",
    rules=(
        rule(
            r"fetch\s*\([^)]*\)\s*$",
            "high",
            "GEN_FETCH_NO_TIMEOUT",
            "fetch() without a timeout can hang indefinitely",
            "Pass an AbortController signal with a timeout",
        ),
        rule(
            r"requests\.(get|post)\s*\([^)]*\)\s*$",
            "high",
            "GEN_REQUESTS_NO_TIMEOUT",
            "requests call without a timeout can block indefinitely",
            "Add a timeout parameter: requests.get(url, timeout=30)",
        ),
        rule(
            r"http\.request\s*\(",
            "high",
            "GEN_HTTP_NO_TIMEOUT",
            "HTTP request without an explicit timeout",
            "Set a timeout option: { timeout: 30000 } or use AbortController",
        ),
        rule(
            r"axios\s*\.\s*(get|post|put|delete)\s*\([^)]*\)\s*$",
            "medium",
            "GEN_AXIOS_NO_TIMEOUT",
            "axios call without an explicit timeout",
            "Configure a timeout: axios.get(url, { timeout: 30000 })",
        ),
        rule(
            r"HttpClient",
            "medium",
            "GEN_HTTPCLIENT_TIMEOUT_HINT",
            "HttpClient usage: connection and read timeouts should be configured",
            "Set connectTimeout and readTimeout on the HTTP client instance",
        ),
    ),
)

GEN_POLLING = RuleSet(
    name="gen_polling",
    title="Polling",
    rules=(
        rule(
            r"setInterval\s*\(.*fetch",
            "medium",
            "GEN_POLLING_FETCH",
            "Polling with setInterval+fetch wastes bandwidth and battery",
            "Use WebSockets, Server-Sent Events, or webhooks instead of polling",
        ),
        rule(
            r"while.*sleep.*request",
            "medium",
            "GEN_POLLING_SLEEP",
            "Sleep-based polling loop wastes resources while waiting",
            "Use webhooks, message queues, or pub/sub",
        ),
        rule(
            r"schedule\.every\s*\(\s*\d+\s*\)\s*\.seconds",
            "medium",
            "GEN_POLLING_SCHEDULE",
            "Frequent scheduled polling",
            "Use webhooks or message queues if the data source supports push",
        ),
    ),
)

GEN_DELAY = RuleSet(
    name="gen_delay",
    title="Hardcoded delays",
    rules=(
        rule(
            r"sleep\s*\(\s*\d+\s*\)",
            "low",
            "GEN_HARDCODED_SLEEP",
            "Hardcoded sleep may be too long or too short across environments",
            "Use configurable timeouts or event-based waiting instead of fixed delays",
        ),
        rule(
            r"setTimeout\s*\(.*,\s*\d{4,}\s*\)",
            "low",
            "GEN_LONG_TIMEOUT",
            "Long setTimeout (1s+) often hides polling or a race condition",
            "Use event listeners, promises, or MutationObserver instead",
        ),
        rule(
            r"Thread\.sleep\s*\(\s*\d+\s*\)",
            "low",
            "GEN_THREAD_SLEEP",
            "Thread.sleep() with a hardcoded delay",
            "Use a configurable delay or event-based waiting",
        ),
    ),
)

GEN_CACHE = RuleSet(
    name="gen_cache",
    title="Missing memoization",
    rules=(
        rule(
            r"def\s+fibonacci\s*\(",
            "medium",
            "GEN_RECURSIVE_NO_MEMO",
            "Recursive fibonacci without memoization has exponential time complexity",
            "Add @functools.lru_cache or manual memoization",
        ),
        rule(
            r"function\s+fibonacci\s*\(",
            "medium",
            "GEN_RECURSIVE_NO_MEMO_JS",
            "Recursive function without memoization",
            "Use a cache Map or a memoize helper for recursive functions",
        ),
        rule(
            r"def\s+factorial\s*\(",
            "medium",
            "GEN_RECURSIVE_FACTORIAL",
            "Recursive factorial without memoization",
            "Add the @functools.lru_cache decorator",
        ),
    ),
)

GEN_PAYLOAD = RuleSet(
    name="gen_payload",
    title="Large payload serialization",
    rules=(
        rule(
            r"JSON\.stringify\s*\(.*\)\s*$",
            "medium",
            "GEN_LARGE_STRINGIFY",
            "JSON.stringify on a potentially large object blocks the event loop",
            "Use streaming JSON serialization for large payloads",
        ),
        rule(
            r"json\.dumps\s*\(.*\)\s*$",
            "medium",
            "GEN_LARGE_JSON_DUMPS",
            "json.dumps on a potentially large object",
            "Use orjson or a streaming encoder for large data",
        ),
        rule(
            r"yaml\.dump\s*\(",
            "medium",
            "GEN_YAML_DUMP",
            "YAML serialization is very slow for large objects",
            "Use yaml.CSafeDumper or JSON for large payloads",
        ),
    ),
)

RULE_SETS = (
    GEN_RETRY,
    GEN_TIMEOUT,
    GEN_POLLING,
    GEN_DELAY,
    GEN_CACHE,
    GEN_PAYLOAD,
)
