"""Database and ORM anti-pattern rules shared by every backend stack."""

from __future__ import annotations

from perfguard.catalog.base import RuleSet, rule

DB_NPLUS1 = RuleSet(
    name="db_nplus1",
    title="N+1 query detection",
    rules=(
        rule(
            r"for\s+.*\bin\b.*\.all\(\)",
            "critical",
            "DB_NPLUS1_LOOP_QUERY",
            "N+1 query: iterating over a queryset inside a loop triggers a query per iteration",
            "Use select_related() or prefetch_related() to eager-load related objects",
        ),
        rule(
            r"for\s+.*\bin\b.*\.objects\.",
            "critical",
            "DB_NPLUS1_OBJECTS",
            "N+1 query: Django ORM query inside a loop hits the database per iteration",
            "Fetch all needed data in a single queryset with select_related/prefetch_related",
        ),
        rule(
            r"for\s+.*\bin\b.*\.query\(",
            "critical",
            "DB_NPLUS1_RAW_QUERY",
            "N+1 query: raw query executed inside a loop",
            "Batch queries outside the loop or use a single JOIN query",
        ),
        rule(
            r"\.each\s*do.*\.find\(",
            "critical",
            "DB_NPLUS1_RAILS_FIND",
            "N+1 query: Rails .find() inside an .each loop",
            "Use .includes() or .eager_load() to preload associations",
        ),
        rule(
            r"\.each\s*do.*\.where\(",
            "critical",
            "DB_NPLUS1_RAILS_WHERE",
            "N+1 query: Rails .where() inside an .each loop",
            "Batch the query outside the loop using .includes() or .pluck()",
        ),
        rule(
            r"\.forEach.*await.*find",
            "critical",
            "DB_NPLUS1_JS_FOREACH",
            "N+1 query: await find/query inside a forEach loop",
            "Collect IDs and use a single query with $in or WHERE IN",
        ),
        rule(
            r"for\s*\(.*await.*\.find",
            "critical",
            "DB_NPLUS1_JS_FOR",
            "N+1 query: await database call inside a for loop",
            "Use Promise.all() with batched queries or a single bulk query",
        ),
        rule(
            r"for\s*\(.*\.execute\(",
            "critical",
            "DB_NPLUS1_EXECUTE",
            "N+1 query: execute() called inside a for loop",
            "Batch queries or use executemany() for bulk operations",
        ),
    ),
)

DB_SELECT_STAR = RuleSet(
    name="db_select_star",
    title="SELECT * and fetch-everything calls",
    rules=(
        rule(
            r"SELECT\s+\*\s+FROM",
            "high",
            "DB_SELECT_STAR",
            "SELECT * fetches all columns and wastes bandwidth and memory",
            "Select only the columns you need: SELECT col1, col2 FROM table",
        ),
        rule(
            r"\.all\(\)\s*$",
            "high",
            "DB_ORM_ALL",
            "Fetching all records without filtering or limiting",
            "Add .filter(), .limit(), or select specific fields with .values()/only()",
        ),
        rule(
            r"Model\.find\(\s*\)",
            "high",
            "DB_FIND_ALL",
            "Fetching all records without conditions",
            "Add conditions: Model.find({ where: { ... } }) or use pagination",
        ),
        rule(
            r"findAll\(\s*\)",
            "high",
            "DB_FINDALL_NO_FILTER",
            "findAll() without filters retrieves the entire table",
            "Add a where clause and limit: findAll({ where: {...}, limit: 100 })",
        ),
    ),
)

DB_EAGER_LOADING = RuleSet(
    name="db_eager_loading",
    title="Missing eager loading",
    rules=(
        rule(
            r"\.objects\.filter\(.*__.*\)",
            "critical",
            "DB_DJANGO_NO_SELECT_RELATED",
            "Django queryset traverses a relation without select_related(), causing N+1",
            "Add .select_related() or .prefetch_related() for related object lookups",
        ),
        rule(
            r"ForeignKey\(",
            "medium",
            "DB_DJANGO_FK_HINT",
            "ForeignKey detected: related querysets should use select_related()",
            'Use .select_related("field") when accessing this ForeignKey in queries',
        ),
        rule(
            r"has_many\s",
            "medium",
            "DB_RAILS_HAS_MANY_HINT",
            "Rails has_many association: queries should use .includes()",
            "Use .includes(:association) when loading related records in bulk",
        ),
        rule(
            r"belongs_to\s",
            "medium",
            "DB_RAILS_BELONGS_TO_HINT",
            "Rails belongs_to association: queries should use .includes()",
            "Use .includes(:association) to prevent N+1 on parent lookups",
        ),
        rule(
            r"@ManyToOne",
            "medium",
            "DB_JPA_MANY_TO_ONE",
            "JPA @ManyToOne without a fetch strategy defaults to EAGER loading",
            "Set fetch = FetchType.LAZY and use JOIN FETCH in JPQL when needed",
        ),
        rule(
            r"@OneToMany",
            "medium",
            "DB_JPA_ONE_TO_MANY",
            "JPA @OneToMany without @BatchSize risks N+1 on collection access",
            "Add @BatchSize(size=25) or use JOIN FETCH in your JPQL query",
        ),
        rule(
            r"createQueryBuilder\(",
            "medium",
            "DB_TYPEORM_QB_HINT",
            "TypeORM QueryBuilder: related entities should be joined",
            "Use .leftJoinAndSelect() to eager-load relations in a single query",
        ),
    ),
)

DB_UNBOUNDED = RuleSet(
    name="db_unbounded",
    title="Unbounded queries",
    rules=(
        rule(
            r"SELECT\b.*\bFROM\b(?!.*\bLIMIT\b)",
            "high",
            "DB_UNBOUNDED_SELECT",
            "SQL query without a LIMIT clause may return millions of rows",
            "Add a LIMIT clause: SELECT ... FROM table LIMIT 100",
        ),
        rule(
            r"\.find\(\{[^}]*\}\)\s*$",
            "high",
            "DB_UNBOUNDED_FIND",
            "Database find() without a limit may return the entire collection",
            "Add .limit() or pagination: .find({}).limit(100).skip(offset)",
        ),
        rule(
            r"\.objects\.all\(\)\s*$",
            "high",
            "DB_DJANGO_UNBOUNDED",
            "Django queryset .all() without slicing or limit",
            "Use slicing [:100] or .iterator() for large querysets",
        ),
        rule(
            r"\.fetchall\(\)",
            "high",
            "DB_FETCHALL",
            "fetchall() loads the entire result set into memory",
            "Use fetchmany(size) or iterate with fetchone() for large results",
        ),
        rule(
            r"\.to_list\(\)",
            "high",
            "DB_MONGO_TO_LIST",
            "MongoDB .to_list() loads the entire cursor into memory",
            "Use async for to iterate, or pass a length limit to to_list()",
        ),
    ),
)

DB_SQL_CONCAT = RuleSet(
    name="db_sql_concat",
    title="SQL built by string interpolation",
    rules=(
        rule(
            r'\+\s*["\x27].*SELECT',
            "critical",
            "DB_SQL_CONCAT_SELECT",
            "String concatenation in a SQL query risks injection and defeats plan caching",
            'Use parameterized queries: cursor.execute("SELECT ... WHERE id = %s", (id,))',
        ),
        rule(
            r'f["\x27].*SELECT.*FROM',
            "critical",
            "DB_SQL_FSTRING",
            "Python f-string in SQL prevents plan caching and risks injection",
            "Use parameterized queries instead of f-strings in SQL",
        ),
        rule(
            r"\$\{.*\}.*SELECT",
            "critical",
            "DB_SQL_TEMPLATE_LIT",
            "Template literal in a SQL query prevents plan caching",
            'Use parameterized queries: db.query("SELECT ... WHERE id = $1", [id])',
        ),
        rule(
            r"\.format\(.*SELECT",
            "critical",
            "DB_SQL_FORMAT",
            "String .format() in a SQL query prevents plan caching",
            "Use parameterized queries instead of .format() for SQL",
        ),
        rule(
            r'\.raw\s*\(\s*f["\x27]',
            "critical",
            "DB_ORM_RAW_FSTRING",
            "ORM raw() with f-string interpolation",
            'Use parameterized raw queries: Model.objects.raw("... WHERE id = %s", [id])',
        ),
    ),
)

DB_SEQUENTIAL = RuleSet(
    name="db_sequential",
    title="Sequential, unbatched writes",
    rules=(
        rule(
            r"\.save\(\).*\n.*\.save\(\)",
            "medium",
            "DB_SEQUENTIAL_SAVES",
            "Multiple sequential .save() calls each trigger a database round-trip",
            "Use bulk_create(), bulk_update(), or a transaction for batch operations",
        ),
        rule(
            r"INSERT INTO.*\n.*INSERT INTO",
            "medium",
            "DB_SEQUENTIAL_INSERTS",
            "Multiple sequential INSERT statements",
            "Use a single INSERT with multiple VALUES or a bulk insert API",
        ),
        rule(
            r"UPDATE.*\n.*UPDATE.*SET",
            "medium",
            "DB_SEQUENTIAL_UPDATES",
            "Multiple sequential UPDATE statements",
            "Combine into a single UPDATE or use bulk update operations",
        ),
    ),
)

RULE_SETS = (
    DB_NPLUS1,
    DB_SELECT_STAR,
    DB_EAGER_LOADING,
    DB_UNBOUNDED,
    DB_SQL_CONCAT,
    DB_SEQUENTIAL,
)
