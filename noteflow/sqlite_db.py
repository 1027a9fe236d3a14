"""
SQLite-backed JSON document store.

Each collection (users, notes, notebooks, tags, tasks, scratchPads) is one
table of ``(_id, data)`` rows where ``data`` is the document as JSON.
Routers query it with small Mongo-style dicts:

    db = get_database()
    cursor = db.notes.find({"userId": uid, "tagIds": {"$all": [tag_id]}})
    notes = await cursor.sort("updatedAt", -1).limit(20).to_list()

Supported query keys:
  - ``field: value``          equality (``None`` also matches a missing field)
  - ``field: {"$in": [...]}``  membership
  - ``field: {"$all": [...]}`` array field contains every value
  - ``field: {"$search": s}``  case-insensitive literal substring
  - ``"$or": [q1, q2, ...]``
Supported update operators: ``$set`` and ``$pull``.
"""

import json
import logging
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import aiosqlite

logger = logging.getLogger(__name__)

# Stored as ISO strings, handed back as datetime
_DATE_FIELDS = ("createdAt", "updatedAt", "trashedAt", "dueDate")

SortSpec = Union[str, Sequence[Tuple[str, int]]]


def new_id() -> str:
    """Generate a new document identifier."""
    return str(uuid.uuid4())


def _plain(value: Any) -> Any:
    """Convert datetimes (at any depth) to ISO strings for JSON."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_plain(v) for v in value]
    return value


def _dump(doc: Dict[str, Any]) -> str:
    return json.dumps(_plain(doc))


def _load(_id: str, data: str) -> Dict[str, Any]:
    doc = json.loads(data)
    for key in _DATE_FIELDS:
        value = doc.get(key)
        if isinstance(value, str):
            try:
                doc[key] = datetime.fromisoformat(value)
            except ValueError:
                logger.debug(f"Unparseable {key} on {_id}: {value!r}")
    doc["_id"] = _id
    return doc


# ============================================================
# Query compilation
# ============================================================

def _path(field: str) -> str:
    """JSON path for a field. Anything outside [A-Za-z0-9_.-] is dropped."""
    return "$." + re.sub(r"[^A-Za-z0-9_.\-]", "", field)


def _column(field: str) -> str:
    if field == "_id":
        return "_id"
    return f"json_extract(data, '{_path(field)}')"


def _sql_value(value: Any) -> Any:
    # json_extract yields 1/0 for JSON booleans
    if isinstance(value, bool):
        return int(value)
    return _plain(value)


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _op_in(field: str, values: Sequence[Any]) -> Tuple[str, List[Any]]:
    if not values:
        return "0", []
    marks = ",".join("?" * len(values))
    return f"{_column(field)} IN ({marks})", [_sql_value(v) for v in values]


def _op_all(field: str, values: Sequence[Any]) -> Tuple[str, List[Any]]:
    if not values:
        return "1", []
    member = f"EXISTS (SELECT 1 FROM json_each(data, '{_path(field)}') WHERE json_each.value = ?)"
    return " AND ".join([member] * len(values)), [_sql_value(v) for v in values]


def _op_search(field: str, text: str) -> Tuple[str, List[Any]]:
    return f"{_column(field)} LIKE ? ESCAPE '\\'", [f"%{_escape_like(str(text))}%"]


_OPERATORS: Dict[str, Callable[[str, Any], Tuple[str, List[Any]]]] = {
    "$in": _op_in,
    "$all": _op_all,
    "$search": _op_search,
}


def _compile(query: Optional[Dict[str, Any]]) -> Tuple[str, List[Any]]:
    """Translate a query dict into a WHERE expression and its parameters."""
    if not query:
        return "1", []

    clauses: List[str] = []
    params: List[Any] = []

    for field, condition in query.items():
        if field == "$or":
            parts = []
            for sub in condition:
                sql, sub_params = _compile(sub)
                parts.append(f"({sql})")
                params.extend(sub_params)
            clauses.append("(" + " OR ".join(parts) + ")" if parts else "0")
        elif isinstance(condition, dict):
            for op, operand in condition.items():
                if op not in _OPERATORS:
                    raise ValueError(f"Unsupported query operator: {op}")
                sql, op_params = _OPERATORS[op](field, operand)
                clauses.append(sql)
                params.extend(op_params)
        elif condition is None:
            clauses.append(f"{_column(field)} IS NULL")
        else:
            clauses.append(f"{_column(field)} = ?")
            params.append(_sql_value(condition))

    return " AND ".join(clauses), params


def _order_by(order: Optional[SortSpec]) -> str:
    if not order:
        return ""
    if isinstance(order, str):
        order = [(order, 1)]
    keys = [f"{_column(field)} {'DESC' if direction == -1 else 'ASC'}" for field, direction in order]
    return " ORDER BY " + ", ".join(keys)


# ============================================================
# Updates
# ============================================================

def _apply_update(doc: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Apply ``$set`` / ``$pull`` to a document in place and return it."""
    for op, fields in update.items():
        if op == "$set":
            doc.update(fields)
        elif op == "$pull":
            for field, value in fields.items():
                items = doc.get(field)
                if isinstance(items, list):
                    doc[field] = [item for item in items if item != value]
        else:
            raise ValueError(f"Unsupported update operator: {op}")
    return doc


# ============================================================
# Cursor
# ============================================================

class SQLiteCursor:
    """Lazy query result with chainable sort/skip/limit."""

    def __init__(self, collection: "SQLiteCollection", query: Dict[str, Any]):
        self._collection = collection
        self._query = query
        self._sort: Optional[SortSpec] = None
        self._skip = 0
        self._limit = 0

    def sort(self, key: SortSpec, direction: Optional[int] = None) -> "SQLiteCursor":
        self._sort = [(key, direction)] if direction is not None else key
        return self

    def skip(self, count: int) -> "SQLiteCursor":
        self._skip = int(count)
        return self

    def limit(self, count: int) -> "SQLiteCursor":
        self._limit = int(count)
        return self

    async def to_list(self) -> List[Dict[str, Any]]:
        suffix = _order_by(self._sort)
        if self._limit or self._skip:
            suffix += f" LIMIT {self._limit or -1} OFFSET {self._skip}"
        return await self._collection._select(self._query, suffix)

    async def __aiter__(self):
        for doc in await self.to_list():
            yield doc


# ============================================================
# Collection
# ============================================================

class InsertOneResult:
    def __init__(self, inserted_id: str):
        self.inserted_id = inserted_id


class UpdateResult:
    def __init__(self, matched_count: int, upserted_id: Optional[str] = None):
        self.matched_count = matched_count
        self.modified_count = matched_count
        self.upserted_id = upserted_id


class DeleteResult:
    def __init__(self, deleted_count: int):
        self.deleted_count = deleted_count


class SQLiteCollection:
    """One table of JSON documents."""

    def __init__(self, db: "SQLiteDatabase", name: str):
        self._db = db
        self.name = name
        self._table_ready = False

    async def _ensure_table(self) -> None:
        if self._table_ready:
            return
        await self._db.execute(
            f"CREATE TABLE IF NOT EXISTS [{self.name}] (_id TEXT PRIMARY KEY, data TEXT NOT NULL)"
        )
        self._table_ready = True

    async def _select(self, query: Optional[Dict[str, Any]], suffix: str = "") -> List[Dict[str, Any]]:
        await self._ensure_table()
        where, params = _compile(query)
        sql = f"SELECT _id, data FROM [{self.name}] WHERE {where}{suffix}"
        async with self._db.connection.execute(sql, params) as cursor:
            return [_load(row[0], row[1]) async for row in cursor]

    async def _write(self, _id: str, doc: Dict[str, Any]) -> None:
        body = {k: v for k, v in doc.items() if k != "_id"}
        await self._db.execute(
            f"UPDATE [{self.name}] SET data = ? WHERE _id = ?", (_dump(body), _id)
        )

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------
    def find(self, query: Optional[Dict[str, Any]] = None) -> SQLiteCursor:
        return SQLiteCursor(self, query or {})

    async def find_one(self, query: Optional[Dict[str, Any]] = None,
                       sort: Optional[SortSpec] = None) -> Optional[Dict[str, Any]]:
        docs = await self._select(query, _order_by(sort) + " LIMIT 1")
        return docs[0] if docs else None

    async def count_documents(self, query: Optional[Dict[str, Any]] = None) -> int:
        await self._ensure_table()
        where, params = _compile(query)
        sql = f"SELECT COUNT(*) FROM [{self.name}] WHERE {where}"
        async with self._db.connection.execute(sql, params) as cursor:
            row = await cursor.fetchone()
        return row[0]

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------
    async def insert_one(self, document: Dict[str, Any]) -> InsertOneResult:
        await self._ensure_table()
        body = dict(document)
        _id = str(body.pop("_id", None) or new_id())
        await self._db.execute(
            f"INSERT INTO [{self.name}] (_id, data) VALUES (?, ?)", (_id, _dump(body))
        )
        return InsertOneResult(_id)

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any],
                         upsert: bool = False) -> UpdateResult:
        doc = await self.find_one(query)
        if doc is not None:
            await self._write(doc["_id"], _apply_update(doc, update))
            return UpdateResult(1)
        if not upsert:
            return UpdateResult(0)
        # Plain equality fields of the query seed the new document
        seed = {k: v for k, v in query.items() if not k.startswith("$") and not isinstance(v, dict)}
        result = await self.insert_one(_apply_update(seed, update))
        return UpdateResult(0, upserted_id=result.inserted_id)

    async def update_many(self, query: Dict[str, Any], update: Dict[str, Any]) -> UpdateResult:
        docs = await self._select(query)
        for doc in docs:
            await self._write(doc["_id"], _apply_update(doc, update))
        return UpdateResult(len(docs))

    async def find_one_and_update(self, query: Dict[str, Any], update: Dict[str, Any],
                                  return_document: bool = False) -> Optional[Dict[str, Any]]:
        """Update the first match.

        Returns:
            The document after the update when ``return_document`` is True,
            otherwise as it was before. None if nothing matched.
        """
        doc = await self.find_one(query)
        if doc is None:
            return None
        before = dict(doc)
        _id = doc["_id"]
        await self._write(_id, _apply_update(doc, update))
        if not return_document:
            return before
        # Reload so timestamps come back as datetime
        return await self.find_one({"_id": _id})

    async def delete_one(self, query: Dict[str, Any]) -> DeleteResult:
        doc = await self.find_one(query)
        if doc is None:
            return DeleteResult(0)
        await self._db.execute(f"DELETE FROM [{self.name}] WHERE _id = ?", (doc["_id"],))
        return DeleteResult(1)

    async def delete_many(self, query: Dict[str, Any]) -> DeleteResult:
        await self._ensure_table()
        where, params = _compile(query)
        count = await self._db.execute(f"DELETE FROM [{self.name}] WHERE {where}", params)
        return DeleteResult(count)


# ============================================================
# Database
# ============================================================

class SQLiteDatabase:
    """A single SQLite file; collections are reached as attributes (db.notes)."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None
        self._collections: Dict[str, SQLiteCollection] = {}

    async def connect(self) -> None:
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self._db_path, timeout=30.0)
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA busy_timeout=5000")
        logger.info(f"SQLite database opened: {self._db_path}")

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite database closed")

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._conn

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement, commit, and return the affected row count."""
        cursor = await self.connection.execute(sql, params)
        await self.connection.commit()
        return cursor.rowcount

    async def ping(self) -> bool:
        await self.connection.execute("SELECT 1")
        return True

    def collection(self, name: str) -> SQLiteCollection:
        if name not in self._collections:
            self._collections[name] = SQLiteCollection(self, name)
        return self._collections[name]

    def __getattr__(self, name: str) -> SQLiteCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.collection(name)
