from collections import defaultdict
from datetime import datetime, timedelta
from uuid import uuid4
import pytz

class FakeDatabase:
    """In-memory stand-in for app.database.Database"""

    def __init__(self):
        self.tables = defaultdict(list)
        self.failures = {}
        self.calls = []
        self._clock = datetime(2025, 1, 1, tzinfo=pytz.UTC)

    def fail(self, method: str, table: str, error: Exception):
        self.failures[(method, table)] = error

    def _check(self, method, table):
        self.calls.append((method, table))
        error = self.failures.get((method, table))
        if error:
            raise error

    def _timestamp(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    @staticmethod
    def _matches(row, filters=None, in_filters=None):
        for key, value in (filters or {}).items():
            if row.get(key) != value:
                return False
        for key, values in (in_filters or {}).items():
            if row.get(key) not in set(values):
                return False
        return True

    def _add(self, table, data):
        row = {"id": str(uuid4()), "created_at": self._timestamp(), **data}
        self.tables[table].append(row)
        return dict(row)

    def insert(self, table, data):
        self._check("insert", table)
        return self._add(table, data)

    def insert_many(self, table, rows):
        self._check("insert_many", table)
        return [self._add(table, row) for row in rows]

    def select(self, table, columns="*", filters=None, limit=None, order_by=None, desc=False, in_filters=None):
        self._check("select", table)
        rows = [dict(r) for r in self.tables[table] if self._matches(r, filters, in_filters)]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or "", reverse=desc)
        if limit:
            rows = rows[:limit]
        return rows

    def count(self, table, filters=None):
        self._check("count", table)
        return len([r for r in self.tables[table] if self._matches(r, filters)])

    def update(self, table, data, filters):
        self._check("update", table)
        updated = []
        for row in self.tables[table]:
            if self._matches(row, filters):
                row.update(data)
                updated.append(dict(row))
        return updated[0] if updated else None

    def upsert(self, table, data, on_conflict=""):
        self._check("upsert", table)
        keys = [k for k in on_conflict.split(",") if k] or ["id"]
        result = []
        for item in (data if isinstance(data, list) else [data]):
            existing = next(
                (r for r in self.tables[table] if all(r.get(k) == item.get(k) for k in keys)),
                None,
            )
            if existing:
                existing.update(item)
                result.append(dict(existing))
            else:
                result.append(self._add(table, item))
        return result

    def delete(self, table, filters):
        self._check("delete", table)
        removed = [r for r in self.tables[table] if self._matches(r, filters)]
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, filters)]
        return removed

    def seed_question(self, options=None, **fields):
        """Insert a question and its options; returns the question row with 'options'"""
        question = self._add("questions", {
            "class": 7,
            "subject": "Science",
            "chapter": "Light",
            "topic": None,
            "subtopic": None,
            "question_text": "Which of these is a source of light?",
            "question_image_url": None,
            "is_active": True,
            **fields,
        })
        options = options or [("The Sun", True), ("The Moon", False)]
        question["options"] = [
            self._add("question_options", {
                "question_id": question["id"],
                "option_text": text,
                "option_image_url": None,
                "is_correct": is_correct,
                "option_order": order,
            })
            for order, (text, is_correct) in enumerate(options, start=1)
        ]
        return question

