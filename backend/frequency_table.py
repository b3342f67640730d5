import math
from collections import Counter


class FrequencyTable:
    """Insertion-ordered token -> count table that can be normalized once."""

    def __init__(self):
        self._counts = Counter()

    def increment(self, key, amount: float = 1.0):
        if not (0 < amount < math.inf):
            raise ValueError(f"increment amount must be positive and finite, got {amount}")
        self._counts[key] += amount

    def get(self, key) -> float:
        return float(self._counts.get(key, 0.0))

    def total(self) -> float:
        return float(sum(self._counts.values()))

    def distinct_count(self) -> int:
        return len(self._counts)

    def normalize(self):
        total = self.total()
        if total == 0:
            return
        for key in self._counts:
            self._counts[key] /= total

    def most_common(self, n=None):
        return self._counts.most_common(n)

    def keys(self):
        return self._counts.keys()

    def items(self):
        return self._counts.items()

    def __len__(self):
        return len(self._counts)

    def __contains__(self, key):
        return key in self._counts

    def __iter__(self):
        return iter(self._counts)

    def __repr__(self):
        return f"FrequencyTable({dict(self._counts)!r})"


class ConditionalFrequencyTable:
    """Two-level counter: context -> FrequencyTable over outcomes."""

    def __init__(self):
        self._tables = {}   # context -> FrequencyTable

    def increment(self, context, outcome, amount: float = 1.0):
        table = self._tables.get(context)
        if table is None:
            table = FrequencyTable()
            table.increment(outcome, amount)
            self._tables[context] = table
            return
        table.increment(outcome, amount)

    def get(self, context, outcome) -> float:
        table = self._tables.get(context)
        return 0.0 if table is None else table.get(outcome)

    def get_table(self, context) -> FrequencyTable:
        # unseen contexts get a detached empty table so lookups never insert
        table = self._tables.get(context)
        return FrequencyTable() if table is None else table

    def normalize_all(self):
        for table in self._tables.values():
            table.normalize()

    def contexts(self):
        return self._tables.keys()

    def items(self):
        return self._tables.items()

    def __len__(self):
        return len(self._tables)

    def __contains__(self, context):
        return context in self._tables
