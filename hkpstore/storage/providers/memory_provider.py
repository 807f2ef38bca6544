import copy, re, threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from hkpstore.errors import BackendError, UniquenessViolation
from hkpstore.storage.provider import CollectionHandle, StorageProvider


def _matches_value(value: Any, pred) -> bool:
    # arrays match if any element does, like MongoDB
    if isinstance(value, list):
        return any(pred(v) for v in value)
    return pred(value)


def _matches_field(value: Any, cond: Any) -> bool:
    if not isinstance(cond, dict):
        return _matches_value(value, lambda v: v == cond)

    for op, arg in cond.items():
        if op == "$in":
            ok = _matches_value(value, lambda v: v in arg)
        elif op == "$gt":
            ok = value is not None and _matches_value(value, lambda v: v > arg)
        elif op == "$regex":
            pattern = re.compile(arg)
            ok = _matches_value(value, lambda v: isinstance(v, str) and pattern.search(v) is not None)
        else:
            raise BackendError(f"unsupported query operator {op}")
        if not ok:
            return False
    return True


def matches(doc: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    for key, cond in filter.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in cond):
                return False
        elif not _matches_field(doc.get(key), cond):
            return False
    return True


class _MemoryCollection(CollectionHandle):
    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.indexes: Dict[str, Dict[str, bool]] = {}
        self.lock = threading.RLock()

    def _unique_clash(self, doc: Dict[str, Any], skip: Optional[Dict[str, Any]] = None) -> Optional[str]:
        for field, opts in self.indexes.items():
            if not opts["unique"]:
                continue
            for other in self.docs:
                if other is not skip and other.get(field) == doc.get(field):
                    return field
        return None

    def ensure_index(self, field: str, unique: bool = False, background: bool = False) -> None:
        with self.lock:
            if unique:
                seen = set()
                for doc in self.docs:
                    value = doc.get(field)
                    if value in seen:
                        raise BackendError(f"cannot build unique index on {field}: duplicate {value!r}")
                    seen.add(value)
            self.indexes[field] = {"unique": unique, "background": background}

    def find(self, filter: Dict[str, Any], limit: int = 0) -> Iterator[Dict[str, Any]]:
        with self.lock:
            found = [copy.deepcopy(d) for d in self.docs if matches(d, filter)]
        if limit:
            found = found[:limit]
        return iter(found)

    def insert(self, doc: Dict[str, Any]) -> None:
        with self.lock:
            clash = self._unique_clash(doc)
            if clash:
                raise UniquenessViolation(f"duplicate {clash}: {doc.get(clash)!r}")
            self.docs.append(copy.deepcopy(doc))

    def find_and_modify(self, filter: Dict[str, Any], update: Dict[str, Any]) -> Tuple[int, Optional[Dict[str, Any]]]:
        with self.lock:
            target = next((d for d in self.docs if matches(d, filter)), None)
            if target is None:
                return 0, None
            changed = dict(target)
            changed.update(copy.deepcopy(update.get("$set", {})))
            clash = self._unique_clash(changed, skip=target)
            if clash:
                raise UniquenessViolation(f"duplicate {clash}: {changed.get(clash)!r}")
            target.update(changed)
            return 1, copy.deepcopy(target)


class InMemoryStorage(StorageProvider):
    """Process-local provider; collections live as long as the provider."""

    name = "memory"

    def __init__(self, db_name: str = "hkp", collection: str = "keys"):
        self.db_name = db_name
        self.collection_name = collection
        self._collection = _MemoryCollection()
        self.sessions_open = 0

    @contextmanager
    def session(self):
        with self._collection.lock:
            self.sessions_open += 1
        try:
            yield self._collection
        finally:
            with self._collection.lock:
                self.sessions_open -= 1

    def close(self) -> None:
        return
