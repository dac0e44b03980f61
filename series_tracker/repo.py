# series_tracker/repo.py
import logging
import os
import re
import sqlite3
from contextlib import contextmanager
from typing import Dict, List, Optional

from series_tracker.models import COLUMNS, ListFilter, Series, SeriesInput, SeriesPatch
from series_tracker.query import build_list_query

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS series (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    status TEXT NOT NULL,
    lastEpisodeWatched INTEGER NOT NULL,
    totalEpisodes INTEGER NOT NULL,
    ranking INTEGER NOT NULL
);
"""

# --- Exceptions ---
class RepoError(Exception):
    """Any failure of the underlying store."""
    pass

def row_to_series(r) -> Series:
    return Series(r["id"], r["title"], r["status"], r["lastEpisodeWatched"],
                  r["totalEpisodes"], r["ranking"])

# --- SQLite repo ---
class SqliteRepo:
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)

    @contextmanager
    def conn(self):
        try:
            con = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise RepoError(f"cannot open database: {e}") from e
        con.row_factory = sqlite3.Row
        try:
            yield con
            con.commit()
        except sqlite3.Error as e:
            raise RepoError(str(e)) from e
        finally:
            con.close()

    def ensure_schema(self) -> None:
        with self.conn() as c:
            c.executescript(SCHEMA_SQL)
        logger.debug("series table ready at %s", self.db_path)

    def list_series(self, flt: ListFilter) -> List[Series]:
        sql, params = build_list_query(flt)
        with self.conn() as c:
            rows = c.execute(sql, tuple(params)).fetchall()
            return [row_to_series(r) for r in rows]

    def get_series(self, series_id: int) -> Optional[Series]:
        with self.conn() as c:
            r = c.execute("SELECT * FROM series WHERE id = ?", (series_id,)).fetchone()
            return row_to_series(r) if r else None

    def create_series(self, data: SeriesInput) -> int:
        with self.conn() as c:
            cur = c.execute(
                "INSERT INTO series (title, status, lastEpisodeWatched, totalEpisodes, ranking) "
                "VALUES (?, ?, ?, ?, ?)",
                data.as_params())
            return cur.lastrowid

    def replace_series(self, series_id: int, data: SeriesInput) -> None:
        with self.conn() as c:
            c.execute(
                "UPDATE series SET title=?, status=?, lastEpisodeWatched=?, totalEpisodes=?, ranking=? "
                "WHERE id=?",
                data.as_params() + (series_id,))

    def update_status(self, series_id: int, status: str) -> None:
        with self.conn() as c:
            c.execute("UPDATE series SET status = ? WHERE id = ?", (status, series_id))

    def update_fields(self, series_id: int, patch: SeriesPatch) -> None:
        """Update only the columns present in the patch. Column names come from COLUMNS, never from input."""
        sets = []
        params = []
        for attr, col in COLUMNS.items():
            if patch.has(attr):
                sets.append(f"{col} = ?")
                params.append(patch.get(attr))
        if not sets:
            return
        params.append(series_id)
        with self.conn() as c:
            c.execute("UPDATE series SET " + ", ".join(sets) + " WHERE id = ?", tuple(params))

    # single-statement increments; never read-modify-write
    def increment_episode(self, series_id: int) -> None:
        with self.conn() as c:
            c.execute("UPDATE series SET lastEpisodeWatched = lastEpisodeWatched + 1 WHERE id = ?",
                      (series_id,))

    def increment_ranking(self, series_id: int) -> None:
        with self.conn() as c:
            c.execute("UPDATE series SET ranking = ranking + 1 WHERE id = ?", (series_id,))

    def decrement_ranking(self, series_id: int) -> None:
        with self.conn() as c:
            c.execute("UPDATE series SET ranking = ranking - 1 WHERE id = ?", (series_id,))

    def delete_series(self, series_id: int) -> None:
        with self.conn() as c:
            c.execute("DELETE FROM series WHERE id = ?", (series_id,))

# --- In-memory repo (simple, used for unit tests) ---
def like_to_regex(pattern: str):
    """Translate a SQL LIKE pattern to a regex with SQLite's ASCII case-insensitivity."""
    out = []
    for ch in pattern:
        if ch == "%":
            out.append(".*")
        elif ch == "_":
            out.append(".")
        else:
            out.append(re.escape(ch))
    return re.compile("".join(out), re.IGNORECASE | re.DOTALL | re.ASCII)

class InMemoryRepo:
    def __init__(self):
        self._series: Dict[int, Series] = {}
        self._next = 1

    def _assign(self) -> int:
        nid = self._next
        self._next += 1
        return nid

    def ensure_schema(self) -> None:
        pass

    def list_series(self, flt: ListFilter) -> List[Series]:
        res = list(self._series.values())
        if flt.search is not None and flt.search.strip():
            rx = like_to_regex(f"%{flt.search}%")
            res = [s for s in res if rx.fullmatch(s.title)]
        if flt.status is not None and flt.status.strip():
            res = [s for s in res if s.status == flt.status]
        sort = (flt.sort or "").lower()
        if sort == "asc":
            res.sort(key=lambda s: s.ranking)
        elif sort == "desc":
            res.sort(key=lambda s: s.ranking, reverse=True)
        return [Series(**vars(s)) for s in res]

    def get_series(self, series_id: int) -> Optional[Series]:
        s = self._series.get(series_id)
        return Series(**vars(s)) if s else None

    def create_series(self, data: SeriesInput) -> int:
        sid = self._assign()
        self._series[sid] = Series(sid, *data.as_params())
        return sid

    def replace_series(self, series_id: int, data: SeriesInput) -> None:
        if series_id in self._series:
            self._series[series_id] = Series(series_id, *data.as_params())

    def update_status(self, series_id: int, status: str) -> None:
        s = self._series.get(series_id)
        if s:
            s.status = status

    def update_fields(self, series_id: int, patch: SeriesPatch) -> None:
        s = self._series.get(series_id)
        if s:
            for attr in COLUMNS:
                if patch.has(attr):
                    setattr(s, attr, patch.get(attr))

    def increment_episode(self, series_id: int) -> None:
        s = self._series.get(series_id)
        if s:
            s.last_episode_watched += 1

    def increment_ranking(self, series_id: int) -> None:
        s = self._series.get(series_id)
        if s:
            s.ranking += 1

    def decrement_ranking(self, series_id: int) -> None:
        s = self._series.get(series_id)
        if s:
            s.ranking -= 1

    def delete_series(self, series_id: int) -> None:
        self._series.pop(series_id, None)
