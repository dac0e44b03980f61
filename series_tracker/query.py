# series_tracker/query.py
from typing import List, Tuple
from series_tracker.models import ListFilter

BASE_SELECT = "SELECT * FROM series"

_ORDER = {"asc": " ORDER BY ranking ASC", "desc": " ORDER BY ranking DESC"}

def build_list_query(flt: ListFilter) -> Tuple[str, List]:
    """
    Build the listing statement and its positional params from a ListFilter.
    Blank search/status values are ignored; an unknown sort adds no ORDER BY.
    LIKE wildcards (% and _) inside search are passed through unescaped.
    """
    params = []
    where_clauses = []
    if flt.search is not None and flt.search.strip():
        where_clauses.append("title LIKE ?")
        params.append(f"%{flt.search}%")
    if flt.status is not None and flt.status.strip():
        where_clauses.append("status = ?")
        params.append(flt.status)
    sql = BASE_SELECT
    if where_clauses:
        sql += " WHERE " + " AND ".join(where_clauses)
    if flt.sort is not None:
        sql += _ORDER.get(flt.sort.lower(), "")
    return sql, params
