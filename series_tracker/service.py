# series_tracker/service.py
from typing import Any, List, Mapping, Optional
from series_tracker.models import COLUMNS, ListFilter, Series, SeriesInput, SeriesPatch
import logging

logger = logging.getLogger(__name__)

# Exceptions
class ValidationError(Exception):
    """Raised when input validation fails."""
    pass

class NotFoundError(Exception):
    """Raised when a series is not found."""
    pass

# SQLite INTEGER is a signed 64-bit value
INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1

def _check_field(attr: str, value: Any) -> Any:
    key = COLUMNS[attr]
    if attr in ("title", "status"):
        if not isinstance(value, str):
            raise ValidationError(f"{key} must be a string")
        if attr == "title" and not value.strip():
            raise ValidationError("title required")
        return value
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{key} must be an integer")
    if not INT_MIN <= value <= INT_MAX:
        raise ValidationError(f"{key} out of range")
    if attr != "ranking" and value < 0:
        raise ValidationError(f"{key} must be >= 0")
    return value

def parse_series_input(body: Any) -> SeriesInput:
    """Decode a create/replace body. Every field is required."""
    if not isinstance(body, Mapping):
        raise ValidationError("request body must be a JSON object")
    values = {}
    for attr, key in COLUMNS.items():
        if body.get(key) is None:
            raise ValidationError(f"missing field '{key}'")
        values[attr] = _check_field(attr, body[key])
    return SeriesInput(**values)

def parse_series_patch(body: Any) -> SeriesPatch:
    """Decode a partial body; null and absent keys are both treated as not supplied."""
    if not isinstance(body, Mapping):
        raise ValidationError("request body must be a JSON object")
    fields = {}
    for attr, key in COLUMNS.items():
        if body.get(key) is not None:
            fields[attr] = _check_field(attr, body[key])
    return SeriesPatch(fields)

class SeriesService:
    """
    Operations on tracked series.
    The service expects a repository object exposing the methods used below
    (SqliteRepo or InMemoryRepo from series_tracker.repo). Store failures
    surface as RepoError and are not caught here.
    """

    def __init__(self, repo):
        self.repo = repo
        logger.debug("SeriesService initialized with repo %s", type(repo).__name__)

    def list_series(self, search: Optional[str] = None, status: Optional[str] = None,
                    sort: Optional[str] = None) -> List[Series]:
        """List series filtered by title substring and exact status, optionally sorted by ranking."""
        res = self.repo.list_series(ListFilter(search=search, status=status, sort=sort))
        logger.debug("list_series search=%r status=%r sort=%r -> %d rows", search, status, sort, len(res))
        return res

    def get_series(self, series_id: int) -> Series:
        """Get a series by id or raise NotFoundError."""
        s = self.repo.get_series(series_id)
        if not s:
            logger.debug("get_series: series %s not found", series_id)
            raise NotFoundError("series not found")
        return s

    def create_series(self, body: Any) -> int:
        data = parse_series_input(body)
        new_id = self.repo.create_series(data)
        logger.info("Created series id=%s title=%s", new_id, data.title)
        return new_id

    def replace_series(self, series_id: int, body: Any) -> None:
        """Full replace. A missing id is not an error (zero rows affected)."""
        data = parse_series_input(body)
        self.repo.replace_series(series_id, data)
        logger.info("Replaced series id=%s", series_id)

    def update_status(self, series_id: int, body: Any) -> None:
        """Only 'status' is read; any other key in the body is ignored."""
        if not isinstance(body, Mapping):
            raise ValidationError("request body must be a JSON object")
        status = body.get("status")
        if status is None:
            logger.warning("update_status: missing status for series %s", series_id)
            raise ValidationError("missing field 'status'")
        status = _check_field("status", status)
        self.repo.update_status(series_id, status)
        logger.info("Updated status of series id=%s to %s", series_id, status)

    def update_fields(self, series_id: int, body: Any) -> None:
        patch = parse_series_patch(body)
        self.repo.update_fields(series_id, patch)
        logger.info("Patched series id=%s fields=%s", series_id, sorted(patch.fields))

    def increment_episode(self, series_id: int) -> None:
        self.repo.increment_episode(series_id)
        logger.info("Incremented episode for series id=%s", series_id)

    def upvote(self, series_id: int) -> None:
        self.repo.increment_ranking(series_id)
        logger.info("Upvoted series id=%s", series_id)

    def downvote(self, series_id: int) -> None:
        self.repo.decrement_ranking(series_id)
        logger.info("Downvoted series id=%s", series_id)

    def delete_series(self, series_id: int) -> None:
        self.repo.delete_series(series_id)
        logger.info("Deleted series id=%s", series_id)
