# series_tracker/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# snake_case attribute -> column / JSON key
COLUMNS = {
    "title": "title",
    "status": "status",
    "last_episode_watched": "lastEpisodeWatched",
    "total_episodes": "totalEpisodes",
    "ranking": "ranking",
}

@dataclass
class Series:
    id: Optional[int]
    title: str
    status: str
    last_episode_watched: int = 0
    total_episodes: int = 0
    ranking: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "lastEpisodeWatched": self.last_episode_watched,
            "totalEpisodes": self.total_episodes,
            "ranking": self.ranking,
        }

@dataclass
class SeriesInput:
    """All fields but id; used for create and full replace."""
    title: str
    status: str
    last_episode_watched: int
    total_episodes: int
    ranking: int

    def as_params(self) -> tuple:
        return (self.title, self.status, self.last_episode_watched, self.total_episodes, self.ranking)

@dataclass
class SeriesPatch:
    """Only the fields that were actually supplied, keyed by attribute name."""
    fields: Dict[str, Any] = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return name in self.fields

    def get(self, name: str) -> Any:
        return self.fields.get(name)

@dataclass
class ListFilter:
    search: Optional[str] = None
    status: Optional[str] = None
    sort: Optional[str] = None  # "asc" | "desc", applied to ranking
