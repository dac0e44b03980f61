# scripts/init_db.py
from run import cfg
from series_tracker.repo import SqliteRepo

DB = cfg["database"]
SqliteRepo(DB, timeout=float(cfg.get("db_timeout", 5.0))).ensure_schema()
print("initialized db at", DB)
