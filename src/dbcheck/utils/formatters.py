import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from importlib.metadata import PackageNotFoundError, version
from types import MappingProxyType

from dbcheck.core.models import ClusterSnapshot, PolicyResult, TableCount


def resolve_app_version() -> str:
    try:
        return version("dbcheck")
    except PackageNotFoundError:
        return "dev"


def _serialize(obj):
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, MappingProxyType):
        return dict(obj)
    if is_dataclass(obj):
        return asdict(obj)
    if hasattr(obj, "value"):  # Enums
        return obj.value
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    return str(obj)


def format_as_json(obj) -> str:
    """Standard JSON output; datetimes as ISO-8601."""
    return json.dumps(obj, default=_serialize, indent=2)


def format_snapshot(snapshot: ClusterSnapshot, divergent: dict[str, list[str]] | None = None) -> str:
    data = snapshot.to_dict()
    if divergent:
        data["Divergent"] = divergent
    return format_as_json(data)


def format_results_text(results: dict[str, PolicyResult]) -> str:
    """Basic text output for console (fallback)."""
    lines = []
    for r in results.values():
        line = f"{r.name:<22} {r.value:g}"
        if r.labels:
            line += f"  {r.label_text()}"
        lines.append(line)
    return "\n".join(lines)


def format_table_counts(counts: list[TableCount]) -> str:
    return format_as_json([{"Key": c.table, "Value": c.rows} for c in counts])


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, for log collectors of deployed stages."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)
