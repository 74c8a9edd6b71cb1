"""Failure logs for batch caption parsing.

Each batch run with problems writes one JSON file into failures/, named
after the run's start time, listing captions that failed outright or parsed
with low confidence. The heuristics get tuned against these examples.
"""
import json
from collections import Counter
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

FAILURES_DIR_NAME = "failures"
LOG_NAME_FORMAT = "%Y-%m-%d-%H%M%S"

# Error classification patterns
_EMPTY_PATTERNS = ["empty caption", "no ingredients", "no steps", "nothing parsed", "low confidence"]
_NETWORK_PATTERNS = ["connection refused", "timed out", "timeout", "dns", "unreachable", "connection error", "http"]
_IO_PATTERNS = ["permission denied", "no such file", "is a directory", "disk full", "read-only"]
_PARSING_PATTERNS = ["json", "expecting value", "decode", "unicode", "codec", "key error"]

# Exception type mapping
_EXCEPTION_CATEGORIES = {
    "JSONDecodeError": "parsing",
    "UnicodeDecodeError": "parsing",
    "KeyError": "parsing",
    "ValueError": "parsing",
    "PermissionError": "io",
    "FileNotFoundError": "io",
    "IsADirectoryError": "io",
    "OSError": "io",
    "TimeoutError": "network",
    "ConnectionError": "network",
}


def classify_error(error_message: str, exception_type: type = Exception) -> str:
    """Classify an error into a category for later review.

    Args:
        error_message: The error message string
        exception_type: The exception class (e.g., FileNotFoundError)

    Returns:
        One of: "empty", "network", "parsing", "io", "unknown"
    """
    msg_lower = error_message.lower()
    exc_name = exception_type.__name__

    # Thin results are reported without an exception
    if any(p in msg_lower for p in _EMPTY_PATTERNS):
        return "empty"

    if exc_name in _EXCEPTION_CATEGORIES:
        return _EXCEPTION_CATEGORIES[exc_name]

    if any(p in msg_lower for p in _NETWORK_PATTERNS):
        return "network"
    if any(p in msg_lower for p in _IO_PATTERNS):
        return "io"
    if any(p in msg_lower for p in _PARSING_PATTERNS):
        return "parsing"

    return "unknown"


def failures_dir_for(project_root: Optional[Path] = None) -> Path:
    """failures/ beside this module, or under project_root when given."""
    return Path(project_root or Path(__file__).parent) / FAILURES_DIR_NAME


def log_failures(
    failures: List[Dict],
    total_processed: int,
    project_root: Optional[Path] = None,
) -> Path:
    """Write one batch run's problem captions to failures/<run time>.json.

    Args:
        failures: Dicts with file, error, error_category, traceback, timestamp
        total_processed: Number of caption files in the run
        project_root: Directory holding failures/ (defaults to this module's)

    Returns:
        Path to the log file
    """
    run_started = datetime.now()
    log_dir = failures_dir_for(project_root)
    log_dir.mkdir(parents=True, exist_ok=True)

    by_category = Counter(failure.get("error_category", "unknown") for failure in failures)
    report = {
        "run_timestamp": run_started.isoformat(timespec="seconds"),
        "total_processed": total_processed,
        "total_failed": len(failures),
        "by_category": dict(sorted(by_category.items())),
        "failures": failures,
    }

    log_path = log_dir / f"{run_started.strftime(LOG_NAME_FORMAT)}.json"
    with open(log_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return log_path


def _logged_at(log_path: Path) -> Optional[datetime]:
    try:
        return datetime.strptime(log_path.stem, LOG_NAME_FORMAT)
    except ValueError:
        return None


def cleanup_old_failure_logs(
    failures_dir: Path,
    max_age_days: int = 30,
    now: Optional[datetime] = None,
) -> int:
    """Delete logs whose run time is more than max_age_days ago.

    The run time comes from the file name, so copied or touched logs keep
    their age. JSON files without a run-time name are left alone.

    Returns:
        Number of files removed
    """
    failures_dir = Path(failures_dir)
    if not failures_dir.is_dir():
        return 0

    cutoff = (now or datetime.now()) - timedelta(days=max_age_days)
    removed = 0
    for log_path in sorted(failures_dir.glob("*.json")):
        logged_at = _logged_at(log_path)
        if logged_at is not None and logged_at < cutoff:
            log_path.unlink()
            removed += 1
    return removed
