import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Union

p = Path(__file__).resolve()


def load_env_file(filepath: Union[str, Path] = Path(".env").resolve(), *, override: bool = False) -> None:
    """
    Load KEY=VALUE lines from a .env file into os.environ.

    Blank lines and '#' comments are skipped, surrounding quotes are stripped.
    Variables already present in the environment win unless override is set.
    A missing file is not an error.
    """
    path = Path(filepath)
    if not path.is_file():
        return

    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export "):].strip()
            value = value.strip().strip('"').strip("'")
            if override or key not in os.environ:
                os.environ[key] = value


def read_comma_list(env_var: str) -> List[str]:
    """
    Split a comma separated env var into its non-blank entries.
    Unset or empty variables give an empty list.
    """
    raw = os.getenv(env_var, "")
    return [v.strip() for v in raw.split(",") if v.strip()]


def read_json_file(json_path: Union[str, Path], encoding: str = "utf-8") -> Any:
    """
    Read and parse a JSON file.

    Raises:
        FileNotFoundError: if the file doesn't exist
        ValueError: if the JSON is invalid
    """
    path = Path(json_path)

    try:
        with path.open("r", encoding=encoding) as f:
            return json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"JSON file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path} (line {e.lineno}, col {e.colno}): {e.msg}") from e


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def iso_z(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_iso(s: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 / RFC 3339 timestamp into an aware UTC datetime.
    Returns None for empty or unparseable input.
    """
    if not isinstance(s, str):
        return None
    s = s.strip()
    if not s:
        return None
    try:
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
