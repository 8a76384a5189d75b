"""Per-server log access for `expose logs`."""

import sys
import time
from pathlib import Path

from .errors import NotFound
from .output import print_info, print_warning


def read_log(log_path: Path, lines: int = 0) -> str:
    """Return the log content, or only its last `lines` lines when lines > 0"""
    if not log_path.exists():
        raise NotFound(f"Log file not found: {log_path}")
    content = log_path.read_text(encoding="utf-8", errors="replace")
    if lines > 0:
        all_lines = content.splitlines()
        if len(all_lines) > lines:
            return "\n".join(all_lines[-lines:]) + "\n"
    return content


def follow_log(log_path: Path, interval: float = 0.5, stream=None) -> None:
    """Stream new output appended to log_path until interrupted (like tail -f)"""
    stream = stream or sys.stdout
    print_info(f"Following {log_path} (Ctrl+C to stop)...")
    last_size = log_path.stat().st_size

    try:
        while True:
            time.sleep(interval)

            if not log_path.exists():
                print_warning("Log file was deleted. Waiting for recreation...")
                while not log_path.exists():
                    time.sleep(1)
                last_size = 0

            current_size = log_path.stat().st_size
            if current_size > last_size:
                with log_path.open("r", encoding="utf-8", errors="replace") as f:
                    f.seek(last_size)
                    stream.write(f.read())
                    stream.flush()
                last_size = current_size
            elif current_size < last_size:
                # Truncated
                last_size = current_size
    except KeyboardInterrupt:
        print(file=sys.stderr)
