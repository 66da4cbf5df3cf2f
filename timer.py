from datetime import datetime, timedelta
from typing import Optional


class Timer:
    def __init__(self, name: str = ""):
        self.name = name
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None

    def start(self) -> "Timer":
        self.start_time = datetime.now()
        self.end_time = None
        return self

    def stop(self) -> timedelta:
        if self.start_time is None:
            raise RuntimeError(f"Timer {self.name!r} has not been started.")
        self.end_time = datetime.now()
        return self.end_time - self.start_time

    def elapsed(self, elapsed_message: Optional[str] = None) -> str:
        if self.start_time is None:
            return "Timer has not been started."
        if self.end_time is None:
            return "Timer has not been stopped."
        message = elapsed_message or f"Elapsed time for {self.name}:"
        return f"{message} {self.end_time - self.start_time}"
