import secrets
import threading
import time

_lock = threading.Lock()
_last_ms = 0


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _next_timestamp_ms() -> int:
    # nunca volta no tempo, mesmo se o relogio do host voltar
    global _last_ms
    with _lock:
        _last_ms = max(_last_ms, _wall_clock_ms())
        return _last_ms


def generate_object_key(prefix: str = "products", ext: str = ".webp") -> str:
    ext = ext if not ext or ext.startswith(".") else f".{ext}"
    token = secrets.randbelow(10**9)
    return f"{prefix.strip('/')}/{_next_timestamp_ms()}-{token}{ext}"
