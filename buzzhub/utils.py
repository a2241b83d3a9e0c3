"""
Utility functions
"""
import math
import random
import secrets
import socket
import time
from typing import Any, List, Optional

from fastapi import HTTPException, Request


NAME_MAX_LEN = 24


def now_ms() -> int:
    """Current time in epoch milliseconds"""
    return int(time.time() * 1000)


def to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def new_id() -> str:
    """
    Generate a question id: base36 timestamp plus random hex

    Example:
        >>> new_id()  # doctest: +SKIP
        'm2k9x1ab-3f9c0d12e4a7b6'
    """
    return f"{to_base36(now_ms())}-{secrets.token_hex(7)}"


def clean_text(value: Any, limit: int) -> str:
    """Stringify, trim and truncate a client-supplied value"""
    return str(value or "").strip()[:limit]


def clean_name(value: Any) -> str:
    """Participant name: trimmed, at most 24 chars, 'anon' if empty"""
    return clean_text(value, NAME_MAX_LEN) or "anon"


def clean_options(values: Any, limit: int) -> List[str]:
    """Clean a list of option labels; anything but a list gives []"""
    if not isinstance(values, list):
        return []
    return [clean_text(v, limit) for v in values]


def parse_option_index(value: Any) -> Optional[int]:
    """Return value if it is a whole-number option index 0..3, else None"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    return int(value) if 0 <= value <= 3 else None


def parse_ms(value: Any) -> int:
    """
    Convert a client-supplied duration to whole milliseconds

    Raises:
        ValueError: Not a number, or not finite (JSON 1e400 parses as inf)
    """
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"duration must be finite, got {value!r}")
    return int(number)


def shuffled(items: List[Any]) -> List[Any]:
    """Return a shuffled copy"""
    out = list(items)
    random.shuffle(out)
    return out


def get_local_ips() -> List[str]:
    """
    Best-effort list of this host's LAN IPv4 addresses

    Uses the UDP connect trick (no packet is sent) plus the hostname
    lookup; loopback addresses are left out.
    """
    addrs = []
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            addrs.append(sock.getsockname()[0])
    except OSError:
        pass
    try:
        for info in socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET):
            addrs.append(info[4][0])
    except OSError:
        pass

    seen = []
    for ip in addrs:
        if ip not in seen and not ip.startswith("127."):
            seen.append(ip)
    return seen


async def read_json(request: Request, max_bytes: int = 1_000_000, optional: bool = False) -> dict:
    """
    Parse a JSON object body

    Args:
        request: Incoming request
        max_bytes: Body size limit
        optional: Treat a missing or unparseable body as {}

    Raises:
        HTTPException: 413 payload_too_large, 400 invalid_json
    """
    body = await request.body()
    if len(body) > max_bytes:
        raise HTTPException(status_code=413, detail="payload_too_large")
    try:
        data = await request.json()
    except ValueError:
        if optional:
            return {}
        raise HTTPException(status_code=400, detail="invalid_json")
    if not isinstance(data, dict):
        if optional:
            return {}
        raise HTTPException(status_code=400, detail="invalid_json")
    return data
