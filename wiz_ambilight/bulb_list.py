"""
bulb_list.py
Reads the plain-text bulb list: one IPv4/IPv6 address per line.
"""
import ipaddress
from typing import List

from wiz_ambilight.errors import StartupError
from wiz_ambilight.models import BulbAddress


def parse_bulb_addresses(text: str, port: int) -> List[BulbAddress]:
    addresses = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        entry = line.strip()
        if not entry:
            continue
        try:
            ip = ipaddress.ip_address(entry)
        except ValueError as e:
            raise StartupError(f"line {lineno}: {e}") from e
        addresses.append(BulbAddress(ip=ip, port=port))
    return addresses


def load_bulb_addresses(path, port: int) -> List[BulbAddress]:
    """
    Load the bulb list from `path`, preserving file order.
    Raises StartupError if the file is missing, unreadable or malformed.
    An empty file is not an error.
    """
    try:
        with open(path, encoding='utf-8') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise StartupError(f"cannot read bulb list {path}: {e}") from e
    try:
        return parse_bulb_addresses(text, port)
    except StartupError as e:
        raise StartupError(f"invalid bulb list {path}, {e}") from e
