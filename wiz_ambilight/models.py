"""Models."""

import dataclasses
import ipaddress
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclasses.dataclass(frozen=True)
class BulbAddress:
    """Network address of one bulb."""

    ip: IPAddress
    port: int

    @property
    def family_is_v6(self) -> bool:
        return self.ip.version == 6

    def as_sockaddr(self):
        return (str(self.ip), self.port)

    def __str__(self) -> str:
        if self.family_is_v6:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"


@dataclasses.dataclass(frozen=True)
class ColorSample:
    """Average screen color, each channel in [0, 255]."""

    r: int
    g: int
    b: int

    def as_tuple(self):
        return (self.r, self.g, self.b)


@dataclasses.dataclass(frozen=True)
class SendOutcome:
    """Result of sending one datagram to one bulb."""

    address: BulbAddress
    ok: bool
    error: Optional[Exception] = None
