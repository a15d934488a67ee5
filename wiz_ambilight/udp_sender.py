"""
udp_sender.py
Sends JSON datagrams to WiZ bulbs, fire and forget.
"""

import ipaddress
import json
import socket
import time

from wiz_ambilight.errors import SendError
from wiz_ambilight.models import SendOutcome
from wiz_ambilight.packet_builder import PacketBuilder


def _host_key(host):
    # recvfrom reports link-local IPv6 senders as "fe80::1%eth0"
    return ipaddress.ip_address(str(host).split('%')[0])


class UDPSender:
    def __init__(self, config):
        self.config = config
        self.packet_builder = PacketBuilder(config)
        # One socket per address family, opened on first send
        self._socks = {}
        self._last_debug_print = 0.0

    def _sock_for(self, address):
        family = socket.AF_INET6 if address.family_is_v6 else socket.AF_INET
        sock = self._socks.get(family)
        if sock is None:
            sock = socket.socket(family, socket.SOCK_DGRAM)
            self._socks[family] = sock
        return sock

    def send(self, packet, address):
        # Optional debug print (rate-limited)
        if getattr(self.config, 'debug_udp_packets', False):
            now = time.time()
            if now - self._last_debug_print > 1.0:
                print(f"UDP Packet -> {address}: {packet!r}")
                self._last_debug_print = now

        try:
            self._sock_for(address).sendto(packet, address.as_sockaddr())
        except OSError as e:
            err = SendError(address, e)
            print(f"UDP send failed: {err}")
            return SendOutcome(address, False, err)
        return SendOutcome(address, True)

    def dispatch(self, color, addresses):
        """Send one set-color datagram to every address. Returns per-address outcomes."""
        packet = self.packet_builder.build_color(color)
        return [self.send(packet, address) for address in addresses]

    def restore(self, addresses, snapshots=None):
        """
        Send one restore datagram to every address.
        Args:
            snapshots: optional {BulbAddress: getPilot reply}; bulbs without an entry get the generic restore.
        """
        snapshots = snapshots or {}
        outcomes = []
        for address in addresses:
            if address in snapshots:
                packet = self.packet_builder.build_restore_from_state(snapshots[address])
            else:
                packet = self.packet_builder.build_restore()
            outcomes.append(self.send(packet, address))
        return outcomes

    def snapshot_states(self, addresses, timeout=1.0):
        """
        Ask every bulb for its current state with getPilot.
        Returns:
            dict: {BulbAddress: parsed reply} for the bulbs that answered before `timeout`.
        """
        states = {}
        by_ip = {}
        for address in addresses:
            by_ip.setdefault(_host_key(address.ip), address)
        if not by_ip:
            return states
        query = self.packet_builder.build_state_query()
        for v6 in (False, True):
            pending = {ip: a for ip, a in by_ip.items() if (ip.version == 6) == v6}
            if not pending:
                continue
            family = socket.AF_INET6 if v6 else socket.AF_INET
            with socket.socket(family, socket.SOCK_DGRAM) as sock:
                for address in pending.values():
                    try:
                        sock.sendto(query, address.as_sockaddr())
                    except OSError as e:
                        print(f"State query failed: {SendError(address, e)}")
                deadline = time.monotonic() + timeout
                while pending:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    sock.settimeout(remaining)
                    try:
                        data, addr = sock.recvfrom(1024)
                    except socket.timeout:
                        break
                    except OSError as e:
                        print(f"State query receive failed: {e}")
                        break
                    try:
                        address = pending.pop(_host_key(addr[0]), None)
                    except ValueError:
                        address = None
                    if address is None:
                        continue
                    try:
                        states[address] = json.loads(data.decode('utf-8'))
                    except ValueError as e:
                        print(f"Ignoring malformed state from {address}: {e}")
        for address in addresses:
            if address not in states:
                print(f"No state reply from {address}, it will get a generic restore")
        return states

    def close(self):
        for sock in self._socks.values():
            sock.close()
        self._socks.clear()
