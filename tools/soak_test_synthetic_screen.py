"""soak_test_synthetic_screen.py

Long-run synthetic stress test for the sync loop.
- Generates deterministic synthetic frames (no real screen capture)
- Runs the real AmbientSync loop and UDPSender against local UDP receivers
- Validates every received datagram and checks one restore per bulb at the end

Usage:
  python tools/soak_test_synthetic_screen.py --seconds 60 --bulbs 3
"""

import argparse
import ipaddress
import json
import socket
import threading
import time

import numpy as np

from wiz_ambilight.config import Config
from wiz_ambilight.main import AmbientSync
from wiz_ambilight.models import BulbAddress
from wiz_ambilight.screen.color_reducer import mean_color
from wiz_ambilight.udp_sender import UDPSender


def make_frame_pattern(t: float, w: int = 64, h: int = 36) -> np.ndarray:
    """Cycle through solid, dark, split, gradient and noise frames."""
    phase = int(t) % 8

    if phase in (0, 1):
        colors = ([255, 0, 0], [0, 255, 0], [0, 0, 255])
        img = np.zeros((h, w, 3), dtype=np.uint8)
        img[:, :, :] = np.array(colors[int(t * 2) % len(colors)], dtype=np.uint8)
        return img

    if phase == 2:
        # Black screen
        return np.zeros((h, w, 3), dtype=np.uint8)

    if phase == 3:
        img = np.zeros((h, w, 3), dtype=np.uint8)
        img[:, : w // 2, :] = 255
        return img

    if phase in (4, 5):
        img = np.zeros((h, w, 3), dtype=np.uint8)
        x = np.linspace(0, 1, w, dtype=np.float32)
        for c, offset in enumerate((0.0, 0.33, 0.66)):
            img[:, :, c] = (255 * (0.5 + 0.5 * np.sin(2 * np.pi * (x + 0.05 * t + offset))))[None, :].astype(np.uint8)
        return img

    rng = np.random.default_rng(int(t * 1000) & 0xFFFF)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


class SyntheticSampler:
    def __init__(self, stop_event, seconds):
        self.start = time.time()
        self.stop_event = stop_event
        self.seconds = seconds

    def get_screen_color(self):
        t = time.time() - self.start
        if t >= self.seconds:
            self.stop_event.set()
        return mean_color(make_frame_pattern(t))


def receiver(sock, received, done):
    sock.settimeout(0.2)
    while not done.is_set():
        try:
            data, _ = sock.recvfrom(1024)
        except socket.timeout:
            continue
        received.append(json.loads(data.decode('utf-8')))


def validate(msg) -> str:
    if msg.get('method') != 'setPilot':
        raise AssertionError(f"Bad method: {msg}")
    params = msg['params']
    if params == {'state': True}:
        return 'restore'
    for k in ('r', 'g', 'b'):
        if not 0 <= params[k] <= 255:
            raise AssertionError(f"Channel out of range: {msg}")
    if params['dimming'] != 100:
        raise AssertionError(f"Bad dimming: {msg}")
    return 'color'


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument('--seconds', type=float, default=60.0)
    ap.add_argument('--bulbs', type=int, default=3)
    ap.add_argument('--fps', type=float, default=20.0)
    args = ap.parse_args()

    cfg = Config()
    cfg.tick_interval_s = 1.0 / max(args.fps, 1e-3)

    done = threading.Event()
    socks, inboxes, threads, addresses = [], [], [], []
    for _ in range(args.bulbs):
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.bind(('127.0.0.1', 0))
        inbox = []
        th = threading.Thread(target=receiver, args=(s, inbox, done), daemon=True)
        th.start()
        socks.append(s)
        inboxes.append(inbox)
        threads.append(th)
        addresses.append(BulbAddress(ipaddress.ip_address('127.0.0.1'), s.getsockname()[1]))

    stop_event = threading.Event()
    sender = UDPSender(cfg)
    sync = AmbientSync(cfg, addresses, SyntheticSampler(stop_event, args.seconds), sender, stop_event)
    status = sync.run()
    sender.close()

    time.sleep(0.5)
    done.set()
    for th in threads:
        th.join()
    for s in socks:
        s.close()

    for address, inbox in zip(addresses, inboxes):
        kinds = [validate(m) for m in inbox]
        if kinds.count('restore') != 1 or kinds[-1] != 'restore':
            raise AssertionError(f"{address}: expected exactly one final restore, got {kinds[-5:]}")
        print(f"{address}: colors={kinds.count('color')} restore=1")

    print(f"DONE. status={status} seconds={args.seconds} fps={args.fps}")


if __name__ == '__main__':
    main()
