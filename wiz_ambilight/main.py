"""
main.py
Entry point: keeps the bulbs in the bulb list tracking the average screen color
until the exit key is pressed, then restores them.
"""

import sys
import threading
import time

from wiz_ambilight.bulb_list import load_bulb_addresses
from wiz_ambilight.config import Config
from wiz_ambilight.errors import CaptureError, StartupError
from wiz_ambilight.exit_listener import ExitListener
from wiz_ambilight.screen.screen_sampler import ScreenSampler
from wiz_ambilight.udp_sender import UDPSender

RUNNING = 'running'
RESTORING = 'restoring'
TERMINATED = 'terminated'


class AmbientSync:
    def __init__(self, config, addresses, sampler, sender, stop_event, snapshots=None):
        self.config = config
        self.addresses = list(addresses)
        self.sampler = sampler
        self.sender = sender
        self.stop_event = stop_event
        self.snapshots = snapshots or {}
        self.state = RUNNING
        self.capture_failures = 0

    def tick(self):
        """One sample -> reduce -> dispatch cycle. Raises CaptureError if the screen could not be sampled."""
        start = time.time()
        color = self.sampler.get_screen_color()
        outcomes = self.sender.dispatch(color, self.addresses)
        if self.config.log_color_every_tick:
            print(f"Color set to: {color.as_tuple()} - {(time.time() - start) * 1000:.0f}ms")
        return outcomes

    def restore(self):
        """Send the restore command to every bulb. Only the first call does anything."""
        if self.state != RUNNING:
            return []
        self.state = RESTORING
        print("Restoring previous lamps state...")
        outcomes = self.sender.restore(self.addresses, self.snapshots)
        self.state = TERMINATED
        return outcomes

    def run(self):
        """
        Run until the stop event is set, then restore every bulb once.
        Returns:
            int: exit status, always 0 once restoring has run.
        Raises:
            CaptureError: after more than max_capture_failures consecutive failed captures.
        """
        while not self.stop_event.is_set():
            try:
                self.tick()
            except CaptureError as e:
                self.capture_failures += 1
                print(f"{e} ({self.capture_failures}/{self.config.max_capture_failures})")
                if self.capture_failures > self.config.max_capture_failures:
                    self.state = TERMINATED
                    raise
            else:
                self.capture_failures = 0
            self.stop_event.wait(self.config.tick_interval_s)
        self.restore()
        return 0


def main(config=None):
    config = config or Config()
    try:
        addresses = load_bulb_addresses(config.ip_list_path, config.bulb_port)
    except StartupError as e:
        print(f"Startup failed: {e}")
        return 1
    if not addresses:
        print(f"No bulbs listed in {config.ip_list_path}, nothing will be sent.")

    sender = UDPSender(config)
    snapshots = {}
    if config.snapshot_states:
        print("Getting initial states...")
        snapshots = sender.snapshot_states(addresses, config.snapshot_timeout_s)

    stop_event = threading.Event()
    sync = AmbientSync(config, addresses, ScreenSampler(), sender, stop_event, snapshots)
    listener = ExitListener(stop_event, config.exit_key)
    try:
        listener.start()
    except Exception as e:
        print(f"Keyboard listener unavailable ({e}), use Ctrl+C to stop.")

    print(f"Syncing {len(addresses)} bulb(s). Press {config.exit_key.upper()} to stop.")
    try:
        return sync.run()
    except KeyboardInterrupt:
        stop_event.set()
        # Ctrl+C while restoring abandons the bulbs not yet restored
        if sync.state == RUNNING:
            sync.restore()
        sync.state = TERMINATED
        return 0
    except CaptureError as e:
        print(f"Fatal: {e}")
        return 1
    finally:
        listener.stop()
        sender.close()
        if sync.state == TERMINATED:
            print("Byebye!")


if __name__ == "__main__":
    sys.exit(main())
