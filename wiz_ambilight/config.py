"""
config.py
Configuration for the screen-to-bulb ambient lighting loop.
There are no CLI flags or environment variables: edit the values here.
"""


class Config:
    def __init__(self):
        # Bulb list: one IP address per line, read once at startup
        self.ip_list_path = 'ips.txt'
        # UDP settings (WiZ control protocol)
        self.bulb_port = 38899
        self.dimming = 100  # full brightness
        self.debug_udp_packets = False
        # Loop settings
        self.tick_interval_s = 0.05  # ~20Hz
        self.exit_key = 'esc'
        # Give up after this many consecutive failed captures
        self.max_capture_failures = 10
        # Prints "Color set to: (r, g, b) - Nms" once per tick
        self.log_color_every_tick = False
        # Restore behaviour on exit.
        # False: send a generic "turn on" command to each bulb.
        # True: query each bulb with getPilot at startup and replay that state.
        self.snapshot_states = False
        self.snapshot_timeout_s = 1.0
