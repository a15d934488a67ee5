"""
screen_sampler.py

Captures the primary screen and reduces it to its average color.
"""

import numpy as np
import mss
import cv2
import time

from wiz_ambilight.errors import CaptureError
from wiz_ambilight.screen.color_reducer import mean_color


class ScreenSampler:
    def __init__(self, monitor_index=1):
        """
        Initialize the screen sampler.
        Args:
            monitor_index: mss monitor index; 1 is the primary monitor (0 is all monitors combined).
        """
        self.monitor_index = monitor_index

    def capture_screen(self):
        """
        Capture the full primary screen using mss.
        Returns:
            np.ndarray: Captured image in RGB format, shape (H, W, 3).
        Raises:
            CaptureError: if no display is available or the frame is empty.
        """
        try:
            with mss.mss() as sct:
                monitor = sct.monitors[self.monitor_index]
                img = np.array(sct.grab(monitor))
        except Exception as e:
            raise CaptureError(f"Screen capture failed: {e}") from e
        if img.ndim != 3 or img.shape[0] == 0 or img.shape[1] == 0:
            raise CaptureError(f"Screen capture returned an empty frame {img.shape}")
        # Convert BGRA to RGB
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)

    def get_screen_color(self):
        """
        Main entry point: capture, then average.
        Returns:
            ColorSample: average RGB color of the primary screen.
        """
        img = self.capture_screen()
        return mean_color(img)


if __name__ == "__main__":
    sampler = ScreenSampler()
    while True:
        start = time.time()
        try:
            color = sampler.get_screen_color()
        except CaptureError as e:
            print(e)
        else:
            print(f"Average RGB: {color.as_tuple()} - {(time.time() - start) * 1000:.0f}ms")
        time.sleep(0.05)
