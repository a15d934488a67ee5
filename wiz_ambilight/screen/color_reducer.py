"""
color_reducer.py
Reduces a captured frame to a single average RGB color.
"""
import numpy as np

from wiz_ambilight.models import ColorSample


def mean_color(pixels):
    """
    Unweighted mean of each channel across all pixels.
    Args:
        pixels: (H, W, 3) RGB image or (N, 3) list of RGB pixels.
    Returns:
        ColorSample: per-channel mean rounded to the nearest integer, clipped to 0-255.
    """
    arr = np.asarray(pixels)
    flat = arr.reshape(-1, arr.shape[-1])[:, :3].astype(np.float64)
    # Empty frames are rejected by the sampler before they get here
    rgb = np.clip(np.round(flat.mean(axis=0)), 0, 255).astype(int)
    return ColorSample(int(rgb[0]), int(rgb[1]), int(rgb[2]))
