"""
LUT Comparison - Difference statistics between two optical-depth LUTs.

Accepts flat pixel buffers or (height, width, 4) images.
"""

import numpy as np

CHANNEL_NAMES = ('rayleigh', 'mie', 'ozone', 'unused')


def _as_image(data, width=None, height=None):
    data = np.asarray(data, dtype=np.float64)
    if data.ndim == 1:
        if width is None or height is None:
            raise ValueError("Flat buffers need width and height")
        data = data.reshape(height, width, 4)
    return data


def compare_luts(reference, generated, width=None, height=None, verbose=False) -> dict:
    """
    Compare two LUTs channel by channel.

    Args:
        reference: Reference buffer or image
        generated: Generated buffer or image
        width, height: Texture size, required for flat buffers
        verbose: Print a report

    Returns:
        Dict with 'max_abs', 'mean_abs', 'max_rel', 'nan', 'inf' and a
        per-channel 'channels' dict of mean absolute error.
    """
    ref = _as_image(reference, width, height)
    gen = _as_image(generated, width, height)

    if ref.shape != gen.shape:
        raise ValueError(f"Shape mismatch! Reference: {ref.shape}, Generated: {gen.shape}")

    diff = np.abs(ref - gen)

    # Relative error where the reference is non-zero
    mask = np.abs(ref) > 1e-6
    max_rel = float(np.max(diff[mask] / np.abs(ref[mask]))) if np.any(mask) else 0.0

    stats = {
        'max_abs': float(diff.max()),
        'mean_abs': float(diff.mean()),
        'max_rel': max_rel,
        'nan': int(np.sum(np.isnan(gen))),
        'inf': int(np.sum(np.isinf(gen))),
        'channels': {
            CHANNEL_NAMES[i]: float(diff[..., i].mean())
            for i in range(ref.shape[2])
        },
    }

    if verbose:
        print(f"  Shape: {ref.shape}")
        print(f"  Absolute Difference: Max: {stats['max_abs']:.6f}, Mean: {stats['mean_abs']:.6f}")
        print(f"  Relative Error (where ref > 1e-6): Max: {stats['max_rel']*100:.2f}%")
        if stats['nan'] or stats['inf']:
            print(f"  WARNING: generated LUT has {stats['nan']} NaN and {stats['inf']} Inf values")
        for name, value in stats['channels'].items():
            print(f"    {name}: {value:.6f}")

    return stats
