"""
GPU/CPU Backend Abstraction for the LUT fill.

Provides the array module used by the vectorised fill loop: CuPy (GPU)
when available and requested, NumPy (CPU) otherwise.
"""

import numpy as np

# Try to import CuPy
try:
    import cupy as cp
    CUPY_AVAILABLE = True
except ImportError:
    cp = None
    CUPY_AVAILABLE = False


class ComputeBackend:
    """
    Backend abstraction for array operations.

    ``xp`` is the array module handed to the geometry and integration
    functions.
    """

    def __init__(self, use_gpu: bool = False):
        """
        Initialize compute backend.

        Args:
            use_gpu: If True, use GPU (CuPy) when available
        """
        self.use_gpu = use_gpu and CUPY_AVAILABLE
        self.xp = cp if self.use_gpu else np

        if self.use_gpu:
            print(f"[Nishita] Using GPU backend (CuPy) - Device: {cp.cuda.Device().id}")
        elif use_gpu:
            print("[Nishita] CuPy not available, using CPU backend (NumPy)")

    @property
    def name(self) -> str:
        """Get backend name."""
        return "CuPy (GPU)" if self.use_gpu else "NumPy (CPU)"

    def to_numpy(self, x):
        """Convert array to NumPy (for the output buffer)."""
        if self.use_gpu:
            return cp.asnumpy(x)
        return np.asarray(x)

    def synchronize(self):
        """Synchronize GPU (no-op for CPU)."""
        if self.use_gpu:
            cp.cuda.Stream.null.synchronize()


# Shared backend instance (can be changed at runtime)
_backend = None


def get_backend(use_gpu: bool = False) -> ComputeBackend:
    """Get or create the compute backend."""
    global _backend
    if _backend is None:
        _backend = ComputeBackend(use_gpu=use_gpu)
    return _backend


def set_backend(use_gpu: bool = False) -> ComputeBackend:
    """Replace the compute backend."""
    global _backend
    _backend = ComputeBackend(use_gpu=use_gpu)
    return _backend


def is_gpu_available() -> bool:
    """Check if GPU (CuPy) is available."""
    return CUPY_AVAILABLE
