"""Image filter pipeline for the profile photo editor.

The package separates concerns the same way for every stage:
- algorithms: pure parameter math (kernel radii, lookup tables, masks)
- executors: pixel implementations (Numba, Pillow, NumPy)
- compositing: the multi-layer background blur
- facade: the ordered stage table and the render entry point
"""

from __future__ import annotations

from .facade import FILTER_STAGES, apply_filters, encode_image, render_filters

__all__ = ["FILTER_STAGES", "apply_filters", "encode_image", "render_filters"]
