"""Application-wide defaults for iPortrait."""

from __future__ import annotations

# Debounce windows, in milliseconds.  Filter sliders emit a burst of values
# while dragging; only the last one within the window is rendered.
FILTER_DEBOUNCE_MS = 150
UPLOAD_DEBOUNCE_MS = 300

# Encoding of the rendered preview.
RENDER_MIME_TYPE = "image/jpeg"
JPEG_QUALITY = 92

# Magnitude-style filters below this value are treated as switched off.
NEGLIGIBLE_FILTER_VALUE = 0.01

# Upload validation.
ALLOWED_UPLOAD_TYPES = ("image/jpeg", "image/png", "image/jpg")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# Crop output never drops below this edge length.
CROP_MIN_SIZE = 200

# Download compression targets.
DOWNLOAD_MAX_BYTES = 1 * 1024 * 1024
DOWNLOAD_MAX_DIMENSION = 1000
DOWNLOAD_MIN_QUALITY = 40
DOWNLOAD_DEFAULT_STEM = "linkedin-profile"
