"""Per-format Pillow handlers."""
