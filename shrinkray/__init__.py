"""
Shrinkray

Reduces the byte cost of audio, image and text payloads before they are
forwarded to downstream consumers, reporting size-reduction metrics.
"""

__version__ = "0.1.0"
