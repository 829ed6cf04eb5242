"""
Reason classification and message rendering.

``ReasonClassifier`` decodes a nested fault-cause descriptor into a
``{Class, Cause}`` pair plus a normalized call trace; ``MessageRenderer``
turns that classification into a one-line summary.
"""

from faultrelay.reasons.classifier import ReasonClassifier, classify_reason, normalize_trace
from faultrelay.reasons.renderer import MessageRenderer

__all__ = [
    "ReasonClassifier",
    "classify_reason",
    "normalize_trace",
    "MessageRenderer",
]
