"""Output reporters for generating attribution documents.

This module provides reporters for rendering attribution records to the
plain-text attribution document and the JSON record.
"""

from oss_attribution.reporters.base import BaseReporter
from oss_attribution.reporters.json_report import JsonReporter
from oss_attribution.reporters.text import TextReporter

__all__ = ["BaseReporter", "JsonReporter", "TextReporter"]
