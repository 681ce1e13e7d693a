"""JSON reporter for the machine-readable attribution record."""

import json

from oss_attribution.models import AttributionRecord
from oss_attribution.reporters.base import BaseReporter


class JsonReporter(BaseReporter):
    """Reporter that serializes every record, keyed by package name.

    No filtering is applied: ignored records are written too.
    """

    def render(self, records: list[AttributionRecord]) -> str:
        """Render records as a compact JSON object of name to record.

        Args:
            records: Resolved attribution records.

        Returns:
            JSON document as a string.
        """
        mapping = {record.name: record.to_dict() for record in records}
        return json.dumps(mapping, ensure_ascii=False)

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def default_filename(self) -> str:
        return "licenseInfos.json"
