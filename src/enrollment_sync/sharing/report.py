"""Report generation for sharing passes."""

import json
import csv
import io
from datetime import datetime

from .models import SharingReport, SharingStatus


class ReportGenerator:
    """Generator for sharing reports in various formats."""

    def __init__(self, report: SharingReport):
        """Initialize the report generator.

        Args:
            report: The sharing report to generate output from.
        """
        self.report = report

    def to_json(self, indent: int = 2) -> str:
        """Generate JSON representation of the report."""
        data = self.report.to_full_dict()

        def json_serializer(obj):
            if isinstance(obj, datetime):
                return obj.isoformat()
            if isinstance(obj, SharingStatus):
                return obj.value
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(data, indent=indent, default=json_serializer)

    def to_csv(self) -> str:
        """Generate CSV with one row per granted token."""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["document_id", "identity_token", "role", "granted_at"])
        for record in self.report.granted:
            writer.writerow([
                self.report.document_id,
                record.identity_token,
                record.role,
                record.granted_at.isoformat(),
            ])
        return output.getvalue()

    def to_summary_text(self) -> str:
        """Generate a human-readable text summary of the report.

        Returns:
            Formatted text summary of the sharing report.
        """
        summary = self.report.to_summary_dict()

        lines = [
            "=" * 60,
            "SHARING REPORT SUMMARY",
            "=" * 60,
            f"Report ID: {summary['id']}",
            f"Status: {summary['status']}",
            f"Document: {summary['document_id']}",
            f"Provider: {summary['provider']}",
            "",
            "Payment Window:",
            f"  Start: {summary['start_time']}",
            f"  End: {summary['end_time']}",
            "",
            f"Granted: {summary['total_granted']}",
        ]

        for record in self.report.granted:
            lines.append(f"  [+] {record.identity_token} ({record.role})")

        lines.extend([
            "",
            f"Created At: {summary['created_at']}",
            f"Completed At: {summary['completed_at'] or 'N/A'}",
        ])

        if summary.get("error_message"):
            lines.extend([
                "",
                f"Error ({summary['error_type']}): {summary['error_message']}",
            ])

        lines.append("=" * 60)
        return "\n".join(lines)
