"""
Section Comparison Export
=========================
Export a ComparisonReport to:
- CSV (one row per section)
- JSON (records plus status counts)
- Excel workbook with a Results sheet and a Summary sheet
"""

import csv
import io
import json
from datetime import datetime
from typing import Dict, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

from .models import (
    ComparisonReport,
    ALL_STATUSES,
    STATUS_MATCH,
    STATUS_DIFFERENT,
    STATUS_ADDED,
    STATUS_MISSING,
)

CSV_FIELDNAMES = ['#', 'ID', 'Section', 'Status', 'Similarity', 'Source Content', 'Target Content']


class CSVExporter:
    """Export a comparison report to CSV format."""

    content_type = 'text/csv'
    extension = 'csv'

    @staticmethod
    def export(report: ComparisonReport, filename: Optional[str] = None) -> str:
        """Export report records to CSV."""
        output = io.StringIO()

        writer = csv.DictWriter(output, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()

        for i, record in enumerate(report, 1):
            writer.writerow({
                '#': i,
                'ID': record.id,
                'Section': record.section,
                'Status': record.status,
                'Similarity': record.similarity,
                'Source Content': record.source_content,
                'Target Content': record.target_content
            })

        csv_content = output.getvalue()

        if filename:
            with open(filename, 'w', newline='', encoding='utf-8') as f:
                f.write(csv_content)

        return csv_content


class JSONExporter:
    """Export a comparison report to JSON format."""

    content_type = 'application/json'
    extension = 'json'

    @staticmethod
    def export(report: ComparisonReport, filename: Optional[str] = None,
               pretty: bool = True) -> str:
        """
        Export report to JSON.

        Args:
            report: Comparison report
            filename: Optional output file path
            pretty: Whether to format with indentation
        """
        data = report.to_dict()
        data['exported_at'] = datetime.now().isoformat(timespec='seconds')

        json_content = json.dumps(data, indent=2 if pretty else None, ensure_ascii=False)

        if filename:
            with open(filename, 'w', encoding='utf-8') as f:
                f.write(json_content)

        return json_content


class ExcelExporter:
    """Export a comparison report to an Excel workbook."""

    content_type = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    extension = 'xlsx'

    STATUS_FILLS = {
        STATUS_MATCH: 'C6EFCE',
        STATUS_DIFFERENT: 'FFEB9C',
        STATUS_ADDED: 'BDD7EE',
        STATUS_MISSING: 'FFC7CE',
    }

    def __init__(self):
        self.header_font = Font(bold=True, color='FFFFFF')
        self.header_fill = PatternFill(start_color='1F4E79', end_color='1F4E79', fill_type='solid')
        self.wrap = Alignment(wrap_text=True, vertical='top')

    def export(self, report: ComparisonReport, filename: Optional[str] = None) -> bytes:
        """
        Export report to XLSX.

        Returns:
            Workbook file content
        """
        wb = Workbook()
        self._create_results_sheet(wb.active, report)
        self._create_summary_sheet(wb.create_sheet('Summary'), report.stats)

        output = io.BytesIO()
        wb.save(output)
        content = output.getvalue()

        if filename:
            with open(filename, 'wb') as f:
                f.write(content)

        return content

    def _write_header(self, ws, headers):
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
        ws.freeze_panes = 'A2'

    def _create_results_sheet(self, ws, report: ComparisonReport):
        ws.title = 'Results'
        headers = CSV_FIELDNAMES
        self._write_header(ws, headers)

        for row, record in enumerate(report, 2):
            values = [row - 1, record.id, record.section, record.status,
                      record.similarity, record.source_content, record.target_content]
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                if col >= 6:
                    cell.alignment = self.wrap

            color = self.STATUS_FILLS[record.status]
            ws.cell(row=row, column=4).fill = PatternFill(
                start_color=color, end_color=color, fill_type='solid'
            )

        widths = [6, 24, 30, 12, 12, 60, 60]
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

    def _create_summary_sheet(self, ws, stats: Dict[str, int]):
        self._write_header(ws, ['Status', 'Sections'])
        for row, status in enumerate(ALL_STATUSES, 2):
            ws.cell(row=row, column=1, value=status)
            ws.cell(row=row, column=2, value=stats[status])
        total_row = len(ALL_STATUSES) + 2
        ws.cell(row=total_row, column=1, value='total').font = Font(bold=True)
        ws.cell(row=total_row, column=2, value=stats['total']).font = Font(bold=True)
        ws.column_dimensions['A'].width = 16
        ws.column_dimensions['B'].width = 12


def get_exporter(format_type: str):
    """Get appropriate exporter for format type."""
    exporters = {
        'csv': CSVExporter,
        'json': JSONExporter,
        'excel': ExcelExporter,
        'xlsx': ExcelExporter,
    }

    exporter_class = exporters.get((format_type or '').lower())
    if not exporter_class:
        raise ValueError(f"Unsupported export format: {format_type}")

    return exporter_class()


def generate_timestamped_filename(base_name: str, extension: str = 'xlsx') -> str:
    """
    Generate a filename with timestamp, e.g. 'section_compare_20260120_153045.xlsx'.
    """
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{base_name}_{timestamp}.{extension}"
