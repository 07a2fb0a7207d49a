import csv
from io import BytesIO, StringIO
from typing import Any, Dict, List

from openpyxl import Workbook

EXPORT_COLUMNS = [
    ('studentId', 'Student ID'),
    ('name', 'Name'),
    ('email', 'Email'),
    ('department', 'Department'),
    ('totalSessions', 'Sessions'),
    ('present', 'Present'),
    ('lateOriginal', 'Late'),
    ('absentFinal', 'Absent (incl. converted)'),
    ('excused', 'Excused'),
    ('unknown', 'Unknown'),
    ('raw', 'Raw'),
    ('score', 'Score'),
]


def _table(rows: List[Dict[str, Any]]):
    header = [label for _, label in EXPORT_COLUMNS]
    body = [[row.get(key) for key, _ in EXPORT_COLUMNS] for row in rows]
    return header, body


def xlsx_bytes(report: Dict[str, Any]) -> bytes:
    header, body = _table(report['rows'])
    wb = Workbook()
    ws = wb.active
    ws.title = 'attendance-score'
    ws.append(header)
    for values in body:
        ws.append(values)
    buf = BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf.getvalue()


def csv_bytes(report: Dict[str, Any]) -> bytes:
    header, body = _table(report['rows'])
    sio = StringIO()
    writer = csv.writer(sio)
    writer.writerow(header)
    for values in body:
        writer.writerow(values)
    # BOM so spreadsheet apps detect UTF-8 names
    return sio.getvalue().encode('utf-8-sig')
