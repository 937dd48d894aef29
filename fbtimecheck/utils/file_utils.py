"""File output utility functions for fbTimeCheck."""
import os
import subprocess
import sys
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

PDF_MARGINS = {"top": "20mm", "right": "15mm", "bottom": "20mm", "left": "15mm"}


def write_excel(filename: str, headers: list, rows: list, hours_column: int = 3,
                sheet_title: str = "Time Report"):
    """Write data to an Excel workbook.

    Args:
        filename: Output file name
        headers: Column headers
        rows: Data rows
        hours_column: 1-based index of the column to center
        sheet_title: Worksheet name
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title

    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)

    for (cell,) in ws.iter_rows(min_col=hours_column, max_col=hours_column):
        cell.alignment = Alignment(horizontal="center")

    for col_idx, header in enumerate(headers, start=1):
        width = max([len(str(header))] + [len(str(r[col_idx - 1])) for r in rows if len(r) >= col_idx])
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, 60)

    wb.save(filename)


def write_html(filename: str, html: str):
    with open(filename, "w", encoding="utf-8") as f:
        f.write(html)


def _require_weasy():
    # Imported lazily: WeasyPrint needs system Pango libraries at import time.
    from weasyprint import HTML, CSS
    return HTML, CSS


def write_pdf(filename: str, html: str, page_size: str = "A4"):
    """Render HTML to a PDF file.

    Args:
        filename: Output file name
        html: HTML document
        page_size: CSS page size

    Raises:
        Exception: Whatever WeasyPrint raises when it is unavailable or rendering fails
    """
    HTML, CSS = _require_weasy()
    margins = " ".join(PDF_MARGINS[side] for side in ("top", "right", "bottom", "left"))
    page_css = CSS(string=f"@page {{ size: {page_size}; margin: {margins}; }}")
    HTML(string=html, base_url=os.getcwd()).write_pdf(filename, stylesheets=[page_css])


def open_file(path: str):
    """Open a file with the default application of the OS."""
    if sys.platform == "darwin":
        cmd: List[str] = ["open", path]
    elif sys.platform.startswith("win"):
        os.startfile(path)
        return
    else:
        cmd = ["xdg-open", path]
    subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
