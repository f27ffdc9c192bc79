"""Excel export for the filtered lists shown on the dashboard"""

import logging
from io import BytesIO

import pandas as pd
from fastapi.responses import StreamingResponse
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="4F46E5", end_color="4F46E5", fill_type="solid")
THIN = Side(style="thin", color="000000")
CELL_BORDER = Border(top=THIN, bottom=THIN, left=THIN, right=THIN)


def build_workbook(rows: list[dict], columns: list[tuple[str, int]], sheet_name: str) -> bytes:
    """
    Render rows into a single-sheet workbook.

    Args:
        rows: One dict per line, keyed by column title
        columns: (title, width in characters) in display order
        sheet_name: Worksheet title

    Returns:
        The .xlsx file content
    """
    titles = [title for title, _ in columns]
    frame = pd.DataFrame(rows, columns=titles)

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
        sheet = writer.sheets[sheet_name]

        for index, (_, width) in enumerate(columns, start=1):
            sheet.column_dimensions[get_column_letter(index)].width = width

        for cell in sheet[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center", vertical="center")

        for row in sheet.iter_rows(min_row=1, max_row=sheet.max_row, max_col=len(columns)):
            for cell in row:
                cell.border = CELL_BORDER

    logger.info(f"📊 Workbook '{sheet_name}' built with {len(rows)} rows")
    return buffer.getvalue()


def xlsx_response(content: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )
