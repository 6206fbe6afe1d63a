from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pandas as pd

from scheduling.class_scheduler import format_batch_timetable, format_faculty_timetable
from scheduling.exam_scheduler import batch_column_labels, format_exam_timetable, format_schedule_as_rows
from scheduling.models import Batch, ExamScheduleEntry, Faculty, ScheduleEntry, TimeGrid


def schedule_entries_df(entries: Sequence[ScheduleEntry]) -> pd.DataFrame:
    """Flat, one-row-per-class table."""

    return pd.DataFrame([e.as_row() for e in entries])


def exam_entries_df(entries: Sequence[ExamScheduleEntry]) -> pd.DataFrame:
    return pd.DataFrame(format_schedule_as_rows(entries))


def faculty_workload_df(entries: Sequence[ScheduleEntry], faculty: Sequence[Faculty]) -> pd.DataFrame:
    """Weekly teaching load per faculty member.

    "Expert" counts classes in one of the member's expertise subjects; the rest
    are fallback assignments made when no expert was free.
    """

    rows = {}
    for fac in faculty:
        rows[fac.faculty_id] = {
            "faculty_id": fac.faculty_id,
            "name": fac.name,
            "Expert": 0,
            "Fallback": 0,
            "Batches": set(),
        }

    for e in entries:
        if e.faculty_id not in rows:
            rows[e.faculty_id] = {
                "faculty_id": e.faculty_id,
                "name": e.faculty_name,
                "Expert": 0,
                "Fallback": 0,
                "Batches": set(),
            }
        fac = next((f for f in faculty if f.faculty_id == e.faculty_id), None)
        bucket = "Expert" if fac is not None and fac.is_expert_in(e.subject_id) else "Fallback"
        rows[e.faculty_id][bucket] += 1
        if e.batch_id is not None:
            rows[e.faculty_id]["Batches"].add(e.batch_id)

    for r in rows.values():
        r["Batches"] = ", ".join(sorted(r["Batches"]))

    out = pd.DataFrame(list(rows.values()))
    if out.empty:
        return out

    out["Total"] = out["Expert"] + out["Fallback"]
    return out.sort_values(["Total", "faculty_id"], ascending=[False, True]).reset_index(drop=True)


def _safe_sheet_name(name: str) -> str:
    """Excel sheet names: max 31 chars, cannot contain: `: \\ / ? * [ ]`."""

    bad = [":", "\\", "/", "?", "*", "[", "]"]
    out = str(name or "Sheet")
    for b in bad:
        out = out.replace(b, "-")
    out = out.strip() or "Sheet"
    return out[:31]


def _timetable_df_from_table(*, time_grid: TimeGrid, table: list[list[str]]) -> pd.DataFrame:
    """Convert a (days x teaching periods) table into a spreadsheet-style DataFrame.

    Break periods come back as labeled, empty spacer columns at their position
    in the day.
    """

    columns: list[str] = []
    col_map: list[int | None] = []  # None => break column
    teaching_idx = 0
    for p in time_grid.periods:
        label = p.label
        # pandas tolerates duplicate names, but spreadsheets read better without them
        while label in columns:
            label = f"{label} "
        columns.append(label)
        if p.is_break:
            col_map.append(None)
        else:
            col_map.append(teaching_idx)
            teaching_idx += 1

    out_rows: list[list[str]] = []
    for row in table:
        out_rows.append(["" if c is None else row[c] for c in col_map])

    df = pd.DataFrame(out_rows, columns=columns)
    df.insert(0, "DAY", list(time_grid.days))
    return df


def batch_timetable_df(
    *,
    entries: Sequence[ScheduleEntry],
    time_grid: TimeGrid,
    batch_id: Optional[str] = None,
) -> pd.DataFrame:
    """Per-batch timetable DataFrame suitable for Excel export."""

    table = format_batch_timetable(entries, time_grid, batch_id)
    return _timetable_df_from_table(time_grid=time_grid, table=table)


def faculty_timetable_df(*, entries: Sequence[ScheduleEntry], time_grid: TimeGrid, faculty_id: str) -> pd.DataFrame:
    """Individual staff timetable DataFrame suitable for Excel export."""

    table = format_faculty_timetable(entries, time_grid, faculty_id)
    return _timetable_df_from_table(time_grid=time_grid, table=table)


def exam_timetable_df(entries: Sequence[ExamScheduleEntry], batches: Sequence[Batch]) -> pd.DataFrame:
    """Date/session rows with one column per batch."""

    rows = format_exam_timetable(entries, batches)
    columns = ["date", "session", "time"] + list(batch_column_labels(batches).values())
    return pd.DataFrame(rows, columns=columns)


def _batch_ids(entries: Sequence[ScheduleEntry], batches: Sequence[Batch]) -> list[Optional[str]]:
    ids = [b.batch_id for b in batches if any(e.batch_id == b.batch_id for e in entries)]
    return ids or [None]


def class_reports_workbook_bytes(
    *,
    entries: Sequence[ScheduleEntry],
    time_grid: TimeGrid,
    batches: Sequence[Batch] = (),
    faculty: Sequence[Faculty] = (),
) -> bytes:
    """Build a multi-sheet Excel workbook for a generated class schedule.

    Includes:
    - Staff workload breakdown
    - One sheet per batch (a single "Timetable" sheet for single-group output)
    - One sheet per faculty member who teaches at least one class
    """

    # Pandas uses openpyxl to write .xlsx by default.
    out = io.BytesIO()
    names = {b.batch_id: b.name for b in batches}

    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        faculty_workload_df(entries, faculty).to_excel(writer, sheet_name=_safe_sheet_name("Staff Workload"), index=False)

        for bid in _batch_ids(entries, batches):
            df = batch_timetable_df(entries=entries, time_grid=time_grid, batch_id=bid)
            sheet = _safe_sheet_name(names.get(bid, bid) if bid is not None else "Timetable")
            df.to_excel(writer, sheet_name=sheet, index=False)

        teaching = sorted({e.faculty_id for e in entries})
        for fid in teaching:
            df = faculty_timetable_df(entries=entries, time_grid=time_grid, faculty_id=fid)
            df.to_excel(writer, sheet_name=_safe_sheet_name(f"Staff-{fid}"), index=False)

    return out.getvalue()


def class_reports_zip_bytes(
    *,
    entries: Sequence[ScheduleEntry],
    time_grid: TimeGrid,
    batches: Sequence[Batch] = (),
    faculty: Sequence[Faculty] = (),
) -> bytes:
    """Create a ZIP containing the workbook plus CSV tables and per-batch/per-staff timetables."""

    wb = class_reports_workbook_bytes(entries=entries, time_grid=time_grid, batches=batches, faculty=faculty)

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED) as z:
        z.writestr("class_reports.xlsx", wb)
        z.writestr("tables/schedule_entries.csv", schedule_entries_df(entries).to_csv(index=False).encode("utf-8"))
        z.writestr(
            "tables/staff_workload.csv",
            faculty_workload_df(entries, faculty).to_csv(index=False).encode("utf-8"),
        )

        for bid in _batch_ids(entries, batches):
            df = batch_timetable_df(entries=entries, time_grid=time_grid, batch_id=bid)
            z.writestr(f"timetables/batches/{bid or 'timetable'}.csv", df.to_csv(index=False).encode("utf-8"))

        for fid in sorted({e.faculty_id for e in entries}):
            df = faculty_timetable_df(entries=entries, time_grid=time_grid, faculty_id=fid)
            z.writestr(f"timetables/staff/{fid}.csv", df.to_csv(index=False).encode("utf-8"))

    return buf.getvalue()


def df_to_markdown(df: pd.DataFrame) -> str:
    """Convert DataFrame to a GitHub-flavored Markdown table."""

    # pandas to_markdown needs tabulate; a table this simple does not.
    cols = list(df.columns)
    rows = df.astype(str).values.tolist()

    def esc(s: str) -> str:
        return str(s).replace("\n", " ").replace("|", "\\|")

    header = "| " + " | ".join(esc(c) for c in cols) + " |"
    sep = "| " + " | ".join(["---"] * len(cols)) + " |"
    body = ["| " + " | ".join(esc(v) for v in r) + " |" for r in rows]
    return "\n".join([header, sep] + body) + "\n"


@dataclass(frozen=True)
class TimetableImageOptions:
    title: Optional[str] = None
    font_size: int = 8
    # inches per timetable column / per row
    column_width: float = 1.3
    row_height: float = 0.45
    header_color: str = "#dbe4f0"
    break_color: str = "#eeeeee"
    dpi: int = 150


def _break_columns(time_grid: TimeGrid) -> List[int]:
    # DataFrame column positions; +1 for the leading DAY column
    return [i + 1 for i, p in enumerate(time_grid.periods) if p.is_break]


def timetable_png_bytes(
    df: pd.DataFrame,
    *,
    time_grid: Optional[TimeGrid] = None,
    options: TimetableImageOptions = TimetableImageOptions(),
) -> bytes:
    """Render a batch or faculty timetable DataFrame as a PNG image.

    `df` is the output of `batch_timetable_df` / `faculty_timetable_df` (or any
    table with a leading DAY column). With `time_grid` given, break spacer
    columns are shaded and headed with the break name only.
    """

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    nrows, ncols = df.shape
    breaks = set(_break_columns(time_grid)) if time_grid is not None else set()

    # "09:00-09:50" reads better split over two lines in a narrow header
    headers = []
    for i, c in enumerate(df.columns):
        label = str(c).strip()
        headers.append(label if i in breaks else label.replace("-", "-\n", 1))
    cells = [["" if v is None else str(v).replace(" / ", "\n") for v in row] for row in df.values.tolist()]

    fig, ax = plt.subplots(
        figsize=(max(4.0, options.column_width * ncols), max(1.5, options.row_height * (nrows + 2)))
    )
    ax.axis("off")
    if options.title:
        ax.set_title(options.title, fontsize=options.font_size + 3, pad=10)

    tbl = ax.table(cellText=cells, colLabels=headers, cellLoc="center", loc="center")
    tbl.auto_set_font_size(False)
    tbl.set_fontsize(options.font_size)
    tbl.scale(1.0, 1.8)

    for (r, c), cell in tbl.get_celld().items():
        cell.set_linewidth(0.5)
        if r == 0 or c == 0:
            cell.set_facecolor(options.header_color)
            cell.set_text_props(weight="bold")
        elif c in breaks:
            cell.set_facecolor(options.break_color)

    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=options.dpi, bbox_inches="tight")
    plt.close(fig)
    return buf.getvalue()
