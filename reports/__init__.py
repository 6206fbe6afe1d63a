"""Tabular exports for generated schedules (DataFrames, XLSX, CSV, Markdown, PNG)."""

from .timetable_export import (
    TimetableImageOptions,
    batch_timetable_df,
    class_reports_workbook_bytes,
    class_reports_zip_bytes,
    df_to_markdown,
    exam_entries_df,
    exam_timetable_df,
    faculty_timetable_df,
    faculty_workload_df,
    schedule_entries_df,
    timetable_png_bytes,
)

__all__ = [
    "TimetableImageOptions",
    "batch_timetable_df",
    "class_reports_workbook_bytes",
    "class_reports_zip_bytes",
    "df_to_markdown",
    "exam_entries_df",
    "exam_timetable_df",
    "faculty_timetable_df",
    "faculty_workload_df",
    "schedule_entries_df",
    "timetable_png_bytes",
]
