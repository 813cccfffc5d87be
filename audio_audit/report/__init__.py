from .csv_report import (
    remove_inconclusive_csv,
    report_path,
    write_inconclusive_csv,
    write_missing_csv,
)

__all__ = [
    "report_path",
    "write_missing_csv",
    "write_inconclusive_csv",
    "remove_inconclusive_csv",
]
