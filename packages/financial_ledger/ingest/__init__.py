"""Row sources that turn uploaded files into candidate transactions."""

from .csv_rows import read_csv_file, read_rows

__all__ = ["read_csv_file", "read_rows"]
