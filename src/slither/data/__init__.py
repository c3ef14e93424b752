"""Export of tracking results."""

from .csv_writer import CSVWriterThread
from .export import save_summary, worms_to_dataframe

__all__ = ["CSVWriterThread", "save_summary", "worms_to_dataframe"]
