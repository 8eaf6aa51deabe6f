"""IR CRM spreadsheet import/export pipeline."""

__version__ = "0.1.0"
