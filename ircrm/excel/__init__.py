"""Spreadsheet handling: reading, header mapping, cell normalization, writing."""
