"""Pipeline orchestration: import, export, progress and summary rendering."""
