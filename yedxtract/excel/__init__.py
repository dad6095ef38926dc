"""Excel workbook export and import."""

from .workbook import create_xlsx, import_xlsx

__all__ = ["create_xlsx", "import_xlsx"]
