from .maintenance import CSV_HEADERS, Maintenance, WipeSummary, export_filename

__all__ = ["CSV_HEADERS", "Maintenance", "WipeSummary", "export_filename"]
