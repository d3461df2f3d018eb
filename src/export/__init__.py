"""
Report Export Module
"""
from .csv_export import ExportType, export_csv, export_dataframe

__all__ = ["ExportType", "export_csv", "export_dataframe"]
