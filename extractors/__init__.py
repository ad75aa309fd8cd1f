from .utils import format_number, normalize_report_name, parse_number

__all__ = ["format_number", "parse_number", "normalize_report_name"]
