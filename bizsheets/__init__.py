"""
BizSheets - business records kept in a Google spreadsheet.
"""
__version__ = "1.0.0"
