"""
Input boundary: decodes spreadsheets into validated ``RawRecord`` lists.

Modules
-------
workbook : read_workbook() + records_from_rows() + WorkbookError hierarchy.
"""
