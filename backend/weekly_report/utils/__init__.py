# backend/weekly_report/utils/__init__.py
