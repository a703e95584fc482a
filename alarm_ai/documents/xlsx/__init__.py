"""Excel helpers for alarm workbooks."""

from .alarm_sheet import AlarmSheet

__all__ = ["AlarmSheet"]
