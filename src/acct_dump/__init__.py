"""Account Dump - batch classification of raw account records."""
from .records import RecordScanner, compile_accounts_table

__all__ = ["RecordScanner", "compile_accounts_table"]
