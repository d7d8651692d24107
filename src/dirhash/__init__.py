from .record import DuplicateGroup, DuplicateKey, FileRecord
from .grouper import find_duplicates, group_records, select_records
from .report import write_report
from .scanner import Scanner, ScanResult
from .settings import Settings, SettingsError
from .utils.processor import Processor, digest_file
from .utils.walker import collect_files, parse_extensions
