import io
import logging
import posixpath
import zipfile
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import pandas as pd

from certtool.errors import OperationInProgress
from certtool.normalize import clean_game_name_for_display, normalize_game_name
from certtool.schemas import FileStatus, GameInstanceData, ProcessedFile, ProviderInfo
from certtool.state import AppState

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
NOT_AVAILABLE = "N/A"

# IMS code suffix -> provider, used when the game is missing from the provider table
CODE_SUFFIX_PROVIDERS = (
    ("_mcg", "Games Global"),
    ("_prg", "Pragmatic"),
)

SHEET_COLUMNS = [
    "GameName", "GameCodes", "Progressive", "CertificateRef", "Date",
    "SupplierRegistrationnumber", "Deactivated", "FileList", "HashList",
]
COM_COLUMNS = ["Game Name", "IMS Game Code", "Certificate Number", "Portal Live Date"]


@dataclass
class ExportResult:
    archive: Optional[bytes]
    file_count: int
    folders: Dict[str, int] = field(default_factory=dict)
    message: str = ""


@dataclass
class ReportResult:
    text: Optional[str]
    rows: int
    message: str = ""


def _completed(files: Iterable[ProcessedFile]) -> List[ProcessedFile]:
    return [f for f in files if f.status == FileStatus.COMPLETED]


# ------------------ Game codes ----------------
def build_authoritative_codes(files: Iterable[ProcessedFile], table: Dict[str, ProviderInfo]) -> Dict[str, str]:
    """
    Normalized game name -> IMS game code.

    Provider table codes always win. Codes found by extraction only fill keys
    the table has no code for, and the first one seen (file order, then
    instance order) is kept.
    """
    codes = {key: info.ims_game_code for key, info in table.items() if info.ims_game_code}

    for processed_file in _completed(files):
        for instance in processed_file.extracted_instances:
            key = normalize_game_name(instance.game_name)
            if key and key not in codes and instance.game_code:
                codes[key] = instance.game_code
    return codes


# ------------------ Providers ----------------
def resolve_provider(instance: GameInstanceData, table: Dict[str, ProviderInfo]) -> Optional[str]:
    info = table.get(normalize_game_name(instance.game_name))
    if info and info.provider.strip():
        return info.provider.strip()

    game_code = instance.game_code or ""
    for suffix, provider in CODE_SUFFIX_PROVIDERS:
        if game_code.endswith(suffix):
            return provider
    return None


def resolve_group(processed_file: ProcessedFile, table: Dict[str, ProviderInfo]) -> str:
    # First instance with a provider decides the folder
    for instance in processed_file.extracted_instances:
        provider = resolve_provider(instance, table)
        if provider:
            return provider
    return UNCATEGORIZED


def partition_files(files: Iterable[ProcessedFile], table: Dict[str, ProviderInfo]) -> Dict[str, List[ProcessedFile]]:
    groups: Dict[str, List[ProcessedFile]] = {}
    for processed_file in _completed(files):
        groups.setdefault(resolve_group(processed_file, table), []).append(processed_file)
    return groups


# ------------------ ZIP export ----------------
def _safe_folder(provider: str) -> str:
    # Provider names come from pasted text; keep each one a single top-level folder
    folder = provider.replace("/", "_").replace("\\", "_").replace("..", "_").strip()
    return folder or UNCATEGORIZED


def _unique_arcname(folder: str, file_name: str, used: set) -> str:
    arcname = posixpath.join(folder, file_name)
    stem, ext = posixpath.splitext(file_name)
    counter = 1
    while arcname in used:
        arcname = posixpath.join(folder, f"{stem} ({counter}){ext}")
        counter += 1
    used.add(arcname)
    return arcname


def build_export_archive(state: AppState) -> ExportResult:
    """
    Writes every completed file into GameCertificatesByProvider.zip, one
    folder per provider. Each file is written exactly once.
    """
    with state.claim_lock:
        if state.busy:
            raise OperationInProgress("Cannot export while processing or another export is in progress.")
        state.export_running = True

    try:
        groups = partition_files(state.processed_files, state.provider_table)
        folders: Dict[str, int] = {}
        used = set()
        buffer = io.BytesIO()

        with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
            for folder, group_files in groups.items():
                for processed_file in group_files:
                    document = state.documents.get(processed_file.id)
                    if document is None:
                        logger.warning(f"Original file missing for {processed_file.file_name}, skipped")
                        continue
                    arcname = _unique_arcname(_safe_folder(folder), document.file_name, used)
                    zf.writestr(arcname, document.data)
                    folders[folder] = folders.get(folder, 0) + 1
    finally:
        state.export_running = False

    file_count = sum(folders.values())
    if file_count == 0:
        return ExportResult(archive=None, file_count=0, message="No completed files to export.")

    logger.info(f"Exported {file_count} file(s) into {len(folders)} folder(s)")
    return ExportResult(
        archive=buffer.getvalue(),
        file_count=file_count,
        folders=folders,
        message=f"Successfully exported {file_count} file(s) in ZIP.",
    )


# ------------------ Clipboard reports ----------------
def _display_hash(file_detail) -> str:
    return file_detail.md5 or file_detail.sha1 or NOT_AVAILABLE


def _format_list(items) -> str:
    # Quoted so the comma list stays one cell when pasted into a sheet
    content = ", ".join(item for item in items if item)
    if not content:
        return NOT_AVAILABLE
    return '"' + content.replace('"', '""') + '"'


def _report_date(processed_file: ProcessedFile, info: Optional[ProviderInfo]) -> str:
    # Portal live date from the board first, certificate date otherwise
    if info and info.portal_live_date:
        return info.portal_live_date
    return processed_file.certification_date or NOT_AVAILABLE


def _instances_or_placeholder(processed_file: ProcessedFile) -> List[GameInstanceData]:
    return processed_file.extracted_instances or [GameInstanceData()]


def _to_tsv(df: pd.DataFrame) -> str:
    # Cells are written as-is; FileList and HashList carry their own quoting
    lines = ["\t".join(df.columns)]
    lines += ["\t".join(row) for row in df.astype(str).itertuples(index=False, name=None)]
    return "\n".join(lines)


def build_sheet_report(files: List[ProcessedFile], table: Dict[str, ProviderInfo]) -> ReportResult:
    """One row per (completed file, game instance) for the tracking sheet."""
    completed = _completed(files)
    if not completed:
        return ReportResult(text=None, rows=0, message="No completed data available to copy.")

    codes = build_authoritative_codes(files, table)
    rows = []
    for processed_file in completed:
        for instance in _instances_or_placeholder(processed_file):
            key = normalize_game_name(instance.game_name)
            rows.append({
                "GameName": clean_game_name_for_display(instance.game_name),
                "GameCodes": codes.get(key, NOT_AVAILABLE),
                "Progressive": "",
                "CertificateRef": processed_file.report_number or NOT_AVAILABLE,
                "Date": _report_date(processed_file, table.get(key)),
                "SupplierRegistrationnumber": processed_file.supplier_registration_number or NOT_AVAILABLE,
                "Deactivated": "",
                "FileList": _format_list(f.name for f in instance.files),
                "HashList": _format_list(_display_hash(f) for f in instance.files),
            })

    df = pd.DataFrame(rows, columns=SHEET_COLUMNS)
    return ReportResult(text=_to_tsv(df), rows=len(df), message=f"Copied {len(df)} row(s).")


def build_com_report(files: List[ProcessedFile], table: Dict[str, ProviderInfo]) -> ReportResult:
    """
    One row per game for the .COM process.

    Rows are deduplicated by display name (last occurrence wins) and sorted
    by provider, then game name.
    """
    completed = _completed(files)
    if not completed:
        return ReportResult(text=None, rows=0, message="No completed data to copy for .COM process.")

    codes = build_authoritative_codes(files, table)
    rows = []
    for processed_file in completed:
        for instance in _instances_or_placeholder(processed_file):
            key = normalize_game_name(instance.game_name)
            rows.append({
                "Provider": resolve_provider(instance, table) or UNCATEGORIZED,
                "Game Name": clean_game_name_for_display(instance.game_name),
                "IMS Game Code": codes.get(key, NOT_AVAILABLE),
                "Certificate Number": processed_file.report_number or NOT_AVAILABLE,
                "Portal Live Date": _report_date(processed_file, table.get(key)),
            })

    df = pd.DataFrame(rows)
    df = df.drop_duplicates(subset="Game Name", keep="last")
    df = df.sort_values(by=["Provider", "Game Name"], key=lambda col: col.str.lower(), kind="stable")
    df = df[COM_COLUMNS]
    return ReportResult(text=_to_tsv(df), rows=len(df), message=f"Copied {len(df)} row(s).")


# ------------------ Results table ----------------
def build_result_rows(files: List[ProcessedFile], table: Dict[str, ProviderInfo]) -> List[dict]:
    """Flat rows for the results table: one per game instance, one per file without instances."""
    codes = build_authoritative_codes(files, table)
    rows = []
    for processed_file in files:
        instances = processed_file.extracted_instances or [None]
        for instance in instances:
            key = normalize_game_name(instance.game_name) if instance else ""
            rows.append({
                "id": processed_file.id,
                "fileName": processed_file.file_name,
                "status": processed_file.status.value,
                "errorMessage": processed_file.error_message,
                "reportNumber": processed_file.report_number,
                "gameName": clean_game_name_for_display(instance.game_name) if instance else NOT_AVAILABLE,
                "provider": (resolve_provider(instance, table) if instance else None) or NOT_AVAILABLE,
                "imsGameCode": codes.get(key, NOT_AVAILABLE) if key else NOT_AVAILABLE,
                "fileCount": len(instance.files) if instance else 0,
            })
    return rows
