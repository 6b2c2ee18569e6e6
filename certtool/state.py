import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from certtool import config
from certtool.schemas import FileStatus, ProcessedFile, ProviderInfo


@dataclass(frozen=True)
class StoredDocument:
    file_name: str
    mime_type: str
    data: bytes


@dataclass
class AppState:
    """
    Everything one operator session works on.

    Writers: the orchestrator owns processed_files/documents during a batch,
    the provider endpoint replaces provider_table as a whole.
    """
    credential: Optional[str] = None
    processed_files: List[ProcessedFile] = field(default_factory=list)
    documents: Dict[str, StoredDocument] = field(default_factory=dict)
    provider_table: Dict[str, ProviderInfo] = field(default_factory=dict)
    batch_running: bool = False
    export_running: bool = False
    # Held while checking busy and setting a running flag
    claim_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def busy(self) -> bool:
        return self.batch_running or self.export_running

    def get_file(self, file_id: str) -> Optional[ProcessedFile]:
        return next((f for f in self.processed_files if f.id == file_id), None)

    def files_with_status(self, status: FileStatus) -> List[ProcessedFile]:
        return [f for f in self.processed_files if f.status == status]


def new_state() -> AppState:
    return AppState(credential=config.HF_TOKEN or None)
