"""Pytest configuration and shared fixtures."""
import pytest
from typing import Callable, Dict, List, Optional
from unittest.mock import Mock

from certtool.schemas import (
    ExtractedInfo,
    FileDetail,
    FileStatus,
    GameInstanceData,
    ProcessedFile,
    ProviderInfo,
)
from certtool.state import AppState, StoredDocument


@pytest.fixture
def state() -> AppState:
    """Provide an empty session with a credential set."""
    return AppState(credential="hf_test_key")


@pytest.fixture
def sample_extracted_info() -> ExtractedInfo:
    return ExtractedInfo(
        report_number="MO-374-GBM-25-17-652",
        certification_date="2025-04-25",
        supplier_registration_number="GRSM1241574",
        game_instances=[
            GameInstanceData(
                game_name="Mega Fortune™",
                game_code="megafortune_mcg",
                files=[FileDetail(name="mega.dll", md5="abc123")],
            )
        ],
    )


@pytest.fixture
def sample_raw_extraction() -> Dict:
    """Model output as it arrives on the wire (camelCase)."""
    return {
        "reportNumber": "MO-374-GBM-25-17-652",
        "certificationDate": "2025-04-25",
        "supplierRegistrationNumber": "GRSM1241574",
        "gameInstances": [
            {
                "gameName": "Mega Fortune",
                "gameCode": None,
                "files": [{"name": "mega.dll", "md5": "abc123", "sha1": None}],
            }
        ],
    }


@pytest.fixture
def provider_table() -> Dict[str, ProviderInfo]:
    return {
        "mega fortune": ProviderInfo(provider="Acme", portal_live_date="2025-05-01", ims_game_code="A"),
        "starburst": ProviderInfo(provider="Acme", portal_live_date=None, ims_game_code=None),
        "big bass": ProviderInfo(provider="Reel Co", portal_live_date=None, ims_game_code="bigbass_prg"),
    }


@pytest.fixture
def make_completed_file() -> Callable[..., ProcessedFile]:
    """Build a completed ProcessedFile from (game_name, game_code) pairs."""
    counter = {"n": 0}

    def _make(
        *instances,
        file_name: Optional[str] = None,
        report_number: Optional[str] = "R-1",
        certification_date: Optional[str] = "2025-01-01",
        status: FileStatus = FileStatus.COMPLETED,
        files: Optional[List[FileDetail]] = None,
    ) -> ProcessedFile:
        counter["n"] += 1
        name = file_name or f"cert{counter['n']}.pdf"
        return ProcessedFile(
            id=f"{name}-{counter['n']}",
            file_name=name,
            mime_type="application/pdf",
            status=status,
            report_number=report_number,
            certification_date=certification_date,
            extracted_instances=[
                GameInstanceData(game_name=game_name, game_code=game_code, files=files or [])
                for game_name, game_code in instances
            ],
        )

    return _make


@pytest.fixture
def add_to_state():
    """Put processed files and their original bytes into a session."""
    def _add(state: AppState, *processed_files: ProcessedFile) -> AppState:
        for processed_file in processed_files:
            state.processed_files.append(processed_file)
            state.documents[processed_file.id] = StoredDocument(
                file_name=processed_file.file_name,
                mime_type=processed_file.mime_type,
                data=f"bytes of {processed_file.file_name}".encode(),
            )
        return state

    return _add


@pytest.fixture
def chat_response() -> Callable[[str], Mock]:
    """Build an object shaped like a chat completion response."""
    def _make(content: str) -> Mock:
        response = Mock()
        response.choices = [Mock()]
        response.choices[0].message.content = content
        return response

    return _make
