import asyncio
import logging
import uuid
from typing import List

from pydantic import BaseModel

from certtool import config
from certtool.errors import (
    CertToolError,
    CredentialMissing,
    OperationInProgress,
    UnsupportedFileType,
    UploadRejected,
)
from certtool.extract import pdf_to_text
from certtool.llm import extract_from_image, extract_from_text
from certtool.schemas import ExtractedInfo, FileStatus, ProcessedFile
from certtool.state import AppState, StoredDocument

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
IMAGE_MIME_TYPES = ("image/png", "image/jpeg")


class BatchResult(BaseModel):
    started: bool
    completed: int = 0
    failed: int = 0
    message: str = ""


def _base_mime_type(content_type) -> str:
    # "image/png; charset=binary" -> "image/png"
    return (content_type or "").split(";")[0].strip().lower()


def _check_upload(file_name: str, mime_type: str, size: int):
    if size > config.MAX_FILE_SIZE_BYTES:
        raise UploadRejected(f"File exceeds {config.MAX_FILE_SIZE_MB}MB limit.")
    if mime_type not in config.ALLOWED_MIME_TYPES:
        raise UploadRejected(
            f"Invalid file type: {mime_type or 'unknown'}. "
            "Please upload PDF (.pdf), PNG (.png), or JPEG (.jpg) files."
        )


# ------------------ Intake ----------------
def register_upload(state: AppState, file_name: str, content_type, data: bytes) -> ProcessedFile:
    """
    Adds an uploaded document to the session.

    Rejected files are created directly in the error state and never queued.
    The original bytes are kept either way, keyed by the new file id.
    """
    mime_type = _base_mime_type(content_type)
    file_id = f"{file_name}-{uuid.uuid4().hex[:8]}"
    processed_file = ProcessedFile(id=file_id, file_name=file_name, mime_type=mime_type)

    try:
        _check_upload(file_name, mime_type, len(data))
    except UploadRejected as e:
        logger.warning(f"Upload rejected for {file_name}: {e}")
        processed_file.status = FileStatus.ERROR
        processed_file.error_message = str(e)

    state.documents[file_id] = StoredDocument(file_name=file_name, mime_type=mime_type, data=data)
    state.processed_files.append(processed_file)
    return processed_file


# ------------------ Processing ----------------
async def _extract(document: StoredDocument, credential: str) -> ExtractedInfo:
    if document.mime_type == PDF_MIME_TYPE:
        text = await asyncio.to_thread(pdf_to_text, document.data)
        return await extract_from_text(text, credential)
    if document.mime_type in IMAGE_MIME_TYPES:
        return await extract_from_image(document.data, document.mime_type, credential)
    raise UnsupportedFileType(f"Unsupported file type for processing: {document.mime_type}")


async def process_file(state: AppState, processed_file: ProcessedFile) -> bool:
    """Runs one file through extraction. Failures stay on the file, never raised."""
    processed_file.status = FileStatus.PROCESSING
    logger.info(f"Processing {processed_file.file_name}")

    try:
        document = state.documents.get(processed_file.id)
        if document is None:
            raise CertToolError("Original file not found for processing.")
        extracted = await _extract(document, state.credential)
    except Exception as e:
        logger.error(f"Error processing file {processed_file.file_name}: {e}")
        processed_file.status = FileStatus.ERROR
        processed_file.error_message = str(e) or "Failed to process file or extract data."
        return False

    processed_file.report_number = extracted.report_number
    processed_file.certification_date = extracted.certification_date
    processed_file.supplier_registration_number = extracted.supplier_registration_number
    processed_file.extracted_instances = list(extracted.game_instances)
    processed_file.error_message = None
    processed_file.status = FileStatus.COMPLETED
    logger.info(f"Completed {processed_file.file_name}: {len(extracted.game_instances)} game instance(s)")
    return True


def begin_batch(state: AppState) -> List[str]:
    """
    Claims the batch slot and snapshots the ids of every queued file.

    Files uploaded after this call are left for the next batch.
    """
    with state.claim_lock:
        if state.busy:
            raise OperationInProgress("Processing or export is already in progress.")

        queued = state.files_with_status(FileStatus.QUEUED)
        if not state.credential:
            for processed_file in queued:
                processed_file.status = FileStatus.ERROR
                processed_file.error_message = "Credential not set."
            raise CredentialMissing("The API key is not set. Please set it before processing files.")

        snapshot = [f.id for f in queued]
        if snapshot:
            state.batch_running = True
    return snapshot


async def run_batch(state: AppState, snapshot: List[str]) -> BatchResult:
    # One file at a time to stay within the inference rate limits
    completed = failed = 0
    logger.info(f"Batch started with {len(snapshot)} file(s)")
    try:
        for file_id in snapshot:
            processed_file = state.get_file(file_id)
            if processed_file is None or processed_file.status != FileStatus.QUEUED:
                continue
            if await process_file(state, processed_file):
                completed += 1
            else:
                failed += 1
    finally:
        state.batch_running = False

    logger.info(f"Batch finished: {completed} completed, {failed} failed")
    return BatchResult(
        started=True,
        completed=completed,
        failed=failed,
        message=f"Processed {completed + failed} file(s): {completed} completed, {failed} failed.",
    )


async def start_batch(state: AppState) -> BatchResult:
    try:
        snapshot = begin_batch(state)
    except CredentialMissing as e:
        logger.error(str(e))
        return BatchResult(started=False, message=str(e))

    if not snapshot:
        return BatchResult(started=False, message="No files in the queue to process.")
    return await run_batch(state, snapshot)


def clear_all(state: AppState):
    with state.claim_lock:
        if state.busy:
            raise OperationInProgress("Cannot clear data while processing or export is in progress.")
        state.processed_files = []
        state.documents = {}
    logger.info("Cleared all processed files")
