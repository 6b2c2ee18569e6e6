import logging
from typing import Dict, List

from fastapi import BackgroundTasks, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse, StreamingResponse

from certtool import config
from certtool.errors import CredentialMissing, OperationInProgress
from certtool.orchestrator import begin_batch, clear_all, register_upload, run_batch
from certtool.providers import parse_provider_table
from certtool.reconcile import build_com_report, build_export_archive, build_result_rows, build_sheet_report
from certtool.schemas import ProcessedFile, ProviderInfo
from certtool.state import AppState, new_state

logger = logging.getLogger(__name__)

app = FastAPI(title="Certificate Tool")
app.state.session = new_state()


def get_state(request: Request) -> AppState:
    return request.app.state.session


@app.get("/health")
def health():
    return {"status": "ok"}


# ------------------ Credential ----------------
@app.get("/credential")
def credential_status(state: AppState = Depends(get_state)):
    return {"configured": bool(state.credential)}


@app.put("/credential")
def set_credential(api_key: str = Form(...), state: AppState = Depends(get_state)):
    if state.batch_running:
        raise HTTPException(status_code=409, detail="Cannot change the API key while processing.")
    if not api_key.strip():
        raise HTTPException(status_code=400, detail="Please enter a valid API key.")
    state.credential = api_key.strip()
    return {"configured": True}


@app.delete("/credential")
def clear_credential(state: AppState = Depends(get_state)):
    if state.batch_running:
        raise HTTPException(status_code=409, detail="Cannot change the API key while processing.")
    state.credential = None
    return {"configured": False}


# ------------------ Files ----------------
@app.post("/files", response_model=List[ProcessedFile])
async def upload_files(files: List[UploadFile] = File(...), state: AppState = Depends(get_state)):
    created = []
    for upload in files:
        data = await upload.read()
        created.append(register_upload(state, upload.filename, upload.content_type, data))
    logger.info(f"Received {len(created)} upload(s)")
    return created


@app.get("/files", response_model=List[ProcessedFile])
def list_files(state: AppState = Depends(get_state)):
    return state.processed_files


@app.delete("/files")
def clear_files(state: AppState = Depends(get_state)):
    try:
        clear_all(state)
    except OperationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"message": "All data cleared."}


@app.get("/results")
def results(state: AppState = Depends(get_state)):
    return build_result_rows(state.processed_files, state.provider_table)


# ------------------ Processing ----------------
@app.post("/process")
def start_processing(background_tasks: BackgroundTasks, state: AppState = Depends(get_state)):
    try:
        snapshot = begin_batch(state)
    except OperationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CredentialMissing as e:
        return {"queued": 0, "message": str(e)}

    if not snapshot:
        return {"queued": 0, "message": "No files in the queue to process."}

    # Runs after the response is sent; progress is visible through GET /files
    background_tasks.add_task(run_batch, state, snapshot)
    return {"queued": len(snapshot), "message": f"Processing {len(snapshot)} file(s)."}


# ------------------ Provider data ----------------
@app.post("/providers")
def load_providers(data: str = Form(""), state: AppState = Depends(get_state)):
    table, count = parse_provider_table(data)
    state.provider_table = table
    if count > 0:
        message = f"Loaded {count} game provider mapping{'' if count == 1 else 's'}."
    else:
        message = "No valid provider data found or data was empty."
    return {"count": count, "message": message}


@app.get("/providers", response_model=Dict[str, ProviderInfo])
def list_providers(state: AppState = Depends(get_state)):
    return state.provider_table


# ------------------ Export ----------------
@app.get("/export")
def export_zip(state: AppState = Depends(get_state)):
    try:
        result = build_export_archive(state)
    except OperationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))

    if result.archive is None:
        raise HTTPException(status_code=404, detail=result.message)

    return StreamingResponse(
        iter([result.archive]),
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename={config.EXPORT_FILE_NAME}"},
    )


# ------------------ Reports ----------------
@app.get("/report/sheet")
def sheet_report(state: AppState = Depends(get_state)):
    result = build_sheet_report(state.processed_files, state.provider_table)
    if result.text is None:
        raise HTTPException(status_code=404, detail=result.message)
    return PlainTextResponse(result.text, media_type="text/tab-separated-values")


@app.get("/report/com")
def com_report(state: AppState = Depends(get_state)):
    result = build_com_report(state.processed_files, state.provider_table)
    if result.text is None:
        raise HTTPException(status_code=404, detail=result.message)
    return PlainTextResponse(result.text, media_type="text/tab-separated-values")
