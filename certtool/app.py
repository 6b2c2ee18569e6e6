import streamlit as st
import requests
import pandas as pd

from certtool import config

API = config.API_URL

st.set_page_config(page_title="Certificate Tool", layout="wide")

st.title("📄 Certificate Tool")
st.caption("Upload PDFs or images, map games to providers, and export organized certificates.")


def show_error(response):
    try:
        detail = response.json().get("detail", response.text)
    except ValueError:
        detail = response.text
    st.error(f"Error: {detail}")


# --- STEP 1: API KEY ---
with st.sidebar:
    st.header("API Key")
    status = requests.get(f"{API}/credential").json()
    if status["configured"]:
        st.success("API key is set for this session.")
        if st.button("Change Key"):
            requests.delete(f"{API}/credential")
            st.rerun()
    else:
        api_key = st.text_input("Inference API key", type="password")
        if st.button("Save Key", type="primary"):
            response = requests.put(f"{API}/credential", data={"api_key": api_key})
            if response.ok:
                st.rerun()
            else:
                show_error(response)

# --- STEP 2: PROVIDER DATA ---
st.subheader("Game Provider Data")
pasted = st.text_area(
    "Paste the board export (tab-separated: Name, Game Provider, _, Portal Live Date, _, IMS Game Code)",
    height=150,
)
if st.button("Load Provider Data"):
    response = requests.post(f"{API}/providers", data={"data": pasted})
    st.info(response.json()["message"])

# --- STEP 3: UPLOAD & PROCESS ---
st.subheader("Certificates")
uploads = st.file_uploader("Upload PDF / PNG / JPEG files", type=["pdf", "png", "jpg", "jpeg"], accept_multiple_files=True)
if uploads and st.button("Add to queue"):
    files = [("files", (f.name, f.getvalue(), f.type)) for f in uploads]
    response = requests.post(f"{API}/files", files=files)
    if not response.ok:
        show_error(response)

files_state = requests.get(f"{API}/files").json()
queued = sum(1 for f in files_state if f["status"] == "queued")

if st.button(f"▶ Start Processing Queued Files ({queued})", disabled=queued == 0):
    response = requests.post(f"{API}/process")
    if response.ok:
        st.info(response.json()["message"])
    else:
        show_error(response)

# --- STEP 4: RESULTS ---
st.divider()
st.subheader("Processing Results")
if st.button("🔄 Refresh"):
    st.rerun()

rows = requests.get(f"{API}/results").json()
if rows:
    df = pd.DataFrame(rows)
    st.dataframe(
        df[["fileName", "gameName", "provider", "imsGameCode", "reportNumber", "status", "errorMessage"]],
        use_container_width=True,
    )

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        if st.button("🗑 Clear All"):
            response = requests.delete(f"{API}/files")
            if response.ok:
                st.session_state.pop("export_zip", None)
                st.rerun()
            else:
                show_error(response)
    with col2:
        # The archive is built only on request; each build briefly holds the export slot
        if st.button("📦 Export ZIP"):
            response = requests.get(f"{API}/export")
            if response.ok:
                st.session_state["export_zip"] = response.content
            else:
                st.session_state.pop("export_zip", None)
                show_error(response)
        if "export_zip" in st.session_state:
            st.download_button(
                "⬇ Download ZIP",
                st.session_state["export_zip"],
                file_name=config.EXPORT_FILE_NAME,
                mime="application/zip",
            )
    with col3:
        st.caption("Copy for Sheet")
        response = requests.get(f"{API}/report/sheet")
        if response.ok:
            st.code(response.text, language=None)
    with col4:
        st.caption("Copy for .COM")
        response = requests.get(f"{API}/report/com")
        if response.ok:
            st.code(response.text, language=None)
