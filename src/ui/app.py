import httpx
import streamlit as st

from src.config import settings

st.set_page_config(
    page_title="Supplier Catalog Extractor",
    page_icon="📦",
    layout="wide",
)


def credentials_configured() -> bool:
    try:
        response = httpx.get(f"{settings.api_base_url}/api-keys/status", timeout=10.0)
        response.raise_for_status()
        return bool(response.json().get("configured"))
    except httpx.HTTPError:
        st.sidebar.warning("⚠️ Could not connect to API. Make sure the FastAPI server is running.")
        return True


page = st.sidebar.radio(
    "Navigate",
    ["Extract", "Results", "API Keys"],
)

if page != "API Keys" and not credentials_configured():
    st.title("🔑 Gemini API key required")
    st.error(
        "No Gemini API key is configured. Set GEMINI_API_KEY in the environment "
        "or add a key on the API Keys page before extracting catalogs."
    )
    st.stop()

if page == "Extract":
    from src.ui.pages import extract
    extract.show()
elif page == "Results":
    from src.ui.pages import results
    results.show()
elif page == "API Keys":
    from src.ui.pages import api_keys
    api_keys.show()
