import httpx
import streamlit as st

from src.config import settings
from src.models.domain import LLMProvider


def _list_api_keys() -> list:
    try:
        response = httpx.get(f"{settings.api_base_url}/api-keys", timeout=10.0)
        if response.status_code == 200:
            return response.json()
    except httpx.HTTPError:
        st.warning("⚠️ Could not connect to API. Make sure the FastAPI server is running.")
    return []


def show():
    st.title("🔑 API Key Management")
    st.write("Manage the Gemini API key used for catalog extraction, detection and chat.")
    st.caption("A GEMINI_API_KEY environment variable takes precedence over a stored key.")

    st.markdown("---")

    api_keys = _list_api_keys()

    st.header("Add API Key")
    api_key = st.text_input(
        "Gemini API Key",
        type="password",
        help="Create a key in Google AI Studio",
    )

    if st.button("💾 Save API Key", type="primary"):
        if not api_key:
            st.error("❌ Please enter an API key")
            return

        try:
            with st.spinner("Saving API key..."):
                response = httpx.post(
                    f"{settings.api_base_url}/api-keys",
                    json={"provider": LLMProvider.GEMINI.value, "api_key": api_key},
                    timeout=30.0,
                )
                response.raise_for_status()
                st.success("✅ API key saved successfully!")
                st.rerun()
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (400, 428):
                st.error(f"❌ {e.response.json().get('detail', 'Error saving API key')}")
            else:
                st.error(f"❌ Error saving API key: {e.response.text}")
        except httpx.HTTPError as e:
            st.error(f"❌ Error saving API key: {e}")

    st.markdown("---")
    st.header("Stored API Keys")

    if not api_keys:
        st.info("ℹ️ No API keys stored yet.")
        return

    for key in api_keys:
        with st.container(border=True):
            col1, col2, col3 = st.columns([2, 1, 1])
            with col1:
                st.markdown(f"**Provider:** `{key['provider']}`")
                st.markdown(f"**Status:** {'✅ Active' if key['is_active'] else '❌ Inactive'}")
                st.markdown(f"**Created:** {key['created_at']}")
            with col2:
                if st.button("Toggle Active", key=f"toggle_{key['id']}"):
                    try:
                        response = httpx.put(
                            f"{settings.api_base_url}/api-keys/{key['id']}",
                            json={"is_active": not key["is_active"]},
                            timeout=30.0,
                        )
                        response.raise_for_status()
                        st.rerun()
                    except httpx.HTTPError as e:
                        st.error(f"❌ Error updating API key: {e}")
            with col3:
                if st.button("🗑️ Delete", key=f"delete_{key['id']}"):
                    try:
                        response = httpx.delete(
                            f"{settings.api_base_url}/api-keys/{key['id']}",
                            timeout=30.0,
                        )
                        response.raise_for_status()
                        st.rerun()
                    except httpx.HTTPError as e:
                        st.error(f"❌ Error deleting API key: {e}")

    st.info("ℹ️ API keys are encrypted before storage and never logged or displayed in plaintext.")
