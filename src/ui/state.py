import streamlit as st

from src.services.app_state import AppState

STATE_KEY = "app_state"


def get_state() -> AppState:
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = AppState()
    return st.session_state[STATE_KEY]


def set_state(state: AppState) -> AppState:
    st.session_state[STATE_KEY] = state
    return state
