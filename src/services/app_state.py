"""Application state for the browser UI.

One ``AppState`` value is owned by the UI session. It is never mutated: every
transition below returns a new value, which keeps the aggregate catalog, the
view selections and the chat log consistent with each other.
"""

from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Tuple

from src.models.catalog import Catalog, CatalogSummary, ChatMessage, ChatRole, DetectionResult, ScrapeProgress
from src.models.domain import OCRQuality, SortOption, ViewMode
from src.services.catalog_view import derive_view, has_active_filters, summarize
from src.services.chat_session import CHAT_ERROR_TEMPLATE


@dataclass(frozen=True)
class AppState:
    catalog: Optional[Catalog] = None
    loading: bool = False
    progress: Optional[ScrapeProgress] = None
    error: Optional[str] = None

    selected_categories: FrozenSet[str] = frozenset()
    search_query: str = ""
    sort_option: SortOption = SortOption.DEFAULT
    view_mode: ViewMode = ViewMode.GRID

    is_detecting: bool = False
    detection_results: Optional[Tuple[DetectionResult, ...]] = None

    chat_history: Tuple[ChatMessage, ...] = field(default_factory=tuple)
    is_chatting: bool = False

    ocr_quality: OCRQuality = OCRQuality.HIGH


def reset_view(state: AppState) -> AppState:
    return replace(state, selected_categories=frozenset(), search_query="", sort_option=SortOption.DEFAULT)


def start_run(state: AppState) -> AppState:
    state = reset_view(state)
    return replace(
        state,
        loading=True,
        progress=None,
        error=None,
        catalog=None,
        detection_results=None,
        chat_history=(),
        is_chatting=False,
    )


def update_progress(state: AppState, progress: ScrapeProgress) -> AppState:
    return replace(state, progress=progress)


def finish_run(state: AppState, catalog: Catalog) -> AppState:
    return replace(state, loading=False, progress=None, catalog=catalog)


def fail_run(state: AppState, message: str, partial_catalog: Optional[Catalog] = None) -> AppState:
    return replace(state, loading=False, progress=None, error=message, catalog=partial_catalog)


def start_detection(state: AppState) -> AppState:
    return replace(state, is_detecting=True, detection_results=None, error=None)


def finish_detection(state: AppState, results: List[DetectionResult]) -> AppState:
    return replace(state, is_detecting=False, detection_results=tuple(results))


def fail_detection(state: AppState, message: str) -> AppState:
    return replace(state, is_detecting=False, error=message)


def toggle_category(state: AppState, name: str) -> AppState:
    selected = set(state.selected_categories)
    if name in selected:
        selected.remove(name)
    else:
        selected.add(name)
    return replace(state, selected_categories=frozenset(selected))


def set_selected_categories(state: AppState, names: List[str]) -> AppState:
    return replace(state, selected_categories=frozenset(names))


def clear_filters(state: AppState) -> AppState:
    return replace(state, selected_categories=frozenset())


def set_search(state: AppState, query: str) -> AppState:
    return replace(state, search_query=query)


def set_sort(state: AppState, sort_option: SortOption) -> AppState:
    return replace(state, sort_option=SortOption(sort_option))


def set_view_mode(state: AppState, view_mode: ViewMode) -> AppState:
    return replace(state, view_mode=ViewMode(view_mode))


def set_ocr_quality(state: AppState, quality: OCRQuality) -> AppState:
    return replace(state, ocr_quality=OCRQuality(quality))


def append_user_message(state: AppState, text: str) -> AppState:
    """Record the user's turn and open an empty model reply after it."""
    if not text.strip() or state.catalog is None:
        return state
    history = state.chat_history + (
        ChatMessage(role=ChatRole.USER, text=text),
        ChatMessage(role=ChatRole.MODEL, text=""),
    )
    return replace(state, chat_history=history, is_chatting=True)


def pending_chat_turn(state: AppState) -> Tuple[List[ChatMessage], str]:
    """Split the log into (history before the current turn, current message).

    Expects the shape left by ``append_user_message``: the user turn followed
    by the open model reply.
    """
    messages = list(state.chat_history)
    if len(messages) < 2 or messages[-2].role != ChatRole.USER:
        raise ValueError("No pending user message")
    return messages[:-2], messages[-2].text


def append_model_chunk(state: AppState, chunk: str) -> AppState:
    history = list(state.chat_history)
    if not history or history[-1].role != ChatRole.MODEL:
        return state
    last = history[-1]
    history[-1] = last.model_copy(update={"text": last.text + chunk})
    return replace(state, chat_history=tuple(history))


def append_model_error(state: AppState, error: str) -> AppState:
    return append_model_apology(state, CHAT_ERROR_TEMPLATE.format(error=error))


def append_model_apology(state: AppState, apology_text: str) -> AppState:
    """Close the turn with an apology, reusing the reply slot if nothing streamed yet."""
    apology = ChatMessage(role=ChatRole.MODEL, text=apology_text)
    history = list(state.chat_history)
    if history and history[-1].role == ChatRole.MODEL and not history[-1].text:
        history[-1] = apology
    else:
        history.append(apology)
    return replace(state, chat_history=tuple(history), is_chatting=False)


def finish_chat(state: AppState) -> AppState:
    return replace(state, is_chatting=False)


def current_view(state: AppState) -> Optional[Catalog]:
    if state.catalog is None:
        return None
    return derive_view(state.catalog, state.selected_categories, state.search_query, state.sort_option)


def current_summary(state: AppState) -> CatalogSummary:
    return summarize(current_view(state))


def filters_active(state: AppState) -> bool:
    return has_active_filters(state.selected_categories, state.search_query, state.sort_option)
