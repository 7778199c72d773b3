import httpx
import pandas as pd
import streamlit as st

from src.config import settings
from src.models.catalog import Catalog, ChatRole
from src.models.domain import ExportFormat, SortOption, ViewMode
from src.models.schemas import ChatEvent, ChatRequest
from src.services import app_state
from src.services.catalog_export import build_export
from src.services.catalog_view import category_names
from src.ui.state import get_state, set_state
from src.ui.utils.catalog_formatting import brochure_link, catalog_table_rows, iter_ndjson

SORT_LABELS = {
    SortOption.DEFAULT: "Default order",
    SortOption.NAME_ASC: "Name (A-Z)",
    SortOption.NAME_DESC: "Name (Z-A)",
    SortOption.PRICE_ASC: "Price (low to high)",
    SortOption.PRICE_DESC: "Price (high to low)",
}


def _show_filters(state: app_state.AppState) -> app_state.AppState:
    st.sidebar.markdown("### Filters")
    selected = st.sidebar.multiselect(
        "Categories",
        category_names(state.catalog),
        default=sorted(state.selected_categories),
    )
    state = app_state.set_selected_categories(state, selected)

    query = st.sidebar.text_input("Search", value=state.search_query, placeholder="Name or description")
    state = app_state.set_search(state, query)

    sort_options = list(SortOption)
    sort_option = st.sidebar.selectbox(
        "Sort variants by",
        sort_options,
        index=sort_options.index(state.sort_option),
        format_func=lambda option: SORT_LABELS[option],
    )
    state = app_state.set_sort(state, sort_option)
    set_state(state)

    if app_state.filters_active(state) and st.sidebar.button("Reset filters"):
        set_state(app_state.reset_view(state))
        st.rerun()
    return state


def _show_grid(view: Catalog) -> None:
    for category in view.categories:
        with st.expander(f"**{category.name}** ({len(category.products)} product lines)", expanded=True):
            for product in category.products:
                st.markdown(f"#### {product.name}")
                if product.description:
                    st.caption(product.description)
                cols = st.columns(3)
                for index, variant in enumerate(product.variants):
                    with cols[index % 3]:
                        with st.container(border=True):
                            st.markdown(f"**{variant.name}**")
                            if variant.description:
                                st.write(variant.description)
                            st.markdown(f"Price: `{variant.price}`  \nSKU: `{variant.sku}`")
                            link = brochure_link(variant.brochure_url)
                            if link:
                                st.markdown(link)
                            if variant.source:
                                st.caption(f"Source: {variant.source}")


def _show_table(view: Catalog) -> None:
    rows = catalog_table_rows(view)
    if not rows:
        st.info("ℹ️ No variants match the current filters.")
        return
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def _show_exports(catalog: Catalog) -> None:
    st.markdown("### Export")
    cols = st.columns(len(ExportFormat))
    for col, fmt in zip(cols, ExportFormat):
        export_file = build_export(catalog, fmt)
        with col:
            st.download_button(
                f"⬇️ {fmt.value.upper()}",
                data=export_file.content,
                file_name=export_file.filename,
                mime=export_file.media_type,
                use_container_width=True,
            )


def _stream_reply(state: app_state.AppState, placeholder) -> app_state.AppState:
    history, message = app_state.pending_chat_turn(state)
    chat_request = ChatRequest(catalog=state.catalog, message=message, history=history)
    try:
        with httpx.stream(
            "POST",
            f"{settings.api_base_url}/catalog/chat",
            content=chat_request.model_dump_json(by_alias=True),
            headers={"Content-Type": "application/json"},
            timeout=None,
        ) as response:
            if response.status_code != 200:
                response.read()
                state = app_state.append_model_error(state, response.text)
                return state
            for payload in iter_ndjson(response.iter_lines()):
                event = ChatEvent.model_validate(payload)
                if event.type == "chunk":
                    state = set_state(app_state.append_model_chunk(state, event.text))
                    placeholder.markdown(state.chat_history[-1].text)
                else:
                    # already formatted server side
                    state = set_state(app_state.append_model_apology(state, event.text))
                    placeholder.markdown(event.text)
    except httpx.HTTPError as e:
        state = app_state.append_model_error(state, str(e))
    finally:
        # a malformed event must not leave the chat input disabled
        state = set_state(app_state.finish_chat(state))
    return state


def _show_chat(state: app_state.AppState) -> None:
    st.markdown("### 💬 Ask about this catalog")
    for message in state.chat_history:
        if message.text:
            with st.chat_message("assistant" if message.role == ChatRole.MODEL else "user"):
                st.markdown(message.text)

    prompt = st.chat_input("Ask a question about the products...", disabled=state.is_chatting)
    if not prompt:
        return
    state = set_state(app_state.append_user_message(state, prompt))
    with st.chat_message("user"):
        st.markdown(prompt)
    with st.chat_message("assistant"):
        placeholder = st.empty()
        _stream_reply(state, placeholder)


def show():
    st.title("📊 Catalog Results")
    state = get_state()

    if state.catalog is None:
        if state.error:
            st.error(f"❌ {state.error}")
        st.info("ℹ️ No catalog yet. Extract one on the Extract page first.")
        return

    state = _show_filters(state)
    view = app_state.current_view(state)
    summary = app_state.current_summary(state)

    st.subheader(state.catalog.supplier_name)
    if state.error:
        st.warning(f"⚠️ Showing partial results. {state.error}")

    col1, col2, col3 = st.columns(3)
    col1.metric("Categories", summary.categories)
    col2.metric("Product Lines", summary.product_lines)
    col3.metric("Variants", summary.variants)

    view_modes = list(ViewMode)
    view_mode = st.radio(
        "View",
        view_modes,
        index=view_modes.index(state.view_mode),
        format_func=lambda mode: mode.value.title(),
        horizontal=True,
    )
    state = set_state(app_state.set_view_mode(state, view_mode))

    if view_mode == ViewMode.GRID:
        _show_grid(view)
    else:
        _show_table(view)

    _show_exports(state.catalog)
    st.markdown("---")
    _show_chat(state)
