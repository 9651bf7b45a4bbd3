from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
import streamlit as st

# Ensure project root on sys.path so package imports work with `streamlit run image_analyzer/main.py`
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from image_analyzer.core import ui as core_ui
from image_analyzer.core.errors import ImageAnalyzerError
from image_analyzer.core.export import export_csv, export_json, export_xlsx
from image_analyzer.core.intake import intake_files
from image_analyzer.core.logging_setup import configure_logging
from image_analyzer.core.session_config import SessionConfig
from image_analyzer.core.settings import AppSettings, SettingsError, load_settings
from image_analyzer.core.sheets import save_to_sheets
from image_analyzer.core.store import ImageStore
from image_analyzer.core.workflow import AnalysisWorkflow, MockAnalyzer


def _load_env() -> None:
    # config/.env first, then project .env
    config_env = _ROOT / "config" / ".env"
    loaded = False
    if config_env.exists():
        loaded = load_dotenv(config_env, override=False)
    if not loaded:
        load_dotenv(_ROOT / ".env", override=False)


def _settings() -> AppSettings:
    if "settings" not in st.session_state:
        try:
            st.session_state["settings"] = load_settings().settings
        except SettingsError as exc:
            st.error(f"Failed to load settings: {exc}")
            st.session_state["settings"] = AppSettings()
    return st.session_state["settings"]


def _store() -> ImageStore:
    if "image_store" not in st.session_state:
        st.session_state["image_store"] = ImageStore()
    return st.session_state["image_store"]


def _session_config(settings: AppSettings) -> SessionConfig:
    if "session_config" not in st.session_state:
        st.session_state["session_config"] = SessionConfig(model=settings.default_model)
    return st.session_state["session_config"]


_CONFIG_WIDGET_KEYS = (
    "cfg_api_key",
    "cfg_model",
    "cfg_use_filename",
    "cfg_include_description",
    "cfg_sheets_url",
)


def _seed_widget(key: str, value) -> None:
    # Widgets read their value from session state; seed once so edits stick
    if key not in st.session_state:
        st.session_state[key] = value


def _reset_session() -> None:
    store = st.session_state.pop("image_store", None)
    if store is not None:
        store.close()
    st.session_state.pop("session_config", None)
    for key in _CONFIG_WIDGET_KEYS:
        st.session_state.pop(key, None)
    st.session_state["uploader_nonce"] = st.session_state.get("uploader_nonce", 0) + 1


def _render_sidebar(store: ImageStore) -> None:
    with st.sidebar:
        st.markdown("#### Session")
        st.caption(f"{len(store)} image(s) • {len(store.results)} result(s)")
        if st.button(
            "🔄 New session",
            key="new_session",
            width="stretch",
            disabled=store.is_processing,
        ):
            _reset_session()
            st.rerun()


def _render_settings(config: SessionConfig, settings: AppSettings) -> None:
    labels = settings.model_labels()
    options = list(labels.keys())
    _seed_widget("cfg_api_key", config.api_key.get_secret_value())
    _seed_widget("cfg_model", config.model if config.model in options else options[0])
    _seed_widget("cfg_use_filename", config.use_filename_context)
    _seed_widget("cfg_include_description", config.include_description)

    with st.container(border=True):
        st.markdown("### ⚙️ API settings")
        col1, col2 = st.columns(2)
        with col1:
            st.text_input(
                "API key",
                type="password",
                placeholder="Enter your OpenAI API key",
                key="cfg_api_key",
            )
        with col2:
            st.selectbox(
                "Model",
                options=options,
                format_func=lambda m: labels.get(m, m),
                key="cfg_model",
            )
        c1, c2 = st.columns(2)
        c1.checkbox("Use file name for context", key="cfg_use_filename")
        c2.checkbox("Add description field", key="cfg_include_description")

    config.api_key = st.session_state["cfg_api_key"]
    config.model = st.session_state["cfg_model"]
    config.use_filename_context = st.session_state["cfg_use_filename"]
    config.include_description = st.session_state["cfg_include_description"]


def _render_upload(store: ImageStore, settings: AppSettings) -> None:
    with st.container(border=True):
        st.markdown("### 📤 Upload images")
        # Bumping the key resets the widget once its files are in the store
        uploader_key = f"uploader_{st.session_state.get('uploader_nonce', 0)}"
        files = st.file_uploader(
            "Drag images here or click to choose files",
            type=settings.accepted_types,
            accept_multiple_files=True,
            key=uploader_key,
        )
        if files:
            store.append(intake_files(files, store.previews))
            st.session_state["uploader_nonce"] = st.session_state.get("uploader_nonce", 0) + 1
            st.rerun()

        if len(store) == 0:
            return

        head, action = st.columns([4, 1])
        head.markdown(f"**Uploaded images ({len(store)})**")
        if action.button("🗑️ Clear", key="clear_images", width="stretch", disabled=store.is_processing):
            store.clear()
            st.rerun()

        cols = st.columns(3)
        for idx, image in enumerate(store.images):
            with cols[idx % 3]:
                with st.container(border=True):
                    name_col, btn_col = st.columns([4, 1])
                    name_col.markdown(f"**{image.name}**")
                    name_col.caption(image.size_label)
                    if btn_col.button("✕", key=f"remove_{image.id}", disabled=store.is_processing):
                        store.remove(image.id)
                        st.rerun()
                    if image.preview_uri:
                        thumb = store.previews.thumbnail(image.preview_uri)
                        if thumb is not None:
                            if store.previews.mime_type(image.preview_uri) == "image/svg+xml":
                                st.image(thumb.decode("utf-8", errors="replace"), width="stretch")
                            else:
                                st.image(thumb, width="stretch")


def _run_analysis(config: SessionConfig, store: ImageStore, settings: AppSettings) -> None:
    bar = st.progress(0, text="0% complete")

    def _on_progress(value: float, done: int, total: int) -> None:
        bar.progress(int(value), text=f"{round(value)}% complete")

    workflow = AnalysisWorkflow(MockAnalyzer(delay_s=settings.analysis_delay_s))
    try:
        asyncio.run(workflow.run(config, store, on_progress=_on_progress))
    except ImageAnalyzerError as exc:
        core_ui.error(exc.user_message)
        return
    finally:
        bar.empty()
    st.rerun()


def _render_controls(config: SessionConfig, store: ImageStore, settings: AppSettings) -> None:
    with st.container(border=True):
        cols = st.columns([3, 1, 1, 1])
        start = cols[0].button(
            "⚡ Analyzing..." if store.is_processing else "⚡ Start analysis",
            type="primary",
            key="start_analysis",
            width="stretch",
            disabled=store.is_processing or len(store) == 0 or not config.api_key.get_secret_value(),
        )
        if store.results:
            flag = store.results_include_description
            for col, artifact, label in (
                (cols[1], export_csv(store.results, flag), "⬇️ Export CSV"),
                (cols[2], export_xlsx(store.results, flag), "⬇️ Export XLSX"),
                (cols[3], export_json(store.results, flag), "⬇️ Export JSON"),
            ):
                if artifact is not None:
                    col.download_button(
                        label,
                        data=artifact.data,
                        file_name=artifact.filename,
                        mime=artifact.mime,
                        width="stretch",
                    )
        if start:
            _run_analysis(config, store, settings)


def _render_sheets(config: SessionConfig) -> None:
    # The section is hidden without results, which drops its widget state
    _seed_widget("cfg_sheets_url", config.sheets_url)
    with st.container(border=True):
        st.markdown("### 🔗 Google Sheets")
        st.text_area(
            "Google Sheets URL",
            placeholder="Paste a link to a Google Sheet",
            key="cfg_sheets_url",
        )
        config.sheets_url = st.session_state["cfg_sheets_url"]
        if st.button("📊 Save to Google Sheets", key="save_sheets"):
            try:
                core_ui.info(save_to_sheets(config.sheets_url))
            except ImageAnalyzerError as exc:
                core_ui.error(exc.user_message)


def _render_results(store: ImageStore) -> None:
    with st.container(border=True):
        st.markdown("### 📋 Analysis results")
        core_ui.status_summary(store.results)
        frame = core_ui.results_frame(store.results, store.results_include_description)
        st.dataframe(frame, width="stretch", hide_index=True)


def main() -> None:
    _load_env()
    st.set_page_config(page_title="Image Analyzer", page_icon="🖼️", layout="wide")
    settings = _settings()
    configure_logging(settings.log_level)

    st.title("🖼️ Image Analyzer")
    st.caption("AI image analysis for SEO")

    config = _session_config(settings)
    store = _store()

    _render_sidebar(store)
    _render_settings(config, settings)
    _render_upload(store, settings)
    _render_controls(config, store, settings)
    if store.results:
        _render_sheets(config)
        _render_results(store)


if __name__ == "__main__":
    main()
