"""
MinTemp Forecast App
====================
Streamlit form for predicting tomorrow's minimum temperature from the
previous 14 days of observations, with several models side by side.
"""

import streamlit as st
import numpy as np
import matplotlib.pyplot as plt
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from mintemp.config import FIELD_LABELS, INFERENCE_API_URL, MEASUREMENT_FIELDS, WINDOW_DAYS
from mintemp.demo_data import generate_demo_form
from mintemp.errors import MinTempError
from mintemp.inference_client import InferenceClient
from mintemp.logging_config import setup_logging
from mintemp.models import DEFAULT_CATALOG, ModelSelection
from mintemp.orchestrator import PredictionOrchestrator, RequestPhase, Success
from mintemp.preprocessing import MeasurementForm
from mintemp.presentation import (
    NoResult,
    RequestError,
    display_state_for,
    reset_state,
    result_card_html,
    results_table,
)
from mintemp.weather_client import OpenMeteoClient

logger = setup_logging()

# ============================================================
# PAGE CONFIGURATION
# ============================================================
st.set_page_config(
    page_title="MinTemp AI",
    page_icon="🌤️",
    layout="wide",
    initial_sidebar_state="expanded"
)

# ============================================================
# CUSTOM CSS
# ============================================================
st.markdown("""
<style>
    .main-header {
        font-size: 3rem;
        font-weight: 700;
        background: linear-gradient(135deg, #38bdf8 0%, #6366f1 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        text-align: center;
        margin-bottom: 0.5rem;
    }

    .sub-header {
        font-size: 1.2rem;
        color: #666;
        text-align: center;
        margin-bottom: 2rem;
    }

    .result-card {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        padding: 1.2rem;
        border-radius: 16px;
        margin: 0.5rem 0;
        text-align: center;
        box-shadow: 0 8px 20px rgba(102, 126, 234, 0.4);
    }

    .result-card.failed {
        background: linear-gradient(135deg, #9ca3af 0%, #6b7280 100%);
        box-shadow: none;
    }
</style>
""", unsafe_allow_html=True)


# ============================================================
# SERVICES
# ============================================================
@st.cache_resource
def get_services():
    """Create the HTTP clients and orchestrator once per process."""
    inference_client = InferenceClient()
    return OpenMeteoClient(), inference_client, PredictionOrchestrator(inference_client)


# ============================================================
# SESSION STATE
# ============================================================
def init_state():
    defaults = {
        'form': MeasurementForm.empty(),
        'grid_version': 0,
        'selection': ModelSelection.recommended(),
        'display': reset_state(),
        'location_label': None,
        'rng': np.random.default_rng(),
        'submitting': False,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def replace_form(form):
    """Swap in a new form and force the grid widget to re-render it."""
    st.session_state.form = form
    st.session_state.grid_version += 1


def start_submit():
    st.session_state.submitting = True


def reset_inputs():
    replace_form(MeasurementForm.empty())
    st.session_state.display = reset_state()
    st.session_state.location_label = None


# ============================================================
# RESULT RENDERING
# ============================================================
def render_results(display, form):
    if isinstance(display, NoResult):
        return

    if isinstance(display, RequestError):
        st.error(display.message)
        return

    st.markdown("## 🔮 Predicted Minimum Temperature")
    items = list(display.outcomes.items())
    cols = st.columns(max(len(items), 1))
    for col, (model_id, outcome) in zip(cols, items):
        with col:
            st.markdown(result_card_html(DEFAULT_CATALOG.display_name(model_id), outcome),
                        unsafe_allow_html=True)

    with st.expander("Result table"):
        st.dataframe(results_table(display), use_container_width=True, hide_index=True)

    successes = {k: v for k, v in display.outcomes.items() if isinstance(v, Success)}
    if not successes:
        return

    try:
        history = [float(form.value(day, 'min_temp')) for day in range(form.n_days)]
    except ValueError:
        # Inputs were edited after the request
        return

    st.markdown("### 📈 Window and Predictions")
    fig, ax = plt.subplots(figsize=(12, 5))
    days = np.arange(1, len(history) + 1)
    ax.plot(days, history, color='#1f77b4', linewidth=2, marker='o', markersize=6, label='Observed min temp')
    for model_id, outcome in successes.items():
        ax.scatter([len(history) + 1], [outcome.value], s=90, marker='*',
                   label=DEFAULT_CATALOG.display_name(model_id), zorder=3)
    ax.set_xlabel('Day', fontsize=12, fontweight='bold')
    ax.set_ylabel('Temperature (°C)', fontsize=12, fontweight='bold')
    ax.set_title(f'{WINDOW_DAYS}-Day Window + Next-Day Predictions', fontsize=14, fontweight='bold', pad=20)
    ax.legend(loc='best', fontsize=10)
    ax.grid(True, alpha=0.3, linestyle='--')
    plt.tight_layout()
    st.pyplot(fig)
    plt.close(fig)


# ============================================================
# MAIN APP
# ============================================================
def main():
    init_state()
    weather_client, inference_client, orchestrator = get_services()

    st.markdown('<div class="main-header">🌤️ MinTemp AI</div>', unsafe_allow_html=True)
    st.markdown('<div class="sub-header">Predict tomorrow\'s minimum temperature</div>', unsafe_allow_html=True)

    with st.sidebar:
        st.title("⚙️ Settings")
        st.markdown("### 🧠 Inference Service")
        st.code(INFERENCE_API_URL)
        if st.button("🩺 Check Service"):
            try:
                st.success(f"Service status: {inference_client.check_health()}")
            except MinTempError as e:
                st.error(str(e))

        st.markdown("### 🤖 Models")
        for spec in DEFAULT_CATALOG:
            label = f"{spec.display_name} (local)" if spec.local else spec.display_name
            checked = st.checkbox(label, value=spec.id in st.session_state.selection, key=f"model_{spec.id}")
            if checked != (spec.id in st.session_state.selection):
                st.session_state.selection = st.session_state.selection.toggle(spec.id)

    input_mode = st.radio("Input", ["Manual Input", "Select City"], horizontal=True)

    if input_mode == "Select City":
        col1, col2 = st.columns([4, 1])
        with col1:
            city_query = st.text_input("City", placeholder="Enter city name...", label_visibility="collapsed")
        with col2:
            search = st.button("🔍 Search", use_container_width=True)
        if search and city_query.strip():
            with st.spinner("Fetching historical weather..."):
                try:
                    location, matrix = weather_client.fetch_city_window(city_query)
                    replace_form(MeasurementForm.from_matrix(matrix))
                    st.session_state.location_label = location.label
                    st.session_state.display = reset_state()
                except MinTempError as e:
                    st.error(str(e))
        if st.session_state.location_label:
            st.caption(f"📍 {st.session_state.location_label}")

    st.markdown(f"#### {WINDOW_DAYS} Days of Previous Observations")
    edited = st.data_editor(
        st.session_state.form.to_frame(),
        key=f"grid_{st.session_state.grid_version}",
        use_container_width=True,
        disabled=input_mode == "Select City",
        column_config={
            name: st.column_config.TextColumn(FIELD_LABELS[name]) for name in MEASUREMENT_FIELDS
        },
    )
    st.session_state.form = MeasurementForm.from_frame(edited)

    col1, col2, col3 = st.columns(3)
    with col1:
        if input_mode == "Manual Input" and st.button("🎲 Auto-fill with Demo Data", use_container_width=True):
            replace_form(generate_demo_form(st.session_state.rng))
            st.rerun()
    with col2:
        if st.button("🧹 Reset", use_container_width=True):
            reset_inputs()
            st.rerun()
    with col3:
        st.button("🌡️ Predict Result", type="primary", use_container_width=True,
                  disabled=st.session_state.submitting, on_click=start_submit)

    if st.session_state.submitting:
        status = st.empty()

        def show_phase(phase):
            if phase is RequestPhase.DISPATCHING:
                status.info("Analyzing...")

        # Snapshot: the form is immutable, so edits cannot reach this request
        form = st.session_state.form
        try:
            with st.spinner("Running models..."):
                outcome = orchestrator.submit(st.session_state.selection, form, on_phase=show_phase)
        finally:
            st.session_state.submitting = False
        status.empty()
        st.session_state.display = display_state_for(outcome)
        st.rerun()

    st.markdown("---")
    render_results(st.session_state.display, st.session_state.form)


if __name__ == "__main__":
    main()
