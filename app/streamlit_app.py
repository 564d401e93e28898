# app/streamlit_app.py
# Run with: streamlit run app/streamlit_app.py

import pathlib
import sys

import streamlit as st

# ---------- Import orchestration ----------
THIS = pathlib.Path(__file__).resolve()
ROOT = THIS.parent
for extra in [ROOT.parent, pathlib.Path.cwd()]:
    if str(extra) not in sys.path:
        sys.path.append(str(extra))

from app.form import QueryValidationError, build_query, predict, sample_values, stats_line  # noqa: E402
from domain.vehicle import FIELD_ATTRS  # noqa: E402
from matching.dataset import Dataset, DatasetError, load_dataset  # noqa: E402
from matching.engine import rank_candidates  # noqa: E402
from services.config import detect_data_path, detect_labels_path, get_settings  # noqa: E402
from services.http import Http  # noqa: E402
from services.log import setup_logging  # noqa: E402

SELECT_FIELDS = [
    "Manufacturer", "Model", "Production Year", "Category", "Fuel Type",
    "Gearbox Type", "Drive Wheels", "Doors", "Wheel", "Airbags",
]
UNSET = ""


@st.cache_resource
def get_dataset() -> Dataset:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    data_path = detect_data_path(settings)
    if not data_path:
        raise DatasetError(f"Dataset not found: {settings.data_source}")
    http = Http(timeout=settings.http_timeout, max_retries=settings.http_retries)
    return load_dataset(data_path, detect_labels_path(settings), http=http)


def _key(field: str) -> str:
    return "f_" + FIELD_ATTRS[field]


def _apply_sample(ds: Dataset) -> None:
    for field, value in sample_values(ds).items():
        st.session_state[_key(field)] = value
    st.session_state["toast"] = 'Sample car data loaded! Click "Predict Price" to see the result.'


def _reset() -> None:
    for field in FIELD_ATTRS:
        st.session_state.pop(_key(field), None)
    st.session_state.pop("result", None)


st.set_page_config(page_title="Car Price Predictor", page_icon="🚗")
st.title("🚗 Car Price Predictor")

try:
    dataset = get_dataset()
except DatasetError as e:
    st.error(f"Error loading data: {e}")
    st.stop()

st.caption(stats_line(dataset.summary_stats()))

if st.session_state.get("toast"):
    st.toast(st.session_state.pop("toast"))

values = {}
cols = st.columns(2)
for i, field in enumerate(SELECT_FIELDS):
    options = [UNSET, *dataset.unique_values(field)]
    with cols[i % 2]:
        values[field] = st.selectbox(
            field,
            options,
            key=_key(field),
            format_func=lambda code, f=field: "Select..." if code == UNSET else str(dataset.decode(f, code)),
        )

with cols[0]:
    values["Engine Volume"] = st.number_input("Engine Volume (L)", min_value=0.0, step=0.1, key=_key("Engine Volume"))
with cols[1]:
    values["Mileage"] = st.number_input("Mileage (km)", min_value=0, step=1000, key=_key("Mileage"))
values["Leather Interior"] = st.checkbox("Leather Interior", key=_key("Leather Interior"))
st.caption("Leather: " + ("Yes" if values["Leather Interior"] else "No"))

b1, b2, b3 = st.columns(3)
predict_clicked = b1.button("Predict Price", type="primary", use_container_width=True)
b2.button("Reset", on_click=_reset, use_container_width=True)
b3.button("Load Sample", on_click=_apply_sample, args=(dataset,), use_container_width=True)

if predict_clicked:
    try:
        st.session_state["result"] = predict(values, dataset)
        st.session_state["query"] = build_query(values)
        st.toast("Price prediction generated!")
    except QueryValidationError as e:
        st.session_state.pop("result", None)
        st.warning(str(e))

result = st.session_state.get("result")
if result is not None:
    st.metric("Predicted price", result["price_text"])
    if not result["found"]:
        st.info(result["explain"])
    else:
        (st.success if result["exact"] else st.info)(result["explain"])
        st.markdown("**Match details:**")
        for line in result["details"]:
            st.write("•", line)

        with st.expander("Similar cars"):
            similar = rank_candidates(st.session_state["query"], dataset, top_n=5)
            st.dataframe(similar, use_container_width=True)
