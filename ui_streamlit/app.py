# --- standard library / typing ----------------------------------------------------------
from __future__ import annotations

import time
from pathlib import Path

# --- third-party -----------------------------------------------------------------------
import streamlit as st

# --- first-party: exporting and plotting -----------------------------------------------
from grating_sweep.exporting.io import dataset_from_table, read_output_file, to_csv_bytes
from grating_sweep.plotting_plotly.presenter import PlotPresenterPlotly

# --------------------------------------------------------------------------------------
# App bootstrap
# --------------------------------------------------------------------------------------
st.set_page_config(page_title="Grating sweep monitor", layout="wide")
st.title("Grating sweep monitor")

st.sidebar.header("Sweep output")
output_path = Path(st.sidebar.text_input("Output file", value="output.txt"))
refresh_s = st.sidebar.number_input("Refresh every (s)", min_value=0, value=5, step=1)

if not output_path.exists():
    st.info(f"Waiting for {output_path} …")
    st.stop()

snap = read_output_file(output_path)

# --------------------------------------------------------------------------------------
# Progress
# --------------------------------------------------------------------------------------
total = max(snap.total_steps, 1)
st.progress(snap.completed_steps / total, text=f"{snap.completed_steps}/{snap.total_steps} steps")
c1, c2, c3 = st.columns(3)
c1.metric("Status", snap.status)
c2.metric("Mode", snap.inputs.get("mode", "?"))
c3.metric("Failed steps", int((snap.table["status"] == "failure").sum()) if len(snap.table) else 0)

with st.expander("Input", expanded=False):
    st.json(snap.inputs)

# --------------------------------------------------------------------------------------
# Results
# --------------------------------------------------------------------------------------
if len(snap.table):
    ds = dataset_from_table(snap.table)
    unit = {"constantWavelength": "Incidence angle (deg)"}.get(
        snap.inputs.get("mode", ""), f"Wavelength ({snap.inputs.get('units', 'um')})"
    )
    presenter = PlotPresenterPlotly(coordinate_title=unit)

    orders = [int(m) for m in ds.coords["order"].values]
    picked = st.multiselect("Orders", orders, default=[m for m in orders if abs(m) <= 2])
    st.plotly_chart(presenter.efficiency_curves(ds, orders=picked), use_container_width=True)

    n_steps = ds.sizes["coordinate"]
    i_step = st.slider("Step", 0, n_steps - 1, n_steps - 1) if n_steps > 1 else 0
    st.plotly_chart(presenter.order_spectrum(ds, i_step), use_container_width=True)

    st.dataframe(snap.table, use_container_width=True)
    st.download_button(
        "Download CSV", to_csv_bytes(snap.table), file_name=f"{output_path.stem}.csv", mime="text/csv"
    )

if not snap.done and refresh_s > 0:
    time.sleep(float(refresh_s))
    st.rerun()
