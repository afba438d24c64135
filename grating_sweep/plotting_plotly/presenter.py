#"""
#Plotly-based presenter implementing PlotPresenter.
#"""
from __future__ import annotations
import numpy as np
import xarray as xr
import plotly.graph_objects as go
from grating_sweep.domain.ports import PlotPresenter


class PlotPresenterPlotly(PlotPresenter):
    def __init__(self, coordinate_title: str = "Sweep coordinate") -> None:
        self.coordinate_title = coordinate_title

    def efficiency_curves(self, data: xr.Dataset, orders: list[int] | None = None) -> go.Figure:
        """One line per diffraction order; failed steps appear as gaps."""
        ds = data
        picked = ds.coords["order"].values if orders is None else np.asarray(orders, dtype=int)
        fig = go.Figure()
        for m in picked:
            line = ds["eff"].sel(order=int(m))
            fig.add_trace(go.Scatter(x=line.coords["coordinate"].values,
                                     y=line.values,
                                     mode="lines+markers",
                                     name=f"m={int(m)}"))
        fig.update_layout(
            xaxis_title=self.coordinate_title,
            yaxis_title="Diffraction efficiency",
            template="plotly_white",
            title="Efficiency by order",
        )
        return fig

    def order_spectrum(self, data: xr.Dataset, i_step: int) -> go.Figure:
        ds = data
        if ds.sizes.get("coordinate", 0) == 0:
            return go.Figure()
        eff = ds["eff"].isel(coordinate=i_step)
        orders = ds.coords["order"].values
        coord = float(ds.coords["coordinate"].values[i_step])
        fig = go.Figure()
        fig.add_trace(go.Bar(x=orders, y=eff.values, name="efficiency"))
        fig.update_layout(
            xaxis_title="Diffraction order m",
            yaxis_title="Diffraction efficiency",
            template="plotly_white",
            title=f"Order-resolved efficiency at {coord:g}",
        )
        return fig
