"""
Visualization components for the position model.
"""

from .plotter import EstimateRenderer, plot_localization_comparison

__all__ = [
    "EstimateRenderer",
    "plot_localization_comparison"
]
