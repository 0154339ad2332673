"""Static chart page rendering."""

from src.web.chart_page import render_chart_page

__all__ = ["render_chart_page"]
