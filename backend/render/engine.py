"""
Matplotlib-backed chart engine.

``ChartEngine.render(spec, width, height)`` takes a declarative spec from the
translator and returns PNG bytes. Every call builds its own ``Figure`` on an
Agg canvas, so renders can run concurrently on worker threads.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Dict

import matplotlib
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from render.marks import MARKS

logger = logging.getLogger("uvicorn.error")

DPI = 100
SUPPORTED_IMAGE_TYPES = ("png",)


class ChartEngine:
    """Draws a spec with the painter registered for its ``type``."""

    def __init__(self, dpi: int = DPI) -> None:
        self.dpi = dpi

    def render(self, spec: Dict[str, Any], width: int, height: int) -> bytes:
        image_type = spec.get("imageType", "png")
        if image_type not in SUPPORTED_IMAGE_TYPES:
            raise ValueError(f"Unsupported imageType '{image_type}'")

        mark = spec.get("type")
        painter = MARKS.get(mark)
        if painter is None:
            raise ValueError(f"No painter for mark type '{mark}'")

        fig = Figure(figsize=(width / self.dpi, height / self.dpi), dpi=self.dpi, layout="constrained")
        FigureCanvasAgg(fig)
        view_fill = (spec.get("viewStyle") or {}).get("viewFill")
        if view_fill:
            fig.set_facecolor(view_fill)

        painter(fig, spec)

        title = (spec.get("title") or {}).get("title")
        if title:
            fig.suptitle(str(title), fontsize=13, fontweight="bold")

        buf = io.BytesIO()
        fig.savefig(buf, format="png", dpi=self.dpi, facecolor=fig.get_facecolor())
        return buf.getvalue()


def load_engine() -> ChartEngine:
    logger.info("Loading local chart engine (matplotlib %s)", matplotlib.__version__)
    return ChartEngine()

