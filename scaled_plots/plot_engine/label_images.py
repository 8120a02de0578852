"""
label_images.py — Function legend rasterizer

This file contains ONLY:
- RenderedLabel (PNG data URL + CSS pixel size)
- MathLabelRenderer (expression -> LaTeX via sympy -> PNG via matplotlib mathtext)

Labels are rasterized at `render_scale` times their display size so they
stay sharp when the plot itself is rendered with a device scale.
"""

from __future__ import annotations

import io
import os
from dataclasses import dataclass
from typing import Optional

# Headless backend unless the caller picked one
os.environ.setdefault("MPLBACKEND", "Agg")

from matplotlib import mathtext  # noqa: E402
from matplotlib.font_manager import FontProperties  # noqa: E402
from PIL import Image  # noqa: E402

from .. import utils  # noqa: E402
from ..config import settings  # noqa: E402
from .expressions import parse_formula  # noqa: E402
from .plot_common import PPI_BASE  # noqa: E402

logger = utils.setup_logger(__name__)


@dataclass(frozen=True)
class RenderedLabel:
    data_url: str
    width_px: float
    height_px: float


class MathLabelRenderer:
    def __init__(
        self,
        font_size_px: float = settings.PLOT_LABEL_FONT_SIZE_PX,
        render_scale: int = settings.PLOT_LABEL_RENDER_SCALE,
    ):
        self.font_size_px = font_size_px
        self.render_scale = max(1, int(render_scale))

    def to_tex(self, expression: str) -> Optional[str]:
        """LaTeX for the expression as typed, or None for a bare number."""
        node = parse_formula(expression)
        if node.is_constant():
            return None
        return node.to_formula("tex")

    def render(self, expression: str, color: str) -> Optional[RenderedLabel]:
        """
        Rasterize `expression` as a formula image in `color`.

        Returns None when the expression is a bare constant or when any
        step fails; a missing legend never fails the plot.
        """
        try:
            tex = self.to_tex(expression)
            if tex is None:
                return None

            buf = io.BytesIO()
            mathtext.math_to_image(
                f"${tex}$",
                buf,
                prop=FontProperties(size=self.font_size_px * 72.0 / PPI_BASE),
                dpi=PPI_BASE * self.render_scale,
                format="png",
                color=color,
            )
            png = buf.getvalue()

            with Image.open(io.BytesIO(png)) as img:
                width, height = img.size
            if width == 0 or height == 0:
                return None

            return RenderedLabel(
                data_url=utils.png_to_data_url(png),
                width_px=width / self.render_scale,
                height_px=height / self.render_scale,
            )
        except Exception as e:
            logger.warning("Label for '%s' could not be rendered — %s", utils.truncate(str(expression), 80), e)
            return None
