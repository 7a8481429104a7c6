"""
PDF export through an external rasterizer.

The page element is rendered to a bitmap by a ``PageRasterizer`` and the
bitmap is laid out over A4 pages by a ``PdfAssembler``. Both are
collaborators supplied by the host application; this module owns the
zoom reset, the page planning and error translation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from ..errors import ExternalServiceFailure, ProDocError
from ..view import ViewState
from .html_page import render_view


logger = logging.getLogger(__name__)

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0
RASTER_SCALE = 2


@dataclass
class RasterImage:
    """A rendered bitmap of the page."""

    data: bytes
    width: int
    height: int
    mime_type: str = "image/png"


@dataclass
class PagePlacement:
    """Where the full-height image is drawn on one PDF page, in millimetres."""

    page_index: int
    x: float
    y: float
    width: float
    height: float


class PageRasterizer(Protocol):
    def rasterize(self, page_html: str, scale: float) -> RasterImage:
        ...


class PdfAssembler(Protocol):
    def assemble(self, image: RasterImage, placements: List[PagePlacement],
                 page_width: float, page_height: float) -> bytes:
        ...


def plan_pages(image_width: int, image_height: int,
               page_width: float = A4_WIDTH_MM, page_height: float = A4_HEIGHT_MM) -> List[PagePlacement]:
    """
    Slice a tall image over fixed-size pages.

    The image is scaled to the page width; each page shows the next
    page-height window of it by shifting the image upwards.

    Returns:
        One placement per page, at least one
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Cannot paginate an empty page image ({image_width}x{image_height})")

    scaled_height = page_width * image_height / image_width
    placements = [PagePlacement(0, 0.0, 0.0, page_width, scaled_height)]
    remaining = scaled_height - page_height
    while remaining > 0:
        index = len(placements)
        placements.append(PagePlacement(index, 0.0, -page_height * index, page_width, scaled_height))
        remaining -= page_height
    return placements


class PdfExporter:
    """Renders the page to PDF with the view zoom temporarily reset."""

    def __init__(self, view: ViewState, rasterizer: Optional[PageRasterizer] = None,
                 assembler: Optional[PdfAssembler] = None):
        self.view = view
        self.rasterizer = rasterizer
        self.assembler = assembler

    def export(self, content_html: str) -> bytes:
        """
        Produce PDF bytes for rendered document content.

        The zoom is reset to 100% for rasterization and the previous zoom is
        restored afterwards, whether or not export succeeds.
        """
        previous_zoom = self.view.zoom
        self.view.reset_zoom()
        try:
            if self.rasterizer is None or self.assembler is None:
                raise ExternalServiceFailure("PDF export is unavailable: no rendering backend configured")

            page_html = render_view(content_html, self.view.transform)
            image = self.rasterizer.rasterize(page_html, scale=RASTER_SCALE)
            placements = plan_pages(image.width, image.height)
            logger.info(f"Assembling PDF with {len(placements)} page(s)")
            return self.assembler.assemble(image, placements, A4_WIDTH_MM, A4_HEIGHT_MM)
        except ProDocError:
            raise
        except Exception as e:
            logger.error(f"PDF rendering failed: {e}", exc_info=True)
            raise ExternalServiceFailure(f"PDF export failed: {e}") from e
        finally:
            self.view.set_zoom(previous_zoom)
