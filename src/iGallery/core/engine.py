"""Image adjustment engine behind the editor.

The engine owns one decoded :class:`~iGallery.core.image_source.SourceImage`,
the mutable :class:`~iGallery.core.adjustments.AdjustmentState` and the derived
render surface.  Every parameter change recomputes the whole surface:

1. allocate a cleared surface the size of the source image,
2. compose the centred rotate/zoom transform into one matrix,
3. draw the source through that matrix while applying brightness, contrast and
   saturation in the same pass,
4. optionally convolve the result with the sharpen kernel.

Rotation and zoom never change the surface dimensions, so rotated or zoomed
content is clipped at the canvas edges.

Loading follows a ticket protocol so the Qt shell can decode on a worker
thread: :meth:`ImageAdjustmentEngine.begin_load` hands out a ticket and only the
newest ticket may complete, which cancels any earlier load still in flight.
"""

from __future__ import annotations

import enum
import io
import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
from PIL import Image

from ..config import EXPORT_FORMAT, EXPORT_MIME_TYPE
from ..errors import ExportError, LoadError
from .adjustments import AdjustmentState
from .filters import composite, sharpen
from .filters.algorithms import color_amounts
from .geometry import build_canvas_matrix, invert_affine
from .image_source import SourceImage, fetch_image

_LOGGER = logging.getLogger(__name__)

RenderSurface = np.ndarray
"""``H x W x 4`` uint8 RGBA array, handed out read-only."""

_EXTENSIONS = {"image/png": ".png"}


class EngineState(enum.Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    LOAD_FAILED = "load_failed"


@dataclass(frozen=True)
class ExportedBlob:
    """Encoded image bytes produced by :meth:`ImageAdjustmentEngine.export`."""

    data: bytes
    mime_type: str
    width: int
    height: int

    @property
    def suggested_extension(self) -> str:
        return _EXTENSIONS.get(self.mime_type, "")

    def __len__(self) -> int:
        return len(self.data)


class ImageAdjustmentEngine:
    """Apply editor adjustments to a source image and export the result."""

    def __init__(
        self,
        *,
        executor: str = "auto",
        cross_origin: str | None = "anonymous",
        fetcher: Callable[..., SourceImage] = fetch_image,
    ) -> None:
        self._executor = executor
        self._cross_origin = cross_origin
        self._fetcher = fetcher

        self._state = EngineState.UNLOADED
        self._source: SourceImage | None = None
        self._surface: RenderSurface | None = None
        self._surface_tainted = False
        self._adjustments = AdjustmentState()
        self._ticket = 0
        self._pending_url: str | None = None
        self._last_error: LoadError | None = None
        self._render_count = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is EngineState.READY

    @property
    def source(self) -> SourceImage | None:
        return self._source

    @property
    def surface(self) -> RenderSurface | None:
        """Return the latest render, or ``None`` before the first render."""

        return self._surface

    @property
    def adjustments(self) -> AdjustmentState:
        """Return a snapshot of the current parameters."""

        return self._adjustments.copy()

    @property
    def pending_url(self) -> str | None:
        return self._pending_url

    @property
    def last_error(self) -> LoadError | None:
        return self._last_error

    @property
    def render_count(self) -> int:
        return self._render_count

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def begin_load(self, url: str) -> int:
        """Enter the loading state for *url* and return the load ticket.

        Any load started earlier is superseded: its result will be discarded
        when it eventually reaches :meth:`finish_load` or :meth:`fail_load`.
        """

        self._ticket += 1
        self._pending_url = url
        self._state = EngineState.LOADING
        _LOGGER.debug("Load #%d started for %s", self._ticket, url)
        return self._ticket

    def is_current(self, ticket: int) -> bool:
        return ticket == self._ticket and self._state is EngineState.LOADING

    def finish_load(self, ticket: int, source: SourceImage) -> bool:
        """Install *source* if *ticket* is still current and render it."""

        if not self.is_current(ticket):
            _LOGGER.debug("Discarding stale load #%d (current #%d)", ticket, self._ticket)
            return False

        self._source = source
        self._surface = None
        self._surface_tainted = False
        self._pending_url = None
        self._last_error = None
        self._state = EngineState.READY
        _LOGGER.info("Loaded %s (%dx%d)", source.url or "<image>", source.width, source.height)
        self.render()
        return True

    def fail_load(self, ticket: int, error: LoadError) -> bool:
        """Record *error* for *ticket*; stale tickets are ignored."""

        if not self.is_current(ticket):
            _LOGGER.debug("Ignoring failure of stale load #%d: %s", ticket, error)
            return False

        self._pending_url = None
        self._last_error = error
        self._state = EngineState.LOAD_FAILED
        _LOGGER.warning("Load #%d failed: %s", ticket, error)
        return True

    def load(self, url: str) -> SourceImage:
        """Fetch and decode *url* synchronously, then render it.

        Raises
        ------
        LoadError
            If the resource cannot be fetched, decoded or read back.  Unexpected
            fetcher errors are wrapped.  The engine moves to
            :attr:`EngineState.LOAD_FAILED` and a new load may be tried.
        """

        ticket = self.begin_load(url)
        try:
            source = self._fetcher(url, cross_origin=self._cross_origin)
        except LoadError as exc:
            self.fail_load(ticket, exc)
            raise
        except Exception as exc:
            error = LoadError(f"Unable to load image {url}: {exc}")
            self.fail_load(ticket, error)
            raise error from exc
        self.finish_load(ticket, source)
        return source

    def load_source(self, source: SourceImage) -> None:
        """Install an already decoded *source* (used by tests and the Qt shell)."""

        ticket = self.begin_load(source.url)
        self.finish_load(ticket, source)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------
    def set_parameter(self, name: str, value: float) -> float:
        """Clamp and store *value* for *name*, re-render and return the stored value."""

        stored = self._adjustments.set(name, value)
        self._rerender()
        return stored

    def set_parameters(self, values: dict[str, float]) -> None:
        """Apply several parameters and render once."""

        for name, value in values.items():
            self._adjustments.set(name, value)
        self._rerender()

    def rotate_step(self) -> float:
        rotation = self._adjustments.rotate_step()
        self._rerender()
        return rotation

    def zoom_in(self) -> float:
        zoom = self._adjustments.zoom_in()
        self._rerender()
        return zoom

    def zoom_out(self) -> float:
        zoom = self._adjustments.zoom_out()
        self._rerender()
        return zoom

    def reset(self) -> None:
        self._adjustments.reset()
        self._rerender()

    def _rerender(self) -> None:
        if self._state is EngineState.READY:
            self.render()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self) -> RenderSurface | None:
        """Recompute the surface from the source and the current parameters.

        Outside :attr:`EngineState.READY` this is a no-op returning the previous
        surface, which may be ``None``.
        """

        if self._state is not EngineState.READY or self._source is None:
            return self._surface

        source = self._source
        params = self._adjustments
        matrix = build_canvas_matrix(source.width, source.height, params.rotation, params.zoom)
        inverse = invert_affine(matrix)
        brightness, contrast, saturation = color_amounts(
            params.brightness, params.contrast, params.saturation
        )

        surface = composite(
            source.pixels,
            inverse,
            brightness,
            contrast,
            saturation,
            apply_color=not params.color_is_identity(),
            executor=self._executor,
        )
        if params.sharpness > 0.0:
            surface = sharpen(surface, params.sharpness / 100.0, executor=self._executor)

        surface.setflags(write=False)
        self._surface = surface
        self._surface_tainted = not source.origin_clean
        self._render_count += 1
        return surface

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export(self) -> ExportedBlob:
        """Encode the current surface as PNG.

        Raises
        ------
        ExportError
            If nothing was rendered yet, the engine is not ready, the surface is
            tainted by cross-origin pixels, or encoding fails.
        """

        if self._surface is None:
            raise ExportError("Nothing to export: no image has been rendered yet")
        if self._state is not EngineState.READY:
            raise ExportError(f"Nothing to export: engine is {self._state.value}")
        if self._surface_tainted:
            raise ExportError("The canvas has been tainted by cross-origin data")

        surface = self._surface
        height, width = surface.shape[:2]
        buffer = io.BytesIO()
        try:
            Image.fromarray(np.ascontiguousarray(surface)).save(buffer, format=EXPORT_FORMAT)
        except (OSError, ValueError) as exc:
            raise ExportError(f"Unable to encode image: {exc}") from exc

        blob = ExportedBlob(buffer.getvalue(), EXPORT_MIME_TYPE, width, height)
        _LOGGER.info("Exported %dx%d surface (%d bytes)", width, height, len(blob))
        return blob


__all__ = ["EngineState", "ExportedBlob", "ImageAdjustmentEngine", "RenderSurface"]
