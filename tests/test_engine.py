import io

import numpy as np
import pytest
from PIL import Image

from iGallery.core.engine import EngineState, ExportedBlob, ImageAdjustmentEngine
from iGallery.core.image_source import SourceImage
from iGallery.errors import ExportError, LoadError


@pytest.fixture(params=["numpy", "jit"])
def engine(request) -> ImageAdjustmentEngine:
    return ImageAdjustmentEngine(executor=request.param)


def _source(pixels: np.ndarray, *, origin_clean: bool = True, url: str = "memory://test") -> SourceImage:
    return SourceImage.from_array(pixels, url=url, origin_clean=origin_clean)


def test_initial_state_is_unloaded(engine: ImageAdjustmentEngine) -> None:
    assert engine.state is EngineState.UNLOADED
    assert engine.render() is None
    assert engine.surface is None
    assert engine.render_count == 0


def test_mid_grey_identity_example(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    pixels = solid_rgba(4, 4, (128, 128, 128, 255))
    engine.load_source(_source(pixels))

    assert engine.state is EngineState.READY
    assert engine.surface.shape == (4, 4, 4)
    assert np.array_equal(engine.surface, pixels)


def test_default_parameters_reproduce_source(engine: ImageAdjustmentEngine, random_rgba) -> None:
    pixels = random_rgba(9, 7, opaque=False)
    engine.load_source(_source(pixels))
    assert np.array_equal(engine.surface, pixels)


def test_render_is_idempotent(engine: ImageAdjustmentEngine, random_rgba) -> None:
    engine.load_source(_source(random_rgba(8, 6)))
    engine.set_parameters({"brightness": 130, "saturation": 40, "sharpness": 60, "rotation": 90})
    first = engine.render().copy()
    second = engine.render()
    assert np.array_equal(first, second)


def test_surface_is_read_only(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    engine.load_source(_source(solid_rgba(2, 2)))
    with pytest.raises(ValueError):
        engine.surface[0, 0, 0] = 1


def test_brightness_example_is_pinned(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    engine.load_source(_source(solid_rgba(3, 3, (255, 255, 255, 255))))
    assert engine.set_parameter("brightness", 50) == 50.0
    assert np.all(engine.surface == np.array([128, 128, 128, 255], dtype=np.uint8))


def test_set_parameter_clamps_and_rerenders(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    engine.load_source(_source(solid_rgba(2, 2, (255, 255, 255, 255))))
    count = engine.render_count
    assert engine.set_parameter("brightness", -40) == 0.0
    assert engine.render_count == count + 1
    assert np.all(engine.surface[..., :3] == 0)
    assert engine.adjustments.brightness == 0.0


def test_rotation_keeps_surface_size_and_clips(engine: ImageAdjustmentEngine) -> None:
    pixels = np.zeros((2, 4, 4), dtype=np.uint8)
    pixels[..., 0] = np.arange(4, dtype=np.uint8)[None, :] * 50
    pixels[..., 3] = 255
    engine.load_source(_source(pixels))

    engine.rotate_step()
    surface = engine.surface
    assert surface.shape == pixels.shape
    # A 4x2 landscape turned upright only covers the middle two columns.
    assert np.all(surface[:, 0, 3] == 0)
    assert np.all(surface[:, 3, 3] == 0)
    assert np.all(surface[:, 1:3, 3] == 255)


def test_half_turn_mirrors_both_axes(engine: ImageAdjustmentEngine, random_rgba) -> None:
    pixels = random_rgba(5, 3)
    engine.load_source(_source(pixels))
    engine.set_parameter("rotation", 180)
    assert np.array_equal(engine.surface, pixels[::-1, ::-1])


def test_four_rotate_steps_restore_identity(engine: ImageAdjustmentEngine, random_rgba) -> None:
    pixels = random_rgba(6, 6)
    engine.load_source(_source(pixels))
    for _ in range(4):
        engine.rotate_step()
    assert engine.adjustments.rotation == 0.0
    assert np.array_equal(engine.surface, pixels)


def test_zoom_out_leaves_transparent_margin(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    engine.load_source(_source(solid_rgba(8, 8, (10, 20, 30, 255))))
    for _ in range(5):
        engine.zoom_out()
    assert engine.adjustments.zoom == 0.5
    surface = engine.surface
    assert surface[0, 0].tolist() == [0, 0, 0, 0]
    assert surface[4, 4].tolist() == [10, 20, 30, 255]
    assert int((surface[..., 3] == 255).sum()) == 16


def test_zoom_in_magnifies_centre(engine: ImageAdjustmentEngine) -> None:
    pixels = np.zeros((4, 4, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    pixels[1:3, 1:3, :3] = 200
    engine.load_source(_source(pixels))
    engine.set_parameter("zoom", 2.0)
    assert np.all(engine.surface[..., :3] == 200)


def test_sharpness_zero_matches_composite(engine: ImageAdjustmentEngine, random_rgba) -> None:
    engine.load_source(_source(random_rgba(6, 5)))
    engine.set_parameter("brightness", 120)
    unsharpened = engine.surface.copy()
    engine.set_parameter("sharpness", 100)
    sharpened = engine.surface
    assert np.array_equal(sharpened[0], unsharpened[0])
    assert np.array_equal(sharpened[-1], unsharpened[-1])
    assert np.array_equal(sharpened[:, 0], unsharpened[:, 0])
    assert np.array_equal(sharpened[:, -1], unsharpened[:, -1])
    engine.set_parameter("sharpness", 0)
    assert np.array_equal(engine.surface, unsharpened)


def test_reset_restores_source(engine: ImageAdjustmentEngine, random_rgba) -> None:
    pixels = random_rgba(5, 5)
    engine.load_source(_source(pixels))
    engine.set_parameters({"contrast": 10, "zoom": 2.5, "rotation": 270})
    engine.reset()
    assert engine.adjustments.is_identity()
    assert np.array_equal(engine.surface, pixels)


def test_parameters_before_load_do_not_render(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    engine.set_parameter("brightness", 50)
    engine.rotate_step()
    assert engine.render_count == 0
    engine.load_source(_source(solid_rgba(2, 2, (255, 255, 255, 255))))
    assert engine.render_count == 1
    assert engine.surface[0, 0].tolist() == [128, 128, 128, 255]


# ----------------------------------------------------------------------
# Loading
# ----------------------------------------------------------------------
def test_stale_load_is_discarded(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    first = engine.begin_load("first.png")
    second = engine.begin_load("second.png")
    assert not engine.is_current(first)
    assert engine.pending_url == "second.png"

    assert engine.finish_load(first, _source(solid_rgba(2, 2, (1, 1, 1, 255)))) is False
    assert engine.state is EngineState.LOADING
    assert engine.fail_load(first, LoadError("late")) is False
    assert engine.state is EngineState.LOADING

    assert engine.finish_load(second, _source(solid_rgba(2, 2, (9, 9, 9, 255)))) is True
    assert engine.state is EngineState.READY
    assert engine.surface[0, 0].tolist() == [9, 9, 9, 255]
    assert engine.finish_load(second, _source(solid_rgba(2, 2))) is False


def test_render_is_noop_while_loading(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    engine.load_source(_source(solid_rgba(2, 2)))
    previous = engine.surface
    engine.begin_load("next.png")
    engine.set_parameter("brightness", 10)
    assert engine.render() is previous
    with pytest.raises(ExportError):
        engine.export()


def test_failed_load_can_be_retried(solid_rgba) -> None:
    calls = []

    def fetcher(url, *, cross_origin):
        calls.append((url, cross_origin))
        if url == "broken.png":
            raise LoadError("cannot decode")
        return _source(solid_rgba(3, 3), url=url)

    engine = ImageAdjustmentEngine(executor="numpy", fetcher=fetcher)
    with pytest.raises(LoadError):
        engine.load("broken.png")
    assert engine.state is EngineState.LOAD_FAILED
    assert isinstance(engine.last_error, LoadError)
    assert engine.render() is None

    source = engine.load("good.png")
    assert source.url == "good.png"
    assert engine.state is EngineState.READY
    assert engine.last_error is None
    assert calls == [("broken.png", "anonymous"), ("good.png", "anonymous")]


def test_unexpected_fetch_error_is_wrapped() -> None:
    def fetcher(url, *, cross_origin):
        raise ValueError("embedded null byte")

    engine = ImageAdjustmentEngine(executor="numpy", fetcher=fetcher)
    with pytest.raises(LoadError, match="embedded null byte") as excinfo:
        engine.load("bad\x00name.png")

    assert isinstance(excinfo.value.__cause__, ValueError)
    assert engine.state is EngineState.LOAD_FAILED
    assert engine.last_error is excinfo.value


def test_invalid_path_fails_load() -> None:
    engine = ImageAdjustmentEngine(executor="numpy")
    with pytest.raises(LoadError):
        engine.load("bad\x00name.png")
    assert engine.state is EngineState.LOAD_FAILED


def test_load_reads_file(tmp_path, png_bytes, random_rgba) -> None:
    pixels = random_rgba(4, 3)
    path = tmp_path / "photo.png"
    path.write_bytes(png_bytes(pixels))

    engine = ImageAdjustmentEngine(executor="numpy")
    engine.load(str(path))
    assert engine.source.size == (4, 3)
    assert np.array_equal(engine.surface, pixels)


# ----------------------------------------------------------------------
# Export
# ----------------------------------------------------------------------
def test_export_before_load_fails(engine: ImageAdjustmentEngine) -> None:
    with pytest.raises(ExportError):
        engine.export()


def test_export_round_trips_png(engine: ImageAdjustmentEngine, random_rgba) -> None:
    engine.load_source(_source(random_rgba(7, 5, opaque=False)))
    engine.set_parameter("saturation", 150)
    blob = engine.export()

    assert isinstance(blob, ExportedBlob)
    assert blob.mime_type == "image/png"
    assert blob.suggested_extension == ".png"
    assert (blob.width, blob.height) == (7, 5)
    assert len(blob) == len(blob.data) > 0
    with Image.open(io.BytesIO(blob.data)) as decoded:
        assert decoded.format == "PNG"
        assert np.array_equal(np.asarray(decoded.convert("RGBA")), engine.surface)


def test_tainted_source_renders_but_cannot_export(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    engine.load_source(_source(solid_rgba(2, 2), origin_clean=False))
    assert engine.surface is not None
    with pytest.raises(ExportError, match="tainted"):
        engine.export()

    engine.load_source(_source(solid_rgba(2, 2)))
    assert engine.export().mime_type == "image/png"


def test_adjustments_survive_new_load(engine: ImageAdjustmentEngine, solid_rgba) -> None:
    engine.load_source(_source(solid_rgba(2, 2, (255, 255, 255, 255))))
    engine.set_parameter("brightness", 50)
    engine.load_source(_source(solid_rgba(2, 2, (255, 255, 255, 255))))
    assert engine.adjustments.brightness == 50.0
    assert engine.surface[0, 0].tolist() == [128, 128, 128, 255]
