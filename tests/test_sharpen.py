import numpy as np
import pytest

from iGallery.core.filters import sharpen
from iGallery.core.filters.algorithms import sharpen_weights


def _spike(size: int = 5, background: int = 100, peak: int = 200) -> np.ndarray:
    pixels = np.full((size, size, 4), background, dtype=np.uint8)
    pixels[..., 3] = 255
    pixels[size // 2, size // 2, :3] = peak
    return pixels


def test_weights_sum_to_one() -> None:
    centre, edge = sharpen_weights(0.25)
    assert centre == 2.0
    assert edge == -0.25
    assert centre + 4 * edge == 1.0


@pytest.mark.parametrize("executor", ["numpy", "jit"])
def test_zero_amount_returns_unmodified_copy(random_rgba, executor: str) -> None:
    pixels = random_rgba(6, 5)
    result = sharpen(pixels, 0.0, executor=executor)
    assert result is not pixels
    assert np.array_equal(result, pixels)


@pytest.mark.parametrize("executor", ["numpy", "jit"])
def test_full_strength_spike(executor: str) -> None:
    result = sharpen(_spike(), 1.0, executor=executor)
    # centre: 5 * 200 - 4 * 100, clamped
    assert result[2, 2].tolist() == [255, 255, 255, 255]
    # orthogonal neighbour: 5 * 100 - 3 * 100 - 200
    assert result[2, 1].tolist() == [0, 0, 0, 255]
    assert result[1, 2].tolist() == [0, 0, 0, 255]
    # diagonal neighbours carry zero weight
    assert result[1, 1].tolist() == [100, 100, 100, 255]


@pytest.mark.parametrize("executor", ["numpy", "jit"])
def test_half_strength_spike(executor: str) -> None:
    result = sharpen(_spike(3, 100, 150), 0.5, executor=executor)
    # 3 * 150 - 0.5 * 400
    assert result[1, 1, :3].tolist() == [250, 250, 250]


@pytest.mark.parametrize("executor", ["numpy", "jit"])
def test_border_ring_is_untouched(random_rgba, executor: str) -> None:
    pixels = random_rgba(7, 6, seed=3)
    result = sharpen(pixels, 1.0, executor=executor)
    assert np.array_equal(result[0], pixels[0])
    assert np.array_equal(result[-1], pixels[-1])
    assert np.array_equal(result[:, 0], pixels[:, 0])
    assert np.array_equal(result[:, -1], pixels[:, -1])


@pytest.mark.parametrize("executor", ["numpy", "jit"])
def test_alpha_is_copied_through(random_rgba, executor: str) -> None:
    pixels = random_rgba(6, 6, seed=11, opaque=False)
    result = sharpen(pixels, 0.8, executor=executor)
    assert np.array_equal(result[..., 3], pixels[..., 3])


@pytest.mark.parametrize("executor", ["numpy", "jit"])
def test_flat_region_is_stable(solid_rgba, executor: str) -> None:
    pixels = solid_rgba(6, 6, (90, 140, 33, 255))
    assert np.array_equal(sharpen(pixels, 0.37, executor=executor), pixels)


@pytest.mark.parametrize("executor", ["numpy", "jit"])
def test_images_smaller_than_kernel_are_copied(random_rgba, executor: str) -> None:
    pixels = random_rgba(2, 8)
    assert np.array_equal(sharpen(pixels, 1.0, executor=executor), pixels)


@pytest.mark.parametrize("executor", ["numpy", "jit"])
@pytest.mark.parametrize(("right", "expected"), [(100, 98), (98, 100)])
def test_half_sums_round_to_even(executor: str, right: int, expected: int) -> None:
    pixels = np.full((3, 3, 4), 255, dtype=np.uint8)
    pixels[1, 1, :3] = 100
    pixels[0, 1, :3] = 101
    pixels[1, 0, :3] = 101
    pixels[2, 1, :3] = 101
    pixels[1, 2, :3] = right
    result = sharpen(pixels, 0.5, executor=executor)
    # 3 * 100 - 0.5 * (303 + right) lands exactly on a half
    assert result[1, 1].tolist() == [expected, expected, expected, 255]
