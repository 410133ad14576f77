import numpy as np
import pytest
from sky_gradient.config import AtmosphereConfig
from sky_gradient.errors import ComputationFailure
from sky_gradient.rendering import PostProcessPipeline


@pytest.fixture
def pipeline(config):
    return PostProcessPipeline(config)


def test_black_stays_black(pipeline):
    np.testing.assert_array_equal(pipeline.process(np.zeros((4, 3))), np.zeros((4, 3)))


def test_bright_saturates_to_white(pipeline):
    np.testing.assert_array_equal(pipeline.process(np.full((2, 3), 100.0)), np.full((2, 3), 255))


def test_output_is_integer_in_range(pipeline):
    rng = np.random.default_rng(7)
    colors = pipeline.process(rng.uniform(0.0, 0.2, size=(32, 3)))
    assert np.issubdtype(colors.dtype, np.integer)
    assert colors.min() >= 0 and colors.max() <= 255


def test_exposure(pipeline):
    np.testing.assert_allclose(pipeline.apply_exposure(np.array([0.1, 0.2, 0.3])), [2.5, 5.0, 7.5])


def test_sunset_bias_weights(pipeline):
    biased = pipeline.apply_sunset_bias(np.array([[1.0, 1.0, 1.0]]))
    kw = 0.1 / (1.0 + 2.0 * 1.0)
    np.testing.assert_allclose(biased[0], [1.0 + 0.5 * kw, 1.0 - 0.5 * kw, 1.0 + kw])


def test_sunset_bias_stronger_for_dark_colours(pipeline):
    dark = pipeline.apply_sunset_bias(np.array([0.01, 0.01, 0.01])) / 0.01
    bright = pipeline.apply_sunset_bias(np.array([2.0, 2.0, 2.0])) / 2.0
    assert dark[0] > bright[0]
    assert dark[1] < bright[1]


def test_sunset_bias_never_negative():
    strong = PostProcessPipeline(AtmosphereConfig(sunset_bias_strength=50.0))
    assert np.all(strong.apply_sunset_bias(np.array([0.0, 1.0, 0.0])) >= 0.0)


def test_aces_curve():
    c = 0.5
    expected = c * (2.51 * c + 0.03) / (c * (2.43 * c + 0.59) + 0.14)
    mapped = PostProcessPipeline.tonemap_aces(np.array([0.0, c, 1e6]))
    np.testing.assert_allclose(mapped, [0.0, expected, 1.0])


def test_aces_clamps_negative_input():
    mapped = PostProcessPipeline.tonemap_aces(np.array([-0.2, -5.0, -0.01]))
    assert np.all(mapped >= 0.0) and np.all(mapped <= 1.0)


def test_gamma(pipeline):
    np.testing.assert_allclose(pipeline.apply_gamma(np.array([0.0, 0.5, 1.0])),
                               [0.0, 0.5 ** (1.0 / 2.2), 1.0])


def test_quantize_rounds_half_up():
    np.testing.assert_array_equal(PostProcessPipeline.quantize(np.array([0.0, 0.5, 1.0, 1.5, -1.0])),
                                  [0, 128, 255, 255, 0])


@pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
def test_non_finite_radiance_rejected(pipeline, bad):
    with pytest.raises(ComputationFailure):
        pipeline.process(np.array([[0.1, bad, 0.1]]))
