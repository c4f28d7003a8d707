"""Elementwise preprocessing applied to loaded samples.

Both transforms work in place on every sample and return the same list.
"""

import numpy as np

from netdriver.core.data.protocols import Sample

DEFAULT_BINARIZE_THRESHOLD = 30.0


def binarize_each(
    samples: list[Sample], threshold: float = DEFAULT_BINARIZE_THRESHOLD
) -> list[Sample]:
    """Set every value above the threshold to 1 and the others to 0."""
    for sample in samples:
        sample[...] = np.where(sample > threshold, 1.0, 0.0)
    return samples


def normalize_each(samples: list[Sample]) -> list[Sample]:
    """Scale every sample to zero mean and unit variance.

    Constant samples are only centered.
    """
    for sample in samples:
        mean = sample.mean()
        std = sample.std()
        sample -= mean
        if std > 0:
            sample /= std
    return samples
