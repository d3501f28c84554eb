# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""UsageSampler: on-demand host memory sampling and tier classification.

Architecture layer: application service.
No psutil / infrastructure imports - queries the host through HostMemoryPort.
The sampler owns no timer; periodic refresh is scheduled by the driver.
"""

import structlog

from heap_tester.domain.services import classify_usage
from heap_tester.domain.value_objects import Tier, UsageSample
from heap_tester.ports.outbound import HostMemoryPort

logger = structlog.get_logger(__name__)


class UsageSampler:
    """Takes fresh UsageSamples from the host and classifies them.

    Stateless apart from the injected port: every ``sample()`` call
    queries the host exactly once, nothing is cached.

    Example:
        >>> sampler = UsageSampler(probe)
        >>> sample = sampler.sample()
        >>> if sample.is_bounded:
        ...     tier = sampler.classify(sample)
    """

    def __init__(self, probe: HostMemoryPort) -> None:
        self._probe = probe

    def sample(self) -> UsageSample:
        """Query the host for used and maximum memory.

        A host without a configured limit yields an unbounded sample
        (``max_bytes=None``) rather than an error.
        """
        used = self._probe.used_bytes()
        limit = self._probe.limit_bytes()
        sample = UsageSample(used_bytes=used, max_bytes=limit)
        logger.debug(
            "usage_sampled",
            used_bytes=sample.used_bytes,
            max_bytes=sample.max_bytes,
            percentage=sample.percentage,
        )
        return sample

    def classify(self, sample: UsageSample) -> Tier:
        """Classify a bounded sample (see ``classify_usage``).

        Raises:
            UnboundedSampleError: If the sample has no memory limit.
        """
        return classify_usage(sample)

    def try_classify(self, sample: UsageSample) -> Tier | None:
        """Classify a sample, or return None when it is unbounded."""
        if not sample.is_bounded:
            return None
        return classify_usage(sample)
