"""
Batch/queue worker.

Queue integrations can pull jobs from Redis/Kafka/DB and reuse the shared
pipeline. Fetching and storage stay with the caller so this can be embedded
into any worker framework.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from . import config
from .errors import FailureReason
from .pipeline import Failure, PipelineOutcome, ProviderFactory, Success, process_image_bytes

logger = logging.getLogger(__name__)


@dataclass
class BatchItem:
    image_bytes: bytes
    crop_image: bool = False


def _process_item(
    index: int,
    item: BatchItem,
    provider_factory: ProviderFactory,
    settings: config.Settings,
) -> PipelineOutcome:
    try:
        outcome = process_image_bytes(
            item.image_bytes, item.crop_image, provider_factory, settings=settings
        )
    except ValueError as exc:
        logger.warning("Batch item %d: %s", index, exc)
        return Failure(FailureReason.LOAD_FAILED, str(exc))

    if isinstance(outcome, Success):
        logger.info(
            "Batch item %d done foreground=%s size=%sx%s",
            index,
            outcome.foreground_detected,
            *outcome.image.size,
        )
    else:
        logger.warning("Batch item %d failed: %s %s", index, outcome.reason.value, outcome.detail)
    return outcome


def process_batch(
    items: Iterable[BatchItem],
    provider_factory: ProviderFactory,
    max_workers: Optional[int] = None,
    settings: Optional[config.Settings] = None,
) -> List[PipelineOutcome]:
    """
    Process a batch of images on a thread pool.

    Returns one outcome per item, in input order. Each item gets its own
    mask provider from `provider_factory`, so items never share state.
    """
    settings = settings or config.get_settings()
    items = list(items)
    max_workers = max_workers or settings.batch_max_workers
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(_process_item, index, item, provider_factory, settings)
            for index, item in enumerate(items)
        ]
        return [future.result() for future in futures]
