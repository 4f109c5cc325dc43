"""Multithreaded processor implementation - uses a thread pool per source."""

from typing import Callable, Dict, List
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from ..core import VariantResult, VariantSpec
from ..keys import resolve


def process_variants(
    source_key: str,
    specs: List[VariantSpec],
    task: Callable[[VariantSpec], VariantResult],
    max_workers: int = 4,
) -> List[VariantResult]:
    """
    Produce variants concurrently on a bounded thread pool.

    Tasks only read the shared decoded image, and the boto3 client is
    thread-safe, so no locking is needed.

    Args:
        source_key: Key the variants are derived from
        specs: Variants to produce
        task: Callable producing one variant
        max_workers: Upper bound on threads

    Returns:
        Results in the same order as `specs`
    """
    if not specs:
        return []

    results: Dict[int, VariantResult] = {}

    with ThreadPoolExecutor(max_workers=min(max_workers, len(specs))) as executor:
        future_to_index: Dict[Future, int] = {
            executor.submit(task, spec): index for index, spec in enumerate(specs)
        }

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                results[index] = future.result()
            except Exception as e:
                # Handle any unexpected errors
                spec = specs[index]
                results[index] = VariantResult(
                    key=resolve(source_key, spec.breakpoint),
                    breakpoint=spec.breakpoint,
                    width=spec.width,
                    height=spec.height,
                    success=False,
                    error_type=type(e).__name__,
                    error=str(e),
                )

    return [results[index] for index in range(len(specs))]
