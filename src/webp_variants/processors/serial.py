"""Serial processor implementation - produces variants one by one."""

from typing import Callable, List

from ..core import VariantResult, VariantSpec


def process_variants(
    source_key: str,
    specs: List[VariantSpec],
    task: Callable[[VariantSpec], VariantResult],
    max_workers: int = 1,
) -> List[VariantResult]:
    """
    Runs the variant task for each planned variant in the current thread.

    Args:
        source_key: Key the variants are derived from.
        specs: Variants to produce.
        task: Callable producing one variant; must not raise.
        max_workers: Ignored; present so all processors share a signature.

    Returns:
        A list of `VariantResult` objects in the same order as `specs`.
    """
    return [task(spec) for spec in specs]
