"""Progress display for per-individual pedigree loops.

Inbreeding and the Q-matrix visit every individual once; on pedigrees with
millions of animals a bar with an ETA shows how far the pass has got.
"""

import sys
from collections.abc import Iterable, Iterator

import progressbar


def _widgets(desc: str) -> list:
    label = [f"{desc}: "] if desc else []
    return [
        *label,
        progressbar.SimpleProgress(),
        " individuals ",
        progressbar.Percentage(),
        " ",
        progressbar.Bar(),
        " ",
        progressbar.ETA(),
    ]


def progress_iterator(iterable: Iterable, total: int, desc: str = "") -> Iterator:
    """Yield from ``iterable`` while advancing a bar towards ``total``.

    The bar goes to stdout, the same stream as the default loguru sink. It
    is closed when the loop ends for any reason, including a ``break`` in
    the caller or an error raised mid-pass.

    Args:
        iterable: Individuals (or any items) to visit.
        total: Expected number of items.
        desc: Label printed in front of the bar, e.g. "inbreeding".

    Yields:
        Each item of ``iterable`` unchanged.
    """
    bar = progressbar.ProgressBar(
        max_value=total, widgets=_widgets(desc), fd=sys.stdout
    )
    bar.start()
    try:
        for done, item in enumerate(iterable, start=1):
            yield item
            bar.update(done)
    finally:
        bar.finish()


def maybe_progress(
    iterable: Iterable, total: int, desc: str = "", enabled: bool = False
) -> Iterable:
    """Return ``iterable`` wrapped in a progress bar only when ``enabled``.

    Engines take a ``show_progress`` flag and pass it through here so the
    loop body stays identical with and without a bar. Passes of fewer than
    two items are never wrapped.
    """
    if not enabled or total < 2:
        return iterable
    return progress_iterator(iterable, total=total, desc=desc)
