"""
Label file loading.
"""

from __future__ import annotations

import logging
from typing import List


def load_labels(path: str) -> List[str]:
    """
    Read class labels, one per line.

    Reading stops at the first empty line, so trailing blank lines and
    anything after a blank separator are ignored.

    Raises:
        FileNotFoundError: If the label file does not exist.
    """
    labels: List[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            label = line.strip()
            if not label:
                break
            labels.append(label)

    logging.info(f"Loaded {len(labels)} labels from {path}")
    return labels
