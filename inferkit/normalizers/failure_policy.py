from __future__ import annotations

from inferkit.domain.models import Classification

# Infer exits with 2 when the analysis ran and reported issues
FINDINGS_EXIT_CODE = 2


def classify_exit_code(exit_code: int) -> Classification:
    if exit_code == 0:
        return Classification.SUCCESS
    if exit_code == FINDINGS_EXIT_CODE:
        return Classification.FINDINGS_PRESENT
    return Classification.ERROR
