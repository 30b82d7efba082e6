"""Bill number extraction and policy-category classification.

Public API:
    - extract_bill_number: Pull ``C-``/``S-`` bill numbers out of titles
    - CATEGORIES: The fixed policy category list
    - BillClassifier: Classifier protocol
    - KeywordBillClassifier / OpenAIBillClassifier: Implementations
    - build_classifier: Settings-driven classifier factory
"""

from mp_api.lib.bills.classifier import (
    CATEGORIES,
    BillClassificationError,
    BillClassifier,
    KeywordBillClassifier,
    OpenAIBillClassifier,
    build_classifier,
    classify_by_keywords,
)
from mp_api.lib.bills.extract import extract_bill_number

__all__ = [
    "CATEGORIES",
    "BillClassificationError",
    "BillClassifier",
    "KeywordBillClassifier",
    "OpenAIBillClassifier",
    "build_classifier",
    "classify_by_keywords",
    "extract_bill_number",
]
