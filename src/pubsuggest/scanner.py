"""Textual import detection.

``is_referenced`` is a plain substring check against the canonical
reference ``package:<name>/<name>.dart``. Matches inside comments or string
literals count as references unless ``strict`` is set, in which case only
``import``/``export`` directive lines are considered.
"""

from __future__ import annotations

_DIRECTIVES = ("import ", "export ")


def canonical_reference(package_name: str) -> str:
    return f"package:{package_name}/{package_name}.dart"


def canonical_import(package_name: str) -> str:
    return f"import '{canonical_reference(package_name)}';"


def is_referenced(document_text: str, package_name: str, *, strict: bool = False) -> bool:
    reference = canonical_reference(package_name)
    if not strict:
        return reference in document_text
    return any(
        line.lstrip().startswith(_DIRECTIVES) and reference in line
        for line in document_text.splitlines()
    )


def has_import_line(document_text: str, package_name: str) -> bool:
    """True if a line of the document is exactly the canonical import."""
    target = canonical_import(package_name)
    return any(line.strip() == target for line in document_text.splitlines())
