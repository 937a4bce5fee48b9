"""Document naming and storage settings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dealership_manager.domain.models import DocumentType
from dealership_manager.paths import get_documents_dir
from dealership_manager.utils.config_store import load_config_data, update_config_data

DOCUMENT_LABELS = {
    DocumentType.CUSTOMER_INVOICE: "Customer_Invoice",
    DocumentType.BANK_INVOICE: "Bank_Invoice",
    DocumentType.REPORT: "Report",
}


@dataclass(frozen=True)
class DocumentsSettings:
    documents_dir: Optional[str] = None


def sanitize_filename(value: str, fallback: str = "Customer") -> str:
    """Collapse whitespace to underscores and drop anything unsafe for filenames."""
    cleaned = "_".join((value or "").split())
    cleaned = re.sub(r"[^A-Za-z0-9_-]", "", cleaned)
    return cleaned or fallback


def build_document_filename(
    reference: str,
    doc_type: DocumentType,
    customer_name: Optional[str] = None,
) -> str:
    parts = [DOCUMENT_LABELS.get(doc_type, doc_type.value), sanitize_filename(reference, "Document")]
    if customer_name:
        parts.append(sanitize_filename(customer_name))
    return "_".join(parts) + ".pdf"


def load_documents_settings(config_path: Path) -> DocumentsSettings:
    value = load_config_data(config_path).get("documents_dir")
    if isinstance(value, str) and value.strip():
        return DocumentsSettings(documents_dir=value)
    return DocumentsSettings()


def save_documents_settings(config_path: Path, settings: DocumentsSettings) -> None:
    update_config_data(config_path, documents_dir=settings.documents_dir)


def resolve_documents_dir(config_path: Path, override: Optional[Path | str] = None) -> Path:
    """Pick the output directory: explicit override, configured path, then default."""
    if override:
        target = Path(override)
    else:
        configured = load_documents_settings(config_path).documents_dir
        target = Path(configured) if configured else get_documents_dir()
    target.mkdir(parents=True, exist_ok=True)
    return target
