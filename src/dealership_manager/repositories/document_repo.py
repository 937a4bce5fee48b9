"""Repository for generated documents persistence."""

from __future__ import annotations

import sqlite3
from typing import Optional

from dealership_manager.domain.models import Document, DocumentType
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.mappers import document_from_row


class DocumentRepository:
    """Registry of generated invoices and reports."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def add(self, document: Document) -> Document:
        try:
            cursor = self._connection.execute(
                """
                INSERT INTO documents (
                    doc_type,
                    transaction_id,
                    file_name,
                    file_path,
                    generated_at,
                    notes
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    document.doc_type.value,
                    document.transaction_id,
                    document.file_name,
                    document.file_path,
                    document.generated_at,
                    document.notes,
                ),
            )
        except Exception:
            self._logger.exception(
                "Failed to insert document transaction_id=%s type=%s",
                document.transaction_id,
                document.doc_type,
            )
            raise
        return Document(
            id=int(cursor.lastrowid) if cursor.lastrowid else None,
            doc_type=document.doc_type,
            file_name=document.file_name,
            file_path=document.file_path,
            generated_at=document.generated_at,
            transaction_id=document.transaction_id,
            notes=document.notes,
        )

    def list_documents(
        self,
        *,
        doc_type: Optional[DocumentType] = None,
        transaction_id: Optional[int] = None,
    ) -> list[Document]:
        filters = []
        params: list[object] = []

        if doc_type is not None:
            filters.append("doc_type = ?")
            params.append(doc_type.value)

        if transaction_id is not None:
            filters.append("transaction_id = ?")
            params.append(transaction_id)

        where_clause = f"WHERE {' AND '.join(filters)}" if filters else ""
        query = f"""
            SELECT *
            FROM documents
            {where_clause}
            ORDER BY generated_at DESC, id DESC
        """
        try:
            rows = self._connection.execute(query, params).fetchall()
        except Exception:
            self._logger.exception("Failed to list documents")
            raise
        return [document_from_row(row) for row in rows]
