from app.core.models.ledger_document import LedgerDocument
