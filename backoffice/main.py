"""FastAPI application for the back-office statement reader and ledger."""

import logging
from uuid import UUID

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from backoffice.config import settings
from backoffice.db.sqlite import db
from backoffice.models import (
    BankTransaction,
    BreakdownItem,
    CategoryAssignment,
    CategoryInput,
    ImportResponse,
    MonthlyStats,
    ParsedStatement,
    ParsePreviewResponse,
    ParseTextRequest,
    StatementImport,
    TagInput,
    TransactionCategory,
    TransactionCreate,
    TransactionTag,
    TransactionUpdate,
)
from backoffice.parsers.pdf_text import ExtractionError
from backoffice.parsers.validation import ValidationError
from backoffice.services import ledger, stats
from backoffice.services.export import export_month_csv
from backoffice.services.importer import MANUAL_ENTRY_HINT, import_pdf, preview_pdf, preview_text, save_statement
from backoffice.services.ledger import NotFoundError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Back-office",
    description="Bank statement reader and monthly ledger",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup():
    """Initialize on startup."""
    settings.ensure_directories()
    settings.log_config()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "transaction_count": db.get_transaction_count()}


# ----------------------------------------------------------------------
# Statements
# ----------------------------------------------------------------------


async def _read_pdf_upload(file: UploadFile) -> bytes:
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")
    if not file.filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Only PDF statements are supported")

    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Empty file")
    return contents


@app.post("/statements/parse", response_model=ParsePreviewResponse)
async def parse_statement_upload(file: UploadFile = File(...), statement_year: int | None = Query(None, ge=2000, le=2100)):
    """Parse a PDF statement and return the preview; nothing is saved."""
    contents = await _read_pdf_upload(file)
    try:
        return await preview_pdf(contents, statement_year=statement_year)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"{e} {MANUAL_ENTRY_HINT}")
    except ExtractionError as e:
        raise HTTPException(status_code=422, detail=f"{e}. {MANUAL_ENTRY_HINT}")
    except Exception as e:
        logger.exception(f"Failed to parse {file.filename}")
        raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")


@app.post("/statements/parse-text", response_model=ParsePreviewResponse)
async def parse_statement_text(request: ParseTextRequest):
    """Parse statement text that was extracted elsewhere."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Statement text is empty")
    return preview_text(request.text, statement_year=request.statement_year)


@app.post("/statements/import", response_model=ImportResponse)
async def import_statement(file: UploadFile = File(...), statement_year: int | None = Query(None, ge=2000, le=2100)):
    """Parse a PDF statement and save its new transactions."""
    contents = await _read_pdf_upload(file)
    try:
        return await import_pdf(file.filename, contents, statement_year=statement_year)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"{e} {MANUAL_ENTRY_HINT}")
    except ExtractionError as e:
        raise HTTPException(status_code=422, detail=f"{e}. {MANUAL_ENTRY_HINT}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to import {file.filename}")
        raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")


@app.post("/statements/save", response_model=ImportResponse)
async def save_parsed_statement(statement: ParsedStatement):
    """Save a reviewed statement preview."""
    if not statement.transactions:
        raise HTTPException(status_code=400, detail="No transactions to save")
    return save_statement(statement)


@app.get("/statements/imports", response_model=list[StatementImport])
async def get_statement_imports():
    """Get the import history, newest first."""
    return db.get_statement_imports()


# ----------------------------------------------------------------------
# Transactions
# ----------------------------------------------------------------------


@app.get("/transactions", response_model=list[BankTransaction])
async def get_transactions(month: str, category_id: str | None = None):
    """Get a month's transactions, oldest first."""
    try:
        return ledger.list_transactions(month, category_id=category_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/transactions", response_model=BankTransaction)
async def create_transaction(entry: TransactionCreate):
    """Add a manual transaction."""
    try:
        return ledger.add_manual_transaction(entry)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/transactions/export")
async def export_transactions(month: str):
    """Download a month's transactions as CSV."""
    try:
        csv_text = export_month_csv(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="transactions-{month}.csv"'},
    )


@app.get("/transactions/{transaction_id}", response_model=BankTransaction)
async def get_transaction(transaction_id: UUID):
    try:
        return ledger.get_transaction(transaction_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.put("/transactions/{transaction_id}", response_model=BankTransaction)
async def update_transaction(transaction_id: UUID, update: TransactionUpdate):
    """Edit a transaction."""
    try:
        return ledger.update_transaction(transaction_id, update)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.put("/transactions/{transaction_id}/category", response_model=BankTransaction)
async def set_transaction_category(transaction_id: UUID, assignment: CategoryAssignment):
    try:
        return ledger.set_transaction_category(transaction_id, assignment.category_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/transactions/{transaction_id}")
async def delete_transaction(transaction_id: UUID):
    try:
        ledger.delete_transaction(transaction_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}


# ----------------------------------------------------------------------
# Categories and tags
# ----------------------------------------------------------------------


@app.get("/categories", response_model=list[TransactionCategory])
async def get_categories():
    """Get all categories (defaults are created on first use)."""
    return ledger.list_categories()


@app.post("/categories", response_model=TransactionCategory)
async def create_category(data: CategoryInput):
    try:
        return ledger.create_category(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.put("/categories/{category_id}", response_model=TransactionCategory)
async def update_category(category_id: UUID, data: CategoryInput):
    try:
        return ledger.update_category(category_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/categories/{category_id}")
async def delete_category(category_id: UUID):
    """Delete a category; its transactions become uncategorized."""
    try:
        cleared = ledger.delete_category(category_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "transactions_updated": cleared}


@app.get("/tags", response_model=list[TransactionTag])
async def get_tags():
    return ledger.list_tags()


@app.post("/tags", response_model=TransactionTag)
async def create_tag(data: TagInput):
    try:
        return ledger.create_tag(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.put("/tags/{tag_id}", response_model=TransactionTag)
async def update_tag(tag_id: UUID, data: TagInput):
    try:
        return ledger.update_tag(tag_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/tags/{tag_id}")
async def delete_tag(tag_id: UUID):
    """Delete a tag and remove it from all transactions."""
    try:
        updated = ledger.delete_tag(tag_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "transactions_updated": updated}


# ----------------------------------------------------------------------
# Statistics
# ----------------------------------------------------------------------


@app.get("/stats/monthly", response_model=MonthlyStats)
async def get_monthly_stats(month: str):
    """Income, expenses and balance for a month."""
    try:
        return stats.monthly_stats(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/stats/categories", response_model=list[BreakdownItem])
async def get_category_breakdown(month: str):
    try:
        return stats.category_breakdown(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/stats/tags", response_model=list[BreakdownItem])
async def get_tag_breakdown(month: str):
    try:
        return stats.tag_breakdown(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/settings")
async def get_settings():
    """Get current statement reader settings."""
    return {
        "segmentation_strategy": settings.segmentation_strategy,
        "min_description_length": settings.min_description_length,
        "infer_statement_year": settings.infer_statement_year,
        "max_upload_bytes": settings.max_upload_bytes,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backoffice.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.dev_mode,
    )
