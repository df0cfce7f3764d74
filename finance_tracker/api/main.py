"""
FastAPI Backend for the Personal Finance Tracker
RESTful storage endpoints for transaction records
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import config
from ..logging_config import get_logger
from ..models import json_amount
from ..storage.exceptions import StorageValidationError, TransactionNotFoundError
from ..storage.memory import InMemoryTransactionStore

logger = get_logger(__name__)


class TransactionIn(BaseModel):
    """Create body. Required fields are checked by the store so the error format matches the rest of the API."""

    text: Optional[str] = None
    amount: Optional[Decimal] = None
    type: Optional[str] = None
    category: Optional[str] = None
    date: Optional[dt.date] = None


def _encode(content):
    """JSON-ready documents with amounts kept exact."""
    return jsonable_encoder(content, custom_encoder={Decimal: json_amount})


def create_app(store: Optional[InMemoryTransactionStore] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        store: Document store to serve (a fresh in-memory store by default)
    """
    store = store if store is not None else InMemoryTransactionStore()

    app = FastAPI(
        title=f"{config.APP_NAME} API",
        description="Store, list and delete income/expense transactions",
        version=config.VERSION
    )
    app.state.store = store

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are reported like other validation failures."""
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'][1:])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"message": errors or "Invalid request"})

    @app.get("/")
    async def root():
        """Root endpoint - API information"""
        return {
            "message": f"{config.APP_NAME} API",
            "version": config.VERSION,
            "endpoints": {
                "GET /api/transactions": "List transactions, newest first",
                "POST /api/transactions": "Create a transaction",
                "DELETE /api/transactions/{id}": "Delete a transaction",
                "GET /health": "Health check"
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "transactions": len(store),
            "timestamp": dt.datetime.now().isoformat()
        }

    @app.get("/api/transactions")
    def list_transactions():
        """All transactions, newest date first."""
        return _encode(store.list())

    @app.post("/api/transactions", status_code=201)
    def create_transaction(body: TransactionIn):
        """
        Create a transaction.

        - **text**: Description (required)
        - **amount**: Signed amount, negative for expenses (required)
        - **type**: "income" or "expense" (required)
        - **category**: Defaults to "General"
        - **date**: YYYY-MM-DD, defaults to today
        """
        try:
            return _encode(store.create(body.model_dump()))
        except StorageValidationError as e:
            logger.warning(f"Rejected transaction: {e}")
            return JSONResponse(status_code=400, content={"message": str(e)})

    @app.delete("/api/transactions/{transaction_id}")
    def delete_transaction(transaction_id: str):
        """
        Delete a transaction permanently.

        - **transaction_id**: Id returned on creation
        """
        try:
            store.delete(transaction_id)
        except TransactionNotFoundError:
            return JSONResponse(status_code=404, content={"message": "Transaction not found"})
        return {"message": "Transaction deleted successfully"}

    return app


app = create_app()


def run(host: Optional[str] = None, port: Optional[int] = None):
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=host or config.API_HOST, port=port or config.API_PORT)


if __name__ == "__main__":
    from ..logging_config import setup_logging

    setup_logging()
    run()
