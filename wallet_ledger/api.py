"""
FastAPI REST API Module

Thin HTTP adapter over the wallet service: balance, credit, debit and
history. Amounts travel as decimal strings. Runs on port 8090.
"""

from datetime import datetime, timezone
import threading

from fastapi import Depends, FastAPI, HTTPException, status
from pydantic import BaseModel, Field
import uvicorn

from .config import get_config
from .errors import InsufficientFunds, InvalidAmount, StoreUnavailable, WalletError
from .logging_config import get_logger, log_action, setup_logging
from .wallet import WalletService


class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")


logger = get_logger("wallet_ledger.api")

_ERROR_STATUS = {
    InvalidAmount: status.HTTP_400_BAD_REQUEST,
    InsufficientFunds: status.HTTP_409_CONFLICT,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error_response(error: WalletError) -> HTTPException:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _ERROR_STATUS.items():
        if isinstance(error, error_type):
            status_code = code
            break
    return HTTPException(status_code=status_code, detail=error.to_dict())


# Global wallet service instance, built once from configuration on first use
wallet_service = None
_wallet_service_lock = threading.Lock()


def get_wallet_service() -> WalletService:
    """Dependency to get the wallet service"""
    global wallet_service
    if wallet_service is None:
        with _wallet_service_lock:
            # Another request may have built it while we waited
            if wallet_service is None:
                config = get_config()
                setup_logging(config.log_level, "wallet_ledger", config.log_format)
                wallet_service = WalletService.from_config(config)
    return wallet_service


app = FastAPI(
    title="Wallet Ledger API",
    description="Single-wallet ledger with derived balance and overdraft protection",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/balance")
def get_balance(service: WalletService = Depends(get_wallet_service)):
    """Current wallet balance"""
    try:
        balance = service.get_balance()
    except WalletError as e:
        raise _error_response(e)
    return {"balance": str(balance)}


@app.post("/credit", status_code=status.HTTP_201_CREATED)
def credit(request: AmountRequest, service: WalletService = Depends(get_wallet_service)):
    """Add funds to the wallet"""
    try:
        transaction = service.credit(request.amount)
    except WalletError as e:
        raise _error_response(e)
    return transaction.to_dict()


@app.post("/debit", status_code=status.HTTP_201_CREATED)
def debit(request: AmountRequest, service: WalletService = Depends(get_wallet_service)):
    """Withdraw funds from the wallet"""
    try:
        transaction = service.debit(request.amount)
    except WalletError as e:
        raise _error_response(e)
    return transaction.to_dict()


@app.get("/history")
def get_history(service: WalletService = Depends(get_wallet_service)):
    """Full transaction history in acceptance order"""
    try:
        transactions = service.get_history()
    except WalletError as e:
        raise _error_response(e)
    return {
        "transactions": [t.to_dict() for t in transactions],
        "count": len(transactions)
    }


def run_server(host: str = "0.0.0.0", port: int = 8090, debug: bool = False):
    """Run the FastAPI server"""
    log_action(logger, "info", f"Starting wallet API on {host}:{port}", action="startup")
    uvicorn.run(
        "wallet_ledger.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )
