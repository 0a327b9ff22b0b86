from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api import health, intent_parser, market, swap_execution, token_data, wallet
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware, register_error_handlers

setup_logging()

# Create FastAPI app
app = FastAPI(
    title="Solana Wallet Assistant API",
    description="Chat backend for a Solana Web3 wallet assistant",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
register_error_handlers(app)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(intent_parser.router, tags=["Chat"])
app.include_router(market.router, tags=["Market"])
app.include_router(swap_execution.router, tags=["Swap"])
app.include_router(wallet.router, tags=["Wallet"])
app.include_router(token_data.router, tags=["Tokens"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Solana Wallet Assistant API",
        "version": "0.1.0",
        "description": "Chat backend for a Solana Web3 wallet assistant",
        "network": settings.normalized_network,
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
