from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging

from database import Base, engine, settings
from core.engine import RpsEngine
from core.token_ledger import InMemoryTokenLedger
from api import games, balances

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 在應用啟動時建立資料庫表
    import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield


def create_app(rps_engine: Optional[RpsEngine] = None) -> FastAPI:
    """
    建立 FastAPI app

    參數：
        rps_engine: 已綁定外部 token ledger 的 engine；
            沒有提供時使用 in-process 的 InMemoryTokenLedger（本機開發用）
    """
    app = FastAPI(
        title="RPS Escrow API",
        description="Commit-reveal Rock-Paper-Scissors with escrowed wagers",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.engine = rps_engine or RpsEngine(InMemoryTokenLedger(settings.custody_account))

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure this properly in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(games.router)
    app.include_router(balances.router)

    @app.get("/")
    def root():
        return {"message": "RPS Escrow API", "status": "ok"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
