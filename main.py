# =============================================================================
# 🚀 QR-Studio – Hauptapplikation (main.py)
# =============================================================================

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Union

from dotenv import load_dotenv
from fastapi import Depends, FastAPI

# -------------------------------------------------------------------------
# 1️⃣ .env laden (muss ganz oben sein!)
# -------------------------------------------------------------------------
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("qr_studio")

from database import engine  # noqa: E402
from routes import autosave, history, qr  # noqa: E402
from routes.utils import get_history_store  # noqa: E402
from utils.history_store import HistoryStore  # noqa: E402
from utils.storage_backend import ensure_history_table  # noqa: E402


# -------------------------------------------------------------------------
# 2️⃣ Lebenszyklus
# -------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_history_table(engine)
    logger.info("🧩 Verlaufs-Tabelle bereit")
    yield
    coordinator = getattr(app.state, "autosave", None)
    if coordinator is not None:
        await coordinator.close()
        logger.info("⏹️ Auto-Save beendet")


# -------------------------------------------------------------------------
# 3️⃣ FastAPI App
# -------------------------------------------------------------------------
app = FastAPI(title="QR Studio", version="1.0", lifespan=lifespan)

app.include_router(qr.router)
app.include_router(history.router)
app.include_router(autosave.router)


# -------------------------------------------------------------------------
# 4️⃣ Health
# -------------------------------------------------------------------------
@app.get("/health")
def health(store: HistoryStore = Depends(get_history_store)) -> Dict[str, Union[str, bool]]:
    available = store.is_available()
    return {"status": "ok" if available else "degraded", "storage": available}

