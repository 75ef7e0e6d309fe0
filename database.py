# =============================================================================
# 🗄️ database.py
# -----------------------------------------------------------------------------
# SQLAlchemy-Konfiguration für den QR-Verlaufsspeicher
# Standard: SQLite-Datei, per DATABASE_URL (.env) überschreibbar
# =============================================================================

import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv

# 🔹 .env laden (z. B. aus .env-Datei im Projektverzeichnis)
load_dotenv()

SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./qr_history.db")

# 🔹 Engine erstellen
# SQLite braucht check_same_thread=False, weil FastAPI Threads wechselt
_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=True,
)

# 🔹 SessionFactory – erzeugt eine Session pro Speicherzugriff
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# 🔹 Basisklasse für alle SQLAlchemy-Modelle
Base = declarative_base()
