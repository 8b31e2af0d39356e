from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.currency import CurrencyService
from app.core.database import SessionLocal
from app.services.sql_source import SqlFinanceSource


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_finance_source(db: Session = Depends(get_db)) -> SqlFinanceSource:
    return SqlFinanceSource(db)


def get_currency_service(db: Session = Depends(get_db)) -> CurrencyService:
    return CurrencyService(db)
