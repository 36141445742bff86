import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config, models
from .database import engine
from .errors import register_error_handlers
from .routers import bookings, contacts, payments, realtime

logging.basicConfig(level=config.LOG_LEVEL)

# Create tables
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="TripBook Booking & Messaging API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(bookings.router)
app.include_router(payments.router)
app.include_router(contacts.router)
app.include_router(realtime.router)


@app.get("/health")
async def health():
    """Liveness check"""
    return {"status": "ok"}
