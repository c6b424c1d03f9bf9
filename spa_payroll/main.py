import logging
import os
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

from spa_payroll.routes import payroll_router

# Create FastAPI app
app = FastAPI(
    title="July Spa Payroll",
    description="Commission and payroll reports",
    version="1.0.0"
)

# Include routers
app.include_router(payroll_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
