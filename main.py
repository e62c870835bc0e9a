# main.py

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from config import LOG_LEVEL
from routers import attendance_router
from services.attendance_service import DuplicateRecordError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Attendance Reconciliation Engine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Adjust as needed for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DuplicateRecordError)
async def duplicate_record_handler(request: Request, exc: DuplicateRecordError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


app.include_router(attendance_router.router)

@app.get("/")
def read_root():
    return {"message": "Attendance reconciliation service is running"}
