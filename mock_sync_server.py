import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse

app = FastAPI(
    title="School Sync Plugin (Stub)",
    description="In-memory stand-in for the school server's custom-sync REST plugin.",
    version="1.0.0-stub"
)

SYNC_KEY = os.getenv("MOCK_SYNC_KEY", "test-key")

STUDENTS: List[Dict[str, Any]] = [
    {"studentId": "S1", "studentName": "Asha Rao", "class": "8=>A=>SOCIAL SCIENCE-089", "section": "A", "rollNumber": "1", "contactNumber": "5550001"},
    {"studentId": "S2", "studentName": "Ben Ito", "class": "8=>B=>MATHEMATICS", "section": "B", "rollNumber": "2", "contactNumber": "5550002"},
]
TEACHERS: List[Dict[str, Any]] = [
    {"id": "T1", "name": "Dana Cole", "role": "Teacher", "phone": "5551000", "email": "dana@school.test"},
]
CLASSES: List[Dict[str, Any]] = [
    {"id": "1", "class_name": "Class 8", "class_numeric": "8", "class_section": "A,B", "class_capacity": "40", "student_count": "2"},
]
RECEIVED_ATTENDANCE: List[Dict[str, Any]] = []


def _check_key(x_sync_key: Optional[str]):
    if x_sync_key != SYNC_KEY:
        raise HTTPException(status_code=401, detail="Invalid sync key.")


@app.exception_handler(HTTPException)
async def plugin_error_handler(request, exc: HTTPException):
    # The plugin reports errors as {"message": ...}.
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.get("/wp-json/custom-sync/v1/data")
async def get_data(x_sync_key: Optional[str] = Header(None)):
    _check_key(x_sync_key)
    return {"students": STUDENTS, "teachers": TEACHERS, "classes": CLASSES}

@app.post("/wp-json/custom-sync/v1/attendance")
async def post_attendance(payload: Dict[str, Any], x_sync_key: Optional[str] = Header(None)):
    _check_key(x_sync_key)
    if "students" not in payload and "teachers" not in payload:
        raise HTTPException(status_code=400, detail="No attendance records in request.")
    RECEIVED_ATTENDANCE.append(payload)
    return {"success": True}

@app.get("/wp-json/custom-sync/v1/classes")
async def get_classes(x_sync_key: Optional[str] = Header(None)):
    _check_key(x_sync_key)
    return CLASSES

@app.post("/wp-json/custom-sync/v1/classes")
async def add_class(payload: Dict[str, Any], x_sync_key: Optional[str] = Header(None)):
    _check_key(x_sync_key)
    new_id = str(max((int(c["id"]) for c in CLASSES), default=0) + 1)
    sections = payload.get("class_section") or []
    CLASSES.append({
        "id": new_id,
        "class_name": payload.get("class_name", ""),
        "class_numeric": payload.get("class_numeric", ""),
        "class_section": ",".join(sections),
        "class_capacity": payload.get("class_capacity", ""),
        "student_count": "0",
    })
    return {"success": True, "id": new_id}

@app.delete("/wp-json/custom-sync/v1/classes/{class_id}")
async def delete_class(class_id: str, x_sync_key: Optional[str] = Header(None)):
    _check_key(x_sync_key)
    for i, c in enumerate(CLASSES):
        if c["id"] == class_id:
            del CLASSES[i]
            return {"success": True}
    raise HTTPException(status_code=404, detail="Class not found.")

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
