import os
import re
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import (
    close_db,
    create_document,
    ensure_indexes,
    find_by_id,
    get_db,
    get_documents,
    init_db,
    parse_object_id,
    serialize_doc,
)
from logger import get_logger
from schemas import Contact, User
from security import (
    AuthUser,
    create_access_token,
    get_current_user,
    hash_password,
    require_admin,
    verify_password,
)

_logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = init_db()
    ensure_indexes(db)
    yield
    close_db()


# App setup
app = FastAPI(title="MedBridge Directory API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed = (time.perf_counter() - start) * 1000
        _logger.info(f"{request.method} {request.url.path} {status_code} {elapsed:.1f} ms")


# Error envelope: every failure is {"success": false, "message": ...}

def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        field = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
        message = f"{field}: {errors[0].get('msg')}" if field else errors[0].get("msg", message)
    return error_response(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(PyMongoError)
async def database_exception_handler(request: Request, exc: PyMongoError):
    _logger.exception(f"Database error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    _logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


# Request models
class RegisterRequest(BaseModel):
    # names must contain a non-blank character; the stored User strips them
    firstName: str = Field(..., min_length=1, pattern=r"\S")
    lastName: str = Field(..., min_length=1, pattern=r"\S")
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class ContactIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


# Routes
@app.get("/")
def root():
    return {"message": "MedBridge Directory API"}


@app.get("/test")
def test_database(db: Database = Depends(get_db)):
    try:
        collections = db.list_collection_names()
        return {"backend": "ok", "database": "ok", "collections": collections}
    except PyMongoError as e:
        return {"backend": "ok", "database": f"error: {str(e)[:80]}"}


# Products
@app.get("/api/products")
def list_products(category: Optional[str] = None, db: Database = Depends(get_db)):
    filt = {"category": category} if category else {}
    return [serialize_doc(p) for p in get_documents(db, "product", filt)]


@app.get("/api/products/search")
def search_products(q: Optional[str] = None, db: Database = Depends(get_db)):
    if not q:
        raise HTTPException(status_code=400, detail="Search query is required")
    pattern = {"$regex": re.escape(q), "$options": "i"}
    filt = {"$or": [{"name": pattern}, {"description": pattern}, {"category": pattern}]}
    return [serialize_doc(p) for p in get_documents(db, "product", filt)]


@app.get("/api/products/{product_id}")
def get_product(product_id: str, db: Database = Depends(get_db)):
    product = find_by_id(db, "product", product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_doc(product)


# Suppliers
@app.get("/api/suppliers")
def list_suppliers(db: Database = Depends(get_db)):
    return [serialize_doc(s) for s in get_documents(db, "supplier")]


@app.get("/api/suppliers/{supplier_id}")
def get_supplier(supplier_id: str, db: Database = Depends(get_db)):
    supplier = find_by_id(db, "supplier", supplier_id)
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return serialize_doc(supplier)


# Auth
@app.post("/api/auth/register")
def register(payload: RegisterRequest, db: Database = Depends(get_db)):
    email = payload.email.lower()
    if db["user"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="User already exists")
    user = User(
        first_name=payload.firstName,
        last_name=payload.lastName,
        email=email,
        password=hash_password(payload.password),
        role="user",
    )
    try:
        user_id = create_document(db, "user", user)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration for the same email
        raise HTTPException(status_code=400, detail="User already exists")
    _logger.info(f"Registered user {user_id}")
    return {"success": True, "token": create_access_token(user_id, user.role)}


@app.post("/api/auth/login")
def login(payload: LoginRequest, db: Database = Depends(get_db)):
    user = db["user"].find_one({"email": payload.email.strip().lower()})
    if not user or not user.get("password") or not verify_password(payload.password, user["password"]):
        raise HTTPException(status_code=400, detail="Invalid credentials")
    token = create_access_token(str(user["_id"]), user.get("role", "user"))
    return {"success": True, "token": token}


@app.get("/api/auth/me")
def me(user: AuthUser = Depends(get_current_user)):
    return {"success": True, "user": user.model_dump()}


# Contact
@app.post("/api/contact", status_code=status.HTTP_201_CREATED)
def submit_contact(payload: ContactIn, db: Database = Depends(get_db)):
    fields = [payload.name, payload.email, payload.subject, payload.message]
    if not all(f and f.strip() for f in fields):
        raise HTTPException(status_code=400, detail="All fields are required")
    contact = Contact(name=payload.name, email=payload.email, subject=payload.subject, message=payload.message)
    create_document(db, "contact", contact)
    return {"success": True, "message": "Your message has been sent"}


@app.get("/api/contact")
def list_contacts(user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    contacts = db["contact"].find({}).sort("createdAt", DESCENDING)
    return [serialize_doc(c) for c in contacts]


@app.patch("/api/contact/{contact_id}/read")
def mark_contact_read(contact_id: str, user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    oid = parse_object_id(contact_id)
    contact = None
    if oid is not None:
        contact = db["contact"].find_one_and_update(
            {"_id": oid},
            {"$set": {"isRead": True, "updatedAt": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")
    return {"success": True, "contact": serialize_doc(contact)}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
