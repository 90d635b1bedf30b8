from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
from pydantic import ValidationError
from typing import List, Optional, Tuple
import logging
import uuid
from urllib.parse import urlsplit

from finerp.api.dashboard import load_dashboard
from finerp.api.deps import current_language, date_range
from finerp.core.config import settings
from finerp.core.i18n import SUPPORTED_LANGUAGES, get_translator, normalize_language, resolve_language
from finerp.core.journal import create_journal_entry, list_journal_entries
from finerp.core.ledger import create_ledger_entry, list_ledger_entries
from finerp.core.periods import filter_by_date_range, today_iso
from finerp.core.purchases import create_bill, list_bills, set_bill_status
from finerp.core.sales import create_invoice, list_invoices, set_invoice_status
from finerp.core.statements import build_report_sheets
from finerp.core.tenancy import current_tenant, current_user
from finerp.core.tenant_settings import get_tenant_settings, save_tenant_settings
from finerp.db.session import get_store
from finerp.db.store import DocumentStore
from finerp.schemas.bill import BillCreate
from finerp.schemas.common import DocumentStatus
from finerp.schemas.invoice import InvoiceCreate
from finerp.schemas.journal import JournalEntryCreate
from finerp.schemas.ledger import LedgerEntryCreate
from finerp.schemas.tenant_settings import TenantSettings

router = APIRouter()
logger = logging.getLogger(__name__)
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

ACCOUNTING_TABS = ("ledger", "journal", "reports")
COOKIE_MAX_AGE = 60 * 60 * 24 * 30


def _render(request: Request, template: str, lang: str, context: dict, status_code: int = 200):
    return templates.TemplateResponse(request, template, {
        "t": get_translator(lang),
        "lang": lang,
        "languages": SUPPORTED_LANGUAGES,
        "user": current_user(request),
        "tenant_id": getattr(request.state, "tenant_id", None),
        "path": request.url.path,
        **context,
    }, status_code=status_code)


def _errors(e: ValidationError) -> List[str]:
    return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]


def _rows(*columns: List[str]) -> List[Tuple[str, ...]]:
    """Zip repeated form fields into rows, dropping rows left completely blank."""
    width = max((len(c) for c in columns), default=0)
    padded = [list(c) + [""] * (width - len(c)) for c in columns]
    return [row for row in zip(*padded) if any(value.strip() for value in row)]


def _untouched_item(description: str, rate: str) -> bool:
    """An added item row the user never filled in: no description and no rate."""
    return not description.strip() and _number(rate) in (0, 0.0)


def _safe_return_path(request: Request) -> str:
    """Path and query of the Referer when it points back at this site, else "/"."""
    referer = urlsplit(request.headers.get("referer") or "")
    if referer.netloc and referer.hostname != request.url.hostname:
        return "/"
    if not referer.path.startswith("/") or referer.path.startswith("//"):
        return "/"
    return f"{referer.path}?{referer.query}" if referer.query else referer.path


def _number(value: str, default: float = 0.0):
    # Left as text when unparseable so validation reports it
    value = value.strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return value


# --- Session -------------------------------------------------------------

@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    lang = resolve_language(
        query_lang=request.query_params.get("lang"),
        cookie_lang=request.cookies.get(settings.LANGUAGE_COOKIE),
        accept_language=request.headers.get("Accept-Language"),
    )
    return _render(request, "login.html", lang, {"error": None})


@router.post("/login")
async def login(
    request: Request,
    email: str = Form(...),
    organization: str = Form(""),
):
    email = email.strip()
    if "@" not in email:
        lang = resolve_language(cookie_lang=request.cookies.get(settings.LANGUAGE_COOKIE))
        return _render(request, "login.html", lang, {"error": "Invalid email address"}, status_code=422)

    # No organisation code: start a new organisation
    tenant_id = organization.strip() or uuid.uuid4().hex
    logger.info(f"Login for {email}, tenant: {tenant_id}")

    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(key=settings.TENANT_COOKIE, value=tenant_id, httponly=True, path="/", max_age=COOKIE_MAX_AGE)
    response.set_cookie(key=settings.USER_COOKIE, value=email, httponly=True, path="/", max_age=COOKIE_MAX_AGE)
    return response


@router.get("/logout")
async def logout():
    response = RedirectResponse(url="/login", status_code=303)
    response.delete_cookie(settings.TENANT_COOKIE, path="/")
    response.delete_cookie(settings.USER_COOKIE, path="/")
    return response


@router.get("/lang/{code}")
async def switch_language(code: str, request: Request):
    lang = normalize_language(code)
    if lang is None:
        raise HTTPException(status_code=400, detail=f"Unsupported language '{code}'")
    response = RedirectResponse(url=_safe_return_path(request), status_code=303)
    response.set_cookie(key=settings.LANGUAGE_COOKIE, value=lang, path="/", max_age=COOKIE_MAX_AGE)
    return response


# --- Dashboard -----------------------------------------------------------

@router.get("/", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    dashboard = load_dashboard(store, tenant_id, get_translator(lang))
    return _render(request, "dashboard.html", lang, {
        "dashboard": dashboard,
        "chart_data": dashboard.model_dump(by_alias=True),
    })


# --- Sales ---------------------------------------------------------------

def _sales_context(store: DocumentStore, tenant_id: str, errors=None) -> dict:
    return {
        "invoices": list_invoices(store, tenant_id),
        "statuses": [s.value for s in DocumentStatus],
        "today": today_iso(),
        "errors": errors or [],
    }


@router.get("/sales", response_class=HTMLResponse)
def sales_page(
    request: Request,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    return _render(request, "sales.html", lang, _sales_context(store, tenant_id))


@router.post("/sales/invoices")
def submit_invoice(
    request: Request,
    customer_name: str = Form(""),
    date: str = Form(""),
    description: List[str] = Form([]),
    quantity: List[str] = Form([]),
    rate: List[str] = Form([]),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    items = [
        {"description": d, "quantity": _number(q, 1), "rate": _number(r)}
        for d, q, r in _rows(description, quantity, rate)
        if not _untouched_item(d, r)
    ]
    try:
        payload = InvoiceCreate(customer_name=customer_name, date=date, items=items)
    except ValidationError as e:
        return _render(request, "sales.html", lang, _sales_context(store, tenant_id, _errors(e)), status_code=422)
    create_invoice(store, tenant_id, payload)
    return RedirectResponse(url="/sales", status_code=303)


@router.post("/sales/invoices/{invoice_id}/status")
def submit_invoice_status(
    invoice_id: str,
    status: DocumentStatus = Form(...),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    if set_invoice_status(store, tenant_id, invoice_id, status) is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return RedirectResponse(url="/sales", status_code=303)


# --- Purchases -----------------------------------------------------------

def _purchases_context(store: DocumentStore, tenant_id: str, errors=None) -> dict:
    return {
        "bills": list_bills(store, tenant_id),
        "statuses": [s.value for s in DocumentStatus],
        "today": today_iso(),
        "default_vat_rate": get_tenant_settings(store, tenant_id).default_vat_rate,
        "errors": errors or [],
    }


@router.get("/purchases", response_class=HTMLResponse)
def purchases_page(
    request: Request,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    return _render(request, "purchases.html", lang, _purchases_context(store, tenant_id))


@router.post("/purchases/bills")
def submit_bill(
    request: Request,
    vendor: str = Form(""),
    date: str = Form(""),
    description: List[str] = Form([]),
    quantity: List[str] = Form([]),
    rate: List[str] = Form([]),
    vat_rate: List[str] = Form([]),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    default_vat = get_tenant_settings(store, tenant_id).default_vat_rate
    items = [
        {"description": d, "quantity": _number(q), "rate": _number(r), "vat_rate": _number(v, default_vat)}
        for d, q, r, v in _rows(description, quantity, rate, vat_rate)
        if not _untouched_item(d, r)
    ]
    try:
        payload = BillCreate(vendor=vendor, date=date, items=items)
    except ValidationError as e:
        return _render(request, "purchases.html", lang, _purchases_context(store, tenant_id, _errors(e)), status_code=422)
    create_bill(store, tenant_id, payload)
    return RedirectResponse(url="/purchases", status_code=303)


@router.post("/purchases/bills/{bill_id}/status")
def submit_bill_status(
    bill_id: str,
    status: DocumentStatus = Form(...),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    if set_bill_status(store, tenant_id, bill_id, status) is None:
        raise HTTPException(status_code=404, detail="Bill not found")
    return RedirectResponse(url="/purchases", status_code=303)


# --- Accounting ----------------------------------------------------------

def _accounting_context(store: DocumentStore, tenant_id: str, tab: str, period: Tuple[str, str],
                        lang: str, errors=None) -> dict:
    date_from, date_to = period
    context = {
        "tab": tab,
        "tabs": ACCOUNTING_TABS,
        "date_from": date_from,
        "date_to": date_to,
        "today": today_iso(),
        "errors": errors or [],
        "ledger_entries": [],
        "journal_entries": [],
        "sheets": [],
    }
    if tab == "ledger":
        context["ledger_entries"] = filter_by_date_range(list_ledger_entries(store, tenant_id), date_from, date_to)
    elif tab == "journal":
        context["journal_entries"] = filter_by_date_range(list_journal_entries(store, tenant_id), date_from, date_to)
    else:
        context["sheets"] = build_report_sheets(get_translator(lang))
    return context


@router.get("/accounting", response_class=HTMLResponse)
def accounting_page(
    request: Request,
    tab: str = "ledger",
    period: Tuple[str, str] = Depends(date_range),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    if tab not in ACCOUNTING_TABS:
        tab = "ledger"
    return _render(request, "accounting.html", lang, _accounting_context(store, tenant_id, tab, period, lang))


@router.post("/accounting/ledger")
def submit_ledger_entry(
    request: Request,
    date: str = Form(""),
    account: str = Form(""),
    description: str = Form(""),
    debit: str = Form(""),
    credit: str = Form(""),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    try:
        payload = LedgerEntryCreate(
            date=date, account=account, description=description,
            debit=_number(debit), credit=_number(credit),
        )
    except ValidationError as e:
        context = _accounting_context(store, tenant_id, "ledger", (today_iso(), today_iso()), lang, _errors(e))
        return _render(request, "accounting.html", lang, context, status_code=422)
    create_ledger_entry(store, tenant_id, payload)
    return RedirectResponse(url=f"/accounting?tab=ledger&from={payload.date}&to={payload.date}", status_code=303)


@router.post("/accounting/journal")
def submit_journal_entry(
    request: Request,
    date: str = Form(""),
    description: str = Form(""),
    account: List[str] = Form([]),
    debit: List[str] = Form([]),
    credit: List[str] = Form([]),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    lines = [
        {"account": a, "debit": _number(d), "credit": _number(c)}
        for a, d, c in _rows(account, debit, credit)
    ]
    try:
        payload = JournalEntryCreate(date=date, description=description, entries=lines)
    except ValidationError as e:
        context = _accounting_context(store, tenant_id, "journal", (today_iso(), today_iso()), lang, _errors(e))
        return _render(request, "accounting.html", lang, context, status_code=422)
    create_journal_entry(store, tenant_id, payload)
    return RedirectResponse(url=f"/accounting?tab=journal&from={payload.date}&to={payload.date}", status_code=303)


# --- Reports & settings --------------------------------------------------

@router.get("/reports", response_class=HTMLResponse)
def reports_page(
    request: Request,
    period: Tuple[str, str] = Depends(date_range),
    lang: str = Depends(current_language),
):
    date_from, date_to = period
    return _render(request, "reports.html", lang, {
        "sheets": build_report_sheets(get_translator(lang)),
        "date_from": date_from,
        "date_to": date_to,
    })


@router.get("/settings", response_class=HTMLResponse)
def settings_page(
    request: Request,
    saved: Optional[bool] = False,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    return _render(request, "settings.html", lang, {
        "company": get_tenant_settings(store, tenant_id),
        "saved": saved,
        "errors": [],
    })


@router.post("/settings")
def submit_settings(
    request: Request,
    company_name: str = Form(""),
    pan_number: str = Form(""),
    address: str = Form(""),
    language: str = Form("en"),
    default_vat_rate: str = Form(""),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    lang: str = Depends(current_language),
):
    try:
        payload = TenantSettings(
            company_name=company_name.strip(),
            pan_number=pan_number.strip(),
            address=address.strip(),
            language=language,
            default_vat_rate=_number(default_vat_rate, settings.DEFAULT_VAT_RATE),
        )
    except ValidationError as e:
        return _render(request, "settings.html", lang, {
            "company": get_tenant_settings(store, tenant_id),
            "saved": False,
            "errors": _errors(e),
        }, status_code=422)
    save_tenant_settings(store, tenant_id, payload)
    response = RedirectResponse(url="/settings?saved=true", status_code=303)
    # The tenant's language takes over from any earlier toggle
    response.delete_cookie(settings.LANGUAGE_COOKIE, path="/")
    return response
