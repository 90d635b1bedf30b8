from fastapi import APIRouter, Depends
from typing import Tuple
import logging

from finerp.api.deps import current_translator, date_range
from finerp.api.downloads import xlsx_attachment
from finerp.core.excel import build_financial_workbook
from finerp.core.i18n import Translator
from finerp.core.statements import build_report_sheets
from finerp.core.tenancy import current_tenant
from finerp.schemas.report import FinancialReport

router = APIRouter(prefix="/reports", tags=["reports"])
logger = logging.getLogger(__name__)


@router.get("/financial", response_model=FinancialReport)
def get_financial_report(
    period: Tuple[str, str] = Depends(date_range),
    tenant_id: str = Depends(current_tenant),
    t: Translator = Depends(current_translator),
):
    date_from, date_to = period
    logger.info(f"Financial report requested for tenant: {tenant_id}, {date_from}..{date_to}")
    return FinancialReport(date_from=date_from, date_to=date_to, sheets=build_report_sheets(t))


@router.get("/financial/export")
def export_financial_report(
    period: Tuple[str, str] = Depends(date_range),
    tenant_id: str = Depends(current_tenant),
    t: Translator = Depends(current_translator),
):
    date_from, date_to = period
    logger.info(f"Financial workbook export STARTED for tenant: {tenant_id}, {date_from}..{date_to}")
    content = build_financial_workbook(build_report_sheets(t), t)
    logger.info(f"Financial workbook export COMPLETED for tenant: {tenant_id}. Size: {len(content)} bytes")
    return xlsx_attachment(content, f"financial-reports-{date_from}-to-{date_to}.xlsx")
