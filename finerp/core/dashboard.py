from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from finerp.core.i18n import Translator
from finerp.schemas.bill import Bill
from finerp.schemas.common import DocumentStatus
from finerp.schemas.dashboard import Dashboard, DashboardStats, ExpenseSlice, MonthlyPoint, Reminder
from finerp.schemas.invoice import Invoice

MONTHS_SHOWN = 6
TOP_VENDORS = 4
VAT_FILING_DAY = 25


def _month_keys(today: date, count: int) -> List[str]:
    keys = []
    year, month = today.year, today.month
    for _ in range(count):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def monthly_series(invoices: List[Invoice], bills: List[Bill], today: date) -> List[MonthlyPoint]:
    keys = _month_keys(today, MONTHS_SHOWN)
    income: Dict[str, float] = defaultdict(float)
    expenses: Dict[str, float] = defaultdict(float)
    for inv in invoices:
        income[inv.date[:7]] += inv.total_amount
    for bill in bills:
        expenses[bill.date[:7]] += bill.total + bill.total_vat

    points = []
    for key in keys:
        label = date(int(key[:4]), int(key[5:]), 1).strftime("%b")
        points.append(MonthlyPoint(month=label, income=round(income[key], 2), expenses=round(expenses[key], 2)))
    return points


def expense_breakdown(bills: List[Bill], other_label: str = "Other") -> List[ExpenseSlice]:
    by_vendor: Dict[str, float] = defaultdict(float)
    for bill in bills:
        by_vendor[bill.vendor] += bill.total + bill.total_vat

    ranked = sorted(by_vendor.items(), key=lambda kv: (-kv[1], kv[0]))
    slices = [ExpenseSlice(name=name, value=round(value, 2)) for name, value in ranked[:TOP_VENDORS]]
    rest = sum(value for _, value in ranked[TOP_VENDORS:])
    if rest:
        slices.append(ExpenseSlice(name=other_label, value=round(rest, 2)))
    return slices


def next_vat_filing_date(today: date) -> date:
    if today.day <= VAT_FILING_DAY:
        return today.replace(day=VAT_FILING_DAY)
    if today.month == 12:
        return date(today.year + 1, 1, VAT_FILING_DAY)
    return date(today.year, today.month + 1, VAT_FILING_DAY)


def build_dashboard(invoices: List[Invoice], bills: List[Bill], t: Translator, today: Optional[date] = None) -> Dashboard:
    today = today or date.today()
    unpaid = [inv for inv in invoices if inv.status != DocumentStatus.PAID.value]

    stats = DashboardStats(
        total_sales=round(sum(inv.total_amount for inv in invoices), 2),
        total_purchases=round(sum(b.total for b in bills), 2),
        receivables=round(sum(inv.total_amount for inv in unpaid), 2),
        vat_on_purchases=round(sum(b.total_vat for b in bills), 2),
        invoice_count=len(invoices),
        bill_count=len(bills),
    )

    reminders = [
        Reminder(key="vatFilingDue", message=t("dashboard.vatFilingDue"), due_date=next_vat_filing_date(today).isoformat()),
    ]
    if unpaid:
        reminders.append(Reminder(key="invoiceReminder", message=f"{t('dashboard.invoiceReminder')} ({len(unpaid)})"))
    reminders.append(Reminder(key="irdSync", message=t("dashboard.irdSync")))

    return Dashboard(
        stats=stats,
        monthly=monthly_series(invoices, bills, today),
        expense_breakdown=expense_breakdown(bills, t("dashboard.other")),
        reminders=reminders,
    )
