from typing import List
from finerp.schemas.common import CamelModel

class DashboardStats(CamelModel):
    total_sales: float = 0.0
    total_purchases: float = 0.0
    receivables: float = 0.0
    vat_on_purchases: float = 0.0
    invoice_count: int = 0
    bill_count: int = 0

class MonthlyPoint(CamelModel):
    month: str
    income: float = 0.0
    expenses: float = 0.0

class ExpenseSlice(CamelModel):
    name: str
    value: float = 0.0

class Reminder(CamelModel):
    key: str
    message: str
    due_date: str = ""

class Dashboard(CamelModel):
    stats: DashboardStats
    monthly: List[MonthlyPoint] = []
    expense_breakdown: List[ExpenseSlice] = []
    reminders: List[Reminder] = []
