from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.masjid.db.store import RecordStore


SEED_INVOICES = [
    {"id": "BILL-ABDUL-001", "member_id": "M-001", "name": "Abdul Rahman", "amount": 1000, "arrears": 2000, "status": "Unpaid", "due_date": "2025-12-10"},
    {"id": "BILL-FAZIL-002", "member_id": "M-002", "name": "Mohamed Fazil", "amount": 2000, "arrears": 0, "status": "Unpaid", "due_date": "2025-12-10"},
    {"id": "BILL-YUSUF-003", "member_id": "M-003", "name": "Yusuf Khan", "amount": 1500, "arrears": 0, "status": "Paid", "due_date": "2025-12-10"},
    {"id": "BILL-ZAID-004", "member_id": "M-004", "name": "Zaid Ahmed", "amount": 1000, "arrears": 500, "status": "Overdue", "due_date": "2025-11-10"},
    {"id": "BILL-FATHIMA-005", "member_id": "M-005", "name": "Fathima R.", "amount": 1000, "arrears": 0, "status": "Unpaid", "due_date": "2025-12-10"},
]

SEED_EXPENSES = [
    {"id": "EXP-001", "date": "2025-12-05", "category": "Utilities", "payee": "CEB (Electricity)", "description": "Mosque Main Hall - Nov Bill", "amount": 12500, "status": "Paid", "receipt": True},
    {"id": "EXP-002", "date": "2025-12-01", "category": "Salaries", "payee": "Imam & Staff", "description": "Monthly Staff Payroll", "amount": 85000, "status": "Paid", "receipt": True},
    {"id": "EXP-003", "date": "2025-12-04", "category": "Maintenance", "payee": "Hardware Store", "description": "Plumbing repairs for Wudu area", "amount": 4500, "status": "Pending", "receipt": False},
    {"id": "EXP-004", "date": "2025-12-02", "category": "Events", "payee": "Catering Service", "description": "Friday Community Lunch", "amount": 15000, "status": "Paid", "receipt": True},
]

SEED_INCOME = [
    {"id": "INC-9001", "date": "2025-12-05", "source": "Sanda", "reference": "Abdul Rahman (M-001)", "amount": 3000, "method": "Cash", "category": "Monthly Fee"},
    {"id": "INC-9002", "date": "2025-12-04", "source": "Donation", "reference": "Mr. Farook", "amount": 15000, "method": "Bank Transfer", "category": "Building Fund"},
    {"id": "INC-9003", "date": "2025-12-04", "source": "Sanda", "reference": "Mohamed Fazil (M-002)", "amount": 2000, "method": "Online", "category": "Monthly Fee"},
    {"id": "INC-9004", "date": "2025-12-03", "source": "Donation", "reference": "Friday Collection", "amount": 12450, "method": "Cash", "category": "Jummah"},
    {"id": "INC-9005", "date": "2025-12-01", "source": "Sanda", "reference": "Yusuf Khan (M-003)", "amount": 1500, "method": "Cash", "category": "Arrears Payment"},
    {"id": "INC-9006", "date": "2025-11-20", "source": "Donation", "reference": "Anonymous", "amount": 5000, "method": "Cash", "category": "General"},
    {"id": "INC-9007", "date": "2025-11-15", "source": "Sanda", "reference": "Zaid Ahmed", "amount": 1000, "method": "Cash", "category": "Monthly Fee"},
]

SEED_ARREARS = [
    {"id": "M-001", "name": "Abdul Rahman", "phone": "94771234567", "arrears": 5000, "months_due": 5, "last_paid": "2024-07-15", "status": "Active"},
    {"id": "M-003", "name": "Yusuf Khan", "phone": "94755551234", "arrears": 12000, "months_due": 12, "last_paid": "2023-12-01", "status": "Active"},
    {"id": "M-004", "name": "Zaid Ahmed", "phone": "94761112222", "arrears": 1000, "months_due": 1, "last_paid": "2024-11-10", "status": "Active"},
    {"id": "M-008", "name": "Farook Hameed", "phone": "94718889999", "arrears": 2500, "months_due": 2, "last_paid": "2024-10-05", "status": "Moved"},
]

SEED_DONATIONS = [
    {"id": "don_1", "donor_name": "Anonymous", "amount": 50000, "date": "2023-10-25", "purpose": "Building Fund", "method": "Bank Transfer", "type": "One-time"},
    {"id": "don_2", "donor_name": "Mohamed Nazeer", "amount": 2500, "date": "2023-10-24", "purpose": "General", "method": "Cash", "type": "Recurring"},
    {"id": "don_3", "donor_name": "Fathima R.", "amount": 15000, "date": "2023-10-24", "purpose": "Zakat", "method": "Cash", "type": "One-time"},
    {"id": "don_4", "donor_name": "Friday Collection", "amount": 12400, "date": "2023-10-20", "purpose": "Jummah", "method": "Cash", "type": "One-time"},
]

SEED_STAFF = [
    {"id": "emp_1", "name": "Alex Johnson", "email": "alex.johnson@example.com", "role": "Manager", "status": "active", "phone": "0751234567", "hire_date": "2023-05-15"},
    {"id": "emp_2", "name": "Maria Garcia", "email": "maria.garcia@example.com", "role": "Cashier", "status": "active", "phone": "0751234567", "hire_date": "2024-01-10"},
    {"id": "emp_3", "name": "David Smith", "email": "david.smith@example.com", "role": "Cashier", "status": "inactive", "phone": "0751234567", "hire_date": "2023-11-20"},
    {"id": "emp_4", "name": "Sarah Chen", "email": "sarah.chen@example.com", "role": "Shift Supervisor", "status": "active", "phone": "0751234567", "hire_date": "2023-08-01"},
]

SEED_COLLECTIONS = {
    "invoices": SEED_INVOICES,
    "expenses": SEED_EXPENSES,
    "income": SEED_INCOME,
    "arrears": SEED_ARREARS,
    "donations": SEED_DONATIONS,
    "staff": SEED_STAFF,
}


def run_seed(store: RecordStore) -> None:
    for dataset, records in SEED_COLLECTIONS.items():
        store.load(dataset, deepcopy(records))
