"""Service-specific folder taxonomies.

Each service line (tax, audit, bookkeeping, ...) has its own ordered set of
display folders that project documents are grouped into. Folders are purely
presentational and never sent to the server.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


# Shared by every taxonomy, always first
COMMON_FOLDERS = ["Client Information", "Correspondence"]

DEFAULT_FOLDER = "Client Information"

SERVICE_FOLDERS: Dict[str, List[str]] = {
    "tax_individual": [
        "Income Documents",
        "Expense Documents",
        "Tax Forms",
        "Prior Year Returns",
        "IRS Correspondence",
        "Deductions & Credits",
        "Tax Planning",
        "Internal Workpapers",
    ],
    "tax_business": [
        "Financial Statements",
        "Business Income",
        "Business Expenses",
        "Asset Documentation",
        "Prior Year Returns",
        "Entity Documents",
        "Payroll Documents",
        "Tax Forms",
        "Tax Planning",
        "Internal Workpapers",
    ],
    "tax": [
        "Income Documents",
        "Expense Documents",
        "Tax Forms",
        "Prior Year Returns",
        "IRS Correspondence",
        "Deductions & Credits",
        "Internal Workpapers",
    ],
    "audit": [
        "Planning Documents",
        "Risk Assessment",
        "Internal Controls",
        "Financial Statements",
        "Bank Documents",
        "Sampling Methodology",
        "Audit Evidence",
        "Audit Findings",
        "Management Responses",
        "Audit Report",
        "PBC Items",
        "Workpapers",
    ],
    "bookkeeping": [
        "Bank Statements",
        "Reconciliations",
        "Invoices",
        "Bills & Expenses",
        "Receipts",
        "Financial Reports",
        "Payroll",
        "Tax Filings",
        "Chart of Accounts",
        "Journal Entries",
        "Year-End Closings",
    ],
    "financial_planning": [
        "Investment Statements",
        "Retirement Accounts",
        "Insurance Policies",
        "Estate Planning",
        "Tax Returns",
        "Financial Plans",
        "Cash Flow Analysis",
        "Goal Planning",
        "Risk Assessments",
    ],
    "advisory": [
        "Business Assessment",
        "Financial Analysis",
        "Strategic Planning",
        "Market Research",
        "Process Improvement",
        "Valuation Documents",
        "Succession Planning",
        "Project Deliverables",
        "Meeting Notes",
    ],
    "default": [
        "Financial Documents",
        "Tax Documents",
        "Legal Documents",
        "Working Papers",
        "Reports & Analysis",
        "Miscellaneous",
    ],
}

FOLDER_ICONS: Dict[str, str] = {
    "Income Documents": "receipt",
    "Business Income": "receipt",
    "Expense Documents": "calculator",
    "Business Expenses": "calculator",
    "Tax Forms": "file-check",
    "Tax Filings": "file-check",
    "Prior Year Returns": "file-text",
    "Financial Statements": "bar-chart",
    "Financial Reports": "bar-chart",
    "Bank Statements": "landmark",
    "Bank Documents": "landmark",
    "Internal Controls": "shield-check",
    "Risk Assessment": "shield-check",
    "Audit Evidence": "check",
    "Audit Findings": "check",
    "Planning Documents": "calendar",
    "Strategic Planning": "calendar",
    "Internal Workpapers": "spreadsheet",
    "Workpapers": "spreadsheet",
    "Client Information": "users",
    "Correspondence": "message",
}

DEFAULT_ICON = "folder"


@dataclass(frozen=True)
class Folder:
    """A taxonomy entry: display name and icon selector."""
    name: str
    icon: str = DEFAULT_ICON


def resolve_service_line(service_category: Optional[str]) -> str:
    """Map a free-text service category to a taxonomy key.

    Matching is by substring, so "Tax Return - Individual" and "Tax" both
    land on a tax line. Tax is checked before the other lines.

    Args:
        service_category: Project service type, e.g. "Tax Return - Business"

    Returns:
        One of the SERVICE_FOLDERS keys ("default" when nothing matches)
    """
    category = service_category or ""

    if "Tax" in category:
        if "Individual" in category:
            return "tax_individual"
        if "Business" in category:
            return "tax_business"
        return "tax"
    if "Audit" in category:
        return "audit"
    if "Bookkeeping" in category or "CAS" in category:
        return "bookkeeping"
    if "Financial Planning" in category:
        return "financial_planning"
    if "Advisory" in category:
        return "advisory"
    return "default"


def get_folders(service_category: Optional[str]) -> List[str]:
    """Return the ordered folder names for a service category.

    The two common folders come first, followed by the service-specific
    ones. A fresh list is returned on every call.
    """
    return COMMON_FOLDERS + SERVICE_FOLDERS[resolve_service_line(service_category)]


def get_folder_icon(folder_name: str) -> str:
    return FOLDER_ICONS.get(folder_name, DEFAULT_ICON)


def get_folder_entries(service_category: Optional[str]) -> List[Folder]:
    """Return the taxonomy as Folder entries with their icons."""
    return [Folder(name, get_folder_icon(name)) for name in get_folders(service_category)]


def is_recognized_category(service_category: Optional[str]) -> bool:
    return resolve_service_line(service_category) != "default"
