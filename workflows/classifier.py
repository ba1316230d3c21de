"""Rule-based document-to-folder classification.

Each service line has an ordered table of (pattern, folder) rules. A document
goes to the folder of the first rule whose pattern matches either its declared
type or its file name. Rule order matters: when two patterns could match the
same document, the earlier rule wins, so specific patterns sit above broad
ones.

Anything that matches no rule, or that belongs to an unrecognized service
category, goes to "Client Information".
"""

import re
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Pattern, Tuple

from .taxonomy import DEFAULT_FOLDER, get_folders, resolve_service_line


Rule = Tuple[Pattern, str]


def _rules(*pairs: Tuple[str, str]) -> List[Rule]:
    return [(re.compile(pattern, re.IGNORECASE), folder) for pattern, folder in pairs]


_TAX_RULES = (
    (r"w-?2|1099|income|earnings", "Income Documents"),
    (r"expense|receipt|deduction|1098|mortgage|donation|charitable", "Expense Documents"),
    (r"form|schedule|worksheet|8829|8949|4562|tax form", "Tax Forms"),
    (r"prior|previous|last year|1040|1065|1120|tax return", "Prior Year Returns"),
    (r"irs|notice|letter|correspondence", "IRS Correspondence"),
    (r"workpaper|worksheet|calculation|internal", "Internal Workpapers"),
)

_TAX_CREDITS_RULE = (r"credit|tuition|education|childcare|dependent care", "Deductions & Credits")

RULES: Dict[str, List[Rule]] = {
    "tax_individual": _rules(
        *_TAX_RULES,
        _TAX_CREDITS_RULE,
        (r"planning|projection|estimated tax", "Tax Planning"),
    ),
    "tax": _rules(
        *_TAX_RULES,
        _TAX_CREDITS_RULE,
    ),
    "tax_business": _rules(
        (r"financial statement|balance sheet|income statement|p&l|profit and loss|trial balance",
         "Financial Statements"),
        (r"payroll|941|940|w-?2|w-?3", "Payroll Documents"),
        (r"revenue|sales|income|1099|invoice", "Business Income"),
        (r"expense|receipt|bill|vendor", "Business Expenses"),
        (r"asset|depreciation|4562|equipment|vehicle", "Asset Documentation"),
        (r"prior|previous|last year|1065|1120|tax return", "Prior Year Returns"),
        (r"articles|operating agreement|bylaws|formation|\bein\b|entity|partnership agreement",
         "Entity Documents"),
        (r"form|schedule|k-1|8825", "Tax Forms"),
        (r"planning|projection|estimated tax", "Tax Planning"),
        (r"workpaper|worksheet|calculation|internal", "Internal Workpapers"),
    ),
    "audit": _rules(
        (r"planning|engagement letter|scope", "Planning Documents"),
        (r"risk|assessment|materiality", "Risk Assessment"),
        (r"control|internal control|process", "Internal Controls"),
        (r"financial statement|balance sheet|income statement|equity|cash flow", "Financial Statements"),
        (r"bank|statement|reconciliation", "Bank Documents"),
        (r"sampling|sample size|selection", "Sampling Methodology"),
        (r"workpaper|supporting|evidence|documentation", "Audit Evidence"),
        (r"finding|exception|issue|observation", "Audit Findings"),
        (r"management|response|remediation", "Management Responses"),
        (r"report|opinion|final|conclusion", "Audit Report"),
        (r"pbc|provided by client|client provided", "PBC Items"),
    ),
    "bookkeeping": _rules(
        (r"bank|statement", "Bank Statements"),
        (r"reconciliation|recon", "Reconciliations"),
        (r"invoice|billing|sale", "Invoices"),
        (r"bill|expense|vendor|payment", "Bills & Expenses"),
        (r"receipt|purchase", "Receipts"),
        (r"report|financial|statement|balance sheet|income|p&l", "Financial Reports"),
        (r"payroll|salary|wage|employee", "Payroll"),
        (r"tax filing|sales tax|payroll tax", "Tax Filings"),
        (r"chart of accounts|coa|account", "Chart of Accounts"),
        (r"journal|entry|adjustment|je", "Journal Entries"),
        (r"year.?end|closing|closing entry", "Year-End Closings"),
    ),
    "financial_planning": _rules(
        (r"401\(?k\)?|403\(?b\)?|\bira\b|roth|retirement|pension", "Retirement Accounts"),
        (r"investment|brokerage|portfolio|mutual fund|stock|securities", "Investment Statements"),
        (r"insurance|policy|annuity", "Insurance Policies"),
        (r"\bwill\b|trust|estate|beneficiar|power of attorney", "Estate Planning"),
        (r"tax return|1040|w-?2|1099", "Tax Returns"),
        (r"cash flow|budget|spending", "Cash Flow Analysis"),
        (r"risk tolerance|risk profile|questionnaire", "Risk Assessments"),
        (r"goal|college|education|529", "Goal Planning"),
        (r"financial plan|plan summary|projection|net worth", "Financial Plans"),
    ),
    "advisory": _rules(
        (r"valuation|appraisal", "Valuation Documents"),
        (r"succession|exit plan|buy-?sell", "Succession Planning"),
        (r"strateg|business plan|roadmap|swot", "Strategic Planning"),
        (r"market|competitor|industry", "Market Research"),
        (r"process|workflow|procedure|\bsop\b", "Process Improvement"),
        (r"financial|forecast|projection|ratio|budget", "Financial Analysis"),
        (r"assessment|diagnostic|health check", "Business Assessment"),
        (r"meeting|minutes|agenda|notes", "Meeting Notes"),
        (r"deliverable|final|presentation|report", "Project Deliverables"),
    ),
    "default": [],
}


def _field(document: Any, name: str) -> str:
    """Read a text field from a Document or a plain mapping, lower-cased."""
    if isinstance(document, dict):
        value = document.get(name)
    else:
        value = getattr(document, name, None)
    return str(value).lower() if value else ""


def get_rules(service_category: Optional[str]) -> List[Rule]:
    """Return the ordered rule table for a service category."""
    return RULES[resolve_service_line(service_category)]


@lru_cache(maxsize=4096)
def _classify_fields(doc_type: str, original_name: str,
                     service_category: Optional[str]) -> str:
    folders = get_folders(service_category)

    for pattern, folder in get_rules(service_category):
        if pattern.search(doc_type) or pattern.search(original_name):
            # A rule may only place documents in folders the taxonomy shows
            return folder if folder in folders else DEFAULT_FOLDER

    return DEFAULT_FOLDER


def classify(document: Any, service_category: Optional[str]) -> str:
    """Pick the display folder for a document.

    Args:
        document: Document record or dict with doc_type and original_name
        service_category: Project service type

    Returns:
        A folder name that is always a member of get_folders(service_category)
    """
    return _classify_fields(
        _field(document, 'doc_type'),
        _field(document, 'original_name'),
        service_category,
    )


def score_folders(document: Any, service_category: Optional[str]) -> Dict[str, int]:
    """Count distinct keyword hits per folder across both text fields."""
    doc_type = _field(document, 'doc_type')
    original_name = _field(document, 'original_name')

    scores: Dict[str, int] = {}
    for pattern, folder in get_rules(service_category):
        hits = {m.group(0) for m in pattern.finditer(doc_type)}
        hits |= {m.group(0) for m in pattern.finditer(original_name)}
        if hits:
            scores[folder] = scores.get(folder, 0) + len(hits)
    return scores


def classify_by_score(document: Any, service_category: Optional[str]) -> str:
    """Pick the folder with the most keyword hits instead of the first match.

    Ties go to the folder whose rule appears first. Same fallback and
    taxonomy guarantee as classify().
    """
    scores = score_folders(document, service_category)
    if not scores:
        return DEFAULT_FOLDER

    # dicts keep insertion order, which follows rule order
    best = max(scores.items(), key=lambda item: item[1])[0]
    return best if best in get_folders(service_category) else DEFAULT_FOLDER


def assign_folders(documents: Iterable[Any], service_category: Optional[str]) -> None:
    """Set the display folder on each Document in place."""
    for doc in documents:
        doc.folder = classify(doc, service_category)


def organize_documents(documents: Iterable[Any],
                       service_category: Optional[str]) -> Dict[str, List[Any]]:
    """Group documents into the service category's folders.

    Returns:
        Dict keyed by every taxonomy folder in taxonomy order; folders with no
        documents map to empty lists.
    """
    organized: Dict[str, List[Any]] = {folder: [] for folder in get_folders(service_category)}
    for doc in documents:
        organized[classify(doc, service_category)].append(doc)
    return organized
