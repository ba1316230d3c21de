"""Tests for rule-based document classification."""

import pytest

from api import Document
from workflows import classifier
from workflows.classifier import (
    assign_folders,
    classify,
    classify_by_score,
    get_rules,
    organize_documents,
    score_folders,
)
from workflows.taxonomy import DEFAULT_FOLDER, get_folders


INDIVIDUAL = "Tax Return - Individual"
BUSINESS = "Tax Return - Business"


def doc(name="", doc_type=""):
    return {'original_name': name, 'doc_type': doc_type}


@pytest.fixture
def documents():
    """A small mixed set of project documents."""
    return [
        Document(doc_id="1", original_name="W-2 2023.pdf", doc_type="W-2"),
        Document(doc_id="2", original_name="mortgage.pdf", doc_type="1098 Mortgage Interest"),
        Document(doc_id="3", original_name="irs_letter.pdf"),
        Document(doc_id="4", original_name="scan0001.pdf"),
    ]


class TestFirstMatch:
    """First matching rule wins, on doc_type or file name."""

    def test_w2_is_income(self):
        assert classify(doc(doc_type="W-2 Form"), INDIVIDUAL) == "Income Documents"

    def test_1098_is_expense(self):
        # "1098" is not an income keyword, so the expense rule catches it
        assert classify(doc(doc_type="1098 Mortgage Interest"), INDIVIDUAL) == "Expense Documents"

    def test_form_before_prior_return(self):
        assert classify(doc("Form 1040.pdf"), INDIVIDUAL) == "Tax Forms"

    def test_prior_return(self):
        assert classify(doc("1040 prior return.pdf"), INDIVIDUAL) == "Prior Year Returns"

    def test_irs_correspondence(self):
        assert classify(doc("IRS notice.pdf"), INDIVIDUAL) == "IRS Correspondence"

    def test_credits(self):
        assert classify(doc("tuition statement.pdf"), INDIVIDUAL) == "Deductions & Credits"

    def test_tax_planning_only_for_individual(self):
        document = doc("estimated tax payments.xlsx")
        assert classify(document, INDIVIDUAL) == "Tax Planning"
        assert classify(document, "Tax") == DEFAULT_FOLDER

    def test_file_name_used_when_type_empty(self):
        assert classify(doc("receipt.pdf"), INDIVIDUAL) == "Expense Documents"

    def test_case_insensitive(self):
        assert classify(doc("W2.PDF"), INDIVIDUAL) == "Income Documents"
        assert classify(doc("w2.pdf"), INDIVIDUAL) == "Income Documents"

    def test_generic_tax_income_before_expense(self):
        assert classify(doc("1099 expense.pdf"), "Tax") == "Income Documents"

    def test_repeatable(self, documents):
        first = [classify(d, INDIVIDUAL) for d in documents]
        assert [classify(d, INDIVIDUAL) for d in documents] == first

    def test_document_record(self, documents):
        assert classify(documents[0], INDIVIDUAL) == "Income Documents"


class TestServiceLines:
    """Rule order per service line."""

    def test_business_statement_before_income(self):
        assert classify(doc("Income Statement 2023.pdf"), BUSINESS) == "Financial Statements"

    def test_business_payroll(self):
        assert classify(doc("W-2 summary.pdf"), BUSINESS) == "Payroll Documents"

    def test_audit_evidence_before_report(self):
        assert classify(doc("Audit Workpaper Report.pdf"), "Audit") == "Audit Evidence"

    def test_audit_bank(self):
        assert classify(doc("Bank reconciliation.xlsx"), "Audit") == "Bank Documents"

    def test_bookkeeping_bank_before_reconciliation(self):
        assert classify(doc("Bank Reconciliation.xlsx"), "Bookkeeping") == "Bank Statements"
        assert classify(doc("Q3 reconciliation.xlsx"), "Bookkeeping") == "Reconciliations"

    def test_planning_retirement_before_investment(self):
        assert classify(doc("Roth IRA brokerage statement.pdf"),
                        "Financial Planning") == "Retirement Accounts"
        assert classify(doc("Brokerage statement.pdf"),
                        "Financial Planning") == "Investment Statements"

    def test_advisory(self):
        assert classify(doc("Valuation Report.pdf"), "Advisory") == "Valuation Documents"
        assert classify(doc("Final report.pdf"), "Advisory") == "Project Deliverables"

    def test_default_line_has_no_rules(self):
        assert get_rules("Consulting") == []


class TestFallback:
    """Unmatched and unrecognized documents go to Client Information."""

    def test_no_match(self):
        assert classify(doc("scan0001.pdf"), INDIVIDUAL) == DEFAULT_FOLDER

    def test_empty_document(self):
        assert classify({}, INDIVIDUAL) == DEFAULT_FOLDER

    @pytest.mark.parametrize("category", ["Consulting", "", None])
    def test_unrecognized_category(self, category):
        assert classify(doc("W-2.pdf", "W-2"), category) == DEFAULT_FOLDER

    def test_rule_outside_taxonomy_falls_back(self, monkeypatch):
        rules = classifier._rules((r"zzmarker", "Not A Folder"))
        monkeypatch.setitem(classifier.RULES, "audit", rules)
        classifier._classify_fields.cache_clear()
        try:
            assert classify(doc("zzmarker.pdf"), "Audit") == DEFAULT_FOLDER
        finally:
            classifier._classify_fields.cache_clear()

    @pytest.mark.parametrize("category", [
        INDIVIDUAL, BUSINESS, "Tax", "Audit", "Bookkeeping",
        "Financial Planning", "Advisory", "Consulting",
    ])
    def test_result_always_in_taxonomy(self, category):
        names = [
            "W-2.pdf", "1098.pdf", "invoice.pdf", "bank statement.pdf",
            "valuation.pdf", "trust.pdf", "payroll.csv", "random.txt",
        ]
        folders = get_folders(category)
        for name in names:
            assert classify(doc(name), category) in folders


class TestScoring:
    """Tests for score_folders() and classify_by_score()."""

    def test_scores_count_distinct_hits(self):
        scores = score_folders(doc("mortgage 1098 expense receipt.pdf"), INDIVIDUAL)
        assert scores == {"Expense Documents": 4}

    def test_score_can_differ_from_first_match(self):
        document = doc("W-2 from IRS notice letter.pdf")
        assert classify(document, INDIVIDUAL) == "Income Documents"
        assert classify_by_score(document, INDIVIDUAL) == "IRS Correspondence"

    def test_tie_goes_to_earlier_rule(self):
        assert classify_by_score(doc("1099 receipt.pdf"), INDIVIDUAL) == "Income Documents"

    def test_no_hits(self):
        assert score_folders(doc("scan.pdf"), INDIVIDUAL) == {}
        assert classify_by_score(doc("scan.pdf"), INDIVIDUAL) == DEFAULT_FOLDER


class TestOrganize:
    """Tests for assign_folders() and organize_documents()."""

    def test_assign_sets_folder(self, documents):
        assign_folders(documents, INDIVIDUAL)
        assert [d.folder for d in documents] == [
            "Income Documents",
            "Expense Documents",
            "IRS Correspondence",
            DEFAULT_FOLDER,
        ]

    def test_every_folder_present_in_order(self, documents):
        organized = organize_documents(documents, INDIVIDUAL)
        assert list(organized) == get_folders(INDIVIDUAL)
        assert organized["Tax Planning"] == []

    def test_each_document_once(self, documents):
        organized = organize_documents(documents, INDIVIDUAL)
        placed = [d for docs in organized.values() for d in docs]
        assert sorted(d.doc_id for d in placed) == ["1", "2", "3", "4"]

    def test_unrecognized_category_groups_under_client_information(self, documents):
        organized = organize_documents(documents, "Consulting")
        assert organized[DEFAULT_FOLDER] == documents

    def test_empty(self):
        organized = organize_documents([], "Audit")
        assert all(docs == [] for docs in organized.values())
