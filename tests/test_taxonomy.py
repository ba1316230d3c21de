"""Tests for the service folder taxonomies."""

import pytest

from workflows.taxonomy import (
    COMMON_FOLDERS,
    DEFAULT_ICON,
    SERVICE_FOLDERS,
    Folder,
    get_folder_entries,
    get_folder_icon,
    get_folders,
    is_recognized_category,
    resolve_service_line,
)


class TestResolveServiceLine:
    """Tests for resolve_service_line()."""

    @pytest.mark.parametrize("category,expected", [
        ("Tax Return - Individual", "tax_individual"),
        ("Individual Tax", "tax_individual"),
        ("Tax Return - Business", "tax_business"),
        ("Tax", "tax"),
        ("Tax Preparation", "tax"),
        ("Annual Audit", "audit"),
        ("Monthly Bookkeeping", "bookkeeping"),
        ("CAS", "bookkeeping"),
        ("Financial Planning", "financial_planning"),
        ("Business Advisory", "advisory"),
        ("Consulting", "default"),
        ("", "default"),
        (None, "default"),
    ])
    def test_categories(self, category, expected):
        assert resolve_service_line(category) == expected

    def test_tax_checked_before_audit(self):
        assert resolve_service_line("Tax Audit Defense") == "tax"

    def test_matching_is_case_sensitive(self):
        assert resolve_service_line("tax return") == "default"


class TestGetFolders:
    """Tests for get_folders()."""

    def test_common_folders_first(self):
        for category in ("Tax", "Audit", "Bookkeeping", "Unknown", None):
            assert get_folders(category)[:2] == COMMON_FOLDERS

    def test_individual_tax_taxonomy(self):
        folders = get_folders("Tax Return - Individual")
        assert folders == [
            "Client Information",
            "Correspondence",
            "Income Documents",
            "Expense Documents",
            "Tax Forms",
            "Prior Year Returns",
            "IRS Correspondence",
            "Deductions & Credits",
            "Tax Planning",
            "Internal Workpapers",
        ]

    def test_generic_tax_has_no_tax_planning(self):
        assert "Tax Planning" not in get_folders("Tax")
        assert "Deductions & Credits" in get_folders("Tax")

    def test_unknown_category_uses_default_set(self):
        assert get_folders("Consulting") == COMMON_FOLDERS + SERVICE_FOLDERS["default"]
        assert get_folders(None) == get_folders("")

    def test_returns_fresh_list(self):
        folders = get_folders("Audit")
        folders.append("Scratch")
        assert "Scratch" not in get_folders("Audit")

    def test_no_duplicates(self):
        for key in SERVICE_FOLDERS:
            sample = {
                "tax_individual": "Tax Individual",
                "tax_business": "Tax Business",
                "tax": "Tax",
                "audit": "Audit",
                "bookkeeping": "Bookkeeping",
                "financial_planning": "Financial Planning",
                "advisory": "Advisory",
                "default": None,
            }[key]
            folders = get_folders(sample)
            assert len(folders) == len(set(folders))


class TestIcons:
    """Tests for folder icons and entries."""

    def test_known_icon(self):
        assert get_folder_icon("Income Documents") == "receipt"
        assert get_folder_icon("Client Information") == "users"

    def test_unknown_icon_falls_back(self):
        assert get_folder_icon("Meeting Notes") == DEFAULT_ICON

    def test_entries_follow_folder_order(self):
        entries = get_folder_entries("Audit")
        assert [e.name for e in entries] == get_folders("Audit")
        assert entries[0] == Folder("Client Information", "users")

    def test_is_recognized_category(self):
        assert is_recognized_category("Tax Return - Business")
        assert not is_recognized_category("Consulting")
        assert not is_recognized_category(None)

    def test_default_list_distinct_from_service_lists(self):
        default = get_folders("Unknown Service")
        for category in ("Tax Return - Individual", "Tax Return - Business", "Tax",
                         "Audit", "Bookkeeping", "Financial Planning", "Advisory"):
            assert get_folders(category) != default
