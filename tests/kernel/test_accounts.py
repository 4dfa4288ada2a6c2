"""
Tests for the chart of accounts: AccountService and AccountSelector.

Covers creation checks and their order, label uniqueness, update,
reference-protected deletion and relevance-ranked search.
"""

import pytest

from ledger_kernel.exceptions import (
    AccountInUseError,
    AccountNotFoundError,
    DuplicateAccountLabelError,
    DuplicateAccountNumberError,
    ErrorKind,
    FieldRequiredError,
    FieldTooLongError,
    InvalidAccountKindError,
    InvalidAccountNumberError,
)
from ledger_kernel.models.account import AccountKind
from ledger_kernel.selectors.account_selector import AccountSelector


class TestCreateAccount:
    def test_create_returns_snapshot(self, account_service):
        account = account_service.create_account("601", "Achats", AccountKind.EXPENSE)

        assert account.number == "601"
        assert account.label == "Achats"
        assert account.kind == AccountKind.EXPENSE
        assert account.active is True

    def test_kind_accepts_string_value(self, account_service):
        account = account_service.create_account("701", "Ventes", "REVENUE")
        assert account.kind == AccountKind.REVENUE

    def test_kind_is_optional(self, account_service):
        account = account_service.create_account("471", "Compte d'attente")
        assert account.kind is None

    def test_unknown_kind_rejected(self, account_service, session):
        with pytest.raises(InvalidAccountKindError) as exc_info:
            account_service.create_account("101", "Capital", "CAPITAL")

        assert exc_info.value.code == "INVALID_KIND"
        assert exc_info.value.kind == ErrorKind.VALIDATION
        assert exc_info.value.value == "CAPITAL"
        assert "ASSET" in exc_info.value.allowed
        assert AccountSelector(session).get("101") is None

    def test_number_and_label_are_stripped(self, account_service):
        account = account_service.create_account("  512 ", "  Banque  ")
        assert account.number == "512"
        assert account.label == "Banque"

    def test_ten_digit_number_is_accepted(self, account_service):
        account = account_service.create_account("1234567890", "Long")
        assert account.number == "1234567890"

    def test_hundred_character_label_is_accepted(self, account_service):
        account = account_service.create_account("601", "x" * 100)
        assert len(account.label) == 100


class TestCreateAccountRejections:
    def test_blank_number(self, account_service):
        with pytest.raises(FieldRequiredError) as exc_info:
            account_service.create_account("  ", "Achats")
        assert exc_info.value.field_name == "number"
        assert exc_info.value.kind == ErrorKind.VALIDATION

    def test_duplicate_number(self, account_service):
        account_service.create_account("601", "Achats")
        with pytest.raises(DuplicateAccountNumberError) as exc_info:
            account_service.create_account("601", "Autre libellé")
        assert exc_info.value.code == "DUPLICATE_NUMBER"
        assert exc_info.value.kind == ErrorKind.STATE_CONFLICT
        assert exc_info.value.number == "601"

    @pytest.mark.parametrize("number", ["60A", "6-01", "601.1", "６０１"])
    def test_non_digit_number(self, account_service, number):
        with pytest.raises(InvalidAccountNumberError) as exc_info:
            account_service.create_account(number, "Achats")
        assert exc_info.value.code == "INVALID_NUMBER"

    def test_number_too_long(self, account_service):
        with pytest.raises(FieldTooLongError) as exc_info:
            account_service.create_account("12345678901", "Trop long")
        assert exc_info.value.field_name == "number"
        assert exc_info.value.max_length == 10
        assert exc_info.value.actual_length == 11

    def test_blank_label(self, account_service):
        with pytest.raises(FieldRequiredError) as exc_info:
            account_service.create_account("601", "   ")
        assert exc_info.value.field_name == "label"

    def test_label_too_long(self, account_service):
        with pytest.raises(FieldTooLongError) as exc_info:
            account_service.create_account("601", "x" * 101)
        assert exc_info.value.field_name == "label"
        assert exc_info.value.max_length == 100

    def test_duplicate_label_is_case_insensitive(self, account_service):
        account_service.create_account("601", "Achats")
        with pytest.raises(DuplicateAccountLabelError) as exc_info:
            account_service.create_account("602", "ACHATS")
        assert exc_info.value.code == "DUPLICATE_LABEL"
        assert exc_info.value.existing_number == "601"

    def test_duplicate_label_folds_accents_case(self, account_service):
        account_service.create_account("606", "Électricité")
        with pytest.raises(DuplicateAccountLabelError):
            account_service.create_account("6061", "électricité")

    def test_number_checked_before_label(self, account_service):
        """A bad number is reported even when the label is also bad."""
        with pytest.raises(InvalidAccountNumberError):
            account_service.create_account("ABC", "")

    def test_duplicate_number_checked_before_digits(self, account_service):
        account_service.create_account("601", "Achats")
        with pytest.raises(DuplicateAccountNumberError):
            account_service.create_account("601", "")

    def test_rejection_persists_nothing(self, account_service, session):
        with pytest.raises(InvalidAccountNumberError):
            account_service.create_account("60A", "Achats")
        assert AccountSelector(session).list_accounts(active_only=False) == []

    def test_rejection_is_logged_with_code(self, account_service, captured_logs):
        with pytest.raises(InvalidAccountNumberError):
            account_service.create_account("60A", "Achats")

        rejected = [r for r in captured_logs() if r["message"] == "account_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["level"] == "WARNING"
        assert rejected[0]["code"] == "INVALID_NUMBER"
        assert rejected[0]["operation"] == "create"

    def test_creation_is_logged(self, account_service, captured_logs):
        account_service.create_account("601", "Achats", AccountKind.EXPENSE)

        created = [r for r in captured_logs() if r["message"] == "account_created"]
        assert len(created) == 1
        assert created[0]["level"] == "INFO"
        assert created[0]["number"] == "601"
        assert created[0]["kind"] == "EXPENSE"


class TestUpdateAccount:
    def test_relabel(self, account_service):
        account_service.create_account("601", "Achats", AccountKind.EXPENSE)
        updated = account_service.update_account("601", label="Achats de marchandises")

        assert updated.label == "Achats de marchandises"
        assert updated.kind == AccountKind.EXPENSE

    def test_reclassify(self, account_service):
        account_service.create_account("601", "Achats")
        updated = account_service.update_account("601", kind=AccountKind.EXPENSE)
        assert updated.kind == AccountKind.EXPENSE

    def test_kind_none_clears_kind(self, account_service):
        account_service.create_account("601", "Achats", AccountKind.EXPENSE)
        updated = account_service.update_account("601", kind=None)
        assert updated.kind is None

    def test_relabel_to_own_label_with_other_case(self, account_service):
        account_service.create_account("601", "Achats")
        updated = account_service.update_account("601", label="ACHATS")
        assert updated.label == "ACHATS"

    def test_relabel_to_other_accounts_label(self, account_service):
        account_service.create_account("601", "Achats")
        account_service.create_account("602", "Matières")
        with pytest.raises(DuplicateAccountLabelError):
            account_service.update_account("602", label="achats")

    def test_relabel_too_long(self, account_service):
        account_service.create_account("601", "Achats")
        with pytest.raises(FieldTooLongError):
            account_service.update_account("601", label="y" * 101)

    def test_unknown_account(self, account_service):
        with pytest.raises(AccountNotFoundError) as exc_info:
            account_service.update_account("999", label="Inconnu")
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_inactive_account_frees_its_label(self, account_service):
        account_service.create_account("601", "Achats")
        account_service.update_account("601", active=False)

        account = account_service.create_account("607", "Achats")
        assert account.number == "607"

    def test_reactivation_checks_label(self, account_service, session):
        account_service.create_account("601", "Achats")
        account_service.update_account("601", active=False)
        account_service.create_account("602", "achats")

        with pytest.raises(DuplicateAccountLabelError) as exc_info:
            account_service.update_account("601", active=True)

        assert exc_info.value.existing_number == "602"
        assert AccountSelector(session).get("601").active is False

    def test_reactivation_with_new_label(self, account_service):
        account_service.create_account("601", "Achats")
        account_service.update_account("601", active=False)
        account_service.create_account("602", "achats")

        updated = account_service.update_account("601", label="Achats anciens", active=True)
        assert updated.active is True
        assert updated.label == "Achats anciens"

    def test_update_with_unknown_kind(self, account_service):
        account_service.create_account("601", "Achats", AccountKind.EXPENSE)
        with pytest.raises(InvalidAccountKindError):
            account_service.update_account("601", kind="CHARGE")


class TestDeleteAccount:
    def test_delete_unused_account(self, account_service, session):
        account_service.create_account("601", "Achats")
        account_service.delete_account("601")
        assert AccountSelector(session).get("601") is None

    def test_delete_unknown_account(self, account_service):
        with pytest.raises(AccountNotFoundError):
            account_service.delete_account("999")

    def test_delete_used_account_is_blocked(self, account_service, post, session):
        post("2025-03-01", "601", "512", "100.00")
        post("2025-03-02", "512", "601", "40.00")

        with pytest.raises(AccountInUseError) as exc_info:
            account_service.delete_account("601")
        assert exc_info.value.code == "ACCOUNT_IN_USE"
        assert exc_info.value.kind == ErrorKind.INTEGRITY_BLOCK
        assert exc_info.value.reference_count == 2
        assert AccountSelector(session).exists("601")

    def test_blocked_delete_is_logged(self, account_service, post, captured_logs):
        post("2025-03-01", "601", "512", "100.00")
        with pytest.raises(AccountInUseError):
            account_service.delete_account("512")

        blocked = [r for r in captured_logs() if r["message"] == "account_delete_blocked"]
        assert blocked[0]["reference_count"] == 1


class TestAccountQueries:
    def test_get_account_raises_for_unknown(self, session):
        with pytest.raises(AccountNotFoundError):
            AccountSelector(session).get_account("999")

    def test_list_accounts_ordered_by_number(self, session, standard_accounts):
        numbers = [a.number for a in AccountSelector(session).list_accounts()]
        assert numbers == sorted(standard_accounts)

    def test_list_accounts_by_kind(self, session, standard_accounts):
        expenses = AccountSelector(session).list_accounts(kind=AccountKind.EXPENSE)
        assert [a.number for a in expenses] == ["601", "613", "661"]

    def test_list_accounts_by_kind_string(self, session, standard_accounts):
        expenses = AccountSelector(session).list_accounts(kind="EXPENSE")
        assert [a.number for a in expenses] == ["601", "613", "661"]

    def test_list_accounts_unknown_kind(self, session, standard_accounts):
        with pytest.raises(InvalidAccountKindError):
            AccountSelector(session).list_accounts(kind="CHARGE")

    def test_list_accounts_hides_inactive_by_default(self, account_service, session):
        account_service.create_account("601", "Achats")
        account_service.create_account("602", "Matières")
        account_service.update_account("602", active=False)

        selector = AccountSelector(session)
        assert [a.number for a in selector.list_accounts()] == ["601"]
        assert [a.number for a in selector.list_accounts(active_only=False)] == ["601", "602"]

    def test_reference_counting(self, session, post):
        selector = AccountSelector(session)
        assert selector.is_account_used("601") is False

        post("2025-03-01", "601", "512", "100.00")
        assert selector.is_account_used("601") is True
        assert selector.count_references("512") == 1
        assert selector.count_references("701") == 0


class TestAccountSearch:
    def test_search_by_exact_number(self, account_service, standard_accounts):
        results = account_service.search_accounts("601")
        assert results[0].number == "601"

    def test_search_label_case_insensitive(self, account_service, standard_accounts):
        results = account_service.search_accounts("banque")
        assert [a.number for a in results] == ["512"]

    def test_relevance_order(self, account_service):
        account_service.create_account("401", "Fournisseur 601")
        account_service.create_account("6011", "Achats stockés")
        account_service.create_account("601", "Achats")

        results = account_service.search_accounts("601")
        assert [a.number for a in results] == ["601", "6011", "401"]

    def test_limit(self, account_service, standard_accounts):
        assert len(account_service.search_accounts("", limit=3)) == 3
        assert len(account_service.search_accounts("")) == 10

    def test_blank_term_lists_by_number(self, account_service, standard_accounts):
        results = account_service.search_accounts("  ", limit=2)
        assert [a.number for a in results] == ["164", "211"]

    def test_wildcards_are_literal(self, account_service):
        account_service.create_account("609", "Remise 10%")
        account_service.create_account("619", "Remise 100")

        results = account_service.search_accounts("10%")
        assert [a.number for a in results] == ["609"]

    def test_no_match(self, account_service, standard_accounts):
        assert account_service.search_accounts("zzz") == []
