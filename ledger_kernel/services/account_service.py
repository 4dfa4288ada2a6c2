"""
AccountService -- chart-of-accounts mutations.

Responsibility:
    Creates, updates and deletes accounts, enforcing the chart's shape
    rules before anything reaches the store.

Architecture position:
    Kernel > Services -- imperative shell.  Reads go through
    ``AccountSelector``; this service only adds the write-side checks.

Invariants enforced:
    - Account numbers are digits only, non-empty, and no longer than
      ``settings.account_number_max_length``.
    - Labels are non-empty, no longer than ``settings.account_label_max_length``
      and unique case-insensitively among active accounts, including when
      an inactive account is reactivated.
    - An account referenced by any journal entry (either leg) cannot be
      deleted.

Failure modes:
    - FieldRequiredError, FieldTooLongError, InvalidAccountNumberError,
      InvalidAccountKindError.
    - DuplicateAccountNumberError, DuplicateAccountLabelError.
    - AccountNotFoundError on update/delete of an unknown number.
    - AccountInUseError(reference_count) on delete of a used account.
"""

from sqlalchemy.orm import Session

from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.domain.parsing import clean_required, parse_account_kind
from ledger_kernel.domain.settings import KernelSettings
from ledger_kernel.exceptions import (
    AccountInUseError,
    AccountNotFoundError,
    DuplicateAccountLabelError,
    DuplicateAccountNumberError,
    FieldRequiredError,
    FieldTooLongError,
    InvalidAccountNumberError,
    LedgerError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountKind
from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.services.base import BaseService

logger = get_logger("services.account")

_UNSET = object()


class AccountService(BaseService[Account]):
    """
    Service for chart-of-accounts mutations.

    Contract:
        Returns ``AccountInfo`` DTOs.  Flushes within the caller's
        transaction.

    Non-goals:
        - Does NOT cascade deletes to journal entries.
    """

    def __init__(self, session: Session, settings: KernelSettings | None = None):
        super().__init__(session, settings)
        self._selector = AccountSelector(session)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_label(self, label: str, exclude_number: str | None = None) -> None:
        if not label:
            raise FieldRequiredError("label")
        max_len = self.settings.account_label_max_length
        if len(label) > max_len:
            raise FieldTooLongError("label", max_len, len(label))
        owner = self._selector.find_label_owner(label, exclude_number=exclude_number)
        if owner is not None:
            raise DuplicateAccountLabelError(label, owner)

    def _check_new_number(self, number: str) -> None:
        if not number:
            raise FieldRequiredError("number")
        if self._selector.exists(number):
            raise DuplicateAccountNumberError(number)
        if not number.isascii() or not number.isdigit():
            raise InvalidAccountNumberError(number)
        max_len = self.settings.account_number_max_length
        if len(number) > max_len:
            raise FieldTooLongError("number", max_len, len(number))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_account(
        self,
        number: str,
        label: str,
        kind: AccountKind | str | None = None,
    ) -> AccountInfo:
        """
        Create an account.

        Checks run in order: number present, number unused, digits only,
        number length, then label present, label length, label unique.
        """
        number = clean_required(number)
        label = clean_required(label)
        try:
            self._check_new_number(number)
            self._check_label(label)
            account_kind = parse_account_kind(kind)
        except LedgerError as exc:
            logger.warning(
                "account_rejected",
                extra={"operation": "create", "number": number, "code": exc.code},
            )
            raise

        account = Account(number=number, label=label, kind=account_kind, active=True)
        self.session.add(account)
        self._flush("create_account")

        logger.info(
            "account_created",
            extra={"number": number, "kind": account_kind},
        )
        return AccountInfo.from_model(account)

    def update_account(
        self,
        number: str,
        label: str | None = None,
        kind=_UNSET,
        active: bool | None = None,
    ) -> AccountInfo:
        """
        Relabel, reclassify or (de)activate an account.

        ``kind`` left out keeps the current kind; ``kind=None`` clears it.
        """
        account = self.session.get(Account, number)
        if account is None:
            logger.warning(
                "account_rejected",
                extra={"operation": "update", "number": number, "code": AccountNotFoundError.code},
            )
            raise AccountNotFoundError(number)

        try:
            if label is not None:
                label = clean_required(label)
                self._check_label(label, exclude_number=number)
            elif active and not account.active:
                self._check_label(account.label, exclude_number=number)
            new_kind = parse_account_kind(kind) if kind is not _UNSET else account.kind
        except LedgerError as exc:
            logger.warning(
                "account_rejected",
                extra={"operation": "update", "number": number, "code": exc.code},
            )
            raise

        if label is not None:
            account.label = label
        account.kind = new_kind
        if active is not None:
            account.active = active
        self._flush("update_account")

        logger.info("account_updated", extra={"number": number})
        return AccountInfo.from_model(account)

    def delete_account(self, number: str) -> None:
        """
        Delete an unused account.

        Raises:
            AccountNotFoundError: unknown number.
            AccountInUseError: referenced by at least one entry.
        """
        account = self.session.get(Account, number)
        if account is None:
            logger.warning(
                "account_rejected",
                extra={"operation": "delete", "number": number, "code": AccountNotFoundError.code},
            )
            raise AccountNotFoundError(number)

        references = self._selector.count_references(number)
        if references > 0:
            logger.warning(
                "account_delete_blocked",
                extra={"number": number, "reference_count": references},
            )
            raise AccountInUseError(number, references)

        self.session.delete(account)
        self._flush("delete_account")
        logger.info("account_deleted", extra={"number": number})

    def search_accounts(self, term: str, limit: int | None = None) -> list[AccountInfo]:
        """Relevance-ranked search bounded by the configured search limit."""
        return self._selector.search_accounts(
            term, limit or self.settings.account_search_limit
        )
