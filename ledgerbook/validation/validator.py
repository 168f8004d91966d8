"""
Two-Stage Record Intake Validation

Runs on the record source side, before a record is stored. The ledger
engine itself never validates; it relies on this gate.

STAGE 1 - SCHEMA VALIDATION:
- Required fields (id, transaction_date, type, amount)
- Date must parse to a calendar day
- Amount and fee must be non-negative

STAGE 2 - SEMANTIC VALIDATION:
- Fee on an income record (ignored by the ledger)
- Transfer legs missing or pointing at the same account
- Category on a transfer (ignored by the ledger)
- References to unknown cash accounts or categories
  (the record will land in an unclassified bucket)

Only stage 1 produces errors. Stage 2 reports warnings; a record with
warnings is still stored exactly as entered.

IMPORTANT: Validation NEVER silently fixes issues.
"""

from typing import Any, Iterable, Optional

from pydantic import ValidationError

from ledgerbook.models.records import (
    AccountCategory,
    CashAccount,
    CashMovementRecord,
    TransactionType,
)
from ledgerbook.models.validation import ValidationIssue, ValidationResult


class RecordValidator:
    """
    Validates raw cash-movement records through a two-stage pipeline.

    Stage 2 reference checks only run against the accounts and categories
    the validator was given; pass none to skip them.
    """

    def __init__(
        self,
        accounts: Iterable[CashAccount] = (),
        categories: Iterable[AccountCategory] = (),
    ):
        self._account_ids = {account.id for account in accounts}
        self._category_ids = {category.id for category in categories}
        self._check_references = bool(self._account_ids or self._category_ids)

    def _validate_schema(
        self,
        raw: dict[str, Any],
    ) -> tuple[Optional[CashMovementRecord], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (record or None, list_of_issues)
        """
        issues = []

        if raw.get("transaction_date") in (None, ""):
            issues.append(ValidationIssue(
                field="transaction_date",
                issue_type="missing",
                message="Transaction date is required",
                severity="error",
                suggested_fix="Enter the day the money moved",
            ))
            return None, issues

        try:
            record = CashMovementRecord.model_validate(raw)
        except ValidationError as e:
            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"]) or "record"
                issues.append(ValidationIssue(
                    field=field,
                    issue_type=error["type"],
                    message=f"{field}: {error['msg']}",
                    severity="error",
                ))
            return None, issues

        return record, issues

    def _validate_semantic(
        self,
        record: CashMovementRecord,
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Returns: list_of_issues (warnings only)
        """
        issues = []

        if record.type == TransactionType.INCOME and record.fee_amount:
            issues.append(ValidationIssue(
                field="fee_amount",
                issue_type="ignored_value",
                message="Fees on income records are not posted",
                severity="warning",
                suggested_fix="Record the fee as a separate expense",
            ))

        if record.type == TransactionType.TRANSFER:
            if not record.from_account_id or not record.to_account_id:
                issues.append(ValidationIssue(
                    field="from_account_id" if not record.from_account_id else "to_account_id",
                    issue_type="missing",
                    message="Transfer is missing one of its accounts",
                    severity="warning",
                    suggested_fix="Select both the source and destination account",
                ))
            elif record.from_account_id == record.to_account_id:
                issues.append(ValidationIssue(
                    field="to_account_id",
                    issue_type="inconsistent",
                    message="Transfer source and destination are the same account",
                    severity="warning",
                ))
            if record.category_id:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="ignored_value",
                    message="Transfers are not categorized; category is ignored",
                    severity="warning",
                ))
        elif not record.bank_account_id:
            issues.append(ValidationIssue(
                field="bank_account_id",
                issue_type="missing",
                message="No cash account selected",
                severity="warning",
                suggested_fix="Select the account the money moved through",
            ))

        if self._check_references:
            issues.extend(self._check_reference_ids(record))

        return issues

    def _check_reference_ids(
        self,
        record: CashMovementRecord,
    ) -> list[ValidationIssue]:
        issues = []
        if record.type == TransactionType.TRANSFER:
            account_fields = ("from_account_id", "to_account_id")
        else:
            account_fields = ("bank_account_id",)

        for field in account_fields:
            account_id = getattr(record, field)
            if account_id and account_id not in self._account_ids:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="unresolved_reference",
                    message=f"Unknown cash account '{account_id}'",
                    severity="warning",
                    suggested_fix="The record will be shown as unclassified cash",
                ))

        if (
            record.type != TransactionType.TRANSFER
            and record.category_id
            and record.category_id not in self._category_ids
        ):
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="unresolved_reference",
                message=f"Unknown category '{record.category_id}'",
                severity="warning",
                suggested_fix="The record will be shown as uncategorized",
            ))
        return issues

    def validate(
        self,
        raw: dict[str, Any],
    ) -> tuple[Optional[CashMovementRecord], ValidationResult]:
        """
        Run full two-stage validation pipeline.

        Args:
            raw: Record fields as entered (e.g. from a form or import)

        Returns:
            (record, result); record is None when stage 1 failed
        """
        all_issues = []

        record, schema_issues = self._validate_schema(raw)
        all_issues.extend(schema_issues)
        schema_valid = record is not None

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if record is not None:
            semantic_issues = self._validate_semantic(record)
            all_issues.extend(semantic_issues)
            semantic_valid = not any(i.severity == "error" for i in semantic_issues)

        warnings = [i.message for i in all_issues if i.severity == "warning"]
        record_id = raw.get("id")

        return record, ValidationResult(
            record_id=str(record_id) if record_id is not None else None,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Short text summary of a validation result for the entry form."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        if not result.schema_valid:
            lines.append("The record could not be saved:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"  - {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"    {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please check:")
            for warning in result.warnings:
                lines.append(f"  - {warning}")

        return "\n".join(lines)
