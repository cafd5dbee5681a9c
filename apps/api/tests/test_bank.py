import json

import pytest
from sqlalchemy import select

from hrportal.core.encryption import EncryptionError, FieldEncryptor
from hrportal.models.audit_log import AuditAction, AuditLog
from hrportal.models.bank_details import BankAccountType, BankDetails
from hrportal.services import bank
from hrportal.services.errors import InvariantViolation, ValidationError

ROUTING = "021000021"
ACCOUNT = "000123456789"


def save(db, user, encryptor, employee, **overrides):
    kwargs = dict(
        bank_name="First Example Bank",
        account_type="CHECKING",
        routing_number=ROUTING,
        account_number=ACCOUNT,
    )
    kwargs.update(overrides)
    return bank.update_bank_details(db, user, encryptor, employee.employee_id, **kwargs)


class TestUpdateBankDetails:

    def test_numbers_are_encrypted_and_masked(self, db, encryptor, employee_user, employee):
        details = save(db, employee_user, encryptor, employee)

        assert details.routing_number != ROUTING
        assert details.account_number != ACCOUNT
        assert encryptor.decrypt(details.routing_number) == ROUTING
        assert encryptor.decrypt(details.account_number) == ACCOUNT
        assert details.last4_account == "6789"
        assert details.account_type == BankAccountType.CHECKING
        assert details.confirmed is True

    def test_save_is_audited_without_the_numbers(self, db, encryptor, employee_user, employee):
        details = save(db, employee_user, encryptor, employee)

        row = db.execute(select(AuditLog)).scalar_one()
        assert row.action == AuditAction.PROFILE_UPDATE
        assert row.entity_type == "BankDetails"
        assert row.entity_id == str(details.bank_details_id)
        assert json.loads(row.details) == {"action": "bank_details_created"}
        assert ACCOUNT not in row.details

    def test_second_save_replaces_the_single_row(self, db, encryptor, employee_user, employee):
        first = save(db, employee_user, encryptor, employee)
        second = save(db, employee_user, encryptor, employee, account_type="SAVINGS", account_number="55554444")

        assert second.bank_details_id == first.bank_details_id
        assert len(db.execute(select(BankDetails)).scalars().all()) == 1
        assert second.last4_account == "4444"
        assert second.account_type == BankAccountType.SAVINGS
        assert encryptor.decrypt(second.account_number) == "55554444"

    def test_each_employee_has_their_own_row(self, db, encryptor, make_user, employee_user, employee):
        bob = make_user("bob@example.com")
        save(db, employee_user, encryptor, employee)
        save(db, bob, encryptor, bob.employee_profile, account_number="99998888")

        assert bank.get_bank_details(db, employee.employee_id).last4_account == "6789"
        assert bank.get_bank_details(db, bob.employee_profile.employee_id).last4_account == "8888"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"bank_name": "  "},
            {"account_type": None},
            {"routing_number": ""},
            {"account_number": None},
        ],
    )
    def test_all_fields_are_required(self, db, encryptor, employee_user, employee, overrides):
        with pytest.raises(ValidationError) as exc:
            save(db, employee_user, encryptor, employee, **overrides)
        assert exc.value.message == "All fields are required"

    @pytest.mark.parametrize("routing", ["02100002", "0210000210", "02100002X"])
    def test_routing_number_must_be_nine_digits(self, db, encryptor, employee_user, employee, routing):
        with pytest.raises(ValidationError) as exc:
            save(db, employee_user, encryptor, employee, routing_number=routing)
        assert exc.value.message == "Routing number must be 9 digits"
        assert bank.get_bank_details(db, employee.employee_id) is None

    def test_account_number_must_be_digits(self, db, encryptor, employee_user, employee):
        with pytest.raises(ValidationError):
            save(db, employee_user, encryptor, employee, account_number="12-34")

    def test_unknown_account_type(self, db, encryptor, employee_user, employee):
        with pytest.raises(ValidationError):
            save(db, employee_user, encryptor, employee, account_type="BROKERAGE")

    def test_missing_key_is_an_internal_error(self, db, employee_user, employee):
        def no_key():
            raise EncryptionError("ENCRYPTION_KEY is not set")

        with pytest.raises(InvariantViolation):
            save(db, employee_user, FieldEncryptor(key_provider=no_key), employee)
        assert bank.get_bank_details(db, employee.employee_id) is None


class TestGetBankDetails:

    def test_nothing_on_file(self, db, employee):
        assert bank.get_bank_details(db, employee.employee_id) is None
