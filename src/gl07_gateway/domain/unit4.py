"""Unit4 financial transaction batch request and response models.

JSON uses camelCase names. Fields left as None are dropped on serialization,
so absent blocks never show up as ``null``.
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

SUCCESS_STATUSES = {"success", "accepted"}

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Unit4Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def match_keys_case_insensitively(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        lookup = {}
        for name, info in cls.model_fields.items():
            alias = info.alias or name
            lookup[name.lower()] = alias
            lookup[alias.lower()] = alias
        return {lookup.get(str(k).lower(), k): v for k, v in data.items()}


# Request


class BatchInformation(Unit4Model):
    interface: str | None = None
    batch_id: str | None = None


class AccountingInformation(Unit4Model):
    account: str | None = None
    accounting_dimension1: str | None = None
    accounting_dimension2: str | None = None
    accounting_dimension3: str | None = None
    accounting_dimension4: str | None = None
    accounting_dimension5: str | None = None
    accounting_dimension6: str | None = None
    accounting_dimension7: str | None = None


class Amounts(Unit4Model):
    debit_credit_flag: str | None = None
    amount: Money | None = None
    currency_amount: Money | None = None
    currency_code: str | None = None


class TaxDetails(Unit4Model):
    tax_account: str | None = None
    base_amount: Money | None = None
    base_currency_code: str | None = None
    tax_amount: Money | None = None
    tax_currency_code: str | None = None


class TaxInformation(Unit4Model):
    tax_code: str | None = None
    tax_system: str | None = None
    tax_details: TaxDetails | None = None


class StatisticalInformation(Unit4Model):
    number1: Money | None = None
    value1: Money | None = None
    value2: Money | None = None
    value3: Money | None = None


class AdditionalInformation(Unit4Model):
    distribution_key: str | None = None
    period_number: str | None = None
    sequence_reference: str | None = None
    commitment_id: str | None = None
    complaint_code: str | None = None
    complaint_delay: str | None = None
    currency_license_code: str | None = None
    interest_rule_id: str | None = None
    payment_plan_template_code: str | None = None
    tax_id: bool | None = None  # EU triangular trade
    text1: str | None = None
    text2: str | None = None
    text3: str | None = None
    text4: str | None = None
    text5: str | None = None


class Invoice(Unit4Model):
    customer_or_supplier_id: str | None = None
    ledger_type: str | None = None
    invoice_number: str | None = None
    due_date: str | None = None
    discount_date: str | None = None
    payment_method: str | None = None
    responsible: str | None = None
    pay_recipient: str | None = None
    payment_currency: str | None = None
    external_reference: str | None = None
    order_number: str | None = None
    invoice_reference: str | None = None


class TransactionDetailInformation(Unit4Model):
    sequence_number: int
    line_type: str | None = None
    description: str | None = None
    status: str | None = None
    value_date: str | None = None
    external_reference: str | None = None
    accounting_information: AccountingInformation | None = None
    amounts: Amounts | None = None
    tax_information: TaxInformation | None = None
    additional_information: AdditionalInformation | None = None
    statistical_information: StatisticalInformation | None = None


class TransactionInformation(Unit4Model):
    company_id: str | None = None
    period: str | None = None
    transaction_date: str | None = None
    transaction_type: str | None = None
    voucher_number: str | None = None
    voucher_type: str | None = None
    description: str | None = None
    invoice: Invoice | None = None
    transaction_detail_information: list[TransactionDetailInformation] = []


class TransactionBatchRequest(Unit4Model):
    batch_information: BatchInformation
    transaction_information: list[TransactionInformation] = []

    @property
    def voucher_count(self) -> int:
        return len(self.transaction_information)

    @property
    def transaction_count(self) -> int:
        return sum(len(t.transaction_detail_information) for t in self.transaction_information)

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


# Response


class BatchError(Unit4Model):
    code: str | None = None
    message: str | None = None
    field: str | None = None


class BatchWarning(Unit4Model):
    code: str | None = None
    message: str | None = None


class TransactionResult(Unit4Model):
    voucher_number: str | None = None
    status: str | None = None
    message: str | None = None


class BatchResponse(Unit4Model):
    batch_id: str | None = None
    status: str | None = None
    message: str | None = None
    errors: list[BatchError] = []
    warnings: list[BatchWarning] = []
    transaction_results: list[TransactionResult] = []

    @field_validator("errors", "warnings", "transaction_results", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def succeeded(self) -> bool:
        return (self.status or "").lower() in SUCCESS_STATUSES

    def error_summary(self) -> str:
        if self.message:
            return self.message
        messages = [e.message for e in self.errors if e.message]
        return "; ".join(messages) or f"Unit4 returned status {self.status!r}"
