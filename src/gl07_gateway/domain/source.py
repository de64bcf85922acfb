"""Parsed ABWTransaction document."""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class Amounts:
    dc_flag: str | None = None  # copied verbatim, e.g. "D"/"C" or "1"/"-1"
    amount: Decimal | None = None
    curr_amount: Decimal | None = None
    number1: Decimal | None = None
    value1: Decimal | None = None
    value2: Decimal | None = None
    value3: Decimal | None = None
    currency: str | None = None


@dataclass
class GLAnalysis:
    account: str | None = None
    dim1: str | None = None
    dim2: str | None = None
    dim3: str | None = None
    dim4: str | None = None
    dim5: str | None = None
    dim6: str | None = None
    dim7: str | None = None
    currency: str | None = None
    tax_code: str | None = None
    tax_system: str | None = None
    tax_id: int | None = None  # 1 = EU triangular trade


@dataclass
class SundryInfo:
    """Free-text details for one-off suppliers and customers."""

    apar_name: str | None = None
    address: str | None = None
    zip_code: str | None = None
    place: str | None = None
    province: str | None = None


@dataclass
class ApArInfo:
    apar_id: str | None = None
    apar_type: str | None = None  # S = supplier, C = customer
    invoice_no: str | None = None
    due_date: str | None = None
    discount_date: str | None = None
    pay_method: str | None = None
    pay_currency: str | None = None
    pay_recipient: str | None = None
    responsible: str | None = None
    orig_reference: str | None = None
    order_no: str | None = None
    voucher_ref: str | None = None
    sequence_ref: str | None = None
    commitment: str | None = None
    complaint_code: str | None = None
    complaint_date: str | None = None
    curr_license: str | None = None
    interest_rule_id: str | None = None
    pay_template: str | None = None
    sundry: SundryInfo | None = None


@dataclass
class TaxTransInfo:
    account: str | None = None
    base_amount: Decimal | None = None
    base_currency: str | None = None
    tax_amount: Decimal | None = None
    tax_currency: str | None = None


@dataclass
class Transaction:
    trans_type: str | None = None
    description: str | None = None
    status: str | None = None
    trans_date: str | None = None
    external_ref: str | None = None
    sequence_no: int | None = None
    allocation_key: str | None = None
    period_no: str | None = None
    amounts: Amounts | None = None
    gl_analysis: GLAnalysis | None = None
    apar_info: ApArInfo | None = None
    tax_trans_info: TaxTransInfo | None = None


@dataclass
class Voucher:
    voucher_no: str | None = None
    voucher_type: str | None = None
    company_code: str | None = None
    period: str | None = None
    voucher_date: str | None = None
    description: str | None = None
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class SourceDocument:
    interface: str | None = None
    batch_id: str | None = None
    report_client: str | None = None
    vouchers: list[Voucher] = field(default_factory=list)

    @property
    def transaction_count(self) -> int:
        return sum(len(v.transactions) for v in self.vouchers)
