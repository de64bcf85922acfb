"""ABWTransaction to Unit4 transaction batch transformer."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from ...domain import source as src
from ...domain import unit4
from ...domain.models import SourceSystem
from ...ports.transformer import TransformerPort
from ..xml.parser import AbwXmlParser

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "ABWTransaction"
NAMESPACE_PREFIX = "http://services.agresso.com/schema/ABWTransaction"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_batch_timestamp(moment: datetime) -> str:
    """Format as yyMMddHHmmssff, ff being hundredths of a second."""
    return f"{moment:%y%m%d%H%M%S}{moment.microsecond // 10000:02d}"


def _first_set(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value
    return None


def _map_accounting(gl: src.GLAnalysis | None) -> unit4.AccountingInformation | None:
    if gl is None:
        return None
    return unit4.AccountingInformation(
        account=gl.account,
        accounting_dimension1=gl.dim1,
        accounting_dimension2=gl.dim2,
        accounting_dimension3=gl.dim3,
        accounting_dimension4=gl.dim4,
        accounting_dimension5=gl.dim5,
        accounting_dimension6=gl.dim6,
        accounting_dimension7=gl.dim7,
    )


def _map_amounts(amounts: src.Amounts | None, currency: str) -> unit4.Amounts | None:
    if amounts is None:
        return None
    return unit4.Amounts(
        debit_credit_flag=amounts.dc_flag,
        amount=amounts.amount,
        currency_amount=amounts.curr_amount,
        currency_code=currency,
    )


def _map_statistics(amounts: src.Amounts | None) -> unit4.StatisticalInformation | None:
    if amounts is None:
        return None
    values = (amounts.number1, amounts.value1, amounts.value2, amounts.value3)
    if all(v is None for v in values):
        return None
    return unit4.StatisticalInformation(
        number1=amounts.number1,
        value1=amounts.value1,
        value2=amounts.value2,
        value3=amounts.value3,
    )


def _map_tax(
    gl: src.GLAnalysis | None, tax: src.TaxTransInfo | None
) -> unit4.TaxInformation | None:
    tax_code = gl.tax_code if gl else None
    tax_system = gl.tax_system if gl else None
    if tax_code is None and tax_system is None and tax is None:
        return None

    details = None
    if tax is not None:
        details = unit4.TaxDetails(
            tax_account=tax.account,
            base_amount=tax.base_amount,
            base_currency_code=tax.base_currency,
            tax_amount=tax.tax_amount,
            tax_currency_code=tax.tax_currency,
        )
    return unit4.TaxInformation(tax_code=tax_code, tax_system=tax_system, tax_details=details)


def _map_additional(trans: src.Transaction) -> unit4.AdditionalInformation | None:
    apar = trans.apar_info
    sundry = apar.sundry if apar else None
    tax_id = trans.gl_analysis.tax_id if trans.gl_analysis else None
    info = unit4.AdditionalInformation(
        distribution_key=trans.allocation_key,
        period_number=trans.period_no,
        sequence_reference=apar.sequence_ref if apar else None,
        commitment_id=apar.commitment if apar else None,
        complaint_code=apar.complaint_code if apar else None,
        complaint_delay=apar.complaint_date if apar else None,
        currency_license_code=apar.curr_license if apar else None,
        interest_rule_id=apar.interest_rule_id if apar else None,
        payment_plan_template_code=apar.pay_template if apar else None,
        tax_id=tax_id == 1 if tax_id is not None else None,
        text1=sundry.apar_name if sundry else None,
        text2=sundry.address if sundry else None,
        text3=sundry.zip_code if sundry else None,
        text4=sundry.place if sundry else None,
        text5=sundry.province if sundry else None,
    )
    if not info.model_dump(exclude_none=True):
        return None
    return info


def _map_invoice(apar: src.ApArInfo) -> unit4.Invoice:
    return unit4.Invoice(
        customer_or_supplier_id=apar.apar_id,
        ledger_type=apar.apar_type.lower() if apar.apar_type else None,
        invoice_number=apar.invoice_no,
        due_date=apar.due_date,
        discount_date=apar.discount_date,
        payment_method=apar.pay_method,
        responsible=apar.responsible,
        pay_recipient=apar.pay_recipient,
        payment_currency=apar.pay_currency,
        external_reference=apar.orig_reference,
        order_number=apar.order_no,
        invoice_reference=apar.voucher_ref,
    )


class AbwTransactionTransformer(TransformerPort):
    """Maps Agresso ABWTransaction XML onto a Unit4 transaction batch.

    One TransactionInformation per voucher, one detail line per transaction,
    both in document order. Source-system overrides win over file values.
    """

    transformer_type = "ABWTransaction"

    def __init__(
        self,
        default_currency: str = "SEK",
        parser: AbwXmlParser | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.default_currency = default_currency
        self.parser = parser or AbwXmlParser()
        self.clock = clock

    def can_handle(self, content: str) -> bool:
        return bool(content) and ROOT_ELEMENT in content and NAMESPACE_PREFIX in content

    def transform(self, content: str, source: SourceSystem) -> unit4.TransactionBatchRequest:
        logger.debug(f"Starting ABWTransaction transformation for {source.code}")
        document = self.parser.parse(content)

        batch_info = unit4.BatchInformation(
            interface=_first_set(source.interface) or document.interface,
            batch_id=self._batch_id(document, source),
        )
        logger.debug(
            f"Using interface {batch_info.interface}, batch id {batch_info.batch_id}"
        )

        if not document.vouchers:
            logger.warning("No vouchers found in ABWTransaction")

        request = unit4.TransactionBatchRequest(
            batch_information=batch_info,
            transaction_information=[self._map_voucher(v, source) for v in document.vouchers],
        )

        logger.info(
            f"Transformed {request.voucher_count} vouchers, "
            f"{request.transaction_count} transactions"
        )
        return request

    def _batch_id(self, document: src.SourceDocument, source: SourceSystem) -> str | None:
        prefix = _first_set(source.batch_id_prefix)
        if prefix:
            return f"{prefix}-{format_batch_timestamp(self.clock())}"
        return document.batch_id

    def _currency(self, trans: src.Transaction, source: SourceSystem) -> str:
        gl_currency = trans.gl_analysis.currency if trans.gl_analysis else None
        return _first_set(gl_currency, source.default_currency) or self.default_currency

    def _map_voucher(
        self, voucher: src.Voucher, source: SourceSystem
    ) -> unit4.TransactionInformation:
        invoice_line = next((t for t in voucher.transactions if t.apar_info is not None), None)

        transaction_type = _first_set(source.transaction_type)
        if transaction_type is None:
            transaction_type = (invoice_line.trans_type if invoice_line else None) or ""

        details = [
            self._map_detail(trans, position, source)
            for position, trans in enumerate(voucher.transactions, start=1)
        ]
        if not details:
            logger.warning(f"Voucher {voucher.voucher_no} has no transactions")

        return unit4.TransactionInformation(
            company_id=voucher.company_code,
            period=voucher.period,
            transaction_date=voucher.voucher_date,
            transaction_type=transaction_type,
            voucher_number=voucher.voucher_no,
            voucher_type=voucher.voucher_type,
            description=voucher.description,
            invoice=_map_invoice(invoice_line.apar_info) if invoice_line else None,
            transaction_detail_information=details,
        )

    def _map_detail(
        self, trans: src.Transaction, position: int, source: SourceSystem
    ) -> unit4.TransactionDetailInformation:
        return unit4.TransactionDetailInformation(
            sequence_number=trans.sequence_no if trans.sequence_no is not None else position,
            line_type=trans.trans_type,
            description=trans.description,
            status=trans.status,
            value_date=trans.trans_date,
            external_reference=trans.external_ref,
            accounting_information=_map_accounting(trans.gl_analysis),
            amounts=_map_amounts(trans.amounts, self._currency(trans, source)),
            tax_information=_map_tax(trans.gl_analysis, trans.tax_trans_info),
            additional_information=_map_additional(trans),
            statistical_information=_map_statistics(trans.amounts),
        )
