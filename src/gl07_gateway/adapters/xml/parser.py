"""ABWTransaction XML parsing using lxml."""

import logging
import re
from decimal import Decimal, InvalidOperation

from lxml import etree

from ...domain.errors import MalformedInputError
from ...domain.source import (
    Amounts,
    ApArInfo,
    GLAnalysis,
    SourceDocument,
    SundryInfo,
    TaxTransInfo,
    Transaction,
    Voucher,
)

logger = logging.getLogger(__name__)

ABW_TRANSACTION_NS = "http://services.agresso.com/schema/ABWTransaction/2011/11/14"
ABW_SCHEMALIB_NS = "http://services.agresso.com/schema/ABWSchemaLib/2011/11/14"
CURRENT_NAMESPACES = (ABW_TRANSACTION_NS, ABW_SCHEMALIB_NS)

# Older schema vintages, rewritten to the current URIs before parsing
LEGACY_NAMESPACES = {
    "http://services.agresso.com/schema/ABWTransaction/2007/12/24": ABW_TRANSACTION_NS,
    "http://services.agresso.com/schema/ABWSchemaLib/2007/12/24": ABW_SCHEMALIB_NS,
    "http://services.agresso.com/schema/ABWTransaction/2004/09/14": ABW_TRANSACTION_NS,
    "http://services.agresso.com/schema/ABWSchemaLib/2004/09/14": ABW_SCHEMALIB_NS,
}

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def normalize_namespaces(text: str) -> str:
    """Replace legacy namespace URIs with their current equivalents."""
    for legacy, current in LEGACY_NAMESPACES.items():
        text = text.replace(legacy, current)
    return text


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        load_dtd=False,
        dtd_validation=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )


def _children(el: etree._Element, name: str) -> list[etree._Element]:
    found = []
    for child in el:
        if not isinstance(child.tag, str):
            continue
        qname = etree.QName(child)
        if qname.localname == name and qname.namespace in CURRENT_NAMESPACES:
            found.append(child)
    return found


def _child(el: etree._Element, name: str) -> etree._Element | None:
    found = _children(el, name)
    return found[0] if found else None


def _text(el: etree._Element, name: str) -> str | None:
    child = _child(el, name)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def _decimal(el: etree._Element, name: str) -> Decimal | None:
    value = _text(el, name)
    if value is None:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        raise MalformedInputError(
            f"{name} is not a decimal: {value!r}", line=_child(el, name).sourceline
        ) from None


def _int(el: etree._Element, name: str) -> int | None:
    value = _text(el, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise MalformedInputError(
            f"{name} is not an integer: {value!r}", line=_child(el, name).sourceline
        ) from None


def _parse_amounts(el: etree._Element) -> Amounts:
    return Amounts(
        dc_flag=_text(el, "DcFlag"),
        amount=_decimal(el, "Amount"),
        curr_amount=_decimal(el, "CurrAmount"),
        number1=_decimal(el, "Number1"),
        value1=_decimal(el, "Value1"),
        value2=_decimal(el, "Value2"),
        value3=_decimal(el, "Value3"),
        currency=_text(el, "CurrencyCode"),
    )


def _parse_gl_analysis(el: etree._Element) -> GLAnalysis:
    return GLAnalysis(
        account=_text(el, "Account"),
        dim1=_text(el, "Dim1"),
        dim2=_text(el, "Dim2"),
        dim3=_text(el, "Dim3"),
        dim4=_text(el, "Dim4"),
        dim5=_text(el, "Dim5"),
        dim6=_text(el, "Dim6"),
        dim7=_text(el, "Dim7"),
        currency=_text(el, "Currency"),
        tax_code=_text(el, "TaxCode"),
        tax_system=_text(el, "TaxSystem"),
        tax_id=_int(el, "TaxId"),
    )


def _parse_apar_info(el: etree._Element) -> ApArInfo:
    sundry = None
    sundry_el = _child(el, "SundryInfo")
    if sundry_el is not None:
        sundry = SundryInfo(
            apar_name=_text(sundry_el, "ApArName"),
            address=_text(sundry_el, "Address"),
            zip_code=_text(sundry_el, "ZipCode"),
            place=_text(sundry_el, "Place"),
            province=_text(sundry_el, "Province"),
        )
    return ApArInfo(
        apar_id=_text(el, "ApArNo"),
        apar_type=_text(el, "ApArType"),
        invoice_no=_text(el, "InvoiceNo"),
        due_date=_text(el, "DueDate"),
        discount_date=_text(el, "DiscDate"),
        pay_method=_text(el, "PayMethod"),
        pay_currency=_text(el, "PayCurrency"),
        pay_recipient=_text(el, "FactorShort"),
        responsible=_text(el, "Responsible"),
        orig_reference=_text(el, "OrigReference"),
        order_no=_text(el, "OrderNo"),
        voucher_ref=_text(el, "VoucherRef"),
        sequence_ref=_text(el, "SequenceRef"),
        commitment=_text(el, "Commitment"),
        complaint_code=_text(el, "ComplaintCode"),
        complaint_date=_text(el, "ComplaintDate"),
        curr_license=_text(el, "CurrLicense"),
        interest_rule_id=_text(el, "IntruleId"),
        pay_template=_text(el, "PayTemplate"),
        sundry=sundry,
    )


def _parse_tax_trans_info(el: etree._Element) -> TaxTransInfo:
    return TaxTransInfo(
        account=_text(el, "Account2"),
        base_amount=_decimal(el, "BaseAmount"),
        base_currency=_text(el, "BaseCurr"),
        tax_amount=_decimal(el, "TaxAmount"),
        tax_currency=_text(el, "TaxCurr"),
    )


def _parse_transaction(el: etree._Element) -> Transaction:
    amounts = _child(el, "Amounts")
    gl_analysis = _child(el, "GLAnalysis")
    apar_info = _child(el, "ApArInfo")
    tax_trans_info = _child(el, "TaxTransInfo")
    return Transaction(
        trans_type=_text(el, "TransType"),
        description=_text(el, "Description"),
        status=_text(el, "Status"),
        trans_date=_text(el, "TransDate"),
        external_ref=_text(el, "ExternalRef"),
        sequence_no=_int(el, "SequenceNo"),
        allocation_key=_text(el, "AllocationKey"),
        period_no=_text(el, "PeriodNo"),
        amounts=_parse_amounts(amounts) if amounts is not None else None,
        gl_analysis=_parse_gl_analysis(gl_analysis) if gl_analysis is not None else None,
        apar_info=_parse_apar_info(apar_info) if apar_info is not None else None,
        tax_trans_info=(
            _parse_tax_trans_info(tax_trans_info) if tax_trans_info is not None else None
        ),
    )


def _parse_voucher(el: etree._Element) -> Voucher:
    return Voucher(
        voucher_no=_text(el, "VoucherNo"),
        voucher_type=_text(el, "VoucherType"),
        company_code=_text(el, "CompanyCode"),
        period=_text(el, "Period"),
        voucher_date=_text(el, "VoucherDate"),
        description=_text(el, "Description"),
        transactions=[_parse_transaction(t) for t in _children(el, "Transaction")],
    )


class AbwXmlParser:
    """Parse ABWTransaction documents from untrusted text.

    Entities, DTDs and network access are disabled. Every failure surfaces
    as MalformedInputError.
    """

    def parse(self, text: str) -> SourceDocument:
        if not text or not text.strip():
            raise MalformedInputError("XML content is empty")

        logger.debug(f"Parsing XML content ({len(text)} characters)")

        # lxml refuses str input that carries an encoding declaration
        body = _XML_DECLARATION.sub("", normalize_namespaces(text.lstrip("\ufeff")), count=1)

        try:
            root = etree.fromstring(body, _make_parser())
        except etree.XMLSyntaxError as e:
            line, column = e.position if e.position else (None, None)
            raise MalformedInputError(f"Invalid XML: {e.msg}", line=line, column=column) from e
        except ValueError as e:
            raise MalformedInputError(f"Invalid XML: {e}") from e

        if root.getroottree().docinfo.doctype:
            raise MalformedInputError("DTD declarations are not allowed")

        qname = etree.QName(root)
        if qname.localname != "ABWTransaction" or qname.namespace != ABW_TRANSACTION_NS:
            raise MalformedInputError(
                f"Unexpected root element {root.tag}", line=root.sourceline
            )

        document = SourceDocument(
            interface=_text(root, "Interface"),
            batch_id=_text(root, "BatchId"),
            report_client=_text(root, "ReportClient"),
            vouchers=[_parse_voucher(v) for v in _children(root, "Voucher")],
        )

        logger.info(
            f"Parsed XML: {len(document.vouchers)} vouchers, "
            f"{document.transaction_count} transactions"
        )
        return document
