"""Shared test fixtures."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gl07_gateway.config import PathsConfig, Settings, SourceSystemConfig
from gl07_gateway.domain.models import SourceSystem
from gl07_gateway.domain.unit4 import (
    BatchInformation,
    BatchResponse,
    TransactionBatchRequest,
    TransactionDetailInformation,
    TransactionInformation,
)
from gl07_gateway.ports.file_source import FileSourcePort
from gl07_gateway.ports.log_store import LogStorePort
from gl07_gateway.ports.transformer import TransformerPort
from gl07_gateway.ports.unit4 import Unit4Port

NS = "http://services.agresso.com/schema/ABWTransaction/2011/11/14"
LIB_NS = "http://services.agresso.com/schema/ABWSchemaLib/2011/11/14"

SAMPLE_XML = f"""<?xml version="1.0" encoding="utf-8"?>
<ABWTransaction xmlns="{NS}" xmlns:agrlib="{LIB_NS}">
  <Interface>BI</Interface>
  <BatchId>BATCH-001</BatchId>
  <ReportClient>01</ReportClient>
  <Voucher>
    <VoucherNo>1001</VoucherNo>
    <VoucherType>GL</VoucherType>
    <CompanyCode>01</CompanyCode>
    <Period>202403</Period>
    <VoucherDate>2024-03-05</VoucherDate>
    <Description>March costs</Description>
    <Transaction>
      <TransType>GL</TransType>
      <Description>Office rent</Description>
      <Status>N</Status>
      <TransDate>2024-03-05</TransDate>
      <ExternalRef>EXT-1</ExternalRef>
      <Amounts>
        <DcFlag>1</DcFlag>
        <Amount>1000.50</Amount>
        <CurrAmount>1000.50</CurrAmount>
      </Amounts>
      <GLAnalysis>
        <Account>6010</Account>
        <Dim1>100</Dim1>
        <Dim2>P1</Dim2>
        <Currency>EUR</Currency>
        <TaxCode>25</TaxCode>
      </GLAnalysis>
    </Transaction>
    <Transaction>
      <TransType>AP</TransType>
      <Description>Supplier invoice</Description>
      <Amounts>
        <DcFlag>-1</DcFlag>
        <Amount>-1000.50</Amount>
      </Amounts>
      <GLAnalysis>
        <Account>2440</Account>
        <TaxId>1</TaxId>
      </GLAnalysis>
      <ApArInfo>
        <ApArNo>50001</ApArNo>
        <ApArType>P</ApArType>
        <InvoiceNo>INV-77</InvoiceNo>
        <DueDate>2024-04-04</DueDate>
        <PayMethod>BG</PayMethod>
        <DiscDate>2024-03-15</DiscDate>
        <agrlib:Responsible>JDOE</agrlib:Responsible>
        <FactorShort>FACT1</FactorShort>
        <PayCurrency>EUR</PayCurrency>
        <OrigReference>PO-REF-9</OrigReference>
        <OrderNo>4711</OrderNo>
        <agrlib:VoucherRef>900123</agrlib:VoucherRef>
        <Commitment>C-12</Commitment>
        <ComplaintCode>X</ComplaintCode>
        <ComplaintDate>2024-05-01</ComplaintDate>
        <CurrLicense>L1</CurrLicense>
        <agrlib:IntruleId>IR2</agrlib:IntruleId>
        <PayTemplate>PT3</PayTemplate>
      </ApArInfo>
    </Transaction>
  </Voucher>
</ABWTransaction>
"""


@pytest.fixture
def sample_xml() -> str:
    """ABWTransaction with one voucher and two transactions."""
    return SAMPLE_XML


@pytest.fixture
def source_system() -> SourceSystem:
    return SourceSystem(id=1, code="ERP", name="ERP export", folder="erp")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temp directory, with one local source system."""
    return Settings(
        paths=PathsConfig(base=tmp_path / "files", database=tmp_path / "db" / "log.db"),
        sources=[SourceSystemConfig(id=1, code="ERP", name="ERP export", folder="erp")],
    )


@pytest.fixture
def sample_request() -> TransactionBatchRequest:
    return TransactionBatchRequest(
        batch_information=BatchInformation(interface="BI", batch_id="BATCH-001"),
        transaction_information=[
            TransactionInformation(
                voucher_number="1001",
                transaction_detail_information=[
                    TransactionDetailInformation(sequence_number=1),
                    TransactionDetailInformation(sequence_number=2),
                ],
            )
        ],
    )


@pytest.fixture
def mock_file_source() -> MagicMock:
    """Mock file source port."""
    mock = MagicMock(spec=FileSourcePort)
    mock.list_files.return_value = []
    mock.download.return_value = SAMPLE_XML
    return mock


@pytest.fixture
def mock_transformer(sample_request: TransactionBatchRequest) -> MagicMock:
    """Mock transformer port."""
    mock = MagicMock(spec=TransformerPort)
    mock.transform.return_value = sample_request
    return mock


@pytest.fixture
def mock_unit4() -> MagicMock:
    """Mock Unit4 port."""
    mock = MagicMock(spec=Unit4Port)
    mock.post_batch.return_value = BatchResponse(status="Success")
    return mock


@pytest.fixture
def mock_log_store() -> MagicMock:
    """Mock log store port."""
    return MagicMock(spec=LogStorePort)
